"""
Edit engine: size guard, parse, dispatch, print, diff.

``edit()`` is the single entry point.  Every hard failure leaves it as an
``AstEditError`` carrying the elapsed time; soft misses come back as a
result with ``applied=False``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import Config
from .diff_report import EditRange, compute_edits, diff_lines, render_preview
from .errors import AstEditError, SizeLimitError, UnknownActionError, ValidationError
from .parser import parse_program
from .printer import PrintOptions, Printer
from .request import EditAction, EditRequest, Payload, Selector
from .syntax import Program
from . import transforms

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of one edit call."""
    applied: bool
    code: str
    edits: list[EditRange] = field(default_factory=list)
    preview_diff: str = ""
    elapsed_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "code": self.code,
            "edits": [e.to_dict() for e in self.edits],
            "previewDiff": self.preview_diff,
            "elapsedMs": self.elapsed_ms,
        }


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _upsert_import(program: Program, selector: Selector, payload: Payload) -> bool:
    spec = payload.import_
    if spec is None or not spec.module:
        raise ValidationError("upsertImport requires payload.import with module and specifiers")
    return transforms.upsert_import(program, spec.module, spec.specifiers)


def _update_function_body(program: Program, selector: Selector, payload: Payload) -> bool:
    if not selector.function_name or not payload.function_body:
        raise ValidationError(
            "updateFunctionBody requires selector.functionName and payload.functionBody"
        )
    return transforms.update_function_body(
        program, selector.function_name, payload.function_body
    )


def _replace_jsx_element(program: Program, selector: Selector, payload: Payload) -> bool:
    if not selector.jsx_tag or not payload.jsx_replace_with:
        raise ValidationError(
            "replaceJsxElement requires selector.jsxTag and payload.jsxReplaceWith"
        )
    return transforms.replace_jsx_element(program, selector.jsx_tag, payload.jsx_replace_with)


def _replace_jsx_attributes(program: Program, selector: Selector, payload: Payload) -> bool:
    if not selector.jsx_tag or payload.jsx_attributes is None:
        raise ValidationError(
            "replaceJsxAttributes requires selector.jsxTag and payload.jsxAttributes"
        )
    return transforms.replace_jsx_attributes(program, selector.jsx_tag, payload.jsx_attributes)


def _insert_after_last_import(program: Program, selector: Selector, payload: Payload) -> bool:
    if not payload.insert_text:
        raise ValidationError("insertAfterLastImport requires payload.insertText")
    return transforms.insert_after_last_import(program, payload.insert_text)


def _insert_at_top(program: Program, selector: Selector, payload: Payload) -> bool:
    if not payload.insert_text:
        raise ValidationError("insertAtTop requires payload.insertText")
    return transforms.insert_at_top(program, payload.insert_text)


_ROUTES: dict[EditAction, Callable[[Program, Selector, Payload], bool]] = {
    EditAction.UPSERT_IMPORT: _upsert_import,
    EditAction.UPDATE_FUNCTION_BODY: _update_function_body,
    EditAction.REPLACE_JSX_ELEMENT: _replace_jsx_element,
    EditAction.REPLACE_JSX_ATTRIBUTES: _replace_jsx_attributes,
    EditAction.INSERT_AFTER_LAST_IMPORT: _insert_after_last_import,
    EditAction.INSERT_AT_TOP: _insert_at_top,
}


def dispatch(program: Program, request: EditRequest) -> bool:
    """Validate *request* for its action and run the matching routine."""
    try:
        action = EditAction(request.action)
    except ValueError:
        raise UnknownActionError(f"Unknown action: {request.action}") from None
    logger.debug("[AstEdit] Dispatching %s", action.value)
    route = _ROUTES[action]
    return route(program, request.selector or Selector(), request.payload or Payload())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _elapsed_ms(started: float) -> int:
    return round((time.perf_counter() - started) * 1000)


def _check_size(content: str, max_bytes: int) -> None:
    size = len(content.encode("utf-8"))
    if size > max_bytes:
        raise SizeLimitError(
            f"File too large ({size} bytes > {max_bytes}). "
            "AST editing is limited to smaller files."
        )


def edit(request: EditRequest, config: Optional[Config] = None) -> EditResult:
    """Apply one structural edit to ``request.content``.

    Parameters
    ----------
    request:
        Action, selector, payload and the full source text.
    config:
        Size limit, preview cap and printer style.  Defaults to ``Config()``.

    Returns
    -------
    EditResult
        ``applied`` is False when the target was not found.

    Raises
    ------
    AstEditError
        On any hard failure, with the original error as ``cause``.
    """
    started = time.perf_counter()
    try:
        config = config or Config()
        _check_size(request.content, config.MAX_BYTES)
        program = parse_program(request.content)
        applied = dispatch(program, request)
        options = PrintOptions(indent_width=config.INDENT_WIDTH,
                               quote_style=config.QUOTE_STYLE)
        code = Printer(options).print(program) if applied else request.content
        chunks = diff_lines(request.content, code)
        edits = compute_edits(chunks)
        preview = render_preview(chunks, config.PREVIEW_MAX_LINES)
    except Exception as exc:
        elapsed = _elapsed_ms(started)
        logger.warning("[AstEdit] %s failed after %dms: %s",
                       getattr(request.action, "value", request.action), elapsed, exc)
        raise AstEditError(str(exc), elapsed, cause=exc) from exc

    elapsed = _elapsed_ms(started)
    logger.debug("[AstEdit] %s applied=%s edits=%d (%dms)",
                 getattr(request.action, "value", request.action),
                 applied, len(edits), elapsed)
    return EditResult(
        applied=applied,
        code=code,
        edits=edits,
        preview_diff=preview,
        elapsed_ms=elapsed,
    )
