"""
File tool: read a file, run one structural edit on it and write it back.

The result dict mirrors what agent tool callers expect: ``ok``/``applied``
flags, the edit ranges and preview, plus the path, timing and byte delta.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import Config
from .editing.engine import edit
from .editing.errors import AstEditError
from .editing.metrics import log_edit_metric
from .editing.request import EditRequest

logger = logging.getLogger(__name__)


def _record(config: Config, action: Any, **fields) -> None:
    if not config.METRICS_ENABLED:
        return
    log_edit_metric({"action": str(action), **fields}, metrics_dir=config.METRICS_DIR)


def apply_edit_to_file(path: str, request_fields: dict, dry_run: bool = False,
                       config: Optional[Config] = None) -> dict:
    """Apply one edit to the file at *path*.

    Parameters
    ----------
    path:
        File to edit, read and written as UTF-8.
    request_fields:
        camelCase request (``action``, ``selector``, ``payload``); any
        ``content`` key is ignored in favour of the file contents.  A truthy
        ``dryRun`` key works like *dry_run*.
    dry_run:
        Compute the result without writing the file.
    config:
        Settings; loaded from ``.structural_edit.yaml`` / env when omitted.

    Returns
    -------
    dict
        ``{ok, applied, edits, previewDiff, path, elapsedMs, bytesChanged}``
        or ``{ok: False, error, path}``.
    """
    config = config or Config.load()
    dry_run = dry_run or bool(request_fields.get("dryRun"))
    action = request_fields.get("action", "")

    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("[AstTool] Cannot read %s: %s", path, exc)
        return {"ok": False, "error": f"Failed to read {path}: {exc}", "path": path}

    request = EditRequest.from_dict({**request_fields, "content": content})
    try:
        result = edit(request, config)
    except AstEditError as exc:
        _record(config, action, path=path, applied=False,
                elapsedMs=exc.elapsed_ms, error=exc.kind)
        return {"ok": False, "error": str(exc), "path": path}

    if result.applied and not dry_run:
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(result.code)
        except OSError as exc:
            logger.warning("[AstTool] Cannot write %s: %s", path, exc)
            return {"ok": False, "error": f"Failed to write {path}: {exc}", "path": path}
        logger.info("[AstTool] %s: %s applied (%d range(s))", path, action, len(result.edits))
    elif not result.applied:
        logger.info("[AstTool] %s: %s found no target", path, action)

    _record(config, action, path=path, applied=result.applied,
            elapsedMs=result.elapsed_ms, edits=len(result.edits), dryRun=dry_run)

    return {
        "ok": True,
        "applied": result.applied,
        "edits": [e.to_dict() for e in result.edits],
        "previewDiff": result.preview_diff,
        "path": path,
        "elapsedMs": result.elapsed_ms,
        "bytesChanged": abs(len(result.code) - len(content)) if result.applied else 0,
    }
