"""
Edit errors: the hard-failure kinds raised while applying a structural edit.

Soft misses (no matching target) are not errors; they come back as an
``EditResult`` with ``applied=False``.
"""

from __future__ import annotations

from typing import Optional


class EditError(Exception):
    """Base class for every hard failure inside the edit engine."""

    kind = "edit_error"


class SizeLimitError(EditError):
    """Raised when the source exceeds the byte ceiling, before any parsing."""

    kind = "size_limit"


class ParseError(EditError):
    """Raised when the source or an injected fragment is not valid syntax."""

    kind = "parse_error"

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ValidationError(EditError):
    """Raised when a request lacks required fields or carries a bad payload."""

    kind = "validation"


class UnknownActionError(EditError):
    """Raised when the requested action is not one of the supported tags."""

    kind = "unknown_action"


class AstEditError(Exception):
    """Normalized failure raised at the outer call boundary.

    The message always has the shape
    ``"AST edit failed: <reason> (<elapsed>ms)"``.
    """

    def __init__(self, reason: str, elapsed_ms: int,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(f"AST edit failed: {reason} ({elapsed_ms}ms)")
        self.reason = reason
        self.elapsed_ms = elapsed_ms
        self.cause = cause

    @property
    def kind(self) -> str:
        """The kind of the underlying error (``"internal"`` if unexpected)."""
        if isinstance(self.cause, EditError):
            return self.cause.kind
        return "internal"
