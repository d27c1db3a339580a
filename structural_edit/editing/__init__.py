"""Structural editing: format-preserving semantic edits of JS/TS/JSX sources."""

from .errors import (
    AstEditError, EditError, ParseError, SizeLimitError,
    UnknownActionError, ValidationError,
)
from .request import EditAction, EditRequest, ImportSpec, Payload, Selector
from .diff_report import DiffChunk, EditRange, compute_edits, diff_lines, render_preview
from .printer import PrintOptions, Printer
from .engine import EditResult, edit
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "AstEditError", "EditError", "ParseError", "SizeLimitError",
    "UnknownActionError", "ValidationError",
    "EditAction", "EditRequest", "ImportSpec", "Payload", "Selector",
    "DiffChunk", "EditRange", "compute_edits", "diff_lines", "render_preview",
    "PrintOptions", "Printer",
    "EditResult", "edit",
    "log_edit_metric", "read_edit_stats",
]
