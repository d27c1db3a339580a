"""
structural_edit: structural code edits for JavaScript / TypeScript / JSX.

Public API for library usage::

    from structural_edit import EditRequest, edit

    result = edit(EditRequest.from_dict({
        "action": "upsertImport",
        "payload": {"import": {"module": "react", "specifiers": ["useState"]}},
        "content": source,
    }))
"""

from .editing import EditRequest, EditResult, edit
from .tool import apply_edit_to_file

__all__ = ["EditRequest", "EditResult", "edit", "apply_edit_to_file"]
