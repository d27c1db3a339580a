"""
Edit requests: the action tag plus the selector and payload it needs.

``EditRequest.from_dict`` accepts the camelCase wire shape used by tool
callers (``functionName``, ``jsxTag``, ``insertText``…).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class EditAction(str, Enum):
    UPSERT_IMPORT = "upsertImport"
    UPDATE_FUNCTION_BODY = "updateFunctionBody"
    REPLACE_JSX_ELEMENT = "replaceJsxElement"
    REPLACE_JSX_ATTRIBUTES = "replaceJsxAttributes"
    INSERT_AFTER_LAST_IMPORT = "insertAfterLastImport"
    INSERT_AT_TOP = "insertAtTop"


@dataclass
class ImportSpec:
    module: str
    specifiers: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ImportSpec":
        return cls(
            module=data.get("module") or "",
            specifiers=[str(s) for s in data.get("specifiers") or []],
        )


@dataclass
class Selector:
    """Which element to target.

    ``exported`` is accepted for compatibility with existing callers; it
    does not take part in matching.
    """
    function_name: Optional[str] = None
    jsx_tag: Optional[str] = None
    exported: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Selector":
        return cls(
            function_name=data.get("functionName"),
            jsx_tag=data.get("jsxTag"),
            exported=data.get("exported"),
        )


@dataclass
class Payload:
    """New content for the edit; which field is used depends on the action."""
    import_: Optional[ImportSpec] = None
    function_body: Optional[str] = None
    jsx_replace_with: Optional[str] = None
    jsx_attributes: Optional[dict[str, Any]] = None
    insert_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Payload":
        import_data = data.get("import")
        attributes = data.get("jsxAttributes")
        return cls(
            import_=ImportSpec.from_dict(import_data) if isinstance(import_data, dict) else None,
            function_body=data.get("functionBody"),
            jsx_replace_with=data.get("jsxReplaceWith"),
            jsx_attributes=dict(attributes) if isinstance(attributes, dict) else None,
            insert_text=data.get("insertText"),
        )


@dataclass
class EditRequest:
    action: Union[EditAction, str]
    content: str = ""
    selector: Optional[Selector] = None
    payload: Optional[Payload] = None

    @classmethod
    def from_dict(cls, data: dict) -> "EditRequest":
        """Build a request from its camelCase dictionary form."""
        selector = data.get("selector")
        payload = data.get("payload")
        return cls(
            action=data.get("action", ""),
            content=data.get("content", ""),
            selector=Selector.from_dict(selector) if isinstance(selector, dict) else None,
            payload=Payload.from_dict(payload) if isinstance(payload, dict) else None,
        )
