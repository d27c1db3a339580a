"""Tests for the edit engine: guard layer, dispatch and request handling."""

from __future__ import annotations

import logging
import re

import pytest

from structural_edit.config import Config
from structural_edit.editing.engine import EditResult, dispatch, edit
from structural_edit.editing.errors import (
    AstEditError,
    SizeLimitError,
    UnknownActionError,
    ValidationError,
)
from structural_edit.editing.parser import parse_program
from structural_edit.editing.request import (
    EditAction,
    EditRequest,
    ImportSpec,
    Payload,
    Selector,
)

LIMIT = 1_048_576
MESSAGE_RE = re.compile(r"^AST edit failed: .+ \(\d+ms\)$", re.S)


def soft_miss_request(content: str) -> EditRequest:
    return EditRequest(
        action=EditAction.UPDATE_FUNCTION_BODY,
        content=content,
        selector=Selector(function_name="nope"),
        payload=Payload(function_body="return 1;"),
    )


# ---------------------------------------------------------------------------
# Guard layer
# ---------------------------------------------------------------------------

class TestSizeGuard:
    def test_one_byte_over_the_limit_fails_before_parsing(self):
        # Not valid syntax: a parse attempt would fail with a parse error
        content = "{" * (LIMIT + 1)
        with pytest.raises(AstEditError) as excinfo:
            edit(soft_miss_request(content))
        assert excinfo.value.kind == "size_limit"
        assert isinstance(excinfo.value.cause, SizeLimitError)
        assert "File too large" in str(excinfo.value)

    def test_exactly_at_the_limit_is_parsed(self):
        content = "//" + "a" * (LIMIT - 2)
        assert len(content.encode("utf-8")) == LIMIT
        result = edit(soft_miss_request(content))
        assert result.applied is False
        assert result.code == content

    def test_limit_counts_utf8_bytes(self):
        content = "//" + "é" * (LIMIT // 2)
        assert len(content) < LIMIT
        with pytest.raises(AstEditError) as excinfo:
            edit(soft_miss_request(content))
        assert excinfo.value.kind == "size_limit"

    def test_limit_comes_from_config(self):
        with pytest.raises(AstEditError) as excinfo:
            edit(soft_miss_request("function f() {}\n"), Config({"max_bytes": 8}))
        assert excinfo.value.kind == "size_limit"


class TestErrorNormalization:
    def test_parse_error(self):
        with pytest.raises(AstEditError) as excinfo:
            edit(soft_miss_request("function (\n"))
        err = excinfo.value
        assert MESSAGE_RE.match(str(err))
        assert err.kind == "parse_error"
        assert err.__cause__ is err.cause
        assert err.elapsed_ms >= 0

    def test_unknown_action_after_parse(self):
        request = EditRequest(action="renameSymbol", content="x;\n")
        with pytest.raises(AstEditError) as excinfo:
            edit(request)
        assert excinfo.value.kind == "unknown_action"
        assert str(excinfo.value).startswith("AST edit failed: Unknown action: renameSymbol (")

    def test_unknown_action_on_bad_source_reports_the_parse_error(self):
        with pytest.raises(AstEditError) as excinfo:
            edit(EditRequest(action="renameSymbol", content="const = ;"))
        assert excinfo.value.kind == "parse_error"

    def test_malformed_env_setting_is_normalized(self, monkeypatch):
        monkeypatch.setenv("STRUCTURAL_EDIT_MAX_BYTES", "lots")
        with pytest.raises(AstEditError) as excinfo:
            edit(soft_miss_request("function f() {}\n"))
        assert MESSAGE_RE.match(str(excinfo.value))
        assert excinfo.value.kind == "internal"
        assert isinstance(excinfo.value.cause, ValueError)

    def test_failure_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="structural_edit.editing.engine"):
            with pytest.raises(AstEditError):
                edit(EditRequest(action="renameSymbol", content="x;\n"))
        assert any("[AstEdit]" in r.getMessage() for r in caplog.records)


# ---------------------------------------------------------------------------
# Dispatcher validation
# ---------------------------------------------------------------------------

class TestValidation:
    @pytest.mark.parametrize("action, selector, payload", [
        ("upsertImport", None, None),
        ("upsertImport", None, Payload(import_=ImportSpec(module=""))),
        ("updateFunctionBody", None, Payload(function_body="return 1;")),
        ("updateFunctionBody", Selector(function_name="f"), None),
        ("updateFunctionBody", Selector(function_name="f"), Payload(function_body="")),
        ("replaceJsxElement", Selector(jsx_tag="A"), None),
        ("replaceJsxElement", None, Payload(jsx_replace_with="<B />")),
        ("replaceJsxAttributes", Selector(jsx_tag="A"), Payload()),
        ("replaceJsxAttributes", Selector(), Payload(jsx_attributes={"a": "1"})),
        ("insertAfterLastImport", None, Payload()),
        ("insertAtTop", None, Payload(insert_text="")),
    ])
    def test_missing_fields(self, action, selector, payload):
        program = parse_program("function f() {}\n")
        with pytest.raises(ValidationError):
            dispatch(program, EditRequest(action=action, selector=selector, payload=payload))

    def test_validation_error_through_edit(self):
        with pytest.raises(AstEditError) as excinfo:
            edit(EditRequest(action="insertAtTop", content="x;\n"))
        assert excinfo.value.kind == "validation"
        assert "insertAtTop requires payload.insertText" in str(excinfo.value)

    def test_empty_attribute_mapping_is_present(self):
        program = parse_program("const a = <A x=\"1\" />;\n")
        request = EditRequest(action="replaceJsxAttributes",
                              selector=Selector(jsx_tag="A"),
                              payload=Payload(jsx_attributes={}))
        assert dispatch(program, request) is True

    def test_unknown_action(self):
        program = parse_program("x;\n")
        with pytest.raises(UnknownActionError):
            dispatch(program, EditRequest(action="nope"))

    def test_exported_flag_does_not_affect_matching(self):
        content = "function f() {}\n"
        request = EditRequest(action=EditAction.UPDATE_FUNCTION_BODY, content=content,
                              selector=Selector(function_name="f", exported=True),
                              payload=Payload(function_body="return 1;"))
        assert edit(request).applied is True


# ---------------------------------------------------------------------------
# Results and requests
# ---------------------------------------------------------------------------

class TestEditResult:
    def test_soft_miss_is_not_an_error(self):
        content = "function real() { return 1; }\n"
        result = edit(soft_miss_request(content))
        assert isinstance(result, EditResult)
        assert result.applied is False
        assert result.code == content
        assert result.edits == []

    def test_to_dict_uses_wire_names(self):
        result = edit(EditRequest.from_dict({
            "action": "replaceJsxElement",
            "selector": {"jsxTag": "A"},
            "payload": {"jsxReplaceWith": "<B />"},
            "content": "a;\nconst x = <A />;\n",
        }))
        data = result.to_dict()
        assert set(data) == {"applied", "code", "edits", "previewDiff", "elapsedMs"}
        assert data["applied"] is True
        assert data["edits"] == [{"start": 1, "end": 1}]
        assert data["previewDiff"] == " a;\n-const x = <A />;\n+const x = <B />;"

    def test_preview_cap_comes_from_config(self):
        content = "".join(f"line{i}();\n" for i in range(10))
        result = edit(EditRequest.from_dict({
            "action": "insertAtTop",
            "payload": {"insertText": "first();"},
            "content": content,
        }), Config({"preview_max_lines": 3}))
        assert result.preview_diff.split("\n") == [
            "+first();", " line0();", " line1();", "... (diff truncated)",
        ]
        assert result.code.count("\n") == 11


class TestEditRequest:
    def test_from_dict(self):
        request = EditRequest.from_dict({
            "action": "upsertImport",
            "selector": {"functionName": "f", "jsxTag": "T", "exported": True},
            "payload": {
                "import": {"module": "m", "specifiers": ["a", "b"]},
                "functionBody": "return 1;",
                "jsxReplaceWith": "<X />",
                "jsxAttributes": {"on": True},
                "insertText": "x;",
            },
            "content": "code",
        })
        assert request.action == EditAction.UPSERT_IMPORT
        assert request.selector == Selector("f", "T", True)
        assert request.payload.import_ == ImportSpec("m", ["a", "b"])
        assert request.payload.function_body == "return 1;"
        assert request.payload.jsx_replace_with == "<X />"
        assert request.payload.jsx_attributes == {"on": True}
        assert request.payload.insert_text == "x;"
        assert request.content == "code"

    def test_missing_sections(self):
        request = EditRequest.from_dict({"action": "insertAtTop"})
        assert request.selector is None
        assert request.payload is None
        assert request.content == ""

    def test_action_enum_values(self):
        assert {a.value for a in EditAction} == {
            "upsertImport", "updateFunctionBody", "replaceJsxElement",
            "replaceJsxAttributes", "insertAfterLastImport", "insertAtTop",
        }
