"""Tests for the format-preserving printer."""

from __future__ import annotations

import math

import pytest

from structural_edit.config import Config
from structural_edit.editing.engine import edit
from structural_edit.editing.parser import parse_expression, parse_function_body, parse_program
from structural_edit.editing.printer import Printer, PrintOptions, _format_number
from structural_edit.editing.request import EditRequest
from structural_edit.editing.syntax import ImportDeclaration, ImportSpecifier
from structural_edit.editing.transforms import build_attribute


MESSY = (
    "import   {x}from\"x\"  ;\n"
    "\n\n"
    "const  a=  {b :1,\n      c:2 }   // keep\n"
    "function f( ) {return   a }\n"
)


class TestVerbatim:
    def test_untouched_program_is_byte_identical(self):
        program = parse_program(MESSY)
        assert Printer().print(program) == MESSY

    def test_edit_elsewhere_keeps_messy_formatting(self):
        result = edit(EditRequest.from_dict({
            "action": "updateFunctionBody",
            "selector": {"functionName": "f"},
            "payload": {"functionBody": "return a.b;"},
            "content": MESSY,
        }))
        assert result.code == (
            "import   {x}from\"x\"  ;\n"
            "\n\n"
            "const  a=  {b :1,\n      c:2 }   // keep\n"
            "function f( ) {\n  return a.b;\n}\n"
        )

    def test_non_ascii_source_survives(self):
        source = "const s = 'héllo ✓';\nfunction f() {}\n"
        result = edit(EditRequest.from_dict({
            "action": "updateFunctionBody",
            "selector": {"functionName": "f"},
            "payload": {"functionBody": "return s;"},
            "content": source,
        }))
        assert result.code == "const s = 'héllo ✓';\nfunction f() {\n  return s;\n}\n"

    def test_crlf_lines_are_kept(self):
        source = "import { b } from 'x';\r\nrun();\r\n"
        result = edit(EditRequest.from_dict({
            "action": "upsertImport",
            "payload": {"import": {"module": "x", "specifiers": ["a"]}},
            "content": source,
        }))
        assert result.code == "import { a, b } from 'x';\r\nrun();\r\n"


class TestOptions:
    def test_double_quotes_for_new_imports(self):
        result = edit(EditRequest.from_dict({
            "action": "upsertImport",
            "payload": {"import": {"module": "lib", "specifiers": ["a"]}},
            "content": "run();\n",
        }), Config({"quote_style": "double"}))
        assert result.code == 'import { a } from "lib";\nrun();\n'

    def test_indent_width_applies_to_new_bodies(self):
        result = edit(EditRequest.from_dict({
            "action": "updateFunctionBody",
            "selector": {"functionName": "f"},
            "payload": {"functionBody": "return 1;"},
            "content": "function f() {}\n",
        }), Config({"indent_width": 4}))
        assert result.code == "function f() {\n    return 1;\n}\n"

    def test_unknown_quote_style_is_rejected(self):
        with pytest.raises(ValueError):
            PrintOptions(quote_style="backtick")


class TestSynthesized:
    def render(self, node, options: PrintOptions | None = None) -> str:
        return Printer(options).render(node)

    def test_new_import(self):
        decl = ImportDeclaration.create("m", [ImportSpecifier.create("a"), ImportSpecifier.create("b")])
        assert self.render(decl) == "import { a, b } from 'm';"

    def test_module_quotes_are_escaped(self):
        decl = ImportDeclaration.create("it's", [])
        assert self.render(decl) == "import 'it\\'s';"

    def test_string_attribute_switches_quotes(self):
        assert self.render(build_attribute("title", "it's")) == 'title="it\'s"'
        assert self.render(build_attribute("title", "say \"hi\"")) == "title='say \"hi\"'"

    def test_string_attribute_with_both_quotes_uses_expression(self):
        attr = build_attribute("t", "it's \"x\"")
        assert self.render(attr) == "t={'it\\'s \"x\"'}"

    def test_double_quoted_attribute(self):
        attr = build_attribute("label", "Save")
        assert self.render(attr, PrintOptions(quote_style="double")) == 'label="Save"'

    def test_numeric_attributes(self):
        assert self.render(build_attribute("n", 2.0)) == "n={2}"
        assert self.render(build_attribute("n", -0.5)) == "n={-0.5}"


class TestFormatNumber:
    @pytest.mark.parametrize("value, text", [
        (3, "3"),
        (3.0, "3"),
        (0.25, "0.25"),
        (1e-7, "1e-7"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
        (math.nan, "NaN"),
    ])
    def test_javascript_spelling(self, value, text):
        assert _format_number(value) == text


class TestReindent:
    def test_block_from_fragment_is_reindented_under_line(self):
        block = parse_function_body("if (x) {\n  y();\n}\nreturn 1;")
        printer = Printer()
        assert printer.render(block, "  ") == (
            "{\n    if (x) {\n      y();\n    }\n    return 1;\n  }"
        )

    def test_multiline_string_rows_are_left_alone(self):
        block = parse_function_body("const s = `x\n      y`;\n    go(s);")
        assert Printer().render(block, "  ") == (
            "{\n    const s = `x\n      y`;\n    go(s);\n  }"
        )

    def test_jsx_continuation_skips_template_rows(self):
        element = parse_expression("<p>\n  {`a\n b`}\n</p>")
        assert Printer().render(element, "    ") == "<p>\n      {`a\n b`}\n    </p>"

    def test_empty_body(self):
        block = parse_function_body("")
        assert Printer().render(block) == "{}"
