"""
Printer: turns a (possibly mutated) syntax tree back into source text.

Untouched nodes are emitted byte-for-byte from the buffer they were parsed
from.  A node whose children were swapped is re-emitted from its original
text with only the swapped slots regenerated.  The fixed style in
``PrintOptions`` applies to synthesized nodes and to snippets injected from
fragment parses, never to the rest of the file.
"""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass
from typing import Optional

from .syntax import (
    BlockStatement,
    BooleanLiteral,
    Document,
    ImportDeclaration,
    ImportSpecifier,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXOpeningElement,
    Node,
    NumericLiteral,
    Program,
    StringLiteral,
)

_INDENT_RE = re.compile(rb"[ \t]*")
_MARGIN_RE = re.compile(r"[ \t]*")
_QUOTES = {"single": "'", "double": '"'}
_STRING_TYPES = {"string", "template_string"}


@dataclass(frozen=True)
class PrintOptions:
    """Style applied to newly introduced code."""
    indent_width: int = 2
    quote_style: str = "single"  # "single" | "double"

    def __post_init__(self) -> None:
        if self.quote_style not in _QUOTES:
            raise ValueError(f"Unsupported quote style: {self.quote_style!r}")
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")


def _decode(chunk: bytes) -> str:
    return chunk.decode("utf-8")


def _line_indent(source: bytes, pos: int) -> str:
    """Leading whitespace of the line containing byte *pos*."""
    line_start = source.rfind(b"\n", 0, pos) + 1
    match = _INDENT_RE.match(source, line_start, pos)
    return _decode(match.group(0)) if match else ""


def _format_number(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        exp = int(exponent)
        text = f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return text


def _string_rows(node: Node) -> set[int]:
    """Rows, relative to *node*, that continue a multi-line string literal.

    Their leading whitespace is part of the string value, so reindenting
    must leave them alone.
    """
    base = node.ts.start_point[0]
    rows: set[int] = set()
    stack = [node.ts]
    while stack:
        current = stack.pop()
        if current.type in _STRING_TYPES:
            first, last = current.start_point[0], current.end_point[0]
            rows.update(range(first + 1 - base, last + 1 - base))
            continue
        stack.extend(current.children)
    return rows


def _strip_margin(lines: list[str], keep: set[int]) -> list[str]:
    """``textwrap.dedent`` over *lines*, skipping the indices in *keep*."""
    margins = [
        _MARGIN_RE.match(line).group(0)
        for i, line in enumerate(lines) if i not in keep and line.strip()
    ]
    width = len(os.path.commonprefix(margins)) if margins else 0
    return [
        line if i in keep else (line[width:] if line.strip() else "")
        for i, line in enumerate(lines)
    ]


class Printer:
    """Serialize one program.  Create a new printer per edit."""

    def __init__(self, options: Optional[PrintOptions] = None) -> None:
        self.options = options or PrintOptions()
        self._doc: Optional[Document] = None

    def print(self, program: Program) -> str:
        self._doc = program.doc
        if not program.dirty:
            return _decode(program.doc.source)
        return self._print_program(program)

    def render(self, node: Node, indent: str = "") -> str:
        """Text for *node*; *indent* is the indentation of the line it sits on."""
        if node.is_synthetic:
            return self._print_synthetic(node)
        if node.doc is not self._doc:
            return self._print_foreign(node, indent)
        if isinstance(node, Program):
            return self._print_program(node)
        if not node.dirty:
            return node.text
        if node.changed:
            if isinstance(node, ImportDeclaration):
                return self._reprint_import(node)
            if isinstance(node, JSXOpeningElement):
                return self._reprint_opening_element(node)
        return self._splice_children(node)

    # ------------------------------------------------------------------
    # Original nodes
    # ------------------------------------------------------------------

    def _print_program(self, program: Program) -> str:
        source = program.doc.source
        out = [_decode(source[:program.prologue_end])]
        cursor = program.prologue_end
        emitted = program.prologue_end > 0
        inserted: list[Node] = []

        def flush() -> None:
            if not inserted:
                return
            block = self._print_inserted(inserted)
            out.append("\n" + block if emitted else block + "\n")
            inserted.clear()

        for stmt in program.body:
            if stmt.doc is program.doc and not stmt.is_synthetic:
                flush()
                start, end = stmt.span
                out.append(_decode(source[cursor:start]))
                out.append(self._print_statement(stmt))
                cursor = end
                emitted = True
            else:
                inserted.append(stmt)
        flush()
        out.append(_decode(source[cursor:]))
        return "".join(out)

    def _print_inserted(self, statements: list[Node]) -> str:
        """Consecutive inserted statements, one per line.

        Blank lines between statements of the same snippet are kept.
        """
        pieces = [self._print_statement(statements[0])]
        for prev, stmt in zip(statements, statements[1:]):
            separator = "\n"
            if not stmt.is_synthetic and stmt.doc is prev.doc and stmt.extent and prev.extent:
                gap = stmt.doc.text(prev.extent[1], stmt.extent[0])
                if "\n" in gap and not gap.strip():
                    separator = "\n" * gap.count("\n")
            pieces.append(separator + self._print_statement(stmt))
        return "".join(pieces)

    def _print_statement(self, stmt: Node) -> str:
        """A top-level statement together with its attached comments."""
        text = self.render(stmt)
        if stmt.is_synthetic or stmt.extent is None:
            return text
        start, end = stmt.extent
        doc = stmt.doc
        return doc.text(start, stmt.start) + text + doc.text(stmt.end, end)

    def _splice_children(self, node: Node) -> str:
        source = node.doc.source
        pieces: list[str] = []
        cursor = node.start
        for child, slot in zip(node.children, node.slots):
            original = (
                child.doc is node.doc and not child.is_synthetic
                and (child.start, child.end) == (slot.start, slot.end)
            )
            if original and not child.dirty:
                continue
            pieces.append(_decode(source[cursor:slot.start]))
            pieces.append(self.render(child, _line_indent(source, slot.start)))
            # a replaced child leaves the comments folded into its tail behind
            cursor = slot.end if original else slot.content_end
        pieces.append(_decode(source[cursor:node.end]))
        return "".join(pieces)

    def _reprint_import(self, decl: ImportDeclaration) -> str:
        source = decl.doc.source
        specs = [self.render(spec) for spec in decl.named]
        block = decl.named_imports
        clause = decl.clause
        if block is not None:
            start, end = block.start, block.content_end
            text = self._format_named_block(block, specs)
        elif clause is not None:
            start = end = clause.content_end
            text = ", " + self._inline_named(specs)
        else:
            module = decl.source_node
            start = end = module.start if module is not None else decl.end
            text = self._inline_named(specs) + " from "
        return _decode(source[decl.start:start]) + text + _decode(source[end:decl.end])

    def _format_named_block(self, block: Node, specs: list[str]) -> str:
        original = block.doc.text(block.start, block.content_end)
        if "\n" not in original:
            inner = original[1:-1]
            pad = " " if not inner.strip() or inner[0].isspace() else ""
            return "{" + pad + ", ".join(specs) + pad + "}"

        source = block.doc.source
        originals = [c for c in block.children if isinstance(c, ImportSpecifier)]
        closing = original[original.rfind("\n") + 1:-1]
        closing_indent = closing if not closing.strip() else ""
        if originals:
            item_indent = _line_indent(source, originals[0].start)
        else:
            item_indent = closing_indent + " " * self.options.indent_width
        punctuation = [c.type for c in block.children if c.type in (",", "}")]
        trailing_comma = punctuation[-2:] == [",", "}"]
        items = ",\n".join(item_indent + spec for spec in specs)
        return "{\n" + items + ("," if trailing_comma else "") + "\n" + closing_indent + "}"

    def _reprint_opening_element(self, element: JSXOpeningElement) -> str:
        source = element.doc.source
        originals = element.original_attributes
        anchor = element.anchor_end()
        if originals:
            gap = _decode(source[anchor:originals[0].start])
            tail_start = originals[-1].content_end
        else:
            gap = " "
            tail_start = anchor
        separator = gap if "\n" in gap else " "
        attributes = [self.render(attr) for attr in element.attributes]
        middle = gap + separator.join(attributes) if attributes else ""
        return (
            _decode(source[element.start:anchor])
            + middle
            + _decode(source[tail_start:element.end])
        )

    # ------------------------------------------------------------------
    # Injected fragments
    # ------------------------------------------------------------------

    def _print_foreign(self, node: Node, indent: str) -> str:
        if isinstance(node, BlockStatement):
            return self._reindent_block(node, indent)
        if isinstance(node, JSXElement):
            return self._reindent_continuation(node, indent)
        return node.text

    def _reindent_block(self, block: Node, indent: str) -> str:
        raw = block.text[1:-1].split("\n")
        verbatim = _string_rows(block)
        rest = _strip_margin(raw[1:], {row - 1 for row in verbatim})
        lines = [(raw[0].strip(), False)] + [
            (line, True) if row in verbatim else (line.rstrip(), False)
            for row, line in enumerate(rest, start=1)
        ]
        while lines and lines[0] == ("", False):
            lines.pop(0)
        while lines and lines[-1] == ("", False):
            lines.pop()
        if not lines:
            return "{}"
        unit = " " * self.options.indent_width
        body = "\n".join(
            line if keep else (indent + unit + line if line else "")
            for line, keep in lines
        )
        return "{\n" + body + "\n" + indent + "}"

    @staticmethod
    def _reindent_continuation(element: Node, indent: str) -> str:
        lines = element.text.split("\n")
        if len(lines) == 1:
            return lines[0]
        verbatim = {row - 1 for row in _string_rows(element)}
        out = [lines[0]]
        for row, line in enumerate(_strip_margin(lines[1:], verbatim)):
            if row in verbatim:
                out.append(line)
            else:
                out.append(indent + line if line.strip() else "")
        return "\n".join(out)

    # ------------------------------------------------------------------
    # Synthesized nodes
    # ------------------------------------------------------------------

    def _print_synthetic(self, node: Node) -> str:
        if isinstance(node, ImportDeclaration):
            specs = [self.render(spec) for spec in node.named]
            module = self._quote(node.module)
            if not specs:
                return f"import {module};"
            return f"import {self._inline_named(specs)} from {module};"
        if isinstance(node, ImportSpecifier):
            return node.local
        if isinstance(node, JSXAttribute):
            if node.value is None:
                return node.attr_name
            if isinstance(node.value, StringLiteral):
                return f"{node.attr_name}={self._quote_jsx(node.value.literal)}"
            return f"{node.attr_name}={self.render(node.value)}"
        if isinstance(node, JSXExpressionContainer):
            return "{" + self.render(node.expression) + "}"
        if isinstance(node, StringLiteral):
            return self._quote(node.literal)
        if isinstance(node, NumericLiteral):
            return _format_number(node.literal)
        if isinstance(node, BooleanLiteral):
            return "true" if node.literal else "false"
        raise TypeError(f"Cannot print synthesized node {node.type}")

    @staticmethod
    def _inline_named(specs: list[str]) -> str:
        return "{ " + ", ".join(specs) + " }"

    def _quote(self, value: str) -> str:
        quote = _QUOTES[self.options.quote_style]
        escaped = (
            value.replace("\\", "\\\\")
            .replace(quote, "\\" + quote)
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return quote + escaped + quote

    def _quote_jsx(self, value: str) -> str:
        """JSX attribute strings have no escapes; switch quotes if needed."""
        quote = _QUOTES[self.options.quote_style]
        if quote not in value:
            return quote + value + quote
        other = "'" if quote == '"' else '"'
        if other not in value:
            return other + value + other
        return "{" + self._quote(value) + "}"
