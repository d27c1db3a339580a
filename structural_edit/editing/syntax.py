"""
Syntax tree: a mutable, typed overlay on top of a tree-sitter parse tree.

Every node remembers the byte span it occupied in the buffer it was parsed
from, so the printer can re-emit untouched regions verbatim.  Children are
materialized lazily, the first time something asks for them.

Only the constructs the transformation routines touch get a typed variant;
everything else stays a plain ``Node``.  Synthesized nodes (new imports,
specifiers, attributes, literals) carry no tree-sitter node at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

# Node types that never count as statements of a program body
_TRIVIA_TYPES = {"comment", "hash_bang_line", "html_comment"}


def content_end(ts_node) -> int:
    """End byte of *ts_node* without the extras folded into its tail.

    Tree-sitter can place a trailing same-line comment inside the node it
    follows (``function f() {} // note`` gives a ``statement_block`` ending
    after the comment).  This walks down the last real child instead.
    """
    node = ts_node
    while True:
        last = next(
            (c for c in reversed(node.children)
             if not c.is_extra and c.end_byte > c.start_byte),
            None,
        )
        if last is None:
            return node.end_byte
        node = last


class Slot(NamedTuple):
    """Original position of a child: full span plus where its content ends."""
    start: int
    end: int
    content_end: int


@dataclass
class Document:
    """One parsed buffer: the encoded source plus the tree that indexes it."""
    source: bytes
    name: str = "<content>"
    tree: Any = field(default=None, repr=False)

    def text(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")


class Node:
    """A syntax node.  Untyped constructs use this class directly."""

    def __init__(self, ts_node=None, doc: Optional[Document] = None,
                 parent: Optional["Node"] = None) -> None:
        self.ts = ts_node
        self.doc = doc
        self.parent = parent
        self.type: str = ts_node.type if ts_node is not None else self.synthetic_type()
        self.start: int = ts_node.start_byte if ts_node is not None else 0
        self.end: int = ts_node.end_byte if ts_node is not None else 0
        # (start, end) override used when the node is emitted with attached
        # comments, e.g. top-level statements
        self.extent: Optional[tuple[int, int]] = None
        # dirty: something at or below this node changed
        # changed: this node's own layout must be regenerated
        self.dirty = False
        self.changed = False
        self._children: Optional[list[Node]] = None
        self._slots: list[Slot] = []

    @classmethod
    def synthetic_type(cls) -> str:
        return cls.__name__

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type} {self.start}:{self.end}>"

    # ------------------------------------------------------------------
    # Source access
    # ------------------------------------------------------------------

    @property
    def is_synthetic(self) -> bool:
        return self.ts is None

    @property
    def text(self) -> str:
        """Original text of this node (empty for synthesized nodes)."""
        if self.ts is None or self.doc is None:
            return ""
        return self.doc.text(self.start, self.end)

    @property
    def span(self) -> tuple[int, int]:
        return self.extent or (self.start, self.end)

    @property
    def content_end(self) -> int:
        """End of the node proper, before any comments folded into its tail."""
        return content_end(self.ts) if self.ts is not None else self.end

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    @property
    def children(self) -> list["Node"]:
        return self._materialize()

    def _materialize(self) -> list["Node"]:
        if self._children is None:
            self._children = []
            if self.ts is not None:
                for child in self.ts.children:
                    self._children.append(wrap(child, self.doc, self))
                    self._slots.append(
                        Slot(child.start_byte, child.end_byte, content_end(child))
                    )
        return self._children

    @property
    def slots(self) -> list[Slot]:
        """Original byte spans of the child positions, parallel to ``children``."""
        self._materialize()
        return self._slots

    def child_by_field(self, name: str) -> Optional["Node"]:
        if self.ts is None:
            return None
        target = self.ts.child_by_field_name(name)
        if target is None:
            return None
        for slot, child in zip(self.slots, self.children):
            if (slot.start, slot.end) == (target.start_byte, target.end_byte) \
                    and child.type == target.type:
                return child
        return None

    def children_of_type(self, *types: str) -> list["Node"]:
        return [c for c in self.children if c.type in types]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def touch(self, changed: bool = False) -> None:
        """Mark this node (and every ancestor) as needing a reprint."""
        if changed:
            self.changed = True
        node: Optional[Node] = self
        while node is not None and not node.dirty:
            node.dirty = True
            node = node.parent

    def replace_child_at(self, index: int, new: "Node") -> None:
        children = self.children
        children[index] = new
        new.parent = self
        self.touch()

    def replace_child(self, old: "Node", new: "Node") -> None:
        for i, child in enumerate(self.children):
            if child is old:
                self.replace_child_at(i, new)
                return
        raise ValueError(f"{old!r} is not a child of {self!r}")


# ---------------------------------------------------------------------------
# Program
# ---------------------------------------------------------------------------

class Program(Node):
    """The root: an ordered list of top-level statements.

    Leading string-literal directives (``'use client';``) and a hash-bang
    line form the prologue; they are not part of ``body``.
    """

    def __init__(self, ts_node, doc: Document, collect_directives: bool = True) -> None:
        super().__init__(ts_node, doc, None)
        self.prologue_end = 0
        self.body: list[Node] = []
        self._build_body(collect_directives)

    def _build_body(self, collect_directives: bool) -> None:
        children = self.children
        in_prologue = collect_directives
        for i, child in enumerate(children):
            if child.type in _TRIVIA_TYPES:
                if child.type == "hash_bang_line":
                    self.prologue_end = max(self.prologue_end, child.end)
                continue
            child.extent = (self._leading_start(i), self._trailing_end(i))
            if in_prologue and _is_directive(child):
                self.prologue_end = child.extent[1]
                continue
            in_prologue = False
            self.body.append(child)

    def _leading_start(self, index: int) -> int:
        """Start of the comments directly attached above ``children[index]``."""
        children = self.children
        start = children[index].start
        j = index - 1
        while j >= 0 and children[j].type == "comment":
            prev_end = children[j - 1].end if j > 0 else 0
            if j > 0 and b"\n" not in self.doc.source[prev_end:children[j].start]:
                break  # trailing comment of the previous statement
            start = children[j].start
            j -= 1
        return start

    def _trailing_end(self, index: int) -> int:
        """End of the comments sharing the last line of ``children[index]``."""
        children = self.children
        end = children[index].end
        j = index + 1
        while j < len(children) and children[j].type == "comment":
            if b"\n" in self.doc.source[end:children[j].start]:
                break
            end = children[j].end
            j += 1
        return end

    def insert_statements(self, index: int, statements: list[Node]) -> None:
        for stmt in statements:
            stmt.parent = self
        self.body[index:index] = statements
        self.touch(changed=True)


def _is_directive(node: Node) -> bool:
    if node.type != "expression_statement":
        return False
    named = [c for c in node.children if c.ts is not None and c.ts.is_named]
    return len(named) == 1 and named[0].type == "string"


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------

class ImportSpecifier(Node):
    """A named import binding, ``a`` or ``a as b``."""

    _name: str = ""

    @classmethod
    def create(cls, name: str) -> "ImportSpecifier":
        spec = cls()
        spec._name = name
        return spec

    @property
    def imported(self) -> Optional[str]:
        """Imported name, or None when it is a string (``"a-b" as c``)."""
        if self.is_synthetic:
            return self._name
        name = self.child_by_field("name")
        if name is None or name.type != "identifier":
            return None
        return name.text

    @property
    def local(self) -> str:
        if self.is_synthetic:
            return self._name
        alias = self.child_by_field("alias")
        if alias is not None:
            return alias.text
        return self.imported or ""


class ImportDeclaration(Node):
    """``import … from '<module>'`` (but not ``import x = require(…)``)."""

    module: str = ""

    def __init__(self, ts_node=None, doc: Optional[Document] = None,
                 parent: Optional[Node] = None) -> None:
        super().__init__(ts_node, doc, parent)
        self._named: Optional[list[ImportSpecifier]] = None

    @classmethod
    def create(cls, module: str, specifiers: list[ImportSpecifier]) -> "ImportDeclaration":
        decl = cls()
        decl.module = module
        decl._named = list(specifiers)
        return decl

    @property
    def source_node(self) -> Optional[Node]:
        return self.child_by_field("source") or next(
            iter(self.children_of_type("string")), None
        )

    @property
    def source_value(self) -> str:
        if self.is_synthetic:
            return self.module
        node = self.source_node
        if node is None:
            return ""
        return node.text[1:-1]

    @property
    def clause(self) -> Optional[Node]:
        return next(iter(self.children_of_type("import_clause")), None)

    @property
    def named_imports(self) -> Optional[Node]:
        clause = self.clause
        if clause is None:
            return None
        return next(iter(clause.children_of_type("named_imports")), None)

    @property
    def named(self) -> list[ImportSpecifier]:
        """The named-specifier slice, in its current order."""
        if self._named is None:
            block = self.named_imports
            self._named = (
                [c for c in block.children if isinstance(c, ImportSpecifier)]
                if block is not None else []
            )
        return self._named

    def add_named(self, spec: ImportSpecifier) -> None:
        self.named.append(spec)
        spec.parent = self
        self.touch(changed=True)

    def sort_named(self) -> None:
        self.named.sort(key=lambda s: (s.imported or s.local).lower())
        self.touch(changed=True)


# ---------------------------------------------------------------------------
# Functions and variables
# ---------------------------------------------------------------------------

class BlockStatement(Node):
    """A ``{ … }`` statement block."""


class _HasBody(Node):
    @property
    def body(self) -> Optional[Node]:
        return self.child_by_field("body")

    def replace_body(self, block: Node) -> None:
        current = self.body
        if current is None:
            raise ValueError(f"{self!r} has no body to replace")
        self.replace_child(current, block)


class FunctionDeclaration(_HasBody):
    """``function name() {}`` (plain, async or generator)."""

    @property
    def name(self) -> Optional[str]:
        node = self.child_by_field("name")
        return node.text if node is not None else None


class FunctionExpression(FunctionDeclaration):
    """A function in expression position, e.g. the value of ``export default``."""


class ArrowFunctionExpression(_HasBody):
    """``(…) => body``."""


class VariableDeclaration(Node):
    """``const`` / ``let`` / ``var`` declaration."""

    @property
    def declarators(self) -> list["VariableDeclarator"]:
        return [c for c in self.children if isinstance(c, VariableDeclarator)]


class VariableDeclarator(Node):
    @property
    def name(self) -> Optional[str]:
        node = self.child_by_field("name")
        if node is None or node.type != "identifier":
            return None
        return node.text

    @property
    def init(self) -> Optional[Node]:
        return self.child_by_field("value")


class ExportDefaultDeclaration(Node):
    """``export default …``."""

    @property
    def declaration(self) -> Optional[Node]:
        return self.child_by_field("declaration") or self.child_by_field("value")


# ---------------------------------------------------------------------------
# JSX
# ---------------------------------------------------------------------------

_JSX_ATTRIBUTE_TYPES = ("jsx_attribute", "jsx_expression")
_JSX_CLOSING_TOKENS = {"/", ">", "/>"}


class JSXOpeningElement(Node):
    """``<Tag a="1">`` or the tag part of ``<Tag a="1" />``."""

    def __init__(self, ts_node=None, doc: Optional[Document] = None,
                 parent: Optional[Node] = None) -> None:
        super().__init__(ts_node, doc, parent)
        self._attributes: Optional[list[Node]] = None

    @property
    def tag_name(self) -> Optional[str]:
        """The tag name as written, or None for a fragment (``<>``)."""
        node = self.child_by_field("name")
        return node.text if node is not None else None

    @property
    def original_attributes(self) -> list[Node]:
        return [c for c in self.children if c.type in _JSX_ATTRIBUTE_TYPES]

    @property
    def attributes(self) -> list[Node]:
        if self._attributes is None:
            self._attributes = self.original_attributes
        return self._attributes

    def replace_attributes(self, attributes: list["JSXAttribute"]) -> None:
        for attr in attributes:
            attr.parent = self
        self._attributes = list(attributes)
        self.touch(changed=True)

    def anchor_end(self) -> int:
        """End of the tag name (or type arguments) preceding the attributes."""
        end = self.start
        for child in self.children:
            if child.type in _JSX_ATTRIBUTE_TYPES or child.type in _JSX_CLOSING_TOKENS:
                break
            end = child.end
        return end


class JSXElement(Node):
    """``<Tag>…</Tag>`` or a fragment ``<>…</>``."""

    @property
    def opening_element(self) -> Optional[JSXOpeningElement]:
        node = self.child_by_field("open_tag")
        if node is None:
            node = next(iter(self.children_of_type("jsx_opening_element")), None)
        return node  # type: ignore[return-value]

    @property
    def tag_name(self) -> Optional[str]:
        opening = self.opening_element
        return opening.tag_name if opening is not None else None


class JSXSelfClosingElement(JSXOpeningElement, JSXElement):
    """``<Tag />`` is both the element and its own opening tag."""

    @property
    def opening_element(self) -> JSXOpeningElement:
        return self


class JSXAttribute(Node):
    """A JSX attribute; original ones keep their text, new ones are built."""

    attr_name: str = ""
    value: Optional[Node] = None

    @classmethod
    def create(cls, name: str, value: Optional[Node]) -> "JSXAttribute":
        attr = cls()
        attr.attr_name = name
        attr.value = value
        if value is not None:
            value.parent = attr
        return attr


# ---------------------------------------------------------------------------
# Synthesized literals
# ---------------------------------------------------------------------------

class StringLiteral(Node):
    literal: str = ""

    @classmethod
    def create(cls, value: str) -> "StringLiteral":
        node = cls()
        node.literal = value
        return node


class NumericLiteral(Node):
    literal: float = 0

    @classmethod
    def create(cls, value: float) -> "NumericLiteral":
        node = cls()
        node.literal = value
        return node


class BooleanLiteral(Node):
    literal: bool = False

    @classmethod
    def create(cls, value: bool) -> "BooleanLiteral":
        node = cls()
        node.literal = value
        return node


class JSXExpressionContainer(Node):
    expression: Optional[Node] = None

    @classmethod
    def create(cls, expression: Node) -> "JSXExpressionContainer":
        node = cls()
        node.expression = expression
        expression.parent = node
        return node


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_NODE_TYPES: dict[str, type[Node]] = {
    "import_statement": ImportDeclaration,
    "import_specifier": ImportSpecifier,
    "function_declaration": FunctionDeclaration,
    "generator_function_declaration": FunctionDeclaration,
    "function_expression": FunctionExpression,
    "function": FunctionExpression,
    "generator_function": FunctionExpression,
    "arrow_function": ArrowFunctionExpression,
    "lexical_declaration": VariableDeclaration,
    "variable_declaration": VariableDeclaration,
    "variable_declarator": VariableDeclarator,
    "export_statement": ExportDefaultDeclaration,
    "statement_block": BlockStatement,
    "jsx_element": JSXElement,
    "jsx_self_closing_element": JSXSelfClosingElement,
    "jsx_opening_element": JSXOpeningElement,
    "jsx_attribute": JSXAttribute,
}


def wrap(ts_node, doc: Optional[Document], parent: Optional[Node] = None) -> Node:
    """Wrap a tree-sitter node in the matching ``Node`` variant."""
    cls = _NODE_TYPES.get(ts_node.type, Node)
    if cls is ImportDeclaration and any(
        c.type == "import_require_clause" for c in ts_node.children
    ):
        cls = Node  # TS ``import x = require(...)`` is not an import declaration
    elif cls is ExportDefaultDeclaration and not any(
        c.type == "default" for c in ts_node.children
    ):
        cls = Node
    return cls(ts_node, doc, parent)
