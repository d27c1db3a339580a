"""
Grammar and fragment parser for JavaScript / TypeScript / JSX sources.

Uses the tree-sitter >= 0.22 API with the TSX grammar from
``tree-sitter-typescript``, which accepts TypeScript, JSX, decorators, class
fields, rest/spread, async generators, dynamic ``import()``, namespace
re-exports, nullish coalescing and optional chaining in one grammar.

Any ERROR or MISSING node fails the parse; there is no recovery.
"""

from __future__ import annotations

import logging
from typing import Optional

import tree_sitter as ts
import tree_sitter_typescript

from .errors import ParseError
from .syntax import (
    ArrowFunctionExpression,
    BlockStatement,
    Document,
    FunctionDeclaration,
    Node,
    Program,
    VariableDeclaration,
)

logger = logging.getLogger(__name__)

# Language objects are immutable and safe to share; parsers are not, so a
# fresh one is created for every parse.
_LANG_CACHE: dict[str, ts.Language] = {}

_FUNCTION_SHELL = "function temp() { %s\n}"
_ARROW_SHELL = "const temp = () => { %s\n};"
_EXPRESSION_SHELL = "const __t = (%s\n);"


def _get_ts_language() -> ts.Language:
    """Return the TSX ``tree_sitter.Language``, building it on first use."""
    lang = _LANG_CACHE.get("tsx")
    if lang is None:
        lang = ts.Language(tree_sitter_typescript.language_tsx())
        _LANG_CACHE["tsx"] = lang
    return lang


def _first_error(node) -> Optional[object]:
    """Pre-order search for the first ERROR or MISSING node below *node*."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _describe_error(root) -> tuple[str, int, int]:
    bad = _first_error(root) or root
    line, column = bad.start_point[0] + 1, bad.start_point[1]
    if bad.is_missing:
        return f"Missing {bad.type} ({line}:{column})", line, column
    return f"Unexpected token ({line}:{column})", line, column


def parse_document(text: str, name: str = "<content>") -> tuple[Document, object]:
    """Parse *text* and return its document and tree-sitter root node.

    Raises
    ------
    ParseError
        If the tree contains any error or missing node.
    """
    source = text.encode("utf-8")
    parser = ts.Parser(_get_ts_language())
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        message, line, column = _describe_error(root)
        logger.debug("[AstEdit] Parse of %s failed: %s", name, message)
        raise ParseError(message, line, column)
    return Document(source=source, name=name, tree=tree), root


def parse_program(text: str, name: str = "<content>",
                  collect_directives: bool = True) -> Program:
    """Parse a whole module into a ``Program``."""
    doc, root = parse_document(text, name)
    return Program(root, doc, collect_directives=collect_directives)


# ---------------------------------------------------------------------------
# Fragment parsing
# ---------------------------------------------------------------------------

def _detach(node: Node) -> Node:
    node.parent = None
    return node


def parse_function_body(body: str, arrow: bool = False) -> BlockStatement:
    """Parse *body* as the statement list of a function and return its block.

    The snippet is wrapped in a throwaway ``function temp`` (or an arrow
    function when *arrow* is set) so bare statements parse on their own.
    """
    if arrow:
        program = parse_program(_ARROW_SHELL % body, "<functionBody>",
                                collect_directives=False)
        stmt = program.body[0] if len(program.body) == 1 else None
        if not isinstance(stmt, VariableDeclaration) or len(stmt.declarators) != 1:
            raise ParseError("Failed to parse arrow function body")
        init = stmt.declarators[0].init
        if not isinstance(init, ArrowFunctionExpression):
            raise ParseError("Parsed arrow function has unexpected shape")
        block = init.body
    else:
        program = parse_program(_FUNCTION_SHELL % body, "<functionBody>",
                                collect_directives=False)
        stmt = program.body[0] if len(program.body) == 1 else None
        if not isinstance(stmt, FunctionDeclaration):
            raise ParseError("Failed to parse new function body")
        block = stmt.body
    if not isinstance(block, BlockStatement):
        raise ParseError("Failed to parse new function body")
    return _detach(block)  # type: ignore[return-value]


def parse_expression(text: str) -> Node:
    """Parse *text* as a single expression (outer parentheses are dropped)."""
    program = parse_program(_EXPRESSION_SHELL % text, "<expression>",
                            collect_directives=False)
    stmt = program.body[0] if len(program.body) == 1 else None
    if not isinstance(stmt, VariableDeclaration) or len(stmt.declarators) != 1:
        raise ParseError("Failed to parse JSX replacement expression")
    expr = stmt.declarators[0].init
    while expr is not None and expr.type == "parenthesized_expression":
        inner = [c for c in expr.children if c.ts is not None and c.ts.is_named]
        if len(inner) != 1:
            break
        expr = inner[0]
    if expr is None:
        raise ParseError("Failed to resolve parsed expression")
    return _detach(expr)


def parse_statements(text: str) -> list[Node]:
    """Parse *text* as a list of top-level statements.

    Each statement keeps the comments attached to it.  String directives are
    returned as ordinary statements.
    """
    program = parse_program(text, "<insertText>", collect_directives=False)
    return [_detach(stmt) for stmt in program.body]
