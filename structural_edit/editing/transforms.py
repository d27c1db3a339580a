"""
Transformation routines, one per edit action.

Each routine mutates the ``Program`` it is given and returns ``True`` when it
changed something, ``False`` for a soft miss.  Hard failures (bad fragments)
raise ``EditError`` subclasses before the tree is touched.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import ValidationError
from .parser import parse_expression, parse_function_body, parse_statements
from .syntax import (
    ArrowFunctionExpression,
    BooleanLiteral,
    ExportDefaultDeclaration,
    FunctionDeclaration,
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
    VariableDeclaration,
)
from .visitor import first_match

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------

def upsert_import(program: Program, module: str, specifiers: list[str]) -> bool:
    """Make sure *module* is imported with every name in *specifiers*.

    Merges into the first top-level import of *module* when there is one
    (sorting its named specifiers if anything was added), otherwise adds a
    new import after the leading run of imports.
    """
    requested = list(dict.fromkeys(specifiers))
    existing = next(
        (stmt for stmt in program.body
         if isinstance(stmt, ImportDeclaration) and stmt.source_value == module),
        None,
    )

    if existing is not None:
        present = {spec.imported for spec in existing.named if spec.imported is not None}
        added = []
        for name in requested:
            if name not in present:
                existing.add_named(ImportSpecifier.create(name))
                present.add(name)
                added.append(name)
        if added:
            existing.sort_named()
        logger.debug("[AstEdit] Import of %r: added %s", module, added or "nothing")
        return bool(added)

    decl = ImportDeclaration.create(module, [ImportSpecifier.create(n) for n in requested])
    index = 0
    for i, stmt in enumerate(program.body):
        if not isinstance(stmt, ImportDeclaration):
            break
        index = i + 1
    program.insert_statements(index, [decl])
    logger.debug("[AstEdit] New import of %r at statement %d", module, index)
    return True


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------

def _function_target(stmt: Node, name: str) -> Optional[Node]:
    """The function node in *stmt* named *name*, if *stmt* declares one."""
    if isinstance(stmt, FunctionDeclaration):
        return stmt if stmt.name == name else None
    if isinstance(stmt, VariableDeclaration):
        for declarator in stmt.declarators:
            if declarator.name == name and isinstance(declarator.init, ArrowFunctionExpression):
                return declarator.init
        return None
    if isinstance(stmt, ExportDefaultDeclaration):
        decl = stmt.declaration
        if isinstance(decl, FunctionDeclaration) and decl.name == name:
            return decl
    return None


def update_function_body(program: Program, function_name: str, function_body: str) -> bool:
    """Replace the body of the first top-level function called *function_name*.

    Function declarations, arrow functions bound by ``const``/``let``/``var``
    and ``export default function`` are considered, in document order.
    """
    for index, stmt in enumerate(program.body):
        target = _function_target(stmt, function_name)
        if target is None:
            continue
        arrow = isinstance(target, ArrowFunctionExpression)
        block = parse_function_body(function_body, arrow=arrow)
        target.replace_body(block)  # type: ignore[attr-defined]
        logger.debug("[AstEdit] Replaced body of %s (statement %d, %s)",
                     function_name, index, target.type)
        return True
    logger.debug("[AstEdit] No function named %s", function_name)
    return False


# ---------------------------------------------------------------------------
# JSX
# ---------------------------------------------------------------------------

def replace_jsx_element(program: Program, jsx_tag: str, replacement_text: str) -> bool:
    """Replace the first ``<jsx_tag>`` element (pre-order) with new JSX."""
    replacement = parse_expression(replacement_text)
    if not isinstance(replacement, JSXElement):
        raise ValidationError("Replacement JSX must evaluate to a JSX element or fragment")

    match = first_match(
        program, lambda node: isinstance(node, JSXElement) and node.tag_name == jsx_tag
    )
    if match is None or match.parent is None:
        logger.debug("[AstEdit] No <%s> element found", jsx_tag)
        return False
    match.parent.replace_child_at(match.index, replacement)
    logger.debug("[AstEdit] Replaced <%s> at byte %d", jsx_tag, match.node.start)
    return True


def _stringify(value: Any) -> str:
    """String form of a non-primitive attribute value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else _stringify(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def build_attribute(name: str, value: Any) -> JSXAttribute:
    """Build a JSX attribute for a plain Python value.

    ``str`` gives ``name='v'``, ``True`` gives a bare ``name``, ``False``
    gives ``name={false}``, numbers give ``name={n}``.  Anything else is
    stringified.
    """
    if isinstance(value, str):
        return JSXAttribute.create(name, StringLiteral.create(value))
    if isinstance(value, bool):
        if value:
            return JSXAttribute.create(name, None)
        return JSXAttribute.create(name, JSXExpressionContainer.create(BooleanLiteral.create(False)))
    if isinstance(value, (int, float)):
        return JSXAttribute.create(name, JSXExpressionContainer.create(NumericLiteral.create(value)))
    return JSXAttribute.create(name, StringLiteral.create(_stringify(value)))


def replace_jsx_attributes(program: Program, jsx_tag: str, attributes: dict[str, Any]) -> bool:
    """Swap the whole attribute list of the first ``<jsx_tag>`` opening tag."""
    match = first_match(
        program, lambda node: isinstance(node, JSXOpeningElement) and node.tag_name == jsx_tag
    )
    if match is None:
        logger.debug("[AstEdit] No <%s> opening tag found", jsx_tag)
        return False
    element: JSXOpeningElement = match.node  # type: ignore[assignment]
    element.replace_attributes([build_attribute(k, v) for k, v in attributes.items()])
    logger.debug("[AstEdit] Rewrote %d attribute(s) on <%s>", len(attributes), jsx_tag)
    return True


# ---------------------------------------------------------------------------
# Statement insertion
# ---------------------------------------------------------------------------

def insert_after_last_import(program: Program, insert_text: str) -> bool:
    """Insert statements after the last top-level import, wherever it is."""
    statements = parse_statements(insert_text)
    index = 0
    for i, stmt in enumerate(program.body):
        if isinstance(stmt, ImportDeclaration):
            index = i + 1
    program.insert_statements(index, statements)
    logger.debug("[AstEdit] Inserted %d statement(s) at %d", len(statements), index)
    return True


def insert_at_top(program: Program, insert_text: str) -> bool:
    """Insert statements before every other statement, imports included.

    Only the directive prologue (``'use client';``, a hash-bang) stays above.
    """
    statements = parse_statements(insert_text)
    program.insert_statements(0, statements)
    logger.debug("[AstEdit] Inserted %d statement(s) at top", len(statements))
    return True
