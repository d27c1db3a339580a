"""
Pre-order traversal with an explicit early stop.

A visit function returns ``CONTINUE`` to keep walking or a
``StopWithMatch`` to end the walk; ``walk`` fills in where the match sits so
the caller can replace it in its parent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from .syntax import Node


class Continue:
    """Keep walking."""

    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE = Continue()


@dataclass(frozen=True)
class StopWithMatch:
    """Stop walking; *node* is the match."""
    node: Node
    parent: Optional[Node] = None
    index: int = -1


VisitResult = Union[Continue, StopWithMatch]


def walk(root: Node, visit: Callable[[Node], VisitResult]) -> Optional[StopWithMatch]:
    """Visit *root* and its descendants depth-first, in document order.

    Returns the first ``StopWithMatch`` produced by *visit*, with its
    ``parent`` and ``index`` set, or None once the whole tree was visited.
    """
    stack: list[tuple[Node, Optional[Node], int]] = [(root, None, -1)]
    while stack:
        node, parent, index = stack.pop()
        result = visit(node)
        if isinstance(result, StopWithMatch):
            return replace(result, parent=parent, index=index)
        children = node.children
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], node, i))
    return None


def first_match(root: Node, predicate: Callable[[Node], bool]) -> Optional[StopWithMatch]:
    """Walk *root* and stop at the first node satisfying *predicate*."""
    return walk(root, lambda node: StopWithMatch(node) if predicate(node) else CONTINUE)
