"""Tests for the early-stopping tree walk."""

from structural_edit.editing.parser import parse_program
from structural_edit.editing.syntax import JSXElement
from structural_edit.editing.visitor import CONTINUE, StopWithMatch, first_match, walk


SOURCE = "const a = <div><Foo id=\"1\" /><Foo id=\"2\" /></div>;\n"


class TestWalk:
    def test_visits_every_node_when_nothing_matches(self):
        program = parse_program("f(1);\n")
        seen = []

        def visit(node):
            seen.append(node.type)
            return CONTINUE

        assert walk(program, visit) is None
        assert seen[0] == "program"
        assert "call_expression" in seen
        assert "number" in seen

    def test_pre_order_document_order(self):
        program = parse_program("a; b;\n")
        seen = []

        def visit(node):
            if node.type == "identifier":
                seen.append(node.text)
            return CONTINUE

        walk(program, visit)
        assert seen == ["a", "b"]

    def test_stops_at_first_match(self):
        program = parse_program(SOURCE)
        seen = []

        def visit(node):
            seen.append(node)
            if isinstance(node, JSXElement) and node.tag_name == "Foo":
                return StopWithMatch(node)
            return CONTINUE

        match = walk(program, visit)
        assert match is not None
        assert seen[-1] is match.node
        assert 'id="1"' in match.node.text

    def test_match_carries_parent_and_index(self):
        program = parse_program(SOURCE)
        match = first_match(
            program, lambda n: isinstance(n, JSXElement) and n.tag_name == "Foo"
        )
        assert match.parent is not None
        assert match.parent.tag_name == "div"
        assert match.parent.children[match.index] is match.node

    def test_root_match_has_no_parent(self):
        program = parse_program("x;\n")
        match = first_match(program, lambda n: n.type == "program")
        assert match.node is program
        assert match.parent is None
        assert match.index == -1
