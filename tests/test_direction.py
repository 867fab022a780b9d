import pytest

from friendly_mermaid.compiler.direction import apply_direction, normalize_direction


def test_er_direction_is_set_on_declaration():
    assert apply_direction("erDiagram\n  A {\n  }", "LR") == "erDiagram LR\n  A {\n  }"


def test_er_direction_replaces_existing_shorthand():
    assert apply_direction("erDiagram TB\nA {\n}", "rl") == "erDiagram RL\nA {\n}"


def test_er_auto_direction_removes_shorthand_and_statement():
    source = "erDiagram TB\ndirection RL\nA {\n}"
    assert apply_direction(source, None) == "erDiagram\nA {\n}"


def test_er_declaration_does_not_swallow_next_line():
    assert apply_direction("erDiagram\nTBL {\n}", None) == "erDiagram\nTBL {\n}"


def test_flowchart_direction_is_replaced():
    assert apply_direction('flowchart TD\n"a" --> "b"', "LR") == 'flowchart LR\n"a" --> "b"'
    assert apply_direction("graph TB\n", "BT") == "graph BT\n"


def test_flowchart_auto_direction_is_a_no_op():
    assert apply_direction("flowchart TD\n", None) == "flowchart TD\n"


def test_unknown_direction_is_rejected():
    with pytest.raises(ValueError):
        normalize_direction("diagonal")
    assert normalize_direction("") is None
