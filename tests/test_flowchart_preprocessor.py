import pytest

from friendly_mermaid.compiler import compile_source
from friendly_mermaid.compiler.context import CompileContext
from friendly_mermaid.compiler.flowchart import (
    Arrow,
    Node,
    Raw,
    Shape,
    preprocess_flowchart,
    tokenize_flow_line,
)
from friendly_mermaid.errors import MalformedLineError


def _flow(source):
    context = CompileContext()
    return preprocess_flowchart(source, context), context


def test_tokenize_quoted_and_decision_nodes():
    assert tokenize_flow_line('"Antrag" --> {"Gültig?"}') == [
        Node(Shape.RECTANGLE, "Antrag"),
        Arrow("-->"),
        Node(Shape.DIAMOND, "Gültig?"),
    ]


def test_tokenize_arrow_keeps_pipe_label():
    assert tokenize_flow_line('A -->|"Ja"| B["x"]') == [
        Raw("A"),
        Arrow('-->|"Ja"|'),
        Raw('B["x"]'),
    ]


def test_tokenize_rounded_node_and_dotted_arrow():
    assert tokenize_flow_line('("Rund") -.-> "Eckig"') == [
        Node(Shape.ROUNDED, "Rund"),
        Arrow("-.->"),
        Node(Shape.RECTANGLE, "Eckig"),
    ]


def test_tokenize_unbraced_decision_and_thick_arrow():
    assert tokenize_flow_line("{Weiter} ==> x") == [
        Node(Shape.DIAMOND, "Weiter"),
        Arrow("==>"),
        Raw("x"),
    ]


def test_tokenize_skips_unknown_characters():
    assert tokenize_flow_line('; "a" --- ?') == [Node(Shape.RECTANGLE, "a"), Arrow("---")]


def test_tokenize_unterminated_quote_is_skipped():
    assert tokenize_flow_line('"open --> B') == [Raw("open"), Arrow("-->"), Raw("B")]


def test_rewrite_flow_line_with_decision():
    code, _ = _flow('flowchart TD\n    "Dokumente prüfen" --> {"Unterlagen vollständig?"}')
    assert code.split("\n")[1] == (
        '    Dokumente_pruefen["Dokumente prüfen"] --> '
        'Unterlagen_vollstaendig{"Unterlagen vollständig?"}'
    )


def test_edge_labels_are_kept():
    code, _ = _flow('flowchart TD\n"Unterlagen vollständig?" -->|"Ja"| ("Fachliche Prüfung")')
    assert code.split("\n")[1] == (
        'Unterlagen_vollstaendig["Unterlagen vollständig?"] -->|"Ja"| '
        'Fachliche_Pruefung("Fachliche Prüfung")'
    )


def test_same_label_on_different_lines_is_one_node():
    source = "\n".join(
        [
            "flowchart TD",
            '    "Antrag einreichen" --> "Dokumente prüfen"',
            '    "Nachforderung senden" --> "Antrag einreichen"',
        ]
    )
    code, context = _flow(source)
    lines = code.split("\n")
    assert lines[1] == '    Antrag_einreichen["Antrag einreichen"] --> Dokumente_pruefen["Dokumente prüfen"]'
    assert lines[2] == '    Nachforderung_senden["Nachforderung senden"] --> Antrag_einreichen["Antrag einreichen"]'
    assert context.flow_nodes["Antrag einreichen"] == "Antrag_einreichen"


def test_colliding_labels_get_distinct_identifiers():
    code, context = _flow('flowchart LR\n"a b" --> "a-b"')
    assert code.split("\n")[1] == 'a_b["a b"] --> a_b2["a-b"]'
    assert context.mapping.to_dict() == {"a_b": "a b", "a_b2": "a-b"}


def test_passthrough_lines_are_untouched():
    source = "\n".join(
        [
            "graph LR",
            "%% comment with \"quotes\"",
            "  subgraph Gruppe Eins",
            "  end",
            "  classDef warn fill:#f96",
            "  style A stroke-width:2px",
            '  click A "https://example.com"',
            "",
        ]
    )
    code, context = _flow(source)
    assert code == source
    assert len(context.mapping) == 0


def test_existing_identifier_syntax_survives_recompile():
    line = 'Antrag_einreichen["Antrag einreichen"] --> Dokumente_pruefen["Dokumente prüfen"]'
    code, context = _flow("flowchart TD\n" + line)
    assert code.split("\n")[1] == line
    assert len(context.mapping) == 0


def test_adjacent_nodes_stay_separated_and_spaces_collapse():
    code, _ = _flow('flowchart TD\nA    B   -->     "c"')
    assert code.split("\n")[1] == 'A B --> c["c"]'


def test_dropped_text_is_reported_as_diagnostic():
    code, context = _flow('flowchart TD\n  "open --> B')
    assert code.split("\n")[1] == "  open --> B"
    assert len(context.diagnostics) == 1
    assert context.diagnostics[0].line_no == 2
    assert "'\"'" in context.diagnostics[0].message


def test_strict_mode_raises_on_dropped_text():
    with pytest.raises(MalformedLineError) as excinfo:
        compile_source('flowchart TD\n"open --> B', strict=True)
    assert excinfo.value.line_no == 2


def test_tokenizer_collects_skipped_characters():
    skipped = []
    assert tokenize_flow_line("A --> B;", skipped) == [Raw("A"), Arrow("-->"), Raw("B")]
    assert skipped == [";"]


def test_clean_flowchart_has_no_diagnostics():
    _, context = _flow('flowchart TD\n"a" --> {"b?"} -->|"Ja"| ("c")')
    assert context.diagnostics == []
