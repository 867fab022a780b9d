"""Offline stand-in for mermaid-cli.

Parses compiled (identifier based) ``erDiagram`` and ``flowchart`` text and
emits a neutral SVG shaped like Mermaid's own output: ER cells as ``<text>``
elements, flowchart labels as HTML inside ``<foreignObject>``. Text that is
not valid identifier grammar is rejected the way Mermaid would reject it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import xml.etree.ElementTree as ET

from friendly_mermaid.errors import RenderRejectedError
from friendly_mermaid.svg.document import SVG_NS, XHTML_NS, to_svg_text

_IDENT = r"[A-Za-z0-9_]+"
_ENTITY_OPEN_RE = re.compile(rf"^({_IDENT})\s*\{{$")
_ENTITY_BARE_RE = re.compile(rf"^({_IDENT})$")
_ATTRIBUTE_RE = re.compile(rf'^({_IDENT})\s+(\S+?)(?:\s+(PK|FK|UK))?(?:\s+"([^"]*)")?$')
_RELATIONSHIP_RE = re.compile(
    rf"^({_IDENT})\s+([|}}][o|](?:--|\.\.)[o|][|{{])\s+({_IDENT})(?:\s*:\s*(.+))?$"
)
_FLOW_HEADER_RE = re.compile(r"^(flowchart|graph)\b", re.IGNORECASE)
_FLOW_IGNORED_RE = re.compile(r"^(subgraph|end|classDef|class|style|click|linkStyle|direction)\b")
_ARROW_RE = re.compile(r"\s*(--+>|--+|==+>|==+|-\.+->?|-\.+)(?:\|([^|]*)\|)?\s*")
_FLOW_NODE_RE = re.compile(
    rf'^({_IDENT})(?:\["([^"]*)"\]|\{{"([^"]*)"\}}|\("([^"]*)"\)|\(\["([^"]*)"\]\)|\[\["([^"]*)"\]\])?$'
)

_CHAR_WIDTH = 8
_ROW_HEIGHT = 24


def _reject(line_no: int, line: str, expected: str) -> RenderRejectedError:
    return RenderRejectedError(f"Parse error on line {line_no}:\n{line.strip()}\nExpecting {expected}")


def _content_lines(text: str) -> List[Tuple[int, str]]:
    lines = []
    for line_no, line in enumerate(text.split("\n"), start=1):
        trimmed = line.strip()
        if trimmed and not trimmed.startswith("%%"):
            lines.append((line_no, trimmed))
    return lines


def _unquote(label: str) -> str:
    label = label.strip()
    if len(label) >= 2 and label.startswith('"') and label.endswith('"'):
        return label[1:-1]
    return label


def _text(parent: ET.Element, x: float, y: float, body: str, css_class: str) -> ET.Element:
    el = ET.SubElement(parent, f"{{{SVG_NS}}}text", x=str(x), y=str(y), **{"class": css_class})
    el.text = body
    return el


def _html_label(parent: ET.Element, x: float, y: float, body: str, css_class: str) -> ET.Element:
    width = max(40, len(body) * _CHAR_WIDTH)
    fo = ET.SubElement(
        parent,
        f"{{{SVG_NS}}}foreignObject",
        x=str(x),
        y=str(y),
        width=str(width),
        height=str(_ROW_HEIGHT),
    )
    div = ET.SubElement(fo, f"{{{XHTML_NS}}}div")
    span = ET.SubElement(div, f"{{{XHTML_NS}}}span", **{"class": css_class})
    p = ET.SubElement(span, f"{{{XHTML_NS}}}p")
    p.text = body
    return fo


def _svg_root(width: int, height: int) -> ET.Element:
    return ET.Element(f"{{{SVG_NS}}}svg", version="1.1", width=str(width), height=str(height))


@dataclass
class _Entity:
    name: str
    attributes: List[Tuple[str, str, Optional[str], Optional[str]]] = field(default_factory=list)


def render_er_preview(text: str) -> str:
    lines = _content_lines(text)
    if not lines or not lines[0][1].lower().startswith("erdiagram"):
        raise RenderRejectedError("No diagram type detected: expected erDiagram")

    entities: Dict[str, _Entity] = {}
    relationships: List[Tuple[str, str, str, str]] = []
    current: Optional[_Entity] = None

    for line_no, line in lines[1:]:
        if current is not None:
            if line == "}":
                current = None
                continue
            attribute = _ATTRIBUTE_RE.match(line)
            if not attribute:
                raise _reject(line_no, line, "'ATTRIBUTE_WORD', 'BLOCK_STOP'")
            current.attributes.append(attribute.groups())
            continue

        entity_open = _ENTITY_OPEN_RE.match(line)
        if entity_open:
            current = entities.setdefault(entity_open.group(1), _Entity(entity_open.group(1)))
            continue
        relationship = _RELATIONSHIP_RE.match(line)
        if relationship:
            left, operator, right, label = relationship.groups()
            for name in (left, right):
                entities.setdefault(name, _Entity(name))
            relationships.append((left, operator, right, _unquote(label or "")))
            continue
        bare = _ENTITY_BARE_RE.match(line)
        if bare:
            entities.setdefault(bare.group(1), _Entity(bare.group(1)))
            continue
        raise _reject(line_no, line, "'ENTITY_NAME', 'BLOCK_START', 'CARDINALITY'")

    if current is not None:
        raise RenderRejectedError(f"Unterminated entity block: {current.name}")

    height = 40 + sum((len(e.attributes) + 2) * _ROW_HEIGHT for e in entities.values()) + len(relationships) * _ROW_HEIGHT
    svg = _svg_root(600, height)
    diagram = ET.SubElement(svg, f"{{{SVG_NS}}}g", **{"class": "er"})

    y = 20
    for entity in entities.values():
        box = ET.SubElement(diagram, f"{{{SVG_NS}}}g", id=f"entity-{entity.name}", **{"class": "er entityBox"})
        ET.SubElement(
            box,
            f"{{{SVG_NS}}}rect",
            x="10",
            y=str(y),
            width="400",
            height=str((len(entity.attributes) + 1) * _ROW_HEIGHT),
        )
        _text(box, 20, y + 16, entity.name, "er entityLabel")
        for first, second, key, comment in entity.attributes:
            y += _ROW_HEIGHT
            _text(box, 20, y + 16, first, "er attributeBoxOdd attribute-type")
            _text(box, 160, y + 16, second, "er attributeBoxOdd attribute-name")
            if key:
                _text(box, 260, y + 16, key, "er attributeBoxOdd attribute-keys")
            if comment:
                _text(box, 300, y + 16, comment, "er attributeBoxOdd attribute-comment")
        y += 2 * _ROW_HEIGHT

    for left, operator, right, label in relationships:
        rel = ET.SubElement(diagram, f"{{{SVG_NS}}}g", id=f"rel-{left}-{right}", **{"class": "er relationship"})
        ET.SubElement(rel, f"{{{SVG_NS}}}path", d=f"M 410 {y} L 500 {y}", **{"data-cardinality": operator})
        if label:
            _text(rel, 420, y - 4, label, "er relationshipLabel")
        y += _ROW_HEIGHT

    return to_svg_text(svg)


def _parse_flow_node(segment: str, line_no: int, line: str) -> Tuple[str, str]:
    match = _FLOW_NODE_RE.match(segment.strip())
    if not match:
        raise _reject(line_no, line, "'NODE_STRING', 'SQS', 'DIAMOND_START', 'PS'")
    identifier = match.group(1)
    label = next((g for g in match.groups()[1:] if g is not None), None)
    return identifier, label


def render_flowchart_preview(text: str) -> str:
    lines = _content_lines(text)
    if not lines or not _FLOW_HEADER_RE.match(lines[0][1]):
        raise RenderRejectedError("No diagram type detected: expected flowchart or graph")

    labels: Dict[str, str] = {}
    edges: List[Tuple[str, str, str]] = []

    for line_no, line in lines[1:]:
        if _FLOW_IGNORED_RE.match(line):
            continue
        segments: List[str] = []
        edge_labels: List[str] = []
        pos = 0
        for arrow in _ARROW_RE.finditer(line):
            segments.append(line[pos:arrow.start()])
            edge_labels.append(_unquote(arrow.group(2) or ""))
            pos = arrow.end()
        segments.append(line[pos:])

        nodes = []
        for segment in segments:
            identifier, label = _parse_flow_node(segment, line_no, line)
            if label is not None or identifier not in labels:
                labels[identifier] = label if label is not None else identifier
            nodes.append(identifier)
        for index, edge_label in enumerate(edge_labels):
            edges.append((nodes[index], nodes[index + 1], edge_label))

    svg = _svg_root(600, 40 + (len(labels) + len(edges)) * 2 * _ROW_HEIGHT)
    root = ET.SubElement(svg, f"{{{SVG_NS}}}g", **{"class": "root"})
    node_group = ET.SubElement(root, f"{{{SVG_NS}}}g", **{"class": "nodes"})
    edge_group = ET.SubElement(root, f"{{{SVG_NS}}}g", **{"class": "edgeLabels"})

    y = 20
    for index, (identifier, label) in enumerate(labels.items()):
        node = ET.SubElement(node_group, f"{{{SVG_NS}}}g", id=f"flowchart-{identifier}-{index}", **{"class": "node"})
        ET.SubElement(node, f"{{{SVG_NS}}}rect", x="10", y=str(y), width=str(max(60, len(label) * _CHAR_WIDTH + 20)), height=str(_ROW_HEIGHT))
        _html_label(node, 20, y, label, "nodeLabel")
        y += 2 * _ROW_HEIGHT

    for source, target, edge_label in edges:
        edge = ET.SubElement(edge_group, f"{{{SVG_NS}}}g", id=f"L-{source}-{target}", **{"class": "edgeLabel"})
        if edge_label:
            _html_label(edge, 200, y, edge_label, "edgeLabel")
        y += _ROW_HEIGHT

    return to_svg_text(svg)


def render_mermaid(input_text: str) -> str:
    """Render compiled Mermaid text to SVG without mermaid-cli."""
    lines = _content_lines(input_text or "")
    if lines and lines[0][1].lower().startswith("erdiagram"):
        return render_er_preview(input_text)
    return render_flowchart_preview(input_text or "")
