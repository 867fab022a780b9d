"""Rewrite free-text flowcharts into Mermaid node syntax.

Users write quoted labels instead of node identifiers::

    "Antrag einreichen" --> {"Unterlagen vollständig?"}
    "Unterlagen vollständig?" -->|"Ja"| ("Fertig")

Each distinct label becomes one node, so mentioning the same label on several
lines links to the same node.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from friendly_mermaid.compiler.context import CompileContext

_PASSTHROUGH_PATTERNS = (
    re.compile(r"^(flowchart|graph)\b", re.IGNORECASE),
    re.compile(r"^(subgraph|end)\b", re.IGNORECASE),
    re.compile(r"^(classDef|class|style|click|linkStyle)\b"),
)

ARROW_RE = re.compile(r"(--+>|--+|==+>|==+|-\.+->?|-\.+)((?:\|[^|]*\|)?)")
EXISTING_NODE_RE = re.compile(
    r'[a-zA-Z_]\w*(?:\["[^"]*"\]|\("[^"]*"\)|\{"[^"]*"\}|\(\["[^"]*"\]\)|\[\["[^"]*"\]\])?'
)


class Shape(str, Enum):
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"
    ROUNDED = "rounded"


_SHAPE_BRACKETS = {
    Shape.RECTANGLE: ("[", "]"),
    Shape.DIAMOND: ("{", "}"),
    Shape.ROUNDED: ("(", ")"),
}


@dataclass(frozen=True)
class Arrow:
    raw: str


@dataclass(frozen=True)
class Raw:
    raw: str


@dataclass(frozen=True)
class Node:
    shape: Shape
    label: str


FlowToken = Union[Arrow, Raw, Node]


def is_passthrough(trimmed: str) -> bool:
    if trimmed == "" or trimmed.startswith("%%"):
        return True
    return any(pattern.match(trimmed) for pattern in _PASSTHROUGH_PATTERNS)


def tokenize_flow_line(text: str, skipped: Optional[List[str]] = None) -> List[FlowToken]:
    """Scan one flowchart line into arrows, raw references and labeled nodes.

    Unrecognized characters are dropped and, when ``skipped`` is given,
    appended to it. Scanning never fails.
    """
    tokens: List[FlowToken] = []
    pos = 0
    length = len(text)
    while pos < length:
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue

        arrow = ARROW_RE.match(text, pos)
        if arrow:
            tokens.append(Arrow(arrow.group(0)))
            pos = arrow.end()
            continue

        if ch == "{":
            end = text.find("}", pos + 1)
            if end != -1:
                inner = text[pos + 1:end].strip()
                if inner.startswith('"'):
                    inner = inner[1:]
                if inner.endswith('"'):
                    inner = inner[:-1]
                tokens.append(Node(Shape.DIAMOND, inner))
                pos = end + 1
                continue

        if ch == '"':
            end = text.find('"', pos + 1)
            if end != -1:
                tokens.append(Node(Shape.RECTANGLE, text[pos + 1:end]))
                pos = end + 1
                continue

        if ch == "(" and text.startswith('"', pos + 1):
            end = text.find('")', pos + 2)
            if end != -1:
                tokens.append(Node(Shape.ROUNDED, text[pos + 2:end]))
                pos = end + 2
                continue

        existing = EXISTING_NODE_RE.match(text, pos)
        if existing:
            tokens.append(Raw(existing.group(0)))
            pos = existing.end()
            continue

        if skipped is not None:
            skipped.append(ch)
        pos += 1
    return tokens


def flow_node_id(label: str, context: CompileContext) -> str:
    cached = context.flow_nodes.get(label)
    if cached is not None:
        return cached
    identifier = context.allocate(label)
    context.flow_nodes[label] = identifier
    return identifier


def render_tokens(tokens: List[FlowToken], context: CompileContext) -> str:
    parts: List[str] = []
    previous = None
    for token in tokens:
        if isinstance(token, Arrow):
            parts.append(f" {token.raw} ")
        else:
            if previous is not None and not isinstance(previous, Arrow):
                parts.append(" ")
            if isinstance(token, Raw):
                parts.append(token.raw)
            else:
                opening, closing = _SHAPE_BRACKETS[token.shape]
                identifier = flow_node_id(token.label, context)
                parts.append(f'{identifier}{opening}"{token.label}"{closing}')
        previous = token
    return re.sub(r" {2,}", " ", "".join(parts))


def rewrite_flow_line(line: str, context: CompileContext, line_no: int = 0) -> str:
    indent = line[: len(line) - len(line.lstrip())]
    skipped: List[str] = []
    tokens = tokenize_flow_line(line.strip(), skipped)
    if skipped:
        context.report(line_no, line, f"unrecognized text dropped: {''.join(skipped)!r}")
    return indent + render_tokens(tokens, context)


def preprocess_flowchart(code: str, context: CompileContext) -> str:
    result: List[str] = []
    for line_no, line in enumerate(code.split("\n"), start=1):
        if is_passthrough(line.strip()):
            result.append(line)
        else:
            result.append(rewrite_flow_line(line, context, line_no))
    return "\n".join(result)
