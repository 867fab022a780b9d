"""Rewrite free-text ER diagrams into Mermaid ``erDiagram`` syntax.

Attribute lines are written name first and comma separated::

    Gebäude ID, int, PK
    Gebäude Typ, string, , "Büro, Wohnung, Lager"

Entity names in blocks and relationship lines may contain spaces and any
other characters; they are replaced with identifiers from the pass context.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from friendly_mermaid.compiler.context import CompileContext
from friendly_mermaid.compiler.fields import split_quoted_fields, strip_quotes

logger = logging.getLogger(__name__)

DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")
_DIRECTION_GROUP = "|".join(DIRECTIONS)

ER_DECLARATION_RE = re.compile(rf"^erDiagram(?:\s+({_DIRECTION_GROUP}))?$", re.IGNORECASE)
DIRECTION_RE = re.compile(rf"^direction\s+({_DIRECTION_GROUP})$", re.IGNORECASE)
ENTITY_OPEN_RE = re.compile(r"^(.+?)\s*\{$")
CARDINALITY_RE = re.compile(r"([|}][o|])(--|\.\.)([o|][|{])")
KEY_TAG_RE = re.compile(r"^(PK|FK|UK)$", re.IGNORECASE)
_PLAIN_LABEL_RE = re.compile(r"^[A-Za-z0-9_ ]*$")
_INDENT_RE = re.compile(r"^(\s*)")


@dataclass
class AttributeRecord:
    display_name: str
    type: str
    key: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class RelationshipRecord:
    left: str
    operator: str
    right: str
    label: str = ""


@dataclass
class ErResult:
    code: str
    direction: Optional[str]


def _indent(line: str) -> str:
    return _INDENT_RE.match(line).group(1)


def _is_comment_or_blank(trimmed: str) -> bool:
    return trimmed == "" or trimmed.startswith("%%")


def parse_attribute(text: str) -> Optional[AttributeRecord]:
    """Parse ``Name, type[, KEY][, "comment"]``; None when malformed."""
    parts = split_quoted_fields(text.strip())
    if len(parts) < 2:
        return None

    key = None
    if len(parts) >= 3 and KEY_TAG_RE.match(parts[2]):
        key = parts[2].upper()

    # An empty or key third column leaves the comment to the fourth onwards.
    if key or (len(parts) >= 3 and parts[2] == ""):
        comment_parts = parts[3:]
    else:
        comment_parts = parts[2:]
    comment = strip_quotes(", ".join(comment_parts).strip()) or None
    return AttributeRecord(parts[0], parts[1], key, comment)


def parse_relationship(text: str) -> Optional[RelationshipRecord]:
    trimmed = text.strip()
    match = CARDINALITY_RE.search(trimmed)
    if not match:
        return None
    left = trimmed[: match.start()].strip()
    rest = trimmed[match.end():].strip()
    target, sep, label = rest.partition(":")
    return RelationshipRecord(
        left=strip_quotes(left),
        operator=match.group(0),
        right=strip_quotes(target.strip()),
        label=label.strip() if sep else "",
    )


def _quote_label(label: str) -> str:
    if label and not label.startswith('"') and not _PLAIN_LABEL_RE.match(label):
        return f'"{label}"'
    return label


def rewrite_attribute(line: str, line_no: int, context: CompileContext) -> str:
    record = parse_attribute(line)
    if record is None:
        context.report(line_no, line, "attribute needs at least a name and a type")
        return line

    min_length = len(record.display_name) + context.attribute_padding
    identifier = context.allocate(record.display_name, min_length)

    # Identifier goes in Mermaid's first (type) column, which is the one the
    # reader sees first once the display name is restored.
    out = f"{_indent(line)}{identifier} {record.type}"
    if record.key:
        out += f" {record.key}"
    if record.comment:
        out += f' "{record.comment}"'
    return out


def rewrite_relationship(line: str, context: CompileContext) -> str:
    record = parse_relationship(line)
    if record is None:
        return line
    left_id = context.allocate(record.left)
    right_id = context.allocate(record.right)
    out = f"{_indent(line)}{left_id} {record.operator} {right_id}"
    label = _quote_label(record.label)
    if label:
        out += f" : {label}"
    return out


def preprocess_er(code: str, context: CompileContext) -> ErResult:
    """Rewrite ER source and report the layout direction it requests."""
    result: List[str] = []
    in_entity = False
    declared_direction: Optional[str] = None
    statement_direction: Optional[str] = None

    for line_no, line in enumerate(code.split("\n"), start=1):
        trimmed = line.strip()

        if _is_comment_or_blank(trimmed):
            result.append(line)
            continue

        declaration = ER_DECLARATION_RE.match(trimmed)
        if declaration:
            if declaration.group(1):
                declared_direction = declaration.group(1).upper()
            result.append("erDiagram")
            continue

        direction = DIRECTION_RE.match(trimmed)
        if direction:
            statement_direction = direction.group(1).upper()
            continue

        if trimmed == "}":
            in_entity = False
            result.append(line)
            continue

        if in_entity:
            result.append(rewrite_attribute(line, line_no, context))
            continue

        entity_open = ENTITY_OPEN_RE.match(trimmed)
        if entity_open and not CARDINALITY_RE.search(trimmed):
            identifier = context.allocate(strip_quotes(entity_open.group(1)))
            result.append(f"{_indent(line)}{identifier} {{")
            in_entity = True
            continue

        if CARDINALITY_RE.search(trimmed):
            result.append(rewrite_relationship(line, context))
            continue

        result.append(line)

    if in_entity:
        logger.debug("ER source ends inside an entity block")
    return ErResult(code="\n".join(result), direction=declared_direction or statement_direction)
