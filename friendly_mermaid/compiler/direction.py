"""Set the layout direction of a diagram source in place."""
from __future__ import annotations

import re
from typing import Optional

from friendly_mermaid.compiler.er import DIRECTIONS

_DIRECTION_GROUP = "|".join(DIRECTIONS)
_ER_MARKER_RE = re.compile(r"\berDiagram\b", re.IGNORECASE)
_DIRECTION_LINE_RE = re.compile(rf"^[ \t]*direction[ \t]+({_DIRECTION_GROUP})[ \t]*\n?", re.IGNORECASE | re.MULTILINE)
_ER_DECLARATION_RE = re.compile(rf"^(\s*erDiagram)\b([ \t]+({_DIRECTION_GROUP})\b)?", re.IGNORECASE | re.MULTILINE)
_FLOW_DECLARATION_RE = re.compile(
    rf"^(\s*(?:flowchart|graph))[ \t]+({_DIRECTION_GROUP})", re.IGNORECASE | re.MULTILINE
)


def normalize_direction(direction: Optional[str]) -> Optional[str]:
    if not direction:
        return None
    token = direction.strip().upper()
    if token not in DIRECTIONS:
        raise ValueError("Unknown direction: %s" % direction)
    return token


def apply_direction(source: str, direction: Optional[str]) -> str:
    """Return ``source`` with its layout direction set to ``direction``.

    ``None`` means automatic: ER sources lose their shorthand direction,
    flowcharts are left alone.
    """
    direction = normalize_direction(direction)

    if _ER_MARKER_RE.search(source):
        updated = _DIRECTION_LINE_RE.sub("", source, count=1)
        if direction:
            return _ER_DECLARATION_RE.sub(lambda m: f"{m.group(1)} {direction}", updated, count=1)
        return _ER_DECLARATION_RE.sub(lambda m: m.group(1), updated, count=1)

    if direction:
        return _FLOW_DECLARATION_RE.sub(lambda m: f"{m.group(1)} {direction}", source, count=1)
    return source
