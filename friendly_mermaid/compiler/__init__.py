"""Compile free-text diagram sources into Mermaid identifier syntax."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from friendly_mermaid.compiler.context import CompileContext, Diagnostic
from friendly_mermaid.compiler.er import preprocess_er
from friendly_mermaid.compiler.flowchart import preprocess_flowchart
from friendly_mermaid.compiler.naming import NameMapping
from friendly_mermaid.utils.config import settings

logger = logging.getLogger(__name__)

_ER_MARKER_RE = re.compile(r"\berDiagram\b", re.IGNORECASE)


class DiagramMode(str, Enum):
    ER = "er"
    FLOWCHART = "flowchart"


@dataclass
class CompileResult:
    mode: DiagramMode
    code: str
    mapping: NameMapping
    direction: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)


def detect_mode(source: str) -> DiagramMode:
    if _ER_MARKER_RE.search(source or ""):
        return DiagramMode.ER
    return DiagramMode.FLOWCHART


def new_context(*, strict: Optional[bool] = None, attribute_padding: Optional[int] = None) -> CompileContext:
    return CompileContext(
        attribute_padding=settings.attribute_padding if attribute_padding is None else attribute_padding,
        strict=settings.strict_mode if strict is None else strict,
    )


def compile_source(
    source: str,
    *,
    strict: Optional[bool] = None,
    attribute_padding: Optional[int] = None,
) -> CompileResult:
    """Run one compile pass over ``source`` with a fresh context."""
    context = new_context(strict=strict, attribute_padding=attribute_padding)
    mode = detect_mode(source)
    direction = None
    if mode is DiagramMode.ER:
        er_result = preprocess_er(source, context)
        code, direction = er_result.code, er_result.direction
    else:
        code = preprocess_flowchart(source, context)
    logger.debug("Compiled %s source: %d names, %d diagnostics", mode.value, len(context.mapping), len(context.diagnostics))
    return CompileResult(
        mode=mode,
        code=code,
        mapping=context.mapping,
        direction=direction,
        diagnostics=list(context.diagnostics),
    )


__all__ = [
    "CompileContext",
    "CompileResult",
    "DiagramMode",
    "compile_source",
    "detect_mode",
    "new_context",
]
