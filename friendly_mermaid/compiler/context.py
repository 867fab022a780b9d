"""Per-pass compile state."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from friendly_mermaid.compiler.naming import IdAllocator, NameMapping
from friendly_mermaid.errors import MalformedLineError

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTE_PADDING = 2


@dataclass
class Diagnostic:
    line_no: int
    line: str
    message: str


@dataclass
class CompileContext:
    """Everything one compile pass owns, from preprocessing to restoration.

    A context must not be reused for a second pass: its mapping is consumed by
    the restorer for the SVG produced from this pass only.
    """

    attribute_padding: int = DEFAULT_ATTRIBUTE_PADDING
    strict: bool = False
    allocator: IdAllocator = field(default_factory=IdAllocator)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    # label -> identifier cache for flowchart nodes
    flow_nodes: Dict[str, str] = field(default_factory=dict)

    @property
    def mapping(self) -> NameMapping:
        return self.allocator.mapping

    def allocate(self, display_name: str, min_length: Optional[int] = None) -> str:
        return self.allocator.allocate(display_name, min_length)

    def report(self, line_no: int, line: str, message: str) -> None:
        if self.strict:
            raise MalformedLineError(line_no, line, message)
        logger.warning("Line %s not fully translated: %s", line_no, message)
        self.diagnostics.append(Diagnostic(line_no, line, message))
