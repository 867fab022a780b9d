"""Refuse compiled Mermaid text that carries active content."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List

_MERMAID_BLOCK_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"%%\s*\{\s*init", re.IGNORECASE), "init"),
    (re.compile(r"<\s*script", re.IGNORECASE), "<script>"),
    (re.compile(r"<\s*iframe", re.IGNORECASE), "<iframe>"),
    (re.compile(r"<\s*img", re.IGNORECASE), "<img>"),
    (re.compile(r"javascript:\s*", re.IGNORECASE), "javascript URI"),
)


@dataclass
class DiagramValidationResult:
    sanitized_text: str
    blocked_tokens: List[str]


class DiagramValidationError(ValueError):
    """Raised when a diagram contains blocked tokens."""

    def __init__(self, message: str, result: DiagramValidationResult):
        super().__init__(message)
        self.result = result


def _scan_patterns(text: str, patterns: Iterable[tuple[re.Pattern[str], str]]) -> List[str]:
    blocked: List[str] = []
    for pattern, label in patterns:
        if pattern.search(text):
            blocked.append(label)
    return blocked


def validate_mermaid(diagram_text: str) -> DiagramValidationResult:
    """Normalize line endings and reject blocked directives."""
    sanitized = (diagram_text or "").replace("\r", "")
    blocked = _scan_patterns(sanitized, _MERMAID_BLOCK_PATTERNS)
    result = DiagramValidationResult(sanitized, blocked)
    if blocked:
        raise DiagramValidationError("Diagram contains blocked directives: " + ", ".join(blocked), result)
    return result
