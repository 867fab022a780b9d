"""Display-name sanitizing and per-pass identifier allocation."""
from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional, Set, Tuple

FALLBACK_ID = "unnamed"
# ER entity and attribute names must start with a letter or underscore.
DIGIT_PREFIX = "n"

# Characters with an established ASCII digraph. Anything not listed here and
# outside [A-Za-z0-9] becomes an underscore.
_TRANSLITERATIONS = {
    "ä": "ae",
    "Ä": "Ae",
    "ö": "oe",
    "Ö": "Oe",
    "ü": "ue",
    "Ü": "Ue",
    "ß": "ss",
    "æ": "ae",
    "Æ": "Ae",
    "ø": "oe",
    "Ø": "Oe",
    "å": "aa",
    "Å": "Aa",
    "œ": "oe",
    "Œ": "Oe",
}
_TRANSLATION_TABLE = str.maketrans(_TRANSLITERATIONS)

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")
IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")


def sanitize_name(name: str) -> str:
    """Turn a display name into a Mermaid-safe ASCII token.

    Never fails: purely symbolic input yields ``"unnamed"``.
    """
    token = (name or "").translate(_TRANSLATION_TABLE)
    token = _NON_ALNUM_RE.sub("_", token)
    token = _UNDERSCORE_RUN_RE.sub("_", token).strip("_")
    if token[:1].isdigit():
        token = DIGIT_PREFIX + token
    return token or FALLBACK_ID


class NameMapping:
    """Insertion-ordered identifier -> display name association."""

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def assign(self, identifier: str, display_name: str) -> None:
        existing = self._entries.get(identifier)
        if existing is not None and existing != display_name:
            raise ValueError(
                f"Identifier {identifier!r} already maps to {existing!r}, not {display_name!r}"
            )
        self._entries[identifier] = display_name

    def get(self, identifier: str) -> Optional[str]:
        return self._entries.get(identifier)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def longest_first(self) -> List[Tuple[str, str]]:
        # sorted() is stable, so equal lengths keep insertion order
        return sorted(self._entries.items(), key=lambda item: len(item[0]), reverse=True)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"NameMapping({self._entries!r})"


class IdAllocator:
    """Issues collision-free identifiers for one compile pass."""

    def __init__(self, mapping: Optional[NameMapping] = None) -> None:
        self.mapping = mapping if mapping is not None else NameMapping()
        self.used: Set[str] = set(self.mapping)

    def _is_free_for(self, identifier: str, display_name: str) -> bool:
        return identifier not in self.used or self.mapping.get(identifier) == display_name

    def allocate(self, display_name: str, min_length: Optional[int] = None) -> str:
        base = sanitize_name(display_name)
        if min_length and len(base) < min_length:
            base += "_" * (min_length - len(base))
        identifier = base
        suffix = 2
        while not self._is_free_for(identifier, display_name):
            identifier = f"{base}{suffix}"
            suffix += 1
        self.used.add(identifier)
        self.mapping.assign(identifier, display_name)
        return identifier
