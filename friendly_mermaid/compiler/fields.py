"""Comma splitting that respects double-quoted text."""
from __future__ import annotations

from typing import List


def split_quoted_fields(line: str) -> List[str]:
    """Split ``line`` on commas outside double quotes.

    Quote characters are kept in the fields and every field is stripped.
    An unmatched quote simply keeps the rest of the line in one field.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def strip_quotes(text: str) -> str:
    """Drop one leading and one trailing double quote, then whitespace."""
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()
