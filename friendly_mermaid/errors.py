"""Exception types raised around the compile pipeline."""
from __future__ import annotations

import html


class MalformedLineError(ValueError):
    """Raised in strict mode when a source line cannot be translated."""

    def __init__(self, line_no: int, line: str, message: str):
        super().__init__(f"Line {line_no}: {message}: {line.strip()!r}")
        self.line_no = line_no
        self.line = line


class RenderRejectedError(RuntimeError):
    """Raised when the rendering engine refuses the compiled text."""

    @property
    def display_message(self) -> str:
        return html.escape(str(self), quote=False)
