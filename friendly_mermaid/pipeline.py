"""One compile pass: preprocess, render, restore names."""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from friendly_mermaid.compiler import CompileResult, compile_source
from friendly_mermaid.errors import MalformedLineError, RenderRejectedError
from friendly_mermaid.renderers.mermaid_renderer import render_mermaid_svg
from friendly_mermaid.renderers.validator import DiagramValidationError, validate_mermaid
from friendly_mermaid.svg.document import parse_svg, to_svg_text
from friendly_mermaid.svg.restorer import restore_names
from friendly_mermaid.utils.config import settings

logger = logging.getLogger(__name__)

PLACEHOLDER = "Choose an example or start typing to see a live preview."

Renderer = Callable[[str, Optional[str]], str]


@dataclass
class PreviewResult:
    compiled: Optional[CompileResult] = None
    svg_text: Optional[str] = None
    error: Optional[str] = None
    placeholder: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.svg_text is not None


def render_preview(
    source: str,
    renderer: Optional[Renderer] = None,
    *,
    strict: Optional[bool] = None,
    nowrap: Optional[bool] = None,
) -> PreviewResult:
    """Compile ``source``, render it and restore display names in the SVG.

    The mapping used for restoration is the one produced by this call's own
    compile pass, so concurrent passes cannot interfere.
    """
    source = source or ""
    if not source.strip():
        return PreviewResult(placeholder=PLACEHOLDER)

    try:
        compiled = compile_source(source, strict=strict)
    except MalformedLineError as exc:
        return PreviewResult(error=f"Compile error:\n{html.escape(str(exc), quote=False)}")
    render = renderer or render_mermaid_svg
    try:
        checked = validate_mermaid(compiled.code)
        svg_text = render(checked.sanitized_text, compiled.direction)
        root = parse_svg(svg_text)
    except RenderRejectedError as exc:
        logger.info("Renderer rejected compiled %s diagram: %s", compiled.mode.value, exc)
        return PreviewResult(compiled=compiled, error=f"Render error:\n{exc.display_message}")
    except DiagramValidationError as exc:
        logger.info("Compiled diagram refused: %s", exc)
        return PreviewResult(compiled=compiled, error=f"Render error:\n{html.escape(str(exc), quote=False)}")

    restore_names(root, compiled.mapping, nowrap=settings.nowrap_labels if nowrap is None else nowrap)
    return PreviewResult(compiled=compiled, svg_text=to_svg_text(root))
