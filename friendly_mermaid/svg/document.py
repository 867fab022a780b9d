"""Parse and serialize SVG documents produced by the renderers."""
from __future__ import annotations

from xml.etree import ElementTree as ET

from friendly_mermaid.errors import RenderRejectedError

SVG_NS = "http://www.w3.org/2000/svg"
XHTML_NS = "http://www.w3.org/1999/xhtml"
XLINK_NS = "http://www.w3.org/1999/xlink"


def _register_namespaces() -> None:
    """Keep the default SVG namespace unprefixed on serialization."""
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)


def parse_svg(svg_text: str) -> ET.Element:
    _register_namespaces()
    try:
        return ET.fromstring(svg_text)
    except ET.ParseError as exc:
        raise RenderRejectedError(f"Renderer produced invalid SVG: {exc}") from exc


def to_svg_text(root: ET.Element) -> str:
    _register_namespaces()
    return ET.tostring(root, encoding="unicode")
