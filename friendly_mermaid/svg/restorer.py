"""Put display names back into rendered Mermaid SVG."""
from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Optional, Set
from xml.etree import ElementTree as ET

from friendly_mermaid.compiler.naming import NameMapping

logger = logging.getLogger(__name__)

_TEXT_TAGS = {"text", "tspan"}
_HTML_LABEL_TAGS = {"div", "span", "p"}


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _iter_tag(root: ET.Element, tags: Iterable[str]) -> Iterable[ET.Element]:
    wanted = set(tags)
    for el in root.iter():
        if isinstance(el.tag, str) and _strip_ns(el.tag) in wanted:
            yield el


def _build_substituter(mapping: NameMapping) -> Optional[Callable[[str], str]]:
    entries = mapping.longest_first()
    if not entries:
        return None
    lookup = dict(entries)
    # Alternation order is longest first, so at any position the longest
    # identifier wins and replaced text is never scanned again.
    pattern = re.compile("|".join(re.escape(identifier) for identifier, _ in entries))

    def substitute(text: str) -> str:
        return pattern.sub(lambda m: lookup[m.group(0)], text)

    return substitute


def _append_style(el: ET.Element, declaration: str) -> None:
    style = (el.get("style") or "").strip()
    if style and not style.endswith(";"):
        style += ";"
    el.set("style", f"{style} {declaration};".strip())


def restore_names(root: ET.Element, mapping: NameMapping, nowrap: bool = False) -> None:
    """Replace identifiers with display names throughout ``root``.

    Plain SVG text is handled on leaf ``text``/``tspan`` elements. HTML labels
    inside ``foreignObject`` are substituted in their character data only, so
    the markup around them is left intact. Must run once per rendered tree.
    """
    substitute = _build_substituter(mapping)
    if substitute is None:
        return

    html_elements: Set[int] = set()
    for fo in _iter_tag(root, ["foreignObject"]):
        for el in fo.iter():
            html_elements.add(id(el))
            if el is fo:
                continue
            if el.text:
                el.text = substitute(el.text)
            if el.tail:
                el.tail = substitute(el.tail)

    replaced = 0
    for el in _iter_tag(root, _TEXT_TAGS):
        if id(el) in html_elements or len(el) > 0 or not el.text:
            continue
        restored = substitute(el.text)
        if restored != el.text:
            el.text = restored
            replaced += 1
    logger.debug("Restored names in %d text elements", replaced)

    if nowrap:
        for fo in _iter_tag(root, ["foreignObject"]):
            _append_style(fo, "overflow: visible")
            for child in _iter_tag(fo, _HTML_LABEL_TAGS):
                _append_style(child, "white-space: nowrap")
