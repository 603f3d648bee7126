"""
Module: exporter.assembly.html

Purpose:
    Split rich-text descriptions into paragraph-level fragments. Each
    top-level node of the markup becomes one fragment, so the planner can
    break between paragraphs but never inside one.

Key Functions:
    - split_description(): Markup -> list of DescriptionFragment
    - clean_html(): Markup -> plain text with bullets and line breaks

Rules:
    - Headings (h1-h6) become HEADING fragments
    - ul/ol become one BULLETS fragment ("• " per li)
    - Other elements and bare text become BODY fragments
    - script/style/noscript, comments and doctypes are dropped
    - Unparsable markup falls back to a single plain-text fragment

Dependencies:
    - bs4: Tolerant HTML parsing
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from dataclasses import dataclass
from typing import List

from bs4 import (
    BeautifulSoup,
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from sheet_toolkit.core.models import TextStyle

logger = logging.getLogger(__name__)

_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_LIST_TAGS = {"ul", "ol"}
_NOISE_TAGS = {"script", "style", "noscript"}
_MARKUP_ONLY_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)
_TAG_RE = re.compile(r"<[^>]*>?")
BULLET = "• "


@dataclass(frozen=True)
class DescriptionFragment:
    """One paragraph-level piece of a description."""

    text: str
    style: TextStyle = TextStyle.BODY


def _normalize_lines(text: str) -> str:
    """Trim each line and collapse blank-line runs."""
    text = text.replace("\r", "").replace("\xa0", " ")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    return re.sub(r"\n{2,}", "\n", text).strip()


def _element_text(el: Tag) -> str:
    """Text of an element with <br> and nested block boundaries as newlines."""
    for br in el.find_all("br"):
        br.replace_with("\n")
    for li in el.find_all("li"):
        li.insert_before("\n" + BULLET)
    for block in el.find_all(["p", "div", "ul", "ol"]):
        block.insert_after("\n")
    return _normalize_lines(el.get_text())


def _list_text(el: Tag) -> str:
    items = []
    for li in el.find_all("li", recursive=False) or el.find_all("li"):
        text = _element_text(li)
        if text:
            items.append(BULLET + text)
    return "\n".join(items)


def clean_html(markup: str) -> str:
    """
    Strip markup to plain text.

    Example:
        >>> clean_html("<p>a</p><ul><li>b</li></ul>")
        'a\\n• b'
    """
    if not markup:
        return ""
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception as e:  # html.parser is tolerant; this is the last resort
        logger.warning(f"Could not parse markup, stripping tags: {e}")
        return _normalize_lines(html_lib.unescape(_TAG_RE.sub("", markup)))
    for noise in soup.find_all(list(_NOISE_TAGS)):
        noise.decompose()
    return _element_text(soup)


def split_description(markup: str) -> List[DescriptionFragment]:
    """
    Split description markup into paragraph-level fragments.

    Args:
        markup: Rich-text HTML (may be plain text or malformed)

    Returns:
        Fragments in document order; empty nodes are skipped

    Example:
        >>> [f.text for f in split_description("<p>One</p><p>Two</p>")]
        ['One', 'Two']
    """
    if not markup or not markup.strip():
        return []

    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception as e:
        logger.warning(f"Unparsable description markup, treating as plain text: {e}")
        text = _normalize_lines(html_lib.unescape(_TAG_RE.sub("", markup)))
        return [DescriptionFragment(text)] if text else []

    fragments: List[DescriptionFragment] = []
    pending_inline: List[str] = []

    def flush_inline() -> None:
        text = _normalize_lines("".join(pending_inline))
        pending_inline.clear()
        if text:
            fragments.append(DescriptionFragment(text))

    for node in list(soup.children):
        if isinstance(node, _MARKUP_ONLY_STRINGS):
            continue
        if isinstance(node, NavigableString):
            # Bare text and inline runs between blocks form one paragraph
            pending_inline.append(str(node))
            continue
        if not isinstance(node, Tag):
            continue
        name = node.name
        if name in _NOISE_TAGS:
            continue
        if name == "br":
            pending_inline.append("\n")
            continue
        if name in ("span", "strong", "b", "em", "i", "u", "a", "small", "sup", "sub"):
            pending_inline.append(node.get_text())
            continue

        flush_inline()
        if name in _HEADING_TAGS:
            text = _normalize_lines(node.get_text(" "))
            style = TextStyle.HEADING
        elif name in _LIST_TAGS:
            text = _list_text(node)
            style = TextStyle.BULLETS
        else:
            text = _element_text(node)
            style = TextStyle.BODY
        if text:
            fragments.append(DescriptionFragment(text, style))

    flush_inline()
    logger.debug(f"Split description into {len(fragments)} fragments")
    return fragments
