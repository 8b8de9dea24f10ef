"""HTML helpers shared by page sources and scraping strategies.

visible_text() approximates a browser's rendered text: hidden subtrees
(script, style, template, elements marked hidden) are skipped, block-level
elements start new lines, and each line is whitespace-collapsed.
"""

import copy
import html as html_lib
import re
from typing import Iterable, List, Optional
from urllib.parse import urljoin

import soupsieve
from bs4 import BeautifulSoup, Tag
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)

HIDDEN_TAGS = frozenset({
    "script", "style", "noscript", "template", "head", "title", "meta",
    "link", "svg", "canvas", "iframe", "frame", "object",
})

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "dd", "details",
    "dialog", "div", "dl", "dt", "fieldset", "figcaption", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "html", "li", "main", "nav", "ol", "p", "pre", "section", "summary",
    "table", "tr", "td", "th", "ul", "caption", "tbody", "thead", "tfoot",
})

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction, CData)
_DISPLAY_NONE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v\u00a0\u200b]+")


def parse_html(markup: str) -> BeautifulSoup:
    """Parse a document or fragment with the stdlib-backed parser."""
    return BeautifulSoup(markup or "", "html.parser")


def _is_hidden(tag: Tag) -> bool:
    if tag.name in HIDDEN_TAGS:
        return True
    if tag.has_attr("hidden"):
        return True
    style = tag.get("style")
    return bool(style and _DISPLAY_NONE.search(style))


def _collect_text(node: Tag, parts: List[str]) -> None:
    for child in node.children:
        if isinstance(child, Tag):
            if _is_hidden(child):
                continue
            if child.name == "br":
                parts.append("\n")
                continue
            block = child.name in BLOCK_TAGS
            if block:
                parts.append("\n")
            _collect_text(child, parts)
            if block:
                parts.append("\n")
        elif isinstance(child, NavigableString) and not isinstance(child, _NON_TEXT_STRINGS):
            parts.append(str(child))


def visible_text(node: Optional[Tag]) -> str:
    """
    Rendered text of a node, one block per line, blank lines dropped.

    Args:
        node: Tag or BeautifulSoup document (None yields "")

    Returns:
        Visible text with lines whitespace-collapsed and stripped
    """
    if node is None:
        return ""

    parts: List[str] = []
    if isinstance(node, Tag) and not isinstance(node, BeautifulSoup) and _is_hidden(node):
        return ""
    _collect_text(node, parts)

    lines = []
    for line in "".join(parts).split("\n"):
        line = _HORIZONTAL_SPACE.sub(" ", line).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)


def html_fragment_to_text(fragment: str) -> str:
    """Plain text of an HTML fragment, including entity-encoded fragments.

    Job-board APIs commonly deliver descriptions as escaped HTML
    (``&lt;p&gt;...``), so entities are decoded before parsing.
    """
    if not fragment:
        return ""
    return visible_text(parse_html(html_lib.unescape(fragment)))


def remove_noise(node: Tag, selectors: Iterable[str]) -> Tag:
    """
    Deep-copy a node and strip noise subtrees from the copy.

    The original tree is left untouched so later strategies (and later
    readiness samples) still see the full page.

    Args:
        node: Subtree to clean
        selectors: CSS selectors of subtrees to remove

    Returns:
        Cleaned copy of the node
    """
    clone = copy.copy(node)
    for selector in selectors:
        for element in clone.select(selector):
            if not element.decomposed:
                element.decompose()
    return clone


def select_first(root: Tag, selectors: Iterable[str]) -> Optional[Tag]:
    """First element matched by the first selector that matches anything."""
    for selector in selectors:
        element = root.select_one(selector)
        if element is not None:
            return element
    return None


def select_all(root: Tag, selectors: Iterable[str]) -> List[Tag]:
    """All matches for each selector, in selector order, without duplicates."""
    seen = set()
    matches = []
    for selector in selectors:
        for element in root.select(selector):
            if id(element) not in seen:
                seen.add(id(element))
                matches.append(element)
    return matches


def body_of(soup: BeautifulSoup) -> Tag:
    """The document body, or the whole document for fragments."""
    return soup.body or soup


def validate_selectors(selectors: Iterable[str]) -> List[str]:
    """
    Compile selectors, returning error messages for the invalid ones.

    Args:
        selectors: CSS selectors to check

    Returns:
        List of "selector: error" messages (empty when all are valid)
    """
    errors = []
    for selector in selectors:
        try:
            soupsieve.compile(selector)
        except soupsieve.SelectorSyntaxError as e:
            errors.append(f"{selector!r}: {e}")
    return errors


def discover_frame_urls(markup: str, base_url: str) -> List[str]:
    """
    Absolute URLs of the iframes/frames declared in a document.

    Args:
        markup: HTML of the parent document
        base_url: URL the document was loaded from

    Returns:
        Frame URLs in document order, without duplicates or non-http sources
    """
    soup = parse_html(markup)
    urls: List[str] = []
    for frame in soup.select("iframe[src], frame[src]"):
        src = (frame.get("src") or "").strip()
        if not src:
            continue
        absolute = urljoin(base_url, src)
        if absolute.startswith(("http://", "https://")) and absolute not in urls:
            urls.append(absolute)
    return urls
