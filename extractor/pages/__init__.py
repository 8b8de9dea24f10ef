"""Document contexts and HTML helpers."""

from .base import TOP_CONTEXT_ID, PageSource
from .dom import discover_frame_urls, html_fragment_to_text, parse_html, visible_text
from .http import HttpPage
from .static import FilePage, StaticPage

__all__ = [
    "PageSource",
    "TOP_CONTEXT_ID",
    "StaticPage",
    "FilePage",
    "HttpPage",
    "discover_frame_urls",
    "html_fragment_to_text",
    "parse_html",
    "visible_text",
]
