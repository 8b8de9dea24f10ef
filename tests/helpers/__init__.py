"""Test helper utilities for job text extractor tests."""

from .adapters import FakeAdapter, make_report
from .pages import FailingPage, ScriptedPage, load_fixture_html, page_html
from .strategy_context import make_strategy_context
from .transport import RecordingTransport

__all__ = [
    "FakeAdapter",
    "FailingPage",
    "RecordingTransport",
    "ScriptedPage",
    "load_fixture_html",
    "make_report",
    "make_strategy_context",
    "page_html",
]
