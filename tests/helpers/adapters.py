"""Scripted context adapters for coordinator tests."""

import asyncio
from typing import Optional

from extractor.domain.models import (
    ExtractionCommand,
    ExtractionReport,
    ExtractionResult,
    SourceKind,
)


def make_report(
    context_id: str,
    length: int,
    source_kind: SourceKind = SourceKind.GENERIC_SCRAPE,
    char: str = "x",
) -> ExtractionReport:
    """Successful report carrying ``length`` characters of text."""
    result = ExtractionResult.from_text(
        char * length,
        source_kind=source_kind,
        source_url=f"https://example.com/{context_id}",
        title=f"Title from {context_id}",
        context_id=context_id,
    )
    return ExtractionReport.from_result(result)


class FakeAdapter:
    """
    Stand-in for ExecutionContextAdapter.

    Waits ``delay`` seconds, then answers with ``report`` (or raises
    ``error``). Records whether it was cancelled before answering.
    """

    def __init__(
        self,
        context_id: str,
        report: Optional[ExtractionReport] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ) -> None:
        self.context_id = context_id
        self.report = report or ExtractionReport.failure(context_id, "", "no content")
        self.delay = delay
        self.error = error
        self.commands = []
        self.cancelled = False
        self.completed = False

    async def handle(self, command: ExtractionCommand) -> ExtractionReport:
        self.commands.append(command)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        self.completed = True
        return self.report

    @classmethod
    def with_length(cls, context_id: str, length: int, delay: float = 0.0, **kwargs) -> "FakeAdapter":
        return cls(context_id, report=make_report(context_id, length, **kwargs), delay=delay)
