"""Strategy contract and the per-context collaborators strategies share.

A strategy either produces an ExtractionResult or returns None when its
content bar is not met. Content and network problems are never raised; the
chain simply moves on to the next strategy.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup

from extractor.config.models import ReadinessConfig, StrategiesConfig
from extractor.domain.models import ExtractionResult, SiteKind, SourceKind
from extractor.normalization import RuleTables, TextNormalizer
from extractor.pages.base import PageSource
from extractor.pages.dom import body_of, parse_html, visible_text
from extractor.readiness import ReadinessOutcome, StabilityDetector
from extractor.rules.tables import SiteTables


@dataclass
class StrategyContext:
    """Everything a strategy needs to work on one document context.

    The page is optional because the direct-API strategy reads no document.
    Readiness runs at most once per context: the settled HTML is cached and
    shared by every strategy in the chain.
    """

    context_id: str
    url: str
    normalizer: TextNormalizer
    rule_tables: RuleTables
    site_tables: SiteTables
    strategies_config: StrategiesConfig
    readiness: Optional[StabilityDetector] = None
    readiness_config: Optional[ReadinessConfig] = None
    page: Optional[PageSource] = None
    readiness_outcome: Optional[ReadinessOutcome] = field(default=None, init=False)
    _html: Optional[str] = field(default=None, init=False, repr=False)

    @classmethod
    def for_page(cls, page: PageSource, **collaborators) -> "StrategyContext":
        return cls(context_id=page.context_id, url=page.url, page=page, **collaborators)

    async def ready_document(self) -> BeautifulSoup:
        """
        Wait for the page to settle, then parse the settled snapshot.

        Returns:
            Parsed document (empty when the context has no page)
        """
        if self.page is None:
            return parse_html("")

        if self._html is None:
            # First read outside the detector: snapshot errors propagate from here
            latest = {"html": await self.page.snapshot()}

            async def measure() -> int:
                latest["html"] = await self.page.snapshot()
                return len(visible_text(body_of(parse_html(latest["html"]))))

            if self.readiness is not None and self.readiness_config is not None:
                self.readiness_outcome = await self.readiness.wait_until_ready(
                    measure, self.readiness_config
                )
            self._html = latest["html"]

        return parse_html(self._html)

    def normalize(self, text: str, site: Optional[SiteKind] = None) -> str:
        return self.normalizer.normalize(text, self.rule_tables.rule_set_for(site))


_WHITESPACE = re.compile(r"\s+")


def single_line(text: str) -> str:
    """Collapse a field's text to one line."""
    return _WHITESPACE.sub(" ", text or "").strip()


def page_title(soup: BeautifulSoup) -> str:
    """First h1, else the document title, else ""."""
    heading = soup.find("h1")
    if heading is not None:
        text = single_line(visible_text(heading))
        if text:
            return text
    if soup.title is not None and soup.title.string:
        return single_line(soup.title.string)
    return ""


class ExtractionStrategy(ABC):
    """One way of turning a document context into job-posting text.

    Subclasses set ``name`` and ``source_kind``.
    """

    name: str = "strategy"
    source_kind: SourceKind

    @abstractmethod
    async def extract(self, context: StrategyContext) -> Optional[ExtractionResult]:
        """
        Extract job-posting text.

        Args:
            context: Document context and shared collaborators

        Returns:
            ExtractionResult, or None when this strategy found nothing usable
        """

    def _result(self, context: StrategyContext, text: str, title: str = "") -> ExtractionResult:
        return ExtractionResult.from_text(
            text,
            source_kind=self.source_kind,
            source_url=context.url,
            title=title,
            context_id=context.context_id,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
