"""Field-by-field scraping for sites with recognisable markup (Wellfound, LinkedIn)."""

import re
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from extractor.domain.models import ExtractionResult, SiteKind, SourceKind
from extractor.logging import get_logger
from extractor.pages.dom import body_of, remove_noise, select_all, select_first, visible_text
from extractor.rules.tables import StructuredTable

from .base import ExtractionStrategy, StrategyContext, single_line

logger = get_logger(__name__, component="strategy")

MAX_TITLE_LENGTH = 150
MAX_LOCATION_LENGTH = 200

# Currency symbols, common ISO codes, or an equity percentage ("0.1% – 0.5%", "0.5% equity")
COMPENSATION_MARKER = re.compile(
    r"[$€£¥₹₩₪]|\b(?:USD|EUR|GBP|CAD|AUD|NZD|CHF|INR|JPY|SGD|SEK|NOK|DKK|PLN|BRL|MXN)\b"
    r"|\d\s?%\s*(?:[-–—]|to\b|equity\b)",
    re.IGNORECASE,
)


def is_valid_title(text: str) -> bool:
    return 1 <= len(text) <= MAX_TITLE_LENGTH


def is_valid_compensation(text: str) -> bool:
    return bool(text) and COMPENSATION_MARKER.search(text) is not None


def is_valid_location(text: str) -> bool:
    return 1 <= len(text) <= MAX_LOCATION_LENGTH


class StructuredDomStrategy(ExtractionStrategy):
    """Reads title, compensation, location and description through selector tables.

    Optional fields are left out of the report when no candidate passes its
    filter. The description is always present: candidates are read from a
    noise-stripped copy, and when none is long enough the main content region
    is used instead.
    """

    name = "structured_dom"
    source_kind = SourceKind.STRUCTURED_DOM

    def __init__(self, kind: SiteKind, table: StructuredTable) -> None:
        self.kind = kind
        self.table = table

    def __repr__(self) -> str:
        return f"StructuredDomStrategy(kind={self.kind.value!r})"

    async def extract(self, context: StrategyContext) -> Optional[ExtractionResult]:
        soup = await context.ready_document()
        config = context.strategies_config

        title = self._field(soup, self.table.title, is_valid_title)
        compensation = self._field(soup, self.table.compensation, is_valid_compensation)
        location = self._field(soup, self.table.location, is_valid_location)

        noise = list(context.site_tables.noise_selectors) + list(self.table.noise)
        description = self._description(soup, noise, config.description_min_length)
        used_main_region = description is None
        if used_main_region:
            description = visible_text(remove_noise(self._main_region(soup, context), noise))

        description = context.normalize(description, self.kind)
        if len(description) < config.min_content_length:
            logger.info(
                "Structured extraction found too little description text",
                extra={
                    "event": "strategy.structured.insufficient",
                    "site": self.kind.value,
                    "content_length": len(description),
                    "minimum": config.min_content_length,
                },
            )
            return None

        sections: List[str] = []
        if title:
            sections.append(f"JOB TITLE: {title}")
        if compensation:
            sections.append(f"COMPENSATION: {compensation}")
        if location:
            sections.append(f"LOCATION: {location}")
        sections.append(f"DESCRIPTION:\n{description}")

        logger.debug(
            "Structured extraction succeeded",
            extra={
                "event": "strategy.structured.succeeded",
                "site": self.kind.value,
                "has_title": bool(title),
                "has_compensation": bool(compensation),
                "has_location": bool(location),
                "used_main_region": used_main_region,
            },
        )
        return self._result(context, "\n\n".join(sections), title=title or "")

    @staticmethod
    def _field(soup: BeautifulSoup, selectors: List[str], is_valid: Callable[[str], bool]) -> Optional[str]:
        for element in select_all(soup, selectors):
            text = single_line(visible_text(element))
            if is_valid(text):
                return text
        return None

    def _description(self, soup: BeautifulSoup, noise: List[str], min_length: int) -> Optional[str]:
        """Text of the first description candidate long enough once noise is removed."""
        for candidate in select_all(soup, self.table.description):
            text = visible_text(remove_noise(candidate, noise))
            if len(text) >= min_length:
                return text
        return None

    @staticmethod
    def _main_region(soup: BeautifulSoup, context: StrategyContext) -> Tag:
        return select_first(soup, context.site_tables.main_content_selectors) or body_of(soup)
