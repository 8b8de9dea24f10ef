"""Last-resort scraping for any page."""

from typing import Optional

from extractor.domain.models import ExtractionResult, SiteKind, SourceKind
from extractor.logging import get_logger
from extractor.pages.dom import body_of, remove_noise, select_all, visible_text

from .base import ExtractionStrategy, StrategyContext, page_title

logger = get_logger(__name__, component="strategy")


class GenericFallbackStrategy(ExtractionStrategy):
    """Longest qualifying content region, else the whole page.

    Returns None only when the page has no visible text at all. When used as
    the fallback of a site strategy, the site's normalization extras still apply.
    """

    name = "generic_fallback"
    source_kind = SourceKind.GENERIC_SCRAPE

    def __init__(self, site: Optional[SiteKind] = None) -> None:
        self.site = site

    def __repr__(self) -> str:
        site = self.site.value if self.site else None
        return f"GenericFallbackStrategy(site={site!r})"

    async def extract(self, context: StrategyContext) -> Optional[ExtractionResult]:
        soup = await context.ready_document()
        tables = context.site_tables
        floor = context.strategies_config.generic_min_region_length

        best = ""
        for region in select_all(soup, tables.generic.region_selectors):
            text = visible_text(remove_noise(region, tables.noise_selectors))
            if len(text) >= floor and len(text) > len(best):
                best = text

        used_full_page = not best
        if used_full_page:
            body = body_of(soup)
            best = visible_text(remove_noise(body, tables.noise_selectors)) or visible_text(body)

        text = context.normalize(best, self.site) or best.strip()
        if not text:
            logger.info(
                "Page has no visible text",
                extra={"event": "strategy.generic.empty", "url": context.url},
            )
            return None

        logger.debug(
            "Generic extraction succeeded",
            extra={
                "event": "strategy.generic.succeeded",
                "used_full_page": used_full_page,
                "content_length": len(text),
            },
        )
        return self._result(context, text, title=page_title(soup))
