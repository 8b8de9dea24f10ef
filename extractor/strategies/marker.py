"""Full-page scraping cut at trailing boilerplate markers (RemoteRocketship)."""

import re
from typing import Iterable, List, Optional

from extractor.domain.models import ExtractionResult, SiteKind, SourceKind
from extractor.logging import get_logger
from extractor.pages.dom import body_of, remove_noise, visible_text

from .base import ExtractionStrategy, StrategyContext, page_title

logger = get_logger(__name__, component="strategy")


def truncate_at_markers(text: str, markers: Iterable[str]) -> str:
    """
    Cut text strictly before the earliest occurrence of any marker.

    Matching is case-insensitive. The marker that occurs first in the text
    wins, regardless of its position in the marker list.

    Args:
        text: Page text
        markers: Marker phrases

    Returns:
        Text before the first marker, or the text unchanged when none occurs

    Example:
        >>> truncate_at_markers("...job details...Similar Jobs...more jobs...", ["Similar Jobs"])
        '...job details...'
    """
    phrases = [m for m in markers if m]
    if not text or not phrases:
        return text

    match = re.search("|".join(re.escape(p) for p in phrases), text, re.IGNORECASE)
    if match is None:
        return text
    return text[: match.start()]


class MarkerTruncatedStrategy(ExtractionStrategy):
    """Reads the whole noise-stripped page and drops everything after a marker."""

    name = "marker_truncated"
    source_kind = SourceKind.MARKER_TRUNCATED

    def __init__(self, kind: SiteKind, markers: List[str]) -> None:
        self.kind = kind
        self.markers = list(markers)

    def __repr__(self) -> str:
        return f"MarkerTruncatedStrategy(kind={self.kind.value!r}, markers={len(self.markers)})"

    async def extract(self, context: StrategyContext) -> Optional[ExtractionResult]:
        soup = await context.ready_document()
        page_text = visible_text(remove_noise(body_of(soup), context.site_tables.noise_selectors))

        truncated = truncate_at_markers(page_text, self.markers)
        text = context.normalize(truncated, self.kind)

        if len(text) < context.strategies_config.min_content_length:
            logger.info(
                "Marker-truncated page text too short",
                extra={
                    "event": "strategy.marker.insufficient",
                    "site": self.kind.value,
                    "content_length": len(text),
                },
            )
            return None

        logger.debug(
            "Marker-truncated extraction succeeded",
            extra={
                "event": "strategy.marker.succeeded",
                "site": self.kind.value,
                "page_length": len(page_text),
                "truncated": len(truncated) < len(page_text),
                "content_length": len(text),
            },
        )
        return self._result(context, text, title=page_title(soup))
