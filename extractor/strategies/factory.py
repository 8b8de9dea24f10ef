"""Strategy selection by site identity."""

from typing import List, Optional, Union

from extractor.config.models import GreenhouseConfig
from extractor.domain.models import SiteIdentity, SiteKind
from extractor.http_client import HttpClient
from extractor.logging import get_logger
from extractor.rules.tables import SiteTables

from .base import ExtractionStrategy
from .generic import GenericFallbackStrategy
from .greenhouse import DirectApiStrategy
from .marker import MarkerTruncatedStrategy
from .structured import StructuredDomStrategy

logger = get_logger(__name__, component="strategy")


def build_strategy_chain(
    site: Union[SiteIdentity, SiteKind, None],
    site_tables: SiteTables,
) -> List[ExtractionStrategy]:
    """Scraping strategies for a site, in evaluation order.

    The site's own strategy (if it has one) comes first and
    GenericFallbackStrategy always comes last. Greenhouse kinds have no
    scraping strategy of their own; their API strategy is built separately
    with direct_api_strategy().

    Args:
        site: Site identity or kind (None means generic)
        site_tables: Selector and marker tables

    Returns:
        Ordered, non-empty list of strategies

    Example:
        >>> chain = build_strategy_chain(SiteKind.LINKEDIN, default_site_tables())
        >>> [s.name for s in chain]
        ['structured_dom', 'generic_fallback']
    """
    kind = site.kind if isinstance(site, SiteIdentity) else (site or SiteKind.GENERIC)

    chain: List[ExtractionStrategy] = []
    if kind in (SiteKind.WELLFOUND, SiteKind.LINKEDIN):
        table = site_tables.structured_for(kind)
        if table is not None:
            chain.append(StructuredDomStrategy(kind, table))
    elif kind == SiteKind.REMOTE_ROCKETSHIP:
        markers = site_tables.markers_for(kind)
        if markers:
            chain.append(MarkerTruncatedStrategy(kind, markers))

    chain.append(GenericFallbackStrategy(site=None if kind == SiteKind.GENERIC else kind))

    logger.debug(
        "Built strategy chain",
        extra={
            "event": "strategy.chain.built",
            "site": kind.value,
            "strategies": [strategy.name for strategy in chain],
        },
    )
    return chain


def direct_api_strategy(
    identity: SiteIdentity,
    client: HttpClient,
    config: GreenhouseConfig,
) -> Optional[DirectApiStrategy]:
    """DirectApiStrategy for a Greenhouse identity with a resolved board token, else None."""
    if not identity.is_greenhouse or not identity.board_token:
        return None
    return DirectApiStrategy(identity, client, config)
