"""Extraction strategies.

This module provides:
- ExtractionStrategy / StrategyContext: the strategy contract
- DirectApiStrategy: Greenhouse board API
- StructuredDomStrategy: selector tables per field (Wellfound, LinkedIn)
- MarkerTruncatedStrategy: full page cut at boilerplate markers (RemoteRocketship)
- GenericFallbackStrategy: best content region or whole page
- build_strategy_chain / direct_api_strategy: selection by site identity
"""

from .base import ExtractionStrategy, StrategyContext
from .factory import build_strategy_chain, direct_api_strategy
from .generic import GenericFallbackStrategy
from .greenhouse import DirectApiStrategy
from .marker import MarkerTruncatedStrategy, truncate_at_markers
from .structured import StructuredDomStrategy

__all__ = [
    "ExtractionStrategy",
    "StrategyContext",
    "DirectApiStrategy",
    "StructuredDomStrategy",
    "MarkerTruncatedStrategy",
    "GenericFallbackStrategy",
    "build_strategy_chain",
    "direct_api_strategy",
    "truncate_at_markers",
]
