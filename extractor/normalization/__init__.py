"""Text normalization layer.

This module provides:
- NormalizationRule / NormalizationRuleSet: ordered pattern rewrites
- RuleTables: universal and per-site rules loaded from normalization.yaml
- TextNormalizer: applies a rule set to a fixed point
"""

from .rules import (
    NormalizationRule,
    NormalizationRuleSet,
    NormalizationStage,
    RuleTables,
    build_rule_tables,
    load_rule_tables,
)
from .service import TextNormalizer

__all__ = [
    "TextNormalizer",
    "NormalizationRule",
    "NormalizationRuleSet",
    "NormalizationStage",
    "RuleTables",
    "build_rule_tables",
    "load_rule_tables",
]
