"""Normalization rule sets built from the bundled rule tables."""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from extractor.config.exceptions import ConfigurationError
from extractor.rules import NORMALIZATION_FILE, read_rules_file


class NormalizationStage(str, Enum):
    """Rule stages in application order."""

    STRUCTURAL = "structural"
    ASSET = "asset"
    WHITESPACE = "whitespace"
    BOILERPLATE = "boilerplate"
    SITE = "site"


STAGE_ORDER = (
    NormalizationStage.STRUCTURAL,
    NormalizationStage.ASSET,
    NormalizationStage.WHITESPACE,
    NormalizationStage.BOILERPLATE,
    NormalizationStage.SITE,
)


@dataclass(frozen=True)
class NormalizationRule:
    """One pattern -> replacement rewrite."""

    stage: NormalizationStage
    pattern: re.Pattern
    replacement: str = ""

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True)
class NormalizationRuleSet:
    """Ordered rules: the universal stages followed by optional site extras."""

    name: str
    rules: Tuple[NormalizationRule, ...]

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def stages(self) -> List[NormalizationStage]:
        """Stages in the order their rules appear."""
        seen: List[NormalizationStage] = []
        for rule in self.rules:
            if rule.stage not in seen:
                seen.append(rule.stage)
        return seen


@dataclass
class RuleTables:
    """Universal rules by stage plus per-site extra rules."""

    universal: Dict[NormalizationStage, List[NormalizationRule]]
    sites: Dict[str, List[NormalizationRule]] = field(default_factory=dict)

    def rule_set_for(self, site: Optional[str] = None) -> NormalizationRuleSet:
        """
        Build the rule set for a site.

        Args:
            site: Site key (a SiteKind value); None or an unknown site yields
                the universal rules only

        Returns:
            NormalizationRuleSet in stage order
        """
        ordered: List[NormalizationRule] = []
        for stage in STAGE_ORDER[:-1]:
            ordered.extend(self.universal.get(stage, []))

        name = "universal"
        site_key = getattr(site, "value", site)
        if site_key and site_key in self.sites:
            ordered.extend(self.sites[site_key])
            name = site_key

        return NormalizationRuleSet(name=name, rules=tuple(ordered))


def _compile_rules(
    entries: Iterable[Any], stage: NormalizationStage, source: str
) -> List[NormalizationRule]:
    rules = []
    for index, entry in enumerate(entries or []):
        if isinstance(entry, str):
            entry = {"pattern": entry}
        if not isinstance(entry, dict) or "pattern" not in entry:
            raise ConfigurationError(
                f"Invalid normalization rule {source}[{index}]: expected a mapping with 'pattern'"
            )
        try:
            pattern = re.compile(entry["pattern"])
        except re.error as e:
            raise ConfigurationError(
                f"Invalid regular expression in normalization rule {source}[{index}]: {e}"
            ) from e
        rules.append(
            NormalizationRule(
                stage=stage,
                pattern=pattern,
                replacement=str(entry.get("replacement", "")),
            )
        )
    return rules


def build_rule_tables(data: Dict[str, Any]) -> RuleTables:
    """Compile a parsed normalization table."""
    universal_data = data.get("universal") or {}
    unknown = set(universal_data) - {stage.value for stage in STAGE_ORDER[:-1]}
    if unknown:
        raise ConfigurationError(
            f"Unknown normalization stage(s): {', '.join(sorted(unknown))}",
            suggestions=["Valid stages: structural, asset, whitespace, boilerplate"],
        )

    universal = {
        stage: _compile_rules(universal_data.get(stage.value), stage, f"universal.{stage.value}")
        for stage in STAGE_ORDER[:-1]
    }
    sites = {
        site: _compile_rules(entries, NormalizationStage.SITE, f"sites.{site}")
        for site, entries in (data.get("sites") or {}).items()
    }
    return RuleTables(universal=universal, sites=sites)


def load_rule_tables(override_dir: Optional[Path] = None) -> RuleTables:
    """Load and compile normalization.yaml (bundled or from override_dir)."""
    return build_rule_tables(read_rules_file(NORMALIZATION_FILE, override_dir))
