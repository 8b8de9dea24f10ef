"""Text normalization for extracted job-posting text.

Raw page text carries leftover markup, asset references, runs of blank lines
and site boilerplate. TextNormalizer applies a NormalizationRuleSet in stage
order:

1. structural stripping (style/script fragments, CSS-looking blocks)
2. long URL and font-asset removal
3. whitespace collapsing
4. boilerplate trimming (copyright, cookie notices, similar jobs, FAQ, ...)
5. site-specific extras (LinkedIn chrome)

Later stages assume earlier ones already ran. A removal in stage 4 or 5 can
leave fresh whitespace runs behind, so the full rule list is re-applied until
a pass changes nothing; the output is therefore a fixed point and
normalize(normalize(x)) == normalize(x).
"""

import logging
from typing import Optional

from extractor.logging import get_logger

from .rules import NormalizationRuleSet

logger = get_logger(__name__, component="normalization")


class TextNormalizer:
    """Applies normalization rule sets until the text stops changing.

    Every rule only removes or shortens text. After the first pass (which may
    swap a lone carriage return for a newline) each pass that changes the text
    makes it strictly shorter, so len(text) + 2 passes always reach the fixed
    point. Typical pages need two.
    """

    MIN_PASSES = 10

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def normalize(self, text: str, rule_set: NormalizationRuleSet) -> str:
        """
        Normalize text with a rule set.

        Args:
            text: Raw extracted text
            rule_set: Ordered rules to apply

        Returns:
            Normalized text, stripped of leading/trailing whitespace
        """
        if not text:
            return ""

        max_passes = max(self.MIN_PASSES, len(text) + 2)
        current = text
        for passes in range(1, max_passes + 1):
            updated = self._apply_pass(current, rule_set)
            if updated == current:
                self.logger.debug(
                    "Text normalized",
                    extra={
                        "event": "normalization.text.normalized",
                        "rule_set": rule_set.name,
                        "passes": passes,
                        "input_length": len(text),
                        "output_length": len(updated),
                    },
                )
                return updated
            current = updated

        self.logger.warning(
            "Normalization did not converge",
            extra={
                "event": "normalization.text.unconverged",
                "rule_set": rule_set.name,
                "passes": max_passes,
            },
        )
        return current

    @staticmethod
    def _apply_pass(text: str, rule_set: NormalizationRuleSet) -> str:
        for rule in rule_set:
            text = rule.apply(text)
        return text.strip()
