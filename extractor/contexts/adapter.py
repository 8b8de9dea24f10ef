"""Per-document-context execution.

An ExecutionContextAdapter owns one PageSource. On an extraction command it
runs the site's strategy chain against the page and answers with an
ExtractionReport. Everything raised inside the context is converted into a
failed report here, so nothing crosses to the coordinator as an exception.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from extractor.config.models import ReadinessConfig, StrategiesConfig
from extractor.domain.models import ExtractionCommand, ExtractionReport, SiteKind
from extractor.logging import get_logger
from extractor.logging.context import log_context
from extractor.normalization import RuleTables, TextNormalizer
from extractor.pages.base import PageSource
from extractor.readiness import PollingReadinessDetector, StabilityDetector
from extractor.rules.tables import SiteTables
from extractor.strategies import ExtractionStrategy, StrategyContext, build_strategy_chain

logger = get_logger(__name__, component="context")

ChainBuilder = Callable[[Optional[SiteKind], SiteTables], List[ExtractionStrategy]]


class ExecutionContextAdapter:
    """Runs extraction inside one document context.

    Attributes:
        page: The document this adapter reads
    """

    def __init__(
        self,
        page: PageSource,
        normalizer: TextNormalizer,
        rule_tables: RuleTables,
        site_tables: SiteTables,
        strategies_config: StrategiesConfig,
        readiness_config: ReadinessConfig,
        readiness: Optional[StabilityDetector] = None,
        chain_builder: ChainBuilder = build_strategy_chain,
        logger_instance: Optional[logging.Logger] = None,
    ) -> None:
        self.page = page
        self.normalizer = normalizer
        self.rule_tables = rule_tables
        self.site_tables = site_tables
        self.strategies_config = strategies_config
        self.readiness_config = readiness_config
        self.readiness = readiness or PollingReadinessDetector()
        self.chain_builder = chain_builder
        self.logger = logger_instance or logger

    @property
    def context_id(self) -> str:
        return self.page.context_id

    def __repr__(self) -> str:
        return f"ExecutionContextAdapter({self.page!r})"

    async def handle(self, command: ExtractionCommand) -> ExtractionReport:
        """
        Execute an extraction command against this context's page.

        Args:
            command: Extraction command (variant selects the strategy chain)

        Returns:
            Successful report from the first strategy that produced content,
            or a failed report. Never raises (except cancellation).
        """
        with log_context(context_id=self.context_id):
            started = time.monotonic()
            self.logger.debug(
                "Context extraction started",
                extra={
                    "event": "context.extract.started",
                    "url": self.page.url,
                    "variant": command.variant.value if command.variant else None,
                },
            )

            try:
                report = await self._run_chain(command)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.error(
                    f"Context extraction failed: {e}",
                    extra={
                        "event": "context.extract.failed",
                        "url": self.page.url,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                return ExtractionReport.failure(self.context_id, self.page.url, f"{type(e).__name__}: {e}")

            self.logger.info(
                "Context extraction finished",
                extra={
                    "event": "context.extract.completed" if report.ok else "context.extract.empty",
                    "url": self.page.url,
                    "source_kind": report.source_kind.value if report.source_kind else None,
                    "content_length": report.content_length,
                    "duration_ms": int((time.monotonic() - started) * 1000),
                },
            )
            return report

    async def _run_chain(self, command: ExtractionCommand) -> ExtractionReport:
        context = StrategyContext.for_page(
            self.page,
            normalizer=self.normalizer,
            rule_tables=self.rule_tables,
            site_tables=self.site_tables,
            strategies_config=self.strategies_config,
            readiness=self.readiness,
            readiness_config=self.readiness_config,
        )

        for strategy in self.chain_builder(command.variant, self.site_tables):
            result = await strategy.extract(context)
            if result is not None:
                return ExtractionReport.from_result(result)
            self.logger.debug(
                f"Strategy {strategy.name} produced nothing",
                extra={"event": "context.strategy.empty", "strategy": strategy.name},
            )

        return ExtractionReport.failure(self.context_id, self.page.url, "No strategy produced content")
