"""Pipeline orchestration for a single extraction request."""

from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

import requests

from extractor.aggregation import AggregationCoordinator
from extractor.classification import classify
from extractor.config.environment import EnvironmentConfig
from extractor.config.models import AppConfig, UnresolvedTokenPolicy
from extractor.contexts import ExecutionContextAdapter
from extractor.domain.models import (
    ExtractionCommand,
    ExtractionResult,
    HostAck,
    HostPayload,
    SiteIdentity,
    SiteKind,
)
from extractor.exceptions import BoardTokenUnresolvedError, ExtractorError
from extractor.http_client import HttpClient
from extractor.logging import get_logger
from extractor.logging.context import log_context
from extractor.normalization import RuleTables, TextNormalizer, load_rule_tables
from extractor.readiness import PollingReadinessDetector, StabilityDetector
from extractor.rules.tables import SiteTables, default_site_tables, load_site_tables
from extractor.strategies import StrategyContext, direct_api_strategy
from extractor.transport.base import HostTransport
from extractor.utils.timestamps import format_timestamp, utc_now

from .models import ExtractionRequest, ExtractionRunResult

logger = get_logger(__name__, component="pipeline")

API_CONTEXT_ID = "api"


class ExtractionPipeline:
    """
    Runs extraction requests end to end.

    Greenhouse postings with a known board token are read from the board API
    first; everything else (and API misses, when fallback is enabled) is
    scraped from the request's document contexts through the coordinator.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        transport: HostTransport,
        coordinator: Optional[AggregationCoordinator] = None,
        session: Optional[requests.Session] = None,
        readiness: Optional[StabilityDetector] = None,
        rule_tables: Optional[RuleTables] = None,
        site_tables: Optional[SiteTables] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            app_config: Application configuration
            env_config: Environment configuration
            transport: Where the selected result is delivered
            coordinator: Aggregation coordinator (built from config when omitted)
            session: requests session for API and page fetches
            readiness: Stability detector shared by all contexts
            rule_tables: Normalization rules (loaded from config when omitted)
            site_tables: Site tables (loaded from config when omitted)
        """
        self.app_config = app_config
        self.env_config = env_config
        self.transport = transport
        self.coordinator = coordinator or AggregationCoordinator(app_config.aggregation, transport)
        self.client = HttpClient(
            timeout=app_config.advanced.http_request_timeout,
            user_agent=app_config.advanced.user_agent,
            session=session,
        )
        self.readiness = readiness or PollingReadinessDetector()
        self.normalizer = TextNormalizer()

        rules_path = app_config.strategies.rules_path
        self.rule_tables = rule_tables or load_rule_tables(rules_path)
        if site_tables is not None:
            self.site_tables = site_tables
        elif rules_path is not None:
            self.site_tables = load_site_tables(rules_path)
        else:
            self.site_tables = default_site_tables()

    async def run(self, request: ExtractionRequest) -> ExtractionRunResult:
        """
        Execute one extraction request.

        Returns:
            ExtractionRunResult; failures are recorded in error_message and
            never raised.
        """
        request_id = uuid4().hex
        started_at = utc_now()
        identity: Optional[SiteIdentity] = None
        dispatched = 0

        with log_context(request_id=request_id):
            logger.info(
                f"Extraction started for {request.url}",
                extra={
                    "event": "pipeline.run.started",
                    "url": request.url,
                    "contexts": len(request.pages),
                    "tab_id": request.tab_id,
                },
            )

            try:
                identity = classify(request.url, request.sibling_frame_urls, hosts=self.site_tables.hosts)
                if identity.is_greenhouse:
                    result, ack, path, dispatched = await self._run_greenhouse(identity, request, request_id)
                else:
                    result, ack, dispatched = await self._scrape(
                        identity, request, request_id, ExtractionCommand(variant=identity.kind)
                    )
                    path = "scrape"
            except ExtractorError as e:
                logger.warning(
                    f"Extraction failed: {e}",
                    extra={
                        "event": "pipeline.run.failed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                return self._finish(request, request_id, started_at, identity, error=str(e), dispatched=dispatched)
            except Exception as e:
                logger.error(
                    f"Unexpected error during extraction: {e}",
                    extra={
                        "event": "pipeline.run.crashed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                return self._finish(
                    request, request_id, started_at, identity,
                    error=f"Unexpected error: {e}", dispatched=dispatched,
                )

            run_result = self._finish(
                request, request_id, started_at, identity,
                result=result, ack=ack, path=path, dispatched=dispatched,
            )
            logger.info(
                "Extraction completed",
                extra={
                    "event": "pipeline.run.completed",
                    "site": identity.kind.value,
                    "path": path,
                    "source_kind": result.source_kind.value,
                    "content_length": result.content_length,
                    "duration_ms": int(run_result.duration_seconds * 1000),
                },
            )
            return run_result

    async def _run_greenhouse(
        self, identity: SiteIdentity, request: ExtractionRequest, request_id: str
    ) -> Tuple[ExtractionResult, Optional[HostAck], str, int]:
        greenhouse = self.app_config.greenhouse

        if identity.board_token is None:
            if greenhouse.unresolved_token_policy == UnresolvedTokenPolicy.FAIL.value:
                raise BoardTokenUnresolvedError(identity.job_id)
            logger.info(
                "Board token unresolved, scraping instead",
                extra={"event": "pipeline.greenhouse.token_unresolved", "job_id": identity.job_id},
            )
        else:
            strategy = direct_api_strategy(identity, self.client, greenhouse)
            context = StrategyContext(
                context_id=API_CONTEXT_ID,
                url=request.url,
                normalizer=self.normalizer,
                rule_tables=self.rule_tables,
                site_tables=self.site_tables,
                strategies_config=self.app_config.strategies,
            )
            result = await strategy.extract(context)
            if result is not None:
                ack = await self._deliver(result, identity, request, request_id)
                return result, ack, "api", 0

            if not greenhouse.fallback_to_scrape:
                raise ExtractorError(
                    f"Greenhouse API returned no content for job {identity.job_id} "
                    "and scraping fallback is disabled"
                )
            logger.info(
                "Greenhouse API miss, scraping instead",
                extra={"event": "pipeline.greenhouse.fallback", "job_id": identity.job_id},
            )

        result, ack, dispatched = await self._scrape(
            identity, request, request_id, ExtractionCommand(variant=SiteKind.GENERIC)
        )
        return result, ack, "scrape", dispatched

    async def _scrape(
        self,
        identity: SiteIdentity,
        request: ExtractionRequest,
        request_id: str,
        command: ExtractionCommand,
    ) -> Tuple[ExtractionResult, Optional[HostAck], int]:
        adapters = self._build_adapters(request)
        outcome = await self.coordinator.run(
            adapters, command, metadata=self._metadata(identity, request), request_id=request_id
        )
        return outcome.result, outcome.ack, outcome.dispatched

    def _build_adapters(self, request: ExtractionRequest) -> List[ExecutionContextAdapter]:
        return [
            ExecutionContextAdapter(
                page,
                normalizer=self.normalizer,
                rule_tables=self.rule_tables,
                site_tables=self.site_tables,
                strategies_config=self.app_config.strategies,
                readiness_config=self.app_config.readiness,
                readiness=self.readiness,
            )
            for page in request.pages
        ]

    async def _deliver(
        self,
        result: ExtractionResult,
        identity: SiteIdentity,
        request: ExtractionRequest,
        request_id: str,
    ) -> HostAck:
        payload = HostPayload.for_result(result, request_id, self._metadata(identity, request))
        ack = await self.transport.send(payload)
        logger.info(
            "Payload delivered",
            extra={"event": "pipeline.delivered", "transport": self.transport.name, "filename": ack.filename},
        )
        return ack

    def _metadata(self, identity: SiteIdentity, request: ExtractionRequest) -> Dict[str, Any]:
        provider = self.app_config.provider
        metadata: Dict[str, Any] = {
            "provider": provider.provider,
            "model": provider.resolved_model,
            "api_key": provider.api_key,
            "site": identity.kind.value,
            "page_url": request.url,
            "extracted_at": format_timestamp(utc_now()),
        }
        if request.tab_id is not None:
            metadata["tab_id"] = request.tab_id
        return metadata

    @staticmethod
    def _finish(
        request: ExtractionRequest,
        request_id: str,
        started_at,
        identity: Optional[SiteIdentity],
        result: Optional[ExtractionResult] = None,
        ack: Optional[HostAck] = None,
        path: Optional[str] = None,
        dispatched: int = 0,
        error: Optional[str] = None,
    ) -> ExtractionRunResult:
        return ExtractionRunResult(
            request_id=request_id,
            url=request.url,
            started_at=started_at,
            finished_at=utc_now(),
            identity=identity,
            result=result,
            ack=ack,
            path=path,
            contexts_dispatched=dispatched,
            error_message=error,
        )
