"""Greenhouse job-board API strategy.

Greenhouse exposes each posting through its public board API:

    Endpoint: {api_base_url}/{board_token}/jobs/{job_id}
    Method: GET
    Authentication: None (public)
    Response: JSON object with title, location, departments, HTML-escaped
              content, absolute_url and updated_at

One request is made; any failure (HTTP error, timeout, connection error,
undecodable body, fields of the wrong type) yields None so the caller can
fall back to scraping.
"""

import asyncio
from typing import Any, Dict, Optional

from extractor.config.models import GreenhouseConfig
from extractor.domain.models import ExtractionResult, SiteIdentity, SiteKind, SourceKind
from extractor.exceptions import FetchError, FetchResponseError
from extractor.http_client import HttpClient
from extractor.logging import get_logger
from extractor.pages.dom import html_fragment_to_text
from extractor.utils.timestamps import format_timestamp, parse_iso_datetime

from .base import ExtractionStrategy, StrategyContext

logger = get_logger(__name__, component="strategy")

NOT_SPECIFIED = "Not specified"


class DirectApiStrategy(ExtractionStrategy):
    """Reads a Greenhouse posting straight from the board API."""

    name = "direct_api"
    source_kind = SourceKind.API

    def __init__(self, identity: SiteIdentity, client: HttpClient, config: GreenhouseConfig) -> None:
        if not identity.is_greenhouse or not identity.board_token:
            raise ValueError(f"DirectApiStrategy needs a Greenhouse identity with a board token, got {identity!r}")
        self.identity = identity
        self.client = client
        self.config = config

    @property
    def api_url(self) -> str:
        return f"{self.config.api_base_url}/{self.identity.board_token}/jobs/{self.identity.job_id}"

    async def extract(self, context: StrategyContext) -> Optional[ExtractionResult]:
        url = self.api_url

        logger.info(
            "Fetching job from Greenhouse",
            extra={
                "event": "strategy.api.request",
                "board_token": self.identity.board_token,
                "job_id": self.identity.job_id,
                "url": url,
            },
        )

        try:
            job = await asyncio.to_thread(self.client.get_json, url)
            if not isinstance(job, dict):
                raise FetchResponseError(
                    f"Expected JSON object response, got {type(job).__name__}", url=url
                )
            text = self.format_report(job, context)
            source_url = self._text_field(job, "absolute_url") or url
        except FetchError as e:
            logger.warning(
                "Greenhouse API fetch failed",
                extra={
                    "event": "strategy.api.failed",
                    "board_token": self.identity.board_token,
                    "job_id": self.identity.job_id,
                    "status_code": getattr(e, "status_code", None),
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return None

        result = ExtractionResult.from_text(
            text,
            source_kind=self.source_kind,
            source_url=source_url,
            title=self._text_field(job, "title"),
            context_id=context.context_id,
        )

        logger.info(
            "Fetched job from Greenhouse",
            extra={
                "event": "strategy.api.succeeded",
                "job_id": self.identity.job_id,
                "content_length": result.content_length,
            },
        )
        return result

    def format_report(self, job: Dict[str, Any], context: StrategyContext) -> str:
        """
        Render an API job object as the plain-text report.

        Args:
            job: Decoded Greenhouse job object
            context: Supplies the normalizer for the description

        Returns:
            Report text (title, location, department, description, URL, updated)

        Raises:
            FetchResponseError: If the object has no title or a field has the wrong type
        """
        title = self._text_field(job, "title")
        if not title:
            raise FetchResponseError("Greenhouse job has no title", url=self.api_url)

        description = context.normalize(
            html_fragment_to_text(self._text_field(job, "content")), SiteKind.DIRECT_GREENHOUSE
        )

        return "\n".join([
            f"JOB TITLE: {title}",
            "",
            f"LOCATION: {self._location(job) or NOT_SPECIFIED}",
            "",
            f"DEPARTMENT: {self._departments(job) or NOT_SPECIFIED}",
            "",
            "DESCRIPTION:",
            description,
            "",
            f"URL: {self._text_field(job, 'absolute_url') or self.api_url}",
            f"UPDATED: {self._updated(job) or NOT_SPECIFIED}",
        ])

    def _text_field(self, job: Dict[str, Any], key: str) -> str:
        """String value of a job field; empty when absent."""
        value = job.get(key)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise FetchResponseError(
                f"Greenhouse job field '{key}' is {type(value).__name__}, expected a string",
                url=self.api_url,
            )
        return value

    @staticmethod
    def _location(job: Dict[str, Any]) -> str:
        location = job.get("location")
        if isinstance(location, dict):
            return str(location.get("name") or "").strip()
        return ""

    def _departments(self, job: Dict[str, Any]) -> str:
        departments = job.get("departments") or []
        if not isinstance(departments, list):
            raise FetchResponseError(
                f"Greenhouse job field 'departments' is {type(departments).__name__}, expected a list",
                url=self.api_url,
            )
        names = [
            str(d.get("name")).strip()
            for d in departments
            if isinstance(d, dict) and d.get("name")
        ]
        return ", ".join(names)

    @staticmethod
    def _updated(job: Dict[str, Any]) -> str:
        raw = job.get("updated_at")
        if not raw:
            return ""
        parsed = parse_iso_datetime(str(raw))
        if parsed is None:
            logger.warning(
                "Failed to parse timestamp",
                extra={"event": "strategy.api.bad_timestamp", "timestamp": raw},
            )
            return str(raw)
        return format_timestamp(parsed)
