"""Collects extraction reports from concurrent document contexts and forwards one.

A run dispatches the command to every context adapter as its own task. Each
task posts exactly one report into the window's inbox. The collection loop
is the only code that touches the window; it stops at the earliest of:

- the hard deadline,
- the early trigger (armed by the first result longer than
  ``early_trigger_length``, firing ``early_trigger_delay_ms`` later),
- every dispatched context having reported.

Outstanding context tasks are then cancelled, the best result is selected
and forwarded to the transport exactly once. Starting a new run supersedes
the run in flight: it finishes without emitting and its reports are dropped.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from pydantic import ValidationError

from extractor.config.models import AggregationConfig
from extractor.domain.models import (
    ExtractionCommand,
    ExtractionReport,
    ExtractionResult,
    HostAck,
    HostPayload,
)
from extractor.exceptions import AggregationSupersededError, AggregationTimeoutError, TransportError
from extractor.logging import get_logger
from extractor.logging.context import log_context
from extractor.transport.base import HostTransport

from .models import AggregationOutcome, AggregationState, AggregationWindow, CloseReason

logger = get_logger(__name__, component="aggregation")

_SUPERSEDE = object()


class AggregationCoordinator:
    """
    Deadline-bounded fan-in of extraction reports.

    Adapters are any objects with a ``context_id`` attribute and an async
    ``handle(command) -> ExtractionReport`` method (ExecutionContextAdapter
    in production, scripted fakes in tests).
    """

    def __init__(
        self,
        config: AggregationConfig,
        transport: Optional[HostTransport] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            config: Early-trigger and deadline settings
            transport: Where the selected result is delivered (None to only select)
            logger_instance: Logger override
        """
        self.config = config
        self.transport = transport
        self.logger = logger_instance or logger
        self._active: Optional[AggregationWindow] = None

    async def run(
        self,
        adapters: Sequence[Any],
        command: ExtractionCommand,
        metadata: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> AggregationOutcome:
        """
        Dispatch a command to all contexts, collect, select and forward.

        Args:
            adapters: One adapter per document context (unique context ids)
            command: Extraction command sent to every context
            metadata: Extra payload metadata (provider settings, site, ...)
            request_id: Request identifier (generated when omitted)

        Returns:
            AggregationOutcome with the forwarded result and host acknowledgement

        Raises:
            AggregationTimeoutError: If no context produced content in time
            AggregationSupersededError: If a newer run replaced this one
            TransportError: If the transport rejected the payload
            ValueError: If two adapters share a context id
        """
        context_ids = [adapter.context_id for adapter in adapters]
        if len(set(context_ids)) != len(context_ids):
            raise ValueError(f"Duplicate context ids in dispatch: {context_ids}")

        loop = asyncio.get_running_loop()
        window = AggregationWindow(
            request_id=request_id or uuid4().hex,
            deadline=loop.time() + self.config.hard_deadline_ms / 1000,
            context_ids=frozenset(context_ids),
        )

        previous, self._active = self._active, window
        if previous is not None and not previous.state.is_terminal:
            previous.superseded.set()
            previous.inbox.put_nowait(_SUPERSEDE)

        with log_context(request_id=window.request_id):
            self.logger.info(
                f"Dispatching extraction to {window.dispatched_count} context(s)",
                extra={
                    "event": "aggregation.dispatched",
                    "dispatched": window.dispatched_count,
                    "variant": command.variant.value if command.variant else None,
                    "hard_deadline_ms": self.config.hard_deadline_ms,
                },
            )

            tasks = [
                asyncio.create_task(self._dispatch(window, adapter, command))
                for adapter in adapters
            ]
            try:
                reason = await self._collect(window, loop)
            finally:
                await self._cancel(tasks)
                if self._active is window:
                    self._active = None

            if reason == CloseReason.SUPERSEDED or window.superseded.is_set():
                window.state = AggregationState.SUPERSEDED
                self.logger.info(
                    "Extraction request superseded",
                    extra={"event": "aggregation.superseded", "collected": len(window.collected_results)},
                )
                raise AggregationSupersededError(window.request_id)

            window.state = AggregationState.FINALIZING
            result = window.select()
            if result is None:
                window.state = AggregationState.FAILED
                self.logger.warning(
                    "No content collected",
                    extra={
                        "event": "aggregation.failed",
                        "reason": reason.value,
                        "dispatched": window.dispatched_count,
                        "reported": len(window.reported_context_ids),
                    },
                )
                raise AggregationTimeoutError(window.request_id, window.dispatched_count)

            self.logger.info(
                "Selected extraction result",
                extra={
                    "event": "aggregation.selected",
                    "reason": reason.value,
                    "context_id": result.context_id,
                    "source_kind": result.source_kind.value,
                    "content_length": result.content_length,
                    "collected": len(window.collected_results),
                    "dispatched": window.dispatched_count,
                },
            )

            ack = await self._emit(window, result, metadata)
            return AggregationOutcome(
                request_id=window.request_id,
                result=result,
                ack=ack,
                collected=len(window.collected_results),
                dispatched=window.dispatched_count,
                close_reason=reason,
            )

    async def _dispatch(self, window: AggregationWindow, adapter: Any, command: ExtractionCommand) -> None:
        try:
            report = await adapter.handle(command)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Adapters report failures as data; this covers adapters that don't
            self.logger.error(
                f"Context adapter raised: {e}",
                extra={"event": "aggregation.context.raised", "context_id": adapter.context_id},
                exc_info=True,
            )
            report = ExtractionReport.failure(adapter.context_id, "", f"{type(e).__name__}: {e}")
        window.inbox.put_nowait(report)

    async def _collect(self, window: AggregationWindow, loop: asyncio.AbstractEventLoop) -> CloseReason:
        window.state = AggregationState.COLLECTING

        while not window.all_reported:
            remaining = window.closes_at - loop.time()
            if remaining <= 0:
                return self._timed_close(window)

            try:
                message = await asyncio.wait_for(window.inbox.get(), timeout=remaining)
            except asyncio.TimeoutError:
                return self._timed_close(window)

            if message is _SUPERSEDE or window.superseded.is_set():
                window.state = AggregationState.SUPERSEDED
                return CloseReason.SUPERSEDED

            self._accept(window, message, loop)

        return CloseReason.ALL_REPORTED

    def _timed_close(self, window: AggregationWindow) -> CloseReason:
        if window.early_deadline is not None and window.early_deadline < window.deadline:
            return CloseReason.EARLY_TRIGGER
        return CloseReason.DEADLINE

    def _accept(self, window: AggregationWindow, report: ExtractionReport, loop: asyncio.AbstractEventLoop) -> None:
        if report.context_id not in window.context_ids or report.context_id in window.reported_context_ids:
            self.logger.warning(
                "Dropping unexpected or duplicate report",
                extra={"event": "aggregation.report.dropped", "context_id": report.context_id},
            )
            return
        window.reported_context_ids.add(report.context_id)

        if not report.has_content:
            self.logger.debug(
                "Context reported no content",
                extra={
                    "event": "aggregation.report.empty",
                    "context_id": report.context_id,
                    "error": report.error,
                },
            )
            return

        try:
            result = report.to_result()
        except ValidationError as e:
            self.logger.warning(
                "Dropping malformed report",
                extra={"event": "aggregation.report.invalid", "context_id": report.context_id, "error": str(e)},
            )
            return

        window.collected_results.append(result)
        self.logger.debug(
            "Collected extraction result",
            extra={
                "event": "aggregation.report.collected",
                "context_id": result.context_id,
                "content_length": result.content_length,
                "collected": len(window.collected_results),
            },
        )

        if not window.early_trigger_armed and result.content_length > self.config.early_trigger_length:
            window.early_trigger_armed = True
            window.early_deadline = min(
                loop.time() + self.config.early_trigger_delay_ms / 1000, window.deadline
            )
            self.logger.debug(
                "Early trigger armed",
                extra={
                    "event": "aggregation.early_trigger.armed",
                    "context_id": result.context_id,
                    "delay_ms": self.config.early_trigger_delay_ms,
                },
            )

    async def _emit(
        self,
        window: AggregationWindow,
        result: ExtractionResult,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[HostAck]:
        if window.emitted:
            return window.ack
        window.emitted = True

        if self.transport is None:
            window.state = AggregationState.DELIVERED
            return None

        payload = HostPayload.for_result(result, window.request_id, metadata)

        try:
            window.ack = await self.transport.send(payload)
        except TransportError as e:
            window.state = AggregationState.FAILED
            self.logger.error(
                f"Transport rejected payload: {e}",
                extra={"event": "aggregation.emit.failed", "transport": self.transport.name, "error": str(e)},
            )
            raise

        window.state = AggregationState.DELIVERED
        self.logger.info(
            "Payload delivered",
            extra={
                "event": "aggregation.emitted",
                "transport": self.transport.name,
                "filename": window.ack.filename,
            },
        )
        return window.ack

    @staticmethod
    async def _cancel(tasks: List[asyncio.Task]) -> None:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
