"""Aggregation window state for one coordinator run."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Set

from extractor.domain.models import ExtractionResult, HostAck


class AggregationState(str, Enum):
    """Lifecycle of an aggregation window."""

    DISPATCHED = "dispatched"
    COLLECTING = "collecting"
    FINALIZING = "finalizing"
    DELIVERED = "delivered"
    FAILED = "failed"
    SUPERSEDED = "superseded"

    @property
    def is_terminal(self) -> bool:
        return self in (AggregationState.DELIVERED, AggregationState.FAILED, AggregationState.SUPERSEDED)


class CloseReason(str, Enum):
    """Why collection stopped."""

    ALL_REPORTED = "all_reported"
    EARLY_TRIGGER = "early_trigger"
    DEADLINE = "deadline"
    SUPERSEDED = "superseded"


@dataclass
class AggregationWindow:
    """
    Per-request collection state, mutated only by the coordinator's collection loop.

    Attributes:
        request_id: Identifier of the extraction request
        deadline: Hard deadline in event-loop time
        context_ids: Contexts the command was dispatched to
        collected_results: Successful results in arrival order
        early_trigger_armed: A long-enough result has been seen
        early_deadline: Loop time the early trigger fires at
        reported_context_ids: Contexts whose report has been received
        state: Lifecycle state
        emitted: The payload has been handed to the transport
        ack: Host acknowledgement, once delivered
        inbox: Reports posted by context tasks
        superseded: Set by a newer run; the collection loop reacts to it
    """

    request_id: str
    deadline: float
    context_ids: FrozenSet[str]
    collected_results: List[ExtractionResult] = field(default_factory=list)
    early_trigger_armed: bool = False
    early_deadline: Optional[float] = None
    reported_context_ids: Set[str] = field(default_factory=set)
    state: AggregationState = AggregationState.DISPATCHED
    emitted: bool = False
    ack: Optional[HostAck] = None
    inbox: asyncio.Queue = field(default_factory=asyncio.Queue, repr=False)
    superseded: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def dispatched_count(self) -> int:
        return len(self.context_ids)

    @property
    def all_reported(self) -> bool:
        return self.reported_context_ids >= self.context_ids

    @property
    def closes_at(self) -> float:
        """Loop time at which collection stops: the early trigger or the hard deadline."""
        if self.early_deadline is not None:
            return min(self.early_deadline, self.deadline)
        return self.deadline

    def select(self) -> Optional[ExtractionResult]:
        """
        Pick the result to forward.

        A single dispatched context forwards its result as is. Otherwise the
        longest result wins and ties go to the earliest arrival.

        Returns:
            Selected result, or None when nothing was collected
        """
        if not self.collected_results:
            return None
        if self.dispatched_count == 1:
            return self.collected_results[0]

        best = self.collected_results[0]
        for result in self.collected_results[1:]:
            if result.content_length > best.content_length:
                best = result
        return best


@dataclass(frozen=True)
class AggregationOutcome:
    """What a successful coordinator run produced.

    Attributes:
        request_id: Identifier of the extraction request
        result: The selected result
        ack: Host acknowledgement (None when the coordinator has no transport)
        collected: Number of successful results collected
        dispatched: Number of contexts the command was dispatched to
        close_reason: Why collection stopped
    """

    request_id: str
    result: ExtractionResult
    ack: Optional[HostAck]
    collected: int
    dispatched: int
    close_reason: CloseReason
