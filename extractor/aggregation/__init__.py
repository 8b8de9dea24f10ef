"""Fan-in of extraction reports from concurrent document contexts."""

from .coordinator import AggregationCoordinator
from .models import AggregationOutcome, AggregationState, AggregationWindow, CloseReason

__all__ = [
    "AggregationCoordinator",
    "AggregationOutcome",
    "AggregationState",
    "AggregationWindow",
    "CloseReason",
]
