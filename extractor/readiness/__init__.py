"""Readiness detection: wait until a page has stopped changing."""

from .detector import Measure, PollingReadinessDetector, ReadinessOutcome, StabilityDetector

__all__ = [
    "StabilityDetector",
    "PollingReadinessDetector",
    "ReadinessOutcome",
    "Measure",
]
