"""Readiness detection for dynamically loaded pages.

A page is considered ready once a content-size proxy (visible text length)
has stopped changing for a number of consecutive samples and is long enough,
or once the maximum wait has elapsed. A timeout is a normal outcome: a
partially rendered page is still worth reading.

StabilityDetector is the abstract contract so that an event-driven detector
(mutation notifications from a browser bridge, for example) can replace the
polling implementation without changing callers.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from extractor.config.models import ReadinessConfig
from extractor.logging import get_logger

logger = get_logger(__name__, component="readiness")

Measure = Callable[[], Union[int, Awaitable[int]]]


@dataclass(frozen=True)
class ReadinessOutcome:
    """How a readiness wait ended.

    Attributes:
        stable: The stability condition was met
        timed_out: The maximum wait elapsed first
        samples: Number of measurements taken
        last_value: Most recent measurement
        elapsed_ms: Time spent waiting
    """

    stable: bool
    timed_out: bool
    samples: int
    last_value: int
    elapsed_ms: int


class StabilityDetector(ABC):
    """Resolves once content is stable or the wait limit is reached. Never raises."""

    @abstractmethod
    async def wait_until_ready(self, measure: Measure, config: ReadinessConfig) -> ReadinessOutcome:
        """Wait for the measured content to settle.

        Args:
            measure: Zero-argument callable returning the current content size
                (or an awaitable of it)
            config: Polling parameters

        Returns:
            ReadinessOutcome describing how the wait ended
        """


class PollingReadinessDetector(StabilityDetector):
    """Samples the measure once per poll interval.

    Resolves when the value has been unchanged for
    ``required_stable_samples`` consecutive polls and is at least
    ``minimum_length``, or when ``max_wait_ms`` has elapsed. The final sleep
    is clipped to the remaining wait, so the detector resolves within
    ``max_wait_ms + poll_interval_ms`` for any measure that returns promptly.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    async def wait_until_ready(self, measure: Measure, config: ReadinessConfig) -> ReadinessOutcome:
        loop = asyncio.get_running_loop()
        started = loop.time()
        max_wait = config.max_wait_ms / 1000
        interval = config.poll_interval_ms / 1000

        previous: Optional[int] = None
        stable_count = 0
        samples = 0

        while True:
            value = await self._sample(measure)
            samples += 1

            if previous is not None and value == previous:
                stable_count += 1
            else:
                stable_count = 0
            previous = value

            elapsed = loop.time() - started

            if stable_count >= config.required_stable_samples and value >= config.minimum_length:
                return self._finish(True, False, samples, value, elapsed)

            if elapsed >= max_wait:
                return self._finish(False, True, samples, value, elapsed)

            await asyncio.sleep(min(interval, max_wait - elapsed))

    async def _sample(self, measure: Measure) -> int:
        try:
            value = measure()
            if inspect.isawaitable(value):
                value = await value
            return int(value)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.warning(
                "Content measurement failed, counting as empty",
                extra={
                    "event": "readiness.measure.failed",
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return 0

    def _finish(
        self, stable: bool, timed_out: bool, samples: int, value: int, elapsed: float
    ) -> ReadinessOutcome:
        outcome = ReadinessOutcome(
            stable=stable,
            timed_out=timed_out,
            samples=samples,
            last_value=value,
            elapsed_ms=int(elapsed * 1000),
        )
        self.logger.debug(
            "Page ready" if stable else "Readiness wait timed out",
            extra={
                "event": "readiness.stable" if stable else "readiness.timeout",
                "samples": samples,
                "content_length": value,
                "elapsed_ms": outcome.elapsed_ms,
            },
        )
        return outcome
