"""Structured logging for the extraction pipeline.

Every module obtains its logger through get_logger() so that records carry a
``component`` field (classifier, readiness, strategy, context, aggregation,
transport, pipeline) alongside the per-call ``event`` field.
"""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges the component field with per-call extras."""

    def process(self, msg, kwargs):
        """Merge adapter extra with call extra; the call's values win."""
        extra = kwargs.get("extra", {})
        kwargs["extra"] = {**self.extra, **extra}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally bound to a component name.

    Args:
        name: Logger name (typically __name__)
        component: Component identifier injected into every record

    Returns:
        Logger or ComponentLoggerAdapter instance

    Example:
        >>> logger = get_logger(__name__, component="aggregation")
        >>> logger.info("Window opened", extra={"event": "aggregation.window.opened"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger
