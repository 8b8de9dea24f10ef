"""Dry-run transport that writes the payload to a stream."""

import sys
from typing import Optional, TextIO

from extractor.domain.models import HostAck, HostPayload
from extractor.logging import get_logger

from .base import HostTransport

logger = get_logger(__name__, component="transport")

REDACTED_KEYS = frozenset({"api_key"})


class ConsoleTransport(HostTransport):
    """Prints the metadata header and text; always acknowledges with success."""

    name = "console"

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdout

    async def send(self, payload: HostPayload) -> HostAck:
        metadata = payload.metadata or {}
        for key in sorted(metadata):
            value = "***" if key in REDACTED_KEYS and metadata[key] else metadata[key]
            if value is not None:
                self.stream.write(f"# {key}: {value}\n")
        self.stream.write("\n")
        self.stream.write(payload.text)
        self.stream.write("\n")
        self.stream.flush()

        logger.debug(
            "Payload written to console",
            extra={"event": "transport.console.delivered", "content_length": len(payload.text)},
        )
        return HostAck(status="success", filename="<stdout>")
