"""Host transports: where the selected extraction result is delivered."""

from extractor.config.models import TransportConfig, TransportType

from .base import HostTransport
from .console import ConsoleTransport
from .native import NativeMessagingTransport, build_host_message, decode_message, encode_message


def create_transport(config: TransportConfig) -> HostTransport:
    """Build the transport selected in configuration."""
    if config.type == TransportType.NATIVE.value:
        return NativeMessagingTransport(config.command, timeout=config.timeout_ms / 1000)
    return ConsoleTransport()


__all__ = [
    "HostTransport",
    "NativeMessagingTransport",
    "ConsoleTransport",
    "create_transport",
    "encode_message",
    "decode_message",
    "build_host_message",
]
