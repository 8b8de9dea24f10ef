"""Domain models shared by every component of the extractor."""

from .models import (
    ExtractionCommand,
    ExtractionReport,
    ExtractionResult,
    HostAck,
    HostPayload,
    SiteIdentity,
    SiteKind,
    SourceKind,
)

__all__ = [
    "SiteKind",
    "SiteIdentity",
    "SourceKind",
    "ExtractionResult",
    "ExtractionCommand",
    "ExtractionReport",
    "HostPayload",
    "HostAck",
]
