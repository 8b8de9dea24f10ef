"""Core domain models for site identities, extraction results and messages.

This module defines the data structures passed between components:
- SiteIdentity: classification of a job-posting URL
- ExtractionResult: the text one document context produced
- ExtractionCommand / ExtractionReport: orchestrator <-> context messages
- HostPayload / HostAck: what is handed to the host transport and its reply
"""

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class SiteKind(str, Enum):
    """Site identities recognised by the classifier."""

    DIRECT_GREENHOUSE = "direct_greenhouse"
    EMBEDDED_GREENHOUSE = "embedded_greenhouse"
    WELLFOUND = "wellfound"
    REMOTE_ROCKETSHIP = "remote_rocketship"
    LINKEDIN = "linkedin"
    GENERIC = "generic"


class SourceKind(str, Enum):
    """Which strategy family produced an extraction result."""

    API = "api"
    STRUCTURED_DOM = "structured-dom"
    MARKER_TRUNCATED = "marker-truncated"
    GENERIC_SCRAPE = "generic-scrape"


class SiteIdentity(BaseModel):
    """Immutable classification of one extraction request's target page.

    ``board_token`` and ``job_id`` are only meaningful for the Greenhouse
    kinds. An embedded Greenhouse identity may carry no board token when no
    sibling frame exposed one.
    """

    kind: SiteKind
    board_token: Optional[str] = None
    job_id: Optional[str] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_greenhouse_parameters(self):
        if self.kind == SiteKind.DIRECT_GREENHOUSE and not (self.board_token and self.job_id):
            raise ValueError("direct_greenhouse identity requires board_token and job_id")
        if self.kind == SiteKind.EMBEDDED_GREENHOUSE and not self.job_id:
            raise ValueError("embedded_greenhouse identity requires job_id")
        return self

    @classmethod
    def direct_greenhouse(cls, board_token: str, job_id: str) -> "SiteIdentity":
        return cls(kind=SiteKind.DIRECT_GREENHOUSE, board_token=board_token, job_id=job_id)

    @classmethod
    def embedded_greenhouse(cls, job_id: str, board_token: Optional[str] = None) -> "SiteIdentity":
        return cls(kind=SiteKind.EMBEDDED_GREENHOUSE, board_token=board_token, job_id=job_id)

    @classmethod
    def of(cls, kind: SiteKind) -> "SiteIdentity":
        """Identity for the parameterless kinds (Wellfound, LinkedIn, ...)."""
        return cls(kind=kind)

    @property
    def is_greenhouse(self) -> bool:
        return self.kind in (SiteKind.DIRECT_GREENHOUSE, SiteKind.EMBEDDED_GREENHOUSE)


class ExtractionResult(BaseModel):
    """Text produced by one execution context.

    Invariants enforced on construction:
    - ``text`` has no leading or trailing whitespace
    - ``content_length == len(text)``; it is computed when omitted
    """

    text: str
    source_url: str = ""
    title: str = ""
    content_length: int = Field(0, ge=0)
    source_kind: SourceKind
    context_id: str = "top"

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def trim_and_measure(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("text"), str):
            data = dict(data)
            data["text"] = data["text"].strip()
            data.setdefault("content_length", len(data["text"]))
        return data

    @model_validator(mode="after")
    def check_content_length(self):
        if self.content_length != len(self.text):
            raise ValueError(
                f"content_length {self.content_length} does not match text length {len(self.text)}"
            )
        return self

    @classmethod
    def from_text(
        cls,
        text: str,
        source_kind: SourceKind,
        source_url: str = "",
        title: str = "",
        context_id: str = "top",
    ) -> "ExtractionResult":
        return cls(
            text=text,
            source_kind=source_kind,
            source_url=source_url,
            title=title,
            context_id=context_id,
        )


class ExtractionCommand(BaseModel):
    """Orchestrator -> document context: run extraction."""

    action: Literal["extract"] = "extract"
    variant: Optional[SiteKind] = None

    model_config = {"frozen": True}


class ExtractionReport(BaseModel):
    """Document context -> orchestrator: outcome of one extraction.

    Failures travel as data (``ok=False`` with ``error``) so nothing raised
    inside a context ever reaches the coordinator.
    """

    context_id: str
    ok: bool
    text: str = ""
    url: str = ""
    title: str = ""
    content_length: int = 0
    source_kind: Optional[SourceKind] = None
    error: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "ExtractionReport":
        return cls(
            context_id=result.context_id,
            ok=True,
            text=result.text,
            url=result.source_url,
            title=result.title,
            content_length=result.content_length,
            source_kind=result.source_kind,
        )

    @classmethod
    def failure(cls, context_id: str, url: str, error: str) -> "ExtractionReport":
        return cls(context_id=context_id, ok=False, url=url, error=error)

    @property
    def has_content(self) -> bool:
        return self.ok and bool(self.text) and self.source_kind is not None

    def to_result(self) -> ExtractionResult:
        """Rebuild the result; the model validators re-check the length invariant."""
        return ExtractionResult(
            text=self.text,
            source_url=self.url,
            title=self.title,
            content_length=self.content_length,
            source_kind=self.source_kind,
            context_id=self.context_id,
        )


class HostPayload(BaseModel):
    """What the core hands to the host transport."""

    text: str = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def for_result(
        cls,
        result: ExtractionResult,
        request_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "HostPayload":
        """Payload for a selected result; result fields override caller metadata."""
        return cls(
            text=result.text,
            metadata={
                **(metadata or {}),
                "request_id": request_id,
                "source_url": result.source_url,
                "title": result.title,
                "source_kind": result.source_kind.value,
                "context_id": result.context_id,
                "content_length": result.content_length,
            },
        )


class HostAck(BaseModel):
    """Host acknowledgement of a delivered payload."""

    status: str
    filename: str = ""
    json_file: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
