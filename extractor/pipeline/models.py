"""Data models for extraction requests and their outcomes."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from extractor.domain.models import ExtractionResult, HostAck, SiteIdentity
from extractor.pages.base import PageSource


@dataclass
class ExtractionRequest:
    """
    One user-triggered extraction.

    Attributes:
        url: Address of the top-level page
        pages: Document contexts to read (top page and any frames)
        tab_id: Optional caller identifier of the tab or window
        frame_urls: Frame URLs known without a page source (for example,
            discovered in the top document but not fetched)
    """

    url: str
    pages: List[PageSource] = field(default_factory=list)
    tab_id: Optional[str] = None
    frame_urls: List[str] = field(default_factory=list)

    @property
    def sibling_frame_urls(self) -> List[str]:
        """Frame URLs for classification: declared ones, then non-top page URLs."""
        urls = list(self.frame_urls)
        for page in self.pages:
            if not page.is_top and page.url not in urls:
                urls.append(page.url)
        return urls


@dataclass
class ExtractionRunResult:
    """
    Outcome of one pipeline run.

    Attributes:
        request_id: Identifier shared by every log line of the run
        url: Requested page
        started_at: UTC timestamp when the run began
        finished_at: UTC timestamp when the run completed
        identity: Site classification (None if classification never ran)
        result: Forwarded extraction result
        ack: Host acknowledgement
        path: "api" or "scrape", the route that produced the result
        contexts_dispatched: Number of document contexts dispatched to
        error_message: User-facing failure description
        duration_seconds: Total run time
    """

    request_id: str
    url: str
    started_at: datetime
    finished_at: datetime
    identity: Optional[SiteIdentity] = None
    result: Optional[ExtractionResult] = None
    ack: Optional[HostAck] = None
    path: Optional[str] = None
    contexts_dispatched: int = 0
    error_message: Optional[str] = None
    duration_seconds: float = 0.0

    def __post_init__(self):
        if self.duration_seconds == 0.0:
            self.duration_seconds = (self.finished_at - self.started_at).total_seconds()

    @property
    def succeeded(self) -> bool:
        return self.result is not None and self.error_message is None
