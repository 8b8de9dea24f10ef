"""Document context abstraction."""

from abc import ABC, abstractmethod

TOP_CONTEXT_ID = "top"


class PageSource(ABC):
    """One document context: the top page or a nested frame.

    snapshot() returns the document's current HTML. Sources backed by a live
    renderer return a fresh serialization on each call, so repeated
    snapshots are how readiness detection observes the page settling.

    Attributes:
        url: Address of the document
        context_id: Opaque identifier, unique within one extraction request
    """

    def __init__(self, url: str, context_id: str = TOP_CONTEXT_ID) -> None:
        self.url = url
        self.context_id = context_id

    @property
    def is_top(self) -> bool:
        return self.context_id == TOP_CONTEXT_ID

    @abstractmethod
    async def snapshot(self) -> str:
        """Current HTML of the document."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r}, context_id={self.context_id!r})"
