"""Page sources whose HTML is already known or stored on disk."""

import asyncio
from pathlib import Path
from typing import Optional, Union

from .base import TOP_CONTEXT_ID, PageSource


class StaticPage(PageSource):
    """A document whose HTML never changes."""

    def __init__(self, html: str, url: str, context_id: str = TOP_CONTEXT_ID) -> None:
        super().__init__(url, context_id)
        self.html = html

    async def snapshot(self) -> str:
        return self.html


class FilePage(PageSource):
    """A saved document (for example an outerHTML dump), read once on first snapshot.

    Args:
        path: File holding the HTML
        url: Address the document was saved from; defaults to the file URI
        context_id: Context identifier
    """

    def __init__(
        self,
        path: Union[str, Path],
        url: Optional[str] = None,
        context_id: str = TOP_CONTEXT_ID,
    ) -> None:
        self.path = Path(path)
        super().__init__(url or self.path.resolve().as_uri(), context_id)
        self._html: Optional[str] = None

    async def snapshot(self) -> str:
        if self._html is None:
            self._html = await asyncio.to_thread(
                self.path.read_text, encoding="utf-8", errors="replace"
            )
        return self._html
