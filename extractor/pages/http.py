"""Page source fetched over plain HTTP (no script execution)."""

import asyncio
from typing import Optional

from extractor.http_client import HttpClient

from .base import TOP_CONTEXT_ID, PageSource


class HttpPage(PageSource):
    """Fetches the document once and serves the same HTML afterwards.

    Fetch errors (FetchError subclasses) propagate from snapshot(); the
    execution context adapter turns them into a failed report.
    """

    def __init__(self, url: str, client: HttpClient, context_id: str = TOP_CONTEXT_ID) -> None:
        super().__init__(url, context_id)
        self.client = client
        self._html: Optional[str] = None

    async def snapshot(self) -> str:
        if self._html is None:
            self._html = await asyncio.to_thread(self.client.get_text, self.url)
        return self._html
