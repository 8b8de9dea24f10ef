"""Blocking HTTP access shared by the direct-API strategy and HTTP page sources.

Callers on the event loop run these methods through asyncio.to_thread.
Requests are attempted exactly once; there are no retries.
"""

import logging
from typing import Any, Dict, Optional

import requests

from extractor.exceptions import (
    FetchError,
    FetchHTTPError,
    FetchResponseError,
    FetchTimeoutError,
)
from extractor.logging import get_logger

logger = get_logger(__name__, component="http")


class HttpClient:
    """Thin wrapper around a requests session with error mapping.

    Attributes:
        timeout: Request timeout in seconds
        user_agent: User-Agent header sent with every request
    """

    def __init__(
        self,
        timeout: int = 30,
        user_agent: str = "JobTextExtractor/0.1",
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds (1-300)
            user_agent: User-Agent header for requests
            session: Pre-built session (tests inject a mock here)

        Raises:
            ValueError: If timeout is outside the valid range or user_agent is empty
        """
        if not 1 <= timeout <= 300:
            raise ValueError(f"Timeout must be between 1 and 300 seconds, got: {timeout}")
        if not user_agent or not user_agent.strip():
            raise ValueError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            FetchHTTPError: On 4xx/5xx status or connection failure
            FetchTimeoutError: On timeout
            FetchResponseError: On an undecodable body
        """
        response = self._request(url, params=params, accept="application/json")
        try:
            data = response.json()
        except ValueError as e:
            logger.warning(
                f"Failed to parse JSON response from {url}",
                extra={"event": "http.fetch.error", "error_type": "JSONDecodeError", "url": url},
            )
            raise FetchResponseError(
                f"Failed to parse JSON response from {url}: {e}", url=url
            ) from e
        return data

    def get_text(self, url: str) -> str:
        """GET a URL and return its decoded body (an HTML page, usually)."""
        response = self._request(url, accept="text/html,application/xhtml+xml")
        return response.text

    def _request(
        self, url: str, params: Optional[Dict[str, str]] = None, accept: str = "*/*"
    ) -> requests.Response:
        try:
            logger.debug(
                f"HTTP GET request to {url}",
                extra={"event": "http.fetch.request", "url": url, "timeout": self.timeout},
            )

            response = self._session.get(
                url,
                params=params,
                headers={"Accept": accept},
                timeout=self.timeout,
            )

            if response.status_code >= 400:
                log_level = logging.WARNING if response.status_code >= 500 else logging.INFO
                logger.log(
                    log_level,
                    f"HTTP {response.status_code} error from {url}",
                    extra={
                        "event": "http.fetch.error",
                        "status_code": response.status_code,
                        "url": url,
                    },
                )
                raise FetchHTTPError(
                    f"HTTP {response.status_code}: {response.reason}",
                    status_code=response.status_code,
                    url=url,
                )

            logger.debug(
                "HTTP request succeeded",
                extra={"event": "http.fetch.succeeded", "status_code": response.status_code, "url": url},
            )
            return response

        except FetchError:
            raise
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "http.fetch.timeout", "url": url, "timeout": self.timeout},
            )
            raise FetchTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"Request to {url} failed: {e}",
                extra={"event": "http.fetch.error", "error_type": type(e).__name__, "url": url},
            )
            raise FetchHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

    def close(self) -> None:
        self._session.close()
