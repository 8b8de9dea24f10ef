"""Exception hierarchy for the extraction pipeline.

Strategy-level problems (thin pages, failed API fetches) never surface as
exceptions: strategies return None and the next strategy in the chain runs.
The classes below cover what does reach a caller, plus the fetch errors the
direct-API strategy raises internally before converting them to None.
"""


class ExtractorError(Exception):
    """Base exception for all extraction errors.

    The pipeline catches this class at its boundary and records the message
    on the run result instead of letting it escape.
    """

    pass


class FetchError(ExtractorError):
    """Base class for job-board API request failures."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class FetchHTTPError(FetchError):
    """Job-board API answered with a non-success status, or the connection failed.

    A status_code of 0 means no HTTP response was received at all.
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class FetchTimeoutError(FetchError):
    """Job-board API request did not complete within the configured timeout."""

    pass


class FetchResponseError(FetchError):
    """Job-board API response could not be decoded or had an unexpected shape."""

    pass


class BoardTokenUnresolvedError(ExtractorError):
    """An embedded Greenhouse posting was found but no frame exposed its board token."""

    def __init__(self, job_id: str) -> None:
        super().__init__(
            f"Greenhouse job {job_id} is embedded but no frame exposed a board token"
        )
        self.job_id = job_id


class AggregationError(ExtractorError):
    """Base class for coordinator outcomes that produce no payload."""

    def __init__(self, message: str, request_id: str) -> None:
        super().__init__(message)
        self.request_id = request_id


class AggregationTimeoutError(AggregationError):
    """No execution context reported content before the window closed."""

    def __init__(self, request_id: str, dispatched: int) -> None:
        super().__init__(
            f"No content collected from {dispatched} context(s)", request_id=request_id
        )
        self.dispatched = dispatched


class AggregationSupersededError(AggregationError):
    """A newer extraction request replaced this one before it finished."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            f"Extraction request {request_id} was superseded by a newer request",
            request_id=request_id,
        )


class TransportError(ExtractorError):
    """The host transport failed to deliver a payload or rejected it.

    The message is surfaced to the user verbatim.
    """

    pass
