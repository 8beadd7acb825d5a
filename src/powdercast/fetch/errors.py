"""Exceptions raised by the fetch layer."""

from typing import Optional


class FetchError(Exception):
    """Base class for failed upstream requests.

    Attributes:
        label: Human-readable name of the sub-request that failed
    """

    def __init__(self, message: str, label: str = "HTTP"):
        super().__init__(message)
        self.label = label


class TransportError(FetchError):
    """Network-level failure (connection refused, DNS, timeout). Retried."""


class HTTPStatusError(FetchError):
    """Non-2xx HTTP response.

    Attributes:
        status: HTTP status code
        reason: Reason phrase returned with the status
        retry_after: Raw ``Retry-After`` header value, if any
        detail: Reason text from the response body, if any
    """

    def __init__(
        self,
        label: str,
        status: int,
        reason: str,
        retry_after: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        message = f"{label} {status}: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, label)
        self.status = status
        self.reason = reason
        self.retry_after = retry_after
        self.detail = detail

    @property
    def retryable(self) -> bool:
        """Rate limits and server errors are transient."""
        return is_retryable_status(self.status)


class PayloadError(FetchError):
    """Response body does not have the expected shape."""


class UpstreamError(PayloadError):
    """Upstream answered with an explicit ``{"error": true, "reason": ...}`` body."""

    def __init__(self, label: str, reason: str):
        super().__init__(f"{label}: {reason}", label)
        self.reason = reason


def is_retryable_status(status: int) -> bool:
    """429 and 5xx are retried, every other 4xx is permanent."""
    return status == 429 or status >= 500
