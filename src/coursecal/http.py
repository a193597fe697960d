"""Transport-agnostic HTTP client protocol and response types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class StoreRequestError(Exception):
    """Raised when a document store request fails with a non-2xx status code."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class StoreAuthenticationError(StoreRequestError):
    """Raised when the store rejects the credentials (401 Unauthorized, 403 Forbidden).

    The ID token has expired or lacks access to the project. A new token
    must be obtained before retrying.
    """

    pass


class StoreRateLimitError(StoreRequestError):
    """Raised when the store quota is exceeded (429 Too Many Requests).

    Callers should back off before retrying.
    """

    pass


class StoreServerError(StoreRequestError):
    """Raised when the store returns an error (5xx status codes).

    Temporary server-side problem; the operation may be retried.
    """

    pass


class StoreNotFoundError(StoreRequestError):
    """Raised when a document or collection is not found (404 Not Found)."""

    pass


class StoreConnectionError(StoreRequestError):
    """Raised when a network connection error occurs (timeout, network unreachable, etc)."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        """Initialize connection error with optional status code (0 for network errors)."""
        super().__init__(message, status_code)


@dataclass
class HttpResponse:
    """Transport-agnostic HTTP response with pre-parsed JSON data.

    Implementations should parse JSON eagerly so that .json() is always sync.
    """

    status_code: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Return pre-parsed JSON data."""
        return self.data

    def error_message(self) -> str:
        """Return the store's error message, falling back to the status line."""
        if isinstance(self.data, dict):
            error = self.data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return f"HTTP {self.status_code}: {error['message']}"
        return f"HTTP {self.status_code}"

    def raise_for_status(self) -> None:
        """Raise appropriate exception if the response status is 4xx or 5xx.

        Raises:
            StoreAuthenticationError: For 401 or 403 status codes
            StoreRateLimitError: For 429 status code
            StoreNotFoundError: For 404 status code
            StoreServerError: For 5xx status codes
            StoreRequestError: For other 4xx status codes
        """
        if self.status_code < 400:
            return
        message = self.error_message()
        if self.status_code in (401, 403):
            raise StoreAuthenticationError(message, status_code=self.status_code)
        elif self.status_code == 429:
            raise StoreRateLimitError(message, status_code=self.status_code)
        elif self.status_code == 404:
            raise StoreNotFoundError(message, status_code=self.status_code)
        elif self.status_code >= 500:
            raise StoreServerError(message, status_code=self.status_code)
        else:
            raise StoreRequestError(message, status_code=self.status_code)


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP transport backends.

    Implementations must parse JSON eagerly in request() and return it
    via HttpResponse.data so that callers can use .json() synchronously.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> HttpResponse: ...

    async def close(self) -> None: ...
