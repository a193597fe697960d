"""httpx-based implementation of the HttpClient protocol."""

from __future__ import annotations

from typing import Any

import httpx

from .const import USER_AGENT
from .http import HttpResponse, StoreConnectionError


class HttpxHttpClient:
    """HttpClient implementation backed by httpx.AsyncClient.

    Args:
        bearer_token: Optional ID token sent as ``Authorization: Bearer``.
        httpx_client: Optional pre-configured ``httpx.AsyncClient``.  When
            provided, the caller retains ownership and must close it.
    """

    def __init__(
        self,
        bearer_token: str | None = None,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = httpx_client is None
        headers = {"User-Agent": USER_AGENT}
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"
        self._client = httpx_client or httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(30.0, read=60.0),
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> HttpResponse:
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
            )
        except httpx.TransportError as e:
            raise StoreConnectionError(f"{method.upper()} {url} failed: {e}") from e
        try:
            data = response.json()
        except (ValueError, UnicodeDecodeError):
            data = None
        return HttpResponse(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers),
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
