"""HTTP client for a Manticore-compatible JSON search endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from scholar.domain.search import IndexUnavailable

logger = logging.getLogger(__name__)


class SearchIndexClient:
    """Thin wrapper around ``POST /search``.

    Every failure mode (connect, timeout, HTTP status, bad payload) is
    reported as ``IndexUnavailable`` so callers have one thing to catch.
    """

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 0.75,
        query_timeout_ms: int = 1500,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(
            timeout=query_timeout_ms / 1000,
            connect=connect_timeout,
        )
        self._deadline = query_timeout_ms / 1000 + connect_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Run one search and return the decoded response body."""
        try:
            client = await self._get_client()
            response = await asyncio.wait_for(
                client.post("/search", json=payload),
                timeout=self._deadline,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.ConnectError as e:
            logger.warning("Search index connection failed: %s", e)
            raise IndexUnavailable(reason="connect") from e
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning("Search index timeout: %s", e)
            raise IndexUnavailable(reason="timeout") from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Search index returned error %d: %s",
                e.response.status_code,
                e.response.text[:200] if e.response.text else "no body",
            )
            raise IndexUnavailable(reason=f"http_{e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Search index request failed (%s): %s",
                type(e).__name__,
                e,
            )
            raise IndexUnavailable(reason=type(e).__name__) from e

        if not isinstance(body, dict):
            raise IndexUnavailable(reason="malformed_payload")
        if body.get("error"):
            logger.warning("Search index reported error: %s", str(body["error"])[:200])
            raise IndexUnavailable(reason="index_error")
        return body

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.warning("Search index health check failed: %s", e)
            return False
