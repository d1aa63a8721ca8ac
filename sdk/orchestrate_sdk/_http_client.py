"""
Internal HTTP client for the Orchestrate SDK.

This module provides the low-level HTTP communication layer.
It is internal to the SDK and should not be used directly by users.

Users should use Client instead, which provides a clean Python API.

Each call performs exactly one exchange. The response body is read inside
the stream context so the connection goes back to the pool on every exit
path, including errors.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from .config import ClientConfig
from .errors import TransportError, error_from_response

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class HttpResponse:
    """A fully read response."""

    headers: httpx.Headers
    body: bytes


class HttpTransport:
    """Internal HTTP client for Orchestrate.

    Owns the httpx connection pool and maps failures onto SDK errors.

    This is an internal class - users should use Client instead.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: Client configuration
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the connection pool."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            auth=httpx.BasicAuth(self._config.auth_token, ""),
            timeout=self._config.timeout,
            transport=self._transport,
        )
        logger.debug(f"Connected to Orchestrate at {self._config.base_url}")

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Disconnected from Orchestrate")

    async def __aenter__(self) -> HttpTransport:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Ensure we're connected and return the httpx client."""
        if self._client is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        expect: int | Collection[int],
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        """Perform one HTTP exchange.

        Args:
            method: HTTP method
            path: Path relative to the base URL, may include a query string
            expect: Success status code(s) for this operation
            params: Extra query parameters
            headers: Extra request headers
            body: Request body

        Returns:
            The read response

        Raises:
            TransportError: If no response was received, or its body could
                not be read
            ServiceError: If the status is not in expect
        """
        client = self._ensure_connected()
        expected = {expect} if isinstance(expect, int) else set(expect)

        request_headers = dict(headers or {})
        if method == "PUT":
            request_headers["Content-Type"] = JSON_CONTENT_TYPE

        logger.debug(f"{method} {path}")
        try:
            async with client.stream(
                method,
                path,
                params=params,
                headers=request_headers,
                content=body,
            ) as response:
                content = await response.aread()
        except httpx.RequestError as e:
            raise TransportError(
                f"{method} {path} failed: {e}",
                method=method,
                path=path,
            ) from e

        logger.debug(f"{method} {path} -> {response.status_code}")

        if response.status_code not in expected:
            raise error_from_response(response.status_code, response.reason_phrase, content)

        return HttpResponse(
            headers=response.headers,
            body=content,
        )
