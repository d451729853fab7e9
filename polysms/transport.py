"""
PolySms Transport - httpx-based HTTP transport for SMS providers

HttpxTransport either owns a shared ``httpx.AsyncClient`` (pass one in, or
use the transport as an async context manager) or opens a short-lived
client per request.
"""

import logging
from typing import Dict, Optional

import httpx

from .protocols import TransportResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpxTransport:
    """
    POST-only transport used by the built-in providers.

    Example:
        async with HttpxTransport(timeout=10.0) as transport:
            resp = await transport.post(url, headers, body)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> "HttpxTransport":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    async def post(
        self,
        url: str,
        headers: Dict[str, str],
        body: str,
    ) -> TransportResponse:
        """Send a POST request and return status and body text"""
        content = body.encode("utf-8") if body else None
        logger.debug(f"POST {url.split('?', 1)[0]}")

        if self._client is not None:
            response = await self._client.post(
                url, headers=headers, content=content, timeout=self.timeout,
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, content=content)

        logger.debug(f"HTTP response status: {response.status_code}")
        return TransportResponse(status_code=response.status_code, text=response.text)
