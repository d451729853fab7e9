"""
PolySms Protocols - Abstract interfaces for dependency injection

These protocols define the contracts that collaborators must fulfill,
so providers can be exercised with any HTTP stack or a test double.
"""

from dataclasses import dataclass
from typing import Dict, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """Status code and decoded body of an HTTP response"""
    status_code: int
    text: str


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Abstract interface for the HTTP transport used by providers.

    Example:
        class MyTransport:
            async def post(self, url, headers, body):
                resp = await session.post(url, headers=headers, data=body)
                return TransportResponse(resp.status, await resp.text())
    """

    async def post(
        self,
        url: str,
        headers: Dict[str, str],
        body: str,
    ) -> TransportResponse:
        """
        Send a POST request.

        Args:
            url: Fully qualified URL, including any signed query string
            headers: Request headers, sent as given
            body: Request body (may be empty), sent UTF-8 encoded

        Returns:
            TransportResponse with status and body text

        Raises:
            httpx.HTTPError or TransportError when no response was received
        """
        ...
