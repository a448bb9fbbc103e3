"""HTTP client for shared connection management.

A single managed ``httpx.AsyncClient`` is shared by the speech-synthesis
engine and the OAuth token exchange.
"""

from typing import Any

import httpx

from app.core.logging import get_logger

logger = get_logger(__name__)


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Created once by the DI container, injected where needed, and closed
    at application shutdown.

    Example:
        >>> http_client = HTTPClient(timeout=60.0)
        >>> response = await http_client.post(url, json=payload, headers=headers)
        >>> await http_client.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            transport: Optional transport (tests pass ``httpx.MockTransport``)
        """
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            follow_redirects=True,
            transport=transport,
        )
        logger.info(
            "HTTP client initialized",
            timeout=timeout,
            max_connections=max_connections,
            max_keepalive=max_keepalive_connections,
        )

    @property
    def is_closed(self) -> bool:
        """Whether the underlying client has been closed."""
        return self._client.is_closed

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if not self._client.is_closed:
            await self._client.aclose()
            logger.info("HTTP client closed")


__all__ = ["HTTPClient"]
