"""
HTTP Manager Module

Builds configured httpx clients for the store backend and Firebase.
"""

import httpx
from typing import Optional

from storefront.core.config import config
from storefront.core.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_CONNECTIONS,
)


class HTTPManager:
    """
    HTTP client factory.

    Features:
    - Configurable timeouts (backend.timeout)
    - SSL verification control (backend.verify_ssl)
    - Connection limits
    - Optional injected transport (used by tests)

    Example:
        >>> http_manager = HTTPManager()
        >>> async with http_manager.get_client() as client:
        ...     response = await client.get('https://api.example.com/health')
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize HTTP manager.

        Args:
            transport: Transport handed to every client (None = real network)
        """
        self._transport = transport
        self._limits = httpx.Limits(
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            max_connections=MAX_CONNECTIONS
        )

    def get_client(
        self,
        verify_ssl: Optional[bool] = None,
        timeout: Optional[float] = None,
        follow_redirects: bool = True
    ) -> httpx.AsyncClient:
        """
        Get configured HTTP client.

        Args:
            verify_ssl: Whether to verify SSL certificates (None = use config)
            timeout: Request timeout in seconds (None = use config)
            follow_redirects: Whether to follow redirects

        Returns:
            Configured AsyncClient; use it as an async context manager
        """
        if verify_ssl is None:
            verify_ssl = config.get('backend.verify_ssl', default=True, expected_type=bool)

        if timeout is None:
            timeout = config.get('backend.timeout', default=DEFAULT_REQUEST_TIMEOUT, expected_type=float)

        timeout_config = httpx.Timeout(timeout=timeout, connect=DEFAULT_CONNECT_TIMEOUT)

        if self._transport is not None:
            return httpx.AsyncClient(
                transport=self._transport,
                follow_redirects=follow_redirects,
                timeout=timeout_config,
            )

        return httpx.AsyncClient(
            verify=verify_ssl,
            follow_redirects=follow_redirects,
            timeout=timeout_config,
            limits=self._limits,
            http2=True
        )

    def __repr__(self) -> str:
        kind = "injected" if self._transport is not None else "network"
        return f"HTTPManager(transport={kind})"


# Global singleton instance
http_manager = HTTPManager()
