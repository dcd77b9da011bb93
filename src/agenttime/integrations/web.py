"""Outbound HTTP client used by the web research tools."""

from typing import Any, Dict, Optional

import httpx

from ..agent_core.logger import get_logger

logger = get_logger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class WebClient:
    """Thin wrapper around ``httpx.AsyncClient``.

    A fresh client is opened per request unless one is injected, so concurrent executions
    never share connection state.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_redirects: int = 5,
    ) -> None:
        """
        Args:
            client: Optional shared client (its lifecycle is owned by the caller).
            transport: Optional transport for per-request clients, e.g. ``httpx.MockTransport``.
            max_redirects: Redirect limit for per-request clients.
        """
        self._client = client
        self._transport = transport
        self._max_redirects = max_redirects

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Issue a GET request, following redirects.

        Raises:
            httpx.HTTPError: On network failures and timeouts. Non-2xx statuses are returned,
                not raised.
        """
        request_headers = {"User-Agent": BROWSER_USER_AGENT, **(headers or {})}
        logger.debug(f"GET {url}")
        if self._client is not None:
            return await self._client.get(
                url, params=params, headers=request_headers, timeout=timeout, follow_redirects=True
            )

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=timeout,
            follow_redirects=True,
            max_redirects=self._max_redirects,
        ) as client:
            return await client.get(url, params=params, headers=request_headers)
