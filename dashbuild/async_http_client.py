"""
Async Secure HTTP Client Wrapper

One pooled httpx.AsyncClient per collection run, shared by every area.
SSL verification is always on and every request carries a timeout.

Usage:
    from dashbuild.async_http_client import AsyncSecureHTTPClient

    async with AsyncSecureHTTPClient(headers=auth_headers, request_hooks=[count_request]) as http:
        response = await http.get("https://api.github.com/repos/o/r")
"""

from collections.abc import Awaitable, Callable

import httpx

RequestHook = Callable[[httpx.Request], Awaitable[None]]


class AsyncSecureHTTPClient:
    """
    Pooled async GET client with enforced SSL verification.

    Request hooks run for every request the pool sends (redirect hops
    included), before the request reaches the network.
    """

    DEFAULT_TIMEOUT = 30  # seconds
    DEFAULT_MAX_CONNECTIONS = 20
    DEFAULT_MAX_KEEPALIVE = 10

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive_connections: int = DEFAULT_MAX_KEEPALIVE,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        request_hooks: list[RequestHook] | None = None,
    ):
        """
        Args:
            headers: Sent with every request (auth, accept, API version)
            timeout: Per-request timeout in seconds
            max_connections: Pool size across all concurrent areas
            max_keepalive_connections: Idle connections kept open
            http2: Multiplex requests over HTTP/2
            transport: Transport override (httpx.MockTransport in tests)
            request_hooks: Async callables invoked with each outgoing request
        """
        self._client_kwargs = {
            "headers": dict(headers or {}),
            "timeout": httpx.Timeout(timeout),
            "limits": httpx.Limits(
                max_connections=max_connections, max_keepalive_connections=max_keepalive_connections
            ),
            "http2": http2,
            "transport": transport,
            "event_hooks": {"request": list(request_hooks or [])},
        }
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncSecureHTTPClient":
        self.client = httpx.AsyncClient(verify=True, follow_redirects=True, **self._client_kwargs)
        return self

    async def __aexit__(self, *args) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """
        GET with the pool's defaults; `headers` are merged over the defaults.

        Raises:
            RuntimeError: If used outside `async with`
            httpx.RequestError: On network failures and timeouts
        """
        if self.client is None:
            raise RuntimeError("Client not initialized. Use 'async with AsyncSecureHTTPClient()' context manager")

        return await self.client.get(url, headers=headers)
