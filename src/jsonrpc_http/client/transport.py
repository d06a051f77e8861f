# jsonrpc_http/client/transport.py
from typing import Optional, Protocol, runtime_checkable

import httpx

from jsonrpc_http.config import DEFAULT_TIMEOUT


@runtime_checkable
class HTTPClient(Protocol):
    """
    The one capability the RPC client needs from the HTTP layer: send a
    fully built request, get a response back or an exception.

    `httpx.AsyncClient` already satisfies this. Tests plug in an
    AsyncClient over `httpx.MockTransport` or `httpx.ASGITransport`.
    """

    async def send(self, request: httpx.Request) -> httpx.Response:
        ...


def default_http_client(timeout: Optional[float] = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Pooling client used when the caller does not inject one."""
    return httpx.AsyncClient(timeout=timeout)
