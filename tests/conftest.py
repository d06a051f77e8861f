"""Shared helpers: RPC clients wired to in-process fake HTTP servers."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from jsonrpc_http import RPCClient, RPCClientOptions

ENDPOINT = "http://rpc.test/rpc"


class RecordingServer:
    """Answers every POST with a canned reply and keeps the requests it saw."""

    def __init__(self, body: Any = None, status_code: int = 200, raw: bytes | None = None):
        self.body = body
        self.status_code = status_code
        self.raw = raw
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_payload(self) -> Any:
        return json.loads(self.requests[-1].content)


def make_client(handler: Callable[[httpx.Request], Any], **options: Any) -> RPCClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RPCClient(ENDPOINT, RPCClientOptions(http_client=http_client, **options))


@pytest.fixture
def server_factory() -> Callable[..., RecordingServer]:
    return RecordingServer


@pytest.fixture
def client_factory() -> Callable[..., RPCClient]:
    return make_client
