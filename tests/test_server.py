"""End-to-end tests: the RPC client against the demo FastAPI server, in process."""

from __future__ import annotations

import httpx
import pytest
from pydantic import BaseModel

from jsonrpc_http import JSONRPCError, RPCClient, RPCClientOptions, RPCRequest
from jsonrpc_http.main import build_registry
from jsonrpc_http.server.registry import RPCMethodRegistry, RegistrySettings


class User(BaseModel):
    ID: int
    Name: str
    Role: str


@pytest.fixture
def registry() -> RPCMethodRegistry:
    return build_registry(RegistrySettings(strict_mode=True, mount_path="/rpc"))


@pytest.fixture
def http_client(registry):
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=registry.app), base_url="http://testserver")


@pytest.fixture
def client(http_client) -> RPCClient:
    return RPCClient("http://testserver/rpc", RPCClientOptions(http_client=http_client))


@pytest.mark.asyncio
async def test_add(client) -> None:
    resp = await client.call("add", 5, 3)
    assert resp.get_float() == 8.0
    assert resp.id == 0


@pytest.mark.asyncio
async def test_get_user_and_greet_with_named_params(client) -> None:
    user = await client.call_for(User, "getUser", {"userId": 101})
    assert user == User(ID=101, Name="Alice", Role="Admin")

    greeting = await client.call_for(str, "greet", {"name": "Subhrajyoti"})
    assert greeting == "Hello, Subhrajyoti!"


@pytest.mark.asyncio
async def test_unknown_method(client) -> None:
    with pytest.raises(JSONRPCError) as exc_info:
        await client.call("unknownMethod")
    assert exc_info.value.code == -32601

    resp = await client.call_raw(RPCRequest.new("unknownMethod", id=3))
    assert resp.error.code == -32601
    assert resp.id == 3


@pytest.mark.asyncio
async def test_invalid_params(client) -> None:
    with pytest.raises(JSONRPCError) as exc_info:
        await client.call("add", 1)
    assert exc_info.value.code == -32602

    with pytest.raises(JSONRPCError) as exc_info:
        await client.call("add", "one", 2)
    assert exc_info.value.code == -32602

    with pytest.raises(JSONRPCError) as exc_info:
        await client.call("divide", 1, 0)
    assert exc_info.value.data == "division by zero"


@pytest.mark.asyncio
async def test_batch_with_partial_failure(client) -> None:
    responses = await client.call_batch([
        RPCRequest.new("add", 1, 2),
        RPCRequest.new("divide", 1, 0),
        RPCRequest.new("greet", {"name": "batch"}),
    ])

    assert len(responses) == 3
    assert responses.has_error() is True
    assert responses.get_by_id(0).get_float() == 3.0
    assert responses.get_by_id(1).error.code == -32602
    assert responses.get_by_id(2).get_string() == "Hello, batch!"


@pytest.mark.asyncio
async def test_handler_exception_becomes_server_error() -> None:
    registry = RPCMethodRegistry(name="failing")

    @registry.register()
    def explode() -> None:
        raise RuntimeError("kaboom")

    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=registry.app), base_url="http://testserver")
    client = RPCClient("http://testserver/rpc", {"http_client": http_client})

    with pytest.raises(JSONRPCError) as exc_info:
        await client.call("explode")
    assert exc_info.value.code == -32000
    assert exc_info.value.data == {"exception": "kaboom"}


@pytest.mark.asyncio
async def test_async_handler() -> None:
    registry = RPCMethodRegistry(name="async")

    @registry.register("double")
    async def double(x: int) -> int:
        return x * 2

    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=registry.app), base_url="http://testserver")
    client = RPCClient("http://testserver/rpc", {"http_client": http_client})

    assert (await client.call("double", 21)).get_int() == 42


# ──────────────────────────────────────────────────────────────
# Raw HTTP behaviour of the endpoint
# ──────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_parse_error(http_client) -> None:
    resp = await http_client.post("/rpc", content=b"{not json")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700
    assert resp.json()["id"] is None


@pytest.mark.asyncio
async def test_empty_body_and_empty_batch(http_client) -> None:
    resp = await http_client.post("/rpc", content=b"")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600

    resp = await http_client.post("/rpc", json=[])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600


@pytest.mark.asyncio
async def test_missing_method_is_invalid_request(http_client) -> None:
    resp = await http_client.post("/rpc", json={"params": [1], "id": 4})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32600
    assert resp.json()["id"] == 4


@pytest.mark.asyncio
async def test_notifications_get_no_reply(http_client) -> None:
    resp = await http_client.post("/rpc", json={"method": "greet", "params": {"name": "x"}})
    assert resp.status_code == 204

    resp = await http_client.post("/rpc", json=[
        {"method": "greet", "params": {"name": "x"}, "id": None},
        {"method": "add", "params": [1, 1], "id": "abc"},
    ])
    assert resp.status_code == 200
    assert resp.json() == [{"jsonrpc": "2.0", "result": 2, "id": "abc"}]


@pytest.mark.asyncio
async def test_methods_introspection(http_client) -> None:
    resp = await http_client.get("/methods")
    methods = resp.json()["result"]
    assert set(methods) == {"add", "divide", "getUser", "greet"}
    assert methods["add"]["description"] == "Add two numbers."


# ──────────────────────────────────────────────────────────────
# Registry
# ──────────────────────────────────────────────────────────────
def test_duplicate_registration_rejected_when_not_warning() -> None:
    registry = RPCMethodRegistry(settings={"warn_on_duplicate": False})

    @registry.register("ping")
    def ping() -> str:
        return "pong"

    with pytest.raises(ValueError):
        registry.register("ping")(ping)


def test_duplicate_registration_replaces_when_warning() -> None:
    registry = RPCMethodRegistry()
    registry.register("ping")(lambda: "one")
    registry.register("ping")(lambda: "two")
    assert registry.methods["ping"]() == "two"


def test_registries_are_independent() -> None:
    first = RPCMethodRegistry(name="first")
    second = RPCMethodRegistry(name="second")
    first.register("only_first")(lambda: None)
    assert "only_first" in first.methods
    assert "only_first" not in second.methods


def test_settings_type_checked() -> None:
    with pytest.raises(TypeError):
        RPCMethodRegistry(settings=42)
