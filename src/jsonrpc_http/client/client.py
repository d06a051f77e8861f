# jsonrpc_http/client/client.py
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Type, TypeVar

import anyio
import httpx
from pydantic import ValidationError

from jsonrpc_http.client.transport import HTTPClient, default_http_client
from jsonrpc_http.codec import decode_json, encode_json
from jsonrpc_http.errors import (
    DeadlineExceeded,
    EmptyBatch,
    HTTPStatusError,
    SerializationError,
    TransportFailure,
)
from jsonrpc_http.params import normalize_params
from jsonrpc_http.schemas import (
    RPCRequest,
    RPCResponse,
    RPCResponses,
    parse_response,
    parse_responses,
)

T = TypeVar("T")

logger = logging.getLogger("jsonrpc_http.client")


# ──────────────────────────────────────────────────────────────
# Options
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RPCClientOptions:
    http_client: Optional[HTTPClient] = None
    custom_headers: Mapping[str, str] = field(default_factory=dict)
    allow_unknown_fields: bool = False
    default_request_id: int = 0


def _redact(url: httpx.URL) -> str:
    if url.password:
        url = url.copy_with(password="xxxxx")
    return str(url)


# ──────────────────────────────────────────────────────────────
# Client
# ──────────────────────────────────────────────────────────────
class RPCClient:
    """
    JSON-RPC 2.0 client over HTTP POST.

    The client can be shared between tasks. Its only state is the options,
    copied at construction and never changed, and the HTTP client, which
    owns connection pooling.

    Every `call()` sends `default_request_id`, so concurrent calls from one
    client carry the same id. Each call has its own HTTP exchange, so the
    reply still reaches the right caller; this would not hold on a
    connection that multiplexes several requests.
    """

    def __init__(
        self,
        endpoint: str,
        options: RPCClientOptions | dict | None = None,
    ):
        # normalize options: accept dataclass or dict or None
        if options is None:
            options = RPCClientOptions()
        elif isinstance(options, dict):
            options = RPCClientOptions(**options)
        elif not isinstance(options, RPCClientOptions):
            raise TypeError("options must be RPCClientOptions | dict | None")

        self._endpoint = endpoint
        self._url = httpx.URL(endpoint)
        self._headers: Mapping[str, str] = MappingProxyType(dict(options.custom_headers))
        self._allow_unknown_fields = options.allow_unknown_fields
        self._default_request_id = options.default_request_id
        self._owns_http_client = options.http_client is None
        self._http_client: HTTPClient = options.http_client or default_http_client()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # ───── Public API ─────
    async def call(self, method: str, *params: Any, timeout: Optional[float] = None) -> RPCResponse:
        """
        Call `method` and return its response.

        A JSON-RPC error in the response is raised as `JSONRPCError`, with
        the response attached as `.response`.
        """
        request = self._build_request(method, params)
        return await self._call(request, raise_protocol_errors=True, timeout=timeout)

    async def call_raw(self, request: RPCRequest, *, timeout: Optional[float] = None) -> RPCResponse:
        """Send `request` unchanged. A JSON-RPC error is left on the response."""
        return await self._call(request, raise_protocol_errors=False, timeout=timeout)

    async def call_for(
        self,
        target: Type[T],
        method: str,
        *params: Any,
        timeout: Optional[float] = None,
    ) -> T:
        """Call `method` and decode its result into `target`."""
        response = await self.call(method, *params, timeout=timeout)
        return response.get_object(target)

    async def call_batch(
        self,
        requests: Sequence[RPCRequest],
        *,
        timeout: Optional[float] = None,
    ) -> RPCResponses:
        """
        Send `requests` as one batch with ids renumbered 0..n-1 in order.

        The caller's request objects are left untouched. Errors of single
        requests stay on their responses; see `RPCResponses.has_error()`.
        """
        if not requests:
            raise EmptyBatch()
        numbered = [req.model_copy(update={"id": i}) for i, req in enumerate(requests)]
        return await self._call_batch(numbered, timeout=timeout)

    async def call_batch_raw(
        self,
        requests: Sequence[RPCRequest],
        *,
        timeout: Optional[float] = None,
    ) -> RPCResponses:
        """Send `requests` as one batch, keeping their ids."""
        if not requests:
            raise EmptyBatch()
        return await self._call_batch(list(requests), timeout=timeout)

    async def aclose(self) -> None:
        # an injected http_client belongs to the caller
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "RPCClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ───── Dispatch ─────
    def _build_request(self, method: str, params: Tuple[Any, ...]) -> RPCRequest:
        try:
            return RPCRequest(
                method=method,
                params=normalize_params(*params),
                id=self._default_request_id,
            )
        except ValidationError as e:
            raise SerializationError(f"rpc call {method}() on {_redact(self._url)}: {e}") from e

    async def _call(
        self,
        request: RPCRequest,
        *,
        raise_protocol_errors: bool,
        timeout: Optional[float],
    ) -> RPCResponse:
        response = await self._dispatch(
            request.to_wire(),
            parse_response,
            label=f"{request.method}()",
            timeout=timeout,
        )
        if raise_protocol_errors and response.error is not None:
            raise response.error.to_exception(response)
        return response

    async def _call_batch(self, requests: Sequence[RPCRequest], *, timeout: Optional[float]) -> RPCResponses:
        return await self._dispatch(
            [req.to_wire() for req in requests],
            parse_responses,
            label=f"batch of {len(requests)}",
            timeout=timeout,
        )

    async def _dispatch(
        self,
        payload: Any,
        parse: Callable[..., Any],
        *,
        label: str,
        timeout: Optional[float],
    ) -> Any:
        http_request = self._new_request(payload, label)
        try:
            if timeout is None:
                status, body = await self._send(http_request, label)
            else:
                with anyio.fail_after(timeout):
                    status, body = await self._send(http_request, label)
        except TimeoutError as e:
            raise DeadlineExceeded(f"rpc call {label} on {_redact(self._url)}: deadline exceeded") from e

        logger.debug(f"rpc call {label} on {_redact(self._url)} -> HTTP {status}")

        decoded = None
        decode_error: Optional[Exception] = None
        try:
            decoded = parse(decode_json(body), allow_unknown_fields=self._allow_unknown_fields)
        except (ValueError, RecursionError) as e:  # JSONDecodeError, UnicodeDecodeError and ValidationError alike
            decode_error = e

        if status >= 400:
            raise HTTPStatusError(status, response=decoded) from decode_error
        if decode_error is not None:
            raise SerializationError(f"rpc call {label} decode error: {decode_error}") from decode_error
        return decoded

    def _new_request(self, payload: Any, label: str) -> httpx.Request:
        try:
            body = encode_json(payload)
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(f"rpc call {label} on {_redact(self._url)}: {e}") from e

        headers = httpx.Headers({"Content-Type": "application/json", "Accept": "application/json"})
        host = None
        for key, value in self._headers.items():
            if key == "Host":
                host = value
            else:
                headers[key] = value

        request = httpx.Request("POST", self._url, headers=headers, content=body)
        if host is not None:
            # httpx derives Host from the URL; override it rather than add a second one
            request.headers["Host"] = host
        return request

    async def _send(self, http_request: httpx.Request, label: str) -> Tuple[int, bytes]:
        where = _redact(http_request.url)
        try:
            http_response = await self._http_client.send(http_request)
        except httpx.TimeoutException as e:
            raise DeadlineExceeded(f"rpc call {label} on {where}: {e}") from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"rpc call {label} on {where}: {e}") from e

        try:
            body = await http_response.aread()
        except httpx.HTTPError as e:
            raise TransportFailure(f"rpc call {label} on {where}: reading body: {e}") from e
        finally:
            await http_response.aclose()
        return http_response.status_code, body
