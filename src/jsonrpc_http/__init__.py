"""JSON-RPC 2.0 client (and a small demonstration server) over HTTP."""

from jsonrpc_http.client.client import RPCClient, RPCClientOptions
from jsonrpc_http.client.transport import HTTPClient
from jsonrpc_http.codec import JSONNumber
from jsonrpc_http.errors import (
    DeadlineExceeded,
    EmptyBatch,
    HTTPStatusError,
    InvalidType,
    JSONRPCError,
    RPCClientError,
    SerializationError,
    TransportFailure,
)
from jsonrpc_http.params import normalize_params
from jsonrpc_http.schemas import RPCErrorObject, RPCRequest, RPCRequests, RPCResponse, RPCResponses

__all__ = [
    "DeadlineExceeded",
    "EmptyBatch",
    "HTTPClient",
    "HTTPStatusError",
    "InvalidType",
    "JSONNumber",
    "JSONRPCError",
    "RPCClient",
    "RPCClientError",
    "RPCClientOptions",
    "RPCErrorObject",
    "RPCRequest",
    "RPCRequests",
    "RPCResponse",
    "RPCResponses",
    "SerializationError",
    "TransportFailure",
    "normalize_params",
]
