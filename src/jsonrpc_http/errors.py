# jsonrpc_http/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jsonrpc_http.schemas import RPCResponse


# ──────────────────────────────────────────────────────────────
# Protocol-level error (lives inside a well-formed response body)
# ──────────────────────────────────────────────────────────────
@dataclass
class JSONRPCError(Exception):
    code: int
    message: str
    data: Any = None
    response: RPCResponse | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self):
        base = {"code": self.code, "message": self.message}
        if self.data is not None:
            base["data"] = self.data
        return base


# Some common JSON-RPC 2.0 error codes (extend as needed)
PARSE_ERROR = lambda d=None: JSONRPCError(-32700, "Parse error", d)
INVALID_REQUEST = lambda d=None: JSONRPCError(-32600, "Invalid Request", d)
METHOD_NOT_FOUND = lambda d=None: JSONRPCError(-32601, "Method not found", d)
INVALID_PARAMS = lambda d=None: JSONRPCError(-32602, "Invalid params", d)
INTERNAL_ERROR = lambda d=None: JSONRPCError(-32603, "Internal error", d)
SERVER_ERROR = lambda code=-32000, d=None: JSONRPCError(code, "Server error", d)


# ──────────────────────────────────────────────────────────────
# Client-side failures
# ──────────────────────────────────────────────────────────────
class RPCClientError(Exception):
    """Base class for failures raised by the client outside of JSON-RPC errors."""


class SerializationError(RPCClientError):
    """Request could not be encoded, or a response/result could not be decoded."""


class TransportFailure(RPCClientError):
    """The HTTP exchange itself did not complete."""


class DeadlineExceeded(TransportFailure):
    """The exchange did not finish before the caller's deadline."""


class HTTPStatusError(RPCClientError):
    """
    The server answered with an HTTP status >= 400.

    `response` holds the decoded body when it parsed as JSON-RPC, so a
    protocol error the server sent alongside the status is still visible.
    """

    def __init__(self, status_code: int, response: Any = None):
        super().__init__(f"rpc error status {status_code}")
        self.status_code = status_code
        self.response = response


class EmptyBatch(RPCClientError, ValueError):
    def __init__(self, message: str = "empty request list"):
        super().__init__(message)


class InvalidType(RPCClientError, TypeError):
    """A typed accessor was used on a result of another JSON kind."""
