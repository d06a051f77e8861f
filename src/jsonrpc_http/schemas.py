# jsonrpc_http/schemas.py
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    model_validator,
)

from jsonrpc_http import codec
from jsonrpc_http.codec import JSONNumber
from jsonrpc_http.errors import JSONRPCError
from jsonrpc_http.params import normalize_params

T = TypeVar("T")


def _wire_int(value: Any) -> Any:
    if isinstance(value, JSONNumber):
        return value.int64()
    return value


# Integers on the wire arrive as JSONNumber from codec.decode_json
WireInt = Annotated[int, BeforeValidator(_wire_int)]


class _WireModel(BaseModel):
    """
    Base for JSON-RPC messages.

    Unknown keys are rejected unless validation runs with
    ``context={"allow_unknown_fields": True}``. The context reaches nested
    models, so the check covers the error object as well.
    """

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _reject_unknown_fields(cls, data: Any, info: ValidationInfo) -> Any:
        allow = (info.context or {}).get("allow_unknown_fields", False)
        if isinstance(data, dict) and not allow:
            unknown = sorted(set(data) - set(cls.model_fields))
            if unknown:
                raise ValueError(f"unknown field(s) {unknown} in {cls.__name__}")
        return data


class RPCRequest(_WireModel):
    jsonrpc: str = Field(default="2.0")
    method: str = Field(min_length=1)
    params: Optional[Any] = None  # None => field omitted on the wire
    id: WireInt = 0

    @classmethod
    def new(cls, method: str, *params: Any, id: int = 0) -> "RPCRequest":
        return cls(method=method, params=normalize_params(*params), id=id)

    def to_wire(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            payload["params"] = self.params
        payload["id"] = self.id
        return payload


RPCRequests = List[RPCRequest]


class RPCErrorObject(_WireModel):
    code: WireInt
    message: str
    data: Optional[Any] = None

    def to_exception(self, response: Optional["RPCResponse"] = None) -> JSONRPCError:
        return JSONRPCError(code=self.code, message=self.message, data=self.data, response=response)


class RPCResponse(_WireModel):
    jsonrpc: str = Field(default="2.0")
    result: Optional[Any] = None
    error: Optional[RPCErrorObject] = None
    id: Optional[WireInt] = None

    @model_validator(mode="after")
    def _result_or_error(self) -> "RPCResponse":
        if self.result is not None and self.error is not None:
            raise ValueError("response carries both result and error")
        return self

    # ───── Typed result accessors ─────
    def get_int(self) -> int:
        return codec.get_int(self.result)

    def get_float(self) -> float:
        return codec.get_float(self.result)

    def get_bool(self) -> bool:
        return codec.get_bool(self.result)

    def get_string(self) -> str:
        return codec.get_string(self.result)

    def get_object(self, target: Type[T]) -> T:
        return codec.get_object(self.result, target)


class RPCResponses(List[RPCResponse]):
    """Responses of one batch. Servers may reorder them; match on id."""

    def as_map(self) -> Dict[Optional[int], RPCResponse]:
        return {r.id: r for r in self}

    def get_by_id(self, id: int) -> Optional[RPCResponse]:
        for r in self:
            if r.id == id:
                return r
        return None

    def has_error(self) -> bool:
        return any(r.error is not None for r in self)


_response_list = TypeAdapter(List[RPCResponse])


def parse_response(data: Any, *, allow_unknown_fields: bool = False) -> RPCResponse:
    return RPCResponse.model_validate(data, context={"allow_unknown_fields": allow_unknown_fields})


def parse_responses(data: Any, *, allow_unknown_fields: bool = False) -> RPCResponses:
    items = _response_list.validate_python(data, context={"allow_unknown_fields": allow_unknown_fields})
    return RPCResponses(items)
