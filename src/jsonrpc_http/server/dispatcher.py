# jsonrpc_http/server/dispatcher.py
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from jsonrpc_http.errors import INVALID_PARAMS, JSONRPCError, SERVER_ERROR

if TYPE_CHECKING:
    from jsonrpc_http.server.registry import RPCMethodRegistry


async def _call_fn(fn: Callable, params: Optional[Any]):
    """
    Call `fn` (sync or async) with params (None | list | dict).
    Always return concrete result (never a coroutine).
    Raises INVALID_PARAMS if params don't fit the signature.
    """
    if params is None:
        args, kwargs = (), {}
    elif isinstance(params, list):
        args, kwargs = tuple(params), {}
    elif isinstance(params, dict):
        args, kwargs = (), params
    else:
        raise INVALID_PARAMS({"reason": "params must be list or dict or null"})

    try:
        inspect.signature(fn).bind(*args, **kwargs)
    except TypeError as e:
        raise INVALID_PARAMS({"reason": str(e)})

    result = fn(*args, **kwargs)
    # If the function (sync) returned an awaitable, await it.
    if inspect.isawaitable(result):
        return await result
    return result


class RPCDispatcher:
    def __init__(self, registry: "RPCMethodRegistry"):
        self.registry = registry
        self._logger = logging.getLogger("jsonrpc_http.dispatcher")

    async def dispatch(self, method: str, params: Optional[Any], request_id: Any = None):
        wrapper = self.registry.get(method)  # raises METHOD_NOT_FOUND
        if self.registry.settings.strict_mode:
            wrapper.validate_params(params)

        try:
            result = await _call_fn(wrapper.fn, params)
        except JSONRPCError:
            raise
        except Exception as e:
            # Wrap any other python error into a JSON-RPC server error
            self._logger.exception(f"Method {method} failed")
            raise SERVER_ERROR(d={"exception": str(e)}) from e

        return {"result": result, "id": request_id}
