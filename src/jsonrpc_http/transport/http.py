# jsonrpc_http/transport/http.py
import json
import logging
from typing import Any, Optional, Union

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from jsonrpc_http.errors import INVALID_REQUEST, PARSE_ERROR, JSONRPCError
from jsonrpc_http.server.dispatcher import RPCDispatcher


class IncomingRequest(BaseModel):
    """Server view of a request: ids may be strings, and a missing id means notification."""

    jsonrpc: Optional[str] = None
    method: str = Field(min_length=1)
    params: Optional[Any] = None
    id: Optional[Union[int, str]] = None


class HTTPTransport:
    def __init__(self, dispatcher: RPCDispatcher):
        self.dispatcher = dispatcher
        self._logger = logging.getLogger("jsonrpc_http.transport")

    async def handle(self, request: Request) -> Response:
        raw = await request.body()
        if not raw:
            return self._error_response(INVALID_REQUEST("empty request body"), None, 400)

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return self._error_response(PARSE_ERROR(str(e)), None, 400)

        if isinstance(payload, list):
            if not payload:
                return self._error_response(INVALID_REQUEST("empty batch"), None, 400)
            responses = [r for r in [await self._handle_single(item) for item in payload] if r]
            return JSONResponse(responses) if responses else Response(status_code=204)

        resp = await self._handle_single(payload)
        return Response(status_code=204) if resp is None else JSONResponse(resp)

    async def _handle_single(self, item: Any) -> Optional[dict]:
        raw_id = item.get("id") if isinstance(item, dict) else None
        try:
            req = IncomingRequest.model_validate(item)
        except ValidationError as e:
            return self._make_response(error=INVALID_REQUEST(str(e)), id=raw_id)

        if req.id is None:  # notification
            try:
                await self.dispatcher.dispatch(req.method, req.params)
            except JSONRPCError as e:
                self._logger.debug(f"Notification {req.method} failed: {e}")
            return None

        try:
            result = await self.dispatcher.dispatch(req.method, req.params, req.id)
        except JSONRPCError as e:
            return self._make_response(error=e, id=req.id)
        return self._make_response(result=result["result"], id=req.id)

    def _make_response(self, result=None, error: Optional[JSONRPCError] = None, id=None) -> dict:
        response: dict = {"jsonrpc": "2.0"}
        if error is not None:
            response["error"] = jsonable_encoder(error.to_dict())
        else:
            response["result"] = jsonable_encoder(result)
        response["id"] = id
        return response

    def _error_response(self, error: JSONRPCError, id, status=400):
        return JSONResponse(status_code=status, content=self._make_response(error=error, id=id))
