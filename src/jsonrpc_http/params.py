# jsonrpc_http/params.py
import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from jsonrpc_http.codec import JSONNumber


def _is_structured(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, JSONNumber)):
        return False
    if isinstance(value, (Mapping, Sequence, BaseModel)):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def normalize_params(*params: Any) -> Any:
    """
    Turn call arguments into the value for a request's `params` field.

    - no arguments: None (the field is left out of the request)
    - a single mapping / sequence / model / dataclass: sent as-is, so a
      method taking named parameters can be called with one object
    - a single scalar: wrapped as a one-element list
    - several arguments: a list in call order
    """
    if not params:
        return None
    if len(params) == 1 and _is_structured(params[0]):
        return params[0]
    return list(params)
