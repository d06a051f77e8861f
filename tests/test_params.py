"""Tests for turning call arguments into a request's params value."""

from dataclasses import dataclass

from pydantic import BaseModel

from jsonrpc_http import JSONNumber, RPCRequest, normalize_params


class Point(BaseModel):
    x: int
    y: int


@dataclass
class Pair:
    left: str
    right: str


def test_no_arguments_omits_params() -> None:
    assert normalize_params() is None
    assert "params" not in RPCRequest.new("ping").to_wire()


def test_single_structured_argument_is_passed_through() -> None:
    mapping = {"userId": 101}
    items = [1, 2, 3]
    point = Point(x=1, y=2)
    pair = Pair("a", "b")

    assert normalize_params(mapping) is mapping
    assert normalize_params(items) is items
    assert normalize_params((1, 2)) == (1, 2)
    assert normalize_params(point) is point
    assert normalize_params(pair) is pair


def test_single_scalar_argument_is_wrapped() -> None:
    assert normalize_params(5) == [5]
    assert normalize_params(2.5) == [2.5]
    assert normalize_params("hello") == ["hello"]
    assert normalize_params(True) == [True]
    assert normalize_params(None) == [None]
    assert normalize_params(JSONNumber("7")) == [JSONNumber("7")]


def test_multiple_arguments_keep_call_order() -> None:
    assert normalize_params(5, 3) == [5, 3]
    assert normalize_params({"a": 1}, [2], "three") == [{"a": 1}, [2], "three"]


def test_dataclass_type_is_not_treated_as_a_record() -> None:
    assert normalize_params(Pair) == [Pair]
