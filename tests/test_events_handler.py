from __future__ import annotations

import functools
from typing import Any, Optional, Union

import pytest

from eventhub.events import ArgumentMismatch, HandlerRef


def greet(name: str, times: int = 1) -> str:
    return name * times


def maybe(value: Optional[int]) -> Any:
    return value


def either(value: Union[int, str]) -> Any:
    return value


def numbers(*values: float) -> float:
    return sum(values)


def rows(items: list[int]) -> int:
    return len(items)


def keyword_required(msg: str, *, level: int) -> None:
    pass


def test_invoke_returns_handler_result():
    assert HandlerRef(greet).invoke(["ab", 2]) == "abab"
    assert HandlerRef(greet).invoke(["ab"]) == "ab"


def test_invoke_rejects_wrong_arity():
    ref = HandlerRef(greet)
    with pytest.raises(ArgumentMismatch):
        ref.invoke([])
    with pytest.raises(ArgumentMismatch):
        ref.invoke(["a", 1, 2])


def test_invoke_rejects_wrong_type():
    with pytest.raises(ArgumentMismatch) as excinfo:
        HandlerRef(greet).invoke(["a", "2"], event_name="hello")
    assert excinfo.value.handler is greet
    assert "times" in str(excinfo.value)
    assert "hello" in str(excinfo.value)


def test_optional_and_union_annotations():
    assert HandlerRef(maybe).invoke([None]) is None
    assert HandlerRef(maybe).invoke([3]) == 3
    with pytest.raises(ArgumentMismatch):
        HandlerRef(maybe).invoke(["3"])
    assert HandlerRef(either).invoke(["x"]) == "x"
    with pytest.raises(ArgumentMismatch):
        HandlerRef(either).invoke([1.5])


def test_var_positional_elements_are_checked():
    ref = HandlerRef(numbers)
    assert ref.invoke([1, 2.5]) == 3.5
    assert ref.invoke([]) == 0
    with pytest.raises(ArgumentMismatch):
        ref.invoke([1, "2"])


def test_generic_annotation_matches_origin():
    ref = HandlerRef(rows)
    assert ref.invoke([[1, 2]]) == 2
    with pytest.raises(ArgumentMismatch):
        ref.invoke([(1, 2)])


def test_required_keyword_only_parameter_never_binds():
    with pytest.raises(ArgumentMismatch):
        HandlerRef(keyword_required).invoke(["msg"])


def test_unannotated_parameters_accept_anything():
    ref = HandlerRef(lambda a, b: (a, b))
    assert ref.invoke([1, "x"]) == (1, "x")


def test_handler_exceptions_are_not_wrapped():
    def broken(msg: str):
        raise KeyError(msg)

    with pytest.raises(KeyError):
        HandlerRef(broken).invoke(["x"])


def test_partial_and_callable_objects():
    class Sink:
        def __init__(self):
            self.seen = []

        def __call__(self, value: int):
            self.seen.append(value)

    sink = Sink()
    HandlerRef(sink).invoke([4])
    assert sink.seen == [4]
    with pytest.raises(ArgumentMismatch):
        HandlerRef(sink).invoke(["4"])

    ref = HandlerRef(functools.partial(greet, "z"))
    assert ref.invoke([3]) == "zzz"


def test_equality_follows_callable():
    assert HandlerRef(greet) == HandlerRef(greet)
    assert HandlerRef(greet) == greet
    assert HandlerRef(greet) != HandlerRef(maybe)


def test_rejects_non_callable():
    with pytest.raises(TypeError):
        HandlerRef("not callable")


def test_check_shape():
    ref = HandlerRef(greet)
    ref.check_shape([str])
    ref.check_shape([str, int])
    with pytest.raises(ArgumentMismatch):
        ref.check_shape([])
    with pytest.raises(ArgumentMismatch):
        ref.check_shape([str, int, int])
    with pytest.raises(ArgumentMismatch):
        ref.check_shape([int])
    HandlerRef(numbers).check_shape([int, float, float])
    with pytest.raises(ArgumentMismatch):
        HandlerRef(keyword_required).check_shape([str])


def test_check_shape_type_mismatch_has_no_payload():
    with pytest.raises(ArgumentMismatch) as excinfo:
        HandlerRef(greet).check_shape([int], event_name="E")
    assert excinfo.value.payload is None
    assert "rejected" in str(excinfo.value)
    assert "Payload" not in str(excinfo.value)
