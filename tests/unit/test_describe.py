"""Unit tests for building descriptors from Python annotations."""

import abc
import queue
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Protocol, Union

import pytest

from typewire.exc import UnrepresentableTypeError
from typewire.types import (
    ChanDir, Complex64, Float32, Int8, Int16, Int32, Int64, Kind, TypeDescriptor,
    Uint, Uint8, Uint16, Uint32, Uint64, Uintptr, Variadic,
    array_of, chan_of, describe, describe_callable, pointer_to, signature_of,
    t_int8, type_of,
)
from typewire.types.describe import classify, split_results


@dataclass
class Person:
    Name: str
    Age: Int64


@dataclass
class Team:
    Lead: Optional[Person]
    Members: list[Person]
    Scores: dict[str, float]


@dataclass
class Empty:
    pass


class Greeter(Protocol):
    def greet(self) -> str: ...


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float: ...


class Adder:
    def __call__(self, a: int, b: int) -> int:
        return a + b


class TestScalars:
    @pytest.mark.parametrize("annotation, kind", [
        (bool, Kind.BOOL),
        (int, Kind.INT),
        (float, Kind.FLOAT64),
        (complex, Kind.COMPLEX128),
        (str, Kind.STRING),
        (Int8, Kind.INT8),
        (Int16, Kind.INT16),
        (Int32, Kind.INT32),
        (Int64, Kind.INT64),
        (Uint, Kind.UINT),
        (Uint8, Kind.UINT8),
        (Uint16, Kind.UINT16),
        (Uint32, Kind.UINT32),
        (Uint64, Kind.UINT64),
        (Uintptr, Kind.UINTPTR),
        (Float32, Kind.FLOAT32),
        (Complex64, Kind.COMPLEX64),
    ])
    def test_kind(self, annotation, kind):
        d = describe(annotation)
        assert d.kind is kind
        assert d.struct is None
        assert d.extra is None

    def test_marker_must_match_python_type(self):
        with pytest.raises(UnrepresentableTypeError, match="requires int"):
            describe(Annotated[str, t_int8])

    def test_unrelated_annotated_metadata_ignored(self):
        assert describe(Annotated[str, "doc"]) == describe(str)


class TestComposites:
    def test_slice(self):
        d = describe(list[list[str]])
        assert d.kind is Kind.SLICE
        assert d.element.kind is Kind.SLICE
        assert d.element.element.kind is Kind.STRING

    def test_map(self):
        d = describe(dict[str, list[int]])
        assert d.key_type == describe(str)
        assert d.value_type == describe(list[int])

    def test_array(self):
        d = describe(array_of(Uint8, 16))
        assert d.kind is Kind.ARRAY
        assert d.length == 16
        assert d.element.kind is Kind.UINT8

    def test_zero_length_array(self):
        assert describe(array_of(int, 0)).length == 0

    def test_tuple_without_length(self):
        with pytest.raises(UnrepresentableTypeError, match="ArrayLength"):
            describe(tuple[int, ...])

    def test_fixed_tuple_is_not_an_array(self):
        with pytest.raises(UnrepresentableTypeError):
            describe(tuple[int, str])

    def test_pointer(self):
        for annotation in (Optional[int], int | None, pointer_to(int)):
            d = describe(annotation)
            assert d.kind is Kind.PTR
            assert d.element == describe(int)

    def test_chan(self):
        d = describe(queue.Queue[int])
        assert d.kind is Kind.CHAN
        assert d.chan_dir is ChanDir.BOTH
        assert describe(chan_of(int, ChanDir.RECV)).chan_dir is ChanDir.RECV
        assert describe(chan_of(str, ChanDir.SEND)).metadata["chan_dir"] == 2

    def test_func(self):
        d = describe(Callable[[int, str], bool])
        assert d.params == [describe(int), describe(str)]
        assert d.results == [describe(bool)]
        assert d.variadic is False

    def test_func_without_results(self):
        d = describe(Callable[[], None])
        assert d.params == []
        assert d.results == []

    def test_func_multiple_results(self):
        d = describe(Callable[[int], tuple[int, str]])
        assert d.results == [describe(int), describe(str)]

    def test_variadic_func(self):
        d = describe(Annotated[Callable[[str, list[int]], int], Variadic()])
        assert d.variadic is True

    def test_func_needs_parameter_list(self):
        with pytest.raises(UnrepresentableTypeError, match="explicit parameter"):
            describe(Callable[..., int])


class TestRecords:
    def test_fields_in_declared_order(self):
        d = describe(Person)
        assert d.kind is Kind.STRUCT
        assert d.field_names == ["Name", "Age"]
        assert d.component("Age").kind is Kind.INT64

    def test_nested(self):
        d = describe(Team)
        assert d.field_names == ["Lead", "Members", "Scores"]
        assert d.component("Lead").element == describe(Person)
        assert d.component("Members").element == describe(Person)

    def test_empty(self):
        d = describe(Empty)
        assert d.field_names == []

    def test_structure_not_name(self):
        @dataclass
        class Employee:
            Name: str
            Age: Int64

        assert describe(Employee) == describe(Person)


class TestUnrepresentable:
    @pytest.mark.parametrize("annotation", [
        None, type(None), Any, object, Greeter, Shape,
        Union[int, str], int | str, list, dict, set[int], bytes,
    ])
    def test_rejected(self, annotation):
        with pytest.raises(UnrepresentableTypeError):
            describe(annotation)


class TestSignatures:
    def test_plain_function(self):
        def add(a: int, b: int) -> int:
            return a + b

        sig = signature_of(add)
        assert sig.params == (int, int)
        assert sig.results == (int,)
        assert sig.variadic is False
        assert describe_callable(add) == describe(Callable[[int, int], int])

    def test_variadic(self):
        def join(sep: str, *parts: str) -> str:
            return sep.join(parts)

        sig = signature_of(join)
        assert sig.params == (str, list[str])
        assert sig.variadic is True
        d = describe_callable(join)
        assert d.variadic is True
        assert d.params[-1] == describe(list[str])

    def test_no_results(self):
        def sink(msg: str) -> None:
            pass

        assert signature_of(sink).results == ()

    def test_multiple_results(self):
        def divide(a: int, b: int) -> tuple[int, int]:
            return divmod(a, b)

        assert describe_callable(divide).results == [describe(int), describe(int)]

    def test_callable_object(self):
        assert describe_callable(Adder()) == describe(Callable[[int, int], int])

    def test_identity_not_part_of_type(self):
        def f(x: str) -> int:
            return len(x)

        def g(y: str) -> int:
            return 0

        assert describe_callable(f) == describe_callable(g)

    def test_keyword_only_rejected(self):
        def f(a: int, *, b: int) -> int:
            return a + b

        with pytest.raises(UnrepresentableTypeError, match="keyword-only"):
            signature_of(f)

    def test_var_keyword_rejected(self):
        def f(a: int, **kw: int) -> int:
            return a

        with pytest.raises(UnrepresentableTypeError):
            signature_of(f)

    def test_missing_parameter_annotation(self):
        def f(a, b: int) -> int:
            return b

        with pytest.raises(UnrepresentableTypeError, match="'a'"):
            signature_of(f)

    def test_missing_return_annotation(self):
        def f(a: int):
            return a

        with pytest.raises(UnrepresentableTypeError, match="return annotation"):
            signature_of(f)

    def test_split_results(self):
        assert split_results(None) == ()
        assert split_results(int) == (int,)
        assert split_results(tuple[int, str]) == (int, str)
        assert split_results(tuple[int, ...]) == (tuple[int, ...],)


class TestTypeOf:
    def test_scalars(self):
        assert type_of(3).kind is Kind.INT
        assert type_of(True).kind is Kind.BOOL
        assert type_of(1.5).kind is Kind.FLOAT64
        assert type_of(1j).kind is Kind.COMPLEX128
        assert type_of("x").kind is Kind.STRING

    def test_record(self):
        assert type_of(Person("Ann", 20)) == describe(Person)

    def test_function(self):
        def f(a: int) -> str:
            return str(a)

        assert type_of(f) == describe(Callable[[int], str])

    def test_containers_rejected(self):
        with pytest.raises(UnrepresentableTypeError, match="annotation"):
            type_of([1, 2])

    def test_none_rejected(self):
        with pytest.raises(UnrepresentableTypeError):
            type_of(None)


class TestClassify:
    def test_returns_base_and_markers(self):
        kind, base, markers = classify(Int8)
        assert kind is Kind.INT8
        assert base is int
        assert markers == (t_int8,)

    def test_descriptor_is_not_an_annotation(self):
        with pytest.raises(UnrepresentableTypeError):
            classify(TypeDescriptor.scalar(Kind.INT))
