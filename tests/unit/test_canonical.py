"""Unit tests for the canonical text form of descriptors."""

import json
from collections.abc import Callable
from dataclasses import dataclass

import pytest

from typewire.exc import DescriptorError, DeserializationError, UnknownKindError
from typewire.types import (
    Int64, Kind, TypeDescriptor, Uint8,
    array_of, describe, from_dict, from_text, to_dict, to_text,
)


@dataclass
class Person:
    Name: str
    Age: Int64


class TestCanonicalText:
    def test_scalar(self):
        assert to_text(describe(int)) == '{"kind":"int"}'
        assert to_text(describe(Int64)) == '{"kind":"int64"}'

    def test_struct(self):
        assert describe(Person).key == (
            '{"kind":"struct",'
            '"struct":{"Age":{"kind":"int64"},"Name":{"kind":"string"}},'
            '"extra":{"field_0":"Name","field_1":"Age","fields_number":2}}'
        )

    def test_func(self):
        assert describe(Callable[[int, int], int]).key == (
            '{"kind":"func",'
            '"struct":{"in_0":{"kind":"int"},"in_1":{"kind":"int"},"out_0":{"kind":"int"}},'
            '"extra":{"in_number":2,"out_number":1,"variadic":false}}'
        )

    def test_slice(self):
        assert describe(list[int]).key == '{"kind":"slice","struct":{"element_type":{"kind":"int"}}}'

    def test_array(self):
        assert describe(array_of(Uint8, 16)).key == (
            '{"kind":"array","struct":{"element_type":{"kind":"uint8"}},'
            '"extra":{"array_length":16}}'
        )

    def test_map(self):
        assert describe(dict[str, int]).key == (
            '{"kind":"map","struct":{"key_type":{"kind":"string"},"value_type":{"kind":"int"}}}'
        )

    def test_ptr(self):
        assert describe(Person | None).key.startswith(
            '{"kind":"ptr","struct":{"element_type":{"kind":"struct",'
        )

    def test_nested_keys_sorted(self):
        a = TypeDescriptor(Kind.MAP, {
            "value_type": describe(int), "key_type": describe(str),
        })
        b = TypeDescriptor(Kind.MAP, {
            "key_type": describe(str), "value_type": describe(int),
        })
        assert to_text(a) == to_text(b)

    def test_deterministic(self):
        assert to_text(describe(list[Person])) == to_text(describe(list[Person]))

    def test_compact(self):
        text = describe(dict[str, list[Person]]).key
        assert " " not in text
        assert "\n" not in text

    def test_non_ascii_kept(self):
        d = TypeDescriptor.record([("Größe", describe(int))])
        assert "Größe" in d.key

    def test_valid_json(self):
        data = json.loads(describe(Callable[[list[Person]], dict[Int64, int]]).key)
        assert data["kind"] == "func"
        assert data["extra"]["in_number"] == 1


class TestDict:
    def test_to_dict_order(self):
        data = to_dict(describe(Person))
        assert list(data) == ["kind", "struct", "extra"]

    def test_absent_maps_omitted(self):
        assert to_dict(describe(str)) == {"kind": "string"}

    def test_from_dict_round_trip(self):
        d = describe(Callable[[list[Person], str], dict[Int64, int]])
        assert from_dict(to_dict(d)) == d
        assert TypeDescriptor.from_dict(d.to_dict()) == d

    def test_unknown_key(self):
        with pytest.raises(DescriptorError, match="Unexpected"):
            from_dict({"kind": "int", "name": "x"})

    def test_missing_kind(self):
        with pytest.raises(DescriptorError, match="'kind'"):
            from_dict({"struct": {}})

    def test_unknown_kind_label(self):
        with pytest.raises(UnknownKindError):
            from_dict({"kind": "pointer"})

    def test_not_an_object(self):
        with pytest.raises(DescriptorError):
            from_dict(["kind", "int"])
        with pytest.raises(DescriptorError, match="'struct'"):
            from_dict({"kind": "slice", "struct": []})
        with pytest.raises(DescriptorError, match="'extra'"):
            from_dict({"kind": "array", "extra": 3})


class TestFromText:
    def test_round_trip(self):
        d = describe(Person)
        assert from_text(d.key) == d
        assert TypeDescriptor.from_text(d.key.encode("utf-8")) == d

    def test_field_order_survives(self):
        d = from_text(describe(Person).key)
        assert d.field_names == ["Name", "Age"]

    def test_invalid_json(self):
        with pytest.raises(DeserializationError, match="Invalid descriptor text"):
            from_text('{"kind":')

    def test_no_collision_between_field_orders(self):
        a = TypeDescriptor.record([("A", describe(int)), ("B", describe(str))])
        b = TypeDescriptor.record([("B", describe(str)), ("A", describe(int))])
        assert a.key != b.key
