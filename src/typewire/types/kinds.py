"""Kind codes, channel directions and descriptor key names."""

from __future__ import annotations

import enum

from ..exc import UnknownKindError


class Kind(enum.IntEnum):
    """Structural category of a type. Codes follow reflect ordering."""
    INVALID = 0
    BOOL = 1
    INT = 2
    INT8 = 3
    INT16 = 4
    INT32 = 5
    INT64 = 6
    UINT = 7
    UINT8 = 8
    UINT16 = 9
    UINT32 = 10
    UINT64 = 11
    UINTPTR = 12
    FLOAT32 = 13
    FLOAT64 = 14
    COMPLEX64 = 15
    COMPLEX128 = 16
    ARRAY = 17
    CHAN = 18
    FUNC = 19
    INTERFACE = 20
    MAP = 21
    PTR = 22
    SLICE = 23
    STRING = 24
    STRUCT = 25
    UNSAFE_POINTER = 26

    @property
    def label(self) -> str:
        """The textual name used in descriptors (e.g. ``"ptr"``)."""
        return _KIND_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> Kind:
        try:
            return _LABEL_KINDS[label]
        except KeyError:
            raise UnknownKindError(f"Unknown kind {label!r}") from None

    @classmethod
    def from_code(cls, code: int) -> Kind:
        try:
            return cls(code)
        except ValueError:
            raise UnknownKindError(f"Unknown kind code {code}") from None


_KIND_LABELS: dict[Kind, str] = {
    Kind.INVALID: "invalid",
    Kind.BOOL: "bool",
    Kind.INT: "int",
    Kind.INT8: "int8",
    Kind.INT16: "int16",
    Kind.INT32: "int32",
    Kind.INT64: "int64",
    Kind.UINT: "uint",
    Kind.UINT8: "uint8",
    Kind.UINT16: "uint16",
    Kind.UINT32: "uint32",
    Kind.UINT64: "uint64",
    Kind.UINTPTR: "uintptr",
    Kind.FLOAT32: "float32",
    Kind.FLOAT64: "float64",
    Kind.COMPLEX64: "complex64",
    Kind.COMPLEX128: "complex128",
    Kind.ARRAY: "array",
    Kind.CHAN: "chan",
    Kind.FUNC: "func",
    Kind.INTERFACE: "interface",
    Kind.MAP: "map",
    Kind.PTR: "ptr",
    Kind.SLICE: "slice",
    Kind.STRING: "string",
    Kind.STRUCT: "struct",
    Kind.UNSAFE_POINTER: "unsafe.Pointer",
}

_LABEL_KINDS: dict[str, Kind] = {label: kind for kind, label in _KIND_LABELS.items()}

# ── Kind groups ────────────────────────────────────────────────────
SIGNED_KINDS = frozenset({Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64})
UNSIGNED_KINDS = frozenset({
    Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64, Kind.UINTPTR,
})
INTEGER_KINDS = SIGNED_KINDS | UNSIGNED_KINDS
FLOAT_KINDS = frozenset({Kind.FLOAT32, Kind.FLOAT64})
COMPLEX_KINDS = frozenset({Kind.COMPLEX64, Kind.COMPLEX128})
SCALAR_KINDS = INTEGER_KINDS | FLOAT_KINDS | COMPLEX_KINDS | {Kind.BOOL, Kind.STRING}
COMPOSITE_KINDS = frozenset({
    Kind.ARRAY, Kind.CHAN, Kind.FUNC, Kind.MAP, Kind.PTR, Kind.SLICE, Kind.STRUCT,
})


class ChanDir(enum.Enum):
    """Channel direction. Values are the integers stored under ``chan_dir``."""
    RECV = 1
    SEND = 2
    BOTH = 3


# ── Component / metadata keys ──────────────────────────────────────
ELEMENT_TYPE = "element_type"   # element of array, chan, ptr, slice
ARRAY_LENGTH = "array_length"   # length of array
KEY_TYPE = "key_type"           # key of map
VALUE_TYPE = "value_type"       # value of map
NUM_IN = "in_number"            # func parameter count
NUM_OUT = "out_number"          # func result count
IN_PREFIX = "in_"               # in_<i>: i-th parameter
OUT_PREFIX = "out_"             # out_<i>: i-th result
NUM_FIELD = "fields_number"     # struct field count
FIELD_PREFIX = "field_"         # field_<i>: name of i-th field
CHAN_DIR = "chan_dir"           # chan direction
VARIADIC = "variadic"           # func takes a trailing variadic parameter


def in_key(i: int) -> str:
    return f"{IN_PREFIX}{i}"


def out_key(i: int) -> str:
    return f"{OUT_PREFIX}{i}"


def field_key(i: int) -> str:
    return f"{FIELD_PREFIX}{i}"
