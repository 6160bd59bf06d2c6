"""Deserialize typewire binary to Python values.

Uses memoryview for zero-copy slicing. Values are decoded against an
expected annotation; any disagreement between the wire and that
annotation is a :class:`ShapeMismatchError`, never a silent coercion.
"""

from __future__ import annotations

import math
import struct
from typing import Any, get_args

from ..exc import DeserializationError, DescriptorError, ShapeMismatchError
from ..types.base import get_type_by_kind
from ..types.describe import classify, record_fields
from ..types.descriptor import TypeDescriptor
from ..types.kinds import Kind, INTEGER_KINDS, FLOAT_KINDS, COMPLEX_KINDS
from ..types.markers import ArrayLength
from .constants import (
    WireTag, TAG_STRUCT, HEADER_SIZE, LITTLE_ENDIAN, WIRE_VERSION,
    HAS_COMPONENTS, HAS_METADATA,
)
from .framing import unpack_header

_FLOAT32 = struct.Struct('<f')
_FLOAT32_MAX = 3.4028234663852886e38
_METADATA_TAGS = frozenset({WireTag.BOOL, WireTag.INT, WireTag.UINT, WireTag.STRING})


class Deserializer:
    """Deserialize typewire binary format to Python objects."""

    def __init__(self) -> None:
        self._data: memoryview = memoryview(b'')
        self._pos: int = 0
        self._little_endian: bool = True

    def open_message(self, raw: bytes | bytearray) -> int:
        """Validate the header of a framed message and position after it.

        Returns the message type.
        """
        endian, msg_type, version, total_length = unpack_header(raw)
        if version != WIRE_VERSION:
            raise DeserializationError(f"Unsupported wire version {version}")
        if total_length != len(raw):
            raise DeserializationError(
                f"Header declares {total_length} bytes, received {len(raw)}"
            )
        self._little_endian = (endian == LITTLE_ENDIAN)
        self._data = memoryview(raw)
        self._pos = HEADER_SIZE
        return msg_type

    def open_payload(self, payload: bytes | bytearray) -> None:
        """Position at the start of a payload without header."""
        self._data = memoryview(payload)
        self._pos = 0
        self._little_endian = True

    def read(self, annotation: Any = None) -> Any:
        """Decode the next value against ``annotation`` (untyped if None)."""
        try:
            return self._deserialize(annotation)
        except (struct.error, IndexError) as e:
            raise DeserializationError(f"Truncated payload at offset {self._pos}") from e
        except UnicodeDecodeError as e:
            raise DeserializationError(f"Invalid utf-8 at offset {self._pos}: {e}") from e

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def expect_end(self) -> None:
        """Fail if undecoded bytes remain."""
        if self.remaining:
            raise DeserializationError(f"{self.remaining} unexpected trailing bytes")

    def deserialize_message(self, raw: bytes | bytearray, annotation: Any = None) -> tuple[int, Any]:
        """Deserialize a framed single-value message.

        Returns (msg_type, python_object).
        """
        msg_type = self.open_message(raw)
        obj = self.read(annotation)
        self.expect_end()
        return msg_type, obj

    def deserialize_payload(self, payload: bytes | bytearray, annotation: Any = None) -> Any:
        """Deserialize a single-value payload (without header)."""
        self.open_payload(payload)
        obj = self.read(annotation)
        self.expect_end()
        return obj

    # ── Primitive reads ────────────────────────────────────────────

    def _read_byte(self) -> int:
        b = self._data[self._pos]
        self._pos += 1
        return b

    def _peek_byte(self) -> int:
        return self._data[self._pos]

    def _read_bytes(self, n: int) -> bytes:
        if self._pos + n > len(self._data):
            raise DeserializationError(f"Truncated payload at offset {self._pos}")
        result = bytes(self._data[self._pos:self._pos + n])
        self._pos += n
        return result

    def _unpack(self, fmt: str) -> Any:
        prefix = '<' if self._little_endian else '>'
        full_fmt = f'{prefix}{fmt}'
        size = struct.calcsize(full_fmt)
        result = struct.unpack_from(full_fmt, self._data, self._pos)
        self._pos += size
        return result if len(result) > 1 else result[0]

    def _read_count(self) -> int:
        count = self._unpack('i')
        if count < 0:
            raise DeserializationError(f"Negative count {count} at offset {self._pos - 4}")
        return count

    def _read_symbol(self) -> str:
        """Read a null-terminated name."""
        start = self._pos
        while self._data[self._pos] != 0:
            self._pos += 1
        sym = bytes(self._data[start:self._pos]).decode('utf-8')
        self._pos += 1  # skip null terminator
        return sym

    def _read_string(self) -> str:
        return self._read_bytes(self._read_count()).decode('utf-8')

    def _expect_tag(self, tag: int, expected: WireTag, what: str) -> None:
        if tag != expected:
            raise ShapeMismatchError(f"Expected {what}, got {_tag_name(tag)} on the wire")

    # ── Typed decode ───────────────────────────────────────────────

    def _deserialize(self, annotation: Any) -> Any:
        if annotation is None:
            return self._deserialize_untyped(self._read_byte())
        if annotation is TypeDescriptor:
            self._expect_tag(self._read_byte(), WireTag.DESCRIPTOR, "descriptor")
            return self._read_descriptor_body()

        kind, base, markers = classify(annotation)

        if kind == Kind.PTR:
            if self._peek_byte() == WireTag.NIL:
                self._pos += 1
                return None
            element = next(a for a in get_args(base) if a is not type(None))
            return self._deserialize(element)

        tag = self._read_byte()
        if kind == Kind.BOOL:
            self._expect_tag(tag, WireTag.BOOL, "bool")
            return self._read_bool()
        if kind in INTEGER_KINDS:
            return self._deserialize_int(tag, kind)
        if kind in FLOAT_KINDS:
            self._expect_tag(tag, WireTag.FLOAT, kind.label)
            return _widen(self._unpack('d'), kind)
        if kind in COMPLEX_KINDS:
            self._expect_tag(tag, WireTag.COMPLEX, kind.label)
            real, imag = self._unpack('dd')
            part_kind = Kind.FLOAT32 if kind == Kind.COMPLEX64 else Kind.FLOAT64
            return complex(_widen(real, part_kind), _widen(imag, part_kind))
        if kind == Kind.STRING:
            self._expect_tag(tag, WireTag.STRING, "string")
            return self._read_string()
        if kind == Kind.SLICE:
            self._expect_tag(tag, WireTag.LIST, "slice")
            element = get_args(base)[0]
            return [self._deserialize(element) for _ in range(self._read_count())]
        if kind == Kind.ARRAY:
            self._expect_tag(tag, WireTag.LIST, "array")
            length = next(m.length for m in markers if isinstance(m, ArrayLength))
            count = self._read_count()
            if count != length:
                raise ShapeMismatchError(f"Array needs {length} elements, got {count}")
            element = get_args(base)[0]
            return tuple(self._deserialize(element) for _ in range(count))
        if kind == Kind.MAP:
            self._expect_tag(tag, WireTag.MAP, "map")
            return self._deserialize_map(*get_args(base))
        if kind == Kind.STRUCT:
            self._expect_tag(tag, WireTag.RECORD, f"{base.__name__} record")
            return self._deserialize_record(base)
        raise DeserializationError(f"Values of kind {kind.label} cannot be decoded")

    def _read_bool(self) -> bool:
        b = self._read_byte()
        if b > 1:
            raise DeserializationError(f"Invalid bool byte {b}")
        return bool(b)

    def _deserialize_int(self, tag: int, kind: Kind) -> int:
        if tag == WireTag.INT:
            value = self._unpack('q')
        elif tag == WireTag.UINT:
            value = self._unpack('Q')
        else:
            raise ShapeMismatchError(f"Expected {kind.label}, got {_tag_name(tag)} on the wire")
        lo, hi = get_type_by_kind(kind).bounds
        if not lo <= value <= hi:
            raise ShapeMismatchError(f"{value} out of range for {kind.label}")
        return value

    def _deserialize_map(self, key_type: Any, value_type: Any) -> dict:
        count = self._read_count()
        result: dict = {}
        for _ in range(count):
            key = self._deserialize(key_type)
            value = self._deserialize(value_type)
            try:
                result[key] = value
            except TypeError as e:
                raise ShapeMismatchError(f"Unhashable map key {key!r}") from e
        return result

    def _deserialize_record(self, cls: type) -> Any:
        fields = dict(record_fields(cls))
        count = self._read_count()
        values: dict[str, Any] = {}
        for _ in range(count):
            name = self._read_symbol()
            if name not in fields:
                raise ShapeMismatchError(f"{cls.__name__} has no field {name!r}")
            if name in values:
                raise DeserializationError(f"Duplicate field {name!r} in record")
            values[name] = self._deserialize(fields[name])
        try:
            return cls(**values)
        except TypeError as e:
            raise ShapeMismatchError(f"Cannot build {cls.__name__}: {e}") from e

    # ── Untyped decode ─────────────────────────────────────────────

    def _deserialize_untyped(self, tag: int) -> Any:
        if tag == WireTag.NIL:
            return None
        if tag == WireTag.BOOL:
            return self._read_bool()
        if tag in TAG_STRUCT:
            fmt, _ = TAG_STRUCT[tag]
            raw = self._unpack(fmt)
            return complex(*raw) if tag == WireTag.COMPLEX else raw
        if tag == WireTag.STRING:
            return self._read_string()
        if tag == WireTag.LIST:
            return [self._deserialize_untyped(self._read_byte()) for _ in range(self._read_count())]
        if tag == WireTag.MAP:
            count = self._read_count()
            result = {}
            for _ in range(count):
                key = _freeze_key(self._deserialize_untyped(self._read_byte()))
                result[key] = self._deserialize_untyped(self._read_byte())
            return result
        if tag == WireTag.RECORD:
            count = self._read_count()
            return {self._read_symbol(): self._deserialize_untyped(self._read_byte())
                    for _ in range(count)}
        if tag == WireTag.DESCRIPTOR:
            return self._read_descriptor_body()
        raise DeserializationError(f"Unknown wire tag: {tag}")

    # ── Descriptor ─────────────────────────────────────────────────

    def _read_descriptor_body(self) -> TypeDescriptor:
        code = self._read_byte()
        try:
            kind = Kind.from_code(code)
        except DescriptorError as e:
            raise DeserializationError(f"Invalid descriptor on the wire: {e}") from e
        flags = self._read_byte()
        struct_: dict[str, TypeDescriptor] | None = None
        extra: dict[str, Any] | None = None
        if flags & HAS_COMPONENTS:
            struct_ = {}
            for _ in range(self._read_count()):
                name = self._read_symbol()
                struct_[name] = self._read_descriptor_body()
        if flags & HAS_METADATA:
            extra = {}
            for _ in range(self._read_count()):
                name = self._read_symbol()
                tag = self._read_byte()
                if tag not in _METADATA_TAGS:
                    raise DeserializationError(
                        f"Metadata {name!r} has non-scalar tag {_tag_name(tag)}"
                    )
                extra[name] = self._deserialize_untyped(tag)
        try:
            return TypeDescriptor(kind, struct_, extra)
        except DescriptorError as e:
            raise DeserializationError(f"Invalid descriptor on the wire: {e}") from e


def _freeze_key(value: Any) -> Any:
    """Hashable form of an untyped map key.

    Lists become tuples; records and maps become tuples of ``(name, value)``
    pairs in wire order.
    """
    if isinstance(value, list):
        return tuple(_freeze_key(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _freeze_key(v)) for k, v in value.items())
    return value


def _tag_name(tag: int) -> str:
    try:
        return WireTag(tag).name
    except ValueError:
        return f"unknown tag {tag}"


def _widen(value: float, kind: Kind) -> float:
    """Check a decoded double fits the target float width."""
    if kind == Kind.FLOAT32:
        if math.isfinite(value) and abs(value) > _FLOAT32_MAX:
            raise ShapeMismatchError(f"{value} out of range for float32")
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    return value
