"""Serialize Python values to the typewire binary format.

Uses a pre-allocated bytearray with struct.pack_into for performance.
"""

from __future__ import annotations

import dataclasses
import struct
from typing import Any, Iterable, Mapping, get_args

from ..exc import SerializationError
from ..types.base import get_type_by_kind
from ..types.describe import classify, record_fields
from ..types.descriptor import TypeDescriptor
from ..types.kinds import (
    Kind, INTEGER_KINDS, UNSIGNED_KINDS, FLOAT_KINDS, COMPLEX_KINDS,
)
from ..types.markers import ArrayLength
from .constants import (
    WireTag, CALL_MSG, HEADER_SIZE, HAS_COMPONENTS, HAS_METADATA,
)
from .framing import pack_header

_INITIAL_BUF_SIZE = 4096
_FLOAT32 = struct.Struct('<f')


class Serializer:
    """Serialize Python values into the typewire binary format.

    When an annotation is given the value is encoded against it: integer
    widths are range-checked, float32 values are rounded and records are
    written in declared field order. Without one, the encoding is inferred
    from the value.
    """

    def __init__(self) -> None:
        self._buf = bytearray(_INITIAL_BUF_SIZE)
        self._pos = 0

    def _ensure(self, n: int) -> None:
        """Ensure at least n bytes are available at _pos."""
        needed = self._pos + n
        if needed > len(self._buf):
            new_size = max(len(self._buf) * 2, needed)
            self._buf.extend(b'\x00' * (new_size - len(self._buf)))

    def _write_byte(self, b: int) -> None:
        self._ensure(1)
        self._buf[self._pos] = b & 0xFF
        self._pos += 1

    def _write_bytes(self, data: bytes | bytearray) -> None:
        n = len(data)
        self._ensure(n)
        self._buf[self._pos:self._pos + n] = data
        self._pos += n

    def _pack_into(self, fmt: str, *values: Any) -> None:
        size = struct.calcsize(f'<{fmt}')
        self._ensure(size)
        struct.pack_into(f'<{fmt}', self._buf, self._pos, *values)
        self._pos += size

    def serialize_message(
        self, items: Iterable[tuple[Any, Any]], msg_type: int = CALL_MSG,
    ) -> bytes:
        """Serialize ``(value, annotation)`` pairs as one framed message.

        Returns the full message bytes including the 8-byte header.
        """
        self._pos = 0
        # Reserve space for header
        self._ensure(HEADER_SIZE)
        self._pos = HEADER_SIZE
        for value, annotation in items:
            self._serialize(value, annotation)
        total_len = self._pos
        self._buf[0:HEADER_SIZE] = pack_header(msg_type, total_len)
        return bytes(self._buf[:total_len])

    def serialize_payload(self, value: Any, annotation: Any = None) -> bytes:
        """Serialize a single value without a header."""
        self._pos = 0
        self._serialize(value, annotation)
        return bytes(self._buf[:self._pos])

    def _serialize(self, value: Any, annotation: Any) -> None:
        """Dispatch serialization on the declared kind."""
        if annotation is TypeDescriptor or (annotation is None and isinstance(value, TypeDescriptor)):
            self._serialize_descriptor(value)
            return
        if annotation is None:
            self._serialize_inferred(value)
            return

        kind, base, markers = classify(annotation)
        if kind == Kind.BOOL:
            self._serialize_bool(value)
        elif kind in INTEGER_KINDS:
            self._serialize_int(value, kind)
        elif kind in FLOAT_KINDS:
            self._serialize_float(value, kind)
        elif kind in COMPLEX_KINDS:
            self._serialize_complex(value, kind)
        elif kind == Kind.STRING:
            self._serialize_string(value)
        elif kind == Kind.SLICE:
            self._serialize_list(value, get_args(base)[0])
        elif kind == Kind.ARRAY:
            length = next(m.length for m in markers if isinstance(m, ArrayLength))
            self._serialize_array(value, get_args(base)[0], length)
        elif kind == Kind.MAP:
            key_type, value_type = get_args(base)
            self._serialize_map(value, key_type, value_type)
        elif kind == Kind.PTR:
            if value is None:
                self._write_byte(WireTag.NIL)
            else:
                element = next(a for a in get_args(base) if a is not type(None))
                self._serialize(value, element)
        elif kind == Kind.STRUCT:
            self._serialize_record(value, base)
        else:
            raise SerializationError(f"Values of kind {kind.label} cannot be encoded")

    def _serialize_inferred(self, value: Any) -> None:
        """Encode a value whose type was not declared."""
        if value is None:
            self._write_byte(WireTag.NIL)
        elif isinstance(value, bool):
            self._serialize_bool(value)
        elif isinstance(value, int):
            self._serialize_int(value, Kind.INT)
        elif isinstance(value, float):
            self._serialize_float(value, Kind.FLOAT64)
        elif isinstance(value, complex):
            self._serialize_complex(value, Kind.COMPLEX128)
        elif isinstance(value, str):
            self._serialize_string(value)
        elif isinstance(value, TypeDescriptor):
            self._serialize_descriptor(value)
        elif isinstance(value, (list, tuple)):
            self._write_byte(WireTag.LIST)
            self._pack_into('i', len(value))
            for item in value:
                self._serialize_inferred(item)
        elif isinstance(value, Mapping):
            self._write_byte(WireTag.MAP)
            self._pack_into('i', len(value))
            for k, v in value.items():
                self._serialize_inferred(k)
                self._serialize_inferred(v)
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            self._serialize_record(value, type(value))
        else:
            raise SerializationError(f"Cannot serialize type {type(value).__name__}")

    # ── Scalars ────────────────────────────────────────────────────

    def _serialize_bool(self, value: Any) -> None:
        if not isinstance(value, bool):
            raise SerializationError(f"Expected bool, got {type(value).__name__}")
        self._write_byte(WireTag.BOOL)
        self._write_byte(1 if value else 0)

    def _serialize_int(self, value: Any, kind: Kind) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SerializationError(f"Expected int for {kind.label}, got {type(value).__name__}")
        lo, hi = get_type_by_kind(kind).bounds
        if not lo <= value <= hi:
            raise SerializationError(f"{value} overflows {kind.label}")
        if kind in UNSIGNED_KINDS:
            self._write_byte(WireTag.UINT)
            self._pack_into('Q', value)
        else:
            self._write_byte(WireTag.INT)
            self._pack_into('q', value)

    def _serialize_float(self, value: Any, kind: Kind) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SerializationError(f"Expected float for {kind.label}, got {type(value).__name__}")
        self._write_byte(WireTag.FLOAT)
        self._pack_into('d', _narrow(value, kind))

    def _serialize_complex(self, value: Any, kind: Kind) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float, complex)):
            raise SerializationError(
                f"Expected complex for {kind.label}, got {type(value).__name__}"
            )
        c = complex(value)
        part_kind = Kind.FLOAT32 if kind == Kind.COMPLEX64 else Kind.FLOAT64
        self._write_byte(WireTag.COMPLEX)
        self._pack_into('dd', _narrow(c.real, part_kind), _narrow(c.imag, part_kind))

    def _serialize_string(self, value: Any) -> None:
        """Serialize a str as length-prefixed utf-8."""
        if not isinstance(value, str):
            raise SerializationError(f"Expected str, got {type(value).__name__}")
        try:
            encoded = value.encode('utf-8')
        except UnicodeEncodeError as e:
            raise SerializationError(f"String is not valid utf-8: {e}") from e
        self._write_byte(WireTag.STRING)
        self._pack_into('i', len(encoded))
        self._write_bytes(encoded)

    def _write_symbol(self, name: str) -> None:
        """Write a null-terminated name."""
        encoded = name.encode('utf-8')
        if b'\x00' in encoded:
            raise SerializationError(f"Name {name!r} contains a null byte")
        self._write_bytes(encoded)
        self._write_byte(0)  # null terminator

    # ── Containers ─────────────────────────────────────────────────

    def _serialize_list(self, items: Any, element: Any) -> None:
        if not isinstance(items, (list, tuple)):
            raise SerializationError(f"Expected list, got {type(items).__name__}")
        self._write_byte(WireTag.LIST)
        self._pack_into('i', len(items))
        for item in items:
            self._serialize(item, element)

    def _serialize_array(self, items: Any, element: Any, length: int) -> None:
        if not isinstance(items, (list, tuple)):
            raise SerializationError(f"Expected tuple, got {type(items).__name__}")
        if len(items) != length:
            raise SerializationError(f"Array needs {length} elements, got {len(items)}")
        self._serialize_list(items, element)

    def _serialize_map(self, d: Any, key_type: Any, value_type: Any) -> None:
        if not isinstance(d, Mapping):
            raise SerializationError(f"Expected dict, got {type(d).__name__}")
        self._write_byte(WireTag.MAP)
        self._pack_into('i', len(d))
        for k, v in d.items():
            self._serialize(k, key_type)
            self._serialize(v, value_type)

    def _serialize_record(self, value: Any, cls: type) -> None:
        """Serialize a dataclass instance field by field in declared order."""
        if not dataclasses.is_dataclass(value) or isinstance(value, type):
            raise SerializationError(
                f"Expected a {cls.__name__} record, got {type(value).__name__}"
            )
        fields = record_fields(cls)
        self._write_byte(WireTag.RECORD)
        self._pack_into('i', len(fields))
        for name, annotation in fields:
            try:
                attr = getattr(value, name)
            except AttributeError:
                raise SerializationError(
                    f"{type(value).__name__} has no field {name!r}"
                ) from None
            self._write_symbol(name)
            self._serialize(attr, annotation)

    # ── Descriptor ─────────────────────────────────────────────────

    def _serialize_descriptor(self, desc: Any) -> None:
        if not isinstance(desc, TypeDescriptor):
            raise SerializationError(f"Expected TypeDescriptor, got {type(desc).__name__}")
        self._write_byte(WireTag.DESCRIPTOR)
        self._serialize_descriptor_body(desc)

    def _serialize_descriptor_body(self, desc: TypeDescriptor) -> None:
        """Kind byte, presence flags, then sorted components and metadata."""
        self._write_byte(desc.kind)
        flags = 0
        if desc.struct is not None:
            flags |= HAS_COMPONENTS
        if desc.extra is not None:
            flags |= HAS_METADATA
        self._write_byte(flags)
        if desc.struct is not None:
            self._pack_into('i', len(desc.struct))
            for name in sorted(desc.struct):
                self._write_symbol(name)
                self._serialize_descriptor_body(desc.struct[name])
        if desc.extra is not None:
            self._pack_into('i', len(desc.extra))
            for name in sorted(desc.extra):
                self._write_symbol(name)
                self._serialize_inferred(desc.extra[name])


def _narrow(value: int | float, kind: Kind) -> float:
    """Convert to float, rounding through 32 bits for float32."""
    try:
        f = float(value)
        if kind == Kind.FLOAT32:
            f = _FLOAT32.unpack(_FLOAT32.pack(f))[0]
    except (OverflowError, struct.error) as e:
        raise SerializationError(f"{value!r} overflows {kind.label}") from e
    return f
