"""All scalar type descriptors."""

from __future__ import annotations

from .base import ScalarType, register_type
from .kinds import Kind

# ── Register all scalar types ─────────────────────────────────────

t_bool = register_type(ScalarType(kind=Kind.BOOL, python_type=bool, bits=8))

t_int = register_type(ScalarType(kind=Kind.INT, python_type=int, bits=64))
t_int8 = register_type(ScalarType(kind=Kind.INT8, python_type=int, bits=8))
t_int16 = register_type(ScalarType(kind=Kind.INT16, python_type=int, bits=16))
t_int32 = register_type(ScalarType(kind=Kind.INT32, python_type=int, bits=32))
t_int64 = register_type(ScalarType(kind=Kind.INT64, python_type=int, bits=64))

t_uint = register_type(ScalarType(kind=Kind.UINT, python_type=int, bits=64))
t_uint8 = register_type(ScalarType(kind=Kind.UINT8, python_type=int, bits=8))
t_uint16 = register_type(ScalarType(kind=Kind.UINT16, python_type=int, bits=16))
t_uint32 = register_type(ScalarType(kind=Kind.UINT32, python_type=int, bits=32))
t_uint64 = register_type(ScalarType(kind=Kind.UINT64, python_type=int, bits=64))
t_uintptr = register_type(ScalarType(kind=Kind.UINTPTR, python_type=int, bits=64))

t_float32 = register_type(ScalarType(kind=Kind.FLOAT32, python_type=float, bits=32))
t_float64 = register_type(ScalarType(kind=Kind.FLOAT64, python_type=float, bits=64))

t_complex64 = register_type(ScalarType(kind=Kind.COMPLEX64, python_type=complex, bits=64))
t_complex128 = register_type(ScalarType(kind=Kind.COMPLEX128, python_type=complex, bits=128))

t_string = register_type(ScalarType(kind=Kind.STRING, python_type=str))  # variable-width
