"""Type descriptors and the Python annotations they describe.

Usage::

    from dataclasses import dataclass
    from typewire.types import Int64, describe, reconstruct

    @dataclass
    class Person:
        Name: str
        Age: Int64

    desc = describe(Person)
    desc.key
    # {"kind":"struct","struct":{"Age":{"kind":"int64"},"Name":{"kind":"string"}},
    #  "extra":{"field_0":"Name","field_1":"Age","fields_number":2}}
    Record = reconstruct(desc)
"""

from __future__ import annotations

from typing import Annotated

from .kinds import (
    Kind, ChanDir,
    ELEMENT_TYPE, ARRAY_LENGTH, KEY_TYPE, VALUE_TYPE,
    NUM_IN, NUM_OUT, IN_PREFIX, OUT_PREFIX, NUM_FIELD, FIELD_PREFIX,
    CHAN_DIR, VARIADIC,
)
from .base import ScalarType, get_type_by_kind, get_type_by_name, all_types
from .atoms import (
    t_bool, t_int, t_int8, t_int16, t_int32, t_int64,
    t_uint, t_uint8, t_uint16, t_uint32, t_uint64, t_uintptr,
    t_float32, t_float64, t_complex64, t_complex128, t_string,
)
from .markers import ArrayLength, Variadic, array_of, chan_of, pointer_to
from .descriptor import TypeDescriptor
from .canonical import to_dict, from_dict, to_text, from_text
from .describe import (
    CallSignature, classify, describe, describe_callable, signature_of, type_of,
)
from .reconstruct import reconstruct

# ── Annotated width aliases ────────────────────────────────────────
# Plain bool, int, float, complex and str map to bool, int, float64,
# complex128 and string.

Int8 = Annotated[int, t_int8]
Int16 = Annotated[int, t_int16]
Int32 = Annotated[int, t_int32]
Int64 = Annotated[int, t_int64]
Uint = Annotated[int, t_uint]
Uint8 = Annotated[int, t_uint8]
Uint16 = Annotated[int, t_uint16]
Uint32 = Annotated[int, t_uint32]
Uint64 = Annotated[int, t_uint64]
Uintptr = Annotated[int, t_uintptr]
Float32 = Annotated[float, t_float32]
Complex64 = Annotated[complex, t_complex64]

__all__ = [
    # Width aliases
    'Int8', 'Int16', 'Int32', 'Int64',
    'Uint', 'Uint8', 'Uint16', 'Uint32', 'Uint64', 'Uintptr',
    'Float32', 'Complex64',
    # Kinds and keys
    'Kind', 'ChanDir',
    'ELEMENT_TYPE', 'ARRAY_LENGTH', 'KEY_TYPE', 'VALUE_TYPE',
    'NUM_IN', 'NUM_OUT', 'IN_PREFIX', 'OUT_PREFIX', 'NUM_FIELD', 'FIELD_PREFIX',
    'CHAN_DIR', 'VARIADIC',
    # Scalar markers
    'ScalarType', 'get_type_by_kind', 'get_type_by_name', 'all_types',
    't_bool', 't_int', 't_int8', 't_int16', 't_int32', 't_int64',
    't_uint', 't_uint8', 't_uint16', 't_uint32', 't_uint64', 't_uintptr',
    't_float32', 't_float64', 't_complex64', 't_complex128', 't_string',
    # Composite helpers
    'ArrayLength', 'Variadic', 'array_of', 'chan_of', 'pointer_to',
    # Descriptors
    'TypeDescriptor', 'to_dict', 'from_dict', 'to_text', 'from_text',
    'CallSignature', 'classify', 'describe', 'describe_callable',
    'signature_of', 'type_of', 'reconstruct',
]
