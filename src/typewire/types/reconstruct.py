"""TypeDescriptor -> Python annotation.

The inverse of :func:`typewire.types.describe.describe`: rebuilds a type
annotation usable for encoding, decoding and invocation purely from a
descriptor, e.g. one received over the wire.
"""

from __future__ import annotations

import collections.abc
import dataclasses
from typing import Annotated, Any, Callable, Optional, Union, get_args, get_origin

from ..exc import DescriptorError, UnknownKindError, UnrepresentableTypeError
from .base import get_type_by_kind
from .descriptor import TypeDescriptor
from .describe import strip_annotated
from .kinds import Kind, SCALAR_KINDS
from .markers import Variadic, array_of, chan_of
from . import atoms as _atoms  # ensure scalar types are registered

# Class name given to reconstructed records. Descriptors are structural and
# do not carry the original class name.
RECORD_CLASS_NAME = "Record"

# ── Kinds with a plain Python equivalent ───────────────────────────
_PLAIN_SCALARS: dict[Kind, type] = {
    Kind.BOOL: bool,
    Kind.INT: int,
    Kind.FLOAT64: float,
    Kind.COMPLEX128: complex,
    Kind.STRING: str,
}


def reconstruct(desc: TypeDescriptor) -> Any:
    """Build a type annotation structurally equivalent to ``desc``.

    Raises
    ------
    UnrepresentableTypeError
        For interface descriptors and nested references.
    UnknownKindError
        For kinds with no Python construct (``invalid``, ``unsafe.Pointer``).
    DescriptorError
        If a composite descriptor is missing components or metadata.
    """
    if not isinstance(desc, TypeDescriptor):
        raise DescriptorError(f"Expected a TypeDescriptor, got {type(desc).__name__}")
    kind = desc.kind
    if kind == Kind.INTERFACE:
        raise UnrepresentableTypeError("Interface types are not supported")
    if kind in SCALAR_KINDS:
        return _reconstruct_scalar(kind)
    builder = _RECONSTRUCTORS.get(kind)
    if builder is None:
        raise UnknownKindError(f"Kind {kind.label!r} has no Python equivalent")
    return builder(desc)


def _reconstruct_scalar(kind: Kind) -> Any:
    plain = _PLAIN_SCALARS.get(kind)
    if plain is not None:
        return plain
    scalar = get_type_by_kind(kind)
    return Annotated[scalar.python_type, scalar]


def _reconstruct_array(desc: TypeDescriptor) -> Any:
    return array_of(reconstruct(desc.element), desc.length)


def _reconstruct_chan(desc: TypeDescriptor) -> Any:
    return chan_of(reconstruct(desc.element), desc.chan_dir)


def _reconstruct_func(desc: TypeDescriptor) -> Any:
    params = [reconstruct(p) for p in desc.params]
    results = [reconstruct(r) for r in desc.results]
    if not results:
        ret: Any = None
    elif len(results) == 1:
        ret = results[0]
    else:
        ret = tuple[tuple(results)]
    fn_type = collections.abc.Callable[params, ret]
    if desc.variadic:
        return Annotated[fn_type, Variadic()]
    return fn_type


def _reconstruct_map(desc: TypeDescriptor) -> Any:
    return dict[reconstruct(desc.key_type), reconstruct(desc.value_type)]


def _reconstruct_ptr(desc: TypeDescriptor) -> Any:
    element = reconstruct(desc.element)
    base, _ = strip_annotated(element)
    if get_origin(base) is Union and type(None) in get_args(base):
        raise UnrepresentableTypeError("References to references cannot be expressed as Optional")
    return Optional[element]


def _reconstruct_slice(desc: TypeDescriptor) -> Any:
    return list[reconstruct(desc.element)]


def _reconstruct_struct(desc: TypeDescriptor) -> Any:
    # Field order comes from field_<i>, never from component map order.
    # Frozen so reconstructed records can be map keys.
    fields = [(name, reconstruct(nested)) for name, nested in desc.fields]
    try:
        return dataclasses.make_dataclass(RECORD_CLASS_NAME, fields, frozen=True)
    except TypeError as e:
        raise DescriptorError(f"Invalid record fields {[n for n, _ in fields]}: {e}") from e


_RECONSTRUCTORS: dict[Kind, Callable[[TypeDescriptor], Any]] = {
    Kind.ARRAY: _reconstruct_array,
    Kind.CHAN: _reconstruct_chan,
    Kind.FUNC: _reconstruct_func,
    Kind.MAP: _reconstruct_map,
    Kind.PTR: _reconstruct_ptr,
    Kind.SLICE: _reconstruct_slice,
    Kind.STRUCT: _reconstruct_struct,
}
