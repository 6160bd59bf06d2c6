"""Python annotation -> TypeDescriptor.

Maps type hints (including ``Annotated[...]`` markers), dataclasses and
annotated functions to their structural descriptors.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import queue
import types
from typing import Annotated, Any, Callable, NamedTuple, Union, get_args, get_origin, get_type_hints

from ..exc import UnrepresentableTypeError
from .base import ScalarType
from .descriptor import TypeDescriptor
from .kinds import Kind, ChanDir
from .markers import ArrayLength, Variadic
from . import atoms as _atoms  # ensure scalar types are registered

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)

# ── Python type -> default kind mapping ────────────────────────────
_PYTHON_TO_KIND: dict[type, Kind] = {
    bool: Kind.BOOL,
    int: Kind.INT,
    float: Kind.FLOAT64,
    complex: Kind.COMPLEX128,
    str: Kind.STRING,
}


class CallSignature(NamedTuple):
    """Native parameter and result annotations of a function type."""
    params: tuple[Any, ...]
    results: tuple[Any, ...]
    variadic: bool = False


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *markers]`` into ``(T, markers)``."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], tuple(args[1:])
    return annotation, ()


def _find(markers: tuple[Any, ...], marker_type: type) -> Any:
    for marker in markers:
        if isinstance(marker, marker_type):
            return marker
    return None


def _is_interface(base: Any) -> bool:
    if base is Any or base is object:
        return True
    if isinstance(base, type):
        return bool(getattr(base, '_is_protocol', False)) or inspect.isabstract(base)
    return False


def classify(annotation: Any) -> tuple[Kind, Any, tuple[Any, ...]]:
    """Return ``(kind, base, markers)`` for a type annotation.

    Raises
    ------
    UnrepresentableTypeError
        If the annotation is None, an interface-like type, or has no
        structural equivalent.
    """
    if annotation is None or annotation is _NONE_TYPE:
        raise UnrepresentableTypeError("Cannot describe the type of None")

    base, markers = strip_annotated(annotation)

    # Annotated[int, t_int8] and friends
    scalar = _find(markers, ScalarType)
    if scalar is not None:
        if base is not scalar.python_type:
            raise UnrepresentableTypeError(
                f"{scalar.name} marker requires {scalar.python_type.__name__}, got {base!r}"
            )
        return scalar.kind, base, markers

    if isinstance(base, type) and base in _PYTHON_TO_KIND:
        return _PYTHON_TO_KIND[base], base, markers

    origin = get_origin(base)
    if origin is list:
        return Kind.SLICE, base, markers
    if origin is dict:
        return Kind.MAP, base, markers
    if origin is tuple:
        if _find(markers, ArrayLength) is None:
            raise UnrepresentableTypeError(
                f"{base!r} needs an ArrayLength marker; use array_of(element, length)"
            )
        return Kind.ARRAY, base, markers
    if origin is queue.Queue:
        return Kind.CHAN, base, markers
    if origin is collections.abc.Callable:
        return Kind.FUNC, base, markers
    if origin in _UNION_ORIGINS:
        args = get_args(base)
        if len(args) == 2 and _NONE_TYPE in args:
            return Kind.PTR, base, markers
        raise UnrepresentableTypeError(f"Union {base!r} is open-polymorphic and cannot be described")

    if isinstance(base, type) and dataclasses.is_dataclass(base):
        return Kind.STRUCT, base, markers

    if _is_interface(base):
        raise UnrepresentableTypeError(f"Interface types are not supported: {base!r}")

    raise UnrepresentableTypeError(f"Cannot describe annotation {annotation!r}")


def describe(annotation: Any) -> TypeDescriptor:
    """Build the descriptor of a type annotation, recursively.

    Supports:
    - Plain ``bool``, ``int``, ``float``, ``complex``, ``str``.
    - Width aliases such as ``Int8`` or ``Annotated[int, t_uint16]``.
    - ``list[T]``, ``dict[K, V]``, ``Optional[T]``, ``queue.Queue[T]``,
      ``array_of(T, n)``, ``Callable[[P, ...], R]`` and dataclasses.

    Raises
    ------
    UnrepresentableTypeError
        For None, ``Any``, protocols, abstract classes, open unions and
        anything else without a structural equivalent.
    """
    kind, base, markers = classify(annotation)
    builder = _DESCRIBERS.get(kind)
    if builder is None:
        return TypeDescriptor.scalar(kind)
    return builder(base, markers)


def _describe_array(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    args = get_args(base)
    if len(args) != 2 or args[1] is not Ellipsis:
        raise UnrepresentableTypeError(f"Arrays are written tuple[T, ...], got {base!r}")
    return TypeDescriptor.array(describe(args[0]), _find(markers, ArrayLength).length)


def _describe_chan(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    args = get_args(base)
    if len(args) != 1:
        raise UnrepresentableTypeError(f"Channel needs one element type, got {base!r}")
    direction = _find(markers, ChanDir) or ChanDir.BOTH
    return TypeDescriptor.chan(describe(args[0]), direction)


def _describe_func(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    args = get_args(base)
    if len(args) != 2 or args[0] is Ellipsis:
        raise UnrepresentableTypeError(f"Callable needs explicit parameter types, got {base!r}")
    params, ret = args
    sig = CallSignature(tuple(params), split_results(ret), _find(markers, Variadic) is not None)
    return describe_signature(sig)


def _describe_map(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    key, value = get_args(base)
    return TypeDescriptor.mapping(describe(key), describe(value))


def _describe_ptr(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    element = next(arg for arg in get_args(base) if arg is not _NONE_TYPE)
    return TypeDescriptor.pointer(describe(element))


def _describe_slice(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    (element,) = get_args(base)
    return TypeDescriptor.slice(describe(element))


def _describe_struct(base: Any, markers: tuple[Any, ...]) -> TypeDescriptor:
    return TypeDescriptor.record(
        (name, describe(annotation)) for name, annotation in record_fields(base)
    )


_DESCRIBERS: dict[Kind, Callable[[Any, tuple[Any, ...]], TypeDescriptor]] = {
    Kind.ARRAY: _describe_array,
    Kind.CHAN: _describe_chan,
    Kind.FUNC: _describe_func,
    Kind.MAP: _describe_map,
    Kind.PTR: _describe_ptr,
    Kind.SLICE: _describe_slice,
    Kind.STRUCT: _describe_struct,
}


# ── Records ────────────────────────────────────────────────────────

def record_fields(cls: type) -> list[tuple[str, Any]]:
    """Return ``(name, annotation)`` for each dataclass field, in declaration order."""
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise UnrepresentableTypeError(
            f"Cannot resolve field annotations of {cls.__name__}: {e}"
        ) from e
    return [(f.name, hints[f.name]) for f in dataclasses.fields(cls)]


# ── Functions ──────────────────────────────────────────────────────

def split_results(ret: Any) -> tuple[Any, ...]:
    """Interpret a return annotation as a result list.

    ``None`` means no results, a fixed ``tuple[A, B]`` means one result per
    element, anything else is a single result.
    """
    if ret is None or ret is _NONE_TYPE:
        return ()
    if get_origin(ret) is tuple:
        args = get_args(ret)
        if Ellipsis not in args:
            return tuple(args)
    return (ret,)


def signature_of(fn: Callable[..., Any]) -> CallSignature:
    """Native parameter/result annotations of a live function.

    A ``*args: T`` parameter becomes a trailing ``list[T]`` with
    ``variadic=True``. Keyword-only parameters, ``**kwargs`` and missing
    annotations are rejected.
    """
    name = getattr(fn, '__qualname__', repr(fn))
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise UnrepresentableTypeError(f"Cannot inspect signature of {name}: {e}") from e

    target = fn if inspect.isroutine(fn) else getattr(type(fn), '__call__', fn)
    try:
        hints = get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as e:
        raise UnrepresentableTypeError(f"Cannot resolve annotations of {name}: {e}") from e

    params: list[Any] = []
    variadic = False
    for param in sig.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            params.append(_param_hint(name, param.name, hints))
        elif param.kind is param.VAR_POSITIONAL:
            params.append(list[_param_hint(name, param.name, hints)])
            variadic = True
        else:
            raise UnrepresentableTypeError(
                f"{name}: keyword-only parameter {param.name!r} is not supported"
            )

    if 'return' not in hints:
        raise UnrepresentableTypeError(f"{name} has no return annotation")
    return CallSignature(tuple(params), split_results(hints['return']), variadic)


def _param_hint(fn_name: str, param_name: str, hints: dict[str, Any]) -> Any:
    try:
        return hints[param_name]
    except KeyError:
        raise UnrepresentableTypeError(
            f"Parameter {param_name!r} of {fn_name} has no annotation"
        ) from None


def describe_signature(sig: CallSignature) -> TypeDescriptor:
    return TypeDescriptor.function(
        [describe(p) for p in sig.params],
        [describe(r) for r in sig.results],
        sig.variadic,
    )


def describe_callable(fn: Callable[..., Any]) -> TypeDescriptor:
    """Descriptor of a function's *type* (its signature, not its identity)."""
    return describe_signature(signature_of(fn))


# ── Values ─────────────────────────────────────────────────────────

def type_of(value: Any) -> TypeDescriptor:
    """Descriptor of a value's runtime type.

    Works for scalars, dataclass instances and annotated functions.
    Containers are rejected: their element types cannot be recovered from
    a value, so describe their annotation instead.
    """
    if value is None:
        raise UnrepresentableTypeError("Cannot get the type of None")
    value_type = type(value)
    if value_type in _PYTHON_TO_KIND:
        return TypeDescriptor.scalar(_PYTHON_TO_KIND[value_type])
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return describe(value_type)
    if callable(value) and not isinstance(value, type):
        return describe_callable(value)
    raise UnrepresentableTypeError(
        f"Cannot infer a descriptor from a {value_type.__name__} value; "
        "describe its annotation instead"
    )
