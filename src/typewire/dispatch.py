"""Call and result envelopes, and the receiver-side dispatcher.

Call envelope::

    [header][function-type descriptor][parameter count][arg 0]...[arg N-1]

Result envelope::

    [header][first result]
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Sequence, get_origin

from .exc import DescriptorError, DeserializationError, SerializationError, ShapeMismatchError
from .protocol.constants import CALL_MSG, RESULT_MSG
from .protocol.deserializer import Deserializer
from .protocol.serializer import Serializer
from .registry import FunctionRegistry, RegisteredFunction
from .types.describe import describe, describe_callable
from .types.descriptor import TypeDescriptor
from .types.kinds import Kind
from .types.reconstruct import reconstruct

log = logging.getLogger("typewire.dispatch")


def function_descriptor(target: Any) -> TypeDescriptor:
    """Descriptor of a call target: a descriptor, a Callable annotation or a function."""
    if isinstance(target, TypeDescriptor):
        desc = target
    elif get_origin(target) is not None:
        desc = describe(target)
    else:
        desc = describe_callable(target)
    if desc.kind != Kind.FUNC:
        raise DescriptorError(f"Expected a function type, got {desc.kind.label}")
    return desc


def pack_arguments(desc: TypeDescriptor, args: Sequence[Any]) -> list[Any]:
    """Match positional arguments to declared parameters.

    For variadic signatures the trailing arguments are gathered into the
    final list parameter.
    """
    count = len(desc.params)
    if desc.variadic:
        fixed = count - 1
        if len(args) < fixed:
            raise TypeError(f"expected at least {fixed} arguments, got {len(args)}")
        return [*args[:fixed], list(args[fixed:])]
    if len(args) != count:
        raise TypeError(f"expected {count} arguments, got {len(args)}")
    return list(args)


def encode_call(target: Any, *args: Any) -> bytes:
    """Build a call envelope for ``target`` with positional ``args``.

    Each argument is encoded against the declared parameter type rebuilt
    from the descriptor.
    """
    desc = function_descriptor(target)
    values = pack_arguments(desc, args)
    param_types = [reconstruct(p) for p in desc.params]
    items: list[tuple[Any, Any]] = [(desc, TypeDescriptor), (len(param_types), int)]
    items.extend(zip(values, param_types))
    return Serializer().serialize_message(items, CALL_MSG)


def decode_result(payload: bytes | bytearray, expected_type: Any = None) -> Any:
    """Decode a result envelope into ``expected_type`` (untyped if None)."""
    des = Deserializer()
    msg_type = des.open_message(payload)
    if msg_type != RESULT_MSG:
        raise DeserializationError(f"Expected a result message, got type {msg_type}")
    value = des.read(expected_type)
    des.expect_end()
    return value


class Dispatcher:
    """Receiver side of a dynamic call.

    Arguments are decoded with the *registered* function's own parameter
    types; the envelope only supplies the lookup key and the raw values.
    Exceptions raised by the function propagate unchanged.

    Usage::

        dispatcher = Dispatcher(registry)
        response = dispatcher.dispatch(encode_call(add, 1, 2))
        decode_result(response, int)  # -> 3
    """

    def __init__(self, registry: FunctionRegistry) -> None:
        self.registry = registry

    def dispatch(self, payload: bytes | bytearray) -> bytes:
        """Decode a call envelope, invoke the function, encode its first result."""
        des = Deserializer()
        msg_type = des.open_message(payload)
        if msg_type != CALL_MSG:
            raise DeserializationError(f"Expected a call message, got type {msg_type}")
        descriptor = des.read(TypeDescriptor)
        count = des.read(int)
        log.debug("dispatch: %s", descriptor.key)
        t0 = time.perf_counter()

        entry = self.registry.lookup(descriptor)
        params = entry.signature.params
        if count != len(params):
            raise ShapeMismatchError(
                f"Call carries {count} arguments, {_name(entry.func)} declares {len(params)}"
            )
        args = [des.read(param) for param in params]
        des.expect_end()

        if entry.signature.variadic:
            *fixed, rest = args
            result = entry.func(*fixed, *rest)
        else:
            result = entry.func(*args)

        response = self._encode_result(entry, result)
        elapsed = time.perf_counter() - t0
        log.debug("dispatch completed in %.3fms", elapsed * 1000)
        return response

    __call__ = dispatch

    def _encode_result(self, entry: RegisteredFunction, result: Any) -> bytes:
        results = entry.signature.results
        if not results:
            value, annotation = None, None
        elif len(results) == 1:
            value, annotation = result, results[0]
        else:
            if not isinstance(result, tuple) or len(result) != len(results):
                raise SerializationError(
                    f"{_name(entry.func)} declares {len(results)} results, returned {result!r}"
                )
            # Only the first result travels back.
            value, annotation = result[0], results[0]
        return Serializer().serialize_message([(value, annotation)], RESULT_MSG)


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, '__qualname__', repr(func))
