"""Caller-side helpers for invoking registered functions through a transport.

A transport is any callable taking the encoded call envelope and returning
the encoded result envelope, e.g. ``Dispatcher(registry).dispatch`` in
process or a socket round trip.
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import Any, Callable

from .dispatch import decode_result, encode_call, function_descriptor
from .types.describe import signature_of
from .types.descriptor import TypeDescriptor
from .types.reconstruct import reconstruct

log = logging.getLogger("typewire")

Transport = Callable[[bytes], bytes]

# Default for ``result_type``: decode into the first declared result type.
DECLARED = object()


def call(transport: Transport, target: Any, *args: Any, result_type: Any = DECLARED) -> Any:
    """Encode a call to ``target``, send it and decode the first result.

    ``target`` is a function, a ``Callable`` annotation or a function-type
    descriptor; only its signature is sent. Pass ``result_type=None`` to
    decode the result untyped.
    """
    desc = function_descriptor(target)
    if result_type is DECLARED:
        result_type = _declared_result(target, desc)
    log.debug("call: %s(%s)", _name(target), ", ".join(repr(a) for a in args))
    t0 = time.perf_counter()
    response = transport(encode_call(desc, *args))
    result = decode_result(response, result_type)
    elapsed = time.perf_counter() - t0
    log.debug("call completed in %.3fms", elapsed * 1000)
    return result


def _declared_result(target: Any, desc: TypeDescriptor) -> Any:
    # Prefer the caller's own annotation so records decode into its class.
    if inspect.isroutine(target):
        results = signature_of(target).results
        return results[0] if results else None
    results = desc.results
    return reconstruct(results[0]) if results else None


def _name(target: Any) -> str:
    if isinstance(target, TypeDescriptor):
        return target.key
    return getattr(target, '__qualname__', repr(target))


class RemoteFunction:
    """Reusable stub for a function signature reachable through a transport.

    Usage::

        add = RemoteFunction(Callable[[int, int], int], dispatcher.dispatch)
        add(1, 2)  # -> 3
    """

    def __init__(self, target: Any, transport: Transport, result_type: Any = DECLARED) -> None:
        self.target = target
        self.descriptor = function_descriptor(target)
        self.transport = transport
        self.result_type = result_type

    def __call__(self, *args: Any) -> Any:
        return call(self.transport, self.target, *args, result_type=self.result_type)

    def __repr__(self) -> str:
        return f"RemoteFunction({_name(self.target)!r})"


def remote(transport: Transport, result_type: Any = DECLARED) -> Callable[..., Callable[..., Any]]:
    """Decorator that routes calls through ``transport`` by signature.

    The decorated function's body is never executed; its annotations select
    the remote function and drive argument and result encoding.

    Usage::

        @remote(dispatcher.dispatch)
        def add(a: int, b: int) -> int: ...

        add(1, 2)  # -> 3
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        stub = RemoteFunction(fn, transport, result_type)
        sig = inspect.signature(fn)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            # keyword arguments are sent positionally, in declared order
            bound = sig.bind(*args, **kwargs)
            return stub(*bound.args)

        wrapper._remote = stub  # type: ignore[attr-defined]
        return wrapper

    return decorator
