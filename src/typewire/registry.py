"""Function registry keyed by the canonical descriptor of a function's type."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, NamedTuple

from .exc import DispatchMissError
from .types.describe import CallSignature, describe_signature, signature_of
from .types.descriptor import TypeDescriptor

log = logging.getLogger("typewire.registry")


class RegisteredFunction(NamedTuple):
    """A registered callable with its native signature and descriptor."""
    func: Callable[..., Any]
    signature: CallSignature
    descriptor: TypeDescriptor


class FunctionRegistry:
    """Maps function-type descriptors to callables.

    Functions are keyed purely by their structural signature: registering
    two functions with the same signature keeps only the later one.

    Usage::

        registry = FunctionRegistry()

        @registry.register
        def add(a: int, b: int) -> int:
            return a + b

        registry.get(describe(Callable[[int, int], int]))  # -> add
    """

    def __init__(self) -> None:
        self._functions: dict[str, RegisteredFunction] = {}
        self._lock = threading.Lock()

    def register(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a function under its signature's canonical key.

        Returns the function unchanged, so this works as a decorator.
        """
        signature = signature_of(func)
        descriptor = describe_signature(signature)
        entry = RegisteredFunction(func, signature, descriptor)
        key = descriptor.key
        with self._lock:
            previous = self._functions.get(key)
            self._functions[key] = entry
        if previous is not None and previous.func is not func:
            log.debug("replaced %s with %s for %s",
                      _name(previous.func), _name(func), key)
        else:
            log.debug("registered %s for %s", _name(func), key)
        return func

    def lookup(self, signature: TypeDescriptor | str) -> RegisteredFunction:
        """Return the entry registered for a descriptor or canonical key."""
        key = signature.key if isinstance(signature, TypeDescriptor) else signature
        entry = self._functions.get(key)
        if entry is None:
            raise DispatchMissError(
                f"No function registered for signature {key} "
                f"({len(self._functions)} registered)"
            )
        return entry

    def get(self, signature: TypeDescriptor | str) -> Callable[..., Any]:
        """Return the callable registered for a descriptor or canonical key."""
        return self.lookup(signature).func

    @property
    def signatures(self) -> list[str]:
        """Return all registered canonical keys."""
        with self._lock:
            return list(self._functions)

    def __contains__(self, signature: object) -> bool:
        if isinstance(signature, TypeDescriptor):
            signature = signature.key
        return signature in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    @classmethod
    def from_functions(cls, functions: Iterable[Callable[..., Any]]) -> FunctionRegistry:
        registry = cls()
        for func in functions:
            registry.register(func)
        return registry

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> FunctionRegistry:
        """Build a registry from a config dict.

        ``functions`` lists ``module:attribute`` import paths::

            FunctionRegistry.from_config({
                "functions": ["billing.handlers:total", "billing.handlers:count_ages"],
            })
        """
        from .config import resolve_import_path, validate_config
        paths = validate_config(config).get("functions", [])
        return cls.from_functions(resolve_import_path(path) for path in paths)

    def __repr__(self) -> str:
        with self._lock:
            entries = list(self._functions.values())
        names = ", ".join(_name(e.func) for e in entries)
        return f"FunctionRegistry([{names}])"


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, '__qualname__', repr(func))
