"""Unit tests for the signature-keyed function registry."""

import logging
import threading
from collections.abc import Callable

import pytest

from typewire.exc import DispatchError, DispatchMissError, UnrepresentableTypeError
from typewire.registry import FunctionRegistry
from typewire.types import array_of, describe, describe_callable


def add(a: int, b: int) -> int:
    return a + b


def subtract(a: int, b: int) -> int:
    return a - b


def shout(s: str) -> str:
    return s.upper()


def halve(x: float) -> float:
    return x / 2


def length(items: list[str]) -> int:
    return len(items)


class TestRegister:
    def test_register_and_get(self, registry):
        registry.register(add)
        assert registry.get(describe(Callable[[int, int], int])) is add

    def test_lookup_by_key(self, registry):
        registry.register(shout)
        key = describe(Callable[[str], str]).key
        entry = registry.lookup(key)
        assert entry.func is shout
        assert entry.signature.params == (str,)
        assert entry.descriptor.key == key

    def test_decorator_returns_function(self, registry):
        @registry.register
        def double(x: int) -> int:
            return 2 * x

        assert double(4) == 8
        assert registry.get(describe_callable(double)) is double

    def test_same_signature_replaces(self, registry):
        registry.register(add)
        registry.register(subtract)
        assert len(registry) == 1
        assert registry.get(describe_callable(add)) is subtract

    def test_reregister_same_function(self, registry):
        registry.register(add)
        registry.register(add)
        assert len(registry) == 1

    def test_unrepresentable_function(self, registry):
        def f(x) -> int:
            return 0

        with pytest.raises(UnrepresentableTypeError):
            registry.register(f)
        assert len(registry) == 0


class TestLookup:
    def test_miss(self, registry):
        registry.register(add)
        with pytest.raises(DispatchMissError, match="No function registered"):
            registry.lookup(describe(Callable[[str], str]))

    def test_miss_is_dispatch_error(self, registry):
        with pytest.raises(DispatchError):
            registry.get('{"kind":"func"}')

    def test_contains(self, registry):
        registry.register(halve)
        assert describe(Callable[[float], float]) in registry
        assert describe(Callable[[float], float]).key in registry
        assert describe(Callable[[int], int]) not in registry

    def test_signatures(self, registry):
        registry.register(add)
        registry.register(shout)
        assert set(registry.signatures) == {
            describe_callable(add).key, describe_callable(shout).key,
        }

    def test_from_functions(self):
        registry = FunctionRegistry.from_functions([add, shout, length])
        assert len(registry) == 3
        assert registry.get(describe(Callable[[list[str]], int])) is length

    def test_repr(self):
        registry = FunctionRegistry.from_functions([add])
        assert repr(registry) == "FunctionRegistry([add])"


class TestFromConfig:
    def test_import_paths(self, handlers_module):
        registry = FunctionRegistry.from_config({
            "functions": [f"{handlers_module}:add", f"{handlers_module}:shift"],
        })
        assert len(registry) == 2
        assert registry.get(describe(Callable[[int, int], int]))(1, 2) == 3

    def test_empty_config(self):
        assert len(FunctionRegistry.from_config({})) == 0

    def test_functions_must_be_a_list(self):
        with pytest.raises(ValueError, match="must be a list"):
            FunctionRegistry.from_config({"functions": "mod:add"})

    def test_invalid_function_path(self):
        with pytest.raises(ValueError, match="Invalid function path"):
            FunctionRegistry.from_config({"functions": ["no_colon"]})


class TestConcurrency:
    def test_concurrent_register(self, registry):
        functions = [add, shout, halve, length]
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(50):
                for func in functions:
                    registry.register(func)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == len(functions)
        for func in functions:
            assert registry.get(describe_callable(func)) is func

    def test_lookup_while_registering(self, registry):
        registry.register(add)
        key = describe_callable(add).key
        errors = []

        def reader():
            for _ in range(500):
                try:
                    registry.lookup(key)
                except DispatchMissError as e:
                    errors.append(e)

        def writer():
            for _ in range(500):
                registry.register(shout)

        threads = [threading.Thread(target=reader), threading.Thread(target=writer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []

    def test_repr_while_registering(self, registry):
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                try:
                    repr(registry)
                except RuntimeError as e:
                    errors.append(e)

        def make(i):
            def f(x: array_of(int, i + 1)) -> int:
                return i
            return f

        t = threading.Thread(target=reader)
        t.start()
        try:
            for i in range(300):
                registry.register(make(i))
        finally:
            stop.set()
            t.join()
        assert errors == []
        assert len(registry) == 300
        assert len(registry.signatures) == 300


class TestRegistryLogging:
    def test_register_logs(self, registry, caplog):
        with caplog.at_level(logging.DEBUG, logger="typewire.registry"):
            registry.register(add)
        assert any("registered add" in r.message for r in caplog.records)

    def test_replace_logs(self, registry, caplog):
        registry.register(add)
        with caplog.at_level(logging.DEBUG, logger="typewire.registry"):
            registry.register(subtract)
        assert any("replaced add with subtract" in r.message for r in caplog.records)
