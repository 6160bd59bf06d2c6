"""Shared fixtures: registries, dispatchers and an importable handler module."""

from __future__ import annotations

import sys
import textwrap

import pytest

from typewire.dispatch import Dispatcher
from typewire.registry import FunctionRegistry

HANDLERS_MODULE = "typewire_test_handlers"

HANDLERS_SOURCE = textwrap.dedent('''
    from dataclasses import dataclass

    from typewire import Int64


    @dataclass
    class Person:
        Name: str
        Age: Int64


    def add(a: int, b: int) -> int:
        return a + b


    def shift(values: list[int], offset: str) -> list[int]:
        return [v + int(offset) for v in values]


    def count_ages(people: list[Person]) -> dict[Int64, int]:
        counts = {}
        for person in people:
            counts[person.Age] = counts.get(person.Age, 0) + 1
        return counts


    NOT_A_FUNCTION = 42
''')


@pytest.fixture
def registry():
    return FunctionRegistry()


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def handlers_module(tmp_path, monkeypatch):
    """Write an importable module of annotated handlers and return its name."""
    (tmp_path / f"{HANDLERS_MODULE}.py").write_text(HANDLERS_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, HANDLERS_MODULE, raising=False)
    yield HANDLERS_MODULE
    sys.modules.pop(HANDLERS_MODULE, None)
