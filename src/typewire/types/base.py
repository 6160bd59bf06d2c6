"""Scalar type markers and the scalar type registry."""

from __future__ import annotations

import dataclasses

from ..exc import UnknownKindError
from .kinds import Kind, SIGNED_KINDS, UNSIGNED_KINDS


@dataclasses.dataclass(frozen=True, slots=True)
class ScalarType:
    """Describes a fixed-width scalar kind for use in ``Annotated`` hints.

    Parameters
    ----------
    kind : Kind
        The scalar kind.
    python_type : type
        The Python type carrying values of this kind.
    bits : int
        Storage width in bits, 0 for variable-width (string).
    """
    kind: Kind
    python_type: type
    bits: int = 0

    @property
    def name(self) -> str:
        return self.kind.label

    @property
    def bounds(self) -> tuple[int, int] | None:
        """Inclusive ``(min, max)`` for integer kinds, ``None`` otherwise."""
        if self.kind in SIGNED_KINDS:
            half = 1 << (self.bits - 1)
            return -half, half - 1
        if self.kind in UNSIGNED_KINDS:
            return 0, (1 << self.bits) - 1
        return None


# ── Global scalar registry ────────────────────────────────────────
_REGISTRY_BY_KIND: dict[Kind, ScalarType] = {}
_REGISTRY_BY_NAME: dict[str, ScalarType] = {}


def register_type(scalar: ScalarType) -> ScalarType:
    """Register a ScalarType in the global registry."""
    _REGISTRY_BY_KIND[scalar.kind] = scalar
    _REGISTRY_BY_NAME[scalar.name] = scalar
    return scalar


def get_type_by_kind(kind: Kind | int) -> ScalarType:
    """Look up a ScalarType by its kind."""
    try:
        return _REGISTRY_BY_KIND[Kind(kind)]
    except (KeyError, ValueError):
        raise UnknownKindError(f"No scalar type for kind {kind!r}") from None


def get_type_by_name(name: str) -> ScalarType:
    """Look up a ScalarType by its kind label."""
    try:
        return _REGISTRY_BY_NAME[name]
    except KeyError:
        raise UnknownKindError(f"No scalar type named {name!r}") from None


def all_types() -> list[ScalarType]:
    """Return all registered ScalarTypes."""
    return list(_REGISTRY_BY_KIND.values())
