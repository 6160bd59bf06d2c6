"""TypeDescriptor: the recursive, serializable description of a native type."""

from __future__ import annotations

import dataclasses
import functools
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence, Union

from ..exc import DescriptorError
from .kinds import (
    Kind, ChanDir, SCALAR_KINDS,
    ELEMENT_TYPE, ARRAY_LENGTH, KEY_TYPE, VALUE_TYPE,
    NUM_IN, NUM_OUT, NUM_FIELD, CHAN_DIR, VARIADIC,
    in_key, out_key, field_key,
)

Scalar = Union[bool, int, str]

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclasses.dataclass(frozen=True, eq=False)
class TypeDescriptor:
    """Structural description of a type.

    Parameters
    ----------
    kind : Kind
        Structural category. A label (``"struct"``) or code is converted.
    struct : Mapping[str, TypeDescriptor] | None
        Nested descriptors of composite kinds, keyed by component name
        (``element_type``, ``in_0``, a field name, ...).
    extra : Mapping[str, bool | int | str] | None
        Scalar metadata (array length, counts, field order, ...).

    Empty maps are normalised to ``None``; the instance is immutable and
    compares/hashes by its canonical key.
    """
    kind: Kind
    struct: Mapping[str, TypeDescriptor] | None = None
    extra: Mapping[str, Scalar] | None = None

    def __post_init__(self) -> None:
        kind = self.kind
        if not isinstance(kind, Kind):
            kind = Kind.from_label(kind) if isinstance(kind, str) else Kind.from_code(kind)
            object.__setattr__(self, 'kind', kind)
        struct = _freeze_components(self.struct)
        extra = _freeze_metadata(self.extra)
        if kind in SCALAR_KINDS and (struct is not None or extra is not None):
            raise DescriptorError(f"Scalar kind {kind.label!r} cannot carry components or metadata")
        object.__setattr__(self, 'struct', struct)
        object.__setattr__(self, 'extra', extra)

    # ── Factories ──────────────────────────────────────────────────

    @classmethod
    def scalar(cls, kind: Kind) -> TypeDescriptor:
        if kind not in SCALAR_KINDS:
            raise DescriptorError(f"{Kind(kind).label!r} is not a scalar kind")
        return cls(kind)

    @classmethod
    def array(cls, element: TypeDescriptor, length: int) -> TypeDescriptor:
        return cls(Kind.ARRAY, {ELEMENT_TYPE: element}, {ARRAY_LENGTH: length})

    @classmethod
    def slice(cls, element: TypeDescriptor) -> TypeDescriptor:
        return cls(Kind.SLICE, {ELEMENT_TYPE: element})

    @classmethod
    def pointer(cls, element: TypeDescriptor) -> TypeDescriptor:
        return cls(Kind.PTR, {ELEMENT_TYPE: element})

    @classmethod
    def mapping(cls, key: TypeDescriptor, value: TypeDescriptor) -> TypeDescriptor:
        return cls(Kind.MAP, {KEY_TYPE: key, VALUE_TYPE: value})

    @classmethod
    def chan(cls, element: TypeDescriptor, direction: ChanDir = ChanDir.BOTH) -> TypeDescriptor:
        return cls(Kind.CHAN, {ELEMENT_TYPE: element}, {CHAN_DIR: direction.value})

    @classmethod
    def function(
        cls,
        params: Sequence[TypeDescriptor],
        results: Sequence[TypeDescriptor] = (),
        variadic: bool = False,
    ) -> TypeDescriptor:
        if variadic and (not params or params[-1].kind != Kind.SLICE):
            raise DescriptorError("A variadic function must end with a slice parameter")
        struct: dict[str, TypeDescriptor] = {}
        for i, param in enumerate(params):
            struct[in_key(i)] = param
        for i, result in enumerate(results):
            struct[out_key(i)] = result
        extra = {NUM_IN: len(params), NUM_OUT: len(results), VARIADIC: bool(variadic)}
        return cls(Kind.FUNC, struct, extra)

    @classmethod
    def record(cls, fields: Iterable[tuple[str, TypeDescriptor]]) -> TypeDescriptor:
        struct: dict[str, TypeDescriptor] = {}
        extra: dict[str, Scalar] = {}
        for i, (name, desc) in enumerate(fields):
            if name in struct:
                raise DescriptorError(f"Duplicate field name {name!r}")
            struct[name] = desc
            extra[field_key(i)] = name
        extra[NUM_FIELD] = len(struct)
        return cls(Kind.STRUCT, struct, extra)

    # ── Raw access ─────────────────────────────────────────────────

    @property
    def components(self) -> Mapping[str, TypeDescriptor]:
        return self.struct if self.struct is not None else _EMPTY

    @property
    def metadata(self) -> Mapping[str, Scalar]:
        return self.extra if self.extra is not None else _EMPTY

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    def component(self, name: str) -> TypeDescriptor:
        """Return the nested descriptor stored under ``name``."""
        try:
            return self.components[name]
        except KeyError:
            raise DescriptorError(
                f"{self.kind.label} descriptor has no component {name!r}"
            ) from None

    def meta(self, name: str, expected: type = int) -> Any:
        """Return the metadata value under ``name``, checking its type."""
        try:
            value = self.metadata[name]
        except KeyError:
            raise DescriptorError(
                f"{self.kind.label} descriptor has no metadata {name!r}"
            ) from None
        if isinstance(value, bool) and expected is not bool or not isinstance(value, expected):
            raise DescriptorError(
                f"Metadata {name!r} of {self.kind.label} descriptor must be "
                f"{expected.__name__}, got {value!r}"
            )
        return value

    # ── Kind-specific views ────────────────────────────────────────

    @property
    def element(self) -> TypeDescriptor:
        self._expect(Kind.ARRAY, Kind.CHAN, Kind.PTR, Kind.SLICE)
        return self.component(ELEMENT_TYPE)

    @property
    def key_type(self) -> TypeDescriptor:
        self._expect(Kind.MAP)
        return self.component(KEY_TYPE)

    @property
    def value_type(self) -> TypeDescriptor:
        self._expect(Kind.MAP)
        return self.component(VALUE_TYPE)

    @property
    def length(self) -> int:
        self._expect(Kind.ARRAY)
        length = self.meta(ARRAY_LENGTH)
        if length < 0:
            raise DescriptorError(f"Negative array length {length}")
        return length

    @property
    def chan_dir(self) -> ChanDir:
        self._expect(Kind.CHAN)
        raw = self.meta(CHAN_DIR)
        try:
            return ChanDir(raw)
        except ValueError:
            raise DescriptorError(f"Invalid channel direction {raw}") from None

    @property
    def params(self) -> list[TypeDescriptor]:
        self._expect(Kind.FUNC)
        return [self.component(in_key(i)) for i in range(self.meta(NUM_IN))]

    @property
    def results(self) -> list[TypeDescriptor]:
        self._expect(Kind.FUNC)
        return [self.component(out_key(i)) for i in range(self.meta(NUM_OUT))]

    @property
    def variadic(self) -> bool:
        self._expect(Kind.FUNC)
        if VARIADIC not in self.metadata:
            return False
        return self.meta(VARIADIC, bool)

    @property
    def field_names(self) -> list[str]:
        """Field names in declaration order, recovered from ``field_<i>``."""
        self._expect(Kind.STRUCT)
        count = self.meta(NUM_FIELD)
        names = [self.meta(field_key(i), str) for i in range(count)]
        if len(set(names)) != count or set(names) != set(self.components):
            raise DescriptorError(
                f"Struct field order {names} does not match components "
                f"{sorted(self.components)}"
            )
        return names

    @property
    def fields(self) -> list[tuple[str, TypeDescriptor]]:
        return [(name, self.component(name)) for name in self.field_names]

    def _expect(self, *kinds: Kind) -> None:
        if self.kind not in kinds:
            wanted = ", ".join(k.label for k in kinds)
            raise DescriptorError(f"Expected a {wanted} descriptor, got {self.kind.label}")

    # ── Canonical form ─────────────────────────────────────────────

    @functools.cached_property
    def key(self) -> str:
        """Canonical text form; the registry lookup key."""
        from .canonical import to_text
        return to_text(self)

    def to_dict(self) -> dict[str, Any]:
        from .canonical import to_dict
        return to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TypeDescriptor:
        from .canonical import from_dict
        return from_dict(data)

    @classmethod
    def from_text(cls, text: str | bytes) -> TypeDescriptor:
        from .canonical import from_text
        return from_text(text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.key})"


def _freeze_components(
    struct: Mapping[str, TypeDescriptor] | None,
) -> Mapping[str, TypeDescriptor] | None:
    if not struct:
        return None
    frozen: dict[str, TypeDescriptor] = {}
    for name, desc in struct.items():
        if not isinstance(name, str):
            raise DescriptorError(f"Component name must be str, got {name!r}")
        if not isinstance(desc, TypeDescriptor):
            raise DescriptorError(
                f"Component {name!r} must be a TypeDescriptor, got {type(desc).__name__}"
            )
        frozen[name] = desc
    return MappingProxyType(frozen)


def _freeze_metadata(extra: Mapping[str, Scalar] | None) -> Mapping[str, Scalar] | None:
    if not extra:
        return None
    frozen: dict[str, Scalar] = {}
    for name, value in extra.items():
        if not isinstance(name, str):
            raise DescriptorError(f"Metadata key must be str, got {name!r}")
        if not isinstance(value, (bool, int, str)):
            raise DescriptorError(
                f"Metadata {name!r} must be bool, int or str, got {type(value).__name__}"
            )
        frozen[name] = value
    return MappingProxyType(frozen)
