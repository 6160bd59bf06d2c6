"""Canonical text form of a TypeDescriptor.

The form is a compact JSON object with keys in the order ``kind``,
``struct``, ``extra``; nested map keys are sorted and absent maps are
omitted, so equal descriptors always produce identical text::

    {"kind":"struct","struct":{"Age":{"kind":"int64"},"Name":{"kind":"string"}},
     "extra":{"field_0":"Name","field_1":"Age","fields_number":2}}
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..exc import DescriptorError, DeserializationError
from .descriptor import TypeDescriptor
from .kinds import Kind


def to_dict(desc: TypeDescriptor) -> dict[str, Any]:
    """Convert a descriptor to plain, ordered JSON-compatible data."""
    data: dict[str, Any] = {'kind': desc.kind.label}
    if desc.struct is not None:
        data['struct'] = {name: to_dict(desc.struct[name]) for name in sorted(desc.struct)}
    if desc.extra is not None:
        data['extra'] = {name: desc.extra[name] for name in sorted(desc.extra)}
    return data


def from_dict(data: Mapping[str, Any]) -> TypeDescriptor:
    """Build a descriptor from the data produced by :func:`to_dict`."""
    if not isinstance(data, Mapping):
        raise DescriptorError(f"Descriptor must be an object, got {type(data).__name__}")
    unknown = set(data) - {'kind', 'struct', 'extra'}
    if unknown:
        raise DescriptorError(f"Unexpected descriptor keys: {sorted(unknown)}")
    label = data.get('kind')
    if not isinstance(label, str):
        raise DescriptorError(f"Descriptor 'kind' must be a string, got {label!r}")
    kind = Kind.from_label(label)

    struct = data.get('struct')
    if struct is not None:
        if not isinstance(struct, Mapping):
            raise DescriptorError("Descriptor 'struct' must be an object")
        struct = {name: from_dict(nested) for name, nested in struct.items()}

    extra = data.get('extra')
    if extra is not None and not isinstance(extra, Mapping):
        raise DescriptorError("Descriptor 'extra' must be an object")

    return TypeDescriptor(kind, struct, extra)


def to_text(desc: TypeDescriptor) -> str:
    """Encode a descriptor as canonical JSON text."""
    return json.dumps(to_dict(desc), separators=(',', ':'), ensure_ascii=False)


def from_text(text: str | bytes) -> TypeDescriptor:
    """Decode canonical JSON text into a descriptor."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DeserializationError(f"Invalid descriptor text: {e}") from e
    return from_dict(data)
