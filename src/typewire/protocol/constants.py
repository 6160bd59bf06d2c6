"""Wire protocol constants."""

from __future__ import annotations

import enum

# ── Message types ──────────────────────────────────────────────────
CALL_MSG = 1    # call envelope: descriptor, param count, arguments
RESULT_MSG = 2  # result envelope: single encoded value

# ── Header ─────────────────────────────────────────────────────────
HEADER_SIZE = 8  # 1 (endian) + 1 (msg type) + 2 (wire version) + 4 (total length)
LITTLE_ENDIAN = 1
BIG_ENDIAN = 0
WIRE_VERSION = 1


class WireTag(enum.IntEnum):
    """Leading byte of every encoded value."""
    NIL = 0
    BOOL = 1
    INT = 2         # int64
    UINT = 3        # uint64
    FLOAT = 4       # float64
    COMPLEX = 5     # 2 x float64
    STRING = 6      # int32 length + utf-8
    LIST = 7        # int32 count + items
    MAP = 8         # int32 count + key/value pairs
    RECORD = 9      # int32 count + (null-terminated name, value) pairs
    DESCRIPTOR = 10


# Struct format chars for fixed-width tags
TAG_STRUCT: dict[int, tuple[str, int]] = {
    WireTag.BOOL:    ('B', 1),
    WireTag.INT:     ('q', 8),
    WireTag.UINT:    ('Q', 8),
    WireTag.FLOAT:   ('d', 8),
    WireTag.COMPLEX: ('dd', 16),
}

# Descriptor body presence flags
HAS_COMPONENTS = 0x01
HAS_METADATA = 0x02
