"""Envelope framing: 8-byte header pack/unpack."""

from __future__ import annotations

import struct

from ..exc import DeserializationError
from .constants import HEADER_SIZE, LITTLE_ENDIAN, WIRE_VERSION

# Header layout: [endian: 1B][msg_type: 1B][version: 2H][length: 4i]
_HEADER_LE = struct.Struct('<BBHi')  # little-endian
_HEADER_BE = struct.Struct('>BBHi')  # big-endian


def pack_header(msg_type: int, total_length: int) -> bytes:
    """Pack an 8-byte header (always little-endian).

    Parameters
    ----------
    msg_type : int
        Message type (1=call, 2=result).
    total_length : int
        Total message length including the 8-byte header.
    """
    return _HEADER_LE.pack(LITTLE_ENDIAN, msg_type, WIRE_VERSION, total_length)


def unpack_header(data: bytes | bytearray | memoryview) -> tuple[int, int, int, int]:
    """Unpack an 8-byte header.

    Returns
    -------
    (endian, msg_type, version, total_length)
    """
    if len(data) < HEADER_SIZE:
        raise DeserializationError(f"Header too short: {len(data)} < {HEADER_SIZE}")
    endian = data[0]
    s = _HEADER_LE if endian == LITTLE_ENDIAN else _HEADER_BE
    endian_b, msg_type, version, total_length = s.unpack(bytes(data[:HEADER_SIZE]))
    return endian_b, msg_type, version, total_length
