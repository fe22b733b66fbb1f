# Copyright (C) 2026  tagframes contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Utility classes and helpers for tagframes.

You should not rely on the interfaces here being stable. They are
intended for internal use in tagframes only.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from ._frames import Version


class error(Exception):
    pass


class InvalidFrameData(error, ValueError):
    pass


class UnsupportedFrameError(error, NotImplementedError):
    pass


class SaveConfig(NamedTuple):

    v2_version: Version | int = 4
    """The ID3v2 major version frames get written for"""


def bchr(value: int) -> bytes:
    """A single byte from an int in the range 0..255.

    Raises ValueError for anything outside that range.
    """

    return bytes([value])


def extract_terminated(buffer: bytearray, encoding: str = "latin1") -> str:
    """Removes a NULL terminated string from the start of `buffer` and
    returns it decoded.

    The buffer is modified in place and left positioned after the
    terminator. If there is no terminator the buffer gets drained and an
    empty string is returned.
    """

    index = buffer.find(b"\x00")
    if index == -1:
        del buffer[:]
        return ""

    text = bytes(buffer[:index]).decode(encoding)
    del buffer[:index + 1]
    return text


def encode_terminated(value: str, encoding: str = "latin1") -> bytes:
    """The encoded text followed by a single NULL byte"""

    return value.encode(encoding) + b"\x00"


def decode_be_uint(data: bytes | bytearray) -> int:
    """Big-endian unsigned integer of arbitrary length, 0 for no data"""

    value = 0
    for byte in data:
        value = (value << 8) | byte
    return value


def encode_be_uint_minimal(value: int, minwidth: int = 4) -> bytes:
    """Encodes `value` as a big-endian unsigned 64 bit integer with
    leading zero bytes stripped, but keeping at least `minwidth` bytes.

    PCNT/POPM style counters grow as needed, but older readers only
    understand 32 bit ones.

    Raises ValueError if the value doesn't fit into 64 bits.
    """

    if not 0 <= minwidth <= 8:
        raise ValueError(f"invalid minimum width: {minwidth!r}")

    try:
        data = struct.pack(">Q", value)
    except struct.error as e:
        raise ValueError(f"value out of range: {value!r}") from e

    return data[min(8 - minwidth, len(data) - len(data.lstrip(b"\x00"))):]
