# Copyright (C) 2026  tagframes contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, override

from ._util import (
    SaveConfig,
    bchr,
    decode_be_uint,
    encode_be_uint_minimal,
    encode_terminated,
    extract_terminated,
)

if TYPE_CHECKING:
    from ._frames import Frame, Version


class SpecError(Exception):
    pass


class Spec[T](Protocol):

    handle_nodata: bool = False
    """If reading empty data is possible and writing it back will again
    result in no data.
    """
    name: str
    default: T

    def __init__(self, name: str, default: T):
        self.name = name
        self.default = default

    @override
    def __hash__(self) -> int:
        raise TypeError("Spec objects are unhashable")

    def read(self, version: Version, frame: Frame, buffer: bytearray) -> T:
        """Consumes the value from the start of `buffer`.

        Returns:
            the read value
        Raises:
            SpecError
        """

        raise NotImplementedError

    def write(self, config: SaveConfig, frame: Frame, value: T) -> bytes:
        """
        Returns:
            bytes: The serialized data
        Raises:
            SpecError
        """

        raise NotImplementedError

    def validate(self, frame: Frame, value: object) -> T:
        """
        Returns:
            the validated value
        Raises:
            ValueError
            TypeError
        """

        raise NotImplementedError


class ByteSpec(Spec[int]):

    def __init__(self, name: str, default: int = 0):
        super().__init__(name, default)

    @override
    def read(self, version: Version, frame: Frame, buffer: bytearray) -> int:
        if not buffer:
            raise SpecError(f"{self.name}: no data left")
        return buffer.pop(0)

    @override
    def write(self, config: SaveConfig, frame: Frame, value: int) -> bytes:
        try:
            return bchr(value)
        except (TypeError, ValueError) as e:
            raise SpecError(e) from e

    @override
    def validate(self, frame: Frame, value: object) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{self.name} has to be int")
        _ = bchr(value)
        return value


class Latin1TextSpec(Spec[str]):

    handle_nodata: bool = True

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    @override
    def read(self, version: Version, frame: Frame, buffer: bytearray) -> str:
        # a missing terminator drains the buffer, which is not an error
        return extract_terminated(buffer, "latin1")

    @override
    def write(self, config: SaveConfig, frame: Frame, value: str) -> bytes:
        try:
            return encode_terminated(value, "latin1")
        except UnicodeEncodeError as e:
            raise SpecError(e) from e

    @override
    def validate(self, frame: Frame, value: object) -> str:
        if not isinstance(value, str):
            raise TypeError(f"{self.name} has to be str")
        if "\x00" in value:
            raise ValueError(f"{self.name} can't contain NULL characters")
        value.encode("latin1")
        return value


class CounterSpec(Spec[int | None]):
    """A growing big-endian counter using all remaining data.

    `None` stands for a counter which isn't there at all.
    """

    minwidth: int

    def __init__(self, name: str, default: int | None = None,
                 minwidth: int = 4):
        super().__init__(name, default)
        self.minwidth = minwidth

    @override
    def read(self, version: Version, frame: Frame,
             buffer: bytearray) -> int | None:
        # wider counters keep their low 64 bits
        value = decode_be_uint(buffer) & 0xFFFFFFFFFFFFFFFF
        del buffer[:]
        return value

    @override
    def write(self, config: SaveConfig, frame: Frame,
              value: int | None) -> bytes:
        if value is None:
            return b""
        try:
            return encode_be_uint_minimal(value, self.minwidth)
        except ValueError as e:
            raise SpecError(e) from e

    @override
    def validate(self, frame: Frame, value: object) -> int | None:
        if value is None:
            return value
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{self.name} has to be int or None")
        if not 0 <= value < 2 ** 64:
            raise ValueError(f"{self.name} out of range: {value!r}")
        return value
