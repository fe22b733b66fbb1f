# Copyright (C) 2026  tagframes contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from enum import IntEnum
from typing import Any, Final, NamedTuple, Self, override

from ._specs import ByteSpec, CounterSpec, Latin1TextSpec, Spec, SpecError
from ._util import (
    InvalidFrameData,
    SaveConfig,
    UnsupportedFrameError,
    error,
)


def _bytes2key(b: bytes) -> str:
    assert isinstance(b, bytes)

    return b.decode("latin1")


class Version(IntEnum):
    """ID3v2 major version"""

    V22 = 2
    """ID3v2.2, three character frame IDs and no frame flags"""

    V23 = 3
    """ID3v2.3"""

    V24 = 4
    """ID3v2.4"""

    @property
    def default_flags(self) -> bytes:
        """Frame flags for a freshly created frame"""

        if self is Version.V22:
            return b""
        return b"\x00\x00"


class FrameKey(NamedTuple):
    """Identity of a frame inside a tag.

    Frame types which can only exist once per tag have an empty
    discriminator, the others carry the fields that tell the frames
    apart (the email for POPM).
    """

    frame_id: str
    discriminator: tuple[str, ...] = ()

    @classmethod
    def popularimeter(cls, email: str) -> FrameKey:
        return cls("POPM", (email,))

    @property
    def family(self) -> str:
        """The frame ID, shared by all keys of the same frame type"""

        return self.frame_id

    @override
    def __str__(self) -> str:
        return ":".join((self.frame_id,) + self.discriminator)


_STAR_BANDS: Final = [1, 32, 96, 160, 224]
_STAR_BYTES: Final = {0: 0, 1: 1, 2: 64, 3: 128, 4: 196, 5: 255}


def byte_to_stars(value: int) -> int:
    """Maps a 0-255 rating byte to 0-5 stars.

    Uses the ranges most players agree on (Windows Media Player,
    MediaMonkey): 0 is unrated, 1-31 one star, 32-95 two stars,
    96-159 three, 160-223 four and 224-255 five.
    """

    if not 0 <= value <= 255:
        raise ValueError(f"rating out of range: {value!r}")
    return bisect_right(_STAR_BANDS, value)


def stars_to_byte(stars: int) -> int:
    """Maps 0-5 stars to the canonical rating byte, anything else to 0"""

    if not isinstance(stars, int) or isinstance(stars, bool):
        return 0
    return _STAR_BYTES.get(stars, 0)


class Frame:
    """Fundamental unit of ID3 data.

    ID3 tags are split into frames. Each frame has a potentially
    different structure, and so this base class is not very featureful.

    Frames are either created from their fields::

        POPM(email="a@b.com", rating=196, count=42)

    or parsed from a payload handed over by the container parser using
    :meth:`parse`.

    Attributes:
        version (Version): the ID3v2 version this frame belongs to
        flags (bytes): raw frame flags, passed through unmodified
        declared_size (int or None): the payload size the container
            declared when parsing, `None` for created frames
    """

    _framespec: Sequence[Spec[Any]] = []
    _optionalspec: Sequence[Spec[Any]] = []

    version: Version
    flags: bytes
    declared_size: int | None = None

    def __init__(self, *args: object, version: Version | int | None = None,
                 flags: bytes | None = None, **kwargs: object):
        if len(args) == 1 and len(kwargs) == 0 and \
                isinstance(args[0], Frame):
            other = args[0]
            if version is None:
                version = other.version
            if flags is None and version == other.version:
                flags = other.flags
            # ask the sub class to fill in our data
            other._to_other(self)
        else:
            for checker, val in zip(self._framespec, args, strict=False):
                setattr(self, checker.name, val)
            for checker in self._framespec[len(args):]:
                setattr(self, checker.name,
                        kwargs.get(checker.name, checker.default))
            for spec in self._optionalspec:
                setattr(self, spec.name, kwargs.get(spec.name, spec.default))

        self.version = Version.V24 if version is None else version
        self.flags = self.version.default_flags if flags is None else flags

    @override
    def __setattr__(self, name: str, value: object):
        for checker in self._framespec:
            if checker.name == name:
                self._setattr(name, checker.validate(self, value))
                return
        for checker in self._optionalspec:
            if checker.name == name:
                self._setattr(name, checker.validate(self, value))
                return
        if name == "version":
            value = Version(value)
        elif name == "flags":
            value = bytes(value)
        super().__setattr__(name, value)

    def _setattr(self, name: str, value: object) -> None:
        self.__dict__[name] = value

    def _to_other(self, other: Frame) -> None:
        # this impl covers subclasses with the same framespec
        if other._framespec is not self._framespec:
            raise ValueError

        for checker in other._framespec:
            other._setattr(checker.name, getattr(self, checker.name))

        # this impl covers subclasses with the same optionalspec
        if other._optionalspec is not self._optionalspec:
            raise ValueError

        for checker in other._optionalspec:
            other._setattr(checker.name, getattr(self, checker.name))

    def _upgrade_frame(self, version: Version = Version.V24) -> Frame:
        """Returns either this instance or a new instance of the
        v2.3/4 equivalent if this is a v2.2 frame.
        """

        # turn 2.2 into 2.3/2.4 frames
        if len(type(self).__name__) == 3:
            base = type(self).__base__
            assert base is not None and issubclass(base, Frame)
            return base(self, version=version)
        return self

    @property
    def frame_key(self) -> FrameKey:
        """The key used to ensure frame uniqueness in a tag"""

        return FrameKey(self.FrameID)

    @property
    def FrameID(self) -> str:
        """ID3v2 three or four character frame ID"""

        return type(self).__name__

    @property
    def size(self) -> int:
        """Length of the payload in bytes, always matching `content_data`"""

        return len(self.content_data)

    @property
    def content_data(self) -> bytes:
        """The payload bytes of this frame"""

        return self.encode()

    @property
    def description(self) -> str:
        """A human-readable summary, for diagnostics only"""

        return self._pprint()

    def _fields(self) -> list[tuple[str, object]]:
        return [(spec.name, getattr(self, spec.name))
                for spec in [*self._framespec, *self._optionalspec]]

    @override
    def __repr__(self) -> str:
        """Python representation of a frame.

        The string returned is a valid Python expression to construct
        a frame with the same fields.
        """

        kw: list[str] = []
        for name, value in self._fields():
            kw.append(f'{name}={value!r}')
        return '{}({})'.format(type(self).__name__, ', '.join(kw))

    @override
    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, Frame)
        return self.version == other.version and \
            self._fields() == other._fields()

    @override
    def __hash__(self: object):
        raise TypeError("Frame objects are unhashable")

    def _readData(self, version: Version, buffer: bytearray) -> None:
        """Raises InvalidFrameData; consumes the data from `buffer`"""

        for reader in self._framespec:
            if len(buffer) or reader.handle_nodata:
                try:
                    value = reader.read(version, self, buffer)
                except SpecError as e:
                    raise InvalidFrameData(e) from e
            else:
                raise InvalidFrameData(f"{reader.name}: no data left")
            self._setattr(reader.name, value)

        for reader in self._optionalspec:
            if len(buffer) or reader.handle_nodata:
                try:
                    value = reader.read(version, self, buffer)
                except SpecError as e:
                    raise InvalidFrameData(e) from e
            else:
                break
            self._setattr(reader.name, value)

    def _writeData(self, config: SaveConfig) -> bytes:
        """Raises error"""

        data: list[bytes] = []
        for writer in self._framespec:
            try:
                data.append(
                    writer.write(config, self, getattr(self, writer.name)))
            except SpecError as e:
                raise error(e) from e

        for writer in self._optionalspec:
            value = getattr(self, writer.name)
            if value is None:
                break
            try:
                data.append(writer.write(config, self, value))
            except SpecError as e:
                raise error(e) from e

        return b''.join(data)

    def encode(self, config: SaveConfig | None = None) -> bytes:
        """Returns the payload bytes.

        Raises:
            error: in case a field can't be serialized
        """

        if config is None:
            config = SaveConfig(self.version)
        return self._writeData(config)

    def pprint(self) -> str:
        """Return a human-readable representation of the frame."""

        return f"{type(self).__name__}={self._pprint()}"

    def _pprint(self) -> str:
        return "[unrepresentable data]"

    @classmethod
    def parse(cls, version: Version | int, size: int, flags: bytes,
              payload: bytes) -> Self:
        """Construct this frame from its raw payload.

        `size` is the payload size declared by the container and is only
        kept for bookkeeping, the payload itself decides the fields.

        Raises:
            InvalidFrameData: in case a mandatory field is missing or
                can't be read
        """

        frame = cls(version=version, flags=flags)
        frame._readData(frame.version, bytearray(payload))
        frame._setattr("declared_size", size)
        return frame


class POPM(Frame):
    """Popularimeter.

    This frame keys a rating (out of 255) and a play count to an email
    address, so a tag can hold one per user.

    Attributes:

    * email -- email this POPM frame is for, can be empty
    * rating -- rating from 0 to 255, 0 meaning unknown
    * count -- number of times the file has been played, `None` if the
      frame doesn't carry a counter
    """

    email: str = ""
    rating: int = 0
    count: int | None = None

    _framespec = [
        Latin1TextSpec('email'),
        ByteSpec('rating', default=0),
    ]

    _optionalspec: Sequence[Spec[Any]] = [
        CounterSpec('count', minwidth=4),
    ]

    byte_to_stars = staticmethod(byte_to_stars)
    stars_to_byte = staticmethod(stars_to_byte)

    @classmethod
    def from_stars(cls, star_rating: int, email: str = "",
                   count: int | None = None, *,
                   version: Version | int | None = None,
                   flags: bytes | None = None) -> Self:
        """Create a frame from a 0-5 star rating"""

        return cls(email=email, rating=stars_to_byte(star_rating),
                   count=count, version=version, flags=flags)

    @property
    def star_rating(self) -> int:
        """The rating on a 0-5 star scale"""

        return byte_to_stars(self.rating)

    @star_rating.setter
    def star_rating(self, value: int) -> None:
        self.rating = stars_to_byte(value)

    @property
    @override
    def frame_key(self) -> FrameKey:
        return FrameKey.popularimeter(self.email)

    @override
    def _pprint(self) -> str:
        text = f"Rating: {self.rating} ({self.star_rating} stars)"
        if self.count is not None:
            text += f", Plays: {self.count}"
        return text + f", Email: {self.email}"


class POP(POPM):
    "Popularimeter"


Frames: dict[str, type[Frame]] = {}
"""All supported ID3v2.3/4 frames, keyed by frame name."""


Frames_2_2: dict[str, type[Frame]] = {}
"""All supported ID3v2.2 frames, keyed by frame name."""


k, v = None, None
for k, v in globals().items():
    if isinstance(v, type) and issubclass(v, Frame):
        v.__module__ = "tagframes"

        if len(k) == 3:
            Frames_2_2[k] = v
        elif len(k) == 4:
            Frames[k] = v

del k
del v


def frame_from_payload(frame_id: str | bytes, version: Version | int,
                       size: int, flags: bytes, payload: bytes,
                       known_frames: dict[str, type[Frame]] | None = None
                       ) -> Frame:
    """Creates a frame from what the container parser found.

    `known_frames` maps frame IDs to frame classes and defaults to
    :data:`Frames` or :data:`Frames_2_2` depending on the version.

    Raises:
        UnsupportedFrameError: no class is known for the frame ID
        InvalidFrameData: the payload is truncated or broken
    """

    if isinstance(frame_id, bytes):
        frame_id = _bytes2key(frame_id)

    version = Version(version)
    if known_frames is None:
        known_frames = Frames_2_2 if version == Version.V22 else Frames

    try:
        cls = known_frames[frame_id]
    except KeyError:
        raise UnsupportedFrameError(
            f"unsupported frame: {frame_id!r}") from None

    return cls.parse(version, size, flags, payload)
