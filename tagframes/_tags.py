# Copyright (C) 2026  tagframes contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, MutableMapping
from typing import NamedTuple, override

from ._frames import (
    POP,
    POPM,
    Frame,
    FrameKey,
    Version,
    frame_from_payload,
    stars_to_byte,
)
from ._util import InvalidFrameData, SaveConfig, UnsupportedFrameError

logger = logging.getLogger(__name__)


class RawFrame(NamedTuple):
    """A frame as exchanged with the container parser and serializer"""

    frame_id: str
    version: Version | int
    size: int
    flags: bytes
    payload: bytes


class Tag(MutableMapping[FrameKey, Frame]):
    """A dict-like collection of frames, keyed by :class:`FrameKey`.

    Adding a frame under a key which is already taken replaces the old
    frame. Iteration follows insertion order, replacing a frame in place
    keeps its position.

    On top of the mapping interface the tag exposes the Popularimeter
    fields of its first POPM frame (in insertion order) as `rating`,
    `star_rating`, `play_count` and `rating_email`.

    Attributes:
        version (Version): the ID3v2 version of the tag
        unknown_frames (list[RawFrame]): frames which weren't decoded
    """

    version: Version
    unknown_frames: list[RawFrame]

    def __init__(self, version: Version | int = Version.V24,
                 frames: Iterable[Frame] = ()):
        self.__dict: dict[FrameKey, Frame] = {}
        self.version = Version(version)
        self.unknown_frames = []
        for frame in frames:
            self.add(frame)

    @override
    def __getitem__(self, key: FrameKey) -> Frame:
        return self.__dict[key]

    @override
    def __setitem__(self, key: FrameKey, value: Frame) -> None:
        if not isinstance(value, Frame):
            raise TypeError(f"{value!r} not a Frame instance")
        if value.frame_key != key:
            raise ValueError(
                f"frame key {value.frame_key} doesn't match {key}")
        self.__dict[key] = value

    @override
    def __delitem__(self, key: FrameKey) -> None:
        del self.__dict[key]

    @override
    def __iter__(self) -> Iterator[FrameKey]:
        return iter(self.__dict)

    @override
    def __len__(self) -> int:
        return len(self.__dict)

    @override
    def __repr__(self) -> str:
        return "<{} version={} frames={!r}>".format(
            type(self).__name__, int(self.version), list(self.values()))

    def copy(self) -> Tag:
        """A new tag holding copies of all frames"""

        new = type(self)(self.version)
        for frame in self.values():
            new.add(type(frame)(frame))
        new.unknown_frames = list(self.unknown_frames)
        return new

    def add(self, frame: Frame) -> None:
        """Add a frame to the tag, replacing one with the same key"""

        self[frame.frame_key] = frame

    def getall(self, key: FrameKey | str) -> list[Frame]:
        """Return all frames with a given key (the list may be empty).

        A frame ID matches all frames of that type::

            tag.getall("POPM") == [POPM(email='a', ...), POPM(email='b', ...)]
            tag.getall(FrameKey.popularimeter("a")) == [POPM(email='a', ...)]
        """

        if isinstance(key, FrameKey):
            if key in self:
                return [self[key]]
            return []
        return [v for k, v in self.items() if k.family == key]

    def delall(self, key: FrameKey | str) -> None:
        """Delete all frames of a given kind; see getall."""

        if isinstance(key, FrameKey):
            self.pop(key, None)
            return
        for k in [k for k in self if k.family == key]:
            del self[k]

    def setall(self, key: FrameKey | str, values: Iterable[Frame]) -> None:
        """Delete frames of the given kind and add frames in 'values'."""

        self.delall(key)
        for frame in values:
            self.add(frame)

    def read_frames(self, raw_frames: Iterable[RawFrame],
                    strict: bool = True) -> None:
        """Decodes and adds frames found by the container parser.

        Frames with an unsupported ID end up in `unknown_frames`. Broken
        frames raise InvalidFrameData if `strict` is true, otherwise they
        are kept in `unknown_frames` as well.
        """

        for raw in raw_frames:
            raw = RawFrame(*raw)
            try:
                frame = frame_from_payload(*raw)
            except UnsupportedFrameError:
                logger.debug("keeping unsupported frame %r", raw.frame_id)
                self.unknown_frames.append(raw)
            except InvalidFrameData as e:
                if strict:
                    raise
                logger.debug("keeping broken frame %r: %s", raw.frame_id, e)
                self.unknown_frames.append(raw)
            else:
                self.add(frame)

    def write_frames(self, config: SaveConfig | None = None
                     ) -> list[RawFrame]:
        """Encodes all frames for the serializer.

        Frames get written under their ID for `config.v2_version` (3 or 4),
        followed by the unknown frames of the same version. Frame flags
        are kept if the frame is already of that version.

        Raises:
            ValueError: in case the version isn't 3 or 4
            error: in case a frame can't be serialized
        """

        if config is None:
            config = SaveConfig()

        version = Version(config.v2_version)
        if version not in (Version.V23, Version.V24):
            raise ValueError("Only 3 or 4 allowed for v2_version")
        config = config._replace(v2_version=version)

        raw_frames = []
        for frame in self.values():
            if frame.version != version:
                flags = version.default_flags
            else:
                flags = frame.flags
            frame = frame._upgrade_frame(version)
            payload = frame.encode(config)
            raw_frames.append(
                RawFrame(frame.FrameID, version, len(payload), flags, payload))

        for raw in self.unknown_frames:
            if Version(raw.version) == version:
                raw_frames.append(raw)
            else:
                logger.debug("dropping unknown %r frame of another version",
                             raw.frame_id)

        return raw_frames

    def update_to_v24(self) -> None:
        """Convert older tags into an ID3v2.4 tag.

        This updates v2.2 frames to their v2.3/4 counterparts. Unknown
        frames can't be converted and are dropped.
        """

        for key, frame in list(self.items()):
            self[key] = frame._upgrade_frame(Version.V24)

        if self.version < Version.V24:
            self.unknown_frames = []
        self.version = Version.V24

    def pprint(self) -> str:
        """
        Returns:
            text: tags in a human-readable format.

        One frame per line, sorted.
        """

        frames = sorted(frame.pprint() for frame in self.values())
        return "\n".join(frames)

    def _first_popm(self) -> tuple[FrameKey, POPM] | None:
        for key, frame in self.items():
            if isinstance(frame, POPM):
                return key, frame
        return None

    def _set_popm(self, email: str, rating: int, count: int | None) -> None:
        cls = POP if self.version == Version.V22 else POPM
        self.add(cls(email=email, rating=rating, count=count,
                     version=self.version))

    def _replace_popm(self, key: FrameKey, new: POPM) -> None:
        # same key keeps the dict position, so the first match stays first
        if new.frame_key == key:
            self[key] = new
        else:
            del self[key]
            self.add(new)

    @property
    def rating(self) -> int | None:
        """The 0-255 rating of the first POPM frame, `None` if there is
        none. Setting it to `None` removes all POPM frames.
        """

        found = self._first_popm()
        return None if found is None else found[1].rating

    @rating.setter
    def rating(self, value: int | None) -> None:
        self.set_rating(value)

    @property
    def star_rating(self) -> int | None:
        """The 0-5 star rating of the first POPM frame, `None` if there is
        none. Setting it to `None` removes all POPM frames.
        """

        found = self._first_popm()
        return None if found is None else found[1].star_rating

    @star_rating.setter
    def star_rating(self, value: int | None) -> None:
        self.set_star_rating(value)

    @property
    def play_count(self) -> int | None:
        """The play counter of the first POPM frame, `None` if there is
        no frame or it has no counter.
        """

        found = self._first_popm()
        return None if found is None else found[1].count

    @play_count.setter
    def play_count(self, value: int | None) -> None:
        self.set_play_count(value)

    @property
    def rating_email(self) -> str | None:
        """The email of the first POPM frame, `None` if there is none"""

        found = self._first_popm()
        return None if found is None else found[1].email

    @rating_email.setter
    def rating_email(self, value: str | None) -> None:
        if value is not None:
            self.reassign_email(value)

    def set_rating(self, value: int | None) -> None:
        """Set the rating of the first POPM frame, keeping its email and
        counter, or add a new frame with an empty email.

        `None` removes all POPM frames, see :meth:`clear_rating`.
        """

        if value is None:
            self.clear_rating()
            return

        found = self._first_popm()
        if found is None:
            self._set_popm("", value, None)
            return

        key, popm = found
        new = type(popm)(popm)
        new.rating = value
        self._replace_popm(key, new)

    def set_star_rating(self, stars: int | None) -> None:
        """Like :meth:`set_rating` but takes 0-5 stars"""

        if stars is None:
            self.clear_rating()
        else:
            self.set_rating(stars_to_byte(stars))

    def clear_rating(self) -> None:
        """Remove all POPM frames, no matter the email"""

        self.delall("POPM")

    def set_play_count(self, count: int | None) -> None:
        """Set the counter of the first POPM frame, or add a new unrated
        frame with an empty email.

        `None` removes the counter from the first frame and keeps its
        rating; without a frame it does nothing.
        """

        found = self._first_popm()
        if found is None:
            if count is not None:
                self._set_popm("", 0, count)
            return

        key, popm = found
        new = type(popm)(popm)
        new.count = count
        self._replace_popm(key, new)

    def reassign_email(self, email: str) -> None:
        """Move the first POPM frame to a new email, keeping rating and
        counter. Does nothing if there is no POPM frame.
        """

        found = self._first_popm()
        if found is None:
            return

        key, popm = found
        new = type(popm)(popm)
        new.email = email
        del self[key]
        self.add(new)
