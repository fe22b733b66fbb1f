# Copyright (C) 2026  tagframes contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""ID3v2 frame reading and writing.

This is based off of the following references:

* http://id3.org/id3v2.4.0-frames
* http://id3.org/id3v2.3.0

Each frame type is implemented as a different class (e.g. POPM as
tagframes.POPM) and is keyed inside a :class:`Tag` by its
:class:`FrameKey`. The container around the frames (tag header, frame
headers, unsynchronisation) is left to the caller, which hands over
and receives :class:`RawFrame` tuples::

    tag = Tag(Version.V24)
    tag.read_frames([RawFrame("POPM", 4, 6, b"\\x00\\x00", b"\\x00\\xc4\\x00\\x00\\x00\\x2a")])
    tag.star_rating = 4
    raw_frames = tag.write_frames()
"""

version = (1, 0, 0)
"""Version tuple."""

version_string = ".".join(map(str, version))
"""Version string."""

from ._util import (
    error as error,
    InvalidFrameData as InvalidFrameData,
    UnsupportedFrameError as UnsupportedFrameError,
    SaveConfig as SaveConfig,
)
from ._frames import (
    Version as Version,
    FrameKey as FrameKey,
    Frame as Frame,
    Frames as Frames,
    Frames_2_2 as Frames_2_2,
    POPM as POPM,
    POP as POP,
    byte_to_stars as byte_to_stars,
    stars_to_byte as stars_to_byte,
    frame_from_payload as frame_from_payload,
)
from ._tags import Tag as Tag, RawFrame as RawFrame


__all__ = ['Tag', 'RawFrame', 'Frame', 'FrameKey', 'Frames', 'Frames_2_2',
           'POPM', 'POP', 'Version', 'SaveConfig', 'frame_from_payload',
           'byte_to_stars', 'stars_to_byte', 'error', 'InvalidFrameData',
           'UnsupportedFrameError']
