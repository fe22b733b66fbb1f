from tagframes import (
    POP,
    POPM,
    Frame,
    FrameKey,
    InvalidFrameData,
    RawFrame,
    SaveConfig,
    Tag,
    Version,
    error,
)
from tests import TestCase


class TTag(TestCase):

    def setUp(self):
        self.tag = Tag()

    def test_empty(self):
        self.assertEqual(len(self.tag), 0)
        self.assertEqual(self.tag.version, Version.V24)
        self.assertEqual(self.tag.unknown_frames, [])
        self.assertEqual(self.tag.pprint(), "")

    def test_add_and_get(self):
        frame = POPM(email="a", rating=1)
        self.tag.add(frame)
        self.assertIs(self.tag[FrameKey.popularimeter("a")], frame)
        self.assertIn(FrameKey.popularimeter("a"), self.tag)

    def test_same_key_overwrites(self):
        self.tag.add(POPM(email="a", rating=1))
        self.tag.add(POPM(email="a", rating=2))
        self.assertEqual(len(self.tag), 1)
        self.assertEqual(self.tag[FrameKey.popularimeter("a")].rating, 2)

    def test_distinct_emails_coexist(self):
        self.tag.add(POPM(email="a", rating=1))
        self.tag.add(POPM(email="b", rating=2))
        self.assertEqual(len(self.tag), 2)

    def test_setitem_key_mismatch(self):
        self.failUnlessRaisesRegexp(
            ValueError, "doesn't match", self.tag.__setitem__,
            FrameKey.popularimeter("b"), POPM(email="a"))
        self.assertRaises(
            TypeError, self.tag.__setitem__,
            FrameKey.popularimeter("a"), "foo")
        self.assertEqual(len(self.tag), 0)

    def test_update_checks_keys(self):
        self.assertRaises(
            ValueError, self.tag.update,
            {FrameKey.popularimeter("x"): POPM(email="y")})

    def test_getall(self):
        a = POPM(email="a")
        b = POPM(email="b")
        self.tag.add(a)
        self.tag.add(b)
        self.assertEqual(self.tag.getall("POPM"), [a, b])
        self.assertEqual(self.tag.getall(FrameKey.popularimeter("b")), [b])
        self.assertEqual(self.tag.getall(FrameKey.popularimeter("c")), [])
        self.assertEqual(self.tag.getall("TIT2"), [])

    def test_delall(self):
        self.tag.add(POPM(email="a"))
        self.tag.add(POPM(email="b"))
        self.tag.delall(FrameKey.popularimeter("a"))
        self.assertEqual(len(self.tag), 1)
        self.tag.delall(FrameKey.popularimeter("a"))
        self.tag.delall("POPM")
        self.assertEqual(len(self.tag), 0)

    def test_setall(self):
        self.tag.add(POPM(email="a"))
        self.tag.setall("POPM", [POPM(email="b"), POPM(email="c")])
        self.assertEqual(
            list(self.tag.keys()),
            [FrameKey.popularimeter("b"), FrameKey.popularimeter("c")])

    def test_pprint(self):
        self.tag.add(POPM(email="b", rating=0))
        self.tag.add(POPM(email="a", rating=1, count=3))
        self.assertEqual(
            self.tag.pprint(),
            "POPM=Rating: 0 (0 stars), Email: b\n"
            "POPM=Rating: 1 (1 stars), Plays: 3, Email: a")

    def test_copy(self):
        self.tag.add(POPM(email="a", rating=1))
        new = self.tag.copy()
        self.assertEqual(new, self.tag)
        new.rating = 5
        self.assertEqual(self.tag.rating, 1)

    def test_init_frames(self):
        tag = Tag(Version.V23, [POPM(email="a"), POPM(email="a", rating=9)])
        self.assertEqual(tag.version, Version.V23)
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.rating, 9)


class TTagRating(TestCase):

    def setUp(self):
        self.tag = Tag()

    def test_no_frame(self):
        self.assertIs(self.tag.rating, None)
        self.assertIs(self.tag.star_rating, None)
        self.assertIs(self.tag.play_count, None)
        self.assertIs(self.tag.rating_email, None)

    def test_set_star_rating_creates_frame(self):
        self.tag.star_rating = 3
        self.assertEqual(self.tag.rating, 128)
        self.assertEqual(self.tag.star_rating, 3)
        self.assertEqual(self.tag.rating_email, "")
        self.assertIs(self.tag.play_count, None)
        self.assertEqual(list(self.tag), [FrameKey.popularimeter("")])

    def test_clear_removes_frame(self):
        self.tag.add(POPM(email="", rating=10))
        self.tag.rating = None
        self.assertEqual(len(self.tag), 0)
        self.assertIs(self.tag.star_rating, None)

    def test_clear_removes_all_emails(self):
        self.tag.add(POPM(email="a", rating=10))
        self.tag.add(POPM(email="b", rating=20))
        self.tag.add(Frame())
        self.tag.star_rating = None
        self.assertEqual(list(self.tag), [FrameKey("Frame")])

    def test_clear_rating_command(self):
        self.tag.add(POPM(email="a", rating=10))
        self.tag.clear_rating()
        self.assertIs(self.tag.rating, None)

    def test_set_rating_updates_first_keeping_position(self):
        self.tag.add(POPM(email="a", rating=10, count=5))
        self.tag.add(POPM(email="b", rating=20))
        self.tag.rating = 200
        self.assertEqual(
            self.tag[FrameKey.popularimeter("a")],
            POPM(email="a", rating=200, count=5))
        self.assertEqual(self.tag[FrameKey.popularimeter("b")].rating, 20)
        self.assertEqual(len(self.tag), 2)
        self.assertEqual(self.tag.rating_email, "a")

    def test_set_star_rating_keeps_email_and_count(self):
        self.tag.add(POPM(email="x@y", rating=1, count=9))
        self.tag.set_star_rating(5)
        self.assertEqual(self.tag.rating, 255)
        self.assertEqual(self.tag.rating_email, "x@y")
        self.assertEqual(self.tag.play_count, 9)
        self.assertEqual(len(self.tag), 1)

    def test_star_rating_out_of_range(self):
        self.tag.star_rating = 7
        self.assertEqual(self.tag.rating, 0)
        self.assertEqual(self.tag.star_rating, 0)

    def test_first_match_is_insertion_order(self):
        self.tag.add(POPM(email="z", rating=255))
        self.tag.add(POPM(email="a", rating=1))
        self.assertEqual(self.tag.rating_email, "z")
        self.assertEqual(self.tag.star_rating, 5)

    def test_first_match_skips_other_frames(self):
        self.tag.add(Frame())
        self.tag.add(POPM(email="a", rating=64))
        self.assertEqual(self.tag.star_rating, 2)

    def test_invalid_rating(self):
        self.assertRaises(ValueError, setattr, self.tag, "rating", 256)
        self.assertEqual(len(self.tag), 0)

    def test_play_count_creates_frame(self):
        self.tag.play_count = 42
        self.assertEqual(self.tag.play_count, 42)
        self.assertEqual(self.tag.rating, 0)
        self.assertEqual(self.tag.rating_email, "")

    def test_play_count_zero_is_kept(self):
        self.tag.play_count = 0
        self.assertEqual(self.tag.play_count, 0)

    def test_play_count_updates_first(self):
        self.tag.add(POPM(email="a", rating=10))
        self.tag.set_play_count(3)
        self.assertEqual(
            self.tag[FrameKey.popularimeter("a")],
            POPM(email="a", rating=10, count=3))

    def test_play_count_none(self):
        self.tag.play_count = None
        self.assertEqual(len(self.tag), 0)

        self.tag.add(POPM(email="a", rating=10, count=3))
        self.tag.play_count = None
        self.assertIs(self.tag.play_count, None)
        self.assertEqual(self.tag.rating, 10)

    def test_reassign_email(self):
        self.tag.add(POPM(email="old", rating=10, count=3))
        self.tag.rating_email = "new"
        self.assertEqual(list(self.tag), [FrameKey.popularimeter("new")])
        self.assertEqual(
            self.tag[FrameKey.popularimeter("new")],
            POPM(email="new", rating=10, count=3))

    def test_reassign_email_moves_first_only(self):
        self.tag.add(POPM(email="a", rating=1))
        self.tag.add(POPM(email="b", rating=2))
        self.tag.reassign_email("c")
        self.assertEqual(
            list(self.tag),
            [FrameKey.popularimeter("b"), FrameKey.popularimeter("c")])
        self.assertEqual(self.tag.rating_email, "b")

    def test_reassign_email_replaces_existing(self):
        self.tag.add(POPM(email="a", rating=1))
        self.tag.add(POPM(email="b", rating=2))
        self.tag.reassign_email("b")
        self.assertEqual(list(self.tag), [FrameKey.popularimeter("b")])
        self.assertEqual(self.tag.rating, 1)

    def test_reassign_email_without_frame(self):
        self.tag.rating_email = "new"
        self.assertEqual(len(self.tag), 0)
        self.assertIs(self.tag.rating_email, None)

    def test_reassign_email_none(self):
        self.tag.add(POPM(email="a", rating=1))
        self.tag.rating_email = None
        self.assertEqual(self.tag.rating_email, "a")

    def test_reassign_email_invalid(self):
        self.tag.add(POPM(email="a", rating=1))
        self.assertRaises(ValueError, self.tag.reassign_email, u"★")
        self.assertEqual(self.tag.rating_email, "a")

    def test_commands_dont_touch_shared_frames(self):
        self.tag.add(POPM(email="a", rating=10, count=1))
        other = Tag(frames=self.tag.values())
        other.rating = 255
        other.play_count = 7
        other.rating_email = "b"
        self.assertEqual(
            self.tag[FrameKey.popularimeter("a")],
            POPM(email="a", rating=10, count=1))
        self.assertEqual(
            other[FrameKey.popularimeter("b")],
            POPM(email="b", rating=255, count=7))

    def test_frame_email_changed_behind_tag(self):
        self.tag.add(POPM(email="a", rating=10))
        self.tag.add(POPM(email="z", rating=20))
        self.tag[FrameKey.popularimeter("a")].email = "b"

        self.tag.rating = 30
        self.assertEqual(
            list(self.tag),
            [FrameKey.popularimeter("z"), FrameKey.popularimeter("b")])
        self.assertEqual(self.tag[FrameKey.popularimeter("z")].rating, 20)
        self.assertEqual(self.tag[FrameKey.popularimeter("b")].rating, 30)

        self.tag[FrameKey.popularimeter("z")].email = "y"
        self.tag.rating_email = "c"
        self.assertEqual(
            sorted(self.tag),
            [FrameKey.popularimeter("b"), FrameKey.popularimeter("c")])
        self.assertEqual(self.tag[FrameKey.popularimeter("c")].rating, 20)

    def test_v22_tag_creates_pop(self):
        tag = Tag(Version.V22)
        tag.rating = 1
        frame = tag[FrameKey.popularimeter("")]
        self.assertIs(type(frame), POP)
        self.assertEqual(frame.version, Version.V22)


class TTagReadWrite(TestCase):

    def test_read_frames(self):
        tag = Tag()
        tag.read_frames([
            RawFrame("POPM", 4, 13, b"\x00\x00",
                     b"a@b.com\x00\xc4\x00\x00\x00\x2a"),
            ("TIT2", 4, 4, b"\x00\x00", b"\x03foo"),
        ])
        self.assertEqual(tag.star_rating, 4)
        self.assertEqual(tag.play_count, 42)
        self.assertEqual(tag.rating_email, "a@b.com")
        self.assertEqual(
            tag.unknown_frames,
            [RawFrame("TIT2", 4, 4, b"\x00\x00", b"\x03foo")])

    def test_read_frames_overwrites_same_email(self):
        tag = Tag()
        tag.read_frames([
            ("POPM", 4, 2, b"\x00\x00", b"\x00\x01"),
            ("POPM", 4, 2, b"\x00\x00", b"\x00\x02"),
        ])
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.rating, 2)

    def test_read_frames_strict(self):
        tag = Tag()
        self.assertRaises(
            InvalidFrameData, tag.read_frames,
            [("POPM", 4, 1, b"\x00\x00", b"\x00")])

    def test_read_frames_lax(self):
        tag = Tag()
        tag.read_frames(
            [("POPM", 4, 1, b"\x00\x00", b"\x00"),
             ("POPM", 4, 2, b"\x00\x00", b"a\x00\x05")],
            strict=False)
        self.assertEqual(tag.rating, 5)
        self.assertEqual(len(tag.unknown_frames), 1)

    def test_write_frames(self):
        tag = Tag()
        tag.add(POPM(email="a@b.com", rating=196, count=42))
        tag.unknown_frames.append(
            RawFrame("TIT2", 4, 4, b"\x00\x00", b"\x03foo"))
        self.assertEqual(tag.write_frames(), [
            RawFrame("POPM", Version.V24, 13, b"\x00\x00",
                     b"a@b.com\x00\xc4\x00\x00\x00\x2a"),
            RawFrame("TIT2", 4, 4, b"\x00\x00", b"\x03foo"),
        ])

    def test_write_frames_keeps_flags(self):
        tag = Tag(Version.V23)
        tag.read_frames([("POPM", 3, 2, b"\x00\x20", b"\x00\x01")])
        raw, = tag.write_frames(SaveConfig(Version.V23))
        self.assertEqual(raw.flags, b"\x00\x20")
        raw, = tag.write_frames(SaveConfig(Version.V24))
        self.assertEqual(raw.flags, b"\x00\x00")
        self.assertEqual(raw.version, Version.V24)

    def test_write_frames_v22_frames(self):
        tag = Tag(Version.V22)
        tag.read_frames([("POP", 2, 3, b"", b"\x00\x01\x05")])
        tag.unknown_frames.append(RawFrame("TT2", 2, 1, b"", b"\x00"))
        raw, = tag.write_frames()
        self.assertEqual(
            raw, RawFrame("POPM", Version.V24, 6, b"\x00\x00",
                          b"\x00\x01\x00\x00\x00\x05"))

    def test_write_frames_bad_version(self):
        tag = Tag()
        self.assertRaises(ValueError, tag.write_frames, SaveConfig(2))

    def test_write_frames_error(self):
        tag = Tag()
        frame = POPM()
        frame._setattr("rating", 300)
        tag.add(frame)
        self.assertRaises(error, tag.write_frames)

    def test_roundtrip(self):
        tag = Tag()
        tag.add(POPM(email="a", rating=1, count=0))
        tag.add(POPM(email="b", rating=2))
        new = Tag()
        new.read_frames(tag.write_frames())
        self.assertEqual(new, tag)

    def test_update_to_v24(self):
        tag = Tag(Version.V22)
        tag.read_frames([
            ("POP", 2, 2, b"", b"\x00\x01"),
            ("TT2", 2, 1, b"", b"\x00"),
        ])
        tag.update_to_v24()
        self.assertEqual(tag.version, Version.V24)
        self.assertEqual(tag.unknown_frames, [])
        frame = tag[FrameKey.popularimeter("")]
        self.assertIs(type(frame), POPM)
        self.assertEqual(frame.version, Version.V24)
