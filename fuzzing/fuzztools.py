import struct

from tagframes import Tag, Version, error, frame_from_payload, Frames_2_2, \
    Frames


def run(frame_id, version, data):
    try:
        frame = frame_from_payload(frame_id, version, len(data), b"", data)
    except error:
        return

    # whatever got parsed has to survive a round trip
    payload = frame.content_data
    assert frame.size == len(payload)
    again = type(frame).parse(version, len(payload), b"", payload)
    assert again == frame, (again, frame)


def run_tag(data):
    # split the input into (id, size, payload) chunks like a v2.4 tag
    raw_frames = []
    while len(data) >= 8:
        frame_id = data[:4]
        size, = struct.unpack(">L", data[4:8])
        raw_frames.append(
            (frame_id, Version.V24, size, b"\x00\x00", data[8:8 + size]))
        data = data[8 + size:]

    tag = Tag()
    tag.read_frames(raw_frames, strict=False)
    tag.write_frames()
    tag.star_rating = tag.star_rating
    tag.rating_email = "fuzz"
    tag.play_count = None


def run_all(data):
    for frame_id in Frames:
        for version in (Version.V23, Version.V24):
            run(frame_id, version, data)
    for frame_id in Frames_2_2:
        run(frame_id, Version.V22, data)
    run_tag(data)


def group_crashes(result_path):
    """Re-checks all errors, and groups them by stack trace
    and error type.
    """

    crash_paths = []
    pattern = os.path.join(result_path, '**', 'crashes', '*')
    for path in glob.glob(pattern):
        if os.path.splitext(path)[-1] == ".txt":
            continue
        crash_paths.append(path)

    if not crash_paths:
        print("No crashes found")
        return

    def norm_exc():
        lines = traceback.format_exc().splitlines()
        if ":" in lines[-1]:
            lines[-1], message = lines[-1].split(":", 1)
        else:
            message = ""
        return "\n".join(lines), message.strip()

    traces = {}
    messages = {}
    for path in crash_paths:
        with open(path, "rb") as h:
            data = h.read()
        try:
            run_all(data)
        except Exception:
            trace, message = norm_exc()
            messages.setdefault(trace, set()).add(message)
            traces.setdefault(trace, []).append(path)

    for trace, paths in traces.items():
        print('-' * 80)
        print("\n".join(paths))
        print()
        print(textwrap.indent(trace, '    '))
        print(messages[trace])

    print("%d crashes with %d traces" % (len(crash_paths), len(traces)))


if __name__ == '__main__':
    import sys
    import glob
    import os
    import traceback
    import textwrap
    group_crashes(sys.argv[1])
