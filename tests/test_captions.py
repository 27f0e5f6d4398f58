import pytest

from podclip import captions
from podclip.errors import InputError
from podclip.models import CaptionEvent

SRT = """1
00:00:01,000 --> 00:00:03,500
Hello <i>there</i>

2
00:00:03,500 --> 00:00:06,000
second line
continues here

3
00:00:07,000 --> 00:00:07,000
zero length

4
00:00:08,000 --> 00:00:09,000

"""


def test_parse_srt_builds_caption_events():
    events = captions.parse_srt(SRT)

    assert events == [
        CaptionEvent(start=1.0, duration=2.5, text="Hello there"),
        CaptionEvent(start=3.5, duration=2.5, text="second line continues here"),
    ]


def test_parse_srt_sorts_by_start():
    content = (
        "1\n00:00:10,000 --> 00:00:12,000\nlater\n\n"
        "2\n00:00:01,000 --> 00:00:02,000\nearlier\n"
    )

    assert [e.text for e in captions.parse_srt(content)] == ["earlier", "later"]


def test_fetch_captions_reads_srt_next_to_video(tmp_path):
    video_path = tmp_path / "episode.mp4"
    video_path.write_text("", encoding="utf-8")
    (tmp_path / "episode.srt").write_text(SRT, encoding="utf-8")

    events = captions.fetch_captions(str(video_path))

    assert [e.text for e in events] == ["Hello there", "second line continues here"]


def test_fetch_captions_without_srt_is_empty(tmp_path):
    video_path = tmp_path / "episode.mp4"
    video_path.write_text("", encoding="utf-8")

    assert captions.fetch_captions(str(video_path)) == []


def test_load_captions_missing_file_raises(tmp_path):
    with pytest.raises(InputError):
        captions.load_captions(str(tmp_path / "missing.srt"))


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00:00,000"), (3.5, "00:00:03,500"), (3723.042, "01:02:03,042"), (-1, "00:00:00,000")],
)
def test_format_timestamp(seconds, expected):
    assert captions.format_timestamp(seconds) == expected


def test_format_srt_drops_events_outside_window():
    events = [CaptionEvent(0, 2, "gone"), CaptionEvent(11, 2, "kept")]

    assert captions.format_srt(events, offset=10, limit=5) == "1\n00:00:01,000 --> 00:00:03,000\nkept\n\n"
