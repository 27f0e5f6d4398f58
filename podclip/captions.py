"""SRT captions: reading them into CaptionEvents and writing slices back out."""

import os
import re
from typing import Iterable

from podclip.errors import InputError
from podclip.models import CaptionEvent

SRT_TIME_PATTERN = re.compile(
    r"(\d+):(\d{2}):(\d{2})[,.](\d{1,3})\s*-->\s*(\d+):(\d{2}):(\d{2})[,.](\d{1,3})"
)


def read_srt(srt_path: str) -> str:
    with open(srt_path, "r", encoding="utf-8-sig") as f:
        return f.read()


def _to_seconds(hours: str, minutes: str, seconds: str, millis: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds) + int(millis.ljust(3, "0")) / 1000


def parse_srt(content: str) -> list[CaptionEvent]:
    """Parse SRT text into CaptionEvents ordered by start time.

    Blocks without a timing line, with no text, or with a non-positive
    duration are skipped.
    """
    events: list[CaptionEvent] = []
    for block in re.split(r"\n\s*\n", content.replace("\r\n", "\n").strip()):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        timing_index = next((i for i, line in enumerate(lines) if SRT_TIME_PATTERN.search(line)), None)
        if timing_index is None:
            continue

        match = SRT_TIME_PATTERN.search(lines[timing_index])
        start = _to_seconds(*match.groups()[:4])
        end = _to_seconds(*match.groups()[4:])
        text = " ".join(lines[timing_index + 1 :])
        # Strip inline formatting tags such as <i> or <font ...>.
        text = re.sub(r"<[^>]+>", "", text).strip()
        if not text or end <= start:
            continue
        events.append(CaptionEvent(start=start, duration=end - start, text=text))

    return sorted(events, key=lambda e: e.start)


def find_existing_srt(video_path: str) -> str | None:
    """Return path to existing SRT next to the video, or None."""
    srt_path = os.path.splitext(video_path)[0] + ".srt"
    if os.path.isfile(srt_path):
        return srt_path
    return None


def load_captions(srt_path: str) -> list[CaptionEvent]:
    if not os.path.isfile(srt_path):
        raise InputError(f"SRT not found: {srt_path}")
    return parse_srt(read_srt(srt_path))


def fetch_captions(video_path: str) -> list[CaptionEvent]:
    """Captions for a video from the SRT beside it; empty when there is none."""
    srt_path = find_existing_srt(video_path)
    if srt_path is None:
        return []
    return load_captions(srt_path)


def format_timestamp(seconds: float) -> str:
    """Formats seconds into SRT timestamp format: HH:MM:SS,mmm"""
    total_millis = int(round(max(0.0, seconds) * 1000))
    hours, remainder = divmod(total_millis, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, milliseconds = divmod(remainder, 1000)
    return f"{hours:02}:{minutes:02}:{secs:02},{milliseconds:03}"


def create_srt_block(index: int, start: float, end: float, text: str) -> str:
    return f"{index}\n{format_timestamp(start)} --> {format_timestamp(end)}\n{text}\n\n"


def format_srt(
    events: Iterable[CaptionEvent],
    offset: float = 0.0,
    limit: float | None = None,
) -> str:
    """Render events as SRT, shifted by `-offset` and clipped to `[0, limit]`."""
    blocks = []
    for event in events:
        start = max(0.0, event.start - offset)
        end = event.end - offset
        if limit is not None:
            end = min(end, limit)
        if end <= start:
            continue
        blocks.append(create_srt_block(len(blocks) + 1, start, end, event.text))
    return "".join(blocks)
