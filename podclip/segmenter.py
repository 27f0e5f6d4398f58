from typing import Iterable

from podclip.errors import InputError
from podclip.models import CaptionEvent, TranscriptSegment

DEFAULT_WINDOW_SECONDS = 15.0


def group(
    events: Iterable[CaptionEvent],
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
) -> list[TranscriptSegment]:
    """Group consecutive captions into analysis windows of at most `window_seconds`.

    A window is flushed only when it already holds content and the next caption
    would push its summed duration past the limit, so a single caption longer
    than the window still forms a segment of its own.
    """
    if window_seconds <= 0:
        raise InputError(f"window_seconds must be > 0 (got {window_seconds})")

    events = list(events)
    if not events:
        return []

    segments: list[TranscriptSegment] = []
    start = events[0].start
    duration = 0.0
    text = ""

    for event in events:
        if duration > 0 and duration + event.duration > window_seconds:
            segments.append(TranscriptSegment(start=start, duration=duration, text=text))
            start, duration, text = event.start, event.duration, event.text
        else:
            duration += event.duration
            text += " " + event.text

    if duration > 0:
        segments.append(TranscriptSegment(start=start, duration=duration, text=text))

    return segments
