import itertools
from typing import Sequence

from podclip.captions import format_srt
from podclip.models import CaptionEvent, ClipPlan, FusedSegment, Interval, overlaps

_clip_counter = itertools.count(1)


def _next_output_id(segment: FusedSegment) -> str:
    return f"clip_{next(_clip_counter):04d}_{int(segment.start)}_{int(segment.end)}"


def _title_for(segment: FusedSegment) -> str:
    if segment.relevance and segment.relevance.summary:
        return segment.relevance.summary
    return ""


def plan(selected: Sequence[FusedSegment], captions: Sequence[CaptionEvent]) -> list[ClipPlan]:
    """One ClipPlan per selected segment, in order, carrying the captions that overlap it."""
    plans = []
    for segment in selected:
        interval = Interval(segment.start, segment.end)
        caption_slice = tuple(c for c in captions if overlaps(c.interval, interval))
        plans.append(
            ClipPlan(
                source_interval=interval,
                caption_slice=caption_slice,
                output_id=_next_output_id(segment),
                title=_title_for(segment),
            )
        )
    return plans


def caption_slice_srt(clip_plan: ClipPlan) -> str:
    """SRT for the plan's captions with times relative to the clip start."""
    interval = clip_plan.source_interval
    return format_srt(clip_plan.caption_slice, offset=interval.start, limit=interval.duration)
