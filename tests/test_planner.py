from podclip.models import CaptionEvent, FusedSegment, RelevanceResult, TranscriptSegment
from podclip.planner import caption_slice_srt, plan


def _segment(start, end, summary=None):
    relevance = None
    if summary is not None:
        relevance = RelevanceResult(
            score=0.9,
            reasons=(),
            emotions=(),
            keywords=(),
            summary=summary,
            source_segment=TranscriptSegment(start=start, duration=end - start, text="t"),
        )
    return FusedSegment(start=start, end=end, score=0.5, combined_score=0.6, relevance=relevance)


CAPTIONS = [
    CaptionEvent(0, 5, "before"),
    CaptionEvent(8, 4, "straddles start"),
    CaptionEvent(12, 5, "inside"),
    CaptionEvent(18, 4, "straddles end"),
    CaptionEvent(20, 3, "touches end"),
]


def test_plan_slices_overlapping_captions_only():
    plans = plan([_segment(10, 20)], CAPTIONS)

    assert len(plans) == 1
    assert [c.text for c in plans[0].caption_slice] == ["straddles start", "inside", "straddles end"]
    assert (plans[0].source_interval.start, plans[0].source_interval.end) == (10, 20)


def test_plan_preserves_selection_order_and_unique_ids():
    selected = [_segment(30, 45), _segment(10, 20), _segment(0, 6)]

    plans = plan(selected, CAPTIONS)

    assert [p.source_interval.start for p in plans] == [30, 10, 0]
    assert len({p.output_id for p in plans}) == 3
    assert plans[0].caption_slice == ()


def test_plan_ids_keep_increasing_across_calls():
    first = plan([_segment(0, 10)], [])[0].output_id
    second = plan([_segment(0, 10)], [])[0].output_id

    assert first != second
    assert int(first.split("_")[1]) < int(second.split("_")[1])


def test_plan_uses_relevance_summary_as_title():
    plans = plan([_segment(0, 10, summary="Founder admits mistake"), _segment(20, 30)], [])

    assert plans[0].title == "Founder admits mistake"
    assert plans[1].title == ""


def test_caption_slice_srt_is_relative_and_clipped():
    clip_plan = plan([_segment(10, 20)], CAPTIONS)[0]

    srt = caption_slice_srt(clip_plan)

    assert srt == (
        "1\n00:00:00,000 --> 00:00:02,000\nstraddles start\n\n"
        "2\n00:00:02,000 --> 00:00:07,000\ninside\n\n"
        "3\n00:00:08,000 --> 00:00:10,000\nstraddles end\n\n"
    )
