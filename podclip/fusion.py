"""Fuse acoustic candidates with transcript relevance into one ranking."""

from typing import Sequence

from podclip.models import AcousticSegment, FusedSegment, RelevanceResult, overlaps

ACOUSTIC_WEIGHT = 0.4
RELEVANCE_WEIGHT = 0.6
# Confidence kept by a segment that has only one of the two signals.
ACOUSTIC_ONLY_FACTOR = 0.7
RELEVANCE_ONLY_FACTOR = 0.8
ORPHAN_THRESHOLD = 0.7
ORPHAN_ACOUSTIC_SCORE = 0.5


def _fuse_acoustic(segment: AcousticSegment, relevance: Sequence[RelevanceResult]) -> FusedSegment:
    matching = [r for r in relevance if overlaps(segment.interval, r.interval)]
    if not matching:
        return FusedSegment(
            start=segment.start,
            end=segment.end,
            score=segment.score,
            type=segment.type,
            combined_score=segment.score * ACOUSTIC_ONLY_FACTOR,
        )

    avg_relevance = sum(r.score for r in matching) / len(matching)
    best = matching[0]
    for result in matching[1:]:
        if result.score > best.score:
            best = result

    return FusedSegment(
        start=segment.start,
        end=segment.end,
        score=segment.score,
        type=segment.type,
        combined_score=ACOUSTIC_WEIGHT * segment.score + RELEVANCE_WEIGHT * avg_relevance,
        caption_text=" ".join(r.source_segment.text for r in matching),
        relevance=best,
    )


def fuse(
    acoustic: Sequence[AcousticSegment],
    relevance: Sequence[RelevanceResult],
) -> list[FusedSegment]:
    """
    Combine both signals into FusedSegments sorted by combined score.

    Every acoustic segment is kept, scored with the mean relevance of the
    transcript windows it overlaps. High-scoring transcript windows that
    overlap nothing fused so far are added as segments of their own. The
    sort is stable, so ties keep acoustic-derived segments first.
    """
    fused = [_fuse_acoustic(segment, relevance) for segment in acoustic]

    for result in relevance:
        if result.score < ORPHAN_THRESHOLD:
            continue
        if any(overlaps(segment.interval, result.interval) for segment in fused):
            continue
        source = result.source_segment
        fused.append(
            FusedSegment(
                start=source.start,
                end=source.end,
                score=ORPHAN_ACOUSTIC_SCORE,
                type="speech",
                combined_score=result.score * RELEVANCE_ONLY_FACTOR,
                caption_text=source.text,
                relevance=result,
            )
        )

    return sorted(fused, key=lambda s: s.combined_score, reverse=True)


def filter_by_duration(
    segments: Sequence[FusedSegment],
    min_duration: float = 5.0,
    max_duration: float = 60.0,
) -> list[FusedSegment]:
    return [s for s in segments if min_duration <= s.duration <= max_duration]


def top_segments(segments: Sequence[FusedSegment], count: int = 3) -> list[FusedSegment]:
    return list(segments[:count])
