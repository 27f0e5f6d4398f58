"""Transcript relevance scoring.

Segments are scored in fixed-size batches: calls inside a batch run
concurrently, batches run one after another with a fixed pause between
them to stay under provider rate limits. A failed call only zeroes its
own segment.
"""

import asyncio
from typing import Callable, Sequence

from podclip.errors import InputError
from podclip.models import RelevanceResult, TranscriptSegment
from podclip.parsing import parse_score_response

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY = 1.0

ScoreTextFn = Callable[[str], "str | dict"]


def _failed_result(segment: TranscriptSegment, reason: str, summary: str) -> RelevanceResult:
    return RelevanceResult(
        score=0.0,
        reasons=(reason,),
        emotions=(),
        keywords=(),
        summary=summary,
        source_segment=segment,
    )


async def score_segment(segment: TranscriptSegment, score_text: ScoreTextFn) -> RelevanceResult:
    try:
        raw = await asyncio.to_thread(score_text, segment.text)
    except Exception as exc:
        print(f"  Scoring failed for segment at {segment.start:.1f}s: {exc}")
        return _failed_result(segment, f"Error analyzing content: {exc}", "Analysis failed")

    try:
        parsed = parse_score_response(raw)
    except Exception as exc:
        print(f"  Unparseable score for segment at {segment.start:.1f}s: {exc}")
        return _failed_result(segment, f"Error parsing analysis result: {exc}", "Failed to parse analysis")

    return RelevanceResult(
        score=parsed["score"],
        reasons=parsed["reasons"],
        emotions=parsed["emotions"],
        keywords=parsed["keywords"],
        summary=parsed["summary"],
        source_segment=segment,
    )


async def score_all(
    segments: Sequence[TranscriptSegment],
    score_text: ScoreTextFn,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
) -> list[RelevanceResult]:
    """Score every segment and return the results sorted by score, best first."""
    if batch_size < 1:
        raise InputError(f"batch_size must be >= 1 (got {batch_size})")
    if batch_delay < 0:
        raise InputError(f"batch_delay must be >= 0 (got {batch_delay})")

    segments = list(segments)
    results: list[RelevanceResult] = []
    batch_count = (len(segments) + batch_size - 1) // batch_size

    for batch_index, offset in enumerate(range(0, len(segments), batch_size), start=1):
        batch = segments[offset : offset + batch_size]
        print(f"  Scoring batch {batch_index}/{batch_count} ({len(batch)} segments)...")
        results.extend(await asyncio.gather(*(score_segment(s, score_text) for s in batch)))

        if offset + batch_size < len(segments):
            await asyncio.sleep(batch_delay)

    return sorted(results, key=lambda r: r.score, reverse=True)


def score_all_sync(
    segments: Sequence[TranscriptSegment],
    score_text: ScoreTextFn,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
) -> list[RelevanceResult]:
    return asyncio.run(score_all(segments, score_text, batch_size, batch_delay))
