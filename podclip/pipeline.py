"""End-to-end orchestration: analyze a video, then render the chosen segments.

Each step takes the configuration explicitly and hands an immutable result
to the next one.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from podclip import detector, fusion, planner, scorer, segmenter, video
from podclip.config import Config
from podclip.errors import CollaboratorError
from podclip.models import AcousticSegment, CaptionEvent, FusedSegment, RelevanceResult
from podclip.providers import ScoreTextFn


@dataclass(frozen=True)
class ClipResult:
    output_id: str
    title: str
    start: float
    end: float
    file: str | None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def detect_acoustic(video_path: str, config: Config) -> list[AcousticSegment]:
    print("Detecting high-energy audio spans...")
    segments = detector.detect_video(video_path, config.detection)
    print(f"  {len(segments)} acoustic candidates")
    return segments


def score_transcript(
    captions: Sequence[CaptionEvent],
    score_text: ScoreTextFn | None,
    config: Config,
) -> list[RelevanceResult]:
    if not captions:
        print("No captions available. Skipping transcript scoring.")
        return []
    if score_text is None:
        print("No AI provider configured. Skipping transcript scoring.")
        return []

    windows = segmenter.group(captions, config.scoring.window_seconds)
    print(f"Scoring {len(windows)} transcript windows...")
    return scorer.score_all_sync(
        windows,
        score_text,
        batch_size=config.scoring.batch_size,
        batch_delay=config.scoring.batch_delay,
    )


def analyze(
    video_path: str,
    captions: Sequence[CaptionEvent],
    score_text: ScoreTextFn | None,
    config: Config,
    detect_fn: Callable[[str, Config], list[AcousticSegment]] = detect_acoustic,
) -> list[FusedSegment]:
    """Rank candidate segments for a video, best first, within the configured clip bounds."""
    acoustic = detect_fn(video_path, config)
    relevance = score_transcript(captions, score_text, config)
    fused = fusion.fuse(acoustic, relevance)
    return fusion.filter_by_duration(fused, config.min_clip_duration, config.max_clip_duration)


def select(segments: Sequence[FusedSegment], ranks: Sequence[int] | None, top: int) -> list[FusedSegment]:
    """Pick segments by 1-based rank, or the top N when no ranks are given."""
    if not ranks:
        return fusion.top_segments(segments, top)

    selected = []
    for rank in ranks:
        if not 1 <= rank <= len(segments):
            print(f"  Skipping rank {rank}: only {len(segments)} segments available")
            continue
        selected.append(segments[rank - 1])
    return selected


def render_clips(
    video_path: str,
    selected: Sequence[FusedSegment],
    captions: Sequence[CaptionEvent],
    output_dir: str,
    render_fn: Callable[..., str] = video.render,
) -> list[ClipResult]:
    """Plan and render each selected segment; one failed render does not stop the rest."""
    results = []
    plans = planner.plan(selected, captions)
    for i, clip_plan in enumerate(plans, start=1):
        interval = clip_plan.source_interval
        print(f"\nClipping {i}/{len(plans)}: {clip_plan.title or clip_plan.output_id}")
        print(f"  {interval.start:.1f}s -> {interval.end:.1f}s, {len(clip_plan.caption_slice)} captions")

        try:
            output_path = render_fn(video_path, clip_plan, output_dir)
            error = None
        except CollaboratorError as exc:
            print(f"  Render failed: {exc}")
            output_path, error = None, str(exc)

        results.append(
            ClipResult(
                output_id=clip_plan.output_id,
                title=clip_plan.title,
                start=interval.start,
                end=interval.end,
                file=output_path,
                error=error,
            )
        )
    return results
