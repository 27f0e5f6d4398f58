"""Acoustic segment detection.

A plain threshold-crossing state machine over an energy envelope: a
candidate opens when energy rises above the threshold and closes on the
first sample at or below it. There is no hysteresis, so a flickering
envelope yields many short candidates; set `smoothing_window` to
pre-smooth it.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from podclip import audio
from podclip.errors import AudioAnalysisError, EmptyAudioError, InputError
from podclip.models import AcousticSegment

IDEAL_CLIP_SECONDS = 15.0
SPEECH_TYPE_SCORE = 0.8
OTHER_TYPE_SCORE = 0.4

EnergyFn = Callable[[str, int], Sequence[float]]
DurationFn = Callable[[str], float]


@dataclass(frozen=True)
class DetectionOptions:
    """Detector tuning.

    `speech_rate_threshold` is accepted so configurations can carry it, but the
    energy detector does not read it.
    """

    min_segment_duration: float = 5.0
    max_segment_duration: float = 60.0
    energy_threshold: float = 0.6
    speech_rate_threshold: float = 0.7
    sample_count: int = audio.DEFAULT_SAMPLE_COUNT
    smoothing_window: int = 1

    def validate(self) -> None:
        if self.min_segment_duration <= 0:
            raise InputError("min_segment_duration must be > 0")
        if self.max_segment_duration < self.min_segment_duration:
            raise InputError("max_segment_duration must be >= min_segment_duration")
        if not 0 < self.energy_threshold < 1:
            raise InputError("energy_threshold must be between 0 and 1 (exclusive)")
        if self.sample_count < 1:
            raise InputError("sample_count must be >= 1")
        if self.smoothing_window < 1:
            raise InputError("smoothing_window must be >= 1")


def smooth_energy(levels: Sequence[float], window: int) -> list[float]:
    """Centred moving average; edges average over the samples that exist."""
    if window <= 1:
        return list(levels)

    half = window // 2
    smoothed = []
    for i in range(len(levels)):
        chunk = levels[max(0, i - half) : i + half + 1]
        smoothed.append(sum(chunk) / len(chunk))
    return smoothed


def _duration_fits(start: float, end: float, options: DetectionOptions) -> bool:
    return options.min_segment_duration <= end - start <= options.max_segment_duration


def find_candidates(
    levels: Sequence[float],
    total_duration: float,
    options: DetectionOptions,
) -> list[AcousticSegment]:
    """Walk the envelope and return unscored candidates that fit the duration bounds."""
    candidates: list[AcousticSegment] = []
    count = len(levels)
    open_start: float | None = None

    for i, energy in enumerate(levels):
        time_point = i * total_duration / count
        if energy > options.energy_threshold:
            if open_start is None:
                open_start = time_point
        elif open_start is not None:
            if _duration_fits(open_start, time_point, options):
                candidates.append(AcousticSegment(open_start, time_point, 0.0, "speech"))
            open_start = None

    if open_start is not None and _duration_fits(open_start, total_duration, options):
        candidates.append(AcousticSegment(open_start, total_duration, 0.0, "speech"))

    return candidates


def duration_score(duration: float, options: DetectionOptions) -> float:
    """1.0 at the ideal clip length, falling linearly to 0 at the furthest allowed bound."""
    max_distance = max(
        IDEAL_CLIP_SECONDS - options.min_segment_duration,
        options.max_segment_duration - IDEAL_CLIP_SECONDS,
    )
    if max_distance <= 0:
        return 1.0
    return 1 - abs(duration - IDEAL_CLIP_SECONDS) / max_distance


def score_segments(
    segments: Sequence[AcousticSegment],
    options: DetectionOptions,
) -> list[AcousticSegment]:
    scored = []
    for segment in segments:
        type_score = SPEECH_TYPE_SCORE if segment.type == "speech" else OTHER_TYPE_SCORE
        score = (duration_score(segment.duration, options) + type_score) / 2
        scored.append(AcousticSegment(segment.start, segment.end, score, segment.type))
    return sorted(scored, key=lambda s: s.score, reverse=True)


def detect(
    audio_path: str,
    options: DetectionOptions | None = None,
    energy_fn: EnergyFn = audio.energy_levels,
    duration_fn: DurationFn = audio.audio_duration,
) -> list[AcousticSegment]:
    """Detect scored speech candidates in an audio file, best first.

    Raises EmptyAudioError for zero-length audio and AudioAnalysisError when
    the duration or energy primitives fail.
    """
    options = options or DetectionOptions()
    options.validate()

    total_duration = duration_fn(audio_path)
    if total_duration <= 0:
        raise EmptyAudioError(f"Audio has zero duration: {audio_path}")

    levels = list(energy_fn(audio_path, options.sample_count))
    if not levels:
        raise AudioAnalysisError(f"No energy samples produced for {audio_path}")
    levels = smooth_energy(levels, options.smoothing_window)

    candidates = find_candidates(levels, total_duration, options)
    return score_segments(candidates, options)


def detect_video(
    video_path: str,
    options: DetectionOptions | None = None,
    energy_fn: EnergyFn = audio.energy_levels,
    duration_fn: DurationFn = audio.audio_duration,
) -> list[AcousticSegment]:
    """Extract the audio track to a temporary WAV, detect, and always remove the WAV."""
    with audio.extracted_audio(video_path) as audio_path:
        return detect(audio_path, options, energy_fn=energy_fn, duration_fn=duration_fn)
