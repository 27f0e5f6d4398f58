"""Data models shared by every pipeline stage.

All models are frozen: each stage returns new values instead of mutating
what it received.
"""

from dataclasses import dataclass

from podclip.errors import InputError

SEGMENT_TYPES = ("speech", "music", "silence", "noise")


@dataclass(frozen=True)
class Interval:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


def overlaps(a: Interval, b: Interval) -> bool:
    """Half-open overlap: touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end


@dataclass(frozen=True)
class CaptionEvent:
    """One timed caption line."""

    start: float
    duration: float
    text: str

    def __post_init__(self) -> None:
        if self.start < 0:
            raise InputError(f"Caption start must be >= 0 (got {self.start})")
        if self.duration <= 0:
            raise InputError(f"Caption duration must be > 0 (got {self.duration})")
        if not self.text or not self.text.strip():
            raise InputError("Caption text cannot be empty")

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass(frozen=True)
class TranscriptSegment:
    """Consecutive captions grouped into an analysis window.

    `duration` is the sum of member caption durations, not the wall-clock
    span of the window.
    """

    start: float
    duration: float
    text: str

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass(frozen=True)
class AcousticSegment:
    start: float
    end: float
    score: float
    type: str = "speech"

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InputError(f"Segment end must be after start ({self.start} >= {self.end})")
        if self.type not in SEGMENT_TYPES:
            raise InputError(f"Unknown segment type '{self.type}'")

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass(frozen=True)
class RelevanceResult:
    """LLM verdict for one transcript segment."""

    score: float
    reasons: tuple[str, ...]
    emotions: tuple[str, ...]
    keywords: tuple[str, ...]
    summary: str
    source_segment: TranscriptSegment

    @property
    def interval(self) -> Interval:
        return self.source_segment.interval

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "reasons": list(self.reasons),
            "emotions": list(self.emotions),
            "keywords": list(self.keywords),
            "summary": self.summary,
            "source_segment": {
                "start": self.source_segment.start,
                "duration": self.source_segment.duration,
                "text": self.source_segment.text,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RelevanceResult":
        source = data["source_segment"]
        return cls(
            score=float(data["score"]),
            reasons=tuple(data.get("reasons", ())),
            emotions=tuple(data.get("emotions", ())),
            keywords=tuple(data.get("keywords", ())),
            summary=data.get("summary", ""),
            source_segment=TranscriptSegment(
                start=float(source["start"]),
                duration=float(source["duration"]),
                text=source["text"],
            ),
        )


@dataclass(frozen=True)
class FusedSegment(AcousticSegment):
    """Acoustic segment enriched with transcript relevance; the unit that gets ranked."""

    combined_score: float = 0.0
    caption_text: str | None = None
    relevance: RelevanceResult | None = None

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "score": self.score,
            "type": self.type,
            "combined_score": self.combined_score,
            "caption_text": self.caption_text,
            "relevance": self.relevance.to_dict() if self.relevance else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FusedSegment":
        relevance = data.get("relevance")
        return cls(
            start=float(data["start"]),
            end=float(data["end"]),
            score=float(data["score"]),
            type=data.get("type", "speech"),
            combined_score=float(data["combined_score"]),
            caption_text=data.get("caption_text"),
            relevance=RelevanceResult.from_dict(relevance) if relevance else None,
        )


@dataclass(frozen=True)
class ClipPlan:
    """Render instructions for one selected segment."""

    source_interval: Interval
    caption_slice: tuple[CaptionEvent, ...]
    output_id: str
    title: str = ""
