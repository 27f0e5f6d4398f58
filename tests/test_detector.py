import os

import pytest

from podclip import detector
from podclip.detector import DetectionOptions, detect, duration_score, score_segments, smooth_energy
from podclip.errors import AudioAnalysisError, CollaboratorError, EmptyAudioError, InputError
from podclip.models import AcousticSegment


def _detect(levels, total_duration, **option_overrides):
    return detect(
        "audio.wav",
        DetectionOptions(**option_overrides),
        energy_fn=lambda _path, _count: levels,
        duration_fn=lambda _path: total_duration,
    )


def test_detect_closes_segment_on_first_low_sample():
    # 10 samples over 100s: one sample every 10s.
    levels = [0.1, 0.9, 0.9, 0.1, 0.1, 0.1, 0.1, 0.1, 0.1, 0.1]

    segments = _detect(levels, 100.0)

    assert [(s.start, s.end, s.type) for s in segments] == [(10.0, 30.0, "speech")]


def test_detect_closes_open_segment_at_total_duration():
    levels = [0.1] * 8 + [0.9, 0.9]

    segments = _detect(levels, 100.0)

    assert [(s.start, s.end) for s in segments] == [(80.0, 100.0)]


def test_detect_threshold_is_strict():
    levels = [0.6, 0.6, 0.6, 0.1]

    assert _detect(levels, 40.0, energy_threshold=0.6) == []


def test_detect_discards_candidates_outside_duration_bounds():
    # 1s per sample: a 2s burst, a 10s burst and a 70s burst.
    levels = [0.9] * 2 + [0.0] + [0.9] * 10 + [0.0] + [0.9] * 70 + [0.0] * 16

    segments = _detect(levels, 100.0)

    assert [(s.start, s.end) for s in segments] == [(3.0, 13.0)]
    assert all(5.0 <= s.duration <= 60.0 for s in segments)


def test_detect_flicker_produces_no_stable_segment_without_smoothing():
    levels = [0.9, 0.1] * 50

    assert _detect(levels, 100.0) == []


def test_detect_smoothing_bridges_short_dips():
    levels = [0.0] * 10 + [1.0, 1.0, 1.0, 0.4, 1.0, 1.0, 1.0, 1.0] + [0.0] * 12

    assert _detect(levels, 30.0) == []
    segments = _detect(levels, 30.0, smoothing_window=3)
    assert [(s.start, s.end) for s in segments] == [(10.0, 18.0)]


def test_detect_orders_by_score_descending():
    # 15s burst is ideal, 40s burst scores lower.
    levels = [0.9] * 15 + [0.0] * 5 + [0.9] * 40 + [0.0] * 40

    segments = _detect(levels, 100.0)

    assert [s.duration for s in segments] == [15.0, 40.0]
    assert segments[0].score > segments[1].score


def test_detect_zero_duration_raises_empty_audio_error():
    with pytest.raises(EmptyAudioError) as exc:
        _detect([0.9], 0.0)

    assert isinstance(exc.value, AudioAnalysisError)
    assert isinstance(exc.value, InputError)


def test_detect_empty_energy_raises():
    with pytest.raises(AudioAnalysisError):
        _detect([], 100.0)


def test_detect_propagates_collaborator_failure():
    def broken_duration(_path):
        raise AudioAnalysisError("unreadable")

    with pytest.raises(CollaboratorError):
        detect("audio.wav", energy_fn=lambda *_: [0.9], duration_fn=broken_duration)


def test_detect_rejects_invalid_options():
    with pytest.raises(InputError):
        _detect([0.9], 10.0, energy_threshold=1.0)
    with pytest.raises(InputError):
        _detect([0.9], 10.0, min_segment_duration=30, max_segment_duration=20)


def test_duration_score_peaks_at_ideal_length():
    options = DetectionOptions()

    assert duration_score(15.0, options) == pytest.approx(1.0)
    assert duration_score(60.0, options) == pytest.approx(0.0)
    assert duration_score(5.0, options) == pytest.approx(1 - 10 / 45)


def test_duration_score_degenerate_bounds():
    options = DetectionOptions(min_segment_duration=15, max_segment_duration=15)

    assert duration_score(15.0, options) == 1.0


def test_score_segments_averages_duration_and_type():
    options = DetectionOptions()
    segments = [
        AcousticSegment(0, 15, 0.0, "music"),
        AcousticSegment(20, 35, 0.0, "speech"),
    ]

    scored = score_segments(segments, options)

    assert [(s.start, s.score) for s in scored] == [
        (20, pytest.approx(0.9)),
        (0, pytest.approx(0.7)),
    ]


def test_smooth_energy_window_one_is_identity():
    assert smooth_energy([0.1, 0.5, 0.9], 1) == [0.1, 0.5, 0.9]


def test_smooth_energy_averages_neighbours():
    assert smooth_energy([0.0, 0.9, 0.0], 3) == pytest.approx([0.45, 0.3, 0.45])


def test_detect_video_removes_temporary_audio(monkeypatch):
    created = {}

    def fake_extract(_video_path, output_path):
        with open(output_path, "wb") as f:
            f.write(b"RIFF")
        created["path"] = output_path
        return output_path

    monkeypatch.setattr(detector.audio, "extract_audio", fake_extract)

    segments = detector.detect_video(
        "input.mp4",
        energy_fn=lambda _path, _count: [0.9] * 10 + [0.0] * 10,
        duration_fn=lambda _path: 20.0,
    )

    assert [(s.start, s.end) for s in segments] == [(0.0, 10.0)]
    assert not os.path.exists(created["path"])


def test_detect_video_removes_temporary_audio_on_failure(monkeypatch):
    created = {}

    def fake_extract(_video_path, output_path):
        created["path"] = output_path
        return output_path

    monkeypatch.setattr(detector.audio, "extract_audio", fake_extract)

    with pytest.raises(EmptyAudioError):
        detector.detect_video("input.mp4", energy_fn=lambda *_: [0.9], duration_fn=lambda _p: 0.0)

    assert not os.path.exists(created["path"])
