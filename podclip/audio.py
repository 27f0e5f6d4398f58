"""Audio primitives backed by ffprobe/ffmpeg.

The detector only sees `audio_duration` and `energy_levels`; both can be
swapped for any other implementation with the same signature.
"""

import os
import subprocess
import tempfile
from contextlib import contextmanager
from typing import Iterator

import numpy as np

from podclip.errors import AudioAnalysisError

SAMPLE_RATE = 16000
DEFAULT_SAMPLE_COUNT = 100


def _run_tool(cmd: list[str], **kwargs) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(cmd, capture_output=True, **kwargs)
    except OSError as exc:
        raise AudioAnalysisError(f"Could not run '{cmd[0]}': {exc}") from exc


def audio_duration(audio_path: str) -> float:
    """Get media duration in seconds using ffprobe."""
    cmd = [
        "ffprobe", "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        audio_path,
    ]
    result = _run_tool(cmd, text=True)
    if result.returncode != 0:
        raise AudioAnalysisError(
            f"ffprobe could not read '{audio_path}': {(result.stderr or '').strip()[-300:]}"
        )
    try:
        return float(result.stdout.strip())
    except ValueError:
        raise AudioAnalysisError(f"ffprobe returned no duration for '{audio_path}'")


def _decode_pcm(audio_path: str) -> np.ndarray:
    cmd = [
        "ffmpeg", "-v", "error",
        "-i", audio_path,
        "-ac", "1",
        "-ar", str(SAMPLE_RATE),
        "-f", "s16le",
        "-",
    ]
    result = _run_tool(cmd)
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        raise AudioAnalysisError(f"ffmpeg could not decode '{audio_path}': {stderr.strip()[-300:]}")
    return np.frombuffer(result.stdout, dtype=np.int16).astype(np.float32) / 32768.0


def energy_levels(audio_path: str, sample_count: int = DEFAULT_SAMPLE_COUNT) -> list[float]:
    """
    Short-time energy of the waveform as `sample_count` values in [0, 1].
    Each value is the RMS of one equal slice of the signal, normalised by the loudest slice.
    """
    samples = _decode_pcm(audio_path)
    if samples.size == 0:
        raise AudioAnalysisError(f"No audio samples decoded from '{audio_path}'")

    frames = np.array_split(samples, sample_count)
    rms = np.array([np.sqrt(np.mean(frame ** 2)) if frame.size else 0.0 for frame in frames])
    peak = float(rms.max())
    if peak <= 0:
        return [0.0] * sample_count
    return [float(value) for value in np.clip(rms / peak, 0.0, 1.0)]


def extract_audio(video_path: str, output_path: str) -> str:
    """Extract the audio track to 16kHz mono WAV."""
    cmd = [
        "ffmpeg", "-y",
        "-i", video_path,
        "-vn",
        "-acodec", "pcm_s16le",
        "-ar", str(SAMPLE_RATE),
        "-ac", "1",
        output_path,
    ]
    result = _run_tool(cmd, text=True)
    if result.returncode != 0:
        raise AudioAnalysisError(
            f"Audio extraction failed for '{video_path}': {(result.stderr or '').strip()[-300:]}"
        )
    return output_path


@contextmanager
def extracted_audio(video_path: str) -> Iterator[str]:
    """Yield a temporary WAV of the video's audio; the file is removed on exit."""
    handle, audio_path = tempfile.mkstemp(prefix="podclip_", suffix=".wav")
    os.close(handle)
    try:
        yield extract_audio(video_path, audio_path)
    finally:
        if os.path.exists(audio_path):
            os.remove(audio_path)
