"""Render a ClipPlan as a vertical short with ffmpeg."""

import os
import subprocess
import tempfile
from typing import List

from podclip.errors import RenderError
from podclip.framing import detect_primary_face_x
from podclip.models import ClipPlan
from podclip.planner import caption_slice_srt

VAAPI_DEVICE = "/dev/dri/renderD128"
OUTPUT_WIDTH = 1080
OUTPUT_HEIGHT = 1920
FOREGROUND_WIDTH = 1620
DEFAULT_FORCE_STYLE = (
    "FontName=Arial,"
    "FontSize=12,"
    "Bold=1,"
    "PrimaryColour=&H00FFFFFF,"
    "OutlineColour=&H00000000,"
    "Outline=1,"
    "Shadow=0,"
    "MarginV=62"
)
FONT_CANDIDATES = [
    "/usr/share/fonts/TTF/Arialbd.TTF",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
]


def escape_filter_path(path: str) -> str:
    """Escape special chars for FFmpeg subtitles/font path arguments."""
    path = path.replace("\\", "\\\\\\\\")
    path = path.replace(":", "\\\\:")
    path = path.replace("'", "\\\\'")
    path = path.replace("[", "\\\\[")
    path = path.replace("]", "\\\\]")
    return path


def escape_drawtext(text: str) -> str:
    """Escape special chars for FFmpeg drawtext filter."""
    text = text.replace("\\", "\\\\")
    text = text.replace("'", "\u2019")
    text = text.replace(":", "\\:")
    text = text.replace(";", "\\;")
    text = text.replace("%", "\\%")
    return text


def _resolve_font_file() -> str | None:
    override = os.getenv("PODCLIP_FONT_FILE")
    candidates = [override] if override else []
    candidates.extend(FONT_CANDIDATES)

    for candidate in candidates:
        if candidate and os.path.isfile(candidate):
            return candidate
    return None


def _font_spec(font_file: str | None) -> str:
    if font_file:
        return f"fontfile={escape_filter_path(font_file)}:"
    return "font=Sans:"


def _build_subtitle_filter(srt_path: str | None, fonts_dir: str | None) -> str:
    if not srt_path:
        return ""

    parts = [f"subtitles={escape_filter_path(srt_path)}"]
    if fonts_dir:
        parts.append(f"fontsdir={escape_filter_path(fonts_dir)}")
    parts.append(f"force_style='{DEFAULT_FORCE_STYLE}'")
    return "," + ":".join(parts)


def _split_title_lines(title: str, max_words: int = 4) -> list[str]:
    words = title.split()
    if not words:
        return []
    if len(words) > max_words:
        mid = (len(words) + 1) // 2
        return [escape_drawtext(" ".join(words[:mid])), escape_drawtext(" ".join(words[mid:]))]
    return [escape_drawtext(title)]


def _crop_x_from_face(
    face_x: float,
    scaled_width: int = FOREGROUND_WIDTH,
    crop_width: int = OUTPUT_WIDTH,
) -> int:
    face_center_px = face_x * scaled_width
    crop_x = face_center_px - (crop_width / 2)
    crop_x = max(0, min(scaled_width - crop_width, crop_x))
    return int(crop_x)


def build_filter_complex(
    crop_x: int,
    title: str,
    srt_path: str | None,
    font_file: str | None,
    fonts_dir: str | None,
) -> str:
    font_spec = _font_spec(font_file)
    title_filters = "".join(
        f",drawtext=text='{line}':"
        f"{font_spec}"
        f"fontsize=64:fontcolor=white:"
        f"borderw=8:bordercolor=black:"
        f"x=(w-text_w)/2:y={160 + index * 80}"
        for index, line in enumerate(_split_title_lines(title))
    )

    return (
        f"[0:v]split=2[bg][fg];"
        f"[bg]scale=-2:{OUTPUT_HEIGHT},crop={OUTPUT_WIDTH}:{OUTPUT_HEIGHT}:(iw-{OUTPUT_WIDTH})/2:0,"
        f"gblur=sigma=40[bg_out];"
        f"[fg]scale={FOREGROUND_WIDTH}:-2,crop={OUTPUT_WIDTH}:ih:{crop_x}:0[fg_out];"
        f"[bg_out][fg_out]overlay=0:(H-h)/2"
        f"{title_filters}"
        f"{_build_subtitle_filter(srt_path, fonts_dir)}[outv]"
    )


def _format_time(value: float) -> str:
    return f"{value:.3f}"


def _build_cpu_cmd(
    video_path: str,
    start: float,
    duration: float,
    output_path: str,
    filter_complex: str,
) -> List[str]:
    return [
        "ffmpeg", "-y",
        "-ss", _format_time(start),
        "-t", _format_time(duration),
        "-i", video_path,
        "-filter_complex", filter_complex,
        "-map", "[outv]",
        "-map", "0:a?",
        "-c:v", "libx264",
        "-crf", "23",
        "-preset", "fast",
        "-c:a", "aac",
        "-b:a", "128k",
        "-movflags", "+faststart",
        output_path,
    ]


def _build_vaapi_cmd(
    video_path: str,
    start: float,
    duration: float,
    output_path: str,
    filter_complex: str,
) -> List[str]:
    return [
        "ffmpeg", "-y",
        "-init_hw_device", f"vaapi=va:{VAAPI_DEVICE}",
        "-filter_hw_device", "va",
        "-ss", _format_time(start),
        "-t", _format_time(duration),
        "-i", video_path,
        "-filter_complex", f"{filter_complex};[outv]format=nv12,hwupload[outv_hw]",
        "-map", "[outv_hw]",
        "-map", "0:a?",
        "-c:v", "h264_vaapi",
        "-qp", "23",
        "-c:a", "aac",
        "-b:a", "128k",
        "-movflags", "+faststart",
        output_path,
    ]


def _vaapi_available() -> bool:
    disabled = os.getenv("PODCLIP_DISABLE_VAAPI", "").strip().lower()
    if disabled in {"1", "true", "yes"}:
        return False
    return os.path.exists(VAAPI_DEVICE) and os.access(VAAPI_DEVICE, os.R_OK | os.W_OK)


def _write_caption_file(clip_plan: ClipPlan, output_dir: str) -> str | None:
    content = caption_slice_srt(clip_plan)
    if not content:
        return None
    handle, srt_path = tempfile.mkstemp(prefix=f"{clip_plan.output_id}_", suffix=".srt", dir=output_dir)
    with os.fdopen(handle, "w", encoding="utf-8") as file_handle:
        file_handle.write(content)
    return srt_path


def _run_ffmpeg(cmd: List[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        raise RenderError(f"Could not run ffmpeg: {exc}") from exc


def _encode(video_path: str, start: float, duration: float, output_path: str, filter_complex: str):
    result = None
    if _vaapi_available():
        vaapi_cmd = _build_vaapi_cmd(video_path, start, duration, output_path, filter_complex)
        print("  Running FFmpeg (VAAPI)...")
        result = _run_ffmpeg(vaapi_cmd)
        if result.returncode != 0:
            print("  VAAPI encoding failed, falling back to CPU...")
    else:
        print("  VAAPI device unavailable. Using CPU encoding.")

    if result is None or result.returncode != 0:
        print("  Running FFmpeg (CPU)...")
        cpu_cmd = _build_cpu_cmd(video_path, start, duration, output_path, filter_complex)
        result = _run_ffmpeg(cpu_cmd)
    return result


def render(video_path: str, clip_plan: ClipPlan, output_dir: str) -> str:
    """
    Cut the plan's interval out of the video as a 9:16 short with its captions burned in.
    Returns the output path; raises RenderError when ffmpeg fails or writes nothing.
    The temporary caption file is removed whether or not rendering succeeds.
    """
    interval = clip_plan.source_interval
    if interval.end <= interval.start:
        raise RenderError(f"Invalid clip range {interval.start:.2f}-{interval.end:.2f}")

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, f"{clip_plan.output_id}.mp4")

    print(f"  Analyzing frame at {interval.start:.1f}s for face...")
    face_x = detect_primary_face_x(video_path, interval.start)
    crop_x = _crop_x_from_face(face_x)
    print(f"  Face x: {face_x:.2f}, Crop x: {crop_x}")

    font_file = _resolve_font_file()
    fonts_dir = os.path.dirname(font_file) if font_file else None
    if not font_file:
        print("  Font file not found in known paths. Using ffmpeg default font.")

    srt_path = _write_caption_file(clip_plan, output_dir)
    try:
        filter_complex = build_filter_complex(
            crop_x=crop_x,
            title=clip_plan.title,
            srt_path=srt_path,
            font_file=font_file,
            fonts_dir=fonts_dir,
        )
        result = _encode(video_path, interval.start, interval.duration, output_path, filter_complex)
    finally:
        if srt_path and os.path.exists(srt_path):
            os.remove(srt_path)

    if result.returncode != 0:
        raise RenderError(f"FFmpeg error:\n{(result.stderr or '')[-500:]}")

    if not os.path.isfile(output_path) or os.path.getsize(output_path) == 0:
        raise RenderError("FFmpeg produced an empty output file.")

    return output_path
