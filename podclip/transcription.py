"""Caption fallback for videos without a caption track, using openai-whisper."""

import ast
import os

from podclip.captions import create_srt_block, load_captions
from podclip.errors import CollaboratorError
from podclip.models import CaptionEvent

WORDS_PER_CAPTION = 4


def _load_backend():
    # Triton/Whisper still reference ast.Num, which newer Python versions removed.
    if not hasattr(ast, "Num"):
        ast.Num = ast.Constant

    import torch
    import whisper

    return torch, whisper


def _resolve_device(torch, device: str) -> str:
    if device == "cuda" and not torch.cuda.is_available():
        print("Warning: CUDA (GPU) not available. Falling back to CPU for transcription.")
        return "cpu"
    return device


def _chunk_text(words: list[dict]) -> str:
    return "".join(word.get("word", "") for word in words).strip()


def _append_chunk_block(blocks: list[str], index: int, chunk: list[dict]) -> int:
    start = chunk[0]["start"]
    end = chunk[-1]["end"]
    blocks.append(create_srt_block(index, start, end, _chunk_text(chunk)))
    return index + 1


def build_srt_blocks(segments: list[dict]) -> list[str]:
    """Turn whisper segments into short SRT blocks of a few words each."""
    srt_blocks: list[str] = []
    subtitle_index = 1
    current_chunk: list[dict] = []

    for segment in segments:
        words = segment.get("words", [])
        if not words:
            srt_blocks.append(
                create_srt_block(subtitle_index, segment["start"], segment["end"], segment["text"].strip())
            )
            subtitle_index += 1
            continue

        for word_info in words:
            current_chunk.append(word_info)
            if len(current_chunk) >= WORDS_PER_CAPTION:
                subtitle_index = _append_chunk_block(srt_blocks, subtitle_index, current_chunk)
                current_chunk = []

        if current_chunk:
            subtitle_index = _append_chunk_block(srt_blocks, subtitle_index, current_chunk)
            current_chunk = []

    return srt_blocks


def transcribe_video(video_path: str, model_size: str = "medium", device: str = "cuda") -> str:
    """
    Transcribes the audio from the given video file using openai-whisper.
    Generates an SRT file with the same name as the video (e.g. video.mp4 -> video.srt).
    Returns the path to the generated SRT file.
    """
    torch, whisper = _load_backend()
    device = _resolve_device(torch, device)

    print(f"Loading Whisper model '{model_size}' on {device}...")
    try:
        model = whisper.load_model(model_size, device=device)
    except Exception as exc:
        raise CollaboratorError(f"Failed to load Whisper model '{model_size}' on {device}: {exc}") from exc

    try:
        print(f"Transcribing {video_path}...")
        result = model.transcribe(video_path, fp16=(device == "cuda"), word_timestamps=True)
    except Exception as exc:
        raise CollaboratorError(f"Whisper transcription failed for '{video_path}': {exc}") from exc
    finally:
        del model
        if device == "cuda" and torch.cuda.is_available():
            torch.cuda.empty_cache()

    print(f"Detected language '{result['language']}'")

    srt_path = f"{os.path.splitext(video_path)[0]}.srt"
    with open(srt_path, "w", encoding="utf-8") as file_handle:
        file_handle.write("".join(build_srt_blocks(result["segments"])))

    print(f"Transcription saved to: {srt_path}")
    return srt_path


def transcribe_captions(video_path: str, model_size: str = "medium", device: str = "cuda") -> list[CaptionEvent]:
    return load_captions(transcribe_video(video_path, model_size=model_size, device=device))
