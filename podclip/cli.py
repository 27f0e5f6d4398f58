import argparse
import json
import os
import sys

from podclip import pipeline
from podclip.captions import fetch_captions, find_existing_srt, load_captions
from podclip.config import MODEL_DEFAULTS, load_config
from podclip.errors import PodclipError
from podclip.models import FusedSegment
from podclip.providers import make_score_text
from podclip.transcription import transcribe_captions

SEGMENTS_CACHE_SUFFIX = ".segments.json"


def _exit_with_error(message: str, code: int = 1) -> None:
    print(message)
    raise SystemExit(code)


def _segments_cache_path(video_path: str) -> str:
    return os.path.splitext(os.path.abspath(video_path))[0] + SEGMENTS_CACHE_SUFFIX


def _load_cached_segments(
    cache_path: str,
    provider: str | None,
    model: str | None,
) -> list[FusedSegment] | None:
    if not os.path.isfile(cache_path):
        return None

    try:
        with open(cache_path, "r", encoding="utf-8") as file_handle:
            payload = json.load(file_handle)
        cached_provider = payload.get("provider")
        cached_model = payload.get("model")
        segments = [FusedSegment.from_dict(item) for item in payload["segments"]]
    except (OSError, json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        print(f"Warning: Failed to read segments cache '{cache_path}': {exc}")
        return None

    if (cached_provider, cached_model) != (provider, model):
        print(f"Segments cache was made with {cached_provider} ({cached_model}). Analyzing again.")
        return None
    return segments


def _has_transcript_scores(segments: list[FusedSegment]) -> bool:
    return any(segment.relevance is not None and segment.relevance.score > 0 for segment in segments)


def _save_cached_segments(
    cache_path: str,
    segments: list[FusedSegment],
    provider: str,
    model: str,
) -> None:
    try:
        with open(cache_path, "w", encoding="utf-8") as file_handle:
            json.dump(
                {
                    "provider": provider,
                    "model": model,
                    "segments": [segment.to_dict() for segment in segments],
                },
                file_handle,
                ensure_ascii=False,
                indent=2,
            )
    except OSError as exc:
        print(f"Warning: Failed to write segments cache '{cache_path}': {exc}")
        return

    print(f"Saved segments cache: {cache_path}")


def _parse_ranks(value: str | None) -> list[int]:
    if not value:
        return []
    try:
        ranks = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise ValueError(f"--select expects comma-separated ranks like 1,3 (got '{value}')")
    if any(rank < 1 for rank in ranks):
        raise ValueError("--select ranks start at 1")
    return ranks


def _resolve_captions(args) -> list:
    if args.srt:
        print(f"Reading SRT: {args.srt}")
        return load_captions(args.srt)

    existing = find_existing_srt(args.video)
    if existing:
        print(f"Found existing SRT: {existing}")
        return fetch_captions(args.video)

    if args.transcribe:
        print("Auto-transcription enabled. Generating SRT from video audio...")
        return transcribe_captions(args.video)

    print("No captions found. Ranking on audio energy only (use --transcribe to generate captions).")
    return []


def _resolve_provider(args, cfg) -> str | None:
    if args.openai:
        return "openai"
    if args.gemini:
        return "gemini"
    if args.ollama:
        return "ollama"
    return cfg.provider


def _print_ranking(segments: list[FusedSegment]) -> None:
    print(f"  Found {len(segments)} ranked segments:")
    for i, segment in enumerate(segments, start=1):
        summary = segment.relevance.summary if segment.relevance else "(no transcript match)"
        print(
            f"    {i}. [{segment.start:.1f}s -> {segment.end:.1f}s] "
            f"score {segment.combined_score:.2f}  {summary}"
        )


def main():
    parser = argparse.ArgumentParser(
        description="podclip - find and cut viral moments from long-form video"
    )

    ai_group = parser.add_mutually_exclusive_group()
    ai_group.add_argument("-o", "--openai", action="store_true", help="Use OpenAI")
    ai_group.add_argument("-g", "--gemini", action="store_true", help="Use Google Gemini")
    ai_group.add_argument("-l", "--ollama", action="store_true", help="Use Ollama (local)")

    parser.add_argument("video", help="Path to video file")
    parser.add_argument("srt", nargs="?", default=None, help="Path to SRT subtitle file (optional)")
    parser.add_argument("-d", "--output-dir", default=None, help="Output directory")
    parser.add_argument("--model", default=None, help="Override AI model name")
    parser.add_argument("--config", default=None, help="Path to config TOML file")
    parser.add_argument("--top", type=int, default=None, help="Number of top segments to render")
    parser.add_argument("--select", default=None, metavar="RANKS", help="Render these ranks, e.g. 1,3")
    parser.add_argument("--list", action="store_true", help="Only print the ranked segments")
    parser.add_argument("--refresh", action="store_true", help="Ignore the cached analysis")
    parser.add_argument("--transcribe", action="store_true", help="Auto-transcribe video when no SRT exists")

    args = parser.parse_args()

    try:
        cfg = load_config(args.config)
    except PodclipError as exc:
        _exit_with_error(str(exc))

    output_dir = args.output_dir or cfg.output_dir
    top = args.top if args.top is not None else cfg.top

    try:
        ranks = _parse_ranks(args.select)
    except ValueError as exc:
        _exit_with_error(f"Invalid selection: {exc}")

    if not os.path.isfile(args.video):
        print(f"Video not found: {args.video}")
        sys.exit(1)

    if args.srt and not os.path.isfile(args.srt):
        print(f"SRT not found: {args.srt}")
        sys.exit(1)

    try:
        captions = _resolve_captions(args)
    except PodclipError as exc:
        _exit_with_error(f"Caption loading failed: {exc}")
    print(f"  {len(captions)} caption lines")

    provider = _resolve_provider(args, cfg)
    model = None
    score_text = None
    if provider:
        model = args.model or cfg.model or MODEL_DEFAULTS.get(provider)
        if not model:
            _exit_with_error(f"No model configured for provider '{provider}'")
        try:
            score_text = make_score_text(provider, model)
        except PodclipError as exc:
            _exit_with_error(str(exc))

    cache_path = _segments_cache_path(args.video)
    segments = None if args.refresh else _load_cached_segments(cache_path, provider, model)

    if segments is not None:
        print(f"Using cached segments: {cache_path}")
    else:
        if provider:
            print(f"Analyzing transcript with {provider} ({model})...")
        elif captions:
            print("No AI provider specified. Use -o/--openai, -g/--gemini, -l/--ollama, or set provider in config.toml")

        try:
            segments = pipeline.analyze(args.video, captions, score_text, cfg)
        except PodclipError as exc:
            _exit_with_error(f"Segment detection failed: {exc}")

        if score_text is not None and _has_transcript_scores(segments):
            _save_cached_segments(cache_path, segments, provider, model)
        elif segments:
            print("  Segments cache not written: no transcript window was scored.")

    if not segments:
        _exit_with_error("No viral segments detected in the video.")

    _print_ranking(segments)
    if args.list:
        return

    selected = pipeline.select(segments, ranks, top)
    if not selected:
        _exit_with_error("No valid segments selected for rendering.")

    os.makedirs(output_dir, exist_ok=True)
    results = pipeline.render_clips(args.video, selected, captions, output_dir)

    # Summary
    print("\n" + "=" * 50)
    print("RESULTS:")
    print("=" * 50)
    for r in results:
        icon = "+" if r.succeeded else "x"
        size = ""
        if r.succeeded and os.path.isfile(r.file):
            mb = os.path.getsize(r.file) / (1024 * 1024)
            size = f" ({mb:.1f} MB)"
        print(f"  {icon} {r.title or r.output_id}{size}")
        print(f"    -> {r.file or r.error}")

    succeeded = sum(1 for r in results if r.succeeded)
    print(f"\n{succeeded}/{len(results)} clips created in {output_dir}/")


if __name__ == "__main__":
    main()
