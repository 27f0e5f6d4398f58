import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

from podclip.detector import DetectionOptions
from podclip.errors import InputError
from podclip.scorer import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE
from podclip.segmenter import DEFAULT_WINDOW_SECONDS

MODEL_DEFAULTS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-3-flash-preview",
    "ollama": "llama3",
}

CONFIG_SEARCH_PATHS = [
    Path("config.toml"),
    Path.home() / ".config" / "podclip" / "config.toml",
]

ENV_SEARCH_PATHS = [
    Path(".env"),
    Path(".env.local"),
]


@dataclass(frozen=True)
class ScoringOptions:
    window_seconds: float = DEFAULT_WINDOW_SECONDS
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY

    def validate(self) -> None:
        if self.window_seconds <= 0:
            raise InputError("window_seconds must be > 0")
        if self.batch_size < 1:
            raise InputError("batch_size must be >= 1")
        if self.batch_delay < 0:
            raise InputError("batch_delay must be >= 0")


@dataclass(frozen=True)
class Config:
    provider: str | None = None
    model: str | None = None
    output_dir: str = "./shorts_clips"
    top: int = 3
    min_clip_duration: float = 5.0
    max_clip_duration: float = 60.0
    detection: DetectionOptions = field(default_factory=DetectionOptions)
    scoring: ScoringOptions = field(default_factory=ScoringOptions)


def load_dotenv() -> None:
    """Load env vars from .env files.

    Loading order is deterministic:
    1) .env
    2) .env.local

    Existing process environment variables are never overridden.
    """
    from dotenv import dotenv_values

    merged: dict[str, str] = {}
    for env_path in ENV_SEARCH_PATHS:
        if not env_path.exists():
            continue
        values = dotenv_values(env_path)
        for key, value in values.items():
            if value is not None:
                merged[key] = value

    for key, value in merged.items():
        os.environ.setdefault(key, value)


def _section(data: dict, cls, name: str):
    """Build a frozen options dataclass from a TOML table.

    Unknown keys and values that are not numbers raise InputError; integer
    fields must be given as integers.
    """
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise InputError(f"[{name}] must be a table")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise InputError(f"Unknown key(s) in [{name}]: {', '.join(unknown)}")
    values = {}
    for f in fields(cls):
        if f.name not in table:
            continue
        value = table[f.name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InputError(f"[{name}] {f.name} must be a number (got {value!r})")
        if isinstance(f.default, int):
            if not isinstance(value, int):
                raise InputError(f"[{name}] {f.name} must be an integer (got {value!r})")
            values[f.name] = value
        else:
            values[f.name] = float(value)

    options = cls(**values)
    options.validate()
    return options


def load_config(path: str | None = None) -> Config:
    """Load config from TOML file.

    Search order: explicit path > ./config.toml > ~/.config/podclip/config.toml
    Missing config file is not an error (defaults are used).
    """
    load_dotenv()

    config_path = None
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise InputError(f"Config file not found: {path}")
    else:
        for candidate in CONFIG_SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    if config_path is None:
        return Config()

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise InputError(f"Invalid config file {config_path}: {exc}") from exc

    ai = data.get("ai", {})
    output = data.get("output", {})
    return Config(
        provider=ai.get("provider"),
        model=ai.get("model"),
        output_dir=output.get("dir", Config.output_dir),
        top=int(output.get("top", Config.top)),
        min_clip_duration=float(output.get("min_duration", Config.min_clip_duration)),
        max_clip_duration=float(output.get("max_duration", Config.max_clip_duration)),
        detection=_section(data, DetectionOptions, "detection"),
        scoring=_section(data, ScoringOptions, "scoring"),
    )
