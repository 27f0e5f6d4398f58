import os

import pytest

from podclip import config
from podclip.errors import InputError


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "CONFIG_SEARCH_PATHS", [tmp_path / "config.toml"])
    monkeypatch.setattr(config, "ENV_SEARCH_PATHS", [tmp_path / ".env", tmp_path / ".env.local"])


def test_load_config_defaults_without_file():
    cfg = config.load_config()

    assert cfg.provider is None
    assert cfg.output_dir == "./shorts_clips"
    assert cfg.top == 3
    assert cfg.detection.energy_threshold == 0.6
    assert cfg.scoring.batch_size == 3
    assert cfg.scoring.batch_delay == 1.0
    assert cfg.scoring.window_seconds == 15.0


def test_load_config_reads_all_sections(tmp_path):
    (tmp_path / "config.toml").write_text(
        """
[ai]
provider = "ollama"
model = "llama3.1"

[detection]
energy_threshold = 0.5
sample_count = 400
smoothing_window = 3

[scoring]
window_seconds = 20
batch_size = 5
batch_delay = 0.5

[output]
dir = "out"
top = 5
""",
        encoding="utf-8",
    )

    cfg = config.load_config()

    assert cfg.provider == "ollama"
    assert cfg.model == "llama3.1"
    assert cfg.detection.energy_threshold == 0.5
    assert cfg.detection.sample_count == 400
    assert cfg.detection.smoothing_window == 3
    assert cfg.detection.min_segment_duration == 5.0
    assert cfg.scoring.window_seconds == 20
    assert cfg.scoring.batch_size == 5
    assert cfg.output_dir == "out"
    assert cfg.top == 5


def test_load_config_explicit_missing_path_raises(tmp_path):
    with pytest.raises(InputError) as exc:
        config.load_config(str(tmp_path / "nope.toml"))

    assert "Config file not found" in str(exc.value)


def test_load_config_rejects_unknown_detection_key(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text("[detection]\nthreshold = 0.5\n", encoding="utf-8")

    with pytest.raises(InputError) as exc:
        config.load_config(str(path))

    assert "threshold" in str(exc.value)


def test_load_config_rejects_invalid_detection_values(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text("[detection]\nenergy_threshold = 1.5\n", encoding="utf-8")

    with pytest.raises(InputError):
        config.load_config(str(path))


@pytest.mark.parametrize(
    "scoring_table, message",
    [
        ("batch_size = \"3\"", "batch_size must be a number"),
        ("batch_size = 2.5", "batch_size must be an integer"),
        ("window_seconds = 0", "window_seconds must be > 0"),
        ("batch_delay = -1", "batch_delay must be >= 0"),
        ("batch_size = 0", "batch_size must be >= 1"),
    ],
)
def test_load_config_rejects_invalid_scoring_values(tmp_path, scoring_table, message):
    path = tmp_path / "custom.toml"
    path.write_text(f"[scoring]\n{scoring_table}\n", encoding="utf-8")

    with pytest.raises(InputError) as exc:
        config.load_config(str(path))

    assert message in str(exc.value)


def test_load_config_converts_integer_durations_to_float(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text("[scoring]\nwindow_seconds = 20\nbatch_delay = 2\n", encoding="utf-8")

    cfg = config.load_config(str(path))

    assert isinstance(cfg.scoring.window_seconds, float)
    assert isinstance(cfg.scoring.batch_delay, float)
    assert cfg.scoring.batch_size == 3


def test_load_dotenv_never_overrides_environment(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text("PODCLIP_A=from-env\nPODCLIP_B=from-env\n", encoding="utf-8")
    (tmp_path / ".env.local").write_text("PODCLIP_B=from-local\n", encoding="utf-8")
    monkeypatch.setenv("PODCLIP_A", "from-process")
    monkeypatch.delenv("PODCLIP_B", raising=False)

    config.load_dotenv()

    assert os.environ["PODCLIP_A"] == "from-process"
    assert os.environ["PODCLIP_B"] == "from-local"
    os.environ.pop("PODCLIP_B", None)
