import pytest

from podclip.config import Config, ScoringOptions


@pytest.fixture
def cli_config(tmp_path):
    return Config(
        provider=None,
        model=None,
        output_dir=str(tmp_path / "clips"),
        scoring=ScoringOptions(batch_delay=0),
    )
