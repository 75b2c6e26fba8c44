from pathlib import Path

import pytest
import yaml

import config
from config import Settings, Weights, init_config
from core import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv(config.CONFIG_ENV, raising=False)
    monkeypatch.delenv(config.DATA_DIR_ENV, raising=False)
    monkeypatch.setattr(config, "USER_CONFIG_PATH", tmp_path / "nowhere" / "config.yaml")


def test_defaults_when_no_file():
    settings = Settings.load()
    assert settings.weights == Weights(1.0, 0.8, 0.5, 0.3)
    assert settings.point_to_hours == 1.0
    assert settings.data_dir == Path("~/.local/share/taskctl").expanduser()


def test_partial_file_fills_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("priority:\n  weights:\n    urgency: 2\nestimate:\n  point_to_hours: 4\n")
    settings = Settings.load(path)
    assert settings.weights.urgency == 2.0
    assert settings.weights.blocking == 0.8
    assert settings.point_to_hours == 4.0


def test_env_config_path_and_data_dir_override(tmp_path: Path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("data:\n  directory: /from/file\n")
    monkeypatch.setenv(config.CONFIG_ENV, str(path))
    assert Settings.load().data_dir == Path("/from/file")

    monkeypatch.setenv(config.DATA_DIR_ENV, str(tmp_path / "env-data"))
    assert Settings.load().data_dir == tmp_path / "env-data"
    assert Settings.load(data_dir=str(tmp_path / "cli-data")).data_dir == tmp_path / "cli-data"


@pytest.mark.parametrize(
    "content",
    [
        "priority: [1, 2]\n",
        "priority:\n  weights:\n    urgency: fast\n",
        "priority:\n  weights:\n    staleness: -1\n",
        "estimate:\n  point_to_hours: -2\n",
        "- just\n- a list\n",
        "priority: {weights: {urgency: 1\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)
    with pytest.raises(ConfigurationError) as excinfo:
        Settings.load(path)
    assert excinfo.value.exit_code == 4
    assert excinfo.value.path == path


def test_init_config_writes_defaults_once(tmp_path: Path):
    path = tmp_path / "cfg" / "config.yaml"
    written = init_config(path)
    assert written == path
    assert yaml.safe_load(path.read_text()) == Settings().to_dict()
    assert Settings.load(path) == Settings()

    with pytest.raises(ConfigurationError):
        init_config(path)
    init_config(path, force=True)
