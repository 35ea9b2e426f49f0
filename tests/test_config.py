"""Tests for TOML configuration loading."""

import pytest

from pyintrack import InvalidParameters, default_parameters, load_parameters
from pyintrack.config import ENV_VAR, find_config_file


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run each test in an empty directory with an empty home."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.chdir(work)
    return work


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestFindConfigFile:
    """Config file lookup order."""

    def test_none(self):
        assert find_config_file() is None

    def test_local_file(self, isolated):
        write(isolated / "pyintrack.toml", "[pyin]\n")
        assert find_config_file().name == "pyintrack.toml"

    def test_user_file(self, tmp_path):
        path = write(tmp_path / "home" / ".pyintrack" / "config.toml", "[pyin]\n")
        assert find_config_file() == path

    def test_local_beats_user(self, tmp_path, isolated):
        write(tmp_path / "home" / ".pyintrack" / "config.toml", "[pyin]\n")
        write(isolated / "pyintrack.toml", "[pyin]\n")
        assert find_config_file().name == "pyintrack.toml"

    def test_environment_beats_local(self, tmp_path, isolated, monkeypatch):
        write(isolated / "pyintrack.toml", "[pyin]\n")
        env_path = write(tmp_path / "env.toml", "[pyin]\n")
        monkeypatch.setenv(ENV_VAR, str(env_path))
        assert find_config_file() == env_path

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_config_file(tmp_path / "nope.toml")

    def test_missing_environment_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(ENV_VAR, str(tmp_path / "nope.toml"))
        with pytest.raises(FileNotFoundError):
            find_config_file()


class TestLoadParameters:
    """Parameters from TOML."""

    def test_defaults_without_file(self):
        assert load_parameters(256) == default_parameters(256)

    def test_values_from_file(self, tmp_path):
        path = write(tmp_path / "cfg.toml", (
            "[pyin]\n"
            "pitch_floor = 60\n"
            "pitch_ceiling = 1000.0\n"
            "n_states = 240\n"
            "emphasis = 0.3\n"
        ))
        params = load_parameters(128, path)
        assert params.pitch_floor == 60.0
        assert isinstance(params.pitch_floor, float)
        assert params.pitch_ceiling == 1000.0
        assert params.n_states == 240
        assert params.emphasis == 0.3
        assert params.hop_length == 128
        assert params.frame_length == 1024

    def test_hop_length_argument_wins(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[pyin]\nhop_length = 64\n")
        assert load_parameters(512, path).hop_length == 512

    def test_missing_table_uses_defaults(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[other]\nemphasis = 0.1\n")
        assert load_parameters(256, path) == default_parameters(256)

    def test_unknown_key_warns(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[pyin]\nemphasis = 0.1\nspeed = 3\n")
        with pytest.warns(UserWarning, match="speed"):
            params = load_parameters(256, path)
        assert params.emphasis == 0.1

    def test_invalid_value(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[pyin]\npitch_floor = 900.0\n")
        with pytest.raises(InvalidParameters):
            load_parameters(256, path)

    def test_wrong_type(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[pyin]\nn_states = 1.5\n")
        with pytest.raises(InvalidParameters):
            load_parameters(256, path)

    def test_malformed_file(self, tmp_path):
        path = write(tmp_path / "cfg.toml", "[pyin\nemphasis = \n")
        with pytest.raises(InvalidParameters):
            load_parameters(256, path)

    def test_environment_file(self, tmp_path, monkeypatch):
        path = write(tmp_path / "env.toml", "[pyin]\ntransition_range = 6\n")
        monkeypatch.setenv(ENV_VAR, str(path))
        assert load_parameters(256).transition_range == 6
