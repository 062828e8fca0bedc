"""Tests for entropyx.config."""

import os

import pytest

from entropyx.config import AnalysisConfig, SmellThresholds, TrendThresholds, load_config
from entropyx.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No user or project config files, no ENTROPYX_* variables."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("ENTROPYX_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config == AnalysisConfig()
        assert config.db_path == "entropyx.db"
        assert config.max_chart_points == 200
        assert config.thresholds.troubled_entropy_delta == 0.1
        assert config.smells.high == 20

    @pytest.mark.parametrize(
        "kwargs",
        [{"workers": 0}, {"max_chart_points": 1}, {"kind": "tests"}, {"top": 0}, {"git_timeout_seconds": 0}],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)

    def test_threshold_validation(self):
        with pytest.raises(ValueError):
            TrendThresholds(heroic_entropy_delta=0)
        with pytest.raises(ValueError):
            SmellThresholds(high=10, medium=15, low=5)


class TestLoadConfig:
    def test_project_file(self, tmp_path):
        (tmp_path / "entropyx.toml").write_text(
            'db_path = "history.db"\ntop = 3\n\n[thresholds]\ntroubled_entropy_delta = 0.25\n\n[smells]\nhigh = 30\n'
        )
        config = load_config()
        assert config.db_path == "history.db"
        assert config.top == 3
        assert config.thresholds.troubled_entropy_delta == 0.25
        assert config.thresholds.heroic_entropy_delta == 0.1
        assert config.smells.high == 30

    def test_explicit_file_overrides_project(self, tmp_path):
        (tmp_path / "entropyx.toml").write_text("top = 3\n")
        explicit = tmp_path / "custom.toml"
        explicit.write_text("top = 7\n")
        assert load_config(explicit).top == 7

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "entropyx.toml").write_text("top = 3\n")
        monkeypatch.setenv("ENTROPYX_TOP", "12")
        monkeypatch.setenv("ENTROPYX_KIND", "production")
        monkeypatch.setenv("ENTROPYX_WORKERS", "2")
        config = load_config()
        assert config.top == 12
        assert config.kind == "production"
        assert config.workers == 2

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("ENTROPYX_TOP", "12")
        config = load_config(top=4, db_path=None)
        assert config.top == 4
        assert config.db_path == "entropyx.db"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("top = = 3\n")
        with pytest.raises(ConfigurationError):
            load_config(bad)

    def test_unknown_key(self, tmp_path):
        (tmp_path / "entropyx.toml").write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_invalid_value(self, tmp_path):
        (tmp_path / "entropyx.toml").write_text("[smells]\nlow = 50\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("ENTROPYX_TOP", "many")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_thresholds_must_be_table(self, tmp_path):
        (tmp_path / "entropyx.toml").write_text("thresholds = 3\n")
        with pytest.raises(ConfigurationError):
            load_config()
