"""Tests for settings resolution: defaults, YAML file and environment."""

import pytest

from structural_edit.config import Config, _find_config_file


_KEYS = ("MAX_BYTES", "PREVIEW_MAX_LINES", "INDENT_WIDTH", "QUOTE_STYLE",
         "METRICS_ENABLED", "METRICS_DIR", "LOG_DIR")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in _KEYS:
        monkeypatch.delenv("STRUCTURAL_EDIT_" + key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_defaults(self):
        config = Config()
        assert config.MAX_BYTES == 1048576
        assert config.PREVIEW_MAX_LINES == 400
        assert config.INDENT_WIDTH == 2
        assert config.QUOTE_STYLE == "single"
        assert config.METRICS_ENABLED is False
        assert config.METRICS_DIR == ".structural_edit"

    def test_load_without_file(self):
        assert Config.load().MAX_BYTES == 1048576


class TestYaml:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("max_bytes: 2048\nmetrics_enabled: true\n")
        config = Config.load(str(path))
        assert config.MAX_BYTES == 2048
        assert config.METRICS_ENABLED is True

    def test_found_in_cwd(self, tmp_path):
        (tmp_path / ".structural_edit.yaml").write_text("preview_max_lines: 10\n")
        assert _find_config_file() == str(tmp_path / ".structural_edit.yaml")
        assert Config.load().PREVIEW_MAX_LINES == 10

    def test_missing_explicit_path(self, tmp_path):
        assert _find_config_file(str(tmp_path / "nope.yaml")) is None

    def test_style_section(self, tmp_path):
        path = tmp_path / "style.yaml"
        path.write_text("style:\n  indent_width: 4\n  quote_style: double\n")
        config = Config.load(str(path))
        assert config.INDENT_WIDTH == 4
        assert config.QUOTE_STYLE == "double"

    def test_broken_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("max_bytes: [1, 2\n")
        assert Config.load(str(path)).MAX_BYTES == 1048576

    def test_invalid_quote_style_uses_default(self):
        assert Config({"quote_style": "backtick"}).QUOTE_STYLE == "single"


class TestEnvironment:
    def test_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("STRUCTURAL_EDIT_MAX_BYTES", "99")
        assert Config({"max_bytes": 5}).MAX_BYTES == 99

    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv("STRUCTURAL_EDIT_METRICS_ENABLED", "yes")
        assert Config().METRICS_ENABLED is True

    def test_env_style(self, monkeypatch):
        monkeypatch.setenv("STRUCTURAL_EDIT_QUOTE_STYLE", "DOUBLE")
        monkeypatch.setenv("STRUCTURAL_EDIT_INDENT_WIDTH", "8")
        config = Config({"style": {"quote_style": "single", "indent_width": 3}})
        assert config.QUOTE_STYLE == "double"
        assert config.INDENT_WIDTH == 8
