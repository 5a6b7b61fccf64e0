"""Tests for compiler configuration loading."""

import pytest

from dd_core.config import CompilerConfig, load_config
from dd_core.errors import ConfigError


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "dd.config.yaml")
        assert config == CompilerConfig()
        assert config.out == "dist/dictionary.json"
        assert config.indent == 4

    def test_values_and_relative_paths(self, tmp_path):
        path = tmp_path / "dd.config.yaml"
        path.write_text(
            "source: dictionaries/dictionary.xml\nout: build/dict.json\nindent: 2\nlog_level: info\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.source == str(tmp_path / "dictionaries" / "dictionary.xml")
        assert config.out == str(tmp_path / "build" / "dict.json")
        assert config.indent == 2
        assert config.log_level == "INFO"
        assert config.dump_store is None

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "dd.config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CompilerConfig()

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "dd.config.yaml"
        path.write_text("sources: x\n", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.issue.code == "UNKNOWN_CONFIG_KEY"

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "dd.config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "dd.config.yaml"
        path.write_text("source: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.issue.code == "INVALID_CONFIG"

    @pytest.mark.parametrize("body", ["indent: -1\n", "indent: wide\n", "log_level: loud\n"])
    def test_invalid_values(self, tmp_path, body):
        path = tmp_path / "dd.config.yaml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)
