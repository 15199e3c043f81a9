"""
tests/test_config.py
Configuration loader and logging setup tests.
"""

import pytest

from thoughtlog.config.loader import ConfigLoader, get_config, reset_config
from thoughtlog.core.db import TextLimits
from thoughtlog.core.logger import LoggerManager
from thoughtlog.models.segments import ExtractionConfig


class TestConfigLoader:

    def test_default_file_created(self, tmp_path):
        loader = ConfigLoader(str(tmp_path / "config.toml"))
        config = loader.load()
        assert (tmp_path / "config.toml").exists()
        assert config["retry"]["max_retries"] == 3
        assert loader.get("extraction.review_threshold") == 0.5
        assert loader.get("database.path").endswith("thoughtlog.db")

    def test_dotted_get_default(self, tmp_path):
        loader = ConfigLoader(str(tmp_path / "config.toml"))
        loader.load()
        assert loader.get("missing.key", "fallback") == "fallback"
        assert loader.get("retry.max_retries.too_deep", 7) == 7

    def test_env_substitution(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text(
            '[server]\nhost = "${THOUGHTLOG_TEST_HOST}"\nport = ${THOUGHTLOG_TEST_PORT:9000}\n',
            encoding="utf-8",
        )
        monkeypatch.setenv("THOUGHTLOG_TEST_HOST", "0.0.0.0")
        monkeypatch.delenv("THOUGHTLOG_TEST_PORT", raising=False)
        loader = ConfigLoader(str(path))
        loader.load()
        assert loader.get("server.host") == "0.0.0.0"
        assert loader.get("server.port") == 9000

    def test_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("extraction:\n  min_confidence: 0.25\n", encoding="utf-8")
        loader = ConfigLoader(str(path))
        loader.load()
        assert loader.get("extraction.min_confidence") == 0.25

    def test_set_persists(self, tmp_path):
        path = tmp_path / "config.toml"
        loader = ConfigLoader(str(path))
        loader.load()
        assert loader.set("retry.max_retries", 5) is True

        reloaded = ConfigLoader(str(path))
        reloaded.load()
        assert reloaded.get("retry.max_retries") == 5

    def test_env_var_selects_file(self):
        import os

        assert get_config().config_file == os.environ["THOUGHTLOG_CONFIG_FILE"]

    def test_reset_reloads_global(self):
        first = get_config()
        reset_config()
        second = get_config()
        assert second is not first
        assert second.config_file == first.config_file


class TestConfiguredPolicies:

    def test_extraction_config_from_defaults(self):
        assert ExtractionConfig.from_config() == ExtractionConfig()

    def test_text_limits_from_defaults(self):
        assert TextLimits.from_config() == TextLimits()


class TestLogging:

    @pytest.mark.parametrize(
        "size, expected",
        [("10MB", 10 * 1024 * 1024), ("512KB", 512 * 1024), ("1GB", 1024 ** 3), ("2048", 2048)],
    )
    def test_parse_size(self, size, expected):
        assert LoggerManager()._parse_size(size) == expected
