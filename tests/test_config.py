"""Tests for engine configuration."""
from pathlib import Path

import pytest

from triplequery.config import EngineConfig
from triplequery.errors import ConfigValidationError


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.data_path is None
        assert config.log_level == "INFO"
        assert config.preload is True
        assert config.max_results is None

    def test_to_dict(self):
        config = EngineConfig(data_path=Path("/tmp/books.ttl"), max_results=5)
        d = config.to_dict()
        assert d["data_path"] == "/tmp/books.ttl"
        assert d["max_results"] == 5

    def test_from_dict(self):
        config = EngineConfig.from_dict({"log_level": "debug", "preload": False, "max_results": 10})
        assert config.log_level == "DEBUG"
        assert config.preload is False
        assert config.max_results == 10

    def test_roundtrip(self, tmp_path):
        path = tmp_path / "data.ttl"
        path.write_text("", encoding="utf-8")
        config = EngineConfig(data_path=path, log_level="WARNING", preload=False, max_results=2)
        assert EngineConfig.from_dict(config.to_dict()) == config


class TestValidation:
    def test_invalid_log_level(self):
        with pytest.raises(ConfigValidationError, match="Invalid log level"):
            EngineConfig.from_dict({"log_level": "LOUD"})

    def test_invalid_max_results(self):
        with pytest.raises(ConfigValidationError, match="max_results"):
            EngineConfig.from_dict({"max_results": 0})

    def test_missing_data_file(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="Data file not found"):
            EngineConfig.from_dict({"data_path": str(tmp_path / "missing.ttl")})


class TestFromEnv:
    def test_empty_environment(self):
        assert EngineConfig.from_env({}) == EngineConfig()

    def test_overrides(self, tmp_path):
        path = tmp_path / "data.ttl"
        path.write_text("", encoding="utf-8")
        config = EngineConfig.from_env({
            "TRIPLEQUERY_DATA_PATH": str(path),
            "TRIPLEQUERY_LOG_LEVEL": "error",
            "TRIPLEQUERY_PRELOAD": "false",
            "TRIPLEQUERY_MAX_RESULTS": "25",
        })
        assert config.data_path == path
        assert config.log_level == "ERROR"
        assert config.preload is False
        assert config.max_results == 25

    def test_preload_truthy_values(self):
        assert EngineConfig.from_env({"TRIPLEQUERY_PRELOAD": "yes"}).preload is True

    def test_non_integer_max_results(self):
        with pytest.raises(ConfigValidationError, match="must be an integer"):
            EngineConfig.from_env({"TRIPLEQUERY_MAX_RESULTS": "many"})
