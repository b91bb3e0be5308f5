"""
Engine configuration for triplequery.

Provides:
- EngineConfig with dict round-tripping
- Environment variable overrides
- Configuration validation
- Logging setup for the web service
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from triplequery.errors import ConfigValidationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TRIPLEQUERY_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class EngineConfig:
    """Configuration for a QueryEngine."""
    data_path: Optional[Path] = None   # None uses the bundled books dataset
    log_level: str = "INFO"
    preload: bool = True
    max_results: Optional[int] = None  # Cap on rows returned per query

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_path": str(self.data_path) if self.data_path else None,
            "log_level": self.log_level,
            "preload": self.preload,
            "max_results": self.max_results,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        data_path = data.get("data_path")
        config = cls(
            data_path=Path(data_path) if data_path else None,
            log_level=str(data.get("log_level", "INFO")).upper(),
            preload=bool(data.get("preload", True)),
            max_results=data.get("max_results"),
        )
        config.validate()
        return config

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EngineConfig":
        """
        Build a config from TRIPLEQUERY_* environment variables.

        Recognized: TRIPLEQUERY_DATA_PATH, TRIPLEQUERY_LOG_LEVEL,
        TRIPLEQUERY_PRELOAD, TRIPLEQUERY_MAX_RESULTS.
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        if env.get(f"{ENV_PREFIX}DATA_PATH"):
            data["data_path"] = env[f"{ENV_PREFIX}DATA_PATH"]
        if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            data["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        if env.get(f"{ENV_PREFIX}PRELOAD"):
            data["preload"] = env[f"{ENV_PREFIX}PRELOAD"].lower() in _TRUE_VALUES
        if env.get(f"{ENV_PREFIX}MAX_RESULTS"):
            raw = env[f"{ENV_PREFIX}MAX_RESULTS"]
            try:
                data["max_results"] = int(raw)
            except ValueError:
                raise ConfigValidationError(f"{ENV_PREFIX}MAX_RESULTS must be an integer, got {raw!r}")

        return cls.from_dict(data)

    def validate(self) -> None:
        """Raise ConfigValidationError if any setting is invalid."""
        if self.log_level not in _LOG_LEVELS:
            raise ConfigValidationError(
                f"Invalid log level: {self.log_level}. Use one of: {', '.join(_LOG_LEVELS)}"
            )
        if self.max_results is not None and self.max_results < 1:
            raise ConfigValidationError("max_results must be at least 1")
        if self.data_path is not None and not self.data_path.exists():
            raise ConfigValidationError(f"Data file not found: {self.data_path}")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Logging configured at {level.upper()}")
