"""Configuration management for the query engine."""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineConfig(BaseModel):
    """Complete configuration model."""

    data_path: str = Field(default="data", description="Base directory for data files")
    empty_relation_sentinel: Any = Field(
        default="__hashquery_no_match__",
        description="Key value assumed never to occur; used to build empty through-relation queries",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (text or json)")

    model_config = ConfigDict(frozen=True)

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()


class ConfigManager:
    """Manages configuration loading and validation."""

    DEFAULT_CONFIG: Dict[str, Any] = {
        "data_path": "data",
        "empty_relation_sentinel": "__hashquery_no_match__",
        "log_level": "INFO",
        "log_format": "text",
    }

    ENV_OVERRIDES = {
        "HASHQUERY_DATA_PATH": "data_path",
        "HASHQUERY_LOG_LEVEL": "log_level",
        "HASHQUERY_LOG_FORMAT": "log_format",
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config manager.

        Args:
            config_path: Path to a JSON config file. If None, uses defaults + env vars
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[EngineConfig] = None

    def load(self) -> EngineConfig:
        """Load configuration from file and environment."""
        if self._config:
            return self._config

        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            with open(self.config_path, "r") as f:
                file_config = json.load(f)
                config_dict = self._deep_merge(config_dict, file_config)

        config_dict = self._apply_env_overrides(config_dict)

        self._config = EngineConfig(**config_dict)
        return self._config

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        for env_key, config_key in self.ENV_OVERRIDES.items():
            value = os.getenv(env_key)
            if value:
                config[config_key] = value
        return config

    @property
    def config(self) -> EngineConfig:
        """Get the loaded configuration."""
        return self.load()
