"""
Configuration management for StateToken.

Handles loading, validation, and access to configuration settings.
"""

import os
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, ValidationError, ConfigDict

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TokenConfig(BaseModel):
    """Token issuance configuration."""
    ttl_minutes: float = Field(
        default=5.0,
        ge=1 / 60,
        allow_inf_nan=False,
        description="Token lifetime in minutes"
    )
    issuer: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        min_length=1,
        description="Stable identity of this server, written to and checked against the iss claim"
    )
    key_size: int = Field(default=2048, ge=2048, description="RSA key size in bits")
    salt_length: int = Field(default=64, ge=16)


class CallbackConfig(BaseModel):
    """Identity provider callback redirect configuration."""
    path: str = "/oauth/callback"
    root_url: str = Field(
        default="/",
        description="Redirect target when the callback carries no state"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    file: Optional[str] = None
    rotation_size: str = Field(default="10MB", pattern=r"^\s*\d+(\.\d+)?\s*([KkMmGg]?[Bb])?\s*$")
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'statetoken.auth': 'DEBUG'}"
    )

    model_config = ConfigDict(use_enum_values=True)


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class StateTokenConfig(BaseModel):
    """Main StateToken configuration schema."""

    server: ServerConfig = Field(default_factory=ServerConfig)

    token: TokenConfig = Field(default_factory=TokenConfig)

    callback: CallbackConfig = Field(default_factory=CallbackConfig)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(use_enum_values=True)


class ConfigManager:
    """
    Manages StateToken configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (STATETOKEN_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[StateTokenConfig] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> StateTokenConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated StateTokenConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.info("Loading StateToken configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.info(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = StateTokenConfig(**config_dict)
            logger.info("Configuration validated successfully")
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if host := os.getenv("STATETOKEN_HOST"):
            config.setdefault("server", {})["host"] = host
        if port := os.getenv("STATETOKEN_PORT"):
            config.setdefault("server", {})["port"] = int(port)

        if ttl := os.getenv("STATETOKEN_TTL_MINUTES"):
            config.setdefault("token", {})["ttl_minutes"] = float(ttl)
        if issuer := os.getenv("STATETOKEN_ISSUER"):
            config.setdefault("token", {})["issuer"] = issuer
        if key_size := os.getenv("STATETOKEN_KEY_SIZE"):
            config.setdefault("token", {})["key_size"] = int(key_size)

        if root_url := os.getenv("STATETOKEN_ROOT_URL"):
            config.setdefault("callback", {})["root_url"] = root_url

        if log_level := os.getenv("STATETOKEN_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_file := os.getenv("STATETOKEN_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        if not self._config:
            return

        logger.info(f"Active configuration: {json.dumps(self._config.model_dump(), indent=2)}")

    def get_config(self) -> StateTokenConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config
