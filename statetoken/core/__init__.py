"""Core module initialization."""

from .config_manager import (
    ConfigManager,
    StateTokenConfig,
    TokenConfig,
    CallbackConfig,
    ServerConfig,
    LoggingConfig,
    LogLevel,
)
from .logging_config import setup_logging

__all__ = [
    "ConfigManager",
    "StateTokenConfig",
    "TokenConfig",
    "CallbackConfig",
    "ServerConfig",
    "LoggingConfig",
    "LogLevel",
    "setup_logging",
]
