"""Configuration module for bridgeshell."""

from bridgeshell.config.loader import get_config_path, load_config, save_config
from bridgeshell.config.schema import BridgeConfig, BusConfig, Config, LoggingConfig

__all__ = [
    "BridgeConfig",
    "BusConfig",
    "Config",
    "LoggingConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
