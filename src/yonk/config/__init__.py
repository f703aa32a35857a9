"""Configuration module."""

from yonk.config.loader import load_config
from yonk.config.models import ConfigError, ServiceConfig
from yonk.config.paths import get_daemon_path, get_pid_path

__all__ = [
    "ConfigError",
    "ServiceConfig",
    "get_daemon_path",
    "get_pid_path",
    "load_config",
]
