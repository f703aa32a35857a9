"""Configuration loading from environment variables.

Init scripts describe their service through the environment:

    NAME=sshd DESC="OpenBSD Secure Shell server" yonk-service start
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from yonk.config.models import ConfigError, ServiceConfig
from yonk.config.paths import get_daemon_path, get_pid_path

logger = logging.getLogger(__name__)


def _get(env: Mapping[str, str], key: str) -> str | None:
    """Get an environment value, treating empty strings as unset."""
    value = env.get(key)
    return value or None


def load_config(
    env: Mapping[str, str] | None = None,
    *,
    daemonize: bool = False,
) -> ServiceConfig:
    """Resolve the service configuration from environment variables.

    Args:
        env: Environment mapping. Defaults to os.environ.
        daemonize: Whether the controller should daemonize the service itself.

    Returns:
        The resolved ServiceConfig.

    Raises:
        ConfigError: If NAME or DESC is missing, or a value is invalid.
    """
    if env is None:
        env = os.environ

    name = _get(env, "NAME")
    if name is None:
        raise ConfigError("service name required (set NAME)")

    description = _get(env, "DESC")
    if description is None:
        raise ConfigError("service description required (set DESC)")

    bundle = _get(env, "BUNDLE")
    device = _get(env, "DEVICE")
    if device:
        description = f"{description} on {device}"

    daemon = _get(env, "DAEMON")
    pidfile = _get(env, "PIDFILE")
    conf = _get(env, "CONF")
    args = _get(env, "ARGS")

    try:
        config = ServiceConfig(
            name=name,
            description=description,
            daemon_path=Path(daemon) if daemon else get_daemon_path(name, bundle),
            pidfile_path=(
                Path(pidfile) if pidfile else get_pid_path(name, bundle, device)
            ),
            config_path=Path(conf) if conf else None,
            daemonize=daemonize,
            extra_args=(args,) if args else (),
        )
    except ValidationError as e:
        raise ConfigError(f"invalid service configuration: {e}") from e

    logger.debug(
        "Resolved service %s: daemon=%s pidfile=%s",
        config.name,
        config.daemon_path,
        config.pidfile_path,
    )
    return config
