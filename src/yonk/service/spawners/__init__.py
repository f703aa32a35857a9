"""Spawner selection."""

from yonk.service.base import Spawner
from yonk.service.spawners._fork import EXEC_FAILED


def get_spawner(daemonize: bool) -> Spawner:
    """Get the spawner for the requested mode.

    Args:
        daemonize: True to daemonize the service and record its PID,
            False to exec it directly and let it manage its own PID file.

    Returns:
        The matching Spawner.
    """
    if daemonize:
        from yonk.service.spawners.detached import DetachedSpawner

        return DetachedSpawner()

    from yonk.service.spawners.foreground import ForegroundSpawner

    return ForegroundSpawner()


__all__ = ["EXEC_FAILED", "get_spawner"]
