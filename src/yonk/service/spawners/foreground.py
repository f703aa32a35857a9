"""Foreground spawner: exec the daemon directly.

The daemon is expected to daemonize itself and write its own PID file, so
the wait covers its startup up to the point it detaches.
"""

from yonk.config.models import ServiceConfig
from yonk.service.base import Outcome, Spawner
from yonk.service.spawners._fork import spawn


class ForegroundSpawner(Spawner):
    """Spawner for daemons that manage their own PID file."""

    @property
    def name(self) -> str:
        return "foreground"

    def start(self, config: ServiceConfig) -> Outcome:
        return spawn(config)
