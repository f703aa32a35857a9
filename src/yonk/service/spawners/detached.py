"""Detached spawner: double-fork daemonization.

The control child starts a new session and forks again; the intermediate
stage exits at once, so the daemon is reparented and has no controlling
terminal. Only the final process writes the PID file, and it writes its
own PID right before exec.
"""

import os
from pathlib import Path

from yonk.config.models import ServiceConfig
from yonk.service.base import Outcome, Spawner
from yonk.service.pid import write_pid_file
from yonk.service.spawners._fork import spawn


def detach(workdir: str = "/", umask: int = 0o022) -> None:
    """Detach the calling child from its session.

    The calling process exits inside this function; only the detached
    grandchild returns.
    """
    os.setsid()

    if os.fork() != 0:
        # Intermediate stage
        os._exit(0)

    os.chdir(workdir)
    os.umask(umask)

    devnull = os.open(os.devnull, os.O_RDWR)
    for fd in (0, 1, 2):
        os.dup2(devnull, fd)
    if devnull > 2:
        os.close(devnull)


class DetachedSpawner(Spawner):
    """Spawner that daemonizes the process and records its PID.

    Returns once the intermediate stage has exited. OK certifies that the
    daemon was detached, not that it finished initializing.
    """

    @property
    def name(self) -> str:
        return "detached"

    def start(self, config: ServiceConfig) -> Outcome:
        # The daemon runs from /, so relative paths must be resolved first
        pid_path = config.pidfile_path.absolute()

        def prepare() -> None:
            detach()
            _record_self(pid_path)

        return spawn(config, prepare=prepare)


def _record_self(pid_path: Path) -> None:
    # A write failure aborts the exec: an untracked daemon cannot be stopped
    write_pid_file(pid_path, os.getpid())
