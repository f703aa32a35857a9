"""Fork/exec/wait primitives shared by the spawners."""

import logging
import os
from collections.abc import Callable

from yonk.config.models import ServiceConfig
from yonk.service.args import ArgumentExpansionError, build_argv
from yonk.service.base import Outcome

logger = logging.getLogger(__name__)

# Exit status of a child that could not exec the daemon. Reserved so it is
# not mistaken for the daemon's own exit status.
EXEC_FAILED = 2


def fork_exec(argv: list[str], prepare: Callable[[], None] | None = None) -> int:
    """Fork a control child that runs prepare() and then execs argv.

    The child never returns: any failure ends it with EXEC_FAILED.

    Args:
        argv: Argument vector; argv[0] is the executable path.
        prepare: Optional callable run in the child before exec.

    Returns:
        PID of the control child.

    Raises:
        OSError: If fork fails.
    """
    pid = os.fork()
    if pid != 0:
        return pid

    try:
        if prepare is not None:
            prepare()
        os.execve(argv[0], argv, os.environ)
    finally:
        os._exit(EXEC_FAILED)


def wait_child(pid: int) -> int:
    """Wait for a child, retrying interrupted waits.

    Args:
        pid: Child process ID.

    Returns:
        The child's exit code, or the negated signal number if it was killed.

    Raises:
        OSError: If waiting fails for a reason other than interruption.
    """
    while True:
        try:
            _, status = os.waitpid(pid, 0)
        except InterruptedError:
            continue
        return os.waitstatus_to_exitcode(status)


def spawn(config: ServiceConfig, prepare: Callable[[], None] | None = None) -> Outcome:
    """Build the daemon argv, fork/exec it and wait for the control child.

    Args:
        config: Service configuration.
        prepare: Optional callable run in the control child before exec.

    Returns:
        OK if the control child exited with status 0, FAILED otherwise.
    """
    try:
        argv = build_argv(str(config.daemon_path.absolute()), config.extra_args)
    except ArgumentExpansionError as e:
        logger.error("Cannot expand arguments for %s: %s", config.name, e)
        return Outcome.FAILED

    logger.debug("Spawning %s", argv)
    try:
        pid = fork_exec(argv, prepare=prepare)
        code = wait_child(pid)
    except OSError as e:
        logger.error("Failed to spawn %s: %s", config.name, e)
        return Outcome.FAILED

    if code == 0:
        return Outcome.OK
    if code == EXEC_FAILED:
        logger.error("Could not execute %s", config.daemon_path)
    elif code < 0:
        logger.error("%s killed by signal %d during startup", config.name, -code)
    else:
        logger.error("%s exited with status %d during startup", config.name, code)
    return Outcome.FAILED
