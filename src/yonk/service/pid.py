"""PID file management utilities."""

import logging
import os
import re
import signal
import time
from enum import Enum
from pathlib import Path

import psutil

from yonk.service.base import PidRecord

logger = logging.getLogger(__name__)

PROC_ROOT = Path("/proc")

_LEADING_PID = re.compile(r"\s*([+-]?\d+)")

# Largest value a pid_t can hold
PID_MAX = 2**31 - 1


class SignalResult(Enum):
    """Result of sending a signal to a process."""

    DELIVERED = "delivered"
    NO_PROCESS = "no_process"
    DENIED = "denied"
    ERROR = "error"

    @property
    def delivered(self) -> bool:
        return self is SignalResult.DELIVERED


def write_pid_file(pid_path: Path, pid: int | None = None) -> None:
    """Write a PID to file.

    Args:
        pid_path: Path to the PID file.
        pid: Process ID to write. Defaults to current process.
    """
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    pid_path.write_text(f"{pid or os.getpid()}\n")


def read_pid(pid_path: Path) -> PidRecord:
    """Read the PID recorded in a PID file.

    Never raises: a missing or unreadable file is ABSENT, a file whose
    leading token is not a positive integer within the pid_t range is
    CORRUPT.

    Args:
        pid_path: Path to the PID file.

    Returns:
        The parsed PidRecord.
    """
    try:
        content = pid_path.read_text(encoding="ascii", errors="replace")
    except OSError:
        return PidRecord.absent()

    match = _LEADING_PID.match(content)
    pid = int(match.group(1)) if match else 0
    if not 0 < pid <= PID_MAX:
        logger.warning("Broken pidfile: %s", pid_path)
        return PidRecord.corrupt()

    return PidRecord.known(pid)


def remove_pid_file(pid_path: Path) -> None:
    """Remove PID file if it exists.

    Args:
        pid_path: Path to the PID file.
    """
    pid_path.unlink(missing_ok=True)


def _proc_entry_exists(pid: int) -> bool:
    return (PROC_ROOT / str(pid)).exists()


def _is_zombie(pid: int) -> bool:
    try:
        return psutil.Process(pid).status() == psutil.STATUS_ZOMBIE
    except psutil.Error:
        return False


def is_process_alive(pid: int) -> bool:
    """Check if a process with given PID is alive.

    A process we may not signal (owned by another user) still exists, so a
    denied probe falls back to the process table under /proc. An exited
    process that is only waiting to be reaped counts as dead.

    Args:
        pid: Process ID to check.

    Returns:
        True if process exists and is running.
    """
    try:
        os.kill(pid, 0)  # Signal 0 checks existence without sending signal
    except (ProcessLookupError, OverflowError):
        return False
    except PermissionError:
        return _proc_entry_exists(pid)
    except OSError:
        return False
    return not _is_zombie(pid)


def is_running(pid_path: Path) -> bool:
    """Check whether the PID recorded in pid_path belongs to a live process."""
    record = read_pid(pid_path)
    return record.is_known and is_process_alive(record.pid)


def send_signal(pid: int, sig: signal.Signals) -> SignalResult:
    """Send signal to process.

    Args:
        pid: Process ID to signal.
        sig: Signal to send.

    Returns:
        SignalResult describing whether the signal was delivered.
    """
    try:
        os.kill(pid, sig)
        return SignalResult.DELIVERED
    except (ProcessLookupError, OverflowError):
        return SignalResult.NO_PROCESS
    except PermissionError:
        logger.warning("Not permitted to send %s to PID %d", sig.name, pid)
        return SignalResult.DENIED
    except OSError as e:
        logger.error("Failed to send %s to PID %d: %s", sig.name, pid, e)
        return SignalResult.ERROR


def get_process_info(pid: int) -> dict[str, float] | None:
    """Get process resource information.

    Args:
        pid: Process ID to query.

    Returns:
        Dict with memory_mb, cpu_percent and uptime_seconds, or None if
        the process cannot be inspected.
    """
    try:
        proc = psutil.Process(pid)
        with proc.oneshot():
            mem_info = proc.memory_info()
            create_time = proc.create_time()
        return {
            "memory_mb": mem_info.rss / (1024 * 1024),
            "cpu_percent": proc.cpu_percent(interval=0.1),
            "uptime_seconds": max(0.0, time.time() - create_time),
        }
    except psutil.Error:
        # Process gone or not inspectable
        return None
