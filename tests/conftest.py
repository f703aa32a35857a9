"""Shared test fixtures and factories."""

import os
import signal
import subprocess
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import psutil
import pytest

from yonk.config.models import ServiceConfig
from yonk.service.base import Outcome, Spawner
from yonk.service.pid import write_pid_file

# =============================================================================
# Helpers
# =============================================================================


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def process_name(pid: int) -> str | None:
    """Get a process name, or None if it is gone."""
    try:
        return psutil.Process(pid).name()
    except psutil.Error:
        return None


def make_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(0o755)
    return path


class FakeSpawner(Spawner):
    """Spawner that records calls instead of creating processes.

    With record_pid set it writes a PID file for a live process on start,
    the way a real daemon would.
    """

    def __init__(self, outcome: Outcome = Outcome.OK, record_pid: int | None = None):
        self.outcome = outcome
        self.record_pid = record_pid
        self.calls: list[ServiceConfig] = []

    @property
    def name(self) -> str:
        return "fake"

    def start(self, config: ServiceConfig) -> Outcome:
        self.calls.append(config)
        if self.record_pid is not None and self.outcome is Outcome.OK:
            write_pid_file(config.pidfile_path, self.record_pid)
        return self.outcome


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def daemon_script(tmp_path: Path) -> Path:
    """An executable daemon stand-in."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return make_script(bin_dir / "testd", "exec sleep 30")


@pytest.fixture
def service_config(tmp_path: Path, daemon_script: Path) -> ServiceConfig:
    """Service configuration with all paths under tmp_path."""
    return ServiceConfig(
        name="testd",
        description="Test daemon",
        daemon_path=daemon_script,
        pidfile_path=tmp_path / "run" / "testd.pid",
    )


@pytest.fixture
def service_env(tmp_path: Path, daemon_script: Path) -> dict[str, str]:
    """Environment describing the test service for the CLI."""
    return {
        "NAME": "testd",
        "DESC": "Test daemon",
        "DAEMON": str(daemon_script),
        "PIDFILE": str(tmp_path / "run" / "testd.pid"),
        "NO_COLOR": "1",
    }


# =============================================================================
# Process Fixtures
# =============================================================================


@pytest.fixture
def dead_pid() -> int:
    """PID of a process that has already exited and been reaped."""
    proc = subprocess.Popen(["true"])
    proc.wait()
    return proc.pid


@pytest.fixture
def child_processes() -> Iterator[list[subprocess.Popen]]:
    """Track child processes and make sure they are killed and reaped."""
    procs: list[subprocess.Popen] = []
    yield procs
    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait()


@pytest.fixture
def sleeper(child_processes) -> subprocess.Popen:
    """A child process that exits promptly on SIGTERM."""
    proc = subprocess.Popen(["sleep", "30"])
    child_processes.append(proc)
    return proc


@pytest.fixture
def stubborn(child_processes) -> subprocess.Popen:
    """A child process that ignores SIGTERM."""
    proc = subprocess.Popen(["sh", "-c", "trap '' TERM; exec sleep 30"])
    child_processes.append(proc)
    # Ignored signals survive exec, so once sleep runs SIGTERM is ignored
    assert wait_for(lambda: process_name(proc.pid) == "sleep")
    return proc


@pytest.fixture
def detached_pids() -> Iterator[list[int]]:
    """Kill detached daemons a test leaves behind."""
    pids: list[int] = []
    yield pids
    for pid in pids:
        try:
            os.kill(pid, signal.SIGKILL)
        except ProcessLookupError:
            pass


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
