"""Tests for PID file management and liveness detection."""

import os
import signal
import subprocess
from pathlib import Path

import pytest

from tests.conftest import wait_for
from yonk.service import pid as pid_module
from yonk.service.base import PidStatus
from yonk.service.pid import (
    SignalResult,
    get_process_info,
    is_process_alive,
    is_running,
    read_pid,
    remove_pid_file,
    send_signal,
    write_pid_file,
)

# =============================================================================
# PID File Tests
# =============================================================================


class TestPidFile:
    """Tests for reading and writing PID files."""

    def test_write_pid_file(self, tmp_path: Path):
        """Test writing the current PID creates parent directories."""
        pid_path = tmp_path / "run" / "test.pid"
        write_pid_file(pid_path)

        assert pid_path.read_text() == f"{os.getpid()}\n"

    def test_write_pid_file_custom_pid(self, tmp_path: Path):
        pid_path = tmp_path / "test.pid"
        write_pid_file(pid_path, pid=12345)

        assert pid_path.read_text() == "12345\n"

    def test_read_pid(self, tmp_path: Path):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text("4321\n")

        record = read_pid(pid_path)

        assert record.status is PidStatus.KNOWN
        assert record.pid == 4321

    def test_read_pid_without_newline(self, tmp_path: Path):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text("  4321")

        assert read_pid(pid_path).pid == 4321

    def test_read_pid_ignores_trailing_content(self, tmp_path: Path):
        """Only the leading token matters."""
        pid_path = tmp_path / "test.pid"
        pid_path.write_text("4321\n1700000000.5\n")

        assert read_pid(pid_path).pid == 4321

    def test_read_pid_missing(self, tmp_path: Path):
        record = read_pid(tmp_path / "missing.pid")

        assert record.status is PidStatus.ABSENT
        assert record.pid is None

    def test_read_pid_directory_is_absent(self, tmp_path: Path):
        """An unreadable path is treated like a missing one."""
        assert read_pid(tmp_path).status is PidStatus.ABSENT

    @pytest.mark.parametrize("content", ["", "\n", "abc\n", "-5\n", "0\n"])
    def test_read_pid_corrupt(self, tmp_path: Path, content: str):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text(content)

        record = read_pid(pid_path)

        assert record.status is PidStatus.CORRUPT
        assert not record.is_known

    @pytest.mark.parametrize("content", ["2147483648\n", "4294967296\n", "9" * 20])
    def test_read_pid_out_of_range(self, tmp_path: Path, content: str):
        """Values no pid_t can hold are corrupt, not live PIDs."""
        pid_path = tmp_path / "test.pid"
        pid_path.write_text(content)

        assert read_pid(pid_path).status is PidStatus.CORRUPT

    def test_read_pid_max(self, tmp_path: Path):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text(f"{pid_module.PID_MAX}\n")

        assert read_pid(pid_path).pid == pid_module.PID_MAX

    def test_read_pid_corrupt_logs_warning(self, tmp_path: Path, caplog):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text("garbage")

        with caplog.at_level("WARNING", logger="yonk.service.pid"):
            read_pid(pid_path)

        assert "Broken pidfile" in caplog.text

    def test_remove_pid_file(self, tmp_path: Path):
        pid_path = tmp_path / "test.pid"
        pid_path.write_text("12345\n")

        remove_pid_file(pid_path)

        assert not pid_path.exists()

    def test_remove_pid_file_not_exists(self, tmp_path: Path):
        """Test removing non-existent PID file (no error)."""
        remove_pid_file(tmp_path / "nonexistent.pid")


# =============================================================================
# Liveness Tests
# =============================================================================


class TestLiveness:
    """Tests for process liveness probing."""

    def test_current_process_alive(self):
        assert is_process_alive(os.getpid()) is True

    def test_dead_process(self, dead_pid: int):
        assert is_process_alive(dead_pid) is False

    def test_zombie_is_not_alive(self, child_processes):
        """An exited child that has not been reaped is not running."""
        proc = subprocess.Popen(["true"])
        child_processes.append(proc)

        assert wait_for(lambda: not is_process_alive(proc.pid))

    def test_permission_denied_falls_back_to_proc(self, monkeypatch, tmp_path):
        """A process we may not signal still counts as running."""

        def deny(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(pid_module.os, "kill", deny)
        monkeypatch.setattr(pid_module, "PROC_ROOT", tmp_path)
        (tmp_path / "4242").mkdir()

        assert is_process_alive(4242) is True
        assert is_process_alive(4243) is False

    def test_permission_denied_with_real_proc(self, monkeypatch):
        """The fallback finds a live process in the real process table."""
        if not Path("/proc/self").exists():
            pytest.skip("no /proc filesystem")

        def deny(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(pid_module.os, "kill", deny)

        assert is_process_alive(os.getpid()) is True

    @pytest.mark.parametrize("pid", [2**32, 10**20])
    def test_out_of_range_pid_is_not_alive(self, pid: int):
        assert is_process_alive(pid) is False

    def test_is_running_reads_pidfile(self, tmp_path: Path, dead_pid: int):
        pid_path = tmp_path / "test.pid"
        assert is_running(pid_path) is False

        write_pid_file(pid_path, os.getpid())
        assert is_running(pid_path) is True

        write_pid_file(pid_path, dead_pid)
        assert is_running(pid_path) is False


# =============================================================================
# Signal Tests
# =============================================================================


class TestSendSignal:
    """Tests for signal delivery results."""

    def test_send_signal_delivered(self):
        # SIGCONT is harmless and can be sent to self
        assert send_signal(os.getpid(), signal.SIGCONT) is SignalResult.DELIVERED

    def test_send_signal_no_process(self, dead_pid: int):
        assert send_signal(dead_pid, signal.SIGTERM) is SignalResult.NO_PROCESS

    def test_send_signal_denied(self, monkeypatch):
        def deny(pid, sig):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(pid_module.os, "kill", deny)

        result = send_signal(1234, signal.SIGTERM)

        assert result is SignalResult.DENIED
        assert not result.delivered


    @pytest.mark.parametrize("pid", [2**32, 10**20])
    def test_send_signal_out_of_range(self, pid: int):
        assert send_signal(pid, signal.SIGTERM) is SignalResult.NO_PROCESS


class TestProcessInfo:
    """Tests for resource information."""

    def test_current_process(self):
        info = get_process_info(os.getpid())

        assert info is not None
        assert info["memory_mb"] > 0
        assert info["uptime_seconds"] >= 0

    def test_dead_process(self, dead_pid: int):
        assert get_process_info(dead_pid) is None
