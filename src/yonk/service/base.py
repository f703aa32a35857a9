"""Core types for service lifecycle control."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from yonk.config.models import ServiceConfig


class Outcome(Enum):
    """Tri-state result of a lifecycle operation.

    SKIPPED marks an intentional no-op (already running, already stopped,
    config unreadable) and is not a failure.
    """

    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return 1 if self is Outcome.FAILED else 0


class RunState(Enum):
    """Service running state. Always derived, never stored."""

    RUNNING = "running"
    NOT_RUNNING = "not running"


class PidStatus(Enum):
    """What was found in the PID file."""

    KNOWN = "known"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class PidRecord:
    """Parsed contents of a PID file."""

    status: PidStatus
    pid: int | None = None

    @classmethod
    def known(cls, pid: int) -> "PidRecord":
        return cls(PidStatus.KNOWN, pid)

    @classmethod
    def absent(cls) -> "PidRecord":
        return cls(PidStatus.ABSENT)

    @classmethod
    def corrupt(cls) -> "PidRecord":
        return cls(PidStatus.CORRUPT)

    @property
    def is_known(self) -> bool:
        return self.status is PidStatus.KNOWN


@dataclass
class ServiceStatus:
    """Service status information."""

    state: RunState
    pid: int | None = None
    uptime_seconds: float | None = None
    memory_mb: float | None = None
    cpu_percent: float | None = None

    @property
    def running(self) -> bool:
        return self.state is RunState.RUNNING

    @property
    def outcome(self) -> Outcome:
        return Outcome.OK if self.running else Outcome.SKIPPED

    @property
    def exit_code(self) -> int:
        return 0 if self.running else 1


@dataclass(frozen=True)
class StopPolicy:
    """Shutdown escalation timing.

    SIGTERM is followed by polling every `interval` seconds for up to
    `timeout` seconds, then SIGKILL and up to `kill_timeout` seconds more.
    """

    timeout: float = 5.0
    interval: float = 0.1
    progress_every: int = 10
    kill_timeout: float = 1.0

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("interval must be positive")
        if self.timeout < 0 or self.kill_timeout < 0:
            raise ValueError("timeouts must not be negative")
        if self.progress_every < 1:
            raise ValueError("progress_every must be at least 1")

    @property
    def polls(self) -> int:
        return max(1, round(self.timeout / self.interval))

    @property
    def kill_polls(self) -> int:
        return max(1, round(self.kill_timeout / self.interval))


class Spawner(ABC):
    """Abstract interface for daemon process creation.

    Variants:
    - foreground: the daemon is exec'd directly and manages its own PID file
    - detached: the daemon is double-forked and its real PID is recorded
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Spawner name (e.g., 'foreground', 'detached')."""
        ...

    @abstractmethod
    def start(self, config: ServiceConfig) -> Outcome:
        """Spawn the daemon described by config.

        Returns:
            OK once the control child exited cleanly, FAILED otherwise.
        """
        ...
