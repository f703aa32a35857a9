"""Init-style service lifecycle control.

Provides PID-file based service management:
- liveness detection that tolerates stale PID files and foreign owners
- start/stop/reload/restart with tri-state outcomes
- double-fork daemonization that records the daemon's real PID

Example:
    from yonk.config import load_config
    from yonk.service import LifecycleController

    controller = LifecycleController(load_config())
    outcome = controller.start()
    status = controller.status()
"""

from yonk.service.base import (
    Outcome,
    PidRecord,
    PidStatus,
    RunState,
    ServiceStatus,
    Spawner,
    StopPolicy,
)
from yonk.service.controller import LifecycleController
from yonk.service.reporter import (
    RecordingReporter,
    StatusReporter,
    SyslogReporter,
    TerminalReporter,
)
from yonk.service.spawners import get_spawner

__all__ = [
    "LifecycleController",
    "Outcome",
    "PidRecord",
    "PidStatus",
    "RecordingReporter",
    "RunState",
    "ServiceStatus",
    "Spawner",
    "StatusReporter",
    "StopPolicy",
    "SyslogReporter",
    "TerminalReporter",
    "get_spawner",
]
