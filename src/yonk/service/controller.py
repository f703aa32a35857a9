"""Service lifecycle controller.

Composes PID-file liveness detection and a spawner into the init-script
operations: status, start, stop, reload and restart. Each operation
(except status) returns a tri-state Outcome and emits one status event.
"""

import logging
import os
import signal
import time
from collections.abc import Callable

from yonk.config.models import ServiceConfig
from yonk.service.base import (
    Outcome,
    PidStatus,
    RunState,
    ServiceStatus,
    Spawner,
    StopPolicy,
)
from yonk.service.pid import (
    SignalResult,
    get_process_info,
    is_process_alive,
    is_running,
    read_pid,
    remove_pid_file,
    send_signal,
)
from yonk.service.reporter import StatusReporter, SyslogReporter
from yonk.service.spawners import get_spawner

logger = logging.getLogger(__name__)


class LifecycleController:
    """Start/stop/reload/status controller for one PID-file tracked daemon.

    Run state is never stored: every decision re-reads the PID file and
    probes the process. Nothing coordinates concurrent controllers acting
    on the same PID file.

    Example:
        controller = LifecycleController(load_config())
        outcome = controller.start()
    """

    def __init__(
        self,
        config: ServiceConfig,
        spawner: Spawner | None = None,
        reporter: StatusReporter | None = None,
        policy: StopPolicy | None = None,
        silent: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the controller.

        Args:
            config: Service configuration.
            spawner: Spawner to use, or None to pick one from config.daemonize.
            reporter: Status event consumer. Defaults to syslog only.
            policy: Shutdown escalation timing.
            silent: Suppress terminal output for all events.
            sleep: Sleep function used between stop polls.
        """
        self._config = config
        self._spawner = spawner or get_spawner(config.daemonize)
        self._reporter = reporter or SyslogReporter()
        self._policy = policy or StopPolicy()
        self._silent = silent
        self._sleep = sleep

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def spawner_name(self) -> str:
        """Get the name of the active spawner."""
        return self._spawner.name

    def run_state(self) -> RunState:
        """Derive the run state from the PID file and a liveness probe."""
        if is_running(self._config.pidfile_path):
            return RunState.RUNNING
        return RunState.NOT_RUNNING

    def status(self) -> ServiceStatus:
        """Get current service status.

        Returns:
            ServiceStatus with the run state and, when running, the PID and
            resource usage.
        """
        record = read_pid(self._config.pidfile_path)
        if not record.is_known or not is_process_alive(record.pid):
            return ServiceStatus(state=RunState.NOT_RUNNING)

        info = get_process_info(record.pid) or {}
        return ServiceStatus(
            state=RunState.RUNNING,
            pid=record.pid,
            uptime_seconds=info.get("uptime_seconds"),
            memory_mb=info.get("memory_mb"),
            cpu_percent=info.get("cpu_percent"),
        )

    def start(self, restart: bool = False) -> Outcome:
        """Start the service.

        Args:
            restart: Report as the second half of a restart.

        Returns:
            OK if the daemon was spawned, SKIPPED if it is not installed,
            its config file is unreadable or it is already running, FAILED
            if spawning failed.
        """
        config = self._config
        verb = "Restart" if restart else "Start"

        daemon = config.daemon_path
        if not (daemon.is_file() and os.access(daemon, os.X_OK)):
            logger.info("%s is not executable, not starting %s", daemon, config.name)
            return Outcome.SKIPPED

        if config.config_path is not None and not os.access(
            config.config_path, os.R_OK
        ):
            logger.warning("Config file %s is not readable", config.config_path)
            self._report(verb, Outcome.SKIPPED)
            return Outcome.SKIPPED

        self._reporter.begin("Starting", config.description, self._silent)

        if self.run_state() is RunState.RUNNING:
            self._reporter.note(f"{config.description} already running", self._silent)
            return Outcome.SKIPPED

        outcome = self._spawner.start(config)
        self._report(verb, outcome)
        return outcome

    def stop(self, restart: bool = False) -> Outcome:
        """Stop the service, escalating to SIGKILL after the policy timeout.

        The PID file is removed once the process is confirmed gone; when the
        stop fails it is left in place so a retry can find the process.

        Args:
            restart: Report silently as the first half of a restart.

        Returns:
            OK if the process was stopped, SKIPPED if it was not running,
            FAILED if it could not be signalled or survived SIGKILL.
        """
        config = self._config
        silent = self._silent or restart
        record = read_pid(config.pidfile_path)

        if not record.is_known or not is_process_alive(record.pid):
            if record.status is not PidStatus.ABSENT:
                logger.info("Removing stale pidfile %s", config.pidfile_path)
                remove_pid_file(config.pidfile_path)
            self._report("Stop", Outcome.SKIPPED, silent)
            return Outcome.SKIPPED

        self._reporter.begin("Stopping", config.description, silent)
        outcome = self._terminate(record.pid, silent)

        if outcome is not Outcome.FAILED:
            remove_pid_file(config.pidfile_path)

        self._report("Stop", outcome, silent)
        return outcome

    def reload(self) -> Outcome:
        """Ask the daemon to reload its configuration with SIGHUP.

        Returns:
            OK if the signal was delivered, FAILED otherwise.
        """
        record = read_pid(self._config.pidfile_path)

        if record.is_known and is_process_alive(record.pid):
            result = send_signal(record.pid, signal.SIGHUP)
            outcome = Outcome.OK if result.delivered else Outcome.FAILED
        else:
            logger.info("%s is not running, cannot reload", self._config.name)
            outcome = Outcome.FAILED

        self._report("Reload", outcome)
        return outcome

    def restart(self) -> Outcome:
        """Stop then start the service.

        The stop result is not shown on the terminal; only the start
        outcome is reported and returned.
        """
        self.stop(restart=True)
        return self.start(restart=True)

    def _terminate(self, pid: int, silent: bool) -> Outcome:
        """Send SIGTERM, wait, and escalate to SIGKILL if needed."""
        policy = self._policy

        result = send_signal(pid, signal.SIGTERM)
        if result is SignalResult.NO_PROCESS:
            # Exited between the liveness check and the signal
            return Outcome.SKIPPED
        if not result.delivered:
            return Outcome.FAILED

        if self._wait_for_exit(pid, policy.polls, silent):
            return Outcome.OK

        logger.warning(
            "%s (PID %d) did not exit within %.1fs, sending SIGKILL",
            self._config.name,
            pid,
            policy.timeout,
        )
        result = send_signal(pid, signal.SIGKILL)
        if result is SignalResult.NO_PROCESS:
            return Outcome.OK
        if not result.delivered:
            return Outcome.FAILED

        if self._wait_for_exit(pid, policy.kill_polls, silent):
            return Outcome.OK

        logger.error("%s (PID %d) survived SIGKILL", self._config.name, pid)
        return Outcome.FAILED

    def _wait_for_exit(self, pid: int, polls: int, silent: bool) -> bool:
        """Poll until pid exits or the polls run out.

        Returns:
            True if the process exited.
        """
        policy = self._policy
        for attempt in range(1, polls + 1):
            if not is_process_alive(pid):
                return True
            if attempt % policy.progress_every == 0:
                self._reporter.progress(silent)
            self._sleep(policy.interval)
        return not is_process_alive(pid)

    def _report(self, verb: str, outcome: Outcome, silent: bool | None = None) -> None:
        if silent is None:
            silent = self._silent
        self._reporter.report(verb, self._config.description, outcome, silent)
