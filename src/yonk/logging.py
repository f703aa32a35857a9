"""Centralized logging configuration for yonk.

This module provides a single point of truth for logging setup.
The CLI should call configure_logging() before running any operation.

Logging Levels:
- DEBUG: Resolved paths, argument vectors
- INFO: Skipped operations, stale pidfile cleanup, skipped outcomes
- NOTICE: Successful status outcomes
- WARNING: Broken pidfiles, SIGKILL escalation, denied signals
- ERROR: Spawn failures, processes that survive SIGKILL

Status outcomes ("Start foo: ok") go through the 'yonk.status' logger,
which is the one forwarded to syslog.
"""

import logging
import logging.handlers
import os
from pathlib import Path

STATUS_LOGGER = "yonk.status"
SYSLOG_SOCKET = Path("/dev/log")

# Between INFO and WARNING, forwarded to syslog as LOG_NOTICE
NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    Converts full module paths to short component names:
    - yonk.service.controller -> service
    - yonk.config.loader -> config
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "yonk":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def resolve_level(level: str | None) -> int:
    """Resolve a level name, falling back to YONK_LOG_LEVEL or WARNING."""
    if level is None:
        level = os.environ.get("YONK_LOG_LEVEL", "WARNING")
    level = level.upper()
    if level not in LEVELS:
        level = "WARNING"
    return getattr(logging, level)


def create_syslog_handler(
    ident: str, address: Path = SYSLOG_SOCKET
) -> logging.Handler | None:
    """Create a handler logging to the local syslog daemon.

    Args:
        ident: Program identifier prefixed to every message.
        address: Syslog socket path.

    Returns:
        The handler, or None if no syslog socket is available.
    """
    if not address.exists():
        return None
    try:
        handler = logging.handlers.SysLogHandler(
            address=str(address),
            facility=logging.handlers.SysLogHandler.LOG_DAEMON,
        )
    except OSError:
        return None
    handler.ident = f"{ident}: "
    handler.priority_map = {**handler.priority_map, "NOTICE": "notice"}
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    syslog_ident: str | None = None,
) -> None:
    """Configure logging for yonk.

    Call this once at application startup.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses YONK_LOG_LEVEL env var or WARNING.
        use_rich: Use Rich handler for colorful console output.
        syslog_ident: If set, forward status outcomes to syslog under
            this identifier (usually the service name).
    """
    log_level = resolve_level(level)

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=False,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter("%(levelname)s: %(component)s: %(message)s")
        )

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )

    status_logger = logging.getLogger(STATUS_LOGGER)
    for handler in list(status_logger.handlers):
        status_logger.removeHandler(handler)
        handler.close()
    status_logger.propagate = True
    status_logger.setLevel(logging.NOTSET)

    if syslog_ident is None:
        return

    syslog_handler = create_syslog_handler(syslog_ident)
    if syslog_handler is None:
        logging.getLogger(__name__).debug("No syslog socket at %s", SYSLOG_SOCKET)
        return

    # Outcomes always reach syslog; the terminal reporter renders them locally
    status_logger.setLevel(logging.INFO)
    status_logger.addHandler(syslog_handler)
    status_logger.propagate = False
