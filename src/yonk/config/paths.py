"""Default filesystem locations for a service.

Daemons live under /usr/sbin (or /usr/lib/<bundle> when several services
share a bundle) and record their PID under /var/run.
"""

from pathlib import Path

SBIN_DIR = Path("/usr/sbin")
LIB_DIR = Path("/usr/lib")
RUN_DIR = Path("/var/run")


def get_daemon_path(name: str, bundle: str | None = None) -> Path:
    """Get the default daemon executable path.

    Args:
        name: Service name.
        bundle: Optional bundle that namespaces the daemon.

    Returns:
        /usr/lib/<bundle>/<name> for bundled services, /usr/sbin/<name> otherwise.
    """
    if bundle:
        return LIB_DIR / bundle / name
    return SBIN_DIR / name


def get_pid_path(
    name: str, bundle: str | None = None, device: str | None = None
) -> Path:
    """Get the default PID file path.

    Args:
        name: Service name.
        bundle: Optional bundle that namespaces the PID file.
        device: Optional device qualifier for per-device instances.

    Returns:
        /var/run/[<bundle>/]<name>[-<device>].pid
    """
    stem = f"{name}-{device}" if device else name
    base = RUN_DIR / bundle if bundle else RUN_DIR
    return base / f"{stem}.pid"
