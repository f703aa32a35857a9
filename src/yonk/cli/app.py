"""Main CLI application."""

from dataclasses import dataclass
from typing import Annotated

import typer

from yonk.cli.commands import service
from yonk.cli.console import console, error, stderr_is_terminal
from yonk.config import ConfigError, ServiceConfig, load_config

app = typer.Typer(
    name="yonk-service",
    help="Init-script service controller",
    no_args_is_help=True,
    add_completion=False,
)


@dataclass
class CliState:
    """Per-invocation state shared with the commands."""

    config: ServiceConfig
    silent: bool


@app.callback()
def main_callback(
    ctx: typer.Context,
    daemonize: Annotated[
        bool,
        typer.Option(
            "-d",
            "--daemonize",
            help="Daemonize the service and record its PID",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress terminal status output"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v", help="Show status output even when not on a terminal"
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Console log level (default: WARNING)"),
    ] = None,
    syslog: Annotated[
        bool,
        typer.Option("--syslog/--no-syslog", help="Log status outcomes to syslog"),
    ] = True,
) -> None:
    """Control one PID-file tracked daemon.

    The service is described by environment variables: NAME and DESC are
    required; DAEMON, PIDFILE, BUNDLE, DEVICE, CONF and ARGS are optional.
    """
    from yonk.logging import configure_logging

    # Rich log lines and status output only on an interactive terminal
    interactive = stderr_is_terminal()

    try:
        config = load_config(daemonize=daemonize)
    except ConfigError as e:
        configure_logging(log_level, use_rich=interactive)
        error(f"E: {e}")
        raise typer.Exit(1) from None

    configure_logging(
        log_level,
        use_rich=interactive,
        syslog_ident=config.name if syslog else None,
    )

    if quiet:
        silent = True
    elif verbose:
        silent = False
    else:
        silent = not interactive

    ctx.obj = CliState(config=config, silent=silent)


service.register(app)


def main() -> None:
    """Console script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print()
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
