"""Service lifecycle commands."""

import shlex
from typing import Annotated

import typer

from yonk.cli.console import console, dim, format_uptime
from yonk.service import LifecycleController, Outcome, StopPolicy, TerminalReporter

# Let trailing daemon arguments such as '-f' through untouched
_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def _controller(
    ctx: typer.Context,
    extra_args: list[str] | None = None,
    policy: StopPolicy | None = None,
) -> LifecycleController:
    """Build a controller for the resolved service configuration.

    Args:
        ctx: Typer context holding the CliState.
        extra_args: Command-line arguments appended to the daemon argv.
        policy: Shutdown escalation timing.
    """
    state = ctx.obj
    config = state.config
    if extra_args:
        # Quote so word expansion passes them through verbatim
        quoted = " ".join(shlex.quote(arg) for arg in extra_args)
        config = config.with_options(extra_args=(quoted,))

    return LifecycleController(
        config,
        reporter=TerminalReporter(console),
        policy=policy,
        silent=state.silent,
    )


def _exit_with(outcome: Outcome) -> None:
    raise typer.Exit(outcome.exit_code)


def register(app: typer.Typer) -> None:
    """Register service commands."""

    @app.command("status")
    def service_status(ctx: typer.Context) -> None:
        """Exit 0 if the service is running, 1 otherwise."""
        controller = _controller(ctx)
        status = controller.status()

        if not ctx.obj.silent:
            description = controller.config.description
            console.print(
                f"Service {description} is {status.state.value}", markup=False
            )
            if status.running:
                details = [f"PID {status.pid}"]
                if status.uptime_seconds is not None:
                    details.append(f"up {format_uptime(status.uptime_seconds)}")
                if status.memory_mb is not None:
                    details.append(f"{status.memory_mb:.1f} MB")
                dim(", ".join(details))

        raise typer.Exit(status.exit_code)

    @app.command("reload")
    def service_reload(ctx: typer.Context) -> None:
        """Send SIGHUP to the running service."""
        _exit_with(_controller(ctx).reload())

    @app.command("usage")
    def service_usage(ctx: typer.Context) -> None:
        """Show init script usage."""
        name = ctx.obj.config.name
        console.print(
            f"usage:\n\t/etc/init.d/{name} (start|stop|status|reload|restart)",
            markup=False,
        )

    @app.command("start", context_settings=_PASSTHROUGH)
    def service_start(ctx: typer.Context) -> None:
        """Start the service; extra arguments are passed to the daemon."""
        _exit_with(_controller(ctx, extra_args=ctx.args).start())

    @app.command("stop")
    def service_stop(
        ctx: typer.Context,
        timeout: Annotated[
            float,
            typer.Option(
                "--timeout",
                "-t",
                min=0.0,
                help="Seconds to wait after SIGTERM before sending SIGKILL",
            ),
        ] = StopPolicy.timeout,
    ) -> None:
        """Stop the service, escalating to SIGKILL after the timeout."""
        policy = StopPolicy(timeout=timeout)
        _exit_with(_controller(ctx, policy=policy).stop())

    @app.command("restart", context_settings=_PASSTHROUGH)
    def service_restart(ctx: typer.Context) -> None:
        """Stop and start the service; extra arguments go to the daemon."""
        _exit_with(_controller(ctx, extra_args=ctx.args).restart())
