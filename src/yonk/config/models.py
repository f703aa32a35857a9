"""Configuration models using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(Exception):
    """Raised when the service configuration cannot be resolved."""


class ServiceConfig(BaseModel):
    """Immutable description of the supervised service.

    Resolved once per invocation and passed by reference into every
    controller operation.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    daemon_path: Path
    pidfile_path: Path
    config_path: Path | None = None
    daemonize: bool = False
    # Raw argument strings, word-expanded at spawn time
    extra_args: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def _name_is_identifier(cls, v: str) -> str:
        if "/" in v:
            raise ValueError("service name must not contain '/'")
        return v

    def with_options(
        self, *, daemonize: bool | None = None, extra_args: tuple[str, ...] = ()
    ) -> "ServiceConfig":
        """Return a copy with CLI options applied."""
        update: dict = {}
        if daemonize is not None:
            update["daemonize"] = daemonize
        if extra_args:
            update["extra_args"] = self.extra_args + extra_args
        if not update:
            return self
        return self.model_copy(update=update)
