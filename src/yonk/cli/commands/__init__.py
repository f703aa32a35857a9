"""CLI command modules."""

from yonk.cli.commands import service

__all__ = ["service"]
