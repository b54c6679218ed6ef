"""txvault CLI - command-line interface."""

from txvault.cli.commands import cli

__all__ = ["cli"]
