"""
txvault - Main entry point.

Usage:
    python -m txvault.main serve     # Start the gateway
    txvault keygen                   # Via CLI entry point
"""

from __future__ import annotations


def main() -> None:
    """Main entry point - starts txvault via CLI."""
    from txvault.cli.commands import cli

    cli()


if __name__ == "__main__":
    main()
