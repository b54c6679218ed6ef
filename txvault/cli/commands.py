"""
CLI commands for txvault - Click-based interface.

Commands:
    txvault serve    - Start the HTTP gateway
    txvault keygen   - Print a new random master key
    txvault encrypt  - Seal a JSON payload into a record
    txvault decrypt  - Open a record and print its payload
    txvault version  - Show version info
"""

from __future__ import annotations

import json
import sys
import uuid
from datetime import UTC, datetime

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from txvault.constants import (
    PROJECT_DISPLAY_NAME,
    PROJECT_VERSION,
)
from txvault.crypto.errors import EnvelopeError

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(PROJECT_VERSION, prog_name=PROJECT_DISPLAY_NAME)
def cli() -> None:
    """TxVault - envelope encryption for transaction payloads."""
    from txvault.utils.logging import setup_logging

    load_dotenv()
    # Logs go to stderr so stdout stays pipeable
    setup_logging(level="WARNING", json_format=False)


# ──────────────────────── txvault serve ────────────────────────


@cli.command()
@click.option("--host", default=None, help="Host to bind (default: gateway.host, 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Port to listen on (default: gateway.port, 3001)")
@click.option(
    "--bind-public",
    is_flag=True,
    default=False,
    help="Allow binding to 0.0.0.0",
)
def serve(host: str | None, port: int | None, bind_public: bool) -> None:
    """Start the txvault HTTP gateway."""
    import uvicorn
    from pydantic import ValidationError

    from txvault.gateway.app import create_app
    from txvault.gateway.config import ConfigError, load_config

    if host == "0.0.0.0" and not bind_public:
        err_console.print(
            "[bold red]SECURITY ERROR:[/] Binding to 0.0.0.0 exposes the gateway to the network.\n"
            "Use --bind-public to override."
        )
        sys.exit(1)

    try:
        config = load_config()
        app = create_app(config=config)
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid configuration:[/] {escape(_describe(e))}")
        sys.exit(1)
    except (ConfigError, EnvelopeError) as e:
        err_console.print(f"[bold red]Cannot start:[/] {escape(str(e))}")
        sys.exit(1)

    # Command-line flags win over gateway.host / gateway.port
    host = host if host is not None else config.gateway.host
    port = port if port is not None else config.gateway.port

    console.print(
        Panel(
            f"[bold green]{PROJECT_DISPLAY_NAME} v{PROJECT_VERSION}[/]\n"
            f"Listening on [cyan]{host}:{port}[/]\n"
            f"Storage: [cyan]{config.storage.backend}[/]",
            title="Starting TxVault",
            border_style="green",
        )
    )
    uvicorn.run(app, host=host, port=port, log_level="info")


# ──────────────────────── txvault keygen ────────────────────────


@cli.command()
def keygen() -> None:
    """Print a fresh 256-bit master key as 64 hex characters."""
    from txvault.crypto.keys import generate_master_key_hex

    # Plain print so the key can be piped; never logged
    click.echo(generate_master_key_hex())


# ──────────────────────── txvault encrypt ────────────────────────


@cli.command()
@click.option("--party-id", required=True, help="Party the transaction belongs to")
@click.option("--payload", required=True, help="JSON payload to seal")
def encrypt(party_id: str, payload: str) -> None:
    """Seal a JSON payload and print the full record."""
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Invalid JSON payload:[/] {escape(str(e))}")
        sys.exit(2)

    master_key = _load_master_key()
    try:
        fields = master_key.seal(party_id, value)
    except ValueError as e:
        err_console.print(f"[red]Payload is not valid JSON data:[/] {escape(str(e))}")
        sys.exit(2)
    record = {
        "id": str(uuid.uuid4()),
        "createdAt": datetime.now(UTC).isoformat(),
        **fields,
    }
    click.echo(json.dumps(record, indent=2))


# ──────────────────────── txvault decrypt ────────────────────────


@cli.command()
@click.argument("record_file", type=click.File("r"), default="-")
def decrypt(record_file) -> None:
    """Open a record (JSON file, or - for stdin) and print its payload."""
    try:
        record = json.load(record_file)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Invalid record JSON:[/] {escape(str(e))}")
        sys.exit(2)
    if not isinstance(record, dict):
        err_console.print("[red]Record must be a JSON object.[/]")
        sys.exit(2)

    master_key = _load_master_key()
    try:
        payload = master_key.open(record)
    except EnvelopeError as e:
        err_console.print(f"[bold red]Decryption refused:[/] {escape(str(e))}")
        sys.exit(1)
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


# ──────────────────────── txvault version ────────────────────────


@cli.command()
def version() -> None:
    """Show version information."""
    import platform

    console.print(f"[bold]{PROJECT_DISPLAY_NAME}[/] v{PROJECT_VERSION}")
    console.print(f"Python {platform.python_version()} on {platform.system()}")


def _load_master_key():
    from pydantic import ValidationError

    from txvault.gateway.config import ConfigError, load_config

    try:
        return load_config().load_master_key()
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid configuration:[/] {escape(_describe(e))}")
        sys.exit(1)
    except (ConfigError, EnvelopeError) as e:
        err_console.print(f"[bold red]Master key unavailable:[/] {escape(str(e))}")
        sys.exit(1)


def _describe(error) -> str:
    """One line per invalid setting, without echoing the rejected values."""
    return "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ())) or error.title}: {e.get('msg', '')}"
        for e in error.errors()
    )
