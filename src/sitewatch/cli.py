"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build Settings, applying command-line overrides
- ``sitewatch run``: one monitoring pass over sites.json
- ``sitewatch url encrypt|decrypt VALUE``: the URL encryption utility

stdout carries command output only; logs go to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from enum import StrEnum
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError

from sitewatch import __version__
from sitewatch.cipher import URLCipher
from sitewatch.config import Settings
from sitewatch.errors import CryptoError, SiteWatchError
from sitewatch.monitor import run as run_monitor

log = structlog.get_logger()

app = typer.Typer(
    name="sitewatch",
    help="Detect content changes on monitored web pages.",
    no_args_is_help=True,
)


class UrlAction(StrEnum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once per command before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1) from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sitewatch version {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Detect content changes on monitored web pages."""


@app.command("run")
def run_command(
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        help="Directory holding sites.json, status.json and history.json.",
    ),
) -> None:
    """Check every configured site once and update status.json and history.json."""
    settings = _load_settings()
    if data_dir is not None:
        settings = settings.model_copy(
            update={"data": settings.data.model_copy(update={"dir": str(data_dir)})}
        )
    setup_logging(settings)

    try:
        snapshot = run_monitor(settings)
    except SiteWatchError as exc:
        log.error("run_aborted", **exc.to_dict())
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    for status in snapshot.sites:
        line = f"{status.id}: {status.status}"
        if status.error:
            line += f" ({status.error})"
        typer.echo(line)


@app.command("url")
def url_command(
    action: UrlAction = typer.Argument(..., help="encrypt or decrypt"),
    value: str = typer.Argument(..., help="URL to encrypt, or payload to decrypt"),
    allow_insecure_default_key: bool = typer.Option(
        False,
        "--allow-insecure-default-key",
        help="Use the public fallback key when SITEWATCH__CRYPTO__SECRET is unset.",
    ),
) -> None:
    """Encrypt a URL for sites.json, or decrypt a stored one.

    The secret is read from SITEWATCH__CRYPTO__SECRET, falling back to
    MONITOR_ENCRYPTION_KEY as set for the older monitor script.
    """
    settings = _load_settings()
    if allow_insecure_default_key:
        settings = settings.model_copy(
            update={
                "crypto": settings.crypto.model_copy(
                    update={"allow_insecure_default_key": True}
                )
            }
        )
    setup_logging(settings)

    try:
        cipher = URLCipher.from_settings(settings.crypto)
    except CryptoError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    if action is UrlAction.ENCRYPT:
        encrypted = cipher.encrypt(value)
        typer.echo(f"Original URL: {value}")
        typer.echo(f"Encrypted: {encrypted}")
        typer.echo("")
        typer.echo("Add to sites.json as:")
        entry = {
            "id": "site_id",
            "name": "Site Name",
            "url": encrypted,
            "encrypted": True,
            "selector": "main",
            "exclude_selectors": [],
            "description": "Description",
        }
        typer.echo(json.dumps(entry, indent=2))
        return

    try:
        decrypted = cipher.decrypt(value)
    except CryptoError as exc:
        typer.echo(f"Error decrypting: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Encrypted: {value}")
    typer.echo(f"Decrypted URL: {decrypted}")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    app()


if __name__ == "__main__":
    main()
