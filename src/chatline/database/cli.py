"""
`chatline-migrate`: Alembic migrations for the conversation schema.

The target database comes from ``--database-url`` or the usual
``CHATLINE_DATABASE_URL`` setting; ``alembic/env.py`` reads the same value.
"""

import asyncio
import os
import sys
from collections.abc import Callable
from pathlib import Path

import click

from alembic import command
from alembic.config import Config
from chatline import __version__
from chatline.logging import configure_logging, get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config(database_url: str | None = None) -> Config:
    """Alembic config for this checkout, leaving logging to structlog."""
    alembic_ini = PROJECT_ROOT / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    if database_url:
        os.environ["CHATLINE_DATABASE_URL"] = database_url

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.attributes["configure_logger"] = False
    return config


def _run(action: str, step: Callable[[Config], None], **log_fields) -> None:
    try:
        config = get_alembic_config()
        logger.info(f"{action} started", **log_fields)
        step(config)
        logger.info(f"{action} finished", **log_fields)
    except Exception as e:
        logger.error(f"{action} failed", error=str(e), **log_fields)
        sys.exit(1)


@click.group()
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
@click.option("--database-url", default=None, help="Override CHATLINE_DATABASE_URL")
@click.version_option(version=__version__, prog_name="chatline-migrate")
def main(log_level: str, database_url: str | None) -> None:
    """Chatline database migration management."""
    configure_logging(debug=(log_level == "debug"), level=log_level)
    if database_url:
        os.environ["CHATLINE_DATABASE_URL"] = database_url


@main.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade the schema to REVISION (default: head)."""
    _run("Schema upgrade", lambda config: command.upgrade(config, revision), revision=revision)


@main.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade the schema to REVISION (default: one step back)."""
    _run(
        "Schema downgrade", lambda config: command.downgrade(config, revision), revision=revision
    )


@main.command()
@click.option("-m", "--message", required=True, help="Revision message")
@click.option("--autogenerate/--no-autogenerate", default=True, help="Diff models against the DB")
def revision(message: str, autogenerate: bool) -> None:
    """Create a new migration revision from the ORM models."""
    _run(
        "Revision creation",
        lambda config: command.revision(config, message=message, autogenerate=autogenerate),
        message=message,
    )


@main.command()
def current() -> None:
    """Show the revision the database is at."""
    _run("Current revision lookup", command.current)


@main.command()
def history() -> None:
    """Show migration history."""
    _run("History listing", command.history)


@main.command()
def check() -> None:
    """Verify the database is reachable with the configured URL."""
    from .connection import check_database_connection, dispose_database, init_database

    async def ping() -> tuple[bool, str | None]:
        init_database(force_reinit=True)
        try:
            return await check_database_connection()
        finally:
            await dispose_database()

    ok, error = asyncio.run(ping())
    if not ok:
        logger.error("Database unreachable", error=error)
        sys.exit(1)
    click.echo("Database reachable")


if __name__ == "__main__":
    main()
