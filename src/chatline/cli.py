#!/usr/bin/env python3
"""
Main CLI entry point for Chatline backend server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from chatline import __version__
from chatline.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="chatline")
def cli() -> None:
    """Chatline CLI - run the API server and manage tokens."""
    pass


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", default=8088, type=int, help="Port to bind to (default: 8088)")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (default: 1)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the Chatline API server."""
    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting Chatline API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    if log_level == "debug":
        os.environ["CHATLINE_DEBUG"] = "true"
        os.environ["CHATLINE_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("CHATLINE_DEBUG", "false")
        os.environ.setdefault("CHATLINE_LOG_LEVEL", log_level)

    if workers > 1 and os.getenv("CHATLINE_EVENT_BUS_BACKEND", "memory") == "memory":
        logger.warning(
            "In-memory event bus does not cross worker processes; "
            "set CHATLINE_EVENT_BUS_BACKEND=redis for subscriptions to reach every client",
            workers=workers,
        )

    try:
        if reload or workers > 1:
            uvicorn.run(
                "chatline.api.app:app",
                host=host,
                port=port,
                reload=reload,
                workers=(workers if not reload else 1),
                log_level=log_level,
                access_log=True,
            )
        else:
            from chatline.api.app import app

            uvicorn.run(app, host=host, port=port, log_level=log_level, access_log=True)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("issue-token")
@click.option("--subject", required=True, help="Subject (sub claim) for the token")
@click.option("--email", default=None, help="Email claim")
@click.option("--username", default=None, help="preferred_username claim")
def issue_token(subject: str, email: str | None, username: str | None) -> None:
    """Issue a bearer token with the configured auth provider."""
    from chatline.auth.factory import get_auth_adapter

    claims: dict = {"sub": subject}
    if email:
        claims["email"] = email
    if username:
        claims["preferred_username"] = username

    try:
        adapter = get_auth_adapter()
        token = asyncio.run(adapter.issue_token(claims=claims))
    except Exception as e:
        logger.error("Token issuance failed", error=str(e))
        sys.exit(1)

    click.echo(token)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
