"""
``talawa`` command line: run the API and manage the database schema
"""

import os
import sys
from pathlib import Path

import click
import uvicorn
from alembic import command
from alembic.config import Config

from talawa import __version__
from talawa.config import settings
from talawa.logging import configure_logging, get_logger

logger = get_logger(__name__)

# src/talawa/cli.py -> project root
ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def get_alembic_config() -> Config:
    if not ALEMBIC_INI.exists():
        raise click.ClickException(f"alembic.ini not found at {ALEMBIC_INI}")
    return Config(str(ALEMBIC_INI))


@click.group()
@click.version_option(version=__version__, prog_name="talawa")
def cli() -> None:
    """Talawa API server and database tools."""


@cli.command()
@click.option("--host", default=settings.api_host, show_default=True)
@click.option("--port", default=settings.api_port, type=int, show_default=True)
@click.option("--reload", is_flag=True, help="Restart on code changes (development only).")
@click.option("--workers", default=1, type=int, show_default=True)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    show_default=True,
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the API server."""
    debug = log_level == "debug"
    configure_logging(debug=debug)

    # Worker and reloader processes import the app fresh and read these
    os.environ["TALAWA_DEBUG"] = "true" if debug else os.environ.get("TALAWA_DEBUG", "false")
    os.environ.setdefault("TALAWA_LOG_LEVEL", log_level)

    if reload and workers > 1:
        logger.warning("--reload ignores --workers; starting a single worker")
        workers = 1

    logger.info("Starting Talawa API server", host=host, port=port, reload=reload, workers=workers)
    uvicorn.run(
        "talawa.api.app:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )


@cli.group()
def migrate() -> None:
    """Apply or inspect database migrations."""
    configure_logging()


def _run_alembic(name: str, *args: str) -> None:
    config = get_alembic_config()
    logger.info("Running migration command", command=name, args=args)
    try:
        getattr(command, name)(config, *args)
    except Exception as e:
        logger.error("Migration command failed", command=name, error=str(e))
        sys.exit(1)


@migrate.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade the schema to REVISION."""
    _run_alembic("upgrade", revision)


@migrate.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade the schema to REVISION."""
    _run_alembic("downgrade", revision)


@migrate.command()
def current() -> None:
    """Show the revision the database is at."""
    _run_alembic("current")


if __name__ == "__main__":
    cli()
