"""Marketplace CLI — run the server, prepare the database.

Usage:
    marketplace serve                   # uvicorn on MARKETPLACE_HOST:MARKETPLACE_PORT
    marketplace serve --reload          # auto-reload for development
    marketplace init-db                 # create tables without starting the server
"""

import asyncio

import click
import uvicorn
from sqlalchemy.engine import make_url

from marketplace.config import get_settings
from marketplace.db.engine import build_engine, create_tables


@click.group()
def cli():
    """Marketplace backend."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings.host)")
@click.option("--port", default=None, type=int, help="Port (default: settings.port)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "marketplace.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables in MARKETPLACE_DATABASE_URL."""
    settings = get_settings()

    async def _init():
        engine = build_engine(settings)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    url = make_url(settings.database_url).render_as_string(hide_password=True)
    click.secho(f"Tables ready in {url}", fg="green")


if __name__ == "__main__":
    cli()
