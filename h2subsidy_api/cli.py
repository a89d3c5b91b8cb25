"""
CLI entry point for H2 Subsidy API.
"""

import asyncio
from typing import Optional

import structlog
import typer

from .config import get_settings, mask_url
from .database import SubsidyDatabase
from .errors import SchemaError, StoreError

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

app = typer.Typer(
    name="h2subsidy",
    help="Green-hydrogen subsidy milestone tracker",
    add_completion=False,
)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (defaults to PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """
    Start the HTTP API.
    """
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "h2subsidy_api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload or settings.debug,
    )


async def _init_db(db: SubsidyDatabase) -> None:
    try:
        await db.ensure_schema()
    finally:
        await db.close()


async def _reset(db: SubsidyDatabase) -> None:
    try:
        await db.reset_all()
    finally:
        await db.close()


@app.command("init-db")
def init_db() -> None:
    """
    Create the users, vendors and progress_logs tables if missing.
    """
    db = SubsidyDatabase.from_settings(get_settings())
    try:
        asyncio.run(_init_db(db))
    except SchemaError as e:
        typer.echo(f"✗ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✓ Schema ready at {mask_url(db.database_url)}")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """
    Delete every user, vendor and progress entry.
    """
    db = SubsidyDatabase.from_settings(get_settings())
    if not yes:
        typer.confirm(
            f"This permanently clears all data in {mask_url(db.database_url)}. Continue?",
            abort=True,
        )
    try:
        asyncio.run(_reset(db))
    except StoreError as e:
        typer.echo(f"✗ {e.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo("✓ Simulation reset")


@app.command()
def version() -> None:
    """Show the API version."""
    from h2subsidy_api import __version__
    typer.echo(f"h2subsidy-api v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
