"""Database CLI commands."""

import typer
from rich.prompt import Confirm

from catalog_grader.core.services.database import DbManageService
from catalog_grader.runtime.context import get_config

from .utils import console, get_database_service

db_app = typer.Typer(help="Manage the database schema")


@db_app.command("init")
def init_db() -> None:
    """Create every table that does not exist yet."""
    database_service = get_database_service()
    DbManageService(database_service.engine).create_all()
    console.print(f"[green]✅ Tables created in {get_config().database.url.split('@')[-1]}[/green]")


@db_app.command("reset")
def reset_db(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Drop and recreate every table. All data is lost."""
    if not yes and not Confirm.ask("[red]Drop all tables and data?[/red]"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(code=1)
    manager = DbManageService(get_database_service().engine)
    manager.drop_all()
    manager.create_all()
    console.print("[green]✅ Database reset[/green]")
