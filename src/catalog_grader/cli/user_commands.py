"""User management CLI commands."""

import typer
from rich.table import Table

from catalog_grader.core.errors import CatalogError
from catalog_grader.core.security import hash_password, verify_password
from catalog_grader.core.services.jwt import JwtGeneratorService
from catalog_grader.entities.core.user import User, UserRepository, UserRole

from .utils import console, get_database_service

users_app = typer.Typer(help="Manage users and mint bearer tokens")


@users_app.command("list")
def list_users() -> None:
    """List all users."""
    with get_database_service().session_scope() as session:
        users = UserRepository(session).list_all()

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Role", style="magenta")
    for user in users:
        table.add_row(user.id, user.name, user.email, user.role.value)
    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("add")
def add_user(
    email: str = typer.Argument(..., help="Login email"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    role: UserRole = typer.Option(UserRole.USER, "--role", "-r", help="Access role"),
    password: str | None = typer.Option(
        None, "--password", "-p", help="Password for the token command"
    ),
) -> None:
    """Create a user."""
    try:
        with get_database_service().session_scope() as session:
            user = UserRepository(session).create(
                User(
                    name=name,
                    email=email,
                    role=role,
                    password_hash=hash_password(password) if password else None,
                )
            )
    except CatalogError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Created {user.role.value} {user.email} ({user.id})[/green]")


@users_app.command("token")
def issue_token(
    email: str = typer.Argument(..., help="Email of the user to mint a token for"),
    password: str | None = typer.Option(
        None, "--password", "-p", help="Verify this password before minting"
    ),
    ttl: int | None = typer.Option(None, "--ttl", help="Token lifetime in seconds"),
) -> None:
    """Print a bearer token for a user."""
    with get_database_service().session_scope() as session:
        user = UserRepository(session).get_by_email(email)

    if user is None:
        console.print(f"[red]❌ No user with email {email}[/red]")
        raise typer.Exit(code=1)
    if password is not None and not verify_password(password, user.password_hash):
        console.print("[red]❌ Wrong password[/red]")
        raise typer.Exit(code=1)

    try:
        token = JwtGeneratorService().generate_access_token(
            user.id, roles=[user.role.value], expires_in_seconds=ttl
        )
    except CatalogError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e

    # Plain stdout, no rich markup or wrapping
    print(token)
