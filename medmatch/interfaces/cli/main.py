"""
CLI Main - Typer-based command-line interface.

Usage:
    medmatch init
    medmatch create-account someone@medmatch.org
    medmatch serve
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="medmatch",
    help="Medmatch - Accounts and authentication service",
    add_completion=False,
)
console = Console()


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    level = "DEBUG" if verbose else "INFO"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from medmatch.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting Medmatch API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "medmatch.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )


@app.command()
def init(
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Database path"),
) -> None:
    """Create the account database schema."""
    asyncio.run(_init_async(db_path))


async def _init_async(db_path: Path | None) -> None:
    from medmatch.adapters.sqlite import AccountRepository
    from medmatch.config import get_settings

    settings = get_settings()
    repo = AccountRepository(db_path or settings.db_path, timeout=settings.db_timeout_seconds)
    try:
        await repo.initialize()
        count = await repo.count()
    finally:
        await repo.close()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {repo.db_path} ({count} accounts)[/dim]")


@app.command("create-account")
def create_account(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
    db_path: Path | None = typer.Option(None, "--db", "-d", help="Database path"),
) -> None:
    """Create an account directly in the credential store."""
    asyncio.run(_create_account_async(email, password, db_path))


async def _create_account_async(email: str, password: str, db_path: Path | None) -> None:
    from medmatch.adapters.sqlite import AccountRepository
    from medmatch.config import MedmatchError, get_settings
    from medmatch.domains.accounts import AuthService, BcryptPasswordHasher, TokenIssuer

    settings = get_settings()
    repo = AccountRepository(db_path or settings.db_path, timeout=settings.db_timeout_seconds)
    service = AuthService(
        repo,
        BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
        TokenIssuer(
            access_secret=settings.access_token_secret.get_secret_value(),
            refresh_secret=settings.refresh_token_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
        ),
    )

    try:
        await repo.initialize()
        account = await service.signup(email, password)
    except MedmatchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await repo.close()

    table = Table(title="Account Created")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("ID", account.id)
    table.add_row("Email", account.email)
    table.add_row("Entry Date", account.entry_date.isoformat())
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from medmatch import __version__

    console.print(f"Medmatch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
