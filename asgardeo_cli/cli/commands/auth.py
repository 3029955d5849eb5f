"""
Authentication Commands.

login and logout run without an existing session; they are registered on
the root app with PublicCommand.
"""

import asyncio

import typer
from rich.console import Console

from asgardeo_cli.auth.session import Session
from asgardeo_cli.core.config import get_settings

console = Console()


def login(
    ctx: typer.Context,
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant (organization) name"),
    client_id: str | None = typer.Option(None, "--client-id", help="M2M application client ID"),
    client_secret: str | None = typer.Option(
        None, "--client-secret", help="M2M application client secret (prompted if omitted)"
    ),
) -> None:
    """
    Log in to a tenant with an M2M application's client credentials.

    Client ID and secret may also come from ASGARDEO_CLIENT_ID and
    ASGARDEO_CLIENT_SECRET.

    Examples:
        asgardeo login --tenant acme --client-id abc123
    """
    session = ctx.find_object(Session)
    settings = get_settings()

    tenant = tenant or session.tenant_domain or typer.prompt("Tenant")
    client_id = client_id or settings.client_id or typer.prompt("Client ID")
    if not client_secret:
        if settings.client_secret is not None:
            client_secret = settings.client_secret.get_secret_value()
        else:
            client_secret = typer.prompt("Client secret", hide_input=True)

    stored = asyncio.run(session.login(tenant, client_id, client_secret))

    console.print(f"[green]✓ Logged in to tenant[/green] [bold]{stored.name}[/bold]")
    if stored.expires_at is not None:
        console.print(f"[dim]Token expires at {stored.expires_at.isoformat()}[/dim]")


def logout(
    ctx: typer.Context,
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant to log out of (default tenant if omitted)"),
) -> None:
    """
    Log out of a tenant and forget its stored access token.

    Examples:
        asgardeo logout
        asgardeo logout --tenant acme
    """
    session = ctx.find_object(Session)
    removed = session.logout(tenant)
    console.print(f"[green]✓ Logged out of tenant[/green] [bold]{removed.name}[/bold]")
