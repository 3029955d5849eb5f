"""
Application Commands.

List, inspect, create and delete applications in the logged-in tenant.
All commands here require an authenticated session.
"""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from asgardeo_cli.api.applications import Application, ApplicationCreate, ApplicationList, ApplicationsAPI
from asgardeo_cli.auth.session import Session
from asgardeo_cli.cli.gating import GatedTyper

app = GatedTyper(help="Manage applications", no_args_is_help=True)
console = Console()


@app.command("list")
def list_applications(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", "-l", min=1, help="Maximum number of results"),
    offset: int | None = typer.Option(None, "--offset", min=0, help="Index of the first result"),
    filter_: str | None = typer.Option(None, "--filter", "-f", help="Filter, e.g. 'name eq MyApp'"),
) -> None:
    """
    List applications in the tenant.

    Examples:
        asgardeo applications list
        asgardeo applications list --limit 10 --filter "name co web"
    """
    session = ctx.find_object(Session)
    result = asyncio.run(_list(session, limit, offset, filter_))
    _display_list(result)


async def _list(session: Session, limit: int | None, offset: int | None, filter_: str | None) -> ApplicationList:
    async with session.client() as client:
        return await ApplicationsAPI(client, session.cancel).list(limit=limit, offset=offset, filter=filter_)


def _display_list(result: ApplicationList) -> None:
    if not result.applications:
        console.print("[dim]No applications found.[/dim]")
        return

    table = Table(title="Applications", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("ID")
    table.add_column("Client ID")
    table.add_column("Description")

    for application in result.applications:
        table.add_row(
            application.name,
            application.id,
            application.client_id or "-",
            application.description or "-",
        )

    console.print(table)
    console.print(f"[dim]Showing {len(result.applications)} of {result.total_results}[/dim]")


@app.command("get")
def get_application(
    ctx: typer.Context,
    app_id: str = typer.Argument(..., help="Application ID"),
) -> None:
    """
    Show one application.

    Examples:
        asgardeo applications get 85b1ac9c-8a6b-4a8c-9b8e-0c1f3b3b9a1e
    """
    session = ctx.find_object(Session)
    application = asyncio.run(_get(session, app_id))
    _display_application(application)


async def _get(session: Session, app_id: str) -> Application:
    async with session.client() as client:
        return await ApplicationsAPI(client, session.cancel).get(app_id)


def _display_application(application: Application) -> None:
    table = Table(title=application.name, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    rows = [
        ("ID", application.id),
        ("Description", application.description),
        ("Client ID", application.client_id),
        ("Issuer", application.issuer),
        ("Template", application.template_id),
        ("Access URL", application.access_url),
    ]
    for label, value in rows:
        table.add_row(label, value or "-")

    console.print(table)


@app.command("create")
def create_application(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Application name"),
    description: str | None = typer.Option(None, "--description", help="Application description"),
    template_id: str | None = typer.Option(None, "--template-id", help="Application template ID"),
) -> None:
    """
    Create an application.

    Examples:
        asgardeo applications create --name "My Web App"
    """
    session = ctx.find_object(Session)
    payload = ApplicationCreate(name=name, description=description, template_id=template_id)
    asyncio.run(_create(session, payload))
    console.print(f"[green]✓ Application created:[/green] {name}")


async def _create(session: Session, payload: ApplicationCreate) -> None:
    async with session.client() as client:
        await ApplicationsAPI(client, session.cancel).create(payload)


@app.command("delete")
def delete_application(
    ctx: typer.Context,
    app_id: str = typer.Argument(..., help="Application ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """
    Delete an application.

    Examples:
        asgardeo applications delete 85b1ac9c-8a6b-4a8c-9b8e-0c1f3b3b9a1e --yes
    """
    if not yes:
        typer.confirm(f"Delete application {app_id}?", abort=True)
    session = ctx.find_object(Session)
    asyncio.run(_delete(session, app_id))
    console.print(f"[green]✓ Application deleted:[/green] {app_id}")


async def _delete(session: Session, app_id: str) -> None:
    async with session.client() as client:
        await ApplicationsAPI(client, session.cancel).delete(app_id)
