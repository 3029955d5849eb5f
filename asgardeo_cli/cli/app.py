"""
Asgardeo CLI.

Build, manage and test your Asgardeo integrations from the command line.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    asgardeo --help                              # Show help
    asgardeo login --tenant acme                 # Log in with client credentials
    asgardeo logout                              # Forget the default tenant's token
    asgardeo applications list                   # List applications
    asgardeo -t acme --timeout 10 applications get <id>

Options:
    --verbose, -v     Log INFO and above to stderr
    --debug, -d       Log DEBUG and above to stderr
    --tenant, -t      Tenant to act on (default: last logged-in tenant)
    --timeout         Deadline in seconds for the whole command
"""

import re
import signal

import typer
from rich.console import Console

from asgardeo_cli import __version__
from asgardeo_cli.auth.session import Session
from asgardeo_cli.cli.commands import applications_app, login, logout
from asgardeo_cli.cli.gating import GatedTyper, PublicCommand, command_requires_auth
from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.exceptions import AsgardeoError
from asgardeo_cli.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = GatedTyper(
    name="asgardeo",
    help="Build, manage and test your Asgardeo integrations from the command line.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

err_console = Console(stderr=True)

app.command("login", cls=PublicCommand)(login)
app.command("logout", cls=PublicCommand)(logout)
app.add_typer(applications_app, name="applications")


def requires_auth(command_path: str) -> bool:
    """
    Whether the command at ``command_path`` needs an authenticated session.

    The first element is the program name, e.g. "asgardeo login". Paths
    that do not name a registered command require authentication.
    """
    node = typer.main.get_command(app)
    for name in re.split(r"[\s.]+", command_path.strip())[1:]:
        node = getattr(node, "commands", {}).get(name)
        if node is None:
            return True
    return command_requires_auth(node)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"asgardeo {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
    tenant: str | None = typer.Option(
        None,
        "--tenant",
        "-t",
        envvar="ASGARDEO_TENANT",
        help="Tenant to act on (default: last logged-in tenant)",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=0.001,
        help="Cancel the command after this many seconds",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    Asgardeo CLI.

    Build, manage and test your Asgardeo integrations from the command line.
    """
    session = ctx.obj if isinstance(ctx.obj, Session) else None

    if session is None:
        # run() passes the process cancel token as the initial context object.
        cancel = ctx.obj if isinstance(ctx.obj, CancelToken) else CancelToken()
        try:
            if debug:
                setup_logging(level="DEBUG", format_type="console", enable_console=True)
            elif verbose:
                setup_logging(level="INFO", format_type="console", enable_console=True)
            else:
                setup_logging()
            session = Session.from_config(cancel=cancel)
        except AsgardeoError as exc:
            err_console.print(f"Error: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
            raise typer.Exit(exc.exit_code) from exc
        ctx.obj = session

    if tenant:
        session.tenant_domain = tenant
    if timeout is not None:
        session.cancel = session.cancel.with_timeout(timeout)

    logger.debug("Command dispatched", command=ctx.invoked_subcommand, tenant=session.tenant_domain)


def run() -> None:
    """Console entry point. The first Ctrl-C cancels in-flight requests; a second one exits."""
    cancel = CancelToken()

    def _interrupt(signum, frame) -> None:
        signal.signal(signal.SIGINT, signal.default_int_handler)
        cancel.cancel("interrupted")

    signal.signal(signal.SIGINT, _interrupt)
    app(obj=cancel, prog_name="asgardeo")


if __name__ == "__main__":
    run()
