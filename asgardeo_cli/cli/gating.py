"""
Command Gate.

Every command registered on a GatedTyper needs an authenticated session
unless it opts out with PublicCommand:

    app = GatedTyper()

    @app.command("list")                      # session required (default)
    @app.command("login", cls=PublicCommand)  # no session required

Before a gated command's body runs, the gate calls
``Session.setup_with_authentication()``. If that fails, the body never runs
and the error surfaces as "authentication failed: <cause>".

Any AsgardeoError escaping a command is printed to stderr and turned into
a non-zero exit code.
"""

from typing import Any

import typer
from rich.console import Console
from typer.core import TyperCommand

from asgardeo_cli.auth.session import Session
from asgardeo_cli.core.exceptions import AsgardeoError, AuthenticationError, ConfigurationError
from asgardeo_cli.core.logging import get_logger

logger = get_logger(__name__)
err_console = Console(stderr=True)


def command_requires_auth(command: Any) -> bool:
    """Whether ``command`` needs a session. Commands that do not say so need one."""
    return getattr(command, "requires_auth", True) is not False


def authenticate(session: Session | None) -> None:
    """
    Run session setup for a gated command.

    Raises:
        AuthenticationError: Wrapping whatever made setup fail
    """
    if session is None:
        raise ConfigurationError("CLI session is not initialized")
    try:
        session.setup_with_authentication()
    except AsgardeoError as exc:
        logger.error("Authentication setup failed", error=str(exc))
        raise AuthenticationError(f"authentication failed: {exc}") from exc


class GatedCommand(TyperCommand):
    """Command that requires an authenticated session."""

    requires_auth = True

    def invoke(self, ctx: typer.Context) -> Any:
        try:
            if command_requires_auth(self):
                authenticate(ctx.find_object(Session))
            return super().invoke(ctx)
        except AsgardeoError as exc:
            logger.error("Command execution failed", command=ctx.command_path, error=str(exc))
            err_console.print(f"Error: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
            raise typer.Exit(exc.exit_code) from exc


class PublicCommand(GatedCommand):
    """Command that runs without a session (login, logout)."""

    requires_auth = False


class GatedTyper(typer.Typer):
    """Typer app whose commands are gated unless registered with PublicCommand."""

    def command(self, name: str | None = None, *, cls: type[TyperCommand] | None = None, **kwargs: Any) -> Any:
        cls = cls or GatedCommand
        if not issubclass(cls, GatedCommand):
            raise TypeError(f"command {name!r} must use GatedCommand or PublicCommand, not {cls.__name__}")
        return super().command(name, cls=cls, **kwargs)

    def add_typer(self, typer_instance: typer.Typer, **kwargs: Any) -> None:
        if not isinstance(typer_instance, GatedTyper):
            raise TypeError("command groups must be GatedTyper instances")
        super().add_typer(typer_instance, **kwargs)
