"""
CLI Commands.

Organized by domain/feature area.
"""

from asgardeo_cli.cli.commands.applications import app as applications_app
from asgardeo_cli.cli.commands.auth import login, logout

__all__ = [
    "applications_app",
    "login",
    "logout",
]
