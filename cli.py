#!/usr/bin/env python3
"""
Asgardeo CLI entry script.

Runs the same Typer app as the installed ``asgardeo`` command, for use
from a source checkout:

    python cli.py --help
    python cli.py login --tenant acme
    python cli.py applications list
"""

from asgardeo_cli.cli.app import run

if __name__ == "__main__":
    run()
