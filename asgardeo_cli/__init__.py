"""
Asgardeo CLI.

- api/: Authenticated HTTP request core and resource APIs
- auth/: Credential store, login and session setup
- cli/: Command-line interface (Typer + Rich)
- core/: Configuration, logging, exceptions, cancellation
"""

__version__ = "0.1.0"
