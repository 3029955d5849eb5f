"""
CLI Module.

Command-line client built with Typer for the Asgardeo management API.

Architecture:
- CLI is a thin presentation layer over asgardeo_cli.api
- Commands declare whether they need a session (see gating)
- The process cancel token flows from run() into every API call

Usage:
    asgardeo --help
    asgardeo login --tenant acme
    asgardeo applications list
"""
