"""Core infrastructure shared by the API client and the CLI."""
