"""
Asgardeo API.

- client: authenticated HTTP request core (URI builder, request factory,
  transport, response resolver)
- applications: application management resource
"""

from asgardeo_cli.api.client import APIRequest, HTTPClient, Method, resolve_response, send

__all__ = [
    "APIRequest",
    "HTTPClient",
    "Method",
    "resolve_response",
    "send",
]
