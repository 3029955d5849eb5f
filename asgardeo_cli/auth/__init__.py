"""
Authentication.

- store: tenant credential persistence
- login: OAuth2 client-credentials token request
- session: per-invocation session used by the CLI gate and commands
"""
