"""
Tenant Credential Store.

Persists one access token per tenant in a YAML file
(~/.asgardeo/config.yaml by default, mode 0600):

    default_tenant: acme
    tenants:
      acme:
        name: acme
        client_id: ...
        access_token: ...
        scopes: [...]
        expires_at: 2026-10-19T12:00:00Z
"""

import os
from datetime import datetime, timezone
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_serializer

from asgardeo_cli.core.exceptions import ConfigurationError
from asgardeo_cli.core.logging import get_logger

logger = get_logger(__name__)


class Tenant(BaseModel):
    name: str
    client_id: str
    access_token: SecretStr
    scopes: list[str] = Field(default_factory=list)
    expires_at: datetime | None = None

    @field_serializer("access_token", when_used="json")
    def _dump_access_token(self, value: SecretStr) -> str:
        return value.get_secret_value()

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once the token's expiry time has passed. Tokens without an expiry never expire."""
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return (now or datetime.now(timezone.utc)) >= expires_at


class StoreData(BaseModel):
    default_tenant: str | None = None
    tenants: dict[str, Tenant] = Field(default_factory=dict)


class TenantStore:
    """YAML-backed store of tenant credentials."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> StoreData:
        """Read the store. A missing file is an empty store."""
        if not self.path.exists():
            return StoreData()
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            return StoreData.model_validate(raw)
        except (yaml.YAMLError, ValidationError) as e:
            raise ConfigurationError(f"Invalid credential store {self.path}:\n{e}") from e

    def save(self, data: StoreData) -> None:
        """Write the store, readable by the current user only."""
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data.model_dump(mode="json"), f, sort_keys=False)
        os.chmod(self.path, 0o600)

    def get_tenant(self, domain: str | None = None) -> Tenant:
        """
        Look up a tenant, or the default tenant when ``domain`` is None.

        Raises:
            ConfigurationError: If no such tenant is stored
        """
        data = self.load()
        name = domain or data.default_tenant
        if not name:
            raise ConfigurationError("no tenant configured; run 'asgardeo login' first")
        tenant = data.tenants.get(name)
        if tenant is None:
            logger.error("Tenant not found in credential store", tenant=name, path=str(self.path))
            raise ConfigurationError(f"tenant '{name}' not found; run 'asgardeo login --tenant {name}'")
        return tenant

    def save_tenant(self, tenant: Tenant, make_default: bool = True) -> None:
        data = self.load()
        data.tenants[tenant.name] = tenant
        if make_default or data.default_tenant is None:
            data.default_tenant = tenant.name
        self.save(data)

    def remove_tenant(self, domain: str | None = None) -> Tenant:
        """
        Remove a tenant (the default tenant when ``domain`` is None).

        If the default tenant is removed, the next remaining tenant becomes the default.
        """
        data = self.load()
        name = domain or data.default_tenant
        if not name or name not in data.tenants:
            raise ConfigurationError(f"not logged in to tenant '{name}'" if name else "not logged in")
        tenant = data.tenants.pop(name)
        if data.default_tenant == name:
            data.default_tenant = next(iter(data.tenants), None)
        self.save(data)
        return tenant
