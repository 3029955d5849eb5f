"""
CLI Session.

One Session is created per invocation and stored on the command context. It
carries the process cancel token, the selected tenant, and the credential
store, and it is the session-setup collaborator the command gate calls
before any command that needs an access token.
"""

from datetime import datetime, timedelta, timezone

import httpx

from asgardeo_cli.api.client import HTTPClient
from asgardeo_cli.auth.login import fetch_token
from asgardeo_cli.auth.store import Tenant, TenantStore
from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.config import AppConfig, get_app_config
from asgardeo_cli.core.exceptions import AuthenticationError, ConfigurationError
from asgardeo_cli.core.logging import get_logger

logger = get_logger(__name__)


class Session:
    def __init__(
        self,
        config: AppConfig,
        store: TenantStore,
        *,
        cancel: CancelToken | None = None,
        tenant_domain: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.cancel = cancel or CancelToken()
        self.tenant_domain = tenant_domain
        self.transport = transport
        self.tenant: Tenant | None = None

    @classmethod
    def from_config(cls, config: AppConfig | None = None, **kwargs) -> "Session":
        """Create a session backed by the credential file named in application.yaml."""
        config = config or get_app_config()
        return cls(config, TenantStore(config.credentials_file), **kwargs)

    def setup_with_authentication(self) -> Tenant:
        """
        Resolve the selected tenant and check its access token.

        Raises:
            ConfigurationError: No tenant is stored under that name
            AuthenticationError: The stored token has expired
        """
        tenant = self.store.get_tenant(self.tenant_domain)
        if tenant.is_expired():
            raise AuthenticationError(
                f"access token for tenant '{tenant.name}' has expired; run 'asgardeo login' again"
            )
        self.tenant = tenant
        logger.debug("Session ready", tenant=tenant.name)
        return tenant

    def client(self) -> HTTPClient:
        """Build an API client for the authenticated tenant."""
        if self.tenant is None:
            raise ConfigurationError("no authenticated session; the command was not gated")
        return HTTPClient.for_tenant(self.config, self.tenant, transport=self.transport)

    async def login(self, tenant_domain: str, client_id: str, client_secret: str) -> Tenant:
        """Exchange client credentials for a token and store it as the default tenant."""
        token = await fetch_token(
            self.config,
            tenant_domain,
            client_id,
            client_secret,
            cancel=self.cancel,
            transport=self.transport,
        )
        expires_at = None
        if token.expires_in:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=token.expires_in)
        scopes = token.scope.split() if token.scope else list(self.config.application.auth.scopes)

        tenant = Tenant(
            name=tenant_domain,
            client_id=client_id,
            access_token=token.access_token,
            scopes=scopes,
            expires_at=expires_at,
        )
        self.store.save_tenant(tenant)
        self.tenant = tenant
        logger.info("Logged in", tenant=tenant_domain, expires_at=str(expires_at))
        return tenant

    def logout(self, tenant_domain: str | None = None) -> Tenant:
        """Forget the stored token for a tenant (the selected or default one by default)."""
        tenant = self.store.remove_tenant(tenant_domain or self.tenant_domain)
        logger.info("Logged out", tenant=tenant.name)
        return tenant
