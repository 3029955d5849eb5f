"""
Root Pytest Fixtures.

Shared fixtures available to all tests: packaged configuration, a
credential store in a temporary directory, and helpers for serving
canned upstream responses through httpx.MockTransport.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from asgardeo_cli.auth.session import Session
from asgardeo_cli.auth.store import Tenant, TenantStore
from asgardeo_cli.core.config import PACKAGED_SETTINGS_DIR, AppConfig

BASE_URL = "https://api.asgardeo.io/"
TENANT = "acme"
ACCESS_TOKEN = "token-abc"

Handler = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def app_config() -> AppConfig:
    """Application configuration from the packaged YAML defaults."""
    return AppConfig(PACKAGED_SETTINGS_DIR)


# =============================================================================
# Credential Store Fixtures
# =============================================================================


@pytest.fixture
def store(tmp_path) -> TenantStore:
    """Empty credential store in a temporary directory."""
    return TenantStore(tmp_path / "asgardeo" / "config.yaml")


@pytest.fixture
def tenant() -> Tenant:
    """A tenant with a token valid for the next hour."""
    return Tenant(
        name=TENANT,
        client_id="client-123",
        access_token=ACCESS_TOKEN,
        scopes=["internal_application_mgt_view"],
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


@pytest.fixture
def logged_in_store(store: TenantStore, tenant: Tenant) -> TenantStore:
    """Credential store holding one default tenant."""
    store.save_tenant(tenant)
    return store


# =============================================================================
# HTTP Fixtures
# =============================================================================


class Recorder:
    """Collects requests seen by a MockTransport and answers with a handler."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(204))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def recorder() -> Recorder:
    """Request recorder answering 204 until its handler is replaced."""
    return Recorder()


@pytest.fixture
def make_session(app_config: AppConfig) -> Callable[..., Session]:
    """
    Build a Session wired to a store and a recorder's transport.

    Usage:
        session = make_session(logged_in_store, recorder)
    """

    def _make(store: TenantStore, recorder: Recorder | None = None, **kwargs) -> Session:
        transport = recorder.transport if recorder is not None else None
        return Session(app_config, store, transport=transport, **kwargs)

    return _make
