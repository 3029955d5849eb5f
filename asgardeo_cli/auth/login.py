"""
Token Acquisition.

Obtains an access token with the OAuth2 client-credentials grant from
t/<tenant>/oauth2/token, using an M2M application's client id and secret.
The exchange goes through the same send/resolve core as API calls, so
cancellation and error classification behave identically.
"""

from urllib.parse import quote

import httpx
from pydantic import BaseModel

from asgardeo_cli.api.client import resolve_response, send
from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.config import AppConfig
from asgardeo_cli.core.exceptions import DecodeError
from asgardeo_cli.core.logging import get_logger

logger = get_logger(__name__)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None


def token_url(config: AppConfig, tenant: str) -> str:
    api = config.application.api
    path = api.token_path.format(tenant=quote(tenant, safe=""))
    return str(httpx.URL(api.base_url).join(path))


async def fetch_token(
    config: AppConfig,
    tenant: str,
    client_id: str,
    client_secret: str,
    *,
    cancel: CancelToken,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TokenResponse:
    """
    Request an access token for ``tenant``.

    Raises:
        UpstreamError: The token endpoint rejected the credentials
        CancellationError: ``cancel`` fired during the exchange
        TransportError: Network failure
        DecodeError: The token response was empty or malformed
    """
    url = token_url(config, tenant)
    scopes = " ".join(config.application.auth.scopes)
    async with httpx.AsyncClient(
        transport=transport,
        auth=httpx.BasicAuth(client_id, client_secret),
        follow_redirects=config.application.api.follow_redirects,
        timeout=None,
    ) as client:
        request = client.build_request(
            "POST",
            url,
            data={"grant_type": "client_credentials", "scope": scopes},
            headers={"Accept": "application/json"},
        )
        logger.debug("Requesting access token", tenant=tenant, uri=url)
        response = await send(client, request, cancel)
        token = await resolve_response(response, TokenResponse, cancel)

    if token is None:
        raise DecodeError("token endpoint returned an empty response")
    return token
