"""
Authenticated HTTP Client.

Turns a logical operation (method, resource path, payload) into a
token-bearing HTTP exchange with the Asgardeo management API.

Every request:
- targets a tenant-scoped URI (t/<tenant>/api/server/v1/...)
- carries a JSON body (or none) and Content-Type: application/json
- carries Authorization: Bearer <token>, set by the transport
- is sent exactly once, racing the caller's CancelToken

Usage:
    async with HTTPClient.for_tenant(config, tenant) as client:
        uri = client.uri("applications", app_id)
        application = await client.request("GET", uri, into=Application, cancel=token)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.exceptions import (
    CancellationError,
    ConfigurationError,
    DecodeError,
    SerializationError,
    TransportError,
    UpstreamError,
)
from asgardeo_cli.core.logging import get_logger

if TYPE_CHECKING:
    from asgardeo_cli.auth.store import Tenant
    from asgardeo_cli.core.config import AppConfig

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BASE_PATH = "t/{tenant}/api/server/v1"
JSON_CONTENT_TYPE = "application/json"
NULL_BODY = b"null"
EMPTY_OBJECT_BODY = b"{}"

# Characters left literal inside a path segment. "/" is not among them, so a
# slash inside a resource name is sent as %2F rather than as a delimiter.
_SEGMENT_SAFE = "$&+,;=:@"


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class APIRequest:
    """A single outbound request. Built by ``HTTPClient.new_request``, sent once by ``do``."""

    method: Method
    uri: str
    content: bytes = b""
    headers: tuple[tuple[str, str], ...] = ()
    cancel: CancelToken = field(default_factory=CancelToken, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.method, Method):
            object.__setattr__(self, "method", Method(str(self.method).upper()))
        if not self.uri:
            raise ValueError("request URI must not be empty")


class ErrorBody(BaseModel):
    """Error payload returned by the management API and the token endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str | int | None = None
    message: str | None = None
    description: str | None = None
    trace_id: str | None = Field(default=None, alias="traceId")
    error: str | None = None
    error_description: str | None = None


def encode_payload(payload: Any) -> bytes:
    """
    Serialize a request payload to JSON bytes.

    Accepts anything pydantic can serialize (models, dataclasses, dicts,
    lists, scalars). None, and any payload that serializes to ``null``,
    produce an empty body.

    Raises:
        SerializationError: If the payload cannot be encoded
    """
    if payload is None:
        return b""
    try:
        body = TypeAdapter(type(payload)).dump_json(payload, by_alias=True, exclude_none=True)
    except (PydanticSchemaGenerationError, PydanticSerializationError) as exc:
        raise SerializationError(f"encoding request payload failed: {exc}") from exc
    if body == NULL_BODY:
        return b""
    return body


def upstream_error(status_code: int, body: bytes) -> UpstreamError:
    """Build an UpstreamError from an error response body, falling back to the status line."""
    fallback = f"request failed with status {status_code} {httpx.codes.get_reason_phrase(status_code)}".rstrip()
    try:
        parsed = ErrorBody.model_validate_json(body)
    except ValidationError:
        return UpstreamError(status_code, fallback)

    message = parsed.message or parsed.description or parsed.error_description or parsed.error
    return UpstreamError(
        status_code,
        message or fallback,
        error_code=str(parsed.code) if parsed.code is not None else parsed.error,
        description=parsed.description or parsed.error_description,
        trace_id=parsed.trace_id,
    )


async def _close(response: httpx.Response) -> None:
    await response.aclose()


async def send(client: httpx.AsyncClient, request: httpx.Request, cancel: CancelToken) -> httpx.Response:
    """
    Send a request once and return the unread (streamed) response.

    Raises:
        CancellationError: If ``cancel`` fired before or during the exchange
        TransportError: If the exchange failed for any other reason
    """
    try:
        return await cancel.guard(client.send(request, stream=True), discard=_close)
    except httpx.HTTPError as exc:
        # The transport's own wording does not say whether it was cancelled.
        error = cancel.error
        if error is not None:
            raise error from exc
        raise TransportError(f"failed to send the request: {str(exc) or type(exc).__name__}") from exc


async def resolve_response(
    response: httpx.Response,
    into: type[T] | None = None,
    cancel: CancelToken | None = None,
) -> T | None:
    """
    Classify a response and decode its body.

    The body is read in full and the response closed on every path.

    Args:
        response: Response returned by ``send``
        into: Type to validate a JSON body as. None discards the body.
        cancel: Token observed while the body is read

    Returns:
        The decoded body, or None for an empty / ``{}`` body or when ``into`` is None

    Raises:
        UpstreamError: Status code 400 or above
        CancellationError: ``cancel`` fired before the body was read
        DecodeError: Success status but the body does not match ``into``
        TransportError: The body could not be read
    """
    cancel = cancel or CancelToken()
    try:
        body = await cancel.guard(response.aread())
    except httpx.HTTPError as exc:
        error = cancel.error
        if error is not None:
            raise error from exc
        raise TransportError(f"failed to read the response body: {str(exc) or type(exc).__name__}") from exc
    finally:
        await response.aclose()

    if response.status_code >= httpx.codes.BAD_REQUEST:
        raise upstream_error(response.status_code, body)

    if not body or body == EMPTY_OBJECT_BODY or into is None:
        return None

    try:
        return TypeAdapter(into).validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"failed to decode response payload: {exc}") from exc


class HTTPClient:
    """
    Tenant-scoped client for the Asgardeo management API.

    The base URL, tenant path and token are fixed at construction. A
    refreshed token means a new client. Instances hold no per-request
    state, so concurrent requests on one client are independent.
    """

    def __init__(
        self,
        base_url: str,
        tenant: str,
        token: str,
        *,
        base_path: str = DEFAULT_BASE_PATH,
        transport: httpx.AsyncBaseTransport | None = None,
        follow_redirects: bool = True,
    ) -> None:
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"invalid API base URL {base_url!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(f"invalid API base URL {base_url!r}")
        if not tenant:
            raise ConfigurationError("tenant name must not be empty")

        self._origin = f"{url.scheme}://{url.netloc.decode('ascii')}"
        self._base_path = base_path.format(tenant=quote(tenant, safe="")).strip("/")
        self._token = token
        # Deadlines come from the caller's CancelToken, never from httpx.
        self._client = httpx.AsyncClient(transport=transport, follow_redirects=follow_redirects, timeout=None)

    @classmethod
    def for_tenant(
        cls,
        config: "AppConfig",
        tenant: "Tenant",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HTTPClient":
        """Create a client from application.yaml and a stored tenant."""
        api = config.application.api
        return cls(
            api.base_url,
            tenant.name,
            tenant.access_token.get_secret_value(),
            base_path=api.base_path,
            transport=transport,
            follow_redirects=api.follow_redirects,
        )

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def token(self) -> str:
        return self._token

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    def uri(self, *segments: str) -> str:
        """
        Build an absolute URI under the tenant base path.

        Each segment is escaped as a single path segment, so
        ``uri("applications", "a/b")`` ends in ``applications/a%2Fb``.
        """
        escaped = [quote(segment, safe=_SEGMENT_SAFE) for segment in segments]
        return f"{self._origin}/{self._base_path}/" + "/".join(escaped)

    def new_request(
        self,
        method: Method | str,
        uri: str,
        payload: Any = None,
        *,
        cancel: CancelToken | None = None,
    ) -> APIRequest:
        """
        Build a request with a JSON-encoded payload.

        Raises:
            SerializationError: If the payload cannot be encoded
        """
        return APIRequest(
            method=method,
            uri=uri,
            content=encode_payload(payload),
            headers=(("Content-Type", JSON_CONTENT_TYPE),),
            cancel=cancel or CancelToken(),
        )

    async def do(self, request: APIRequest) -> httpx.Response:
        """
        Attach the bearer token and send the request once.

        Returns:
            The unread response; pass it to ``resolve``.

        Raises:
            CancellationError: The request's token fired
            TransportError: Any other network failure
        """
        headers = httpx.Headers(list(request.headers))
        headers["Authorization"] = f"Bearer {self._token}"
        outgoing = self._client.build_request(
            request.method.value,
            request.uri,
            content=request.content or None,
            headers=headers,
        )
        try:
            return await send(self._client, outgoing, request.cancel)
        except (CancellationError, TransportError) as exc:
            logger.error(
                "Failed to send the request",
                method=request.method.value,
                uri=request.uri,
                error=str(exc),
            )
            raise

    async def resolve(
        self,
        response: httpx.Response,
        into: type[T] | None = None,
        cancel: CancelToken | None = None,
    ) -> T | None:
        """Resolve a response from ``do``, logging error statuses."""
        try:
            return await resolve_response(response, into, cancel)
        except UpstreamError as exc:
            logger.error(
                "Received an error response from the server",
                method=response.request.method,
                uri=str(response.request.url),
                status_code=exc.status_code,
                error=exc.message,
            )
            raise

    async def request(
        self,
        method: Method | str,
        uri: str,
        payload: Any = None,
        *,
        into: type[T] | None = None,
        cancel: CancelToken | None = None,
    ) -> T | None:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            uri: Absolute URI, usually from ``uri()``
            payload: Request body, serialized to JSON
            into: Type to decode a successful body as
            cancel: Cancellation token for this call

        Returns:
            The decoded body, or None when there was nothing to decode
        """
        request = self.new_request(method, uri, payload, cancel=cancel)
        response = await self.do(request)
        return await self.resolve(response, into, request.cancel)
