"""Unit tests for the applications resource."""

import json

import httpx
import pytest

from asgardeo_cli.api.applications import ApplicationCreate, ApplicationList, ApplicationsAPI
from asgardeo_cli.api.client import HTTPClient
from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.exceptions import CancellationError, DecodeError, UpstreamError

RESOURCE_URL = "https://api.asgardeo.io/t/acme/api/server/v1/applications"

LIST_BODY = {
    "totalResults": 2,
    "startIndex": 1,
    "count": 2,
    "applications": [
        {"id": "app-1", "name": "portal", "clientId": "c-1", "self": "/applications/app-1"},
        {"id": "app-2", "name": "admin", "description": "Back office"},
    ],
}


def make_api(recorder, cancel: CancelToken | None = None) -> ApplicationsAPI:
    client = HTTPClient("https://api.asgardeo.io", "acme", "token-abc", transport=recorder.transport)
    return ApplicationsAPI(client, cancel)


class TestList:
    """Tests for listing applications."""

    @pytest.mark.asyncio
    async def test_list_decodes_applications(self, recorder) -> None:
        """Test the list body is decoded with its aliases."""
        recorder.handler = lambda request: httpx.Response(200, json=LIST_BODY)

        result = await make_api(recorder).list()

        assert result.total_results == 2
        assert [app.name for app in result.applications] == ["portal", "admin"]
        assert result.applications[0].client_id == "c-1"
        assert result.applications[0].self_url == "/applications/app-1"
        assert str(recorder.requests[0].url) == RESOURCE_URL

    @pytest.mark.asyncio
    async def test_list_sends_query_parameters(self, recorder) -> None:
        """Test paging and filter options become query parameters."""
        recorder.handler = lambda request: httpx.Response(200, json=LIST_BODY)

        await make_api(recorder).list(limit=10, offset=20, filter="name co web")

        params = recorder.requests[0].url.params
        assert params["limit"] == "10"
        assert params["offset"] == "20"
        assert params["filter"] == "name co web"

    @pytest.mark.asyncio
    async def test_empty_list_body(self, recorder) -> None:
        """Test an empty object body yields an empty list."""
        recorder.handler = lambda request: httpx.Response(200, content=b"{}")

        assert await make_api(recorder).list() == ApplicationList()


class TestGet:
    """Tests for fetching one application."""

    @pytest.mark.asyncio
    async def test_get_escapes_id(self, recorder) -> None:
        """Test an id containing a slash stays one path segment."""
        recorder.handler = lambda request: httpx.Response(
            200, json={"id": "a/b", "name": "portal", "templateId": "tmpl", "isManagementApp": False}
        )

        application = await make_api(recorder).get("a/b")

        assert recorder.requests[0].url.raw_path == b"/t/acme/api/server/v1/applications/a%2Fb"
        assert application.template_id == "tmpl"
        assert application.is_management_app is False

    @pytest.mark.asyncio
    async def test_get_not_found(self, recorder) -> None:
        """Test a 404 surfaces the server's message."""
        recorder.handler = lambda request: httpx.Response(
            404, json={"code": "APP-60006", "message": "Application not found."}
        )

        with pytest.raises(UpstreamError) as exc_info:
            await make_api(recorder).get("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Application not found."

    @pytest.mark.asyncio
    async def test_get_empty_body(self, recorder) -> None:
        """Test an empty body for a single resource is a decode error."""
        recorder.handler = lambda request: httpx.Response(200, content=b"{}")

        with pytest.raises(DecodeError):
            await make_api(recorder).get("app-1")


class TestCreateAndDelete:
    """Tests for mutating operations."""

    @pytest.mark.asyncio
    async def test_create_posts_json(self, recorder) -> None:
        """Test create sends the application as a JSON body."""
        recorder.handler = lambda request: httpx.Response(201, headers={"Location": RESOURCE_URL + "/new"})

        await make_api(recorder).create(ApplicationCreate(name="portal", description="Customer portal"))

        sent = recorder.requests[0]
        assert sent.method == "POST"
        assert str(sent.url) == RESOURCE_URL
        assert json.loads(sent.content) == {"name": "portal", "description": "Customer portal"}

    @pytest.mark.asyncio
    async def test_delete(self, recorder) -> None:
        """Test delete targets the application's URI."""
        await make_api(recorder).delete("app-1")

        sent = recorder.requests[0]
        assert sent.method == "DELETE"
        assert str(sent.url) == RESOURCE_URL + "/app-1"

    @pytest.mark.asyncio
    async def test_uses_shared_cancel_token(self, recorder) -> None:
        """Test operations observe the token given to the API object."""
        token = CancelToken()
        token.cancel()

        with pytest.raises(CancellationError):
            await make_api(recorder, token).delete("app-1")

        assert recorder.requests == []
