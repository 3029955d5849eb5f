"""
Applications API.

Typed access to the tenant's applications resource
(t/<tenant>/api/server/v1/applications).
"""

import httpx
from pydantic import BaseModel, ConfigDict, Field

from asgardeo_cli.api.client import HTTPClient
from asgardeo_cli.core.cancellation import CancelToken
from asgardeo_cli.core.exceptions import DecodeError

RESOURCE = "applications"


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApplicationSummary(_ApiModel):
    id: str
    name: str
    description: str | None = None
    client_id: str | None = Field(default=None, alias="clientId")
    access_url: str | None = Field(default=None, alias="accessUrl")
    self_url: str | None = Field(default=None, alias="self")


class Application(ApplicationSummary):
    image_url: str | None = Field(default=None, alias="imageUrl")
    template_id: str | None = Field(default=None, alias="templateId")
    issuer: str | None = None
    is_management_app: bool | None = Field(default=None, alias="isManagementApp")


class ApplicationList(_ApiModel):
    total_results: int = Field(default=0, alias="totalResults")
    start_index: int = Field(default=1, alias="startIndex")
    count: int = 0
    applications: list[ApplicationSummary] = Field(default_factory=list)


class ApplicationCreate(_ApiModel):
    name: str
    description: str | None = None
    template_id: str | None = Field(default=None, alias="templateId")


class ApplicationsAPI:
    """Application operations for one tenant, sharing one cancel token."""

    def __init__(self, client: HTTPClient, cancel: CancelToken | None = None) -> None:
        self._client = client
        self._cancel = cancel

    async def list(
        self,
        limit: int | None = None,
        offset: int | None = None,
        filter: str | None = None,
    ) -> ApplicationList:
        params = {
            key: value
            for key, value in (("limit", limit), ("offset", offset), ("filter", filter))
            if value is not None
        }
        uri = self._client.uri(RESOURCE)
        if params:
            uri = f"{uri}?{httpx.QueryParams(params)}"
        result = await self._client.request("GET", uri, into=ApplicationList, cancel=self._cancel)
        return result or ApplicationList()

    async def get(self, app_id: str) -> Application:
        uri = self._client.uri(RESOURCE, app_id)
        result = await self._client.request("GET", uri, into=Application, cancel=self._cancel)
        if result is None:
            raise DecodeError(f"empty response for application {app_id}")
        return result

    async def create(self, application: ApplicationCreate) -> None:
        # The server answers 201 with an empty body and a Location header.
        await self._client.request("POST", self._client.uri(RESOURCE), application, cancel=self._cancel)

    async def delete(self, app_id: str) -> None:
        await self._client.request("DELETE", self._client.uri(RESOURCE, app_id), cancel=self._cancel)
