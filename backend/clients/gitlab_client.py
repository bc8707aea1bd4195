from collections.abc import Mapping
from typing import Any

import httpx

from backend.clients.errors import MalformedPayloadError


def build_headers(token: str | None) -> dict[str, str]:
    """Build GitLab headers, adding PRIVATE-TOKEN only when one is configured."""

    headers = {"Accept": "application/json"}
    if token:
        headers["PRIVATE-TOKEN"] = token
    return headers


async def fetch_user_projects(
    client: httpx.AsyncClient,
    username: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
    per_page: int = 20,
) -> list[dict[str, Any]]:
    """Fetch public projects of a user, most recently active first."""

    response = await client.get(
        f"{api_base_url}/users/{username}/projects",
        params={
            "visibility": "public",
            "order_by": "updated_at",
            "per_page": per_page,
        },
        headers=dict(headers),
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, list):
        raise MalformedPayloadError("GitLab project list is invalid")
    return [item for item in payload if isinstance(item, Mapping)]


async def fetch_project(
    client: httpx.AsyncClient,
    project_ref: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
) -> dict[str, Any]:
    """Fetch one project by numeric id or URL-encoded `namespace%2Fname` path."""

    response = await client.get(
        f"{api_base_url}/projects/{project_ref}", headers=dict(headers)
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("GitLab project response is invalid")
    return dict(payload)


async def fetch_project_languages(
    client: httpx.AsyncClient,
    project_ref: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
) -> dict[str, float]:
    """Fetch the language -> percentage mapping GitLab computes for a project."""

    response = await client.get(
        f"{api_base_url}/projects/{project_ref}/languages", headers=dict(headers)
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("GitLab languages response is invalid")
    return {
        str(language): share
        for language, share in payload.items()
        if isinstance(share, int | float)
    }
