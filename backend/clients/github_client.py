from collections.abc import Mapping
from typing import Any

import httpx

from backend.clients.errors import MalformedPayloadError
from backend.clients.errors import MissingCredentialError


API_VERSION = "2022-11-28"

CONTRIBUTION_CALENDAR_QUERY = """
query($username: String!) {
  user(login: $username) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
            contributionLevel
          }
        }
      }
    }
  }
}
"""


def build_headers(token: str | None, user_agent: str) -> dict[str, str]:
    """Build REST headers, adding a Bearer token only when one is configured."""

    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": user_agent,
        "X-GitHub-Api-Version": API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def fetch_user_repos(
    client: httpx.AsyncClient,
    username: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
    per_page: int = 30,
) -> list[dict[str, Any]]:
    """Fetch repositories owned by a user, most recently pushed first."""

    response = await client.get(
        f"{api_base_url}/users/{username}/repos",
        params={"type": "owner", "sort": "pushed", "per_page": per_page},
        headers=dict(headers),
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, list):
        raise MalformedPayloadError("GitHub repository list is invalid")
    return [item for item in payload if isinstance(item, Mapping)]


async def fetch_repo(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
) -> dict[str, Any]:
    """Fetch a single repository record."""

    response = await client.get(
        f"{api_base_url}/repos/{owner}/{repo}", headers=dict(headers)
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("GitHub repository response is invalid")
    return dict(payload)


async def fetch_repo_languages(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    *,
    api_base_url: str,
    headers: Mapping[str, str],
) -> dict[str, int]:
    """Fetch the language -> byte count mapping of a repository."""

    response = await client.get(
        f"{api_base_url}/repos/{owner}/{repo}/languages", headers=dict(headers)
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("GitHub languages response is invalid")
    return {
        str(language): size
        for language, size in payload.items()
        if isinstance(size, int | float)
    }


async def fetch_contribution_calendar(
    client: httpx.AsyncClient,
    username: str,
    *,
    token: str | None,
    graphql_url: str,
    user_agent: str,
) -> dict[str, Any]:
    """Fetch the contribution calendar of a user from GitHub GraphQL API."""

    if not token:
        raise MissingCredentialError("GITHUB_TOKEN is required for GraphQL requests")

    response = await client.post(
        graphql_url,
        json={
            "query": CONTRIBUTION_CALENDAR_QUERY,
            "variables": {"username": username},
        },
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": user_agent,
        },
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("GitHub GraphQL response is invalid")

    if payload.get("errors"):
        raise MalformedPayloadError(f"GitHub GraphQL returned errors: {payload['errors']}")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise MalformedPayloadError("GitHub GraphQL data is missing")

    user = data.get("user")
    if not isinstance(user, Mapping):
        raise MalformedPayloadError("GitHub user not found")

    collection = user.get("contributionsCollection")
    if not isinstance(collection, Mapping):
        raise MalformedPayloadError("GitHub contributionsCollection is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise MalformedPayloadError("GitHub contributionCalendar is missing")

    if not isinstance(calendar.get("weeks"), list):
        raise MalformedPayloadError("GitHub contribution weeks are missing")

    return dict(calendar)
