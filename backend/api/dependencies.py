import httpx
from fastapi import Depends

from backend.core.http_client import get_http_client
from backend.services.project_service import GitHubProjectSource
from backend.services.project_service import GitLabProjectSource
from backend.settings import get_settings
from backend.settings import Settings


def get_github_source(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> GitHubProjectSource:
    return GitHubProjectSource.from_settings(settings, client)


def get_gitlab_source(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> GitLabProjectSource:
    return GitLabProjectSource.from_settings(settings, client)
