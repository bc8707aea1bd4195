import asyncio

import httpx
from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException

from backend.api.dependencies import get_github_source
from backend.api.dependencies import get_gitlab_source
from backend.api.schemas.contributions import ContributionStats
from backend.api.schemas.projects import PortfolioResponse
from backend.api.schemas.projects import Project
from backend.core.http_client import get_http_client
from backend.services.contribution_service import get_contribution_stats
from backend.services.project_service import GitHubProjectSource
from backend.services.project_service import GitLabProjectSource
from backend.settings import get_settings
from backend.settings import Settings


router = APIRouter()


async def _no_projects() -> list[Project]:
    return []


async def _no_stats() -> None:
    return None


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/projects/github/{owner}")
async def list_github_projects(
    owner: str, source: GitHubProjectSource = Depends(get_github_source)
) -> list[Project]:
    """Return the owner's recent GitHub repositories, forks and archives excluded."""

    return await source.list_projects(owner)


@router.get("/projects/github/{owner}/{repo}")
async def get_github_project(
    owner: str, repo: str, source: GitHubProjectSource = Depends(get_github_source)
) -> Project:
    project = await source.get_project(owner, repo)
    if project is None:
        raise HTTPException(status_code=404, detail="project not found")
    return project


@router.get("/projects/gitlab/{owner}")
async def list_gitlab_projects(
    owner: str, source: GitLabProjectSource = Depends(get_gitlab_source)
) -> list[Project]:
    """Return the owner's public GitLab projects."""

    return await source.list_projects(owner)


@router.get("/projects/gitlab/{owner}/{project}")
async def get_gitlab_project(
    owner: str, project: str, source: GitLabProjectSource = Depends(get_gitlab_source)
) -> Project:
    found = await source.get_project(owner, project)
    if found is None:
        raise HTTPException(status_code=404, detail="project not found")
    return found


@router.get("/contributions/{username}")
async def get_contributions(
    username: str,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ContributionStats | None:
    """Return contribution stats, or null when they are unavailable."""

    return await get_contribution_stats(
        username,
        client=client,
        token=settings.github_token,
        graphql_url=settings.github_graphql_url,
        user_agent=settings.user_agent,
    )


@router.get("/portfolio")
async def get_portfolio(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    github: GitHubProjectSource = Depends(get_github_source),
    gitlab: GitLabProjectSource = Depends(get_gitlab_source),
) -> PortfolioResponse:
    """Return projects and stats for the usernames configured for the site."""

    github_user = settings.portfolio_github_username
    gitlab_user = settings.portfolio_gitlab_username

    github_projects, gitlab_projects, contributions = await asyncio.gather(
        github.list_projects(github_user) if github_user else _no_projects(),
        gitlab.list_projects(gitlab_user) if gitlab_user else _no_projects(),
        get_contribution_stats(
            github_user,
            client=client,
            token=settings.github_token,
            graphql_url=settings.github_graphql_url,
            user_agent=settings.user_agent,
        )
        if github_user
        else _no_stats(),
    )
    return PortfolioResponse(
        projects=[*github_projects, *gitlab_projects],
        contributions=contributions,
    )
