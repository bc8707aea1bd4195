import asyncio
import logging
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Protocol
from urllib.parse import quote

import httpx

from backend.api.schemas.projects import NO_DESCRIPTION
from backend.api.schemas.projects import Project
from backend.clients import github_client
from backend.clients import gitlab_client
from backend.services.outcome import capture
from backend.services.outcome import log_failure
from backend.services.rounding import round_percent
from backend.settings import Settings


logger = logging.getLogger(__name__)


class ProjectSource(Protocol):
    """Read access to the public projects of one code-hosting service."""

    async def list_projects(self, owner: str) -> list[Project]: ...

    async def get_project(self, owner: str, project: str) -> Project | None: ...


def language_percentages(
    raw: Mapping[str, int | float], *, precomputed: bool
) -> dict[str, int | float]:
    """Normalize a language breakdown to percentages.

    With `precomputed` the values already are percentages and pass through
    unchanged; otherwise they are byte counts rounded to whole percentages.
    """

    if precomputed:
        return dict(raw)

    total = sum(raw.values())
    if total <= 0:
        return {}
    return {language: round_percent(size, total) for language, size in raw.items()}


def build_project(
    *,
    project_id: Any,
    name: str,
    canonical_url: str,
    description: str | None = None,
    topics: Iterable[str] | None = None,
    languages: Mapping[str, int | float] | None = None,
    star_count: int | None = None,
    fork_count: int | None = None,
    homepage_url: str | None = None,
) -> Project:
    return Project(
        id=str(project_id),
        name=name,
        description=description or NO_DESCRIPTION,
        topics=list(dict.fromkeys(topics or [])),
        languages=dict(languages or {}),
        star_count=star_count or 0,
        fork_count=fork_count or 0,
        canonical_url=canonical_url,
        homepage_url=homepage_url or None,
    )


def has_fields(record: Mapping[str, Any], *fields: str) -> bool:
    return all(record.get(field) not in (None, "") for field in fields)


def collect_projects(results: Iterable[Project | BaseException], source: str) -> list[Project]:
    """Keep normalized projects in order, logging the ones that failed."""

    projects = []
    for result in results:
        if isinstance(result, BaseException):
            logger.error("Skipping %s project that failed to normalize: %s", source, result)
            continue
        projects.append(result)
    return projects


class GitHubProjectSource:
    """Public repositories of a GitHub user."""

    required_fields = ("id", "name", "html_url")

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        token: str | None = None,
        api_base_url: str = "https://api.github.com",
        user_agent: str = "portfolio-feed",
        max_projects: int = 12,
        page_size: int = 30,
    ) -> None:
        self.client = client
        self.api_base_url = api_base_url.rstrip("/")
        self.max_projects = max_projects
        self.page_size = page_size
        self.headers = github_client.build_headers(token, user_agent)

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient
    ) -> "GitHubProjectSource":
        return cls(
            client,
            token=settings.github_token,
            api_base_url=settings.github_api_base_url,
            user_agent=settings.user_agent,
            max_projects=settings.github_max_projects,
            page_size=settings.github_page_size,
        )

    async def languages(self, owner: str, repo: str) -> dict[str, int | float]:
        outcome = await capture(
            github_client.fetch_repo_languages(
                self.client,
                owner,
                repo,
                api_base_url=self.api_base_url,
                headers=self.headers,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitHub languages for {owner}/{repo}", outcome)
        return language_percentages(outcome.unwrap_or({}), precomputed=False)

    async def normalize(self, owner: str, record: Mapping[str, Any]) -> Project:
        return build_project(
            project_id=record["id"],
            name=record["name"],
            canonical_url=record["html_url"],
            description=record.get("description"),
            topics=record.get("topics"),
            languages=await self.languages(owner, record["name"]),
            star_count=record.get("stargazers_count"),
            fork_count=record.get("forks_count"),
            homepage_url=record.get("homepage"),
        )

    async def list_projects(self, owner: str) -> list[Project]:
        """List the owner's most recently pushed non-fork, non-archived repos."""

        outcome = await capture(
            github_client.fetch_user_repos(
                self.client,
                owner,
                api_base_url=self.api_base_url,
                headers=self.headers,
                per_page=self.page_size,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitHub repositories for {owner}", outcome)
            return []

        records = []
        for record in outcome.value:
            if record.get("fork") or record.get("archived"):
                continue
            if not has_fields(record, *self.required_fields):
                logger.warning("Skipping GitHub repository with missing fields: %r", record)
                continue
            records.append(record)

        results = await asyncio.gather(
            *(self.normalize(owner, record) for record in records[: self.max_projects]),
            return_exceptions=True,
        )
        return collect_projects(results, "GitHub")

    async def get_project(self, owner: str, project: str) -> Project | None:
        outcome = await capture(
            github_client.fetch_repo(
                self.client,
                owner,
                project,
                api_base_url=self.api_base_url,
                headers=self.headers,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitHub repository {owner}/{project}", outcome)
            return None

        record = outcome.value
        if not has_fields(record, *self.required_fields):
            logger.error("GitHub repository %s/%s is missing fields", owner, project)
            return None

        normalized = await capture(self.normalize(owner, record))
        log_failure(logger, f"Normalizing GitHub repository {owner}/{project}", normalized)
        return normalized.value


class GitLabProjectSource:
    """Public projects of a GitLab user."""

    required_fields = ("id", "name", "web_url")

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        token: str | None = None,
        api_base_url: str = "https://gitlab.com/api/v4",
        page_size: int = 20,
    ) -> None:
        self.client = client
        self.api_base_url = api_base_url.rstrip("/")
        self.page_size = page_size
        self.headers = gitlab_client.build_headers(token)

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient
    ) -> "GitLabProjectSource":
        return cls(
            client,
            token=settings.gitlab_token,
            api_base_url=settings.gitlab_api_base_url,
            page_size=settings.gitlab_page_size,
        )

    @staticmethod
    def project_ref(owner: str, project: str) -> str:
        """Numeric ids are used as-is, names become an encoded `owner/name` path."""

        if project.isdigit():
            return project
        return quote(f"{owner}/{project}", safe="")

    async def languages(self, project_ref: str) -> dict[str, int | float]:
        outcome = await capture(
            gitlab_client.fetch_project_languages(
                self.client,
                project_ref,
                api_base_url=self.api_base_url,
                headers=self.headers,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitLab languages for project {project_ref}", outcome)
        return language_percentages(outcome.unwrap_or({}), precomputed=True)

    async def normalize(self, record: Mapping[str, Any]) -> Project:
        return build_project(
            project_id=record["id"],
            name=record["name"],
            canonical_url=record["web_url"],
            description=record.get("description"),
            topics=record.get("topics"),
            languages=await self.languages(str(record["id"])),
            star_count=record.get("star_count"),
            fork_count=record.get("forks_count"),
        )

    async def list_projects(self, owner: str) -> list[Project]:
        """List the owner's public projects, most recently active first."""

        outcome = await capture(
            gitlab_client.fetch_user_projects(
                self.client,
                owner,
                api_base_url=self.api_base_url,
                headers=self.headers,
                per_page=self.page_size,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitLab projects for {owner}", outcome)
            return []

        records = []
        for record in outcome.value:
            if not has_fields(record, *self.required_fields):
                logger.warning("Skipping GitLab project with missing fields: %r", record)
                continue
            records.append(record)

        results = await asyncio.gather(
            *(self.normalize(record) for record in records), return_exceptions=True
        )
        return collect_projects(results, "GitLab")

    async def get_project(self, owner: str, project: str) -> Project | None:
        project_ref = self.project_ref(owner, project)
        outcome = await capture(
            gitlab_client.fetch_project(
                self.client,
                project_ref,
                api_base_url=self.api_base_url,
                headers=self.headers,
            )
        )
        if not outcome.ok:
            log_failure(logger, f"GitLab project {project_ref}", outcome)
            return None

        record = outcome.value
        if not has_fields(record, *self.required_fields):
            logger.error("GitLab project %s is missing fields", project_ref)
            return None

        normalized = await capture(self.normalize(record))
        log_failure(logger, f"Normalizing GitLab project {project_ref}", normalized)
        return normalized.value
