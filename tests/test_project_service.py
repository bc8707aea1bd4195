import logging

import httpx
import pytest

from backend.api.schemas.projects import NO_DESCRIPTION
from backend.services.project_service import build_project
from backend.services.project_service import GitHubProjectSource
from backend.services.project_service import GitLabProjectSource
from backend.services.project_service import language_percentages


def github_repo(repo_id: int, name: str, **overrides) -> dict[str, object]:
    repo = {
        "id": repo_id,
        "name": name,
        "description": f"{name} description",
        "html_url": f"https://github.com/octocat/{name}",
        "homepage": "",
        "topics": ["python", "cli"],
        "stargazers_count": 3,
        "forks_count": 1,
        "fork": False,
        "archived": False,
    }
    repo.update(overrides)
    return repo


def gitlab_project(project_id: int, name: str, **overrides) -> dict[str, object]:
    project = {
        "id": project_id,
        "name": name,
        "description": None,
        "web_url": f"https://gitlab.com/octocat/{name}",
        "topics": ["go"],
        "star_count": 4,
        "forks_count": 0,
        "visibility": "public",
        "last_activity_at": "2026-02-19T10:00:00Z",
    }
    project.update(overrides)
    return project


def test_language_percentages_from_byte_counts() -> None:
    assert language_percentages({"A": 300, "B": 700}, precomputed=False) == {
        "A": 30,
        "B": 70,
    }


def test_language_percentages_round_halves_up() -> None:
    result = language_percentages({"A": 1, "B": 7}, precomputed=False)

    assert result == {"A": 13, "B": 88}


def test_language_percentages_pass_through_precomputed_values() -> None:
    raw = {"Go": 62.5, "Shell": 37.5}

    assert language_percentages(raw, precomputed=True) == raw


def test_language_percentages_empty_total() -> None:
    assert language_percentages({}, precomputed=False) == {}
    assert language_percentages({"A": 0}, precomputed=False) == {}


def test_build_project_applies_fallbacks() -> None:
    project = build_project(
        project_id=42,
        name="demo",
        canonical_url="https://github.com/octocat/demo",
        description="",
        topics=["a", "b", "a"],
        homepage_url="",
    )

    assert project.id == "42"
    assert project.description == NO_DESCRIPTION
    assert project.topics == ["a", "b"]
    assert project.homepage_url is None
    assert project.languages == {}
    assert project.featured is False


@pytest.mark.anyio
async def test_github_list_filters_caps_and_keeps_order(fake_api) -> None:
    repos = [
        github_repo(1, "first"),
        github_repo(2, "forked", fork=True),
        github_repo(3, "old", archived=True),
        github_repo(4, "second", homepage="https://second.dev"),
        github_repo(5, "third"),
    ]
    api = fake_api(
        {
            "/users/octocat/repos": (200, repos),
            "/repos/octocat/first/languages": (200, {"Python": 300, "Shell": 700}),
            "/repos/octocat/second/languages": (200, {"Rust": 10}),
        },
        delays={"/repos/octocat/first/languages": 0.05},
    )
    source = GitHubProjectSource(api.client(), max_projects=2)

    projects = await source.list_projects("octocat")

    assert [project.name for project in projects] == ["first", "second"]
    assert projects[0].languages == {"Python": 30, "Shell": 70}
    assert projects[1].languages == {"Rust": 100}
    assert projects[1].homepage_url == "https://second.dev"
    assert projects[0].canonical_url == "https://github.com/octocat/first"
    assert "/repos/octocat/third/languages" not in api.paths()

    list_request = api.requests[0]
    assert list_request.url.params["sort"] == "pushed"
    assert list_request.url.params["per_page"] == "30"
    assert "Authorization" not in list_request.headers


@pytest.mark.anyio
async def test_github_failed_language_lookup_degrades_one_project(fake_api) -> None:
    api = fake_api(
        {
            "/users/octocat/repos": (
                200,
                [github_repo(1, "alpha"), github_repo(2, "beta"), github_repo(3, "gamma")],
            ),
            "/repos/octocat/alpha/languages": (200, {"Python": 1}),
            "/repos/octocat/beta/languages": httpx.ConnectError,
            "/repos/octocat/gamma/languages": (200, {"Go": 5}),
        },
        delays={"/repos/octocat/alpha/languages": 0.05},
    )
    source = GitHubProjectSource(api.client())

    projects = await source.list_projects("octocat")

    assert [project.name for project in projects] == ["alpha", "beta", "gamma"]
    assert projects[0].languages == {"Python": 100}
    assert projects[1].languages == {}
    assert projects[2].languages == {"Go": 100}


@pytest.mark.anyio
async def test_github_list_returns_empty_on_error_status(
    fake_api, caplog: pytest.LogCaptureFixture
) -> None:
    api = fake_api({"/users/octocat/repos": (500, {"message": "boom"})})
    source = GitHubProjectSource(api.client(), token="ghp_test")

    with caplog.at_level(logging.ERROR):
        projects = await source.list_projects("octocat")

    assert projects == []
    assert api.requests[0].headers["Authorization"] == "Bearer ghp_test"
    assert "GitHub repositories for octocat failed (status)" in caplog.text


@pytest.mark.anyio
async def test_github_list_skips_records_missing_fields(fake_api) -> None:
    api = fake_api(
        {
            "/users/octocat/repos": (
                200,
                [{"id": 9, "name": "broken"}, github_repo(1, "ok")],
            ),
        }
    )
    source = GitHubProjectSource(api.client())

    projects = await source.list_projects("octocat")

    assert [project.name for project in projects] == ["ok"]
    assert projects[0].languages == {}


@pytest.mark.anyio
async def test_github_get_project(fake_api) -> None:
    api = fake_api(
        {
            "/repos/octocat/demo": (200, github_repo(7, "demo", description=None)),
            "/repos/octocat/demo/languages": (200, {"TypeScript": 1, "CSS": 1}),
        }
    )
    source = GitHubProjectSource(api.client())

    project = await source.get_project("octocat", "demo")

    assert project is not None
    assert project.id == "7"
    assert project.description == NO_DESCRIPTION
    assert project.languages == {"TypeScript": 50, "CSS": 50}
    assert project.star_count == 3
    assert project.fork_count == 1


@pytest.mark.anyio
async def test_github_get_project_missing_returns_none(fake_api) -> None:
    api = fake_api({})
    source = GitHubProjectSource(api.client())

    assert await source.get_project("octocat", "nope") is None


@pytest.mark.anyio
async def test_github_list_returns_empty_on_transport_error(fake_api) -> None:
    api = fake_api({"/users/octocat/repos": httpx.ConnectTimeout})
    source = GitHubProjectSource(api.client())

    assert await source.list_projects("octocat") == []


@pytest.mark.anyio
async def test_gitlab_list_passes_percentages_through(fake_api) -> None:
    api = fake_api(
        {
            "/api/v4/users/octocat/projects": (
                200,
                [gitlab_project(11, "one"), gitlab_project(12, "two")],
            ),
            "/api/v4/projects/11/languages": (200, {"Go": 62.5, "Shell": 37.5}),
            "/api/v4/projects/12/languages": (503, {"message": "unavailable"}),
        },
        delays={"/api/v4/projects/11/languages": 0.05},
    )
    source = GitLabProjectSource(api.client(), token="glpat-test")

    projects = await source.list_projects("octocat")

    assert [project.name for project in projects] == ["one", "two"]
    assert projects[0].languages == {"Go": 62.5, "Shell": 37.5}
    assert projects[1].languages == {}
    assert projects[0].description == NO_DESCRIPTION
    assert projects[0].homepage_url is None
    assert projects[0].canonical_url == "https://gitlab.com/octocat/one"
    assert projects[0].star_count == 4

    list_request = api.requests[0]
    assert list_request.headers["PRIVATE-TOKEN"] == "glpat-test"
    assert list_request.url.params["visibility"] == "public"
    assert list_request.url.params["order_by"] == "updated_at"


@pytest.mark.anyio
async def test_gitlab_list_returns_empty_on_error(fake_api) -> None:
    api = fake_api({"/api/v4/users/octocat/projects": (404, {"message": "404 User Not Found"})})
    source = GitLabProjectSource(api.client())

    assert await source.list_projects("octocat") == []
    assert "PRIVATE-TOKEN" not in api.requests[0].headers


@pytest.mark.anyio
async def test_gitlab_get_project_by_numeric_id(fake_api) -> None:
    api = fake_api(
        {
            "/api/v4/projects/11": (200, gitlab_project(11, "one", description="CLI")),
            "/api/v4/projects/11/languages": (200, {"Go": 100.0}),
        }
    )
    source = GitLabProjectSource(api.client())

    project = await source.get_project("octocat", "11")

    assert project is not None
    assert project.description == "CLI"
    assert project.languages == {"Go": 100.0}


@pytest.mark.anyio
async def test_gitlab_get_project_by_path_encodes_namespace(fake_api) -> None:
    api = fake_api(
        {
            "/api/v4/projects/octocat/dotfiles": (200, gitlab_project(15, "dotfiles")),
            "/api/v4/projects/15/languages": (200, {}),
        }
    )
    source = GitLabProjectSource(api.client())

    project = await source.get_project("octocat", "dotfiles")

    assert project is not None
    assert project.id == "15"
    assert b"/projects/octocat%2Fdotfiles" in api.requests[0].url.raw_path


def test_gitlab_project_ref() -> None:
    assert GitLabProjectSource.project_ref("octocat", "42") == "42"
    assert GitLabProjectSource.project_ref("octocat", "my repo") == "octocat%2Fmy%20repo"
