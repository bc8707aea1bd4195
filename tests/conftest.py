import asyncio
from typing import Any

import httpx
import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeAPI:
    """In-memory remote API keyed by request path.

    A route maps to `(status, json_body)` or to an `httpx.RequestError`
    subclass, which is raised as a transport failure.
    """

    def __init__(
        self,
        routes: dict[str, Any],
        delays: dict[str, float] | None = None,
    ) -> None:
        self.routes = routes
        self.delays = delays or {}
        self.requests: list[httpx.Request] = []
        self._client: httpx.AsyncClient | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.delays:
            await asyncio.sleep(self.delays[path])

        result = self.routes.get(path)
        if result is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(result, type) and issubclass(result, httpx.RequestError):
            raise result("connection failed", request=request)

        status, body = result
        return httpx.Response(status, json=body)

    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=httpx.MockTransport(self.handler)
            )
        return self._client

    def close(self) -> None:
        if self._client is None or self._client.is_closed:
            return
        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(self._client.aclose())
        finally:
            loop.close()

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def fake_api():
    created: list[FakeAPI] = []

    def make(routes: dict[str, Any], delays: dict[str, float] | None = None) -> FakeAPI:
        api = FakeAPI(routes, delays)
        created.append(api)
        return api

    yield make

    for api in created:
        api.close()


def graphql_calendar(total: int, weeks: list[list[tuple[str, int]]]) -> dict[str, Any]:
    return {
        "data": {
            "user": {
                "contributionsCollection": {
                    "contributionCalendar": {
                        "totalContributions": total,
                        "weeks": [
                            {
                                "contributionDays": [
                                    {
                                        "date": day,
                                        "contributionCount": count,
                                        "contributionLevel": (
                                            "FIRST_QUARTILE" if count else "NONE"
                                        ),
                                    }
                                    for day, count in week
                                ]
                            }
                            for week in weeks
                        ],
                    }
                }
            }
        }
    }


@pytest.fixture
def calendar_payload():
    return graphql_calendar
