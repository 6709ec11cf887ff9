"""Pytest fixtures shared by client and API tests."""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
from fastapi import Depends, Request
from fastapi.testclient import TestClient

from oliver.api import deps
from oliver.main import create_app
from oliver.services.api_client import SESSION_COOKIES, ApiClient
from oliver.services.recommendation_api import RecommendationApi
from oliver.utils.cache import query_cache

BASE_URL = "http://backend.test/api/v1"
PREFIX = "/api/v1"
NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def iso(delta: timedelta, *, now: datetime = NOW) -> str:
    return (now + delta).isoformat().replace("+00:00", "Z")


def make_card(problem_id: int, *, state: str = "REVIEW", due_in: timedelta = timedelta(days=3), **overrides: Any) -> dict[str, Any]:
    """Backend-shaped review card, due ``due_in`` after :data:`NOW`."""

    card = {
        "id": problem_id * 10,
        "userId": 7,
        "problemId": problem_id,
        "problemTitle": f"Problem {problem_id}",
        "problemDifficulty": "MEDIUM",
        "state": state,
        "dueDate": iso(due_in),
        "reviewCount": 3,
        "lapses": 0,
        "overdue": False,
        "due": False,
    }
    card.update(overrides)
    return card


Handler = Callable[[httpx.Request], Any]


class FakeBackend:
    """Scripted stand-in for the FSRS backend behind an ``httpx.MockTransport``.

    Responses registered for a route are served in order; the last one keeps
    being served once the others are used up.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Handler]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status, content=content, headers=headers)
            return httpx.Response(status, json=json, headers=headers)

        self.add_handler(method, path, respond)

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes.setdefault((method, PREFIX + path), []).append(handler)

    def fail(self, method: str, path: str, error: type[httpx.RequestError] = httpx.ConnectError) -> None:
        def raise_error(request: httpx.Request) -> httpx.Response:
            raise error("connection refused", request=request)

        self.add_handler(method, path, raise_error)

    def handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == PREFIX + path
        ]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
async def api_client(backend: FakeBackend) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient(BASE_URL, transport=backend.transport, cookies={"ACCESS_TOKEN": "token-1"}) as client:
        yield client


@pytest.fixture(autouse=True)
def clear_session_state() -> Generator[None, None, None]:
    query_cache.clear()
    deps.session_registries.clear()
    try:
        yield
    finally:
        query_cache.clear()
        deps.session_registries.clear()


@pytest.fixture()
def client(backend: FakeBackend) -> Generator[TestClient, None, None]:
    app = create_app()

    async def override_get_api_client(request: Request) -> AsyncGenerator[ApiClient, None]:
        cookies = {name: request.cookies[name] for name in SESSION_COOKIES if name in request.cookies}
        async with ApiClient(BASE_URL, transport=backend.transport, cookies=cookies) as api_client:
            yield api_client

    def override_get_recommendation_api(
        api_client: ApiClient = Depends(deps.get_api_client),
    ) -> RecommendationApi:
        return RecommendationApi(api_client, cache=query_cache, retry_wait_seconds=0)

    app.dependency_overrides[deps.get_api_client] = override_get_api_client
    app.dependency_overrides[deps.get_recommendation_api] = override_get_recommendation_api
    app.dependency_overrides[deps.get_now] = lambda: NOW
    with TestClient(app) as test_client:
        yield test_client
