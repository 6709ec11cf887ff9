"""Shared API dependencies."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from fastapi import Depends, Request

from oliver.services.api_client import SESSION_COOKIES, ApiClient
from oliver.services.leaderboard_api import LeaderboardApi
from oliver.services.recommendation_api import RecommendationApi
from oliver.services.review_api import ReviewApi
from oliver.utils.cache import query_cache
from oliver.utils.registry import RecommendedProblemRegistry, SessionRegistries

session_registries = SessionRegistries()


async def get_api_client(request: Request) -> AsyncGenerator[ApiClient, None]:
    """Yield a backend client carrying the caller's session cookies."""

    cookies = {name: request.cookies[name] for name in SESSION_COOKIES if name in request.cookies}
    async with ApiClient(cookies=cookies) as client:
        yield client


def get_review_api(client: ApiClient = Depends(get_api_client)) -> ReviewApi:
    return ReviewApi(client)


def get_recommendation_api(client: ApiClient = Depends(get_api_client)) -> RecommendationApi:
    return RecommendationApi(client, cache=query_cache)


def get_leaderboard_api(client: ApiClient = Depends(get_api_client)) -> LeaderboardApi:
    return LeaderboardApi(client)


def get_registry(request: Request) -> RecommendedProblemRegistry:
    """Return the recommended-problem registry of the caller's session.

    Sessions are identified by the ``ACCESS_TOKEN`` cookie; a new token
    starts from an empty registry.
    """

    return session_registries.for_session(request.cookies.get("ACCESS_TOKEN"))


def get_now() -> datetime:
    return datetime.now(timezone.utc)
