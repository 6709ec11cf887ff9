"""AI recommendation endpoints with header capture for telemetry."""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed

from oliver.core.pagination import FIRST_PAGE, PageParam
from oliver.schemas.recommendation import (
    FeedbackAction,
    FeedbackRequest,
    FeedbackResponse,
    RecommendationHeaders,
    RecommendationPage,
    RecommendationQuery,
    RecommendationResponse,
    RecommendationSource,
)
from oliver.services.api_client import ApiClient
from oliver.utils.cache import DEFAULT_TTL_SECONDS, QueryCache, build_cache_key
from oliver.utils.exceptions import ApiError

RECOMMENDATIONS_ENDPOINT = "/ai/recommendations"
CACHE_NAMESPACE = "ai-recommendations"


def map_rec_source(backend_source: str | None) -> RecommendationSource:
    """Normalise the ``X-Rec-Source`` header; unknown values mean ``DEFAULT``."""

    if not backend_source:
        return "DEFAULT"
    upper = backend_source.upper()
    if upper in ("LLM", "AI"):
        return "LLM"
    if upper == "FSRS":
        return "FSRS"
    if upper == "HYBRID":
        return "HYBRID"
    return "DEFAULT"


def extract_headers(headers: httpx.Headers) -> RecommendationHeaders:
    return RecommendationHeaders(
        trace_id=headers.get("X-Trace-Id") or "",
        rec_source=map_rec_source(headers.get("X-Rec-Source")),
        cache_hit=headers.get("X-Cache-Hit") == "true",
        provider_chain=headers.get("X-Provider-Chain") or None,
    )


def generate_recommendation_id(trace_id: str, problem_id: int) -> str:
    """Correlation id tying feedback back to the response that produced it."""

    return f"{trace_id}:{problem_id}"


def build_query_params(query: RecommendationQuery, page_param: PageParam = FIRST_PAGE) -> list[tuple[str, Any]]:
    params: list[tuple[str, Any]] = []
    if query.limit:
        params.append(("limit", query.limit))
    if query.difficulty:
        params.append(("difficulty", query.difficulty))
    for domain in query.domains or []:
        params.append(("domains", domain))
    if query.recommendation_type:
        params.append(("recommendation_type", query.recommendation_type))
    if query.ab_group:
        params.append(("ab_group", query.ab_group))
    if query.force_refresh:
        params.append(("forceRefresh", "true"))
    params.extend(page_param.as_query().items())
    return params


def _log_retry(state: RetryCallState) -> None:
    logger.warning("Retrying recommendation fetch", attempt=state.attempt_number)


class RecommendationApi:
    """Fetch recommendation pages and post feedback.

    Page fetches are retried once before the error surfaces and, when a
    cache is supplied, reused for the cache TTL unless ``force_refresh`` is
    set. Feedback is never retried.
    """

    def __init__(
        self,
        client: ApiClient,
        *,
        cache: QueryCache | None = None,
        cache_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_attempts: int = 2,
        retry_wait_seconds: float = 1.0,
    ) -> None:
        self.client = client
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_attempts = max_attempts
        self.retry_wait_seconds = retry_wait_seconds

    async def _fetch(self, params: list[tuple[str, Any]]) -> RecommendationPage:
        response = await self.client.request_with_headers("GET", RECOMMENDATIONS_ENDPOINT, params=params)
        data = RecommendationResponse.model_validate(response.body or {})
        headers = extract_headers(response.headers)
        logger.info(
            "Recommendations fetched",
            items=len(data.items),
            trace_id=headers.trace_id or data.meta.trace_id,
            source=headers.rec_source,
            cache_hit=headers.cache_hit,
        )
        return RecommendationPage(data=data, headers=headers)

    async def _fetch_with_retry(self, params: list[tuple[str, Any]]) -> RecommendationPage:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait_seconds),
            retry=retry_if_exception_type(ApiError),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                return await self._fetch(params)
        raise RuntimeError("retry loop exited without a result")

    async def get_recommendations(
        self,
        query: RecommendationQuery | None = None,
        page_param: PageParam = FIRST_PAGE,
    ) -> RecommendationPage:
        query = query or RecommendationQuery()
        params = build_query_params(query, page_param)
        if self.cache is None:
            return await self._fetch_with_retry(params)

        # Sessions never share entries: the access token is part of the key.
        key = build_cache_key(params=params, session=self.client.cookies.get("ACCESS_TOKEN"))
        if not query.force_refresh:
            cached = self.cache.get(CACHE_NAMESPACE, key)
            if cached is not None:
                return cached
        page = await self._fetch_with_retry(params)
        self.cache.set(CACHE_NAMESPACE, key, page, self.cache_ttl_seconds)
        return page

    async def post_feedback(
        self,
        problem_id: int,
        *,
        recommendation_id: str,
        action: FeedbackAction,
        helpful: bool | None = None,
    ) -> FeedbackResponse:
        request = FeedbackRequest(recommendation_id=recommendation_id, action=action, helpful=helpful)
        body = await self.client.post(
            f"{RECOMMENDATIONS_ENDPOINT}/{problem_id}/feedback",
            json_body=request.model_dump(by_alias=True, exclude_none=True),
        )
        return FeedbackResponse.model_validate(body or {})
