"""Endpoints for paging through AI recommendations."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from oliver.api.deps import get_recommendation_api, get_registry
from oliver.config import settings
from oliver.core.pagination import next_page_param, parse_page_param
from oliver.schemas.recommendation import (
    FeedbackResponse,
    FeedbackSubmission,
    FeedPage,
    RecommendationQuery,
    RecommendationType,
)
from oliver.services.recommendation_api import RecommendationApi, generate_recommendation_id
from oliver.services.recommendation_feed import page_is_degraded
from oliver.utils.ab import get_ab_group, should_show_ai_recommendations
from oliver.utils.registry import RecommendedProblemRegistry, should_show_badge


router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("/page", response_model=FeedPage)
async def get_recommendation_page(
    *,
    limit: int | None = Query(None, ge=1, le=50),
    cursor: str | None = Query(None, description="Opaque cursor from a previous page"),
    page: int | None = Query(None, ge=1, description="Page number when no cursor is issued"),
    difficulty: str | None = None,
    domains: list[str] | None = Query(None),
    recommendation_type: RecommendationType | None = None,
    force_refresh: bool = Query(False, alias="forceRefresh"),
    user_id: str | None = Query(None, alias="userId"),
    api: RecommendationApi = Depends(get_recommendation_api),
    registry: RecommendedProblemRegistry = Depends(get_registry),
) -> FeedPage:
    """Return one page of the feed along with the parameter for the next one."""

    query = RecommendationQuery(
        limit=limit or settings.RECOMMENDATION_PAGE_SIZE,
        difficulty=difficulty,
        domains=domains,
        recommendation_type=recommendation_type,
        ab_group=get_ab_group(user_id),
        force_refresh=force_refresh or None,
    )
    result = await api.get_recommendations(query, parse_page_param(cursor, page))
    registry.add_many(item.problem_id for item in result.data.items)

    following = next_page_param(result.data.meta)
    return FeedPage(
        items=result.data.items,
        meta=result.data.meta,
        headers=result.headers,
        next_page_param=following.serialize(),
        next_page_kind=following.kind,
        show_busy_banner=page_is_degraded(result),
    )


@router.post("/{problem_id}/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    *,
    problem_id: int,
    payload: FeedbackSubmission,
    api: RecommendationApi = Depends(get_recommendation_api),
) -> FeedbackResponse:
    """Record feedback for a recommended problem."""

    return await api.post_feedback(
        problem_id,
        recommendation_id=generate_recommendation_id(payload.trace_id, problem_id),
        action=payload.action,
        helpful=payload.helpful,
    )


@router.get("/badges", response_model=list[int])
def get_badged_problems(
    *,
    ids: list[int] = Query([]),
    user_id: str | None = Query(None, alias="userId"),
    registry: RecommendedProblemRegistry = Depends(get_registry),
) -> list[int]:
    """Return which of ``ids`` should carry the AI recommendation badge."""

    show_ai = should_show_ai_recommendations(user_id)
    return [problem_id for problem_id in ids if should_show_badge(problem_id, registry, show_ai=show_ai)]
