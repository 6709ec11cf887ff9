"""Endpoints for the learner's review queue."""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from oliver.api.deps import get_now, get_review_api
from oliver.schemas.review import ReviewPage, ReviewResult, SubmitReviewRequest, UpcomingFilter
from oliver.services.review_api import ReviewApi
from oliver.services.review_view import ReviewQueueView


router = APIRouter(prefix="/review", tags=["review"])


@router.get("/page", response_model=ReviewPage)
async def get_review_page(
    *,
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int | None = Query(None, ge=1, le=100, alias="pageSize"),
    upcoming_filter: UpcomingFilter = Query(
        "all", alias="filter", description="Restrict to cards due within 1, 3 or 7 days"
    ),
    api: ReviewApi = Depends(get_review_api),
    now: datetime = Depends(get_now),
) -> ReviewPage:
    """Return one classified, de-duplicated and paginated page of the review queue."""

    view = ReviewQueueView(api, page_size=page_size, now=lambda: now)
    view.set_filter(upcoming_filter)
    view.set_page(page)
    return await view.load()


@router.post("/submit", response_model=ReviewResult)
async def submit_review(
    *,
    payload: SubmitReviewRequest,
    api: ReviewApi = Depends(get_review_api),
) -> ReviewResult:
    """Forward a rating to the scheduler with a fresh idempotency key."""

    return await api.submit_review(payload)
