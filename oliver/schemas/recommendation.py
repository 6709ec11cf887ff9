"""Pydantic models for AI recommendation payloads."""
from __future__ import annotations

from typing import Literal

from pydantic import Field

from oliver.schemas.base import CamelModel

RecommendationSource = Literal["LLM", "FSRS", "HYBRID", "DEFAULT"]
FeedbackAction = Literal["accepted", "skipped", "solved", "hidden"]
RecommendationType = Literal["hybrid", "llm_only", "fsrs_fallback"]


class RecommendationItem(CamelModel):
    problem_id: int
    title: str | None = None
    reason: str = ""
    confidence: float = 0.0
    strategy: str = ""
    source: RecommendationSource = "DEFAULT"
    explanations: list[str] | None = None
    model: str | None = None
    prompt_version: str | None = None
    latency_ms: int | None = None
    score: float | None = None
    match_score: float | None = None
    difficulty: str | None = None
    topics: list[str] | None = None


class RecommendationMeta(CamelModel):
    """Response metadata, including both pagination styles."""

    cached: bool = False
    trace_id: str = ""
    generated_at: str | None = None
    busy: bool | None = None
    strategy: str | None = None
    next_cursor: str | None = None
    next_page: int | None = None
    has_more: bool | None = None
    total_items: int | None = None


class RecommendationResponse(CamelModel):
    items: list[RecommendationItem] = Field(default_factory=list)
    meta: RecommendationMeta = Field(default_factory=RecommendationMeta)


class RecommendationHeaders(CamelModel):
    trace_id: str = ""
    rec_source: RecommendationSource = "DEFAULT"
    cache_hit: bool = False
    provider_chain: str | None = None


class RecommendationPage(CamelModel):
    """A response body together with the headers it arrived with."""

    data: RecommendationResponse
    headers: RecommendationHeaders


class RecommendationQuery(CamelModel):
    """Filter parameters shared by every page of one feed."""

    limit: int | None = Field(None, ge=1)
    difficulty: str | None = None
    domains: list[str] | None = None
    recommendation_type: RecommendationType | None = None
    ab_group: str | None = None
    force_refresh: bool | None = None


class FeedbackRequest(CamelModel):
    recommendation_id: str
    action: FeedbackAction
    helpful: bool | None = None


class FeedbackResponse(CamelModel):
    status: str = "ok"
    recorded_at: str | None = None


class FeedPage(CamelModel):
    """Single feed page as served to our own callers."""

    items: list[RecommendationItem]
    meta: RecommendationMeta
    headers: RecommendationHeaders
    next_page_param: str | None = None
    next_page_kind: Literal["cursor", "page", "none"] = "none"
    show_busy_banner: bool = False


class FeedbackSubmission(CamelModel):
    """Body accepted by our feedback endpoint."""

    trace_id: str
    action: FeedbackAction
    helpful: bool | None = None
