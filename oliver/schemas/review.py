"""Pydantic models for review queue payloads."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from oliver.schemas.base import CamelModel

CardState = Literal["NEW", "LEARNING", "REVIEW", "RELEARNING"]
ProblemDifficulty = Literal["EASY", "MEDIUM", "HARD"]
ReviewStatus = Literal["overdue", "due", "upcoming"]
ReviewType = Literal["SCHEDULED", "EXTRA", "CRAM", "MANUAL", "BULK"]
UpcomingFilter = Literal["all", "1day", "3days", "7days"]


class ReviewQueueCard(CamelModel):
    """A card as returned by ``GET /review/queue``.

    ``due_date`` stays a string so a malformed timestamp reaches the
    classifier instead of failing the whole response.
    """

    problem_id: int
    problem_title: str
    problem_difficulty: ProblemDifficulty
    state: CardState
    due_date: str
    review_count: int = Field(0, ge=0)
    lapses: int = Field(0, ge=0)
    overdue: bool = False
    due: bool = False

    id: int | None = None
    user_id: int | None = None
    difficulty: float | None = None
    stability: float | None = None
    interval_days: int | None = None
    priority: float | None = None


class ReviewQueueResponse(CamelModel):
    """Raw queue response body."""

    cards: list[ReviewQueueCard] = Field(default_factory=list)
    total_count: int = 0
    current_page: int | None = None
    page_size: int | None = None
    total_pages: int | None = None
    stats: dict[str, Any] | None = None
    generated_at: str | None = None


class ReviewQueue(CamelModel):
    """Queue split into the four FSRS lifecycle buckets."""

    new_cards: list[ReviewQueueCard] = Field(default_factory=list)
    learning_cards: list[ReviewQueueCard] = Field(default_factory=list)
    review_cards: list[ReviewQueueCard] = Field(default_factory=list)
    relearning_cards: list[ReviewQueueCard] = Field(default_factory=list)
    total_count: int = 0
    current_page: int | None = None
    page_size: int | None = None
    total_pages: int | None = None

    @classmethod
    def from_response(cls, response: ReviewQueueResponse) -> "ReviewQueue":
        def bucket(state: str) -> list[ReviewQueueCard]:
            return [card for card in response.cards if card.state == state]

        return cls(
            new_cards=bucket("NEW"),
            learning_cards=bucket("LEARNING"),
            review_cards=bucket("REVIEW"),
            relearning_cards=bucket("RELEARNING"),
            total_count=response.total_count,
            current_page=response.current_page,
            page_size=response.page_size,
            total_pages=response.total_pages,
        )

    def buckets(self) -> tuple[list[ReviewQueueCard], ...]:
        return (self.new_cards, self.learning_cards, self.review_cards, self.relearning_cards)


class DisplayReviewProblem(ReviewQueueCard):
    """Classified card ready for display."""

    review_status: ReviewStatus
    priority_score: int
    due_display: str
    notes: str | None = None


class StatusCounts(CamelModel):
    overdue: int = 0
    due: int = 0
    upcoming: int = 0


class ReviewPage(CamelModel):
    """One rendered page of the review queue."""

    items: list[DisplayReviewProblem]
    current_page: int
    page_size: int
    total_count: int
    total_pages: int
    filter: UpcomingFilter = "all"
    client_paginated: bool = False
    counts: StatusCounts = Field(default_factory=StatusCounts)


class SubmitReviewRequest(CamelModel):
    """Payload for ``POST /review/submit``; 1=Again, 2=Hard, 3=Good, 4=Easy."""

    problem_id: int = Field(..., ge=1)
    rating: int = Field(..., ge=1, le=4)
    review_type: ReviewType = "SCHEDULED"
    request_id: str | None = None


class ReviewResult(CamelModel):
    success: bool
    message: str = ""
    next_review_date: str | None = None
    new_state: str | None = None
    intervals: list[float] = Field(default_factory=list)


class UserLearningStats(CamelModel):
    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    relearning_cards: int = 0
    due_cards: int = 0
    avg_reviews: float = 0.0
    avg_difficulty: float = 0.0
    avg_stability: float = 0.0
    total_lapses: int = 0


class OptimizationResult(CamelModel):
    success: bool
    message: str = ""
    parameters: Any = None
