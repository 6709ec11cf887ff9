"""Review and FSRS endpoints of the backend."""
from __future__ import annotations

from loguru import logger

from oliver.schemas.review import (
    OptimizationResult,
    ReviewQueue,
    ReviewQueueCard,
    ReviewQueueResponse,
    ReviewResult,
    SubmitReviewRequest,
    UserLearningStats,
)
from oliver.services.api_client import ApiClient
from oliver.utils.idempotency import with_idempotency


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ReviewApi:
    """Typed access to ``/review/*``. Scheduling itself happens server side."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def get_review_queue(
        self,
        limit: int = 20,
        page: int = 1,
        page_size: int = 10,
        show_all: bool = False,
    ) -> ReviewQueue:
        """Fetch one page of the queue and split it into lifecycle buckets."""

        params = {
            "limit": limit,
            "page": page,
            "pageSize": page_size,
            "showAll": _flag(show_all),
        }
        body = await self.client.get("/review/queue", params=params)
        response = ReviewQueueResponse.model_validate(body or {})
        logger.debug(
            "Review queue fetched",
            cards=len(response.cards),
            page=response.current_page,
            total=response.total_count,
        )
        return ReviewQueue.from_response(response)

    async def get_all_due_problems(self, limit: int = 50) -> list[ReviewQueueCard]:
        body = await self.client.get("/review/queue", params={"limit": limit, "showAll": "true"})
        return ReviewQueueResponse.model_validate(body or {}).cards

    async def submit_review(self, request: SubmitReviewRequest) -> ReviewResult:
        """Submit a rating; each call carries a fresh idempotency key."""

        payload = with_idempotency(
            request.model_dump(by_alias=True, exclude={"request_id"}, exclude_none=True)
        )
        body = await self.client.post("/review/submit", json_body=payload)
        result = ReviewResult.model_validate(body or {"success": True})
        logger.info(
            "Review submitted",
            problem_id=request.problem_id,
            rating=request.rating,
            new_state=result.new_state,
        )
        return result

    async def get_learning_stats(self) -> UserLearningStats:
        body = await self.client.get("/review/stats")
        return UserLearningStats.model_validate(body or {})

    async def optimize_parameters(self) -> OptimizationResult:
        body = await self.client.post("/review/optimize-parameters", json_body=with_idempotency({}))
        return OptimizationResult.model_validate(body or {"success": True})
