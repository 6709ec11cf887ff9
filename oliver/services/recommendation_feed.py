"""Infinite recommendation feed.

State transitions::

    idle -> loading_first -> has_data | error
    has_data -> loading_next -> has_data | error
    has_data -> no_more_pages      (last page offered no next page)

Pages accumulate in load order; every loaded page contributes its problem
ids to the shared :class:`RecommendedProblemRegistry`. Restarting the feed
drops any page still in flight from before the restart.
"""
from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from oliver.config import settings
from oliver.core.pagination import FIRST_PAGE, NoPageParam, PageParam, next_page_param
from oliver.schemas.recommendation import (
    FeedbackAction,
    RecommendationHeaders,
    RecommendationItem,
    RecommendationMeta,
    RecommendationPage,
    RecommendationQuery,
)
from oliver.services.recommendation_api import RecommendationApi, generate_recommendation_id
from oliver.utils.exceptions import ApiError
from oliver.utils.registry import RecommendedProblemRegistry

FEEDBACK_OK_TEXT = "感谢反馈，已记录。"
FEEDBACK_FAILED_TEXT = "提交失败，请稍后重试。"
BUSY_BANNER_TEXT = "系统繁忙，推荐已回退基础策略"


class FeedState(str, enum.Enum):
    IDLE = "idle"
    LOADING_FIRST = "loading_first"
    HAS_DATA = "has_data"
    LOADING_NEXT = "loading_next"
    ERROR = "error"
    NO_MORE_PAGES = "no_more_pages"


@dataclass
class Toast:
    message: str
    kind: str
    expires_at: float


@dataclass
class CardFeedback:
    """Per-card feedback progress; ``given`` locks the card's buttons."""

    pending: FeedbackAction | None = None
    given: FeedbackAction | None = None

    @property
    def locked(self) -> bool:
        return self.pending is not None or self.given is not None


@dataclass
class RecommendationFeed:
    api: RecommendationApi
    query: RecommendationQuery = field(default_factory=RecommendationQuery)
    registry: RecommendedProblemRegistry | None = None
    clock: Callable[[], float] = time.monotonic
    toast_seconds: float = settings.FEEDBACK_TOAST_SECONDS

    state: FeedState = FeedState.IDLE
    pages: list[RecommendationPage] = field(default_factory=list)
    error: ApiError | None = None
    is_fetching_next_page: bool = False
    feedback: dict[int, CardFeedback] = field(default_factory=dict)
    _next: PageParam = field(default=FIRST_PAGE, repr=False)
    _toast: Toast | None = field(default=None, repr=False)
    _generation: int = field(default=0, repr=False)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------
    @property
    def items(self) -> list[RecommendationItem]:
        return [item for page in self.pages for item in page.data.items]

    @property
    def meta(self) -> RecommendationMeta | None:
        return self.pages[0].data.meta if self.pages else None

    @property
    def headers(self) -> RecommendationHeaders | None:
        return self.pages[0].headers if self.pages else None

    @property
    def trace_id(self) -> str:
        return self.meta.trace_id if self.meta else ""

    @property
    def next_param(self) -> PageParam:
        return self._next

    @property
    def has_next_page(self) -> bool:
        return bool(self.pages) and not isinstance(self._next, NoPageParam)

    @property
    def show_busy_banner(self) -> bool:
        return any(page_is_degraded(page) for page in self.pages)

    @property
    def toast(self) -> Toast | None:
        if self._toast is not None and self.clock() >= self._toast.expires_at:
            self._toast = None
        return self._toast

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _accept(self, page: RecommendationPage) -> None:
        self.pages.append(page)
        self._next = next_page_param(page.data.meta)
        self.error = None
        if self.registry is not None and page.data.items:
            self.registry.add_many(item.problem_id for item in page.data.items)
        self.state = FeedState.HAS_DATA if self.has_next_page else FeedState.NO_MORE_PAGES

    async def load_first_page(self) -> None:
        """Start the feed over; responses still in flight for older pages are dropped."""

        self._generation += 1
        generation = self._generation
        self.state = FeedState.LOADING_FIRST
        self.pages = []
        self._next = FIRST_PAGE
        self._toast = None
        self.is_fetching_next_page = False
        try:
            page = await self.api.get_recommendations(self.query, FIRST_PAGE)
        except ApiError as exc:
            if generation != self._generation:
                return
            logger.warning("Recommendation feed failed to load", status=exc.status)
            self.error = exc
            self.state = FeedState.ERROR
            return
        if generation != self._generation:
            logger.debug("Discarding stale first page", generation=generation, latest=self._generation)
            return
        self._accept(page)

    async def refetch(self) -> None:
        await self.load_first_page()

    async def fetch_next_page(self) -> bool:
        """Load the next page; returns ``False`` when the guard skipped the call."""

        if not self.has_next_page or self.is_fetching_next_page:
            return False

        generation = self._generation
        self.is_fetching_next_page = True
        self.state = FeedState.LOADING_NEXT
        try:
            page = await self.api.get_recommendations(self.query, self._next)
        except ApiError as exc:
            if generation != self._generation:
                return True
            logger.warning("Recommendation feed failed to load next page", status=exc.status)
            self.error = exc
            self.state = FeedState.ERROR
            return True
        finally:
            if generation == self._generation:
                self.is_fetching_next_page = False
        if generation != self._generation:
            logger.debug("Discarding stale next page", generation=generation, latest=self._generation)
            return True
        self._accept(page)
        return True

    async def on_sentinel_visible(self, visible: bool) -> bool:
        """Infinite-scroll trigger for the sentinel below the last card."""

        if not visible:
            return False
        return await self.fetch_next_page()

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------
    def _show_toast(self, message: str, kind: str) -> None:
        self._toast = Toast(message=message, kind=kind, expires_at=self.clock() + self.toast_seconds)

    async def submit_feedback(
        self, problem_id: int, action: FeedbackAction, *, helpful: bool | None = None
    ) -> bool:
        """Send feedback for one card. Failures are reported by toast, not raised."""

        card = self.feedback.setdefault(problem_id, CardFeedback())
        if card.locked:
            return False

        card.pending = action
        try:
            await self.api.post_feedback(
                problem_id,
                recommendation_id=generate_recommendation_id(self.trace_id, problem_id),
                action=action,
                helpful=helpful,
            )
        except ApiError as exc:
            logger.warning("Failed to submit feedback", problem_id=problem_id, action=action, status=exc.status)
            self._show_toast(FEEDBACK_FAILED_TEXT, "error")
            return False
        finally:
            card.pending = None

        card.given = action
        self._show_toast(FEEDBACK_OK_TEXT, "success")
        return True


def page_is_degraded(page: RecommendationPage) -> bool:
    """A page served by the fallback strategy or while the backend was busy."""

    return page.data.meta.busy is True or page.headers.rec_source == "DEFAULT"
