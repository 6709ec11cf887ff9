"""Stateful review queue view: filter, page and stale-response handling."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from oliver.config import settings
from oliver.core.review_queue import UPCOMING_FILTER_DAYS, merge_buckets, paginate
from oliver.schemas.review import ReviewPage, UpcomingFilter
from oliver.services.review_api import ReviewApi
from oliver.utils.exceptions import ApiError, ValidationError

LOAD_FAILED_TEXT = "加载复习队列失败"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewQueueView:
    """Holds the current filter and page and renders :class:`ReviewPage` objects.

    Every :meth:`load` takes a sequence number; a response that arrives after
    a newer load has started is discarded instead of overwriting it.
    """

    def __init__(
        self,
        api: ReviewApi,
        *,
        page_size: int | None = None,
        fetch_limit: int | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.api = api
        self.page_size = page_size or settings.REVIEW_PAGE_SIZE
        self.fetch_limit = fetch_limit or settings.REVIEW_FETCH_LIMIT
        self.now = now
        self.upcoming_filter: UpcomingFilter = "all"
        self.current_page = 1
        self.page: ReviewPage | None = None
        self.error: str | None = None
        self._sequence = 0

    def set_filter(self, upcoming_filter: UpcomingFilter) -> None:
        if upcoming_filter != "all" and upcoming_filter not in UPCOMING_FILTER_DAYS:
            raise ValidationError(f"Unknown upcoming filter: {upcoming_filter}")
        self.upcoming_filter = upcoming_filter
        self.current_page = 1

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValidationError("page must be >= 1", {"page": page})
        self.current_page = page

    @property
    def client_paginated(self) -> bool:
        return self.upcoming_filter != "all"

    async def load(self) -> ReviewPage | None:
        """Fetch and render the current page.

        Client-side filters need the whole queue, so they request a single
        large page and slice locally; otherwise the backend pages for us.
        Returns ``None`` when the response was stale. Fetch errors are kept
        in :attr:`error` and re-raised.
        """

        self._sequence += 1
        sequence = self._sequence
        upcoming_filter = self.upcoming_filter
        page = self.current_page

        if self.client_paginated:
            request_page, request_size = 1, self.fetch_limit
        else:
            request_page, request_size = page, self.page_size

        try:
            queue = await self.api.get_review_queue(
                limit=self.fetch_limit, page=request_page, page_size=request_size, show_all=True
            )
        except ApiError as exc:
            if sequence == self._sequence:
                self.error = exc.message or LOAD_FAILED_TEXT
            raise

        if sequence != self._sequence:
            logger.debug("Discarding stale review queue response", sequence=sequence, latest=self._sequence)
            return None

        now = self.now()
        problems = merge_buckets(queue.buckets(), now)
        rendered = paginate(
            problems,
            upcoming_filter=upcoming_filter,
            page=page,
            page_size=self.page_size,
            now=now,
            server_total_count=queue.total_count,
            server_total_pages=queue.total_pages,
            server_current_page=queue.current_page,
        )
        self.page = rendered
        self.error = None
        return rendered
