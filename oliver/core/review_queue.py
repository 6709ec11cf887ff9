"""Review queue classification, merging and pagination.

Cards arrive from the backend in four lifecycle buckets. Each card is
classified relative to an explicit ``now`` into ``overdue``, ``due`` or
``upcoming`` and given a priority score. The score bands never overlap::

    overdue   1000 + days overdue
    due       500 + (24 - hours until due), within [500, 524]
    upcoming  max(0, 100 - days until due)

so sorting by score alone always ranks overdue > due > upcoming. The merged
list keeps one entry per problem, the highest scored one.
"""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Sequence

from oliver.schemas.review import (
    DisplayReviewProblem,
    ReviewPage,
    ReviewQueueCard,
    ReviewStatus,
    StatusCounts,
    UpcomingFilter,
)

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600

OVERDUE_BASE = 1000
DUE_BASE = 500
UPCOMING_CEILING = 100

UPCOMING_FILTER_DAYS: dict[str, int] = {"1day": 1, "3days": 3, "7days": 7}

NO_SCHEDULE_TEXT = "暂无安排"
INVALID_DATE_TEXT = "日期无效"


def _ensure_timezone(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_due_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning ``None`` when it is unusable."""

    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _ensure_timezone(parsed)


def due_offsets(due: datetime, now: datetime) -> tuple[int, int]:
    """Return ``(diff_days, diff_hours)`` from ``now`` to ``due``, rounded up."""

    seconds = (_ensure_timezone(due) - _ensure_timezone(now)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY), math.ceil(seconds / SECONDS_PER_HOUR)


def classify_status(
    *, due_date: str | None, overdue: bool, due: bool, now: datetime
) -> tuple[ReviewStatus, int]:
    """Return the review status and priority score for one card."""

    parsed = parse_due_date(due_date)
    if parsed is None:
        # Only the server flags are meaningful without a date.
        if overdue:
            return "overdue", OVERDUE_BASE
        if due:
            return "due", DUE_BASE + 24
        return "upcoming", 0

    diff_days, diff_hours = due_offsets(parsed, now)
    if overdue or diff_days < 0:
        return "overdue", OVERDUE_BASE + abs(diff_days)
    if due or diff_days == 0:
        # A due flag on a far date still stays inside the due band.
        return "due", DUE_BASE + (24 - min(max(diff_hours, 0), 24))
    return "upcoming", max(0, UPCOMING_CEILING - diff_days)


def get_due_display(due_date: str | None, now: datetime) -> str:
    """Human readable distance to the due date; never raises."""

    if not due_date:
        return NO_SCHEDULE_TEXT
    parsed = parse_due_date(due_date)
    if parsed is None:
        return INVALID_DATE_TEXT

    diff_days, diff_hours = due_offsets(parsed, now)
    if diff_days < 0:
        return f"已过期 {abs(diff_days)} 天"
    if diff_days == 0:
        if diff_hours <= 0:
            return "现在到期"
        return f"{diff_hours}小时后到期"
    return f"{diff_days}天后到期"


def classify_card(card: ReviewQueueCard, now: datetime) -> DisplayReviewProblem:
    """Derive a display record from a backend card."""

    status, score = classify_status(
        due_date=card.due_date, overdue=card.overdue, due=card.due, now=now
    )
    return DisplayReviewProblem(
        **card.model_dump(),
        review_status=status,
        priority_score=score,
        due_display=get_due_display(card.due_date, now),
        notes=f"已重复 {card.lapses} 次" if card.lapses > 0 else None,
    )


def merge_buckets(
    buckets: Iterable[Sequence[ReviewQueueCard]], now: datetime
) -> list[DisplayReviewProblem]:
    """Classify, sort by priority and drop repeated problem ids.

    ``sorted`` is stable, so among equal scores the bucket order
    (new, learning, review, relearning) decides which duplicate survives.
    """

    classified = [classify_card(card, now) for bucket in buckets for card in bucket]
    ranked = sorted(classified, key=lambda problem: problem.priority_score, reverse=True)

    seen: set[int] = set()
    merged: list[DisplayReviewProblem] = []
    for problem in ranked:
        if problem.problem_id in seen:
            continue
        seen.add(problem.problem_id)
        merged.append(problem)
    return merged


def count_by_status(problems: Iterable[DisplayReviewProblem]) -> StatusCounts:
    return StatusCounts(**Counter(problem.review_status for problem in problems))


def within_days(problem: DisplayReviewProblem, days: int, now: datetime) -> bool:
    parsed = parse_due_date(problem.due_date)
    if parsed is None:
        return False
    diff_days, _ = due_offsets(parsed, now)
    return diff_days <= days


def paginate(
    problems: Sequence[DisplayReviewProblem],
    *,
    upcoming_filter: UpcomingFilter,
    page: int,
    page_size: int,
    now: datetime,
    server_total_count: int | None = None,
    server_total_pages: int | None = None,
    server_current_page: int | None = None,
) -> ReviewPage:
    """Produce the page to render.

    With ``upcoming_filter == "all"`` the backend already paged the data and
    its totals are trusted. Any other filter narrows the full merged list to
    cards due within N days and pages it locally.
    """

    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    counts = count_by_status(problems)

    if upcoming_filter == "all":
        return ReviewPage(
            items=list(problems),
            current_page=server_current_page or page,
            page_size=page_size,
            total_count=server_total_count or 0,
            total_pages=server_total_pages or 1,
            filter=upcoming_filter,
            client_paginated=False,
            counts=counts,
        )

    try:
        days = UPCOMING_FILTER_DAYS[upcoming_filter]
    except KeyError:
        raise ValueError(f"Unknown upcoming filter: {upcoming_filter!r}") from None

    filtered = [problem for problem in problems if within_days(problem, days, now)]
    total_count = len(filtered)
    start = (page - 1) * page_size
    return ReviewPage(
        items=filtered[start:start + page_size],
        current_page=page,
        page_size=page_size,
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
        filter=upcoming_filter,
        client_paginated=True,
        counts=counts,
    )
