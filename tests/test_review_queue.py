from datetime import timedelta

import pytest

from oliver.core.review_queue import (
    classify_card,
    classify_status,
    count_by_status,
    get_due_display,
    merge_buckets,
    paginate,
    parse_due_date,
)
from oliver.schemas.review import ReviewQueueCard

from tests.conftest import NOW, iso, make_card


def card(problem_id: int, **kwargs) -> ReviewQueueCard:
    return ReviewQueueCard.model_validate(make_card(problem_id, **kwargs))


def status_for(due_in: timedelta, *, overdue: bool = False, due: bool = False):
    return classify_status(due_date=iso(due_in), overdue=overdue, due=due, now=NOW)


def test_past_due_date_is_overdue_with_days_added():
    assert status_for(timedelta(days=-2)) == ("overdue", 1002)


def test_overdue_flag_wins_over_future_date():
    status, score = status_for(timedelta(days=5), overdue=True)

    assert status == "overdue"
    assert score >= 1000


def test_due_earlier_today_scores_top_of_due_band():
    assert status_for(timedelta(hours=-2)) == ("due", 524)


def test_due_flag_scores_by_hours_remaining():
    assert status_for(timedelta(hours=6), due=True) == ("due", 518)


def test_due_flag_on_distant_date_stays_in_due_band():
    assert status_for(timedelta(days=3), due=True) == ("due", 500)


@pytest.mark.parametrize(
    ("due_in", "expected"),
    [
        (timedelta(hours=5), 99),
        (timedelta(days=3), 97),
        (timedelta(days=250), 0),
    ],
)
def test_future_dates_are_upcoming(due_in: timedelta, expected: int):
    assert status_for(due_in) == ("upcoming", expected)


def test_bands_order_overdue_due_upcoming():
    overdue = status_for(timedelta(days=-1))[1]
    due = status_for(timedelta(minutes=-1))[1]
    upcoming = status_for(timedelta(days=1))[1]

    assert overdue > due > upcoming
    assert 500 <= due <= 524
    assert 0 <= upcoming <= 100


def test_naive_and_date_only_values_are_read_as_utc():
    assert parse_due_date("2024-05-12T12:00:00") == parse_due_date("2024-05-12T12:00:00Z")
    assert classify_status(due_date="2024-05-12", overdue=False, due=False, now=NOW) == ("upcoming", 98)


def test_malformed_date_falls_back_to_server_flags():
    assert parse_due_date("not-a-date") is None
    assert classify_status(due_date="not-a-date", overdue=False, due=False, now=NOW) == ("upcoming", 0)
    assert classify_status(due_date="not-a-date", overdue=True, due=False, now=NOW) == ("overdue", 1000)
    assert classify_status(due_date="not-a-date", overdue=False, due=True, now=NOW) == ("due", 524)


@pytest.mark.parametrize(
    ("due_date", "expected"),
    [
        ("", "暂无安排"),
        (None, "暂无安排"),
        ("31/12/2024", "日期无效"),
        (iso(timedelta(days=-2)), "已过期 2 天"),
        (iso(timedelta(hours=-3)), "现在到期"),
        (iso(timedelta(days=3)), "3天后到期"),
    ],
)
def test_due_display(due_date, expected: str):
    assert get_due_display(due_date, NOW) == expected


def test_classify_card_adds_display_fields():
    problem = classify_card(card(1, due_in=timedelta(days=-1), lapses=2), NOW)

    assert problem.problem_id == 1
    assert problem.review_status == "overdue"
    assert problem.priority_score == 1001
    assert problem.due_display == "已过期 1 天"
    assert problem.notes == "已重复 2 次"
    assert classify_card(card(2), NOW).notes is None


def test_classification_is_deterministic_for_fixed_now():
    source = card(3, due_in=timedelta(hours=-7))

    assert classify_card(source, NOW) == classify_card(source, NOW)


def test_merge_sorts_by_priority_descending():
    buckets = [
        [card(1, state="NEW", due_in=timedelta(days=10))],
        [card(2, state="LEARNING", due_in=timedelta(hours=-1))],
        [card(3, state="REVIEW", due_in=timedelta(days=-4))],
        [],
    ]

    merged = merge_buckets(buckets, NOW)

    assert [p.problem_id for p in merged] == [3, 2, 1]
    scores = [p.priority_score for p in merged]
    assert scores == sorted(scores, reverse=True)


def test_merge_keeps_highest_scored_duplicate():
    buckets = [
        [card(1, state="NEW", due_in=timedelta(days=1))],
        [],
        [card(1, state="REVIEW", due_in=timedelta(days=-1), overdue=True)],
        [],
    ]

    merged = merge_buckets(buckets, NOW)

    assert len(merged) == 1
    assert merged[0].review_status == "overdue"
    assert merged[0].state == "REVIEW"


def test_merge_ties_keep_bucket_order():
    buckets = [
        [card(1, state="NEW", problemTitle="from new")],
        [card(2, state="LEARNING")],
        [card(1, state="REVIEW", problemTitle="from review")],
        [],
    ]

    merged = merge_buckets(buckets, NOW)

    assert [p.problem_id for p in merged] == [1, 2]
    assert merged[0].problem_title == "from new"


def test_merge_has_unique_problem_ids():
    buckets = [[card(i % 4, due_in=timedelta(days=i)) for i in range(12)], [], [], []]

    merged = merge_buckets(buckets, NOW)

    ids = [p.problem_id for p in merged]
    assert len(ids) == len(set(ids)) == 4


def test_count_by_status():
    merged = merge_buckets(
        [[
            card(1, due_in=timedelta(days=-1)),
            card(2, due_in=timedelta(days=-3)),
            card(3, due_in=timedelta(hours=-1)),
            card(4, due_in=timedelta(days=2)),
        ]],
        NOW,
    )

    counts = count_by_status(merged)

    assert (counts.overdue, counts.due, counts.upcoming) == (2, 1, 1)


def test_paginate_all_trusts_server_totals():
    problems = merge_buckets([[card(i) for i in range(1, 4)]], NOW)

    page = paginate(
        problems,
        upcoming_filter="all",
        page=2,
        page_size=3,
        now=NOW,
        server_total_count=9,
        server_total_pages=3,
        server_current_page=2,
    )

    assert page.client_paginated is False
    assert [p.problem_id for p in page.items] == [p.problem_id for p in problems]
    assert (page.current_page, page.total_count, page.total_pages) == (2, 9, 3)


def test_paginate_all_defaults_when_server_omits_totals():
    page = paginate([], upcoming_filter="all", page=1, page_size=10, now=NOW)

    assert page.total_pages == 1
    assert page.total_count == 0


def test_client_pagination_slices_filtered_list():
    soon = [card(i, due_in=timedelta(hours=-i)) for i in range(1, 24)]
    later = [card(100 + i, due_in=timedelta(days=5)) for i in range(4)]
    problems = merge_buckets([soon + later], NOW)

    pages = [
        paginate(problems, upcoming_filter="1day", page=n, page_size=10, now=NOW)
        for n in (1, 2, 3)
    ]

    assert [len(page.items) for page in pages] == [10, 10, 3]
    assert all(page.total_count == 23 and page.total_pages == 3 for page in pages)
    assert all(page.client_paginated for page in pages)
    shown = [p.problem_id for page in pages for p in page.items]
    assert len(set(shown)) == 23
    assert pages[0].counts.upcoming == 4


def test_client_filter_window_and_invalid_dates():
    problems = merge_buckets(
        [[
            card(1, due_in=timedelta(days=2)),
            card(2, due_in=timedelta(days=6)),
            card(3, due_in=timedelta(days=9)),
            card(4, dueDate="garbage"),
        ]],
        NOW,
    )

    three_days = paginate(problems, upcoming_filter="3days", page=1, page_size=10, now=NOW)
    seven_days = paginate(problems, upcoming_filter="7days", page=1, page_size=10, now=NOW)

    assert [p.problem_id for p in three_days.items] == [1]
    assert sorted(p.problem_id for p in seven_days.items) == [1, 2]


def test_page_beyond_range_is_empty():
    problems = merge_buckets([[card(1, due_in=timedelta(hours=-1))]], NOW)

    page = paginate(problems, upcoming_filter="1day", page=4, page_size=10, now=NOW)

    assert page.items == []
    assert page.total_pages == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"upcoming_filter": "all", "page": 0, "page_size": 10},
        {"upcoming_filter": "all", "page": 1, "page_size": 0},
        {"upcoming_filter": "2weeks", "page": 1, "page_size": 10},
    ],
)
def test_paginate_rejects_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        paginate([], now=NOW, **kwargs)
