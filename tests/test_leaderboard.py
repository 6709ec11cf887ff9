import pytest

from oliver.services.leaderboard_api import LeaderboardApi
from oliver.utils.exceptions import AllSourcesFailedError

BOARD_PATHS = ("/leaderboard", "/leaderboard/weekly", "/leaderboard/monthly")


def entry(rank: int, **kwargs):
    return {"rank": rank, "userId": rank * 11, "username": f"user{rank}", "totalReviews": 100 - rank, **kwargs}


def streak_entry(rank: int):
    return {"rank": rank, "userId": rank, "username": f"streaker{rank}", "currentStreak": 30 - rank, "longestStreak": 40}


@pytest.fixture()
def leaderboard_api(api_client):
    return LeaderboardApi(api_client)


async def test_overview_collects_every_panel(leaderboard_api, backend):
    for path in BOARD_PATHS:
        backend.add("GET", path, json=[entry(1), entry(2)])
    backend.add("GET", "/leaderboard/streak", json=[streak_entry(1)])
    backend.add("GET", "/leaderboard/stats", json={"topByVolume": [entry(1)], "topByStreak": [streak_entry(1)]})

    overview = await leaderboard_api.get_overview(limit=2)

    assert overview.failed_panels == []
    assert [e.username for e in overview.global_board] == ["user1", "user2"]
    assert overview.streak[0].current_streak == 29
    assert overview.top_performers.top_by_volume[0].user_id == 11
    assert backend.calls("GET", "/leaderboard")[0].url.params["limit"] == "2"


async def test_overview_tolerates_partial_failure(leaderboard_api, backend):
    backend.add("GET", "/leaderboard", json=[entry(1)])
    backend.add("GET", "/leaderboard/weekly", status=500)
    backend.add("GET", "/leaderboard/monthly", json=[entry(3)])
    backend.fail("GET", "/leaderboard/streak")
    backend.add("GET", "/leaderboard/stats", json={})

    overview = await leaderboard_api.get_overview()

    assert overview.failed_panels == ["weekly", "streak"]
    assert overview.weekly is None
    assert overview.streak is None
    assert overview.monthly[0].rank == 3
    assert overview.top_performers.top_by_volume == []


async def test_malformed_panel_counts_as_failed(leaderboard_api, backend):
    backend.add("GET", "/leaderboard", json=[{"rank": "first"}])
    for path in BOARD_PATHS[1:]:
        backend.add("GET", path, json=[])
    backend.add("GET", "/leaderboard/streak", json=[])
    backend.add("GET", "/leaderboard/stats", json={})

    overview = await leaderboard_api.get_overview()

    assert overview.failed_panels == ["global"]
    assert overview.weekly == []


async def test_overview_raises_when_every_panel_fails(leaderboard_api, backend):
    for path in BOARD_PATHS + ("/leaderboard/streak", "/leaderboard/stats"):
        backend.add("GET", path, status=503)

    with pytest.raises(AllSourcesFailedError) as exc_info:
        await leaderboard_api.get_overview()

    assert exc_info.value.message == "加载排行榜失败"
    assert len(exc_info.value.details["failed_panels"]) == 5
