"""Leaderboard endpoints and the partially-failing overview."""
from __future__ import annotations

import asyncio

from loguru import logger
from pydantic import TypeAdapter

from oliver.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardOverview,
    StreakLeaderboardEntry,
    TopPerformersSummary,
)
from oliver.services.api_client import ApiClient
from oliver.utils.exceptions import AllSourcesFailedError, ApiError

_entries = TypeAdapter(list[LeaderboardEntry])
_streak_entries = TypeAdapter(list[StreakLeaderboardEntry])


class LeaderboardApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def _board(self, endpoint: str, limit: int) -> list[LeaderboardEntry]:
        body = await self.client.get(endpoint, params={"limit": limit})
        return _entries.validate_python(body or [])

    async def get_global_leaderboard(self, limit: int = 50) -> list[LeaderboardEntry]:
        return await self._board("/leaderboard", limit)

    async def get_weekly_leaderboard(self, limit: int = 50) -> list[LeaderboardEntry]:
        return await self._board("/leaderboard/weekly", limit)

    async def get_monthly_leaderboard(self, limit: int = 50) -> list[LeaderboardEntry]:
        return await self._board("/leaderboard/monthly", limit)

    async def get_streak_leaderboard(self, limit: int = 50) -> list[StreakLeaderboardEntry]:
        body = await self.client.get("/leaderboard/streak", params={"limit": limit})
        return _streak_entries.validate_python(body or [])

    async def get_leaderboard_stats(self) -> TopPerformersSummary:
        body = await self.client.get("/leaderboard/stats")
        return TopPerformersSummary.model_validate(body or {})

    async def get_overview(self, limit: int = 50) -> LeaderboardOverview:
        """Fetch all five panels at once.

        A failed panel is left as ``None`` and listed in ``failed_panels``;
        only when every panel fails is :class:`AllSourcesFailedError` raised.
        """

        panels = ("global", "weekly", "monthly", "streak", "top_performers")
        results = await asyncio.gather(
            self.get_global_leaderboard(limit),
            self.get_weekly_leaderboard(limit),
            self.get_monthly_leaderboard(limit),
            self.get_streak_leaderboard(limit),
            self.get_leaderboard_stats(),
            return_exceptions=True,
        )

        values: dict[str, object] = {}
        failed: list[str] = []
        for panel, result in zip(panels, results):
            if isinstance(result, BaseException):
                if not isinstance(result, (ApiError, ValueError)):
                    raise result
                logger.warning("Leaderboard panel failed", panel=panel, error=str(result))
                failed.append(panel)
                continue
            values[panel] = result

        if len(failed) == len(panels):
            raise AllSourcesFailedError("加载排行榜失败", {"failed_panels": failed})

        return LeaderboardOverview.model_validate({**values, "failed_panels": failed})
