"""Pydantic models for leaderboard payloads."""
from __future__ import annotations

from pydantic import Field

from oliver.schemas.base import CamelModel


class LeaderboardEntry(CamelModel):
    rank: int
    user_id: int
    username: str
    avatar_url: str | None = None
    total_reviews: int = 0
    mastery_score: float = 0.0
    streak: int = 0
    badge: str | None = None


class StreakLeaderboardEntry(CamelModel):
    rank: int
    user_id: int
    username: str
    avatar_url: str | None = None
    current_streak: int = 0
    longest_streak: int = 0
    total_active_days: int = 0
    badge: str | None = None


class TopPerformersSummary(CamelModel):
    top_by_volume: list[LeaderboardEntry] = Field(default_factory=list)
    top_by_streak: list[StreakLeaderboardEntry] = Field(default_factory=list)


class LeaderboardOverview(CamelModel):
    """Leaderboard panels; a panel is ``None`` when its fetch failed."""

    global_board: list[LeaderboardEntry] | None = Field(None, alias="global")
    weekly: list[LeaderboardEntry] | None = None
    monthly: list[LeaderboardEntry] | None = None
    streak: list[StreakLeaderboardEntry] | None = None
    top_performers: TopPerformersSummary | None = None
    failed_panels: list[str] = Field(default_factory=list)
