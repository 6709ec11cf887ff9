"""Leaderboard endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from oliver.api.deps import get_leaderboard_api
from oliver.schemas.leaderboard import LeaderboardOverview
from oliver.services.leaderboard_api import LeaderboardApi


router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/overview", response_model=LeaderboardOverview)
async def get_leaderboard_overview(
    *,
    limit: int = Query(50, ge=1, le=100),
    api: LeaderboardApi = Depends(get_leaderboard_api),
) -> LeaderboardOverview:
    """Return every leaderboard panel that could be loaded."""

    return await api.get_overview(limit)
