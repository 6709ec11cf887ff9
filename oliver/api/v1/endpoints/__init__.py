"""API endpoint modules for v1."""

from oliver.api.v1.endpoints import leaderboard, recommendations, review

__all__ = [
    "leaderboard",
    "recommendations",
    "review",
]
