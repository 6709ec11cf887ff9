"""API router for version 1."""
from fastapi import APIRouter

from oliver.api.v1.endpoints import leaderboard, recommendations, review


api_router = APIRouter()
api_router.include_router(review.router)
api_router.include_router(recommendations.router)
api_router.include_router(leaderboard.router)
