"""Service layer package."""

from oliver.services.api_client import ApiClient, ApiResponse
from oliver.services.leaderboard_api import LeaderboardApi
from oliver.services.recommendation_api import RecommendationApi
from oliver.services.recommendation_feed import FeedState, RecommendationFeed
from oliver.services.review_api import ReviewApi
from oliver.services.review_view import ReviewQueueView

__all__ = [
    "ApiClient",
    "ApiResponse",
    "LeaderboardApi",
    "RecommendationApi",
    "FeedState",
    "RecommendationFeed",
    "ReviewApi",
    "ReviewQueueView",
]
