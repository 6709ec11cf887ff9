"""Pydantic schemas package."""

from oliver.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardOverview,
    StreakLeaderboardEntry,
    TopPerformersSummary,
)
from oliver.schemas.recommendation import (
    FeedbackRequest,
    FeedbackResponse,
    FeedbackSubmission,
    FeedPage,
    RecommendationHeaders,
    RecommendationItem,
    RecommendationMeta,
    RecommendationPage,
    RecommendationQuery,
    RecommendationResponse,
)
from oliver.schemas.review import (
    DisplayReviewProblem,
    OptimizationResult,
    ReviewPage,
    ReviewQueue,
    ReviewQueueCard,
    ReviewQueueResponse,
    ReviewResult,
    StatusCounts,
    SubmitReviewRequest,
    UserLearningStats,
)

__all__ = [
    "LeaderboardEntry",
    "LeaderboardOverview",
    "StreakLeaderboardEntry",
    "TopPerformersSummary",
    "FeedbackRequest",
    "FeedbackResponse",
    "FeedbackSubmission",
    "FeedPage",
    "RecommendationHeaders",
    "RecommendationItem",
    "RecommendationMeta",
    "RecommendationPage",
    "RecommendationQuery",
    "RecommendationResponse",
    "DisplayReviewProblem",
    "OptimizationResult",
    "ReviewPage",
    "ReviewQueue",
    "ReviewQueueCard",
    "ReviewQueueResponse",
    "ReviewResult",
    "StatusCounts",
    "SubmitReviewRequest",
    "UserLearningStats",
]
