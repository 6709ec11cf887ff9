"""Utility helpers package."""

from oliver.utils.cache import QueryCache, build_cache_key, query_cache
from oliver.utils.idempotency import generate_request_id, with_idempotency
from oliver.utils.registry import RecommendedProblemRegistry, SessionRegistries, should_show_badge

__all__ = [
    "QueryCache",
    "build_cache_key",
    "query_cache",
    "generate_request_id",
    "with_idempotency",
    "RecommendedProblemRegistry",
    "SessionRegistries",
    "should_show_badge",
]
