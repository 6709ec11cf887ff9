"""Next-page resolution for recommendation feeds.

The backend is migrating from page numbers to opaque cursors, so a response
may carry either style, both, or neither. A cursor always wins.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from oliver.schemas.recommendation import RecommendationMeta


@dataclass(frozen=True, slots=True)
class CursorParam:
    value: str
    kind: str = field(default="cursor", init=False)

    def as_query(self) -> dict[str, Any]:
        return {"cursor": self.value}

    def serialize(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PageNumberParam:
    value: int
    kind: str = field(default="page", init=False)

    def as_query(self) -> dict[str, Any]:
        return {"page": self.value}

    def serialize(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class NoPageParam:
    kind: str = field(default="none", init=False)

    def as_query(self) -> dict[str, Any]:
        return {}

    def serialize(self) -> None:
        return None


PageParam = Union[CursorParam, PageNumberParam, NoPageParam]

FIRST_PAGE = NoPageParam()


def next_page_param(meta: RecommendationMeta) -> PageParam:
    """Return the parameter for the page after ``meta``'s page."""

    if meta.next_cursor:
        return CursorParam(meta.next_cursor)
    if meta.has_more and meta.next_page:
        return PageNumberParam(meta.next_page)
    return NoPageParam()


def parse_page_param(cursor: str | None = None, page: int | None = None) -> PageParam:
    """Rebuild a page parameter from query-string values sent back by a caller."""

    if cursor:
        return CursorParam(cursor)
    if page:
        return PageNumberParam(page)
    return NoPageParam()
