"""A/B group assignment for recommendation experiments."""
from __future__ import annotations

from typing import Literal

ABGroup = Literal["A", "B", "control"]

_GROUPS: tuple[ABGroup, ...] = ("A", "B", "control")


def _hash_string(value: str) -> int:
    """Java-style 32-bit string hash, returned as a non-negative int."""

    hashed = 0
    for char in value:
        hashed = ((hashed << 5) - hashed + ord(char)) & 0xFFFFFFFF
    if hashed >= 0x80000000:
        hashed -= 0x100000000
    return abs(hashed)


def get_ab_group(user_id: str | int | None = None) -> ABGroup:
    """Return the experiment group for ``user_id``.

    Group ``A`` sees AI recommendations, ``B`` sees FSRS-only suggestions and
    ``control`` keeps the default behaviour. Anonymous callers are always
    ``control``.
    """

    if user_id is None or user_id == "" or user_id == 0:
        return "control"
    return _GROUPS[_hash_string(str(user_id)) % 3]


def should_show_ai_recommendations(user_id: str | int | None = None) -> bool:
    return get_ab_group(user_id) == "A"
