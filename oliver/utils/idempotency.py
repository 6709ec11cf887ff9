"""Request-id helpers for mutating backend calls."""
from __future__ import annotations

import random
import uuid
from typing import Any, Mapping

from loguru import logger

_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"


def _manual_uuid4(rng: random.Random | None = None) -> str:
    """Build a version-4 shaped identifier from random nibbles."""

    rng = rng or random.SystemRandom()
    chars = []
    for char in _TEMPLATE:
        if char == "x":
            chars.append(format(rng.randrange(16), "x"))
        elif char == "y":
            chars.append(format(rng.randrange(16) & 0x3 | 0x8, "x"))
        else:
            chars.append(char)
    return "".join(chars)


def generate_request_id() -> str:
    """Return a UUID v4 string used as an idempotency key."""

    try:
        return str(uuid.uuid4())
    except (NotImplementedError, OSError) as exc:
        # uuid4 needs os.urandom, which some sandboxes do not provide.
        logger.warning("Falling back to manual request id generation", error=str(exc))
        return _manual_uuid4(random.Random())


def with_idempotency(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``payload`` carrying a fresh ``requestId``."""

    return {**payload, "requestId": generate_request_id()}
