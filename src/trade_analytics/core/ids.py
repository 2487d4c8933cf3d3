"""Identifier factories.

Two kinds of id are used by the analytics core:

1. Random ids (UUID v4 strings) for executions created without one and
   for trades assembled by hand.
2. Content-derived ids (truncated SHA256) for reconstructed trades, so the
   same executions always reconstruct to the same trade ids.
"""

from __future__ import annotations

import hashlib
import uuid


def new_id() -> str:
    """Fresh UUID v4 string."""
    return str(uuid.uuid4())


def content_hash(*parts: str, length: int = 32) -> str:
    """Deterministic hex id from *parts* joined with ``':'``.

    Parameters
    ----------
    *parts:
        Strings identifying the entity.
    length:
        Hex characters kept from the SHA256 digest (default 32).
    """
    raw = ":".join(parts)
    return hashlib.sha256(raw.encode()).hexdigest()[:length]
