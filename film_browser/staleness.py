"""Cache staleness policy.

A pure decision function: callers look at an entry's ``last_fetched_at``
and decide whether to trigger a refetch.  Nothing here mutates a cache.
"""
from __future__ import annotations

import time


def is_stale(
    last_fetched_at: float | None,
    ttl: float,
    now: float | None = None,
) -> bool:
    """Return True once *ttl* seconds have elapsed since *last_fetched_at*.

    The boundary is inclusive: an entry exactly *ttl* old is stale.
    ``None`` means "never fetched" and is always stale.
    """
    if last_fetched_at is None:
        return True
    if now is None:
        now = time.time()
    return (now - last_fetched_at) >= ttl
