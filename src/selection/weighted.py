# src/selection/weighted.py — v1
"""Random quote selection over a (id, likes) pool snapshot.

Weighted draws use ``likes + 1`` so that quotes nobody has liked yet still
have a nonzero chance. Candidates keep the order of the snapshot they come
from; the cumulative walk depends on it.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

import numpy as np

from quoterec.core.models import PoolEntry

logger = logging.getLogger(__name__)


def _filter_pool(
    pool: Sequence[PoolEntry],
    exclude_ids: Collection[str],
    min_likes: int = 0,
) -> list[PoolEntry]:
    excluded = set(exclude_ids)
    return [
        entry for entry in pool
        if entry.likes >= min_likes and entry.id not in excluded
    ]


def pick_weighted(
    pool: Sequence[PoolEntry],
    exclude_ids: Collection[str] = (),
    min_likes: int = 0,
    rng: np.random.Generator | None = None,
) -> str | None:
    """Pick a quote id with probability proportional to ``likes + 1``.

    Args:
        pool: Snapshot of candidates, in stable order.
        exclude_ids: Ids that must not be returned.
        min_likes: Candidates below this like count are ignored.
        rng: Random generator. A fresh unseeded one is used if None.

    Returns:
        The selected id, or None when no candidate survives filtering.
    """
    candidates = _filter_pool(pool, exclude_ids, min_likes)
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0].id

    rng = rng if rng is not None else np.random.default_rng()
    weights = np.fromiter(
        (entry.likes + 1 for entry in candidates),
        dtype=np.float64,
        count=len(candidates),
    )
    cumulative = np.cumsum(weights)
    total = float(cumulative[-1])
    r = rng.uniform(0.0, total)

    # First index whose cumulative weight is >= r
    index = int(np.searchsorted(cumulative, r, side="left"))
    index = min(index, len(candidates) - 1)
    chosen = candidates[index]
    logger.debug(
        "Weighted pick %s (likes=%d, weight=%d, total=%d)",
        chosen.id, chosen.likes, chosen.likes + 1, int(total),
    )
    return chosen.id


def pick_uniform(
    pool: Sequence[PoolEntry],
    exclude_ids: Collection[str] = (),
    rng: np.random.Generator | None = None,
) -> str | None:
    """Pick a quote id uniformly at random, ignoring likes."""
    candidates = _filter_pool(pool, exclude_ids)
    if not candidates:
        return None
    rng = rng if rng is not None else np.random.default_rng()
    offset = int(rng.integers(0, len(candidates)))
    return candidates[offset].id
