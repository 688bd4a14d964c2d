"""
Ground-truth generation for the grid simulation.

Cells are identified by their canonical key "x,y". The ground truth is a
uniform random sample, without replacement, of ``item_count`` grid cells.
"""

import logging

import numpy as np

import config

logger = logging.getLogger(__name__)


def cell_key(x, y):
    """Canonical key for the cell at (x, y)."""
    return f"{x},{y}"


def parse_key(key):
    """
    Inverse of ``cell_key``.

    Raises:
        TypeError: If ``key`` is not a string.
        ValueError: If ``key`` is not of the form "x,y" with non-negative ints.
    """
    if not isinstance(key, str):
        raise TypeError(f"key must be a string, got {type(key).__name__}")
    parts = key.split(",")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"not a canonical cell key: {key!r}")
    return int(parts[0]), int(parts[1])


class GroundTruthSet:
    """The cells that were actually inserted. Immutable once built."""

    def __init__(self, keys=()):
        self._keys = frozenset(keys)

    def __contains__(self, key):
        return key in self._keys

    def __len__(self):
        return len(self._keys)

    def __iter__(self):
        return iter(self._keys)

    def cells(self):
        """Yields the (x, y) coordinates of every member."""
        for key in self._keys:
            yield parse_key(key)


def shuffle(slots, rng):
    """
    In-place Fisher-Yates shuffle.

    Walks from the last index down to 1, swapping each slot with a uniformly
    chosen index in [0, i].
    """
    n = len(slots)
    if n < 2:
        return slots
    # One draw per position, scaled to i + 1 for i = n-1 .. 1.
    picks = (rng.random_sample(n - 1) * np.arange(n, 1, -1)).astype(np.int64)
    for i, j in zip(range(n - 1, 0, -1), picks.tolist()):
        slots[i], slots[j] = slots[j], slots[i]
    return slots


def generate_ground_truth(
    item_count=config.NUM_ITEMS, grid_side=config.GRID_SIDE, rng=None
):
    """
    Picks ``item_count`` distinct cells uniformly at random.

    Marks the first ``item_count`` of grid_side**2 slots, shuffles them, then
    maps every marked flat index i to (i // grid_side, i % grid_side).

    Returns:
        keys (list): Canonical keys of the chosen cells, in flat-index order.
    """
    total = grid_side * grid_side
    if not 0 <= item_count <= total:
        raise ValueError(f"item_count must be between 0 and {total}")
    if rng is None:
        rng = np.random.RandomState()

    logger.debug("Generating %d items on a %dx%d grid", item_count, grid_side, grid_side)
    slots = [1] * item_count + [0] * (total - item_count)
    shuffle(slots, rng)

    return [
        cell_key(i // grid_side, i % grid_side)
        for i, marked in enumerate(slots)
        if marked
    ]
