"""
Simulation engine: a Bloom filter, its ground truth, and an exhaustive scan.

Counter and event names are asymmetric:

* ``hits`` counts true negatives (filter says "definitely absent").
* ``misses`` counts false positives.
* The per-cell events are named after what the grid shows: a ``"hit"`` event
  is a true positive and a ``"miss"`` event is a false positive. True
  negatives produce an ``"absent"`` event, which the presentation layer does
  not draw.

So ``hits`` and ``"hit"`` events never refer to the same cells.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

import config
from filters import BloomFilter
from workloads import GroundTruthSet, cell_key, generate_ground_truth

logger = logging.getLogger(__name__)

HIT = "hit"
MISS = "miss"
ABSENT = "absent"

# numpy RandomState seeds are 32-bit
MAX_SEED = 2**32 - 1


def _check_int(name, value, minimum):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class SimulationSettings:
    """Validated configuration for one run."""

    hash_count: int = config.NUM_HASHES
    item_count: int = config.NUM_ITEMS
    filter_size: int = config.FILTER_SIZE
    batch_size: int = config.BATCH_SIZE
    grid_side: int = config.GRID_SIDE
    seed: Optional[int] = config.SEED

    def __post_init__(self):
        _check_int("hash_count", self.hash_count, 1)
        _check_int("filter_size", self.filter_size, 1)
        _check_int("batch_size", self.batch_size, 1)
        _check_int("grid_side", self.grid_side, 1)
        _check_int("item_count", self.item_count, 0)
        if self.item_count > self.total_cells:
            raise ValueError(
                f"item_count must be <= {self.total_cells}, got {self.item_count}"
            )
        if self.seed is not None:
            _check_int("seed", self.seed, 0)
            if self.seed > MAX_SEED:
                raise ValueError(f"seed must be <= {MAX_SEED}, got {self.seed}")

    @property
    def total_cells(self):
        return self.grid_side * self.grid_side


@dataclass(frozen=True)
class ScanEvent:
    kind: str
    x: int
    y: int


@dataclass(frozen=True)
class ScanProgress:
    """Counter snapshot taken after a batch."""

    checks: int
    hits: int
    misses: int
    done: bool

    @property
    def false_positive_rate(self):
        """misses / checks * 100, or None until there is at least one miss."""
        if self.checks > 0 and self.misses > 0:
            return self.misses / self.checks * 100
        return None

    def format_rate(self):
        rate = self.false_positive_rate
        return None if rate is None else f"{rate:.2f}%"


class SimulationEngine:
    """
    Owns one filter and its ground truth and scans every cell once.

    The scan is row-major over keys "x,y": x advances first, then y, and the
    scan is complete once y reaches ``grid_side``.
    """

    def __init__(self, settings=None):
        if settings is None:
            settings = SimulationSettings()
        self.settings = settings
        self.grid_side = settings.grid_side

        self.hits = 0
        self.misses = 0
        self.checks = 0

        self.x = 0
        self.y = 0

        self.filter = BloomFilter(settings.filter_size, settings.hash_count)
        self._rng = np.random.RandomState(settings.seed)
        self.ground_truth = self.generate_ground_truth(settings.item_count)

    def generate_ground_truth(self, item_count):
        keys = generate_ground_truth(item_count, self.grid_side, self._rng)
        self.filter.update(keys)
        logger.debug(
            "Inserted %d cells, %d/%d filter bits set",
            len(keys),
            self.filter.bits_set(),
            self.filter.size,
        )
        return GroundTruthSet(keys)

    @property
    def done(self):
        return self.y >= self.grid_side

    def step(self):
        """
        Classifies the cell under the cursor and advances the cursor.

        Returns the ScanEvent, or None once the scan is complete.
        """
        if self.done:
            return None

        x, y = self.x, self.y
        key = cell_key(x, y)
        if self.filter.likely(key):
            if key in self.ground_truth:
                kind = HIT
            else:
                self.misses += 1
                kind = MISS
        else:
            self.hits += 1
            kind = ABSENT
        self.checks += 1

        self.x += 1
        if self.x == self.grid_side:
            self.x = 0
            self.y += 1
        return ScanEvent(kind, x, y)

    def run_batch(self, batch_size):
        """Runs up to ``batch_size`` steps; fewer if the scan ends first."""
        events = []
        while len(events) < batch_size and not self.done:
            events.append(self.step())
        return events

    def progress(self):
        return ScanProgress(self.checks, self.hits, self.misses, self.done)
