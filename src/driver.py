"""
Batch-wise scan driver and the listener contract for the presentation layer.

A ScanDriver advances one SimulationEngine ``batch_size`` steps per tick and
reports to a ScanListener. Any cooperative scheduler can call ``tick()``;
``run()`` and ``iter_batches()`` are the plain-loop and generator forms.
"""

import logging

from simulation import HIT, MISS, SimulationEngine
from workloads import GroundTruthSet

logger = logging.getLogger(__name__)


class SimulationRunningError(RuntimeError):
    """Raised when a run is started while another is still scanning."""


class ScanListener:
    """
    Receives simulation events. All methods default to no-ops.

    ``on_hit`` is a true positive and ``on_miss`` a false positive; see
    simulation.py for how these relate to the ``hits``/``misses`` counters.
    """

    def on_cells_added(self, keys):
        pass

    def on_hit(self, x, y):
        pass

    def on_miss(self, x, y):
        pass

    def on_progress(self, checks, hits, misses, false_positive_rate):
        pass


class ConsoleListener(ScanListener):
    """Prints the counters after every batch."""

    def __init__(self, every=1):
        if isinstance(every, bool) or not isinstance(every, int) or every < 1:
            raise ValueError("every must be a positive integer")
        self.every = every
        self._batches = 0

    def on_cells_added(self, keys):
        print(f"Added {len(keys)} cells")

    def on_progress(self, checks, hits, misses, false_positive_rate):
        self._batches += 1
        if self._batches % self.every:
            return
        line = f"checks: {checks}  correct: {hits}  false: {misses}"
        if false_positive_rate is not None:
            line += f"  false positive rate: {false_positive_rate:.2f}%"
        print(line)


class RecordingListener(ScanListener):
    """Keeps every event it receives, e.g. for plotting or tests."""

    def __init__(self):
        self.added = GroundTruthSet()
        self.hit_cells = []
        self.miss_cells = []
        self.progress = []

    def on_cells_added(self, keys):
        self.added = GroundTruthSet(keys)

    def on_hit(self, x, y):
        self.hit_cells.append((x, y))

    def on_miss(self, x, y):
        self.miss_cells.append((x, y))

    def on_progress(self, checks, hits, misses, false_positive_rate):
        self.progress.append(
            {
                "checks": checks,
                "hits": hits,
                "misses": misses,
                "false_positive_rate": false_positive_rate,
            }
        )


class ScanDriver:
    """
    Steps one engine in batches and reports hits, misses and progress.

    The driver never calls ``on_cells_added``; ScanController.start sends it
    once before the first tick. Code that builds a driver directly and wants
    the added cells must pass ``engine.ground_truth`` to its listener itself.
    """

    def __init__(self, engine, batch_size=None, listener=None):
        if batch_size is None:
            batch_size = engine.settings.batch_size
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self.engine = engine
        self.batch_size = batch_size
        self.listener = listener if listener is not None else ScanListener()

    @property
    def done(self):
        return self.engine.done

    def tick(self):
        """
        Runs one bounded batch and reports it.

        Returns True while cells remain to be scanned.
        """
        if self.done:
            return False

        for event in self.engine.run_batch(self.batch_size):
            if event.kind == HIT:
                self.listener.on_hit(event.x, event.y)
            elif event.kind == MISS:
                self.listener.on_miss(event.x, event.y)

        progress = self.engine.progress()
        self.listener.on_progress(
            progress.checks,
            progress.hits,
            progress.misses,
            progress.false_positive_rate,
        )
        return not progress.done

    def iter_batches(self):
        """Yields a ScanProgress after every batch until the scan completes."""
        while self.tick():
            yield self.engine.progress()
        yield self.engine.progress()

    def run(self):
        while self.tick():
            pass
        return self.engine.progress()


class ScanController:
    """
    Starts runs, one at a time.

    ``start`` is rejected while the current scan is unfinished; once it
    completes, the next ``start`` replaces the engine and driver entirely.
    """

    def __init__(self, listener=None):
        self.listener = listener
        self.driver = None

    @property
    def running(self):
        return self.driver is not None and not self.driver.done

    def start(self, settings, listener=None):
        if self.running:
            raise SimulationRunningError("a scan is already in progress")

        listener = listener if listener is not None else self.listener
        engine = SimulationEngine(settings)
        driver = ScanDriver(engine, settings.batch_size, listener)
        driver.listener.on_cells_added(set(engine.ground_truth))
        logger.info(
            "Started scan: k=%d n=%d m=%d batch=%d",
            settings.hash_count,
            settings.item_count,
            settings.filter_size,
            settings.batch_size,
        )
        self.driver = driver
        return driver

    def tick(self):
        if not self.running:
            return False
        more = self.driver.tick()
        if not more:
            progress = self.driver.engine.progress()
            logger.info(
                "Scan complete: %d checks, %d false positives",
                progress.checks,
                progress.misses,
            )
        return more
