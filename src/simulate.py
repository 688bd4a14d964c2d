"""
Runs one grid simulation from the command line and prints its counters.
"""

import argparse
import logging

import config
from driver import ConsoleListener, RecordingListener, ScanController
from simulation import SimulationSettings


class _TeeListener(RecordingListener):
    def __init__(self, console):
        super().__init__()
        self.console = console

    def on_cells_added(self, keys):
        super().on_cells_added(keys)
        self.console.on_cells_added(keys)

    def on_progress(self, checks, hits, misses, false_positive_rate):
        super().on_progress(checks, hits, misses, false_positive_rate)
        self.console.on_progress(checks, hits, misses, false_positive_rate)


def build_parser():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--hashes", type=int, default=config.NUM_HASHES)
    parser.add_argument("--items", type=int, default=config.NUM_ITEMS)
    parser.add_argument("--bits", type=int, default=config.FILTER_SIZE)
    parser.add_argument("--iterations", type=int, default=config.BATCH_SIZE)
    parser.add_argument("--grid-side", type=int, default=config.GRID_SIDE)
    parser.add_argument("--seed", type=int, default=config.SEED)
    parser.add_argument(
        "--report-every", type=int, default=10, help="Print every Nth batch"
    )
    parser.add_argument("--plot", help="Save the scanned grid as an image")
    parser.add_argument("--debug", action="store_true")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        format="%(levelname)s:%(message)s",
        level=logging.DEBUG if args.debug else logging.INFO,
    )

    try:
        settings = SimulationSettings(
            hash_count=args.hashes,
            item_count=args.items,
            filter_size=args.bits,
            batch_size=args.iterations,
            grid_side=args.grid_side,
            seed=args.seed,
        )
    except ValueError as e:
        parser.error(str(e))

    listener = _TeeListener(ConsoleListener(every=max(1, args.report_every)))
    controller = ScanController(listener)
    controller.start(settings)
    while controller.tick():
        pass

    progress = controller.driver.engine.progress()
    print(f"\nchecks: {progress.checks}")
    print(f"correct: {progress.hits}")
    print(f"false: {progress.misses}")
    rate = progress.format_rate()
    if rate is not None:
        print(f"false positive rate: {rate}")

    if args.plot:
        import plot_results

        plot_results.plot_scan_grid(listener, settings.grid_side, args.plot)
        print(f"Grid image saved to {args.plot}")
    return progress


if __name__ == "__main__":
    main()
