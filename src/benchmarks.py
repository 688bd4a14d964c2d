"""
Parameter sweep for the grid Bloom filter simulation.
Runs full scans across item counts, hash counts and filter sizes, and
compares the observed false positive rate against the theoretical one.
"""

import logging
import os
import time

import pandas as pd

import config
from driver import ScanDriver
from filters import estimated_false_positive_rate
from simulation import SimulationEngine, SimulationSettings

logger = logging.getLogger(__name__)


def run_trial(run_id, settings):
    """
    Runs one full scan and returns its result row.
    """
    start_time = time.perf_counter()
    engine = SimulationEngine(settings)
    build_duration = time.perf_counter() - start_time

    start_time = time.perf_counter()
    progress = ScanDriver(engine, settings.batch_size).run()
    scan_duration = time.perf_counter() - start_time

    true_negatives = progress.checks - settings.item_count
    observed_fpr = progress.misses / true_negatives if true_negatives > 0 else 0.0

    return {
        "RunID": run_id,
        "HashCount": settings.hash_count,
        "ItemCount": settings.item_count,
        "FilterSize": settings.filter_size,
        "LoadFactor": settings.item_count / settings.filter_size,
        "Checks": progress.checks,
        "Hits": progress.hits,
        "Misses": progress.misses,
        "FPR": observed_fpr,
        "ReportedRate(%)": progress.false_positive_rate or 0.0,
        "TheoreticalFPR": estimated_false_positive_rate(
            settings.filter_size, settings.hash_count, settings.item_count
        ),
        "FillRatio": engine.filter.fill_ratio(),
        "BuildTime(ms)": build_duration * 1e3,
        "ScanTime(ms)": scan_duration * 1e3,
    }


def build_experiments(
    item_counts=config.SWEEP_ITEM_COUNTS,
    hash_counts=config.SWEEP_HASH_COUNTS,
    filter_sizes=config.SWEEP_FILTER_SIZES,
    grid_side=config.GRID_SIDE,
):
    """All (filter_size, hash_count, item_count) combinations that fit the grid."""
    experiments = []
    for filter_size in filter_sizes:
        for hash_count in hash_counts:
            for item_count in item_counts:
                if item_count > grid_side * grid_side:
                    logger.warning("Skipping item_count=%d: larger than grid", item_count)
                    continue
                experiments.append((filter_size, hash_count, item_count))
    return experiments


def run_sweep(
    experiments=None,
    num_trials=config.NUM_TRIALS,
    seed=config.SWEEP_SEED,
    grid_side=config.GRID_SIDE,
    batch_size=config.BATCH_SIZE,
):
    if experiments is None:
        experiments = build_experiments(grid_side=grid_side)

    results = []
    for filter_size, hash_count, item_count in experiments:
        print(f"  m={filter_size} k={hash_count} n={item_count}", end="", flush=True)
        for i in range(num_trials):
            settings = SimulationSettings(
                hash_count=hash_count,
                item_count=item_count,
                filter_size=filter_size,
                batch_size=batch_size,
                grid_side=grid_side,
                seed=None if seed is None else seed + i,
            )
            results.append(run_trial(i, settings))
            print(".", end="", flush=True)
        print(" Done.")

    return pd.DataFrame(results)


def main():
    logging.basicConfig(format="%(levelname)s:%(message)s", level=logging.INFO)
    os.makedirs(config.CSV_DIR, exist_ok=True)

    print("Starting grid simulation sweep...")
    print(f"Grid: {config.GRID_SIDE}x{config.GRID_SIDE}, Trials: {config.NUM_TRIALS}")

    df = run_sweep()
    output_file = f"{config.CSV_DIR}/sweep_results.csv"
    df.to_csv(output_file, index=False)
    print(f"\nResults saved to {output_file}")

    summary = df.groupby(["FilterSize", "HashCount", "ItemCount"]).mean(
        numeric_only=True
    )
    print("\nSummary Results (Preview):")
    cols = ["Misses", "FPR", "TheoreticalFPR", "FillRatio", "ScanTime(ms)"]
    print(summary[cols].to_string())


if __name__ == "__main__":
    main()
