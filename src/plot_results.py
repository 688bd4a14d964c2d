import os

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
import numpy as np
import pandas as pd
import seaborn as sns

import config

sns.set_theme(style="whitegrid")
sns.set_palette("colorblind")

CSV_PATH = os.path.join(config.CSV_DIR, "sweep_results.csv")

# Cell states in the scan image
EMPTY, ADDED, HIT, MISS = 0, 1, 2, 3


def load_results(csv_path):
    """Loads the sweep CSV, or returns None if it is missing."""
    if not os.path.exists(csv_path):
        print(f"Error: CSV file not found at {csv_path}")
        return None
    return pd.read_csv(csv_path)


def plot_fpr_vs_load(df, plots_dir=config.PLOTS_DIR):
    """Observed FPR against load factor, with the theoretical curve dashed."""
    print("Generating FPR vs load factor plots...")
    for filter_size, group in df.groupby("FilterSize"):
        plt.figure(figsize=(10, 5))
        sns.lineplot(
            data=group,
            x="LoadFactor",
            y="FPR",
            hue="HashCount",
            style="HashCount",
            markers=True,
            dashes=False,
            errorbar="sd",
            palette="colorblind",
        )
        theory = group.groupby(["HashCount", "LoadFactor"], as_index=False)[
            "TheoreticalFPR"
        ].mean()
        for _, curve in theory.groupby("HashCount"):
            plt.plot(curve["LoadFactor"], curve["TheoreticalFPR"], "k--", linewidth=0.8)

        plt.title(
            f"False Positive Rate vs Load (m={filter_size} bits)",
            fontsize=12,
            fontweight="bold",
        )
        plt.xlabel("Items per Bit (n/m)")
        plt.ylabel("False Positive Rate")
        plt.legend(title="Hashes (k)", bbox_to_anchor=(1.05, 1), loc="upper left")
        plt.tight_layout()
        path = os.path.join(plots_dir, f"fpr_vs_load_m{filter_size}.png")
        plt.savefig(path)
        plt.close()


def scan_grid(recorder, grid_side):
    """Builds a (grid_side, grid_side) array of cell states, indexed [y, x]."""
    grid = np.full((grid_side, grid_side), EMPTY, dtype=np.int8)
    for x, y in recorder.added.cells():
        grid[y, x] = ADDED
    for x, y in recorder.hit_cells:
        grid[y, x] = HIT
    for x, y in recorder.miss_cells:
        grid[y, x] = MISS
    return grid


def plot_scan_grid(recorder, grid_side, path):
    """Renders a finished scan: added cells black, hits green, misses red."""
    grid = scan_grid(recorder, grid_side)
    cmap = ListedColormap(
        ["white", "black", (0.0, 1.0, 0.0, 0.5), (1.0, 0.0, 0.0, 0.5)]
    )
    plt.figure(figsize=(8, 8))
    plt.imshow(grid, cmap=cmap, vmin=EMPTY, vmax=MISS, interpolation="nearest")
    plt.title(
        f"Scan: {len(recorder.hit_cells)} hits, {len(recorder.miss_cells)} false positives",
        fontsize=12,
        fontweight="bold",
    )
    plt.axis("off")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()


def main():
    if not os.path.exists(config.PLOTS_DIR):
        os.makedirs(config.PLOTS_DIR)
        print(f"Created directory: {config.PLOTS_DIR}")

    df = load_results(CSV_PATH)

    if df is not None:
        plot_fpr_vs_load(df)
        print(f"\nAll plots generated in: {os.path.abspath(config.PLOTS_DIR)}")


if __name__ == "__main__":
    main()
