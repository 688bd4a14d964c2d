"""
Configuration parameters for the grid Bloom filter simulation.
"""

# Grid Settings
GRID_SIDE = 150  # Cells per side; the key space is GRID_SIDE * GRID_SIDE

# Filter Settings
FILTER_SIZE = 4096  # Number of bits in the filter
NUM_HASHES = 2  # Probe indices per add/query

# Simulation Settings
NUM_ITEMS = 100  # Cells inserted into the ground truth
BATCH_SIZE = 500  # Scan steps per scheduling tick
SEED = None  # Random seed; None draws a fresh shuffle every run

# Sweep Settings
SWEEP_ITEM_COUNTS = [100, 500, 1000, 2000, 4000]
SWEEP_HASH_COUNTS = [1, 2, 3, 4]
SWEEP_FILTER_SIZES = [4096, 16384]
NUM_TRIALS = 3  # Runs per configuration
SWEEP_SEED = 42  # Base seed for reproducible sweeps

# Paths
RESULTS_DIR = "results"
CSV_DIR = f"{RESULTS_DIR}/csv"
PLOTS_DIR = f"{RESULTS_DIR}/plots"
