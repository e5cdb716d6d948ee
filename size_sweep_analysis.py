import json
import os
import subprocess
import tempfile

import matplotlib.pyplot as plt
import pandas as pd

# Configuration
BASE_CONFIG = "percolation_engine/config_comparison.json"
GRID_SIZES = [10, 20, 40, 60, 80, 100]
TRIALS = 50
OUTPUT_DIR = "results_size_sweep"

with open(BASE_CONFIG, 'r') as f:
    config = json.load(f)

config['grid_sizes'] = GRID_SIZES
config['trials'] = TRIALS
tmp_fd, temp_config_path = tempfile.mkstemp(suffix="_sweep.json", prefix="percolation_")
with os.fdopen(tmp_fd, 'w') as f:
    json.dump(config, f)

cmd = ["python3", "-m", "percolation_engine.runner", "compare", temp_config_path,
       "--output-dir", OUTPUT_DIR]
proc = subprocess.run(cmd, capture_output=True, text=True)
if os.path.exists(temp_config_path):
    os.remove(temp_config_path)
if proc.returncode != 0:
    print(f"  [WARNING] subprocess failed (exit {proc.returncode}):")
    for line in proc.stderr.strip().splitlines()[-5:]:
        print(f"    {line}")
    raise SystemExit(proc.returncode)

df = pd.read_csv(os.path.join(OUTPUT_DIR, "comparison_results.csv"))

print(f"{'n':<6} | {'Naive (s)':<12} | {'Weighted (s)':<12} | {'Speedup':<8}")
print("-" * 48)
for _, row in df.iterrows():
    naive = "-" if pd.isna(row['naive_elapsed_s']) else f"{row['naive_elapsed_s']:.3f}"
    weighted = "-" if pd.isna(row['weighted_elapsed_s']) else f"{row['weighted_elapsed_s']:.3f}"
    speedup = "-" if pd.isna(row['speedup']) else f"{row['speedup']:.2f}x"
    print(f"{int(row['n']):<6} | {naive:<12} | {weighted:<12} | {speedup:<8}")

# Plotting
plt.figure(figsize=(12, 5))
plt.subplot(1, 2, 1)
plt.plot(df['n'], df['naive_elapsed_s'], marker='o', color='red', label='Quick-Find')
plt.plot(df['n'], df['weighted_elapsed_s'], marker='s', color='blue', label='Weighted QU')
plt.title(f'Elapsed time for {TRIALS} trials')
plt.xlabel('Grid size n')
plt.ylabel('Seconds')
plt.legend()
plt.grid(True)

plt.subplot(1, 2, 2)
plt.plot(df['n'], df['speedup'], marker='^', color='green')
plt.title('Speedup: Quick-Find / Weighted QU')
plt.xlabel('Grid size n')
plt.ylabel('Speedup (x)')
plt.grid(True)

plt.tight_layout()
plt.savefig("size_sweep_results.png")
plt.show()
