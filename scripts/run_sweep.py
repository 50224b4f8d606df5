#!/usr/bin/env python3
"""
Sweep multiple seeds of the haploid preset to check the size stays near K
"""

import sys
import pathlib
import subprocess
import json

# Seeds to test
seeds = [913, 123, 456, 789, 2025]

results = []
for seed in seeds:
    outdir = f"out_sweep/seed_{seed}"
    pathlib.Path(outdir).mkdir(exist_ok=True, parents=True)

    # Run experiment
    ret = subprocess.call([
        sys.executable, "-m", "evodynamics.run_experiment",
        "--preset", "haploid",
        "--outdir", outdir,
        "--generations", "100",
        "--seed", str(seed)
    ])

    # Read results
    metadata_path = pathlib.Path(outdir) / "metadata.json"
    if ret == 0 and metadata_path.exists():
        with open(metadata_path) as f:
            meta = json.load(f)
            results.append({
                "seed": seed,
                "N": meta["results"]["final_sizes"][0],
                "mean_W": meta["results"]["final_mean_fitness"][0]
            })
            print(f"Seed {seed}: N={results[-1]['N']}, mean W={results[-1]['mean_W']:.4f}")

# Summary
with open("out_sweep/summary.json", "w") as f:
    json.dump(results, f, indent=2)

print("\nSummary:")
sizes = [r["N"] for r in results]
fits = [r["mean_W"] for r in results]
print(f"  N range: {min(sizes)} to {max(sizes)}")
print(f"  mean W range: {min(fits):.4f} to {max(fits):.4f}")
