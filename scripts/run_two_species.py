#!/usr/bin/env python3
"""
Run the two-species grid preset (diploid + haploid on a 2x2 grid)
"""

import sys
import pathlib
import subprocess

# Create output directory
pathlib.Path("out_two_species").mkdir(exist_ok=True, parents=True)

sys.exit(subprocess.call([
    sys.executable, "-m", "evodynamics.run_experiment",
    "--preset", "two_species",
    "--outdir", "out_two_species",
    "--generations", "50",
    "--seed", "913",
    "--keep_haploids",
    "--verbose"
]))
