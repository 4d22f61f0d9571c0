"""
Offline model comparison example
--------------------------------

Simulates a ratio-discrimination session from the CommonJND model, writes
it to CSV the way an experiment computer would, reloads it and compares
the three models by BIC. Plotting is left to the caller: the printed
report (or report.to_records()) holds everything needed to draw the
fitted curves.
"""
from __future__ import annotations

import os
import sys
import tempfile

import jax.random as jr
import numpy as np

# Ensure local src is importable when running directly
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../src")))

from jndfit import FitConfig, compare_models, load_trials_csv, save_trials_csv
from jndfit.utils import simulate_trials

# 1) Ground truth and synthetic data
print("[1/3] Simulating data...")
truth = {"alpha": 1.25, "beta": 5.0, "g": 0.08}
ratios = np.tile(np.linspace(0.5, 3.0, 26), 40)
data = simulate_trials("CommonJND", list(truth.values()), ratios, key=jr.PRNGKey(0))
print(f"  {len(data)} trials, overall accuracy {data.accuracy:.3f}")

# 2) Round-trip through the CSV format
print("[2/3] Writing and reloading CSV...")
with tempfile.TemporaryDirectory() as tmp:
    path = os.path.join(tmp, "sample_data.csv")
    save_trials_csv(data, path)
    data = load_trials_csv(path)

# 3) Fit and compare
print("[3/3] Fitting NoJND, IntuitiveJND, CommonJND...")
report = compare_models(data, config=FitConfig(max_iter=500, max_time=30.0), n_jobs=3)
print(report.summary())
print(f"Generating parameters: {truth}")
print(f"Recovered ({report.best}): {report[report.best].params if report.best else None}")
