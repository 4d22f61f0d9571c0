"""
jndfit.data
===========

submodule for handling ratio-discrimination trial data.

Includes:
- dataset: TrialData (immutable ratio/outcome arrays)
- io: CSV load/save
"""

from .dataset import TrialData
from .io import load_trials_csv, save_trials_csv

__all__ = ["TrialData", "load_trials_csv", "save_trials_csv"]
