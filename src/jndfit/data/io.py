"""
io.py
-----

CSV utilities for trial data.

Format
------
A header row followed by one row per trial. At minimum a ratio column and
a binary (0/1) outcome column are required; other columns are ignored.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Union

from .dataset import TrialData

PathLike = Union[str, Path]


def load_trials_csv(
    path: PathLike,
    *,
    ratio_column: str = "ratio",
    outcome_column: str = "outcome",
) -> TrialData:
    """
    Load TrialData from a CSV file.

    Parameters
    ----------
    path : str or Path
    ratio_column : str, default="ratio"
        Header of the numeric ratio column.
    outcome_column : str, default="outcome"
        Header of the 0/1 outcome column.

    Returns
    -------
    TrialData

    Raises
    ------
    ValueError
        If a required column is missing, a value is empty or unparsable,
        or the parsed values fail TrialData validation.
    """
    ratios: list[float] = []
    outcomes: list[float] = []
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []
        missing = [c for c in (ratio_column, outcome_column) if c not in header]
        if missing:
            raise ValueError(f"{path}: missing required column(s) {missing}")
        # line 1 is the header
        for line_no, row in enumerate(reader, start=2):
            raw_ratio = (row.get(ratio_column) or "").strip()
            raw_outcome = (row.get(outcome_column) or "").strip()
            if not raw_ratio or not raw_outcome:
                raise ValueError(f"{path}:{line_no}: missing value")
            try:
                ratios.append(float(raw_ratio))
                outcomes.append(float(raw_outcome))
            except ValueError as exc:
                raise ValueError(f"{path}:{line_no}: {exc}") from exc
    return TrialData(ratios, outcomes)


def save_trials_csv(
    data: TrialData,
    path: PathLike,
    *,
    ratio_column: str = "ratio",
    outcome_column: str = "outcome",
) -> None:
    """
    Save TrialData to a CSV file.

    Parameters
    ----------
    data : TrialData
    path : str or Path
    """
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([ratio_column, outcome_column])
        for ratio, outcome in data.trials:
            writer.writerow([repr(ratio), outcome])
