"""
dataset.py
-----------

Core data container for jndfit.

defines:
- TrialData: immutable container for ratio-discrimination trials

Notes
-----
- Data is stored in read-only NumPy arrays so a single TrialData can be
  shared by several fits (possibly on different threads) without copies.
- Arrays are converted to jax.numpy only inside the likelihood.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import jax.numpy as jnp
import numpy as np


class TrialData:
    """
    Container for ratio-discrimination trial data.

    Attributes
    ----------
    ratios : np.ndarray, shape (n_trials,)
        Stimulus ratio of each trial (finite, > 0).
    outcomes : np.ndarray, shape (n_trials,)
        1 for a correct response, 0 for an incorrect one.

    Examples
    --------
    >>> data = TrialData([1.1, 1.5, 2.0], [0, 1, 1])
    >>> len(data)
    3
    """

    __slots__ = ("_ratios", "_outcomes")

    def __init__(
        self,
        ratios: Sequence[float] | np.ndarray | jnp.ndarray,
        outcomes: Sequence[int] | np.ndarray | jnp.ndarray,
    ) -> None:
        ratios_arr = np.array(ratios, dtype=float)
        outcomes_raw = np.array(outcomes)

        if ratios_arr.ndim != 1 or outcomes_raw.ndim != 1:
            raise ValueError("ratios and outcomes must be 1-D sequences")
        if ratios_arr.shape != outcomes_raw.shape:
            raise ValueError(
                f"ratios and outcomes differ in length: "
                f"{ratios_arr.shape[0]} vs {outcomes_raw.shape[0]}"
            )
        if not np.all(np.isfinite(ratios_arr)):
            raise ValueError("ratios must be finite")
        if np.any(ratios_arr <= 0):
            raise ValueError("ratios must be strictly positive")
        if outcomes_raw.size and not np.all(np.isin(outcomes_raw, (0, 1))):
            raise ValueError("outcomes must be 0 or 1")

        outcomes_arr = outcomes_raw.astype(np.int64)
        ratios_arr.setflags(write=False)
        outcomes_arr.setflags(write=False)
        self._ratios = ratios_arr
        self._outcomes = outcomes_arr

    @property
    def ratios(self) -> np.ndarray:
        """Read-only array of stimulus ratios."""
        return self._ratios

    @property
    def outcomes(self) -> np.ndarray:
        """Read-only array of binary outcomes."""
        return self._outcomes

    @classmethod
    def from_records(cls, records: Iterable[tuple[float, int]]) -> TrialData:
        """
        Construct TrialData from (ratio, outcome) pairs.

        Parameters
        ----------
        records : iterable of (float, int)

        Returns
        -------
        TrialData
        """
        pairs = list(records)
        ratios = [r for r, _ in pairs]
        outcomes = [y for _, y in pairs]
        return cls(ratios, outcomes)

    def to_numpy(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (ratios, outcomes) as NumPy arrays."""
        return self._ratios, self._outcomes

    def to_jax(self) -> tuple[jnp.ndarray, jnp.ndarray]:
        """Return (ratios, outcomes) as float JAX arrays."""
        return jnp.asarray(self._ratios), jnp.asarray(self._outcomes, dtype=float)

    @property
    def trials(self) -> list[tuple[float, int]]:
        """List of (ratio, outcome) tuples."""
        return [(float(r), int(y)) for r, y in zip(self._ratios, self._outcomes)]

    @property
    def accuracy(self) -> float:
        """Fraction of correct trials (nan for an empty dataset)."""
        if len(self) == 0:
            return float("nan")
        return float(np.mean(self._outcomes))

    def __len__(self) -> int:
        """Return number of trials."""
        return int(self._ratios.shape[0])

    def __repr__(self) -> str:
        return f"TrialData(n_trials={len(self)})"
