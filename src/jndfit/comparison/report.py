"""
report.py
---------

ComparisonReport: per-model fit results, information criteria and ranks.

A report is built once per dataset (build_report) and is read-only
afterwards. Ranks use standard competition ranking on BIC among converged
fits: models whose BIC agree within TIE_TOL share a rank, and the next
rank skips accordingly (1, 1, 3). Non-converged fits get no rank and are
never "best".
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from jndfit.comparison.criteria import aic, bic
from jndfit.inference.result import FitResult

TIE_TOL = 1e-9


@dataclass(frozen=True)
class ModelScore:
    """
    One row of a comparison report.

    Attributes
    ----------
    fit : FitResult
    bic : float
    aic : float
    rank : int | None
        BIC rank among converged fits (1 = best); None for failed fits.
    """

    fit: FitResult
    bic: float
    aic: float
    rank: int | None

    @property
    def success(self) -> bool:
        return self.fit.success

    @property
    def params(self) -> dict[str, float]:
        return self.fit.as_dict()

    @property
    def nll(self) -> float:
        return self.fit.nll


class ComparisonReport(Mapping[str, ModelScore]):
    """
    Read-only mapping model name -> ModelScore.

    Attributes
    ----------
    n_trials : int
        Number of trials the models were fitted to.
    best : str | None
        Lowest-BIC converged model (first in insertion order on ties),
        None when every fit failed.
    best_models : tuple[str, ...]
        All converged models tied at the lowest BIC.
    failed : tuple[str, ...]
        Models whose fit did not converge.
    """

    def __init__(self, scores: Mapping[str, ModelScore], n_trials: int):
        self._scores = MappingProxyType(dict(scores))
        self.n_trials = int(n_trials)
        self.best_models = tuple(
            name for name, s in self._scores.items() if s.rank == 1
        )
        self.best = self.best_models[0] if self.best_models else None
        self.failed = tuple(
            name for name, s in self._scores.items() if not s.success
        )

    def __getitem__(self, name: str) -> ModelScore:
        return self._scores[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    @property
    def ranking(self) -> list[tuple[str, int]]:
        """(name, rank) for converged models, best first."""
        ranked = [(n, s.rank) for n, s in self._scores.items() if s.rank is not None]
        return sorted(ranked, key=lambda item: item[1])

    def delta_bic(self) -> dict[str, float]:
        """BIC difference of each converged model to the best one."""
        if self.best is None:
            return {}
        ref = self._scores[self.best].bic
        return {
            n: s.bic - ref for n, s in self._scores.items() if s.rank is not None
        }

    def to_records(self) -> list[dict]:
        """
        Flat per-model records for tabular export (e.g. pandas.DataFrame).

        Returns
        -------
        list[dict]
            Keys: model, rank, success, nll, bic, aic, n_params, n_trials,
            message and one key per named parameter.
        """
        records = []
        for name, s in self._scores.items():
            record = {
                "model": name,
                "rank": s.rank,
                "success": s.success,
                "nll": s.nll,
                "bic": s.bic,
                "aic": s.aic,
                "n_params": s.fit.n_params,
                "n_trials": self.n_trials,
                "message": s.fit.message,
            }
            record.update(s.params)
            records.append(record)
        return records

    def summary(self) -> str:
        """Plain-text table of the comparison, best model first."""
        order = [n for n, _ in self.ranking] + list(self.failed)
        lines = [
            f"Model comparison ({self.n_trials} trials):",
            f"{'rank':>4}  {'model':<14}{'NLL':>12}{'BIC':>12}{'AIC':>12}  parameters",
        ]
        for name in order:
            s = self._scores[name]
            rank = "-" if s.rank is None else str(s.rank)
            params = ", ".join(f"{k}={v:.4g}" for k, v in s.params.items())
            flag = "" if s.success else "  [not converged]"
            lines.append(
                f"{rank:>4}  {name:<14}{s.nll:>12.3f}{s.bic:>12.3f}{s.aic:>12.3f}"
                f"  {params}{flag}"
            )
        if self.best is not None:
            lines.append(f"Best model: {', '.join(self.best_models)}")
        else:
            lines.append("Best model: none (no fit converged)")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ComparisonReport(models={list(self._scores)}, best={self.best!r}, "
            f"n_trials={self.n_trials})"
        )


def build_report(fits: Mapping[str, FitResult], n_trials: int) -> ComparisonReport:
    """
    Score and rank fitted models.

    Parameters
    ----------
    fits : Mapping[str, FitResult]
        Fit per model name; k is taken from the length of each params vector.
    n_trials : int
        Number of trials n in the dataset.

    Returns
    -------
    ComparisonReport
    """
    criteria = {}
    for name, fit in fits.items():
        if math.isfinite(fit.nll):
            criteria[name] = (bic(fit.nll, fit.n_params, n_trials), aic(fit.nll, fit.n_params))
        else:
            criteria[name] = (math.nan, math.nan)

    ranked = sorted(
        (name for name, fit in fits.items() if fit.success and math.isfinite(criteria[name][0])),
        key=lambda name: criteria[name][0],
    )
    ranks: dict[str, int] = {}
    for position, name in enumerate(ranked, start=1):
        previous = ranked[position - 2] if position > 1 else None
        if previous is not None and math.isclose(
            criteria[name][0], criteria[previous][0], rel_tol=0.0, abs_tol=TIE_TOL
        ):
            ranks[name] = ranks[previous]
        else:
            ranks[name] = position

    scores = {
        name: ModelScore(
            fit=fit,
            bic=criteria[name][0],
            aic=criteria[name][1],
            rank=ranks.get(name),
        )
        for name, fit in fits.items()
    }
    return ComparisonReport(scores, n_trials)
