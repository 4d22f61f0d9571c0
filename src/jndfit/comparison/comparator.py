"""
comparator.py
-------------

Fit each model to a shared dataset and rank the fits by BIC.

Public API
----------
- fit(model_name, data) -> FitResult
- compare_models(data) -> ComparisonReport

Failure policy
--------------
- Unknown model names raise InvalidModelError.
- Datasets with fewer trials than a requested model's parameter count
  raise InsufficientDataError before any fit starts.
- A fit that stops without converging is kept in the report (rank None),
  excluded from the best-model choice, and announced with a
  ConvergenceFailure warning. The remaining models are still compared.

Concurrency
-----------
The fits share a read-only TrialData and produce independently owned
FitResults, so compare_models can run them on a thread pool (n_jobs > 1)
and merge afterwards without locking.
"""

from __future__ import annotations

import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from jndfit.comparison.report import ComparisonReport, build_report
from jndfit.config import FitConfig
from jndfit.data.dataset import TrialData
from jndfit.errors import ConvergenceFailure, InsufficientDataError
from jndfit.inference import OPTIMIZERS
from jndfit.inference.base import Optimizer
from jndfit.inference.result import FitResult
from jndfit.model.likelihood import make_objective
from jndfit.model.spec import MODEL_NAMES, ModelSpec, get_model_spec


def resolve_optimizer(
    optimizer: str | Optimizer | None, config: FitConfig | None = None
) -> Optimizer:
    """
    Turn an optimizer name, instance or None into an Optimizer.

    Parameters
    ----------
    optimizer : str | Optimizer | None
        Key of OPTIMIZERS ("sqp", "slsqp", "projected"), an instance, or
        None for the default SQPOptimizer.
    config : FitConfig | None
        Used when constructing from a name or None. Ignored for instances.
    """
    if isinstance(optimizer, Optimizer):
        return optimizer
    name = "sqp" if optimizer is None else optimizer
    try:
        cls = OPTIMIZERS[name]
    except KeyError:
        raise ValueError(
            f"unknown optimizer {name!r}; expected one of {sorted(OPTIMIZERS)}"
        ) from None
    return cls(config)


def check_sufficient_data(spec: ModelSpec, data: TrialData) -> None:
    """Raise InsufficientDataError if data has fewer trials than spec has parameters."""
    if len(data) < spec.n_params:
        raise InsufficientDataError(
            f"{spec.name} has {spec.n_params} parameters but the dataset has "
            f"only {len(data)} trial(s)"
        )


def fit(
    model_name: str | ModelSpec,
    data: TrialData,
    *,
    optimizer: str | Optimizer | None = None,
    config: FitConfig | None = None,
    init_params: Sequence[float] | None = None,
) -> FitResult:
    """
    Fit one model to data by constrained maximum likelihood.

    Parameters
    ----------
    model_name : str or ModelSpec
        One of "NoJND", "IntuitiveJND", "CommonJND" (or a custom spec).
    data : TrialData
        Observed trials (not modified).
    optimizer : str | Optimizer | None
        Engine to use; default SQPOptimizer.
    config : FitConfig | None
        Tolerances and budgets; default FitConfig().
    init_params : sequence of float, optional
        Starting point overriding the model's initial guess.

    Returns
    -------
    FitResult
        Labelled with the model name and parameter names. Check
        `.success` before trusting the parameters.

    Raises
    ------
    InvalidModelError
        Unknown model name.
    InsufficientDataError
        Fewer trials than parameters.
    InvalidParameterError
        init_params outside the model's bounds.
    """
    spec = get_model_spec(model_name)
    config = config or FitConfig()
    check_sufficient_data(spec, data)
    x0 = spec.initial_guess if init_params is None else init_params
    x0 = spec.bounds.check_point(x0, name=f"{spec.name} initial guess")

    engine = resolve_optimizer(optimizer, config)
    objective = make_objective(spec, data, eps=config.prob_eps)
    result = engine.minimize(objective, x0, spec.bounds)
    return result.with_model(spec.name, spec.param_names)


def compare_models(
    data: TrialData,
    models: Sequence[str | ModelSpec] = MODEL_NAMES,
    *,
    optimizer: str | Optimizer | None = None,
    config: FitConfig | None = None,
    n_jobs: int = 1,
) -> ComparisonReport:
    """
    Fit every model to the same data and rank them by BIC.

    Parameters
    ----------
    data : TrialData
        Shared, read-only dataset.
    models : sequence of str or ModelSpec, default=all three models
    optimizer : str | Optimizer | None
        Engine used for every fit.
    config : FitConfig | None
        Tolerances and budgets for every fit.
    n_jobs : int, default=1
        Number of worker threads; 1 fits sequentially.

    Returns
    -------
    ComparisonReport
        Keyed by model name in the order given.

    Raises
    ------
    InvalidModelError, InsufficientDataError
        Raised before any fit is attempted.
    """
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")
    specs = [get_model_spec(m) for m in models]
    names = [s.name for s in specs]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate model names in {names}")
    for spec in specs:
        check_sufficient_data(spec, data)

    config = config or FitConfig()
    engine = resolve_optimizer(optimizer, config)

    def run(spec: ModelSpec) -> FitResult:
        return fit(spec, data, optimizer=engine, config=config)

    if n_jobs == 1 or len(specs) == 1:
        results = [run(spec) for spec in specs]
    else:
        with ThreadPoolExecutor(max_workers=min(n_jobs, len(specs))) as pool:
            results = list(pool.map(run, specs))

    fits = dict(zip(names, results))
    for name, result in fits.items():
        if not result.success:
            warnings.warn(
                f"{name} fit did not converge ({result.message}); "
                "it is excluded from the best-model choice.",
                ConvergenceFailure,
                stacklevel=2,
            )
    return build_report(fits, len(data))
