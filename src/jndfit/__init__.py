"""
jndfit
======

Fitting and comparing psychophysical models of ratio discrimination.

This package fits three competing models of how accuracy depends on a
stimulus ratio (NoJND, IntuitiveJND, CommonJND) to binary trial outcomes
by constrained maximum likelihood, and ranks them by the Bayesian
Information Criterion.

----------------------------------------------------------------------
Workflow
----------------------------------------------------------------------

Core design
-----------
1. Probability models (model/psychometric.py, model/spec.py):
   - Pure functions (params, ratio) -> P(correct), blended with a guess
     rate g.
   - ModelSpec records carry each model's parameter names, bounds and
     initial guess; MODELS maps a name to its spec.

2. Likelihood (model/likelihood.py):
   - Bernoulli negative log-likelihood with probabilities clamped into
     [eps, 1 - eps].

3. Optimizers (inference/):
   - SQPOptimizer (default): quasi-Newton SQP with an exact
     box-constrained QP subproblem; augmented Lagrangian for general
     constraints.
   - SLSQPOptimizer, ProjectedGradientOptimizer: alternative engines.

4. Comparison (comparison/):
   - fit(model_name, data) -> FitResult
   - compare_models(data) -> ComparisonReport (BIC, AIC, ranks)

Unified import style
--------------------
Top-level:
  from jndfit import TrialData, fit, compare_models, FitConfig
  from jndfit import load_trials_csv, SQPOptimizer

Subpackages:
  from jndfit.model import MODELS, get_model_spec, negative_log_likelihood
  from jndfit.inference import SQPOptimizer, SLSQPOptimizer, Bounds
  from jndfit.comparison import bic, aic, build_report
  from jndfit.utils import simulate_trials, expected_count_trials

Data flow
---------
- TrialData (jndfit.data) holds read-only ratio/outcome arrays.
- make_objective(spec, data) closes over both and returns a jitted
  NLL(params).
- The optimizer minimizes NLL within the model's bounds -> FitResult.
- compare_models scores every FitResult with
      BIC = 2 * NLL + k * ln(n)
  and ranks converged fits.

Numerics
--------
JAX is switched to 64-bit mode on import; optimizer tolerances assume
double precision.

----------------------------------------------------------------------
"""

import jax

jax.config.update("jax_enable_x64", True)

# Re-export subpackages for unified import style (e.g., jndfit.model)
from . import comparison as comparison  # noqa: E402
from . import data as data  # noqa: E402
from . import inference as inference  # noqa: E402
from . import model as model  # noqa: E402
from . import utils as utils  # noqa: E402

# Comparison
from .comparison import ComparisonReport, ModelScore, compare_models, fit  # noqa: E402
from .config import FitConfig  # noqa: E402

# Data
from .data import TrialData, load_trials_csv, save_trials_csv  # noqa: E402
from .errors import (  # noqa: E402
    ConvergenceFailure,
    InsufficientDataError,
    InvalidModelError,
    InvalidParameterError,
    JndFitError,
    NonFiniteObjectiveError,
)

# Inference
from .inference import (  # noqa: E402
    Bounds,
    FitResult,
    NonlinearConstraint,
    ProjectedGradientOptimizer,
    SLSQPOptimizer,
    SQPOptimizer,
)

# Models
from .model import MODEL_NAMES, MODELS, ModelSpec, get_model_spec  # noqa: E402

__all__ = [
    # Comparison
    "fit",
    "compare_models",
    "ComparisonReport",
    "ModelScore",
    "FitConfig",
    # Models
    "ModelSpec",
    "MODELS",
    "MODEL_NAMES",
    "get_model_spec",
    # Inference
    "SQPOptimizer",
    "SLSQPOptimizer",
    "ProjectedGradientOptimizer",
    "Bounds",
    "NonlinearConstraint",
    "FitResult",
    # Data handling
    "TrialData",
    "load_trials_csv",
    "save_trials_csv",
    # Errors
    "JndFitError",
    "InvalidModelError",
    "InvalidParameterError",
    "InsufficientDataError",
    "NonFiniteObjectiveError",
    "ConvergenceFailure",
    # Subpackages
    "model",
    "inference",
    "comparison",
    "utils",
    "data",
]
