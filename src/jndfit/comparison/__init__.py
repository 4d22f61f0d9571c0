"""
comparison
==========

Model comparison by information criteria.

This subpackage provides:
- fit : constrained maximum-likelihood fit of one model.
- compare_models : fit all models to one dataset and rank them by BIC.
- ComparisonReport / ModelScore : read-only results.
- bic, aic : information criteria.
"""

from .comparator import check_sufficient_data, compare_models, fit, resolve_optimizer
from .criteria import aic, bic
from .report import ComparisonReport, ModelScore, build_report

__all__ = [
    "fit",
    "compare_models",
    "check_sufficient_data",
    "resolve_optimizer",
    "ComparisonReport",
    "ModelScore",
    "build_report",
    "bic",
    "aic",
]
