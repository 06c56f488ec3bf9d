"""
PyDistFit bootstrap confidence intervals.

Parametric, nonparametric and BCa bootstrap intervals for the parameters
of a fitted distribution, with optional parallel execution.

Usage:
    from pydistfit.fitting import fit_distribution
    from pydistfit.montecarlo import bootstrap_ci

    fit = fit_distribution(data, "normal")
    result = bootstrap_ci(fit, mode="bca", replicate_count=999, seed=42)
    print(result.summary())
"""

from pydistfit.montecarlo.design import (
    BootstrapDesign,
    BootstrapMode,
    DistributionEstimator,
    FittedModel,
    ParameterEstimator,
)
from pydistfit.montecarlo._common import ParameterInterval
from pydistfit.montecarlo.solution import BootstrapSolution
from pydistfit.montecarlo.solvers import bootstrap_ci

__all__ = [
    "bootstrap_ci",
    "BootstrapDesign",
    "BootstrapMode",
    "BootstrapSolution",
    "DistributionEstimator",
    "FittedModel",
    "ParameterEstimator",
    "ParameterInterval",
]
