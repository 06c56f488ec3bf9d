"""
Distribution fitting.

Usage:
    from pydistfit.fitting import fit_distribution

    fit = fit_distribution(data, "gamma", method="mle")
    fit.params        # {'shape': ..., 'rate': ...}
    print(fit.summary())
"""

from pydistfit.fitting.solvers import estimate_parameters, fit_distribution
from pydistfit.fitting.solution import FitSolution

__all__ = [
    "estimate_parameters",
    "fit_distribution",
    "FitSolution",
]
