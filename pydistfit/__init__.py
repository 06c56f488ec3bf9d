"""
PyDistFit: distribution fitting with bootstrap confidence intervals.

Fit a probability distribution to data and characterize the uncertainty
of its parameters with parametric, nonparametric or BCa bootstrap
intervals, optionally in parallel.

Submodules:
    distributions: Registry of supported families (scipy.stats backed)
    fitting: Maximum likelihood, moments and quantile matching estimators
    montecarlo: Bootstrap confidence intervals
"""

import logging

__version__ = "0.1.0"

from pydistfit import distributions
from pydistfit import fitting
from pydistfit import montecarlo
from pydistfit.fitting import fit_distribution
from pydistfit.montecarlo import bootstrap_ci

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "distributions",
    "fitting",
    "montecarlo",
    "fit_distribution",
    "bootstrap_ci",
]
