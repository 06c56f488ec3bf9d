"""
Public API for distribution fitting.

    fit_distribution(data, dist, method) → FitSolution
    estimate_parameters(sample, dist, method) → dict[str, float]

fit_distribution validates inputs, creates a FitDesign, runs the
estimator and wraps the Result in a FitSolution. estimate_parameters is
the narrow capability used for refitting resampled data: no solution
wrapping, and non-convergence is an error rather than a warning.
"""

from __future__ import annotations

import math
import warnings
from typing import Literal

import numpy as np

from pydistfit.core.exceptions import ConvergenceError
from pydistfit.core.result import Result
from pydistfit.core.compute.timing import Timer
from pydistfit.distributions.families import Distribution
from pydistfit.fitting._common import FitParams
from pydistfit.fitting._estimators import run_estimator
from pydistfit.fitting.design import FitDesign
from pydistfit.fitting.solution import FitSolution

MethodChoice = Literal['mle', 'mme', 'qme']


def fit_distribution(
    data,
    dist: str | Distribution,
    method: MethodChoice = 'mle',
    *,
    start: dict[str, float] | None = None,
) -> FitSolution:
    """
    Fit a probability distribution to observed data.

    Parameters
    ----------
    data : array-like
        1D numeric sample. NaN values are dropped; at least 2 remain.
    dist : str or Distribution
        Family name ("normal", "gamma", ...) or a Distribution instance.
    method : str
        "mle" (maximum likelihood, default), "mme" (method of moments)
        or "qme" (quantile matching on the quartiles).
    start : dict or None
        Starting values for the numerical estimators.

    Returns
    -------
    FitSolution

    Raises
    ------
    ValidationError
        If the data, family or method are invalid.
    FitError
        If no admissible estimate could be computed.
    """
    design = FitDesign.for_fit(data, dist, method, start=start)
    dist_obj = design.distribution

    timer = Timer()
    timer.start()

    with timer.section('estimation'):
        estimate = run_estimator(
            design.data, dist_obj, design.method, design.start,
        )

    warnings_list: list[str] = []
    if not estimate.converged:
        msg = (
            f"{design.method.upper()} optimization may not have converged "
            f"after {estimate.n_iter} iterations: {estimate.message}"
        )
        warnings.warn(msg, RuntimeWarning, stacklevel=2)
        warnings_list.append(msg)

    with timer.section('fit_statistics'):
        loglik = float(np.sum(dist_obj.logpdf(design.data, estimate.params)))
        k = len(estimate.params)
        n = design.n_observations
        aic = 2.0 * k - 2.0 * loglik
        bic = k * math.log(n) - 2.0 * loglik

    timer.stop()

    params = FitParams(
        estimates=estimate.params,
        loglik=loglik,
        aic=aic,
        bic=bic,
        n=n,
        converged=estimate.converged,
        n_iter=estimate.n_iter,
    )
    result = Result(
        params=params,
        info={
            'family': dist_obj.name,
            'method': design.method,
            'message': estimate.message,
        },
        timing=timer.result(),
        backend_name=f'cpu_{design.method}',
        warnings=tuple(warnings_list),
    )
    return FitSolution(_result=result, _design=design)


def estimate_parameters(
    sample,
    dist: str | Distribution,
    method: MethodChoice = 'mle',
) -> dict[str, float]:
    """
    Estimate parameters only.

    Raises
    ------
    ValidationError
        If the sample, family or method are invalid.
    FitError
        If the estimate is non-finite or outside the parameter space.
    ConvergenceError
        If the optimizer reports non-convergence.
    """
    design = FitDesign.for_fit(sample, dist, method)
    estimate = run_estimator(design.data, design.distribution, design.method)
    if not estimate.converged:
        raise ConvergenceError(
            f"{design.method} estimation of {design.distribution.name} did "
            f"not converge: {estimate.message}",
            iterations=estimate.n_iter,
            reason=estimate.message,
        )
    return estimate.params
