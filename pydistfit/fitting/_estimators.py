"""
Parameter estimators: maximum likelihood, method of moments and
quantile matching.

Each estimator returns an Estimate with the raw parameter values and the
optimizer's convergence status. None of them warn; callers decide whether
non-convergence is a warning (fit_distribution) or a failure
(estimate_parameters).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from pydistfit.core.exceptions import FitError
from pydistfit.distributions.families import Distribution

MAX_ITER = 1000
QME_PROBS = (0.25, 0.75)


@dataclass(frozen=True)
class Estimate:
    """Raw estimator output."""
    params: dict[str, float]
    converged: bool
    n_iter: int
    message: str


def _named(dist: Distribution, theta: NDArray) -> dict[str, float]:
    return {k: float(v) for k, v in zip(dist.param_names, theta)}


def _nelder_mead(
    objective: Callable[[NDArray], float],
    start: dict[str, float],
    dist: Distribution,
) -> Estimate:
    """Minimize objective from start with Nelder-Mead (R's optim default)."""
    x0 = np.array([start[k] for k in dist.param_names], dtype=np.float64)
    if not np.isfinite(objective(x0)):
        raise FitError(
            f"objective is not finite at the starting values {start}",
            family=dist.name,
        )

    opt = minimize(
        objective,
        x0,
        method='Nelder-Mead',
        options={'maxiter': MAX_ITER, 'xatol': 1e-8, 'fatol': 1e-8},
    )
    return Estimate(
        params=_named(dist, opt.x),
        converged=bool(opt.success),
        n_iter=int(opt.nit),
        message=str(opt.message),
    )


def negative_loglik(
    theta: NDArray,
    data: NDArray,
    dist: Distribution,
) -> float:
    """-sum(log f(x)); +inf outside the parameter space or where f(x) <= 0."""
    params = _named(dist, theta)
    if not dist.in_bounds(params):
        return math.inf
    with np.errstate(all='ignore'):
        logd = dist.logpdf(data, params)
    if not np.all(np.isfinite(logd)):
        return math.inf
    return -float(np.sum(logd))


def fit_mle(
    data: NDArray,
    dist: Distribution,
    start: dict[str, float] | None = None,
) -> Estimate:
    """Maximum likelihood estimation."""
    if start is None:
        start = dist.start_values(data)
    return _nelder_mead(
        lambda theta: negative_loglik(theta, data, dist), start, dist,
    )


def fit_mme(
    data: NDArray,
    dist: Distribution,
    start: dict[str, float] | None = None,
) -> Estimate:
    """
    Method of moments.

    Families without a closed form fall back to maximum likelihood.
    """
    try:
        with np.errstate(all='raise'):
            params = dist.moment_estimates(data)
    except (ValueError, ZeroDivisionError, FloatingPointError) as e:
        raise FitError(
            f"method of moments failed for {dist.name}: {e}",
            family=dist.name, method='mme',
        ) from e

    if params is None:
        return fit_mle(data, dist, start)
    return Estimate(params=params, converged=True, n_iter=0, message='closed form')


def fit_qme(
    data: NDArray,
    dist: Distribution,
    start: dict[str, float] | None = None,
    probs: tuple[float, ...] = QME_PROBS,
) -> Estimate:
    """Quantile matching: least squares on the given empirical quantiles."""
    probs_arr = np.asarray(probs, dtype=np.float64)
    empirical = np.quantile(data, probs_arr)

    def objective(theta: NDArray) -> float:
        params = _named(dist, theta)
        if not dist.in_bounds(params):
            return math.inf
        with np.errstate(all='ignore'):
            theoretical = dist.ppf(probs_arr, params)
        sse = float(np.sum((empirical - theoretical) ** 2))
        return sse if np.isfinite(sse) else math.inf

    if start is None:
        start = dist.start_values(data)
    return _nelder_mead(objective, start, dist)


ESTIMATORS: dict[str, Callable[..., Estimate]] = {
    'mle': fit_mle,
    'mme': fit_mme,
    'qme': fit_qme,
}


def run_estimator(
    data: NDArray,
    dist: Distribution,
    method: str,
    start: dict[str, float] | None = None,
) -> Estimate:
    """
    Dispatch to an estimator and check the estimate is usable.

    Raises:
        FitError: If the estimate is non-finite or outside the bounds.
    """
    try:
        estimate = ESTIMATORS[method](data, dist, start)
    except (ValueError, ZeroDivisionError, OverflowError) as e:
        raise FitError(
            f"{method} estimation failed for {dist.name}: {e}",
            family=dist.name, method=method,
        ) from e

    if not dist.in_bounds(estimate.params):
        raise FitError(
            f"{method} estimate for {dist.name} is outside the parameter "
            f"space: {estimate.params}",
            family=dist.name, method=method,
        )
    return estimate
