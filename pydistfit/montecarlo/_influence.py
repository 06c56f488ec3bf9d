"""
Jackknife (leave-one-out) estimates for BCa confidence intervals.

The acceleration parameter of the BCa interval is estimated from the
skewness of the delete-1 jackknife distribution of each parameter.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pydistfit.montecarlo.design import FittedModel, ParameterEstimator
from pydistfit.montecarlo._scheduler import run_iterations
from pydistfit.montecarlo._worker import JackknifeTask

ACCELERATION_EPS = 1e-10


def jackknife_estimates(
    model: FittedModel,
    estimator: ParameterEstimator,
    *,
    parallel: bool = False,
    workers: int = 1,
    executor: str = "auto",
) -> NDArray:
    """
    Refit the model once per observation with that observation removed.

    Row i holds the estimate without observation i; a failed refit holds
    the original point estimate.

    Returns:
        Jackknife estimates, shape (n, k).
    """
    task = JackknifeTask(model=model, estimator=estimator)
    return run_iterations(
        task,
        model.n_observations,
        parallel=parallel,
        workers=workers,
        executor=executor,
        label="Jackknife",
    )


def acceleration(jack: NDArray) -> NDArray:
    """
    BCa acceleration per column.

        a = sum(d^3) / (6 * sum(d^2)^1.5 + eps),   d = theta_bar - theta_{-i}

    eps keeps a finite (zero) when all leave-one-out estimates coincide.
    """
    d = np.mean(jack, axis=0) - jack
    numerator = np.sum(d ** 3, axis=0)
    denominator = 6.0 * np.sum(d ** 2, axis=0) ** 1.5
    return numerator / (denominator + ACCELERATION_EPS)
