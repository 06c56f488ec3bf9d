"""
Bootstrap confidence interval computation.

Two interval methods:
- perc: percentile method (parametric and nonparametric modes)
- bca: bias-corrected and accelerated, over the nonparametric replicates

Failed iterations (NaN rows) are discarded per parameter before any
quantile is taken; nothing here depends on row order.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pydistfit.core.exceptions import BootstrapError, ValidationError
from pydistfit.montecarlo._common import ParameterInterval
from pydistfit.montecarlo._influence import acceleration

MIN_SUCCESSFUL = 10
BCA_PROB_CLAMP = (0.001, 0.999)


def compute_intervals(
    replicates: NDArray,
    point_estimate: dict[str, float],
    conf_level: float,
    method: str = "perc",
    jackknife: NDArray | None = None,
) -> tuple[dict[str, ParameterInterval], list[str]]:
    """
    Compute one interval per parameter.

    Args:
        replicates: Replicate matrix, shape (R, k), NaN rows for failures.
        point_estimate: Parameter name -> estimate, in column order.
        conf_level: Confidence level (e.g., 0.95).
        method: "perc" or "bca".
        jackknife: Leave-one-out estimates, shape (n, k). Required for BCa.

    Returns:
        (intervals keyed by parameter name, warning messages)

    Raises:
        ValidationError: Unknown method or missing jackknife for BCa.
        BootstrapError: A parameter has no successful replicates.
    """
    if method not in ("perc", "bca"):
        raise ValidationError(f"Unknown interval method: {method!r}")
    if method == "bca" and jackknife is None:
        raise ValidationError("BCa intervals require jackknife estimates")

    alpha = 1.0 - conf_level
    names = list(point_estimate)
    accel = acceleration(jackknife) if method == "bca" else None

    intervals: dict[str, ParameterInterval] = {}
    warnings_list: list[str] = []

    for j, name in enumerate(names):
        column = replicates[:, j]
        column = column[~np.isnan(column)]
        theta_hat = float(point_estimate[name])

        if column.size == 0:
            raise BootstrapError(
                f"No successful bootstrap samples for {name}",
                replicate_count=replicates.shape[0],
                n_successful=0,
            )

        reliable = column.size >= MIN_SUCCESSFUL
        if not reliable:
            warnings_list.append(
                f"Too few successful bootstrap samples for {name} "
                f"({column.size}). CI may be unreliable."
            )

        if method == "perc":
            lower, upper = _ci_percentile(column, alpha)
        else:
            lower, upper = _ci_bca(column, theta_hat, float(accel[j]), alpha)

        intervals[name] = ParameterInterval(
            lower=lower,
            estimate=theta_hat,
            upper=upper,
            n_successful=int(column.size),
            reliable=reliable,
        )

    return intervals, warnings_list


def _ci_percentile(t: NDArray, alpha: float) -> tuple[float, float]:
    """
    Percentile bootstrap CI.

    CI = [Q(alpha/2), Q(1-alpha/2)]
    """
    lo, hi = np.quantile(t, [alpha / 2.0, 1.0 - alpha / 2.0])
    return float(lo), float(hi)


def bias_correction(t: NDArray, theta_hat: float) -> float:
    """
    z0 = Phi^{-1}(proportion of t* < theta_hat).

    The proportion is clamped to [1/(2R), 1 - 1/(2R)] so z0 stays finite
    when every replicate falls on one side of the estimate.
    """
    R = t.size
    prop_below = np.sum(t < theta_hat) / R
    prop_below = np.clip(prop_below, 1.0 / (2.0 * R), 1.0 - 1.0 / (2.0 * R))
    return float(sp_stats.norm.ppf(prop_below))


def bca_levels(z0: float, a: float, alpha: float) -> tuple[float, float]:
    """
    Adjusted percentile levels:

        p = Phi(z0 + (z0 + z) / (1 - a * (z0 + z)))

    at z = Phi^{-1}(alpha/2) and Phi^{-1}(1 - alpha/2), each clamped to
    BCA_PROB_CLAMP.
    """
    z = sp_stats.norm.ppf([alpha / 2.0, 1.0 - alpha / 2.0])
    numer = z0 + z
    with np.errstate(divide='ignore', invalid='ignore'):
        p = sp_stats.norm.cdf(z0 + numer / (1.0 - a * numer))
    p = np.clip(p, *BCA_PROB_CLAMP)
    return float(p[0]), float(p[1])


def _ci_bca(
    t: NDArray,
    theta_hat: float,
    a: float,
    alpha: float,
) -> tuple[float, float]:
    """
    BCa (bias-corrected and accelerated) CI.

    Steps:
    1. z0 from the share of replicates below the point estimate
    2. a from the jackknife (passed in)
    3. Adjusted quantile levels
    4. CI from adjusted percentiles of the replicates
    """
    z0 = bias_correction(t, theta_hat)
    p_lower, p_upper = bca_levels(z0, a, alpha)
    lo, hi = np.quantile(t, [p_lower, p_upper])
    return float(lo), float(hi)
