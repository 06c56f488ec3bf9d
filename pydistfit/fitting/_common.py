"""
Parameter payload for distribution fits, carried inside Result[P].
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FitParams:
    """
    Point estimates and fit statistics.

    - estimates: parameter name -> estimate, in the family's schema order
    - loglik, aic, bic: evaluated at the estimates
    """
    estimates: dict[str, float]
    loglik: float
    aic: float
    bic: float
    n: int
    converged: bool
    n_iter: int
