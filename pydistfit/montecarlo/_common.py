"""
Common data structures for the bootstrap.

ParameterInterval is one row of the interval report; BootstrapParams is
the parameter payload wrapped by Result[P] and exposed through
BootstrapSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ParameterInterval:
    """
    Confidence interval for one parameter.

    estimate is always the original point estimate; the interval
    describes uncertainty around it and never replaces it.
    reliable is False when fewer than MIN_SUCCESSFUL replicates survived.
    """
    lower: float
    estimate: float
    upper: float
    n_successful: int
    reliable: bool = True

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.lower, self.estimate, self.upper)


@dataclass(frozen=True)
class BootstrapParams:
    """
    Parameter payload for bootstrap confidence intervals.

    - point_estimate: original estimates, parameter name -> value
    - intervals: parameter name -> ParameterInterval
    - replicates: (R, k) matrix, row i from iteration i, NaN rows failed;
      None when not kept
    - successful: (R,) mask of iterations whose refit succeeded
    - bias: nanmean(replicates) - estimate
    - se: nanstd(replicates, ddof=1)
    - jackknife: (n, k) leave-one-out estimates (BCa only)
    """
    point_estimate: dict[str, float]
    intervals: dict[str, ParameterInterval]
    replicates: NDArray[np.floating[Any]] | None    # shape (R, k)
    successful: NDArray[np.bool_]                   # shape (R,)
    bias: NDArray[np.floating[Any]]                 # shape (k,)
    se: NDArray[np.floating[Any]]                   # shape (k,)
    jackknife: NDArray[np.floating[Any]] | None     # shape (n, k)
    replicate_count: int
    conf_level: float
    method: str                                     # "perc" | "bca"
