"""
Design class for distribution fitting.

FitDesign encapsulates all inputs needed by the estimators.
Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.exceptions import ValidationError
from pydistfit.core.validation import (
    check_1d, check_array, check_choice, check_finite, check_min_samples,
)
from pydistfit.distributions.families import Distribution, get_distribution

METHODS = ("mle", "mme", "qme")


@dataclass(frozen=True)
class FitDesign:
    """
    Frozen design for fitting a distribution to a univariate sample.

    Attributes:
        data: Observations with missing values removed, shape (n,).
        distribution: Resolved distribution family.
        method: "mle", "mme" or "qme".
        start: Optional starting values for the numerical estimators.
    """
    data: NDArray[np.floating[Any]]
    distribution: Distribution
    method: str
    start: dict[str, float] | None

    @classmethod
    def for_fit(
        cls,
        data,
        dist: str | Distribution,
        method: str = "mle",
        *,
        start: dict[str, float] | None = None,
    ) -> FitDesign:
        """
        Create a fit design with validation.

        NaN values are dropped (as R's fitdistr-style helpers do);
        infinite values are rejected.

        Raises:
            ValidationError: If inputs are invalid.
        """
        arr = check_array(data, "data")
        check_1d(arr, "data")
        arr = arr[~np.isnan(arr)].copy()
        check_min_samples(arr, 2, "data")
        check_finite(arr, "data")

        distribution = get_distribution(dist)
        method = check_choice(method, METHODS, "method")

        if start is not None:
            missing = set(distribution.param_names) - set(start)
            if missing:
                raise ValidationError(
                    f"start: missing values for {sorted(missing)} "
                    f"(expected {list(distribution.param_names)})"
                )
            start = {k: float(start[k]) for k in distribution.param_names}

        return cls(
            data=arr,
            distribution=distribution,
            method=method,
            start=start,
        )

    @property
    def n_observations(self) -> int:
        return int(self.data.shape[0])
