"""
Replicate dataset generation.

Parametric: draw n variates from the fitted family at the point estimates.
Nonparametric: resample the original observations with replacement.
BCa uses the nonparametric generator.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.exceptions import GenerationError
from pydistfit.montecarlo.design import BootstrapMode, FittedModel

SampleGenerator = Callable[[FittedModel, np.random.Generator], NDArray]


def generate_parametric(model: FittedModel, rng: np.random.Generator) -> NDArray:
    """
    Synthetic sample of size n from the fitted distribution.

    Raises:
        GenerationError: If the family cannot produce n finite variates
            at the point estimates.
    """
    n = model.n_observations
    try:
        sample = model.distribution.rvs(n, model.point_estimate, rng)
    except (ValueError, ArithmeticError) as e:
        raise GenerationError(
            f"{model.family} variate generation failed at "
            f"{model.point_estimate}: {e}"
        ) from e

    if sample.shape != (n,) or not np.all(np.isfinite(sample)):
        raise GenerationError(
            f"{model.family} produced a non-finite or mis-sized sample "
            f"at {model.point_estimate}"
        )
    return sample


def generate_nonparametric(model: FittedModel, rng: np.random.Generator) -> NDArray:
    """Ordinary bootstrap resample (sampling with replacement)."""
    n = model.n_observations
    indices = rng.integers(0, n, size=n)
    return model.sample[indices]


_GENERATORS: dict[BootstrapMode, SampleGenerator] = {
    BootstrapMode.PARAMETRIC: generate_parametric,
    BootstrapMode.NONPARAMETRIC: generate_nonparametric,
}


def get_generator(mode: BootstrapMode) -> SampleGenerator:
    """Generator for a mode; BCa resolves to the nonparametric one."""
    return _GENERATORS[mode.resampling]
