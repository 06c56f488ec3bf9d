"""
Per-iteration work units.

ReplicateTask turns an iteration index into one row of the replicate
matrix: derive the iteration's own random stream, generate a replicate
sample, refit it. JackknifeTask turns an observation index into a
leave-one-out estimate.

Both are picklable and hold only read-only state, so the scheduler can
ship them to threads or processes unchanged. Failures are recovered here
and never propagate out of a single iteration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from pydistfit.montecarlo.design import BootstrapMode, FittedModel, ParameterEstimator
from pydistfit.montecarlo._generators import get_generator

logger = logging.getLogger(__name__)


def fit_one(
    sample: NDArray,
    estimator: ParameterEstimator,
    param_names: Sequence[str],
) -> NDArray | None:
    """
    Refit one replicate sample.

    Returns:
        Parameter vector in param_names order, or None if the estimator
        raised, omitted a parameter, or returned a non-finite value.
    """
    try:
        estimate = estimator.estimate(sample)
        row = np.array([estimate[name] for name in param_names], dtype=np.float64)
    except Exception as e:
        logger.debug("Replicate fit failed: %s: %s", type(e).__name__, e)
        return None

    if not np.all(np.isfinite(row)):
        logger.debug("Replicate fit returned non-finite estimate %s", row)
        return None
    return row


def _child_rng(entropy: int, index: int) -> np.random.Generator:
    """Generator for iteration `index`; equal to SeedSequence(entropy).spawn(...)[index]."""
    return np.random.default_rng(np.random.SeedSequence(entropy, spawn_key=(index,)))


@dataclass(frozen=True)
class ReplicateTask:
    """
    One bootstrap iteration as a pure function of its index.

    Attributes:
        model: Read-only fitted model.
        mode: Bootstrap mode (selects the replicate generator).
        estimator: Refitting capability.
        entropy: Root entropy of the per-iteration seed tree.
    """
    model: FittedModel
    mode: BootstrapMode
    estimator: ParameterEstimator
    entropy: int

    @property
    def n_columns(self) -> int:
        return len(self.model.param_names)

    def run_one(self, index: int) -> NDArray:
        """Row for iteration `index`; all-NaN if generation or fit failed."""
        rng = _child_rng(self.entropy, index)
        try:
            sample = get_generator(self.mode)(self.model, rng)
        except Exception as e:
            logger.debug("Iteration %d: generation failed: %s", index, e)
            return np.full(self.n_columns, np.nan)

        row = fit_one(sample, self.estimator, self.model.param_names)
        if row is None:
            return np.full(self.n_columns, np.nan)
        return row

    def __call__(self, indices: NDArray) -> NDArray:
        return _stack(self, indices)


@dataclass(frozen=True)
class JackknifeTask:
    """
    Leave-one-out refit for observation `index`.

    A failed refit falls back to the original point estimate, which pulls
    the acceleration estimate toward zero instead of failing the run.
    """
    model: FittedModel
    estimator: ParameterEstimator

    @property
    def n_columns(self) -> int:
        return len(self.model.param_names)

    def run_one(self, index: int) -> NDArray:
        sample = np.delete(self.model.sample, index)
        row = fit_one(sample, self.estimator, self.model.param_names)
        if row is None:
            return np.array(list(self.model.point_estimate.values()), dtype=np.float64)
        return row

    def __call__(self, indices: NDArray) -> NDArray:
        return _stack(self, indices)


def _stack(task, indices: NDArray) -> NDArray:
    out = np.empty((len(indices), task.n_columns), dtype=np.float64)
    for pos, index in enumerate(indices):
        out[pos] = task.run_one(int(index))
    return out
