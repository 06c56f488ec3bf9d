"""
Design classes for bootstrap confidence intervals.

FittedModel is the read-only snapshot of a fit that the bootstrap
consumes. BootstrapDesign encapsulates everything the backend needs to
run: the model, the resolved mode, replicate count, confidence level,
execution strategy and seed. Immutable, validated at construction.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.exceptions import ValidationError
from pydistfit.core.validation import (
    check_1d, check_array, check_choice, check_finite, check_min_samples,
    check_open_unit_interval, check_positive_int,
)
from pydistfit.distributions.families import Distribution, get_distribution
from pydistfit.fitting.design import METHODS

EXECUTORS = ("auto", "thread", "process")


class BootstrapMode(str, enum.Enum):
    """How replicate datasets are produced and intervals computed."""

    PARAMETRIC = "parametric"
    NONPARAMETRIC = "nonparametric"
    BCA = "bca"

    @property
    def resampling(self) -> BootstrapMode:
        """Data-generation mode; BCa refines the nonparametric bootstrap."""
        if self is BootstrapMode.BCA:
            return BootstrapMode.NONPARAMETRIC
        return self

    @property
    def interval_method(self) -> str:
        return "bca" if self is BootstrapMode.BCA else "perc"

    @property
    def display_name(self) -> str:
        return {
            BootstrapMode.PARAMETRIC: "Parametric Bootstrap",
            BootstrapMode.NONPARAMETRIC: "Non-parametric Bootstrap",
            BootstrapMode.BCA: "BCa (Bias-Corrected and Accelerated)",
        }[self]

    @classmethod
    def parse(cls, mode: str | BootstrapMode) -> BootstrapMode:
        if isinstance(mode, cls):
            return mode
        value = check_choice(mode, [m.value for m in cls], "mode")
        return cls(value)


@runtime_checkable
class ParameterEstimator(Protocol):
    """
    Capability used to refit a replicate sample.

    estimate() returns parameter name -> value, or raises on failure.
    Implementations used with the process executor must be picklable.
    """

    def estimate(self, sample: NDArray) -> Mapping[str, float]:
        ...


@dataclass(frozen=True)
class DistributionEstimator:
    """Refits a family (registered name or Distribution) with a fixed method."""
    family: str | Distribution
    method: str

    def estimate(self, sample: NDArray) -> Mapping[str, float]:
        from pydistfit.fitting.solvers import estimate_parameters
        return estimate_parameters(sample, self.family, self.method)


@dataclass(frozen=True)
class FittedModel:
    """
    Immutable snapshot of a fitted distribution.

    Attributes:
        sample: Original observations, shape (n,), read-only.
        family: Distribution family name.
        method: Estimation method used for the point estimate.
        point_estimate: Read-only mapping parameter name -> estimate,
            in schema order.
        distribution: The resolved family, which need not be registered.
    """
    sample: NDArray[np.floating[Any]]
    family: str
    method: str
    point_estimate: Mapping[str, float]
    distribution: Distribution = field(compare=False, repr=False)

    # mappingproxy does not pickle; process pools ship models by value.
    def __getstate__(self) -> dict[str, Any]:
        state = dict(self.__dict__)
        state['point_estimate'] = dict(self.point_estimate)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        state = dict(state)
        state['point_estimate'] = MappingProxyType(dict(state['point_estimate']))
        self.__dict__.update(state)

    @classmethod
    def create(
        cls,
        sample,
        family: str | Distribution,
        method: str,
        point_estimate: Mapping[str, float],
    ) -> FittedModel:
        """
        Validate and build a FittedModel.

        point_estimate keys must match the family's parameter schema;
        values are reordered to schema order.

        Raises:
            ValidationError: If any component is malformed.
        """
        arr = check_array(sample, "sample")
        check_1d(arr, "sample")
        check_min_samples(arr, 2, "sample")
        check_finite(arr, "sample")

        dist = get_distribution(family)
        method = check_choice(method, METHODS, "method")

        if not isinstance(point_estimate, Mapping):
            raise ValidationError(
                f"point_estimate: expected a mapping of parameter names, "
                f"got {type(point_estimate).__name__}"
            )
        if set(point_estimate) != set(dist.param_names):
            raise ValidationError(
                f"point_estimate: keys {sorted(point_estimate)} do not match "
                f"{dist.name} parameters {list(dist.param_names)}"
            )
        estimate = {k: float(point_estimate[k]) for k in dist.param_names}
        if not all(np.isfinite(v) for v in estimate.values()):
            raise ValidationError(
                f"point_estimate: contains non-finite values {estimate}"
            )

        arr = arr.copy()
        arr.setflags(write=False)
        return cls(
            sample=arr,
            family=dist.name,
            method=method,
            point_estimate=MappingProxyType(estimate),
            distribution=dist,
        )

    @classmethod
    def from_fit(cls, fit) -> FittedModel:
        """Snapshot a FitSolution."""
        return cls.create(fit.data, fit.distribution, fit.method, fit.params)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(self.point_estimate)

    @property
    def n_observations(self) -> int:
        return int(self.sample.shape[0])


def resolve_workers(workers: int | str | None) -> int:
    """
    Resolve a worker count.

    "auto" (or None) means available CPUs minus one, floor 1.

    Raises:
        ValidationError: If workers is not "auto" or a positive integer.
    """
    if workers is None or (isinstance(workers, str) and workers.lower() == "auto"):
        return max(1, (os.cpu_count() or 1) - 1)
    if isinstance(workers, str):
        raise ValidationError(
            f"workers: must be 'auto' or a positive integer, got {workers!r}"
        )
    return check_positive_int(workers, "workers")


@dataclass(frozen=True)
class BootstrapDesign:
    """
    Frozen design for a bootstrap confidence-interval run.

    Attributes:
        model: The fitted model being characterized.
        mode: Resolved BootstrapMode.
        replicate_count: Number of bootstrap iterations (>= 1).
        conf_level: Confidence level in (0, 1).
        parallel: Whether iterations are distributed across workers.
        workers: Resolved worker count (1 when not parallel).
        executor: "auto", "thread" or "process".
        seed: Root seed, or None for fresh OS entropy.
        estimator: Refitting capability, bound once here.
        keep_replicates: Whether the replicate matrix is surfaced.
    """
    model: FittedModel
    mode: BootstrapMode
    replicate_count: int
    conf_level: float
    parallel: bool
    workers: int
    executor: str
    seed: int | None
    estimator: ParameterEstimator
    keep_replicates: bool

    @classmethod
    def for_bootstrap_ci(
        cls,
        model,
        mode: str | BootstrapMode = "parametric",
        replicate_count: int = 1000,
        conf_level: float = 0.95,
        *,
        parallel: bool = False,
        workers: int | str | None = "auto",
        executor: str = "auto",
        seed: int | None = None,
        estimator: ParameterEstimator | None = None,
        keep_replicates: bool = True,
    ) -> BootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            model: A FittedModel or FitSolution.
            mode: "parametric", "nonparametric" or "bca".
            replicate_count: Number of replicates. Must be an integer >= 1.
            conf_level: Confidence level in (0, 1).
            parallel: Distribute iterations across workers.
            workers: Worker count or "auto" (CPUs - 1, floor 1).
            executor: "auto", "thread" or "process".
            seed: Root seed for the per-iteration random streams.
            estimator: Custom refitting capability; defaults to refitting
                the model's family with the model's method.
            keep_replicates: Surface the replicate matrix on the solution.

        Returns:
            Validated BootstrapDesign.

        Raises:
            ValidationError: If inputs are invalid.
        """
        if not isinstance(model, FittedModel):
            if hasattr(model, "to_model"):
                model = model.to_model()
            else:
                raise ValidationError(
                    f"model: expected a FittedModel or FitSolution, "
                    f"got {type(model).__name__}"
                )

        mode = BootstrapMode.parse(mode)
        replicate_count = check_positive_int(replicate_count, "replicate_count")
        conf_level = check_open_unit_interval(conf_level, "conf_level")
        executor = check_choice(executor, EXECUTORS, "executor")

        if not isinstance(parallel, (bool, np.bool_)):
            raise ValidationError(f"parallel: must be a bool, got {parallel!r}")
        n_workers = resolve_workers(workers) if parallel else 1

        if seed is not None:
            if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
                raise ValidationError(f"seed: must be an integer, got {seed!r}")
            if seed < 0:
                raise ValidationError(f"seed: must be non-negative, got {seed}")
            seed = int(seed)

        if estimator is None:
            estimator = DistributionEstimator(model.distribution, model.method)
        elif not isinstance(estimator, ParameterEstimator):
            raise ValidationError(
                f"estimator: must provide estimate(sample), "
                f"got {type(estimator).__name__}"
            )

        return cls(
            model=model,
            mode=mode,
            replicate_count=replicate_count,
            conf_level=conf_level,
            parallel=bool(parallel),
            workers=n_workers,
            executor=executor,
            seed=seed,
            estimator=estimator,
            keep_replicates=bool(keep_replicates),
        )

    def root_entropy(self) -> int:
        """Entropy of the per-iteration seed tree; fresh OS entropy if seed is None."""
        return int(np.random.SeedSequence(self.seed).entropy)
