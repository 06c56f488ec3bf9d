"""
Public API for bootstrap confidence intervals.

    bootstrap_ci(fit_or_model, mode, replicate_count, conf_level) → BootstrapSolution

Validates every argument into a BootstrapDesign before any iteration
runs, dispatches to the CPU backend and re-emits the run's non-fatal
conditions as RuntimeWarnings.
"""

from __future__ import annotations

import warnings
from typing import Callable, Literal

from pydistfit.montecarlo.backends.cpu import CPUBootstrapBackend
from pydistfit.montecarlo.design import (
    BootstrapDesign, BootstrapMode, ParameterEstimator,
)
from pydistfit.montecarlo.solution import BootstrapSolution

ModeChoice = Literal['parametric', 'nonparametric', 'bca']
ExecutorChoice = Literal['auto', 'thread', 'process']


def bootstrap_ci(
    fit_or_model,
    mode: ModeChoice | BootstrapMode = 'parametric',
    replicate_count: int = 1000,
    conf_level: float = 0.95,
    *,
    parallel: bool = False,
    workers: int | str | None = 'auto',
    seed: int | None = None,
    executor: ExecutorChoice = 'auto',
    estimator: ParameterEstimator | None = None,
    keep_replicates: bool = True,
    progress: Callable[[int, int], None] | None = None,
) -> BootstrapSolution:
    """
    Bootstrap confidence intervals for the parameters of a fitted model.

    Parameters
    ----------
    fit_or_model : FitSolution or FittedModel
        The fitted distribution to characterize. Never modified.
    mode : str
        "parametric" (default): simulate from the fitted distribution.
        "nonparametric": resample the observations with replacement.
        "bca": bias-corrected and accelerated intervals over the
        nonparametric replicates, with a jackknife pass for acceleration.
    replicate_count : int
        Number of bootstrap iterations. Must be an integer >= 1.
    conf_level : float
        Confidence level in (0, 1). Default 0.95.
    parallel : bool
        Distribute iterations across workers.
    workers : int or "auto"
        Worker count; "auto" is the CPU count minus one (at least 1).
    seed : int or None
        Root seed. Each iteration draws from its own stream derived from
        it, so results do not depend on parallel, workers or executor.
    executor : str
        "auto" (fork-based process pool where available), "thread" or
        "process". Custom estimators must be picklable for process pools.
    estimator : ParameterEstimator or None
        Refitting capability. Defaults to refitting the model's family
        with the model's estimation method.
    keep_replicates : bool
        Keep the (R, k) replicate matrix on the solution.
    progress : callable or None
        Called as progress(done, total) while iterations complete.

    Returns
    -------
    BootstrapSolution

    Raises
    ------
    ValidationError
        If any argument is invalid. Raised before any iteration runs.
    BootstrapError
        If every iteration failed.
    BootstrapCancelledError
        If the run was interrupted.

    Warns
    -----
    RuntimeWarning
        Fewer than 10 successful replicates for a parameter, or fewer
        than 95% of iterations succeeded.
    """
    design = BootstrapDesign.for_bootstrap_ci(
        fit_or_model,
        mode=mode,
        replicate_count=replicate_count,
        conf_level=conf_level,
        parallel=parallel,
        workers=workers,
        executor=executor,
        seed=seed,
        estimator=estimator,
        keep_replicates=keep_replicates,
    )

    backend = CPUBootstrapBackend(progress=progress)
    result = backend.solve(design)

    for msg in result.warnings:
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    return BootstrapSolution(_result=result, _design=design)
