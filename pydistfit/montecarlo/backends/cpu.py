"""
CPU backend for bootstrap confidence intervals.

Runs the replicate iterations through the scheduler, discards failed
iterations, and hands the surviving replicates to the interval
calculator. BCa additionally runs the jackknife over the original sample.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from pydistfit.core.compute.timing import Timer
from pydistfit.core.exceptions import BootstrapError
from pydistfit.core.result import Result
from pydistfit.montecarlo._ci import compute_intervals
from pydistfit.montecarlo._common import BootstrapParams
from pydistfit.montecarlo._influence import jackknife_estimates
from pydistfit.montecarlo._scheduler import run_iterations
from pydistfit.montecarlo._worker import ReplicateTask
from pydistfit.montecarlo.design import BootstrapDesign, BootstrapMode

logger = logging.getLogger(__name__)

LOW_CONVERGENCE = 0.95


class CPUBootstrapBackend:
    """
    CPU backend for parametric, nonparametric and BCa bootstrap.
    """

    def __init__(self, progress: Callable[[int, int], None] | None = None):
        self._progress = progress

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[BootstrapParams]:
        """
        Run the bootstrap and return Result[BootstrapParams].

        Raises:
            BootstrapError: If no iteration produced a usable estimate.
            BootstrapCancelledError: If the run is interrupted.
        """
        timer = Timer()
        timer.start()

        model = design.model
        R = design.replicate_count
        names = model.param_names
        entropy = design.root_entropy()
        warnings_list: list[str] = []

        logger.debug(
            "%s: family=%s method=%s n=%d R=%d workers=%d",
            design.mode.display_name, model.family, model.method,
            model.n_observations, R, design.workers,
        )

        task = ReplicateTask(
            model=model,
            mode=design.mode,
            estimator=design.estimator,
            entropy=entropy,
        )

        with timer.section('bootstrap_replicates'):
            t = run_iterations(
                task, R,
                parallel=design.parallel,
                workers=design.workers,
                executor=design.executor,
                label="Bootstrap",
                progress=self._progress,
            )

        successful = ~np.any(np.isnan(t), axis=1)
        n_successful = int(successful.sum())
        if n_successful == 0:
            raise BootstrapError(
                f"All {R} bootstrap iterations failed to produce an estimate",
                replicate_count=R,
                n_successful=0,
            )

        convergence_rate = n_successful / R
        if convergence_rate < LOW_CONVERGENCE:
            warnings_list.append(
                f"Only {convergence_rate:.1%} of bootstrap samples converged "
                f"({n_successful}/{R})"
            )
        logger.debug("%d/%d iterations succeeded", n_successful, R)

        jack = None
        if design.mode is BootstrapMode.BCA:
            with timer.section('jackknife'):
                jack = jackknife_estimates(
                    model, design.estimator,
                    parallel=design.parallel,
                    workers=design.workers,
                    executor=design.executor,
                )

        with timer.section('intervals'):
            intervals, ci_warnings = compute_intervals(
                t, model.point_estimate, design.conf_level,
                method=design.mode.interval_method,
                jackknife=jack,
            )
            warnings_list.extend(ci_warnings)

        with timer.section('summary_statistics'):
            t0 = np.array([model.point_estimate[k] for k in names])
            good = t[successful]
            bias = np.mean(good, axis=0) - t0
            if n_successful > 1:
                se = np.std(good, axis=0, ddof=1)
            else:
                se = np.full(len(names), np.nan)

        timer.stop()

        params = BootstrapParams(
            point_estimate=dict(model.point_estimate),
            intervals=intervals,
            replicates=t if design.keep_replicates else None,
            successful=successful,
            bias=bias,
            se=se,
            jackknife=jack,
            replicate_count=R,
            conf_level=design.conf_level,
            method=design.mode.interval_method,
        )

        return Result(
            params=params,
            info={
                'mode': design.mode.value,
                'family': model.family,
                'method': model.method,
                'n': model.n_observations,
                'k': len(names),
                'n_successful': n_successful,
                'convergence_rate': convergence_rate,
                'workers': design.workers,
                'executor': design.executor if design.parallel else 'sequential',
                'seed_entropy': entropy,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
