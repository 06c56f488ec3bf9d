"""
Solution wrapper for bootstrap confidence intervals.

BootstrapSolution wraps Result[BootstrapParams] and provides accessors
for the interval report and the run diagnostics, plus a printable
summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.result import Result
from pydistfit.montecarlo._common import BootstrapParams, ParameterInterval
from pydistfit.montecarlo.design import BootstrapMode

if TYPE_CHECKING:
    from pydistfit.montecarlo.design import BootstrapDesign, FittedModel


@dataclass
class BootstrapSolution:
    """
    User-facing bootstrap confidence intervals.

    One ParameterInterval per parameter, centered on the original point
    estimate, plus diagnostics on how many iterations succeeded.
    """
    _result: Result[BootstrapParams]
    _design: 'BootstrapDesign'

    # --- Interval report ---

    @property
    def intervals(self) -> dict[str, ParameterInterval]:
        """Parameter name -> ParameterInterval, in schema order."""
        return self._result.params.intervals

    @property
    def point_estimate(self) -> dict[str, float]:
        return self._result.params.point_estimate

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(self._result.params.point_estimate)

    @property
    def method(self) -> str:
        """Interval method: "perc" or "bca"."""
        return self._result.params.method

    @property
    def mode(self) -> BootstrapMode:
        return self._design.mode

    @property
    def replicate_count(self) -> int:
        return self._result.params.replicate_count

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def model(self) -> 'FittedModel':
        return self._design.model

    # --- Diagnostics ---

    @property
    def replicates(self) -> NDArray[np.floating[Any]] | None:
        """Replicate matrix, shape (R, k); NaN rows are failed iterations."""
        return self._result.params.replicates

    @property
    def successful(self) -> NDArray[np.bool_]:
        """Per-iteration success mask, shape (R,)."""
        return self._result.params.successful

    @property
    def failed_iterations(self) -> NDArray[np.intp]:
        """Indices of iterations whose refit failed."""
        return np.flatnonzero(~self.successful)

    @property
    def n_successful(self) -> int:
        return int(self.successful.sum())

    @property
    def convergence_rate(self) -> float:
        return self.n_successful / self.replicate_count

    @property
    def bias(self) -> NDArray[np.floating[Any]]:
        """mean(successful replicates) - estimate, shape (k,)."""
        return self._result.params.bias

    @property
    def se(self) -> NDArray[np.floating[Any]]:
        """Standard deviation of the successful replicates, shape (k,)."""
        return self._result.params.se

    @property
    def jackknife(self) -> NDArray[np.floating[Any]] | None:
        """Leave-one-out estimates, shape (n, k). BCa only."""
        return self._result.params.jackknife

    @property
    def seed(self) -> int | None:
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def has_warning(self, substring: str) -> bool:
        return self._result.has_warning(substring)

    def as_array(self) -> NDArray[np.floating[Any]]:
        """Intervals as a (k, 3) array of lower, estimate, upper."""
        return np.array([iv.as_tuple() for iv in self.intervals.values()])

    # --- Display ---

    def summary(self) -> str:
        """
        Printable report.

        Produces:
            ===== Bootstrap Confidence Intervals =====

            Method: Parametric Bootstrap
            Bootstrap samples: 1000
            Confidence level: 95.0%

            Parameter Estimates with Confidence Intervals:

              mean:
                Estimate: 5.0123
                95.0% CI: [4.8901, 5.1345]
            ...
        """
        pct = self.conf_level * 100
        lines = ["", "===== Bootstrap Confidence Intervals =====", ""]
        lines.append(f"Method: {self.mode.display_name}")
        lines.append(f"Bootstrap samples: {self.replicate_count}")
        lines.append(f"Confidence level: {pct:.1f}%")
        lines.append("")
        lines.append("Parameter Estimates with Confidence Intervals:")
        lines.append("")

        for name, iv in self.intervals.items():
            lines.append(f"  {name}:")
            lines.append(f"    Estimate: {iv.estimate:.4f}")
            lines.append(f"    {pct:.1f}% CI: [{iv.lower:.4f}, {iv.upper:.4f}]")
            if not iv.reliable:
                lines.append(
                    f"    (only {iv.n_successful} successful samples)"
                )
            lines.append("")

        rate = self.convergence_rate * 100
        if rate < 95:
            lines.append(
                f"Warning: Only {rate:.1f}% of bootstrap samples converged."
            )
        lines.append("=========================================")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(mode={self.mode.value!r}, "
            f"R={self.replicate_count}, k={len(self.param_names)}, "
            f"successful={self.n_successful}, backend={self.backend_name!r})"
        )
