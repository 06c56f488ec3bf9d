"""
Solution wrapper for distribution fits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.result import Result
from pydistfit.fitting._common import FitParams

if TYPE_CHECKING:
    from pydistfit.distributions.families import Distribution
    from pydistfit.fitting.design import FitDesign
    from pydistfit.montecarlo.design import FittedModel


@dataclass
class FitSolution:
    """
    User-facing fit result.

    Carries the data the fit was computed on so that resampling methods
    can refit it (see confint()).
    """
    _result: Result[FitParams]
    _design: 'FitDesign'

    @property
    def params(self) -> dict[str, float]:
        """Parameter estimates in the family's schema order."""
        return dict(self._result.params.estimates)

    @property
    def loglik(self) -> float:
        return self._result.params.loglik

    @property
    def aic(self) -> float:
        return self._result.params.aic

    @property
    def bic(self) -> float:
        return self._result.params.bic

    @property
    def n(self) -> int:
        return self._result.params.n

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def data(self) -> NDArray:
        return self._design.data

    @property
    def distribution(self) -> 'Distribution':
        return self._design.distribution

    @property
    def method(self) -> str:
        return self._design.method

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

    def to_model(self) -> 'FittedModel':
        """Read-only snapshot consumed by the bootstrap engine."""
        from pydistfit.montecarlo.design import FittedModel
        return FittedModel.from_fit(self)

    def confint(
        self,
        level: float = 0.95,
        parm: list[str] | None = None,
        **kwargs,
    ) -> dict[str, tuple[float, float]]:
        """
        Bootstrap confidence intervals for the parameters.

        Args:
            level: Confidence level.
            parm: Subset of parameter names (default: all).
            **kwargs: Passed to bootstrap_ci (mode, replicate_count, seed...).

        Returns:
            Dict mapping parameter name to (lower, upper).
        """
        from pydistfit.montecarlo.solvers import bootstrap_ci

        boot = bootstrap_ci(self, conf_level=level, **kwargs)
        names = list(self.params) if parm is None else [
            p for p in self.params if p in parm
        ]
        return {
            name: (boot.intervals[name].lower, boot.intervals[name].upper)
            for name in names
        }

    def summary(self) -> str:
        """
        Fit report.

        Produces:
            Distribution: Normal (Gaussian)
            Method: MLE
            Sample size: 100

            Estimated Parameters:
              mean: 5.1808
              sd: 1.8165

            Log-likelihood: -201.32
            AIC: 406.64
            BIC: 411.85
        """
        lines = [
            f"Distribution: {self.distribution.display_name}",
            f"Method: {self.method.upper()}",
            f"Sample size: {self.n}",
            "",
            "Estimated Parameters:",
        ]
        for name, value in self.params.items():
            lines.append(f"  {name}: {value:.4f}")
        lines.append("")
        lines.append(f"Log-likelihood: {self.loglik:.2f}")
        lines.append(f"AIC: {self.aic:.2f}")
        lines.append(f"BIC: {self.bic:.2f}")
        if not self.converged:
            lines.append("")
            lines.append("Warning: optimizer did not converge.")
        return "\n".join(lines)

    def __repr__(self) -> str:
        est = ", ".join(f"{k}={v:.4g}" for k, v in self.params.items())
        return (
            f"FitSolution(dist={self.distribution.name!r}, "
            f"method={self.method!r}, {est})"
        )
