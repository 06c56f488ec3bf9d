"""
Distribution family specifications.

Each Distribution defines:
- An ordered parameter schema with open-interval bounds
- A mapping from named parameters onto a scipy.stats frozen distribution
- Density, CDF, quantile and random-variate functions through that mapping
- Starting values for numerical estimation
- Optional closed-form method-of-moments estimates

The probability functions themselves are scipy's; this module only fixes
the parameterization (e.g. gamma uses shape/rate, exponential uses rate).

References:
    Johnson, N. L., Kotz, S., & Balakrishnan, N. (1994). Continuous
    Univariate Distributions (2nd ed.)
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray
from scipy import special as sp_special
from scipy import stats as sp_stats

from pydistfit.core.exceptions import ValidationError

INF = math.inf


class Distribution(ABC):
    """
    Parametric distribution family.

    Parameters are always passed as a mapping keyed by ``param_names``;
    values are read in schema order, extra keys are ignored.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def param_names(self) -> tuple[str, ...]:
        ...

    @property
    @abstractmethod
    def param_bounds(self) -> dict[str, tuple[float, float]]:
        """Open interval (lo, hi) of admissible values per parameter."""
        ...

    @abstractmethod
    def frozen(self, params: Mapping[str, float]) -> Any:
        """scipy.stats frozen distribution for the given parameters."""
        ...

    @abstractmethod
    def start_values(self, data: NDArray) -> dict[str, float]:
        """Starting values for numerical estimation."""
        ...

    def moment_estimates(self, data: NDArray) -> dict[str, float] | None:
        """Closed-form method-of-moments estimates, or None if unavailable."""
        return None

    def in_bounds(self, params: Mapping[str, float]) -> bool:
        """True if every parameter lies strictly inside its bounds."""
        for pname in self.param_names:
            lo, hi = self.param_bounds[pname]
            value = params[pname]
            if not np.isfinite(value) or value <= lo or value >= hi:
                return False
        return True

    def pdf(self, x: NDArray, params: Mapping[str, float]) -> NDArray:
        return self.frozen(params).pdf(x)

    def logpdf(self, x: NDArray, params: Mapping[str, float]) -> NDArray:
        return self.frozen(params).logpdf(x)

    def cdf(self, q: NDArray, params: Mapping[str, float]) -> NDArray:
        return self.frozen(params).cdf(q)

    def ppf(self, p: NDArray, params: Mapping[str, float]) -> NDArray:
        return self.frozen(params).ppf(p)

    def rvs(
        self,
        n: int,
        params: Mapping[str, float],
        rng: np.random.Generator,
    ) -> NDArray:
        """Draw n independent variates using the caller's generator."""
        return np.asarray(
            self.frozen(params).rvs(size=n, random_state=rng),
            dtype=np.float64,
        )

    def _named(self, *values: float) -> dict[str, float]:
        return {k: float(v) for k, v in zip(self.param_names, values)}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _moments(data: NDArray) -> tuple[float, float]:
    """Sample mean and unbiased variance (R's mean() and var())."""
    return float(np.mean(data)), float(np.var(data, ddof=1))


# =====================================================================
# Families
# =====================================================================

class Normal(Distribution):
    """Normal distribution N(mean, sd²)."""

    name = 'normal'
    display_name = 'Normal (Gaussian)'
    param_names = ('mean', 'sd')
    param_bounds = {'mean': (-INF, INF), 'sd': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.norm(loc=params['mean'], scale=params['sd'])

    def start_values(self, data):
        m1, m2 = _moments(data)
        return self._named(m1, math.sqrt(m2))

    def moment_estimates(self, data):
        return self.start_values(data)


class LogNormal(Distribution):
    """Log-normal: log(X) ~ N(meanlog, sdlog²)."""

    name = 'lognormal'
    display_name = 'Log-Normal'
    param_names = ('meanlog', 'sdlog')
    param_bounds = {'meanlog': (-INF, INF), 'sdlog': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.lognorm(s=params['sdlog'], scale=math.exp(params['meanlog']))

    def start_values(self, data):
        m1, _ = _moments(data)
        return self._named(math.log(m1), 0.5)

    def moment_estimates(self, data):
        m1, m2 = _moments(data)
        s2 = math.log(1.0 + m2 / m1 ** 2)
        return self._named(math.log(m1) - s2 / 2.0, math.sqrt(s2))


class Gamma(Distribution):
    """Gamma with shape/rate parameterization."""

    name = 'gamma'
    display_name = 'Gamma'
    param_names = ('shape', 'rate')
    param_bounds = {'shape': (0.0, INF), 'rate': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.gamma(a=params['shape'], scale=1.0 / params['rate'])

    def start_values(self, data):
        m1, _ = _moments(data)
        return self._named(2.0, 2.0 / m1)

    def moment_estimates(self, data):
        m1, m2 = _moments(data)
        return self._named(m1 ** 2 / m2, m1 / m2)


class Weibull(Distribution):
    """Two-parameter Weibull (shape, scale)."""

    name = 'weibull'
    display_name = 'Weibull'
    param_names = ('shape', 'scale')
    param_bounds = {'shape': (0.0, INF), 'scale': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.weibull_min(c=params['shape'], scale=params['scale'])

    def start_values(self, data):
        m1, _ = _moments(data)
        return self._named(1.5, m1)

    def moment_estimates(self, data):
        # Approximation: shape ≈ 1.2 / CV
        m1, m2 = _moments(data)
        shape = 1.2 / math.sqrt(m2 / m1 ** 2)
        scale = m1 / sp_special.gamma(1.0 + 1.0 / shape)
        return self._named(shape, scale)


class Exponential(Distribution):
    """Exponential with rate parameterization."""

    name = 'exponential'
    display_name = 'Exponential'
    param_names = ('rate',)
    param_bounds = {'rate': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.expon(scale=1.0 / params['rate'])

    def start_values(self, data):
        m1, _ = _moments(data)
        return self._named(1.0 / m1)

    def moment_estimates(self, data):
        return self.start_values(data)


class Beta(Distribution):
    """Beta(shape1, shape2) on (0, 1)."""

    name = 'beta'
    display_name = 'Beta'
    param_names = ('shape1', 'shape2')
    param_bounds = {'shape1': (0.0, INF), 'shape2': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.beta(a=params['shape1'], b=params['shape2'])

    def start_values(self, data):
        return self._named(1.0, 1.0)

    def moment_estimates(self, data):
        m1, m2 = _moments(data)
        common = m1 * (1.0 - m1) / m2 - 1.0
        return self._named(m1 * common, (1.0 - m1) * common)


class Uniform(Distribution):
    """Continuous uniform on [min, max]."""

    name = 'uniform'
    display_name = 'Uniform'
    param_names = ('min', 'max')
    param_bounds = {'min': (-INF, INF), 'max': (-INF, INF)}

    def frozen(self, params):
        return sp_stats.uniform(loc=params['min'], scale=params['max'] - params['min'])

    def in_bounds(self, params):
        return super().in_bounds(params) and params['min'] < params['max']

    def start_values(self, data):
        return self._named(np.min(data), np.max(data))

    def moment_estimates(self, data):
        return self.start_values(data)


class StudentT(Distribution):
    """Student's t with degrees of freedom and non-centrality."""

    name = 'studentt'
    display_name = "Student's t"
    param_names = ('df', 'ncp')
    param_bounds = {'df': (0.0, INF), 'ncp': (-INF, INF)}

    def frozen(self, params):
        if params['ncp'] == 0.0:
            return sp_stats.t(df=params['df'])
        return sp_stats.nct(df=params['df'], nc=params['ncp'])

    def start_values(self, data):
        return self._named(5.0, 0.0)


class Pareto(Distribution):
    """Pareto type I with support x >= scale."""

    name = 'pareto'
    display_name = 'Pareto'
    param_names = ('scale', 'shape')
    param_bounds = {'scale': (0.0, INF), 'shape': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.pareto(b=params['shape'], scale=params['scale'])

    def start_values(self, data):
        return self._named(np.min(data), 2.0)


class Gumbel(Distribution):
    """Gumbel (type I extreme value, maxima)."""

    name = 'gumbel'
    display_name = 'Gumbel (Type I Extreme Value)'
    param_names = ('location', 'scale')
    param_bounds = {'location': (-INF, INF), 'scale': (0.0, INF)}

    def frozen(self, params):
        return sp_stats.gumbel_r(loc=params['location'], scale=params['scale'])

    def start_values(self, data):
        m1, m2 = _moments(data)
        return self._named(m1, math.sqrt(m2) * math.sqrt(6.0) / math.pi)


# =====================================================================
# Registry
# =====================================================================

_DISTRIBUTION_CLASSES: dict[str, type[Distribution]] = {
    'normal': Normal,
    'lognormal': LogNormal,
    'gamma': Gamma,
    'weibull': Weibull,
    'exponential': Exponential,
    'beta': Beta,
    'uniform': Uniform,
    'studentt': StudentT,
    'pareto': Pareto,
    'gumbel': Gumbel,
}


def list_distributions() -> list[str]:
    """Names of all registered distribution families."""
    return list(_DISTRIBUTION_CLASSES.keys())


def get_distribution(dist: str | Distribution) -> Distribution:
    """
    Resolve a family name (case-insensitive) or instance to a Distribution.

    Raises:
        ValidationError: If the name is not registered
    """
    if isinstance(dist, Distribution):
        return dist
    if isinstance(dist, str):
        cls = _DISTRIBUTION_CLASSES.get(dist.lower())
        if cls is None:
            valid = ', '.join(_DISTRIBUTION_CLASSES.keys())
            raise ValidationError(
                f"Distribution {dist!r} not found. Available: {valid}"
            )
        return cls()
    raise ValidationError(
        f"dist must be str or Distribution, got {type(dist).__name__}"
    )
