"""
Distribution registry.

Usage:
    from pydistfit.distributions import get_distribution

    normal = get_distribution("normal")
    normal.param_names            # ('mean', 'sd')
    normal.cdf(1.96, {"mean": 0.0, "sd": 1.0})
"""

from pydistfit.distributions.families import (
    Distribution,
    get_distribution,
    list_distributions,
)

__all__ = [
    "Distribution",
    "get_distribution",
    "list_distributions",
]
