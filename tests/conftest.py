"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pydistfit.montecarlo import FittedModel


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def normal_sample(rng):
    """100 draws from N(5, 2²)."""
    return rng.normal(5.0, 2.0, size=100)


@pytest.fixture
def normal_model(normal_sample):
    """Method-of-moments normal fit of normal_sample."""
    return FittedModel.create(
        normal_sample,
        "normal",
        "mme",
        {"mean": float(np.mean(normal_sample)),
         "sd": float(np.std(normal_sample, ddof=1))},
    )
