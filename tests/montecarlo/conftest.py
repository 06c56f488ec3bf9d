"""
Shared estimators for the bootstrap tests.

Custom estimators here are used with the thread executor or sequential
runs; process pools require estimators importable by the worker.
"""

import numpy as np
import pytest


class MeanSdEstimator:
    """Closed-form normal estimator."""

    def __init__(self):
        self.calls = 0

    def estimate(self, sample):
        self.calls += 1
        return {"mean": float(np.mean(sample)), "sd": float(np.std(sample, ddof=1))}


class AlternatingEstimator(MeanSdEstimator):
    """Fails on every second call."""

    def estimate(self, sample):
        result = super().estimate(sample)
        if self.calls % 2 == 0:
            raise RuntimeError("refit failed")
        return result


class FailingEstimator:
    """Never produces an estimate."""

    def estimate(self, sample):
        raise RuntimeError("refit failed")


@pytest.fixture
def mean_sd_estimator():
    return MeanSdEstimator()


@pytest.fixture
def alternating_estimator():
    return AlternatingEstimator()


@pytest.fixture
def failing_estimator():
    return FailingEstimator()
