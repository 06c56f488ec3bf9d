"""
Tests for fit_distribution() and estimate_parameters().

Validates:
    - MLE / MME / QME estimates against analytical values
    - Input validation (NaN dropping, minimum size, unknown method)
    - FitError for data outside a family's support
    - Non-convergence: warning from fit_distribution, error from
      estimate_parameters
"""

import math

import numpy as np
import pytest

from pydistfit.core.exceptions import ConvergenceError, FitError, ValidationError
from pydistfit.fitting import estimate_parameters, fit_distribution
from pydistfit.fitting import _estimators
from pydistfit.fitting._estimators import Estimate


class TestMLE:

    def test_normal_matches_closed_form(self, normal_sample):
        """Normal MLE is the sample mean and the biased sd."""
        fit = fit_distribution(normal_sample, "normal")
        assert fit.params["mean"] == pytest.approx(np.mean(normal_sample), abs=1e-3)
        assert fit.params["sd"] == pytest.approx(np.std(normal_sample), abs=1e-3)
        assert fit.converged

    def test_exponential(self, rng):
        data = rng.exponential(scale=0.5, size=400)
        fit = fit_distribution(data, "exponential")
        assert fit.params["rate"] == pytest.approx(1.0 / np.mean(data), rel=1e-3)

    def test_gamma_recovers_shape(self, rng):
        data = rng.gamma(shape=2.0, scale=1.0, size=500)
        fit = fit_distribution(data, "gamma")
        assert fit.params["shape"] == pytest.approx(2.0, abs=0.4)
        assert fit.params["rate"] == pytest.approx(1.0, abs=0.25)

    def test_fit_statistics(self, normal_sample):
        fit = fit_distribution(normal_sample, "normal")
        assert fit.aic == pytest.approx(4.0 - 2.0 * fit.loglik)
        assert fit.bic == pytest.approx(2.0 * math.log(100) - 2.0 * fit.loglik)
        assert fit.backend_name == "cpu_mle"

    def test_params_in_schema_order(self, rng):
        fit = fit_distribution(rng.gamma(2.0, size=50), "gamma")
        assert list(fit.params) == ["shape", "rate"]


class TestMME:

    def test_normal(self, normal_sample):
        fit = fit_distribution(normal_sample, "normal", method="mme")
        assert fit.params["mean"] == pytest.approx(np.mean(normal_sample))
        assert fit.params["sd"] == pytest.approx(np.std(normal_sample, ddof=1))
        assert fit.info["message"] == "closed form"

    def test_falls_back_to_mle(self, rng):
        data = rng.gumbel(1.0, 2.0, size=200)
        mme = fit_distribution(data, "gumbel", method="mme")
        mle = fit_distribution(data, "gumbel", method="mle")
        assert mme.params == pytest.approx(mle.params)

    def test_case_insensitive_method(self, normal_sample):
        fit = fit_distribution(normal_sample, "normal", method="MME")
        assert fit.method == "mme"


class TestQME:

    def test_normal_quartiles(self, normal_sample):
        fit = fit_distribution(normal_sample, "normal", method="qme")
        q1, q3 = np.quantile(normal_sample, [0.25, 0.75])
        assert fit.params["mean"] == pytest.approx((q1 + q3) / 2, abs=1e-3)
        assert fit.params["sd"] == pytest.approx((q3 - q1) / 1.3489795, rel=1e-3)


class TestValidation:

    def test_nan_dropped(self, normal_sample):
        data = np.append(normal_sample, [np.nan, np.nan])
        fit = fit_distribution(data, "normal", method="mme")
        assert fit.n == 100

    def test_too_few_observations(self):
        with pytest.raises(ValidationError, match="at least 2"):
            fit_distribution([1.0, np.nan], "normal")

    def test_infinite_rejected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            fit_distribution([1.0, 2.0, np.inf], "normal")

    def test_unknown_method(self, normal_sample):
        with pytest.raises(ValidationError, match="method"):
            fit_distribution(normal_sample, "normal", method="bayes")

    def test_unknown_family(self, normal_sample):
        with pytest.raises(ValidationError, match="not found"):
            fit_distribution(normal_sample, "cauchy")

    def test_incomplete_start(self, normal_sample):
        with pytest.raises(ValidationError, match="start"):
            fit_distribution(normal_sample, "normal", start={"mean": 1.0})


class TestFitErrors:

    def test_gamma_on_negative_data_mle(self):
        with pytest.raises(FitError) as exc_info:
            fit_distribution([-1.0, -2.0, -3.0], "gamma")
        assert exc_info.value.family == "gamma"

    def test_gamma_on_negative_data_mme(self):
        with pytest.raises(FitError, match="outside the parameter space"):
            fit_distribution([-1.0, -2.0, -3.0], "gamma", method="mme")


@pytest.fixture
def non_converging(monkeypatch):
    """Replace the MLE estimator with one that never converges."""
    def fake_mle(data, dist, start=None):
        return Estimate(
            params={"mean": float(np.mean(data)), "sd": float(np.std(data))},
            converged=False,
            n_iter=1000,
            message="Maximum number of iterations has been exceeded.",
        )
    monkeypatch.setitem(_estimators.ESTIMATORS, "mle", fake_mle)


class TestNonConvergence:

    def test_fit_distribution_warns(self, normal_sample, non_converging):
        with pytest.warns(RuntimeWarning, match="may not have converged"):
            fit = fit_distribution(normal_sample, "normal")
        assert not fit.converged
        assert fit.warnings

    def test_estimate_parameters_raises(self, normal_sample, non_converging):
        with pytest.raises(ConvergenceError) as exc_info:
            estimate_parameters(normal_sample, "normal", "mle")
        assert exc_info.value.iterations == 1000


class TestEstimateParameters:

    def test_returns_plain_mapping(self, normal_sample):
        est = estimate_parameters(normal_sample, "normal", "mme")
        assert isinstance(est, dict)
        assert set(est) == {"mean", "sd"}
