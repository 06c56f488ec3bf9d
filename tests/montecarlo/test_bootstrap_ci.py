"""
End-to-end tests for bootstrap_ci().

Validates:
    - Reproducibility from a seed, independent of the execution strategy
    - Intervals centered on the original point estimate
    - Coverage across repeated simulated datasets
    - Families supplied as Distribution instances outside the registry
    - Monotonic width in the confidence level
    - Graceful degradation when some replicate fits fail
    - Run-level failure when every replicate fit fails
    - BCa built on the nonparametric replicates plus a jackknife pass
"""

import logging
import multiprocessing

import numpy as np
import pytest
from scipy import stats

from pydistfit.core.exceptions import BootstrapError
from pydistfit.distributions import Distribution
from pydistfit.fitting import fit_distribution
from pydistfit.montecarlo import BootstrapMode, bootstrap_ci

MODES = ["parametric", "nonparametric", "bca"]


class Laplace(Distribution):
    """Unregistered family: Laplace(location, scale)."""

    name = 'laplace'
    display_name = 'Laplace'
    param_names = ('location', 'scale')
    param_bounds = {'location': (-np.inf, np.inf), 'scale': (0.0, np.inf)}

    def frozen(self, params):
        return stats.laplace(loc=params['location'], scale=params['scale'])

    def start_values(self, data):
        med = float(np.median(data))
        return self._named(med, float(np.mean(np.abs(data - med))))


@pytest.fixture
def normal_fit(normal_sample):
    return fit_distribution(normal_sample, "normal", method="mme")


class TestReproducibility:

    @pytest.mark.parametrize("mode", MODES)
    def test_same_seed_same_result(self, normal_fit, mode):
        a = bootstrap_ci(normal_fit, mode, replicate_count=100, seed=42)
        b = bootstrap_ci(normal_fit, mode, replicate_count=100, seed=42)
        np.testing.assert_array_equal(a.replicates, b.replicates)
        assert a.intervals == b.intervals

    def test_different_seed_differs(self, normal_fit):
        a = bootstrap_ci(normal_fit, replicate_count=100, seed=1)
        b = bootstrap_ci(normal_fit, replicate_count=100, seed=2)
        assert not np.array_equal(a.replicates, b.replicates)

    @pytest.mark.parametrize("workers", [2, 3])
    def test_thread_parallel_matches_sequential(self, normal_fit, workers):
        seq = bootstrap_ci(normal_fit, "nonparametric", replicate_count=120, seed=9)
        par = bootstrap_ci(
            normal_fit, "nonparametric", replicate_count=120, seed=9,
            parallel=True, workers=workers, executor="thread",
        )
        np.testing.assert_array_equal(seq.replicates, par.replicates)
        assert seq.intervals == par.intervals

    @pytest.mark.skipif(
        "fork" not in multiprocessing.get_all_start_methods(),
        reason="fork start method unavailable",
    )
    def test_process_parallel_matches_sequential(self, normal_fit):
        seq = bootstrap_ci(normal_fit, "bca", replicate_count=60, seed=5)
        par = bootstrap_ci(
            normal_fit, "bca", replicate_count=60, seed=5,
            parallel=True, workers=2, executor="auto",
        )
        np.testing.assert_array_equal(seq.replicates, par.replicates)
        np.testing.assert_array_equal(seq.jackknife, par.jackknife)
        assert seq.intervals == par.intervals


class TestCentering:

    @pytest.mark.parametrize("mode", MODES)
    def test_estimate_is_point_estimate(self, normal_fit, mode):
        result = bootstrap_ci(normal_fit, mode, replicate_count=100, seed=3)
        for name, value in normal_fit.params.items():
            assert result.intervals[name].estimate == value
            assert result.intervals[name].lower <= result.intervals[name].upper

    def test_model_not_modified(self, normal_fit, normal_sample):
        model = normal_fit.to_model()
        bootstrap_ci(model, "nonparametric", replicate_count=50, seed=3)
        np.testing.assert_array_equal(model.sample, normal_sample)


class TestCoverage:

    def test_mean_interval_covers_truth(self):
        """Across repeated N(5, 2²) datasets the interval usually contains 5."""
        hits = 0
        trials = 40
        for i in range(trials):
            data = np.random.default_rng(1000 + i).normal(5.0, 2.0, size=1000)
            fit = fit_distribution(data, "normal", method="mme")
            result = bootstrap_ci(fit, "nonparametric", replicate_count=200, seed=i)
            hits += result.intervals["mean"].contains(5.0)
        assert hits / trials >= 0.85

    @pytest.mark.parametrize("mode", MODES)
    def test_estimate_inside_interval(self, mode):
        """lower <= estimate <= upper in at least 95% of trials."""
        trials = 20
        inside = {"mean": 0, "sd": 0}
        for i in range(trials):
            data = np.random.default_rng(2000 + i).normal(5.0, 2.0, size=100)
            fit = fit_distribution(data, "normal", method="mme")
            result = bootstrap_ci(fit, mode, replicate_count=200, seed=i)
            for name, iv in result.intervals.items():
                inside[name] += iv.contains(iv.estimate)
        for name, count in inside.items():
            assert count / trials >= 0.95, name


class TestCustomDistribution:
    """A Distribution instance outside the registry is refitted as itself."""

    @pytest.fixture
    def laplace_fit(self, rng):
        data = rng.laplace(1.0, 2.0, size=80)
        return fit_distribution(data, Laplace(), method="mle")

    @pytest.mark.parametrize("mode", ["parametric", "nonparametric"])
    def test_bootstrap_succeeds(self, laplace_fit, mode):
        result = bootstrap_ci(laplace_fit, mode, replicate_count=30, seed=1)
        assert result.n_successful >= 25
        assert result.param_names == ("location", "scale")
        assert result.model.family == "laplace"
        for name, value in laplace_fit.params.items():
            assert result.intervals[name].estimate == value

    def test_confint(self, laplace_fit):
        ci = laplace_fit.confint(mode="nonparametric", replicate_count=30, seed=1)
        assert list(ci) == ["location", "scale"]
        lo, hi = ci["scale"]
        assert 0.0 < lo <= hi


class TestMonotonicWidth:

    @pytest.mark.parametrize("mode", MODES)
    def test_99_not_narrower_than_95(self, normal_fit, mode):
        r95 = bootstrap_ci(normal_fit, mode, replicate_count=200, conf_level=0.95, seed=11)
        r99 = bootstrap_ci(normal_fit, mode, replicate_count=200, conf_level=0.99, seed=11)
        for name in normal_fit.params:
            assert r99.intervals[name].width >= r95.intervals[name].width


class TestKnownScenario:

    def test_normal_mean_interval(self):
        """N(5, 2²), n=1000: the 95% interval for the mean is about 0.25 wide."""
        data = np.random.default_rng(2024).normal(5.0, 2.0, size=1000)
        fit = fit_distribution(data, "normal", method="mme")
        result = bootstrap_ci(fit, "parametric", replicate_count=500, seed=1)

        mean = result.intervals["mean"]
        assert mean.estimate == pytest.approx(np.mean(data))
        assert mean.lower < mean.estimate < mean.upper
        assert 0.2 < mean.width < 0.3
        assert result.n_successful == 500
        assert result.warnings == ()


class TestGracefulDegradation:

    def test_half_the_fits_fail(self, normal_fit, alternating_estimator):
        with pytest.warns(RuntimeWarning, match="Only 50.0% of bootstrap samples converged"):
            result = bootstrap_ci(
                normal_fit, replicate_count=100, seed=4,
                estimator=alternating_estimator,
            )
        assert result.n_successful == 50
        assert result.convergence_rate == 0.5
        np.testing.assert_array_equal(result.failed_iterations, np.arange(1, 100, 2))
        assert np.all(np.isnan(result.replicates[1::2]))
        assert result.intervals["mean"].reliable
        assert result.has_warning("converged")

    def test_intervals_use_only_successes(self, normal_fit, alternating_estimator):
        with pytest.warns(RuntimeWarning):
            result = bootstrap_ci(
                normal_fit, replicate_count=100, seed=4,
                estimator=alternating_estimator,
            )
        good = result.replicates[result.successful, 0]
        lo, hi = np.quantile(good, [0.025, 0.975])
        assert result.intervals["mean"].lower == pytest.approx(lo)
        assert result.intervals["mean"].upper == pytest.approx(hi)

    def test_too_few_successes(self, normal_fit, alternating_estimator):
        with pytest.warns(RuntimeWarning, match="Too few successful bootstrap samples"):
            result = bootstrap_ci(
                normal_fit, replicate_count=12, seed=4,
                estimator=alternating_estimator,
            )
        assert result.n_successful == 6
        assert not result.intervals["sd"].reliable

    def test_all_fits_fail(self, normal_fit, failing_estimator):
        with pytest.raises(BootstrapError, match="All 20 bootstrap iterations failed") as exc_info:
            bootstrap_ci(normal_fit, replicate_count=20, seed=4, estimator=failing_estimator)
        assert exc_info.value.n_successful == 0
        assert exc_info.value.replicate_count == 20

    def test_custom_estimator_in_threads(self, normal_fit, mean_sd_estimator):
        result = bootstrap_ci(
            normal_fit, "nonparametric", replicate_count=40, seed=4,
            parallel=True, workers=2, executor="thread",
            estimator=mean_sd_estimator,
        )
        assert result.n_successful == 40
        assert mean_sd_estimator.calls == 40


class TestBCa:

    def test_uses_nonparametric_replicates(self, normal_fit):
        bca = bootstrap_ci(normal_fit, "bca", replicate_count=100, seed=8)
        nonpar = bootstrap_ci(normal_fit, "nonparametric", replicate_count=100, seed=8)
        np.testing.assert_array_equal(bca.replicates, nonpar.replicates)
        assert bca.method == "bca"
        assert nonpar.method == "perc"

    def test_jackknife_attached(self, normal_fit, normal_sample):
        result = bootstrap_ci(normal_fit, "bca", replicate_count=100, seed=8)
        assert result.jackknife.shape == (100, 2)
        assert result.jackknife[0, 0] == pytest.approx(np.mean(normal_sample[1:]))
        assert "jackknife" in result.timing

    def test_no_jackknife_for_percentile_modes(self, normal_fit):
        result = bootstrap_ci(normal_fit, "parametric", replicate_count=20, seed=8)
        assert result.jackknife is None

    def test_skewed_data(self, rng):
        data = rng.gamma(2.0, 1.5, size=60)
        fit = fit_distribution(data, "gamma", method="mme")
        result = bootstrap_ci(fit, "bca", replicate_count=200, seed=8)
        for name, value in fit.params.items():
            iv = result.intervals[name]
            assert iv.lower <= value <= iv.upper


class TestOptions:

    def test_accepts_fitted_model(self, normal_model):
        result = bootstrap_ci(normal_model, replicate_count=20, seed=1)
        assert result.param_names == ("mean", "sd")

    def test_mode_enum_and_case(self, normal_fit):
        a = bootstrap_ci(normal_fit, BootstrapMode.NONPARAMETRIC, replicate_count=20, seed=1)
        b = bootstrap_ci(normal_fit, "NonParametric", replicate_count=20, seed=1)
        assert a.mode is b.mode is BootstrapMode.NONPARAMETRIC

    def test_keep_replicates_false(self, normal_fit):
        result = bootstrap_ci(normal_fit, replicate_count=20, seed=1, keep_replicates=False)
        assert result.replicates is None
        assert result.successful.shape == (20,)

    def test_single_replicate(self, normal_fit):
        with pytest.warns(RuntimeWarning, match="Too few"):
            result = bootstrap_ci(normal_fit, replicate_count=1, seed=1)
        iv = result.intervals["mean"]
        assert iv.lower == iv.upper

    def test_progress_logging(self, normal_fit, caplog):
        with caplog.at_level(logging.INFO, logger="pydistfit"):
            bootstrap_ci(normal_fit, replicate_count=200, seed=1)
        assert "Bootstrap iteration 200/200" in caplog.text

    def test_progress_callback(self, normal_fit):
        seen = []
        bootstrap_ci(normal_fit, replicate_count=100, seed=1,
                     progress=lambda done, n: seen.append((done, n)))
        assert seen == [(100, 100)]

    def test_info(self, normal_fit):
        result = bootstrap_ci(normal_fit, "nonparametric", replicate_count=20, seed=1)
        assert result.info["mode"] == "nonparametric"
        assert result.info["executor"] == "sequential"
        assert result.backend_name == "cpu_bootstrap"
