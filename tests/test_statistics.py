import math

import numpy as np
import pytest

from stochsim import (
    InvalidArgumentError,
    NumericAnomalyError,
    PathMatrix,
    PathSimulator,
    RandomSampler,
    SimulationParameters,
    summarize,
    theoretical_mean,
)
from stochsim.stats_engine import (
    FnMetric,
    StatsContext,
    StatsEngine,
    build_default_engine,
    ci_mean,
    critical_value,
    maximum,
    mean,
    minimum,
    std,
    variance,
)


def _params(n_paths, n_steps=2, **kw):
    return SimulationParameters(step_count=n_steps, path_count=n_paths, **kw)


class TestSummarize:
    """Test terminal-price statistics"""

    def test_constant_final_prices(self):
        """Test constant final prices give zero spread"""
        m = PathMatrix(np.column_stack([np.full(8, 100.0), np.full(8, 42.5)]))
        s = summarize(m, _params(8, n_steps=1))
        assert s.mean == 42.5
        assert s.stddev == 0.0
        assert s.min == 42.5
        assert s.max == 42.5
        assert s.ci_low == s.ci_high == 42.5

    def test_constant_final_prices_inexact_value(self):
        """Test cancellation never yields a negative variance under the square root"""
        m = PathMatrix(np.column_stack([np.full(1000, 100.0), np.full(1000, 105.127)]))
        s = summarize(m, _params(1000, n_steps=1))
        assert s.mean == pytest.approx(105.127)
        assert s.stddev == pytest.approx(0.0, abs=1e-5)
        assert not math.isnan(s.stddev)

    def test_population_variance(self, tiny_matrix):
        """Test variance divides by N, not N - 1"""
        s = summarize(tiny_matrix, _params(3))
        finals = tiny_matrix.final_prices()
        assert s.mean == pytest.approx(finals.mean())
        assert s.variance == pytest.approx(np.var(finals, ddof=0))
        assert s.stddev == pytest.approx(np.std(finals, ddof=0))
        assert s.stddev != pytest.approx(np.std(finals, ddof=1))
        assert s.min == pytest.approx(0.3)
        assert s.max == 103.25

    def test_theoretical_mean(self):
        """Test the closed-form expectation"""
        p = SimulationParameters(initial_price=100.0, drift=0.05, horizon_years=1.0)
        assert theoretical_mean(p) == pytest.approx(105.127, abs=1e-3)
        assert theoretical_mean(p) == 100.0 * math.exp(0.05)

    def test_echoes_parameters(self, tiny_matrix):
        """Test run inputs are carried into the report"""
        s = summarize(tiny_matrix, _params(3, initial_price=100.0, horizon_years=2.0))
        assert s.n_paths == 3
        assert s.initial_price == 100.0
        assert s.horizon_years == 2.0
        assert s.confidence == 0.95

    def test_confidence_interval_brackets_mean(self, small_params):
        """Test the CI is centred on the mean"""
        m = PathSimulator(RandomSampler(1)).simulate(small_params)
        s = summarize(m, small_params, confidence=0.9)
        assert s.ci_low < s.mean < s.ci_high
        assert s.mean - s.ci_low == pytest.approx(s.ci_high - s.mean)
        assert s.std_error == pytest.approx(np.std(m.final_prices(), ddof=1) / math.sqrt(50))

    def test_simulated_mean_near_theory(self):
        """Test the simulated mean approaches the closed form for many paths"""
        p = SimulationParameters(step_count=20, path_count=20_000)
        s = summarize(PathSimulator(RandomSampler(77)).simulate(p), p)
        assert s.mean == pytest.approx(s.theoretical_mean, abs=1.0)
        assert s.min > 0

    def test_empty_matrix(self):
        """Test an empty matrix is rejected"""
        with pytest.raises(InvalidArgumentError, match="empty"):
            summarize(PathMatrix(np.empty((0, 3))), _params(1))

    def test_non_finite_final_prices(self):
        """Test corrupted prices never reach the statistics"""
        m = PathMatrix([[100.0, np.inf], [100.0, 101.0]])
        with pytest.raises(NumericAnomalyError, match="1 final prices"):
            summarize(m, _params(2, n_steps=1))

    def test_failed_metric_surfaces(self, tiny_matrix):
        """Test a missing statistic is reported rather than silently dropped"""
        engine = StatsEngine([FnMetric("mean", mean)])
        with pytest.raises(NumericAnomalyError, match="could not be computed"):
            summarize(tiny_matrix, _params(3), engine=engine)

    def test_result_to_string(self):
        """Test the report lines and their formatting"""
        m = PathMatrix([[100.0, 110.0], [100.0, 90.0]])
        text = summarize(m, _params(2, n_steps=1)).result_to_string()
        lines = text.splitlines()
        assert "Number of paths: 2" in lines
        assert "Initial price: $100.00" in lines
        assert "Time period: 1 years" in lines
        assert "Mean final price: $100.00" in lines
        assert "Standard deviation: $10.00" in lines
        assert "Min final price: $90.00" in lines
        assert "Max final price: $110.00" in lines
        assert "Theoretical expected price: $105.13" in lines
        order = [
            "Number of paths",
            "Initial price",
            "Time period",
            "Mean final price",
            "Standard deviation",
            "Min final price",
            "Max final price",
            "Theoretical expected price",
        ]
        positions = [next(i for i, l in enumerate(lines) if l.startswith(k)) for k in order]
        assert positions == sorted(positions)


class TestStatsEngine:
    """Test StatsEngine and its metrics"""

    def test_engine_compute(self):
        """Test computing all default metrics"""
        result = build_default_engine().compute(np.array([1.0, 2.0, 3.0, 4.0]))
        assert set(result) == {"mean", "variance", "std", "min", "max", "ci_mean"}
        assert result["mean"] == 2.5
        assert result["variance"] == pytest.approx(1.25)

    def test_available_and_select(self):
        """Test metric listing and selection"""
        engine = StatsEngine([FnMetric("mean", mean), FnMetric("std", std)])
        assert engine.available() == ("mean", "std")
        res = engine.compute(np.array([1.0, 2.0, 3.0]), select=("std",))
        assert set(res) == {"std"}

    def test_failing_metric_is_logged_and_skipped(self, caplog):
        """Test one broken metric does not hide the others"""
        def boom(x, ctx):
            raise RuntimeError("boom")

        engine = StatsEngine([FnMetric("mean", mean), FnMetric("boom", boom)])
        with caplog.at_level("ERROR", logger="stochsim"):
            res = engine.compute(np.array([1.0, 2.0]))
        assert res == {"mean": 1.5}
        assert "Error computing metric boom" in caplog.text

    def test_empty_sample_metrics(self):
        """Test empty input yields NaN rather than an exception"""
        x = np.array([])
        assert math.isnan(mean(x))
        assert math.isnan(variance(x))
        assert math.isnan(std(x))
        assert math.isnan(minimum(x))
        assert math.isnan(maximum(x))

    def test_ci_single_observation(self):
        """Test the CI collapses for one observation"""
        ci = ci_mean(np.array([5.0]), StatsContext(n=1))
        assert ci["low"] == ci["high"] == 5.0
        assert ci["se"] == 0.0

    def test_ci_method_selection(self):
        """Test t is used for small samples and z for large"""
        small = ci_mean(np.arange(10.0), StatsContext(n=10))
        large = ci_mean(np.arange(100.0), StatsContext(n=100))
        assert small["method"] == "t"
        assert large["method"] == "z"
        forced = ci_mean(np.arange(100.0), StatsContext(n=100, ci_method="t"))
        assert forced["method"] == "t"

    def test_critical_values(self):
        """Test known critical values"""
        assert critical_value(0.95, 1000, "z")[0] == pytest.approx(1.959964, abs=1e-6)
        assert critical_value(0.95, 5, "t")[0] == pytest.approx(2.776445, abs=1e-6)

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"confidence": 1.2}, "confidence"),
            ({"n": -1}, "n must be"),
            ({"ci_method": "bootstrap"}, "ci_method"),
        ],
    )
    def test_stats_context_validation_errors(self, kwargs, message):
        """Test invalid context fields are rejected"""
        base = {"n": 1}
        base.update(kwargs)
        with pytest.raises(ValueError, match=message):
            StatsContext(**base)

    def test_stats_context_overrides(self):
        """Test with_overrides returns a modified copy"""
        ctx = StatsContext(n=20)
        ctx2 = ctx.with_overrides(confidence=0.9)
        assert ctx2.confidence == 0.9
        assert ctx.confidence == 0.95
        assert round(ctx2.alpha, 2) == 0.1
