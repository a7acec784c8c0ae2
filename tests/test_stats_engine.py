import numpy as np
import pytest

from arcwalk.stats_engine import (
    DEFAULT_ENGINE,
    FnMetric,
    StatsContext,
    StatsEngine,
    arcsine_mean_error,
    build_default_engine,
    ci_mean,
    ks_arcsine,
    kurtosis,
    mean,
    percentiles,
    skew,
    std,
)


class TestStatsEngine:
    """Test StatsEngine class"""

    def test_engine_compute(self, sample_data):
        """Test computing all metrics"""
        engine = StatsEngine([FnMetric("mean", mean), FnMetric("std", std)])
        assert engine.names == ("mean", "std")
        result = engine.compute(sample_data, StatsContext())
        assert set(result) == {"mean", "std"}
        assert abs(result["mean"] - 5.0) < 0.3

    def test_default_engine_compute(self, arcsine_sample):
        """Test default engine computes all metrics"""
        result = DEFAULT_ENGINE.compute(arcsine_sample)
        for key in ("mean", "std", "percentiles", "skew", "kurtosis", "ci_mean", "ks_arcsine", "arcsine_mean_error"):
            assert key in result

    def test_engine_without_arcsine(self):
        result = build_default_engine(include_arcsine=False).compute(np.array([0.1, 0.2, 0.9]))
        assert "ks_arcsine" not in result
        assert "arcsine_mean_error" not in result

    def test_accepts_lists(self):
        assert StatsEngine([FnMetric("mean", mean)]).compute([1, 2, 3]) == {"mean": 2.0}

    def test_skips_failing_metric(self, caplog):
        def boom(x, ctx):
            raise RuntimeError("boom")

        engine = StatsEngine([FnMetric("boom", boom), FnMetric("mean", mean)])
        assert engine.compute(np.array([1.0, 2.0])) == {"mean": 1.5}
        assert "Error computing metric boom" in caplog.text


class TestStatsContext:
    """Context validation"""

    def test_defaults(self):
        ctx = StatsContext()
        assert ctx.confidence == 0.95
        assert ctx.percentiles == (5, 25, 50, 75, 95)
        assert ctx.lattice is None and ctx.rng is None

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"confidence": 1.0}, "confidence"),
            ({"confidence": 0.0}, "confidence"),
            ({"percentiles": (5, 101)}, "percentiles"),
            ({"lattice": 0.0}, "lattice"),
        ],
    )
    def test_validation_errors(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            StatsContext(**kwargs)


class TestMetrics:
    """Individual metric functions"""

    def test_mean_std(self):
        ctx = StatsContext()
        x = np.array([1.0, 2.0, 3.0])
        assert mean(x, ctx) == 2.0
        assert std(x, ctx) == 1.0
        assert std(np.array([4.0]), ctx) == 0.0
        assert np.isnan(mean(np.array([]), ctx))

    def test_percentiles(self):
        assert percentiles(np.array([0.0, 1.0, 2.0, 3.0]), StatsContext(percentiles=(50, 75))) == {50: 1.5, 75: 2.25}
        assert np.isnan(percentiles(np.array([]), StatsContext(percentiles=(50,)))[50])

    def test_shape_metrics_on_arcsine(self, arcsine_sample):
        ctx = StatsContext()
        assert abs(skew(arcsine_sample, ctx)) < 0.1
        assert abs(kurtosis(arcsine_sample, ctx) + 1.5) < 0.1
        assert skew(np.array([1.0, 2.0]), ctx) == 0.0
        assert kurtosis(np.array([1.0, 2.0, 3.0]), ctx) == 0.0

    def test_ci_mean(self, sample_data):
        ci = ci_mean(sample_data, StatsContext())
        assert ci["method"] == "z"
        assert ci["low"] < 5.0 < ci["high"]

    def test_ci_mean_small_and_degenerate(self):
        ctx = StatsContext()
        assert ci_mean(np.array([1.0, 2.0, 3.0]), ctx)["method"] == "t"
        single = ci_mean(np.array([1.0]), ctx)
        assert np.isnan(single["low"]) and "se" not in single
        flat = ci_mean(np.full(10, 2.0), ctx)
        assert flat["low"] == flat["high"] == 2.0

    def test_ci_mean_wider_at_higher_confidence(self, sample_data):
        narrow = ci_mean(sample_data, StatsContext(confidence=0.8))
        wide = ci_mean(sample_data, StatsContext(confidence=0.99))
        assert wide["high"] - wide["low"] > narrow["high"] - narrow["low"]

    def test_ks_arcsine(self, arcsine_sample):
        res = ks_arcsine(arcsine_sample, StatsContext())
        assert set(res) == {"statistic", "pvalue"}
        assert res["statistic"] < 0.03
        assert np.isnan(ks_arcsine(np.array([]), StatsContext())["statistic"])

    def test_ks_arcsine_lattice_uses_ctx_rng(self):
        x = np.arange(0, 21) / 20
        ctx = StatsContext(lattice=0.05, rng=4)
        assert ks_arcsine(x, ctx) == ks_arcsine(x, ctx)

    def test_arcsine_mean_error(self):
        assert arcsine_mean_error(np.array([0.25, 0.5]), StatsContext()) == pytest.approx(-0.125)
