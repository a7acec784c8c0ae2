import numpy as np
import pytest

from arcwalk import MonteCarloTable, SimulationResult, run_monte_carlo
from arcwalk.core import COLUMNS
from arcwalk.exceptions import InvalidParameterError
from arcwalk.path import generate_path
from arcwalk.path_stats import compute_statistics


@pytest.mark.slow
class TestReferenceScenario:
    """10,000 symmetric walks of 222 steps"""

    def test_shape(self, reference_table):
        assert len(reference_table) == 10_000
        assert reference_table.n == 222
        assert reference_table.as_array().shape == (10_000, 4)

    def test_raw_columns_in_range(self, reference_table):
        for name in ("tau", "gamma"):
            col = reference_table.column(name)
            assert col.dtype == np.int64
            assert col.min() >= 0 and col.max() <= 222

    def test_normalized_columns(self, reference_table):
        t = reference_table
        assert np.allclose(t.tau_norm, t.tau / 222)
        assert np.allclose(t.gamma_norm, t.gamma / 222)
        for name in ("tau_norm", "gamma_norm"):
            col = t.column(name)
            assert col.min() >= 0.0 and col.max() <= 1.0

    def test_gamma_always_even(self, reference_table):
        assert np.all(reference_table.gamma % 2 == 0)

    @pytest.mark.parametrize("name", ["tau_norm", "gamma_norm"])
    def test_mean_near_one_half(self, reference_table, name):
        """Only a loose bound: the last maximum is biased upward at finite n"""
        assert abs(reference_table.column(name).mean() - 0.5) < 0.04

    def test_gamma_mean_is_one_half(self, reference_table):
        """For even n the exact law of gamma is symmetric about n/2"""
        assert abs(reference_table.gamma_norm.mean() - 0.5) < 0.02

    def test_tau_mean_matches_exact_law(self, reference_table):
        support, pmf = reference_table.exact_law("tau")
        exact = float(np.dot(support, pmf)) / reference_table.n
        assert exact > 0.52
        assert abs(reference_table.tau_norm.mean() - exact) < 0.01

    @pytest.mark.parametrize("name", ["tau", "gamma"])
    def test_close_to_arcsine_law(self, reference_table, name):
        res = reference_table.ks_test(name, rng=1)
        assert res.n == 10_000
        assert res.statistic < 0.05

    @pytest.mark.parametrize("name", ["tau", "gamma", "tau_norm"])
    def test_matches_exact_finite_law(self, reference_table, name):
        assert reference_table.exact_ks_statistic(name) < 0.025

    def test_mass_near_the_ends(self, reference_table):
        """The arcsine law puts more mass near 0 and 1 than in the middle"""
        x = reference_table.tau_norm
        ends = np.mean((x < 0.1) | (x > 0.9))
        middle = np.mean((x > 0.4) & (x < 0.6))
        assert ends > 2 * middle


class TestRunMonteCarlo:
    """Driver behavior"""

    def test_sequential_matches_generate_path(self):
        g1, g2 = np.random.default_rng(3), np.random.default_rng(3)
        table = run_monte_carlo(20, 15, rng=g1)
        expected = [compute_statistics(generate_path(0.5, 15, 0, rng=g2)) for _ in range(20)]
        assert table.tau.tolist() == [e.tau for e in expected]
        assert table.gamma.tolist() == [e.gamma for e in expected]

    def test_same_seed_same_table(self):
        a = run_monte_carlo(200, 30, rng=5)
        b = run_monte_carlo(200, 30, rng=5)
        assert np.array_equal(a.as_array(), b.as_array())

    def test_different_seeds_differ(self):
        a = run_monte_carlo(200, 30, rng=5)
        b = run_monte_carlo(200, 30, rng=6)
        assert not np.array_equal(a.as_array(), b.as_array())

    @pytest.mark.parametrize("backend", ["thread", "vectorized"])
    def test_other_backends(self, backend):
        table = run_monte_carlo(500, 20, s0=4, rng=8, backend=backend, n_workers=2)
        assert len(table) == 500
        assert table.metadata["backend"] == backend
        assert np.all(table.gamma % 2 == 0)

    def test_biased_walk_rejects_arcsine(self):
        table = run_monte_carlo(1000, 100, p=0.9, rng=2)
        assert table.tau_norm.mean() > 0.9
        assert table.ks_test("tau", rng=0).statistic > 0.3

    def test_s0_does_not_change_statistics(self):
        a = run_monte_carlo(100, 25, s0=0, rng=4)
        b = run_monte_carlo(100, 25, s0=-30, rng=4)
        assert np.array_equal(a.as_array(), b.as_array())
        assert b.s0 == -30

    def test_progress_callback(self):
        calls = []
        run_monte_carlo(100, 10, rng=0, progress_callback=lambda c, t: calls.append((c, t)))
        assert calls[-1] == (100, 100)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"m": 0},
            {"m": 2.5},
            {"n": 0},
            {"n": -4},
            {"p": 0.0},
            {"p": 1.0},
            {"p": float("nan")},
            {"s0": 0.5},
            {"backend": "gpu"},
            {"n_workers": 0},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidParameterError):
            run_monte_carlo(**{"m": 5, "n": 5, **kwargs})


class TestMonteCarloTable:
    """Table container"""

    def test_columns_read_only(self):
        table = MonteCarloTable(tau=[1, 2], gamma=[0, 2], n=4)
        with pytest.raises(ValueError):
            table.tau[0] = 3

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            MonteCarloTable(tau=[1, 2, 3], gamma=[0, 2], n=4)

    def test_rows(self):
        table = MonteCarloTable(tau=[1, 4], gamma=[0, 2], n=4)
        rows = list(table.rows())
        assert rows[0] == {"tau": 1, "gamma": 0, "tau_norm": 0.25, "gamma_norm": 0.0}
        assert rows[1]["gamma_norm"] == 0.5

    def test_column_names(self):
        table = MonteCarloTable(tau=[1], gamma=[0], n=2)
        assert COLUMNS == ("tau", "gamma", "tau_norm", "gamma_norm")
        with pytest.raises(KeyError):
            table.column("delta")
        with pytest.raises(KeyError):
            table.lattice("delta")

    def test_lattice(self):
        table = MonteCarloTable(tau=[1], gamma=[0], n=4)
        assert table.lattice("tau") == 0.25
        assert table.lattice("gamma_norm") == 0.5

    def test_exact_law(self):
        table = MonteCarloTable(tau=[0, 1, 2, 2], gamma=[0, 2, 0, 2], n=2)
        support, pmf = table.exact_law("tau_norm")
        assert support.tolist() == [0, 1, 2]
        assert np.allclose(pmf, [0.25, 0.25, 0.5])
        assert table.exact_law("gamma")[0].tolist() == [0, 2]
        assert table.exact_ks_statistic("tau") == pytest.approx(0.0, abs=1e-12)
        with pytest.raises(KeyError):
            table.exact_law("delta")

    def test_exact_law_needs_symmetric_walk(self):
        table = MonteCarloTable(tau=[1], gamma=[0], n=2, p=0.7)
        with pytest.raises(ValueError, match="p = 0.5"):
            table.exact_law("tau")

    def test_from_result(self):
        result = SimulationResult(
            results=np.array([[3, 2], [0, 0]]),
            fields=("tau", "gamma"),
            n_simulations=2,
            execution_time=0.5,
            metadata={"backend": "sequential"},
        )
        table = MonteCarloTable.from_result(result, n=4, p=0.5, s0=1)
        assert table.tau.tolist() == [3, 0]
        assert table.gamma.tolist() == [2, 0]
        assert table.execution_time == 0.5
        assert table.metadata["backend"] == "sequential"

    def test_summary(self):
        table = run_monte_carlo(500, 40, rng=9)
        summary = table.summary(rng=0)
        assert set(summary) == {"tau_norm", "gamma_norm"}
        stats = summary["tau_norm"]
        assert {"mean", "std", "ci_mean", "ks_arcsine"} <= set(stats)
        assert stats["ci_mean"]["low"] < stats["mean"] < stats["ci_mean"]["high"]

    def test_summary_reproducible_with_rng(self):
        table = run_monte_carlo(300, 40, rng=9)
        a = table.summary(rng=1)["gamma_norm"]["ks_arcsine"]
        b = table.summary(rng=1)["gamma_norm"]["ks_arcsine"]
        assert a == b

    def test_to_string(self):
        table = run_monte_carlo(200, 20, rng=1)
        out = table.to_string(rng=0)
        assert "Trials: 200" in out
        assert "KS vs arcsine" in out
        assert "Distance to exact n=20 law" in out
        assert "Backend: sequential" in out
