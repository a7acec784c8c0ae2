r"""
arcwalk.stats_engine
====================
Summary statistics for the normalized columns of a Monte Carlo table.

:class:`StatsContext` carries the settings every metric shares, :class:`FnMetric`
attaches a name to a metric function and :class:`StatsEngine` evaluates a list of
metrics into a plain ``dict``. :meth:`arcwalk.core.MonteCarloTable.summary` runs
:data:`DEFAULT_ENGINE` once per normalized column.

Metrics
    :func:`mean`, :func:`std`, :func:`percentiles`, :func:`skew`, :func:`kurtosis`,
    :func:`ci_mean`, plus :func:`ks_arcsine` and :func:`arcsine_mean_error`
    comparing the column with the arcsine law.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import numpy as np
from scipy.stats import kurtosis as sp_kurtosis
from scipy.stats import skew as sp_skew

from .arcsine import ARCSINE_MEAN, ks_test_arcsine
from .utils import RandomSource, autocrit

logger = logging.getLogger(__name__)

__all__ = [
    "StatsContext",
    "FnMetric",
    "StatsEngine",
    "mean",
    "std",
    "percentiles",
    "skew",
    "kurtosis",
    "ci_mean",
    "ks_arcsine",
    "arcsine_mean_error",
    "build_default_engine",
    "DEFAULT_ENGINE",
]


@dataclass(slots=True)
class StatsContext:
    r"""
    Settings shared by all metrics of one :meth:`StatsEngine.compute` call.

    Attributes
    ----------
    confidence : float, default 0.95
        Confidence level of :func:`ci_mean`, in :math:`(0, 1)`.
    percentiles : tuple of int, default ``(5, 25, 50, 75, 95)``
        Levels reported by :func:`percentiles`.
    lattice : float, optional
        Lattice spacing of the column, enabling the jitter in :func:`ks_arcsine`.
    rng : None, int, SeedSequence or Generator, optional
        Random source for that jitter.

    Raises
    ------
    ValueError
        If a field is outside its allowed range.
    """

    confidence: float = 0.95
    percentiles: tuple[int, ...] = (5, 25, 50, 75, 95)
    lattice: Optional[float] = None
    rng: RandomSource = None

    def __post_init__(self) -> None:
        if not 0.0 < self.confidence < 1.0:
            raise ValueError("confidence must be in (0,1)")
        if any(p < 0 or p > 100 for p in self.percentiles):
            raise ValueError("percentiles must be in [0,100]")
        if self.lattice is not None and self.lattice <= 0:
            raise ValueError("lattice must be positive")


@dataclass(frozen=True)
class FnMetric:
    r"""
    A metric function ``fn(x, ctx)`` stored under ``name``.

    Examples
    --------
    >>> m = FnMetric("mean", mean)
    >>> m(np.array([1, 2, 3]), StatsContext())
    2.0
    """

    name: str
    fn: Callable[[np.ndarray, StatsContext], Any]
    doc: str = ""

    def __call__(self, x: np.ndarray, ctx: StatsContext) -> Any:
        return self.fn(x, ctx)


class StatsEngine:
    r"""
    Evaluate a fixed list of metrics over one sample.

    A metric that raises is logged with its traceback and left out of the
    result, so the rest of the summary is still produced.

    Examples
    --------
    >>> eng = StatsEngine([FnMetric("mean", mean), FnMetric("std", std)])
    >>> eng.compute(np.array([1., 2., 3.]))
    {'mean': 2.0, 'std': 1.0}
    """

    def __init__(self, metrics: Iterable[FnMetric]):
        self._metrics = list(metrics)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self._metrics)

    def compute(self, x, ctx: Optional[StatsContext] = None) -> dict[str, Any]:
        """Return ``{metric name: value}`` for ``x`` under ``ctx`` (defaults apply when omitted)."""
        ctx = ctx if ctx is not None else StatsContext()
        arr = np.asarray(x, dtype=float).ravel()
        out: dict[str, Any] = {}
        for m in self._metrics:
            try:
                out[m.name] = m(arr, ctx)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Error computing metric %s", m.name)
        return out


def mean(x: np.ndarray, ctx: StatsContext) -> float:
    """Sample mean, ``nan`` for an empty sample."""
    return float(np.mean(x)) if np.size(x) else float("nan")


def std(x: np.ndarray, ctx: StatsContext) -> float:
    """Bessel-corrected standard deviation, ``0.0`` below two observations."""
    return float(np.std(x, ddof=1)) if np.size(x) > 1 else 0.0


def percentiles(x: np.ndarray, ctx: StatsContext) -> dict[int, float]:
    r"""
    Empirical percentiles at :attr:`StatsContext.percentiles`.

    Examples
    --------
    >>> percentiles(np.array([0., 1., 2., 3.]), StatsContext(percentiles=(50, 75)))
    {50: 1.5, 75: 2.25}
    """
    if np.size(x) == 0:
        return {p: float("nan") for p in ctx.percentiles}
    return dict(zip(ctx.percentiles, map(float, np.percentile(x, ctx.percentiles))))


def skew(x: np.ndarray, ctx: StatsContext) -> float:
    r"""
    Unbiased sample skewness (``0.0`` for :math:`n \le 2`).

    The arcsine law is symmetric about :math:`1/2`.
    """
    return float(sp_skew(x, bias=False)) if np.size(x) > 2 else 0.0


def kurtosis(x: np.ndarray, ctx: StatsContext) -> float:
    r"""Unbiased excess kurtosis (``0.0`` for :math:`n \le 3`); the arcsine law has :math:`-3/2`."""
    return float(sp_kurtosis(x, fisher=True, bias=False)) if np.size(x) > 3 else 0.0


def ci_mean(x: np.ndarray, ctx: StatsContext) -> dict[str, Any]:
    r"""
    Confidence interval :math:`\bar X \pm c \, s / \sqrt{n}` for the mean.

    :math:`c` comes from :func:`arcwalk.utils.autocrit` (Student-t below 30
    observations, normal above).

    Returns
    -------
    dict
        ``confidence``, ``method``, ``low``, ``high`` and, from two observations
        on, ``se`` and ``crit``.
    """
    n = int(np.size(x))
    if n < 2:
        return {"confidence": ctx.confidence, "method": "auto", "low": float("nan"), "high": float("nan")}
    mu = float(np.mean(x))
    se = float(np.std(x, ddof=1)) / np.sqrt(n)
    crit, method = autocrit(ctx.confidence, n)
    return {
        "confidence": ctx.confidence,
        "method": method,
        "se": float(se),
        "crit": float(crit),
        "low": float(mu - crit * se),
        "high": float(mu + crit * se),
    }


def ks_arcsine(x: np.ndarray, ctx: StatsContext) -> dict[str, float]:
    """KS statistic and p-value against the arcsine law, lattice-corrected when ``ctx.lattice`` is set."""
    if np.size(x) == 0:
        return {"statistic": float("nan"), "pvalue": float("nan")}
    res = ks_test_arcsine(x, lattice=ctx.lattice, rng=ctx.rng)
    return {"statistic": res.statistic, "pvalue": res.pvalue}


def arcsine_mean_error(x: np.ndarray, ctx: StatsContext) -> float:
    r"""Sample mean minus the arcsine mean :math:`1/2`."""
    return mean(x, ctx) - ARCSINE_MEAN


def build_default_engine(include_arcsine: bool = True) -> StatsEngine:
    """Engine with the descriptive metrics and, optionally, the arcsine comparisons."""
    metrics = [
        FnMetric("mean", mean, "Sample mean"),
        FnMetric("std", std, "Sample standard deviation"),
        FnMetric("percentiles", percentiles, "Percentiles over the sample"),
        FnMetric("skew", skew, "Skewness (unbiased)"),
        FnMetric("kurtosis", kurtosis, "Excess kurtosis (unbiased)"),
        FnMetric("ci_mean", ci_mean, "z/t CI for the mean"),
    ]
    if include_arcsine:
        metrics += [
            FnMetric("ks_arcsine", ks_arcsine, "KS distance to the arcsine law"),
            FnMetric("arcsine_mean_error", arcsine_mean_error, "Mean minus 1/2"),
        ]
    return StatsEngine(metrics)


DEFAULT_ENGINE = build_default_engine()
