r"""
arcwalk.arcsine
===============

The arcsine law and tools for comparing simulated statistics against it.

For a symmetric simple random walk of :math:`n` steps, both the normalized
last-maximum time :math:`\tau / n` and the normalized last-return time
:math:`\gamma / n` converge in law to the arcsine distribution on
:math:`(0, 1)` with

.. math::
   f(x) = \frac{1}{\pi \sqrt{x (1 - x)}}, \qquad
   F(x) = \frac{2}{\pi} \arcsin \sqrt{x}.

For finite :math:`n`, :math:`\gamma` has the exact discrete law

.. math::
   \Pr(\gamma = 2k) = u_{2k}\, u_{2\lfloor (n - 2k)/2 \rfloor},
   \qquad u_{2j} = \binom{2j}{j} 4^{-j},

see :func:`discrete_arcsine_pmf`. The last-maximum time has the exact law

.. math::
   \Pr(\tau = k) = u_{2\lceil k/2 \rceil} \cdot \tfrac{1}{2} u_{2\lfloor (n - k)/2 \rfloor}
   \quad (k < n), \qquad \Pr(\tau = n) = u_{2\lceil n/2 \rceil},

see :func:`discrete_last_max_pmf`. Taking the *last* maximum tilts this law
towards :math:`n`, so :math:`\mathbb{E}[\tau / n] > 1/2` for every :math:`n \ge 2`
(about 0.525 at :math:`n = 222`) and only the limit is symmetric.

Lattice correction
------------------
Normalized statistics live on a lattice (spacing :math:`1/n` for
:math:`\tau`, :math:`2/n` for :math:`\gamma`, whose values are always even).
A Kolmogorov-Smirnov test of lattice data against a continuous CDF rejects
for any sample size because of the atoms; :func:`ks_test_arcsine` therefore
accepts a ``lattice`` spacing :math:`h` and spreads each point uniformly over
its cell, :math:`x \mapsto (x + h U) / (1 + h)`.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np
from scipy.special import gammaln
from scipy.stats import arcsine, gaussian_kde, kstest

from .utils import RandomSource, as_generator, check_positive_int

__all__ = [
    "ARCSINE_MEAN",
    "ARCSINE_VARIANCE",
    "KSResult",
    "arcsine_pdf",
    "arcsine_cdf",
    "discrete_arcsine_pmf",
    "discrete_last_max_pmf",
    "discrete_ks_statistic",
    "lattice_jitter",
    "ks_test_arcsine",
    "kde_curve",
    "histogram_density",
]

ARCSINE_MEAN = 0.5
ARCSINE_VARIANCE = 0.125


class KSResult(NamedTuple):
    """Outcome of :func:`ks_test_arcsine`."""

    statistic: float
    pvalue: float
    n: int


def arcsine_pdf(x):
    r"""
    Arcsine density :math:`1 / (\pi \sqrt{x(1-x)})`.

    Returns ``0`` outside :math:`[0, 1]` and ``inf`` at the endpoints.
    Scalars in, float out; arrays in, arrays out.
    """
    return arcsine.pdf(x)


def arcsine_cdf(x):
    r"""Arcsine CDF :math:`(2/\pi)\arcsin\sqrt{x}`, equal to 0 below 0 and 1 above 1."""
    return arcsine.cdf(x)


def _log_u(j: np.ndarray) -> np.ndarray:
    # log of u_{2j} = C(2j, j) / 4^j
    return gammaln(2 * j + 1) - 2 * gammaln(j + 1) - 2 * j * np.log(2.0)


def discrete_arcsine_pmf(n: int) -> tuple[np.ndarray, np.ndarray]:
    r"""
    Exact distribution of :math:`\gamma` for the symmetric walk of ``n`` steps.

    Parameters
    ----------
    n : int
        Number of steps.

    Returns
    -------
    tuple of ndarray
        ``(support, pmf)`` with ``support = 0, 2, ..., 2 * (n // 2)``.

    Examples
    --------
    >>> support, pmf = discrete_arcsine_pmf(4)
    >>> support.tolist(), np.round(pmf, 6).tolist()
    ([0, 2, 4], [0.375, 0.25, 0.375])
    """
    n = check_positive_int("n", n)
    k = np.arange(n // 2 + 1)
    pmf = np.exp(_log_u(k) + _log_u((n - 2 * k) // 2))
    return 2 * k, pmf


def discrete_last_max_pmf(n: int) -> tuple[np.ndarray, np.ndarray]:
    r"""
    Exact distribution of :math:`\tau` (last maximum) for the symmetric walk of ``n`` steps.

    Splitting the path at :math:`\tau = k`, the first :math:`k` steps read
    backwards stay at or below zero and the remaining :math:`n - k` steps stay
    strictly below. For a walk of :math:`j` steps these have probabilities
    :math:`u_{2\lceil j/2 \rceil}` and :math:`\tfrac{1}{2} u_{2\lfloor j/2 \rfloor}`
    (the latter is ``1`` for :math:`j = 0`).

    Parameters
    ----------
    n : int
        Number of steps.

    Returns
    -------
    tuple of ndarray
        ``(support, pmf)`` with ``support = 0, 1, ..., n``.

    Examples
    --------
    >>> support, pmf = discrete_last_max_pmf(2)
    >>> support.tolist(), np.round(pmf, 6).tolist()
    ([0, 1, 2], [0.25, 0.25, 0.5])
    """
    n = check_positive_int("n", n)
    k = np.arange(n + 1)
    rest = n - k
    log_before = _log_u((k + 1) // 2)
    log_after = np.where(rest > 0, np.log(0.5) + _log_u(rest // 2), 0.0)
    return k, np.exp(log_before + log_after)


def discrete_ks_statistic(sample, support, pmf) -> float:
    r"""
    Kolmogorov distance between the empirical CDF of ``sample`` and a discrete law.

    Both CDFs are step functions jumping only on ``support``, so the supremum
    is attained there.

    Parameters
    ----------
    sample : array_like
        Observed values, e.g. ``table.tau``.
    support, pmf : array_like
        Increasing support points and their probabilities, as returned by
        :func:`discrete_arcsine_pmf` or :func:`discrete_last_max_pmf`.

    Returns
    -------
    float
    """
    arr = np.sort(np.asarray(sample).ravel())
    if arr.size == 0:
        raise ValueError("sample must not be empty")
    support = np.asarray(support)
    ecdf = np.searchsorted(arr, support, side="right") / arr.size
    return float(np.max(np.abs(ecdf - np.cumsum(pmf))))


def lattice_jitter(sample, lattice: float, rng: RandomSource = None) -> np.ndarray:
    r"""
    Spread lattice points uniformly over their cells, staying inside :math:`[0, 1]`.

    Parameters
    ----------
    sample : array_like
        Normalized statistic values in :math:`[0, 1]`.
    lattice : float
        Cell width :math:`h > 0`.
    rng : None, int, SeedSequence or Generator, optional
        Source of the uniform offsets.

    Returns
    -------
    ndarray of float
    """
    if not lattice > 0:
        raise ValueError("lattice must be positive")
    arr = np.asarray(sample, dtype=float)
    u = as_generator(rng).random(arr.shape)
    return (arr + lattice * u) / (1.0 + lattice)


def ks_test_arcsine(
    sample,
    lattice: Optional[float] = None,
    rng: RandomSource = None,
) -> KSResult:
    r"""
    Kolmogorov-Smirnov test of ``sample`` against the arcsine law.

    Parameters
    ----------
    sample : array_like
        Values in :math:`[0, 1]`, e.g. ``table.tau_norm``.
    lattice : float, optional
        Lattice spacing of ``sample``. When given, the sample is passed through
        :func:`lattice_jitter` first.
    rng : None, int, SeedSequence or Generator, optional
        Random source for the jitter; ignored without ``lattice``.

    Returns
    -------
    KSResult

    Notes
    -----
    Uses :func:`scipy.stats.kstest` (two-sided) with :data:`scipy.stats.arcsine`.
    """
    arr = np.asarray(sample, dtype=float).ravel()
    if arr.size == 0:
        raise ValueError("sample must not be empty")
    if lattice is not None:
        arr = lattice_jitter(arr, lattice, rng)
    res = kstest(arr, arcsine.cdf)
    return KSResult(float(res.statistic), float(res.pvalue), int(arr.size))


def kde_curve(
    sample,
    grid=None,
    bw_method=None,
) -> tuple[np.ndarray, np.ndarray]:
    r"""
    Gaussian kernel density estimate of ``sample`` on a grid.

    Parameters
    ----------
    sample : array_like
        At least two distinct values.
    grid : array_like, optional
        Evaluation points; defaults to 201 points on :math:`[0, 1]`.
    bw_method : str, float or callable, optional
        Forwarded to :class:`scipy.stats.gaussian_kde`.

    Returns
    -------
    tuple of ndarray
        ``(grid, density)``.
    """
    grid = np.linspace(0.0, 1.0, 201) if grid is None else np.asarray(grid, dtype=float)
    kde = gaussian_kde(np.asarray(sample, dtype=float), bw_method=bw_method)
    return grid, kde(grid)


def histogram_density(sample, bins: int = 20) -> tuple[np.ndarray, np.ndarray]:
    """
    Density-normalized histogram of ``sample`` over :math:`[0, 1]`.

    Returns
    -------
    tuple of ndarray
        ``(density, edges)`` as from :func:`numpy.histogram`.
    """
    return np.histogram(np.asarray(sample, dtype=float), bins=bins, range=(0.0, 1.0), density=True)
