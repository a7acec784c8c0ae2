r"""Simple random walk Monte Carlo simulation."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.random import Generator

from ..path import generate_path
from ..path_stats import compute_gamma_batch, compute_statistics, compute_tau_batch
from ..simulation import MonteCarloSimulation
from ..utils import check_int, check_positive_int, check_probability

__all__ = ["RandomWalkSimulation"]


class RandomWalkSimulation(MonteCarloSimulation):
    r"""
    Last-maximum and last-return times of a simple random walk.

    Every trial samples a fresh walk :math:`S_0 = s_0,\ S_k = S_{k-1} + X_k`
    with :math:`\Pr(X_k = +1) = p` and records

    .. math::
       \tau = \max\{k : S_k = \max_j S_j\}, \qquad
       \gamma = \max\{k : S_k = S_0\}.

    For :math:`p = 1/2` both :math:`\tau / n` and :math:`\gamma / n` converge in
    law to the arcsine distribution.

    Parameters
    ----------
    n : int, default ``222``
        Steps per walk.
    p : float, default ``0.5``
        Up-step probability in :math:`(0, 1)`.
    s0 : int, default ``0``
        Starting value.

    Attributes
    ----------
    output_fields : tuple of str
        ``("tau", "gamma")``.
    supports_batch : bool
        ``True``; :meth:`batch_simulation` draws whole blocks of walks at once.

    Example
    -------
    >>> sim = RandomWalkSimulation(n=222)
    >>> sim.set_seed(42)
    >>> result = sim.run(10_000, backend="sequential")  # doctest: +SKIP
    """

    output_fields = ("tau", "gamma")
    result_dtype = np.int64
    supports_batch: bool = True

    def __init__(self, n: int = 222, p: float = 0.5, s0: int = 0, name: str = "Random Walk"):
        super().__init__(name)
        self.n = check_positive_int("n", n)
        self.p = check_probability("p", p)
        self.s0 = check_int("s0", s0)

    def single_simulation(  # pylint: disable=arguments-differ
        self,
        _rng: Optional[Generator] = None,
        **kwargs,
    ) -> tuple[int, int]:
        r"""
        Simulate one walk and return ``(tau, gamma)``.

        Parameters
        ----------
        **kwargs : Any
            Ignored. Reserved for framework compatibility.
        """
        rng = self._rng(_rng, self.rng)
        return tuple(compute_statistics(generate_path(self.p, self.n, self.s0, rng)))

    def batch_simulation(self, count: int, *, rng: Generator, **kwargs) -> np.ndarray:
        r"""
        Simulate ``count`` walks as one ``(count, n + 1)`` array.

        Uses the same inverse-CDF step rule as :func:`~arcwalk.steps.sample_steps`.

        Returns
        -------
        ndarray of int64
            Shape ``(count, 2)`` holding ``(tau, gamma)`` per row.
        """
        up = rng.random((count, self.n)) < self.p
        paths = np.empty((count, self.n + 1), dtype=np.int64)
        paths[:, 0] = self.s0
        paths[:, 1:] = self.s0 + np.cumsum(np.where(up, 1, -1), axis=1)
        return np.column_stack([compute_tau_batch(paths), compute_gamma_batch(paths)])
