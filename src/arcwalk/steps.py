r"""
Increment sampling for the simple random walk.

Each increment :math:`X_k` is an independent draw with

.. math::
   \Pr(X_k = +1) = p, \qquad \Pr(X_k = -1) = 1 - p.

Draws use the inverse CDF of a uniform variate, :math:`X_k = +1` iff
:math:`U_k < p`, so probabilities arbitrarily close to 0 or 1 need no special
casing.
"""

from __future__ import annotations

import numpy as np

from .utils import RandomSource, as_generator, check_positive_int, check_probability

__all__ = ["sample_steps"]


def sample_steps(n: int, p: float = 0.5, rng: RandomSource = None) -> np.ndarray:
    r"""
    Draw ``n`` i.i.d. :math:`\pm 1` increments.

    Parameters
    ----------
    n : int
        Number of increments; must be positive.
    p : float, default ``0.5``
        Probability of a ``+1`` step, strictly inside :math:`(0, 1)`.
    rng : None, int, SeedSequence or Generator, optional
        Random stream. A :class:`~numpy.random.Generator` is advanced in place.

    Returns
    -------
    ndarray of int64
        Shape ``(n,)`` with values in ``{-1, +1}``.

    Raises
    ------
    InvalidParameterError
        If ``n`` is not a positive integer or ``p`` is outside :math:`(0, 1)`.

    Examples
    --------
    >>> steps = sample_steps(5, rng=7)
    >>> sorted(set(steps.tolist())) <= [-1, 1]
    True
    """
    n = check_positive_int("n", n)
    p = check_probability("p", p)
    gen = as_generator(rng)
    up = gen.random(n) < p
    return np.where(up, 1, -1).astype(np.int64)
