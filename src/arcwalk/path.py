r"""
Random walk trajectories.

This module provides:

Classes
    :class:`Trajectory` — Immutable pairing of time indices and walk values

Functions
    :func:`build_trajectory` — Prefix sums of an explicit step sequence
    :func:`generate_path` — Sample a fresh trajectory

A trajectory of length :math:`n` holds :math:`n + 1` points

.. math::
   S_0 = s_0, \qquad S_k = S_{k-1} + X_k, \quad k = 1, \dots, n.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .exceptions import InvalidParameterError
from .steps import sample_steps
from .utils import RandomSource, check_int, check_positive_int, check_probability

__all__ = ["Trajectory", "build_trajectory", "generate_path"]


def _frozen(values: Iterable[int]) -> np.ndarray:
    arr = np.array(values, dtype=np.int64, copy=True).ravel()
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class Trajectory:
    r"""
    A realized simple random walk.

    Attributes
    ----------
    times : ndarray of int64
        Time indices ``0..n``.
    values : ndarray of int64
        Walk values :math:`S_0, \dots, S_n`.

    Notes
    -----
    Both arrays are private copies with the ``writeable`` flag cleared, so a
    trajectory can be handed around without aliasing the caller's buffers.
    The constructor checks shape and the unit-increment invariant.
    """

    times: np.ndarray
    values: np.ndarray

    def __post_init__(self) -> None:
        times = _frozen(self.times)
        values = _frozen(self.values)
        if values.size == 0:
            raise InvalidParameterError("values", values.tolist(), "must hold at least the start value")
        if times.size != values.size:
            raise InvalidParameterError("times", times.size, f"must have the same length as values ({values.size})")
        if not np.array_equal(times, np.arange(values.size)):
            raise InvalidParameterError("times", times.tolist(), "must be 0..n")
        if values.size > 1 and not np.all(np.abs(np.diff(values)) == 1):
            raise InvalidParameterError("values", values.tolist(), "must change by exactly 1 per step")
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "values", values)

    @property
    def n(self) -> int:
        """Number of steps."""
        return int(self.values.size - 1)

    @property
    def start(self) -> int:
        """Starting value :math:`S_0`."""
        return int(self.values[0])

    @property
    def steps(self) -> np.ndarray:
        """Increments :math:`X_1, \\dots, X_n` recovered from the values."""
        return np.diff(self.values)

    def as_pairs(self) -> list[tuple[int, int]]:
        """Return ``[(k, S_k), ...]`` as plain Python ints."""
        return list(zip(self.times.tolist(), self.values.tolist()))

    def __len__(self) -> int:
        return int(self.values.size)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self.as_pairs())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trajectory):
            return NotImplemented
        return np.array_equal(self.values, other.values)

    def __hash__(self) -> int:
        return hash(self.values.tobytes())

    def __repr__(self) -> str:
        return f"Trajectory(n={self.n}, start={self.start}, end={int(self.values[-1])})"


def build_trajectory(steps: Iterable[int], s0: int = 0) -> Trajectory:
    r"""
    Build the trajectory whose increments are exactly ``steps``.

    Parameters
    ----------
    steps : iterable of int
        Increments in ``{-1, +1}``. May be empty, giving the single point ``[s0]``.
    s0 : int, default ``0``
        Starting value.

    Returns
    -------
    Trajectory

    Raises
    ------
    InvalidParameterError
        If a step is not ``-1`` or ``+1`` or ``s0`` is not an integer.

    Examples
    --------
    >>> build_trajectory([1, 1, -1], s0=2).values.tolist()
    [2, 3, 4, 3]
    """
    s0 = check_int("s0", s0)
    arr = np.asarray(list(steps) if not isinstance(steps, np.ndarray) else steps)
    if arr.size and not np.all(np.isin(arr, (-1, 1))):
        raise InvalidParameterError("steps", arr.tolist(), "must contain only -1 and +1")
    values = np.empty(arr.size + 1, dtype=np.int64)
    values[0] = s0
    values[1:] = s0 + np.cumsum(arr.astype(np.int64))
    return Trajectory(times=np.arange(values.size), values=values)


def generate_path(
    p: float = 0.5,
    n: int = 100,
    s0: int = 0,
    rng: RandomSource = None,
) -> Trajectory:
    r"""
    Sample a simple random walk of ``n`` steps starting at ``s0``.

    Parameters
    ----------
    p : float, default ``0.5``
        Probability of an up step, strictly inside :math:`(0, 1)`.
    n : int, default ``100``
        Number of steps; must be positive.
    s0 : int, default ``0``
        Starting value.
    rng : None, int, SeedSequence or Generator, optional
        Random stream. This is the only source of randomness; passing the same
        seed reproduces the same path.

    Returns
    -------
    Trajectory

    Raises
    ------
    InvalidParameterError
        On a bad ``p``, ``n`` or ``s0``. Checked before any draw is made.

    See Also
    --------
    build_trajectory : Deterministic construction from explicit steps.
    """
    p = check_probability("p", p)
    n = check_positive_int("n", n)
    s0 = check_int("s0", s0)
    return build_trajectory(sample_steps(n, p, rng), s0)
