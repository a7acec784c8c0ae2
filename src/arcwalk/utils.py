r"""
Shared helpers for :mod:`arcwalk`.

Parameter checks
    :func:`check_positive_int`, :func:`check_int`, :func:`check_probability`
Random streams
    :func:`as_generator`, :func:`as_seed_sequence`
Critical values
    :func:`z_crit`, :func:`t_crit`, :func:`autocrit`
"""

from __future__ import annotations

import math
import numbers
from typing import Union

import numpy as np
from scipy.stats import norm
from scipy.stats import t as student_t

from .exceptions import InvalidParameterError

__all__ = [
    "RandomSource",
    "check_positive_int",
    "check_int",
    "check_probability",
    "as_generator",
    "as_seed_sequence",
    "z_crit",
    "t_crit",
    "autocrit",
]

#: Anything accepted where a random stream is expected.
RandomSource = Union[None, int, np.random.SeedSequence, np.random.Generator]


def check_int(name: str, value: object) -> int:
    """Return ``value`` as ``int`` or raise :class:`InvalidParameterError`."""
    # bool is an Integral but never a meaningful count or position
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(name, value, "must be an integer")
    return int(value)


def check_positive_int(name: str, value: object) -> int:
    """Return ``value`` as a strictly positive ``int``."""
    value = check_int(name, value)
    if value <= 0:
        raise InvalidParameterError(name, value, "must be positive")
    return value


def check_probability(name: str, value: object) -> float:
    r"""
    Return ``value`` as a float strictly inside :math:`(0, 1)`.

    The endpoints are rejected: a walk with :math:`p \in \{0, 1\}` is
    deterministic and belongs to :func:`~arcwalk.path.build_trajectory`.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(name, value, "must be a real number")
    value = float(value)
    if not math.isfinite(value) or not 0.0 < value < 1.0:
        raise InvalidParameterError(name, value, "must be in the open interval (0, 1)")
    return value


def as_seed_sequence(rng: int | np.random.SeedSequence | None) -> np.random.SeedSequence:
    """Wrap an integer seed (or ``None`` for OS entropy) in a :class:`~numpy.random.SeedSequence`."""
    if isinstance(rng, np.random.SeedSequence):
        return rng
    if rng is not None:
        rng = check_int("seed", rng)
    return np.random.SeedSequence(rng)


def as_generator(rng: RandomSource = None) -> np.random.Generator:
    r"""
    Normalize a random source into a :class:`numpy.random.Generator`.

    Parameters
    ----------
    rng : None, int, SeedSequence or Generator
        ``Generator`` instances are returned unchanged so the caller's stream
        keeps advancing; seeds build a fresh generator.

    Returns
    -------
    numpy.random.Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(as_seed_sequence(rng))


def z_crit(confidence: float) -> float:
    r"""Two-sided normal critical value :math:`z_{1-\alpha/2}`."""
    return float(norm.ppf(0.5 + confidence / 2.0))


def t_crit(confidence: float, df: int) -> float:
    r"""Two-sided Student-t critical value :math:`t_{1-\alpha/2,\,df}`."""
    return float(student_t.ppf(0.5 + confidence / 2.0, df))


def autocrit(confidence: float, n: int, method: str = "auto") -> tuple[float, str]:
    r"""
    Pick a critical value for a mean CI.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.
    n : int
        Effective sample size.
    method : {"auto", "z", "t"}
        ``"auto"`` uses Student-t when :math:`n < 30`, otherwise z.

    Returns
    -------
    tuple[float, str]
        ``(critical value, "z" | "t")``.
    """
    if method not in ("auto", "z", "t"):
        raise ValueError(f"method must be one of 'auto', 'z', 't', got '{method}'")
    if method == "t" or (method == "auto" and n < 30):
        return t_crit(confidence, max(1, n - 1)), "t"
    return z_crit(confidence), "z"
