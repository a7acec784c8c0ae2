r"""
Exception types raised by :mod:`arcwalk`.

Classes
    :class:`ArcwalkError` — Base class for package errors
    :class:`InvalidParameterError` — Rejected configuration value
"""

from __future__ import annotations

__all__ = ["ArcwalkError", "InvalidParameterError"]


class ArcwalkError(Exception):
    """Base class for all errors raised by :mod:`arcwalk`."""


class InvalidParameterError(ArcwalkError, ValueError):
    r"""
    A configuration value is outside its allowed domain.

    Raised eagerly at public entry points (:func:`~arcwalk.steps.sample_steps`,
    :func:`~arcwalk.path.generate_path`, :func:`~arcwalk.core.run_monte_carlo`)
    before any random draws are consumed. Subclasses :class:`ValueError` so
    callers that already guard numeric input with ``except ValueError`` keep
    working.

    Attributes
    ----------
    name : str
        Name of the offending parameter.
    value : object
        The rejected value.
    """

    def __init__(self, name: str, value: object, reason: str):
        self.name = name
        self.value = value
        super().__init__(f"{name} {reason}, got {value!r}")
