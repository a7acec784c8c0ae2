"""Simulation catalog for :mod:`arcwalk`."""

from __future__ import annotations

from .random_walk import RandomWalkSimulation

__all__ = ["RandomWalkSimulation"]
