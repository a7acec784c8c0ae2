r"""
Run configuration.

:class:`WalkConfig` bundles the numeric parameters of a study with the execution
settings, validated once at construction in the same way every public entry
point validates its arguments.

Defaults
    ``p = 0.5``, ``n = 222`` for the Monte Carlo study (``100`` for a single
    path, see :meth:`WalkConfig.path_defaults`), ``s0 = 0``, ``m = 10_000``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from .exceptions import InvalidParameterError
from .utils import check_int, check_positive_int, check_probability

__all__ = [
    "DEFAULT_P",
    "DEFAULT_PATH_STEPS",
    "DEFAULT_MC_STEPS",
    "DEFAULT_S0",
    "DEFAULT_TRIALS",
    "BACKENDS",
    "WalkConfig",
]

DEFAULT_P = 0.5
DEFAULT_PATH_STEPS = 100
DEFAULT_MC_STEPS = 222
DEFAULT_S0 = 0
DEFAULT_TRIALS = 10_000
BACKENDS = ("auto", "sequential", "thread", "process", "vectorized")


@dataclass(frozen=True, slots=True)
class WalkConfig:
    r"""
    Parameters of a random walk study.

    Attributes
    ----------
    p : float, default 0.5
        Up-step probability in :math:`(0, 1)`.
    n : int, default 222
        Steps per walk.
    s0 : int, default 0
        Starting value.
    m : int, default 10_000
        Monte Carlo trials.
    seed : int, optional
        Seed for :class:`numpy.random.SeedSequence`; ``None`` draws OS entropy.
    backend : str, default "sequential"
        One of :data:`BACKENDS`.
    n_workers : int, optional
        Worker count for the parallel backends.

    Examples
    --------
    >>> cfg = WalkConfig(seed=7)
    >>> cfg.with_overrides(n=50).n
    50
    """

    p: float = DEFAULT_P
    n: int = DEFAULT_MC_STEPS
    s0: int = DEFAULT_S0
    m: int = DEFAULT_TRIALS
    seed: Optional[int] = None
    backend: str = "sequential"
    n_workers: Optional[int] = None

    def __post_init__(self) -> None:
        r"""
        Validate every field.

        Raises
        ------
        InvalidParameterError
            If any field is outside its allowed domain.
        """
        check_probability("p", self.p)
        check_positive_int("n", self.n)
        check_int("s0", self.s0)
        check_positive_int("m", self.m)
        if self.seed is not None:
            check_int("seed", self.seed)
        if self.backend not in BACKENDS:
            raise InvalidParameterError("backend", self.backend, f"must be one of {BACKENDS}")
        if self.n_workers is not None:
            check_positive_int("n_workers", self.n_workers)

    @classmethod
    def path_defaults(cls, **changes: Any) -> "WalkConfig":
        """Configuration for a single trajectory (``n = 100``)."""
        return cls(n=DEFAULT_PATH_STEPS, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WalkConfig":
        """Build from a mapping, ignoring keys that are not fields."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    def with_overrides(self, **changes: Any) -> "WalkConfig":
        """Return a validated copy with selected fields replaced."""
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
