"""Command-line entry point for ``python -m arcwalk``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import BACKENDS, DEFAULT_MC_STEPS, DEFAULT_P, DEFAULT_PATH_STEPS, DEFAULT_S0, DEFAULT_TRIALS, WalkConfig
from .core import run_monte_carlo
from .exceptions import InvalidParameterError
from .path import generate_path
from .path_stats import compute_statistics
from .utils import check_positive_int

__all__ = ["build_parser", "main"]


def _add_walk_args(parser: argparse.ArgumentParser, default_n: int) -> None:
    parser.add_argument("--n", type=int, default=default_n, help=f"Steps per walk (default: {default_n})")
    parser.add_argument("--p", type=float, default=DEFAULT_P, help=f"Up-step probability (default: {DEFAULT_P})")
    parser.add_argument("--s0", type=int, default=DEFAULT_S0, help=f"Starting value (default: {DEFAULT_S0})")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--plot", type=str, default=None, help="Write a figure to this path")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arcwalk",
        description="Simple random walk last-maximum / last-return times and the arcsine law",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m arcwalk path --n 100 --seed 1 --plot walk.png
  python -m arcwalk mc --m 10000 --n 222 --seed 1 --plot arcsine.png
  python -m arcwalk mc --m 200000 --backend thread --workers 8
        """,
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    path_cmd = sub.add_parser("path", help="Simulate and describe a single trajectory")
    _add_walk_args(path_cmd, DEFAULT_PATH_STEPS)

    mc_cmd = sub.add_parser("mc", help="Run the Monte Carlo study")
    _add_walk_args(mc_cmd, DEFAULT_MC_STEPS)
    mc_cmd.add_argument("--m", type=int, default=DEFAULT_TRIALS, help=f"Number of trials (default: {DEFAULT_TRIALS})")
    mc_cmd.add_argument("--backend", choices=BACKENDS, default="sequential", help="Execution backend")
    mc_cmd.add_argument("--workers", type=int, default=None, help="Workers for thread/process backends")
    mc_cmd.add_argument("--bins", type=int, default=30, help="Histogram bins for --plot (default: 30)")
    return parser


def _use_agg() -> None:
    import matplotlib  # pylint: disable=import-outside-toplevel

    matplotlib.use("Agg")


def _run_path(cfg: WalkConfig, plot: Optional[str]) -> None:
    traj = generate_path(cfg.p, cfg.n, cfg.s0, rng=cfg.seed)
    stats = compute_statistics(traj)
    print(f"n={traj.n} p={cfg.p} S0={traj.start}")
    print("values: " + " ".join(str(v) for v in traj.values.tolist()))
    print(f"tau={stats.tau} gamma={stats.gamma}")
    if plot:
        _use_agg()
        from .reporting import plot_trajectory, save_figure  # pylint: disable=import-outside-toplevel

        save_figure(plot_trajectory(traj), plot)


def _run_mc(cfg: WalkConfig, plot: Optional[str], bins: int) -> None:
    table = run_monte_carlo(
        cfg.m,
        cfg.n,
        cfg.p,
        cfg.s0,
        rng=cfg.seed,
        backend=cfg.backend,
        n_workers=cfg.n_workers,
    )
    print(table.to_string(rng=cfg.seed))
    if plot:
        _use_agg()
        from .reporting import plot_statistic_distributions, save_figure  # pylint: disable=import-outside-toplevel

        save_figure(plot_statistic_distributions(table, bins=bins), plot)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse ``argv`` and run the selected command; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.getLogger("arcwalk").setLevel(args.log_level)

    try:
        if args.command == "path":
            cfg = WalkConfig(p=args.p, n=args.n, s0=args.s0, seed=args.seed)
            _run_path(cfg, args.plot)
        else:
            bins = check_positive_int("bins", args.bins)
            cfg = WalkConfig(
                p=args.p,
                n=args.n,
                s0=args.s0,
                m=args.m,
                seed=args.seed,
                backend=args.backend,
                n_workers=args.workers,
            )
            _run_mc(cfg, args.plot, bins)
    except InvalidParameterError as e:
        print(f"arcwalk: error: {e}", file=sys.stderr)
        return 2
    return 0
