r"""
Figures for trajectories and Monte Carlo tables.

The functions here only read plain arrays from :class:`~arcwalk.path.Trajectory`
and :class:`~arcwalk.core.MonteCarloTable`; nothing in the simulation core
depends on matplotlib.

Functions
    :func:`plot_trajectory` — Line plot of one walk with its ``tau``/``gamma`` markers
    :func:`plot_statistic_distributions` — Histograms of ``tau/n`` and ``gamma/n`` with
    KDE and arcsine density overlays
    :func:`save_figure` — Write a figure to disk and close it
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from .arcsine import arcsine_pdf, histogram_density, kde_curve
from .path_stats import compute_gamma, compute_tau
from .utils import check_positive_int

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from .core import MonteCarloTable
    from .path import Trajectory

logger = logging.getLogger(__name__)

__all__ = ["plot_trajectory", "plot_statistic_distributions", "save_figure"]


def plot_trajectory(trajectory: "Trajectory", ax: Optional["Axes"] = None) -> "Figure":
    """
    Plot :math:`S_k` against :math:`k` and mark the last maximum and last return.

    Parameters
    ----------
    trajectory : Trajectory
    ax : matplotlib.axes.Axes, optional
        Axes to draw into; a new figure is created when omitted.

    Returns
    -------
    matplotlib.figure.Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    times, values = trajectory.times, trajectory.values
    tau, gamma = compute_tau(trajectory), compute_gamma(trajectory)

    ax.plot(times, values, color="steelblue", linewidth=1.5, label="$S_k$")
    ax.axhline(trajectory.start, color="gray", linestyle=":", linewidth=1)
    ax.scatter([tau], [values[tau]], color="red", zorder=3, label=fr"$\tau$ = {tau}")
    ax.scatter([gamma], [values[gamma]], color="green", marker="s", zorder=3, label=fr"$\gamma$ = {gamma}")
    ax.set_xlabel("Step k")
    ax.set_ylabel("Position")
    ax.set_title(f"Simple random walk (n = {trajectory.n})")
    ax.grid(True, alpha=0.3)
    ax.legend()
    return fig


def _distribution_panel(ax: "Axes", sample: np.ndarray, label: str, bins: int) -> None:
    density, edges = histogram_density(sample, bins=bins)
    ax.bar(
        edges[:-1],
        density,
        width=np.diff(edges),
        align="edge",
        alpha=0.7,
        color="skyblue",
        edgecolor="black",
        label="Simulated",
    )

    if np.unique(sample).size > 1:
        grid, kde = kde_curve(sample)
        ax.plot(grid, kde, color="orange", linestyle="--", linewidth=2, label="KDE")
    else:
        logger.warning("Skipping KDE for %s: sample has a single distinct value", label)

    # Open interval; the density diverges at both ends
    x = np.linspace(0.005, 0.995, 400)
    ax.plot(x, arcsine_pdf(x), color="red", linewidth=2, label=r"Arcsine $1/(\pi\sqrt{x(1-x)})$")

    ax.axvline(float(np.mean(sample)), color="green", linestyle=":", linewidth=2, label="Mean")
    ax.set_xlim(0.0, 1.0)
    ax.set_xlabel(label)
    ax.set_ylabel("Density")
    ax.grid(True, alpha=0.3)
    ax.legend()


def plot_statistic_distributions(table: "MonteCarloTable", bins: int = 30) -> "Figure":
    r"""
    Compare :math:`\tau / n` and :math:`\gamma / n` with the arcsine density.

    Parameters
    ----------
    table : MonteCarloTable
    bins : int, default ``30``
        Histogram bins over :math:`[0, 1]`.

    Returns
    -------
    matplotlib.figure.Figure
        A 1x2 figure, ``tau/n`` on the left and ``gamma/n`` on the right.
    """
    bins = check_positive_int("bins", bins)
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    fig.suptitle(
        f"Arcsine law: {len(table)} walks of {table.n} steps (p = {table.p})",
        fontsize=16,
        fontweight="bold",
    )
    _distribution_panel(axes[0], table.tau_norm, r"$\tau / n$", bins)
    _distribution_panel(axes[1], table.gamma_norm, r"$\gamma / n$", bins)
    fig.tight_layout()
    return fig


def save_figure(fig: "Figure", path: Union[str, Path], dpi: int = 150) -> Path:
    """Save ``fig`` to ``path`` (parents created as needed) and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved figure to %s", path)
    return path
