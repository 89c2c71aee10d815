"""Plot helpers for knee detection results.

:func:`plot_knee` shows the raw curve with every detected knee marked and
:func:`plot_knee_normalized` shows the normalised curve together with the
difference curve used by the scan.  Both return the matplotlib ``Figure``
and save it to ``path`` when one is given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import matplotlib.pyplot as plt

from knee_locator import KneeLocator, KneeResult


def _as_result(obj: KneeResult | KneeLocator) -> KneeResult:
    return obj.result if isinstance(obj, KneeLocator) else obj


def _finish(fig, path: Optional[Path]):
    fig.tight_layout()
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=150)
        plt.close(fig)
    return fig


def plot_knee(
    result: KneeResult | KneeLocator,
    path: Optional[Path] = None,
    *,
    figsize: Tuple[float, float] = (6, 6),
    title: str = "Knee Point",
    xlabel: Optional[str] = None,
    ylabel: Optional[str] = None,
):
    """Plot the raw curve and mark the knees with dashed vertical lines.

    The primary knee is drawn solid; earlier or later candidates from the
    scan history are drawn faint.  A curve without a knee is plotted alone.
    """

    res = _as_result(result)
    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(res.x, res.y, "b", label="data")
    for knee in res.all_knees:
        if knee != res.knee:
            ax.axvline(knee, color="k", linestyle="--", alpha=0.3)
    if res.knee is not None:
        ax.axvline(res.knee, color="k", linestyle="--", label="knee/elbow")
    ax.set_title(title)
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    ax.legend(loc="best")
    return _finish(fig, path)


def plot_knee_normalized(
    result: KneeResult | KneeLocator,
    path: Optional[Path] = None,
    *,
    figsize: Tuple[float, float] = (6, 6),
    title: str = "Normalized Knee Point",
):
    """Plot the normalised curve, the difference curve and the knee.

    Coordinates are those of the canonical orientation, so the knee is
    drawn at ``norm_knee``.
    """

    res = _as_result(result)
    diag = res.diagnostics
    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(diag.x_normalized, diag.y_normalized, "b", label="normalized curve")
    ax.plot(diag.x_difference, diag.y_difference, "r", label="difference curve")
    if res.norm_knee is not None:
        ax.axvline(res.norm_knee, color="k", linestyle="--", label="knee/elbow")
    ax.set_xticks([i / 10 for i in range(11)])
    ax.set_yticks([i / 10 for i in range(-1, 11)])
    ax.set_ylim(min(-0.1, float(diag.y_difference.min()) - 0.05), 1.05)
    ax.set_title(title)
    ax.legend(loc="best")
    return _finish(fig, path)


__all__ = ["plot_knee", "plot_knee_normalized"]
