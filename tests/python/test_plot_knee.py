from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

import data_generator as dg
from knee_locator import KneeLocator, locate
from plot_knee import plot_knee, plot_knee_normalized


def test_plot_knee_saves_png(tmp_path: Path) -> None:
    x, y = dg.figure2()
    out = tmp_path / "fig" / "knee.png"
    fig = plot_knee(KneeLocator(x, y), out, xlabel="x", ylabel="y")
    assert isinstance(fig, Figure)
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_plot_knee_marks_history() -> None:
    x, y = dg.bumpy()
    res = locate(x, y, curve="convex", direction="decreasing", online=True)
    fig = plot_knee(res)
    ax = fig.axes[0]
    # one data line plus one vertical line per distinct knee
    assert len(ax.lines) == 1 + len(res.all_knees)
    plt.close(fig)


def test_plot_knee_normalized(tmp_path: Path) -> None:
    x, y = dg.convex_decreasing()
    res = locate(x, y, curve="convex", direction="decreasing")
    out = tmp_path / "norm.png"
    fig = plot_knee_normalized(res, out)
    assert out.exists()
    assert len(fig.axes[0].lines) == 3


def test_plot_without_knee() -> None:
    res = locate(range(10), [1.0] * 10)
    fig = plot_knee(res)
    assert len(fig.axes[0].lines) == 1
    plt.close(fig)
    fig = plot_knee_normalized(res)
    assert len(fig.axes[0].lines) == 2
    plt.close(fig)
