#!/usr/bin/env python3
"""Command line entry point for knee detection.

Sub-commands:

* ``locate``   – find the knee/elbow of a curve stored in a CSV file,
* ``shape``    – report the inferred direction and curvature of a curve,
* ``generate`` – write one of the synthetic fixture curves to CSV.

Defaults for the detection parameters come from ``configs/kneesim.yaml`` (or
``--config``); command line options override them.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import subprocess
from typing import Tuple

import numpy as np
import pandas as pd

from config import AUTO, load_config
from data_generator import FIXTURES, noisy_gaussian
from knee_locator import KneeResult, locate
from shape import find_shape


_log = logging.getLogger("kneesim")


def _git_hash() -> str:
    """Return the current Git commit hash or ``unknown`` if unavailable."""
    try:
        return (
            subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
            .decode()
            .strip()
        )
    except Exception:
        return "unknown"


def _read_curve(
    csv_path: Path, x_col: str | None, y_col: str | None
) -> Tuple[np.ndarray, np.ndarray]:
    """Load two columns of ``csv_path``; the first two columns by default."""

    df = pd.read_csv(csv_path)
    if df.shape[1] < 2 and (x_col is None or y_col is None):
        raise ValueError(f"{csv_path} needs at least two columns")
    x_col = x_col or df.columns[0]
    y_col = y_col or df.columns[1]
    missing = [c for c in (x_col, y_col) if c not in df.columns]
    if missing:
        raise ValueError(f"columns not found in {csv_path}: {missing}")
    df = df[[x_col, y_col]].apply(pd.to_numeric, errors="raise")
    return df[x_col].to_numpy(dtype=float), df[y_col].to_numpy(dtype=float)


def _report(result: KneeResult) -> dict:
    return {
        "knee": result.knee,
        "norm_knee": result.norm_knee,
        "knee_y": result.knee_y,
        "norm_knee_y": result.norm_knee_y,
        "all_knees": list(result.all_knees),
        "all_knees_y": list(result.all_knees_y),
        "curve": result.curve.value,
        "direction": result.direction.value,
        "parameters": {
            "sensitivity": result.sensitivity,
            "interp_method": result.interp_method.value,
            "online": result.online,
            "polynomial_degree": result.polynomial_degree,
        },
    }


def _add_curve_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--from", dest="from_csv", type=Path, required=True)
    p.add_argument("--x", dest="x_col", type=str, default=None, help="x column")
    p.add_argument("--y", dest="y_col", type=str, default=None, help="y column")


def main(argv: list[str] | None = None) -> None:
    repo_path = Path(__file__).resolve().parent
    version_base = (repo_path / "VERSION").read_text().strip()

    parser = argparse.ArgumentParser(description="Knee/elbow detection")
    parser.add_argument(
        "--version", action="version", version=f"{version_base} ({_git_hash()})"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command")

    locate_parser = sub.add_parser("locate", help="Find the knee of a curve")
    _add_curve_args(locate_parser)
    locate_parser.add_argument("-S", "--sensitivity", type=float, default=None)
    locate_parser.add_argument(
        "--curve", choices=["concave", "convex", AUTO], default=None
    )
    locate_parser.add_argument(
        "--direction", choices=["increasing", "decreasing", AUTO], default=None
    )
    locate_parser.add_argument(
        "--interp", dest="interp_method", choices=["spline", "polynomial"], default=None
    )
    locate_parser.add_argument(
        "--online", action="store_true", default=None, help="Report the last knee"
    )
    locate_parser.add_argument("--degree", dest="polynomial_degree", type=int, default=None)
    locate_parser.add_argument("--config", type=Path, default=None)
    locate_parser.add_argument("--out", type=Path, default=None, help="JSON report")
    locate_parser.add_argument("--plot", type=Path, default=None)
    locate_parser.add_argument("--plot-normalized", type=Path, default=None)

    shape_parser = sub.add_parser("shape", help="Infer direction and curvature")
    _add_curve_args(shape_parser)

    gen_parser = sub.add_parser("generate", help="Write a fixture curve to CSV")
    gen_parser.add_argument("--fixture", choices=sorted(FIXTURES), required=True)
    gen_parser.add_argument("--out", type=Path, required=True)
    gen_parser.add_argument("--seed", type=int, default=42)
    gen_parser.add_argument("--n", type=int, default=100)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "generate":
        if args.fixture == "noisy_gaussian":
            x, y = noisy_gaussian(N=args.n, seed=args.seed)
        else:
            x, y = FIXTURES[args.fixture]()
        args.out.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame({"x": x, "y": y}).to_csv(args.out, index=False)
        return

    if args.command == "shape":
        try:
            x, y = _read_curve(args.from_csv, args.x_col, args.y_col)
            found = find_shape(x, y)
        except ValueError as exc:
            parser.error(str(exc))
        print(f"{found.direction.value} {found.curve.value}")
        return

    if args.command == "locate":
        try:
            cfg = load_config(args.config).merged(
                sensitivity=args.sensitivity,
                curve=args.curve,
                direction=args.direction,
                interp_method=args.interp_method,
                online=args.online,
                polynomial_degree=args.polynomial_degree,
            )
            x, y = _read_curve(args.from_csv, args.x_col, args.y_col)
            curve, direction = cfg.curve, cfg.direction
            if AUTO in (curve, direction):
                found = find_shape(x, y)
                if curve == AUTO:
                    curve = found.curve
                if direction == AUTO:
                    direction = found.direction
                _log.info("inferred shape: %s %s", found.direction.value, found.curve.value)
            result = locate(
                x,
                y,
                sensitivity=cfg.sensitivity,
                curve=curve,
                direction=direction,
                interp_method=cfg.interp_method,
                online=cfg.online,
                polynomial_degree=cfg.polynomial_degree,
            )
        except ValueError as exc:
            parser.error(str(exc))

        if args.out:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            args.out.write_text(json.dumps(_report(result), indent=2))
        if args.plot or args.plot_normalized:
            from plot_knee import plot_knee, plot_knee_normalized

            if args.plot:
                plot_knee(result, args.plot)
            if args.plot_normalized:
                plot_knee_normalized(result, args.plot_normalized)

        print(result.knee)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
