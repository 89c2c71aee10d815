import json
import os
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[2] / "kneesim.py"


def _run(*args, check=True):
    env = dict(os.environ, MPLBACKEND="Agg")
    return subprocess.run(
        [sys.executable, str(SCRIPT), *map(str, args)],
        capture_output=True,
        text=True,
        check=check,
        env=env,
    )


def _fixture_csv(tmp_path: Path, name: str) -> Path:
    out = tmp_path / f"{name}.csv"
    _run("generate", "--fixture", name, "--out", out)
    return out


def test_generate_writes_columns(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "bumpy")
    lines = csv.read_text().splitlines()
    assert lines[0] == "x,y"
    assert len(lines) == 91


def test_generate_noisy_gaussian_size(tmp_path: Path) -> None:
    out = tmp_path / "g.csv"
    _run("generate", "--fixture", "noisy_gaussian", "--n", "50", "--out", out)
    assert len(out.read_text().splitlines()) == 51


def test_locate_prints_knee(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "concave_increasing")
    result = _run("locate", "--from", csv)
    assert result.stdout.strip() == "2.0"


def test_locate_json_report(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "convex_increasing")
    report = tmp_path / "out" / "knee.json"
    _run(
        "locate",
        "--from", csv,
        "--curve", "convex",
        "--direction", "increasing",
        "--interp", "polynomial",
        "--out", report,
    )
    data = json.loads(report.read_text())
    assert data["knee"] == 7.0
    assert data["knee_y"] == 20.0
    assert data["all_knees"] == [7.0]
    assert data["curve"] == "convex"
    assert data["parameters"]["interp_method"] == "polynomial"
    assert data["parameters"]["sensitivity"] == 1.0


def test_locate_auto_shape(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "convex_decreasing")
    result = _run("locate", "--from", csv, "--curve", "auto", "--direction", "auto")
    assert result.stdout.strip() == "2.0"


def test_locate_uses_config_file(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "concave_decreasing")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("locator:\n  curve: concave\n  direction: decreasing\n")
    result = _run("locate", "--from", csv, "--config", cfg)
    assert result.stdout.strip() == "7.0"


def test_locate_no_knee_prints_none(tmp_path: Path) -> None:
    csv = tmp_path / "flat.csv"
    csv.write_text("a,b\n0,1\n1,1\n2,1\n3,1\n")
    result = _run("locate", "--from", csv)
    assert result.stdout.strip() == "None"


def test_locate_missing_column_is_usage_error(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "figure2")
    result = _run("locate", "--from", csv, "--y", "missing", check=False)
    assert result.returncode == 2
    assert "missing" in result.stderr


def test_invalid_config_is_usage_error(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "figure2")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("locator:\n  interp_method: cubic\n")
    result = _run("locate", "--from", csv, "--config", cfg, check=False)
    assert result.returncode == 2
    assert "locator/interp_method" in result.stderr


def test_shape_command(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "concave_decreasing")
    result = _run("shape", "--from", csv)
    assert result.stdout.strip() == "decreasing concave"


def test_locate_plots(tmp_path: Path) -> None:
    csv = _fixture_csv(tmp_path, "figure2")
    raw = tmp_path / "plots" / "knee.png"
    norm = tmp_path / "plots" / "knee_norm.png"
    _run("locate", "--from", csv, "--plot", raw, "--plot-normalized", norm)
    assert raw.stat().st_size > 0
    assert norm.stat().st_size > 0


def test_version() -> None:
    result = _run("--version")
    version = (SCRIPT.parent / "VERSION").read_text().strip()
    assert result.stdout.startswith(version + " (")
