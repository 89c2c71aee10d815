"""Default knee detection parameters loaded from YAML.

``configs/kneesim.yaml`` holds the defaults applied by :mod:`kneesim` when
an option is not given on the command line.  The file is validated against
``docs/schema/kneesim.schema.json``; keys it omits fall back to the
:class:`LocatorConfig` defaults, which match those of
:func:`knee_locator.locate`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
import json
from pathlib import Path
from typing import Any, Dict

import yaml
from jsonschema import ValidationError, validate

ROOT = Path(__file__).resolve().parent
CONFIG_PATH = ROOT / "configs" / "kneesim.yaml"
SCHEMA_PATH = ROOT / "docs" / "schema" / "kneesim.schema.json"

AUTO = "auto"
"""``curve``/``direction`` value requesting inference with :func:`shape.find_shape`."""


@dataclass(frozen=True)
class LocatorConfig:
    """Parameters forwarded to :func:`knee_locator.locate`."""

    sensitivity: float = 1.0
    curve: str = "concave"
    direction: str = "increasing"
    interp_method: str = "spline"
    online: bool = False
    polynomial_degree: int = 7

    def merged(self, **overrides: Any) -> "LocatorConfig":
        """Return a copy with every non-``None`` override applied."""

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_schema(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def load_config(
    cfg_path: Path | None = None, schema_path: Path | None = None
) -> LocatorConfig:
    """Load and validate the locator defaults from ``cfg_path``.

    Schema violations are reported as ``ValueError`` naming the offending
    field.
    """

    raw = yaml.safe_load(Path(cfg_path or CONFIG_PATH).read_text()) or {}
    try:
        validate(raw, _load_schema(schema_path or SCHEMA_PATH))
    except ValidationError as exc:
        field = "/".join(str(p) for p in exc.path) or "<root>"
        raise ValueError(f"{field}: {exc.message}") from exc

    section = raw.get("locator", {}) or {}
    return LocatorConfig().merged(**section)


__all__ = ["AUTO", "CONFIG_PATH", "SCHEMA_PATH", "LocatorConfig", "load_config"]
