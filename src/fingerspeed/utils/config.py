from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a dict at root of YAML: {path}")
    return data


def section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return ``cfg[name]`` as a dict, treating a missing or empty section as ``{}``."""
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(value).__name__}")
    return dict(value)


def resolve_path(path: str, base_dir: Optional[str] = None) -> str:
    p = Path(path).expanduser()
    if p.is_absolute():
        return str(p)
    if base_dir is None:
        base_dir = os.getcwd()
    return str((Path(base_dir) / p).resolve())


def parse_alpha(value: Any, name: str) -> float:
    a = float(value)
    if not (0.0 < a < 1.0):
        raise ValueError(f"{name} must be in (0, 1), got {a}")
    return a
