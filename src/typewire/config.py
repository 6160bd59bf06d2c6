"""Load registry configurations from YAML, TOML, or JSON files."""

from __future__ import annotations

import importlib
import json
import re
from pathlib import Path
from typing import Any

from .registry import FunctionRegistry

# package.module:attribute, attribute may be dotted
_IMPORT_PATH = re.compile(r"[A-Za-z_][\w.]*:[A-Za-z_][\w.]*")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a configuration dict from a file, dispatched by extension.

    Supported extensions: ``.json``, ``.toml``, ``.yaml`` / ``.yml``.
    The result is checked with :func:`validate_config`; an empty file
    loads as ``{}``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()

    if suffix == '.json':
        with open(path) as f:
            return validate_config(json.load(f))

    if suffix == '.toml':
        return validate_config(_load_toml(path))

    if suffix in ('.yaml', '.yml'):
        return validate_config(_load_yaml(path))

    raise ValueError(
        f"Unsupported config file extension {suffix!r}. "
        "Use .json, .toml, .yaml, or .yml."
    )


def registry_from_config(path: str | Path) -> FunctionRegistry:
    """Load a :class:`FunctionRegistry` from a config file."""
    data = load_config(path)
    return FunctionRegistry.from_config(data)


def validate_config(data: Any) -> dict[str, Any]:
    """Check a loaded config against the registry schema and return it.

    The config must be a mapping; ``functions``, when present, must be a
    list of ``module:attribute`` strings. ``None`` (an empty file) becomes
    ``{}``.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")
    paths = data.get("functions", [])
    if not isinstance(paths, list):
        raise ValueError("'functions' must be a list of module:attribute paths")
    for path in paths:
        if not isinstance(path, str) or not _IMPORT_PATH.fullmatch(path):
            raise ValueError(f"Invalid function path {path!r}; expected 'module:attribute'")
    return data


def resolve_import_path(path: str) -> Any:
    """Import ``package.module:attribute`` and return the attribute.

    Dotted attribute paths (``module:Class.method``) are followed.
    """
    module_name, sep, attr_path = path.partition(':')
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected 'module:attribute', got {path!r}")
    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split('.'):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ValueError(f"{module_name!r} has no attribute {attr_path!r}") from None
    return obj


# ── Internal loaders ─────────────────────────────────────────────

def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML using ``tomllib`` (3.11+) or ``tomli``."""
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore[no-redef]
        except ModuleNotFoundError:
            raise ImportError(
                "TOML support requires Python 3.11+ (built-in tomllib) "
                "or the 'tomli' package. Install with: pip install typewire[toml]"
            )
    with open(path, 'rb') as f:
        return tomllib.load(f)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML using ``pyyaml``."""
    try:
        import yaml
    except ModuleNotFoundError:
        raise ImportError(
            "YAML support requires the 'pyyaml' package. "
            "Install with: pip install typewire[yaml]"
        )
    with open(path) as f:
        return yaml.safe_load(f)
