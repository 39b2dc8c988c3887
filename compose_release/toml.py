"""TOML configuration loading.

Settings live in the repository's root pyproject.toml under
[tool.compose-release]. Keys use hyphens in TOML and map onto the
underscore field names of Settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError

from .errors import ConfigError
from .models import Settings

TOOL_TABLE = "compose-release"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract [tool.compose-release] as a plain dict with underscore keys.

    Returns an empty dict when the table is absent.
    """
    table = doc.get("tool", {}).get(TOOL_TABLE, {})
    # unwrap() turns tomlkit containers into plain Python values
    raw = table.unwrap() if hasattr(table, "unwrap") else dict(table)
    return {key.replace("-", "_"): value for key, value in raw.items()}


def load_settings(root: Path, **overrides: Any) -> Settings:
    """Build Settings from defaults, pyproject.toml, then explicit overrides.

    Args:
        root: Repository root containing pyproject.toml (optional file).
        **overrides: Values that win over the file; None values are ignored
            so unset CLI options fall through.

    Raises:
        ConfigError: If the table holds unknown keys or invalid values.
    """
    values: dict[str, Any] = {}
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        try:
            values.update(get_tool_config(load_pyproject(pyproject)))
        except ParseError as exc:
            raise ConfigError(f"Cannot parse {pyproject}: {exc}") from exc
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{TOOL_TABLE}] settings:\n{exc}") from exc
