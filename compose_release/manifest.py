"""Package manifest reading.

The manifest is a JSON file (package.json by default) at the root of each
package. Only its "name" and "version" fields matter here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import ManifestInvalid, ManifestMissing
from .models import PackageDescriptor

REQUIRED_FIELDS = ("name", "version")


def read_manifest(path: Path) -> dict[str, Any]:
    """Load a manifest file as a dict.

    Missing or null fields are not an error at this level; judging them is
    left to read_descriptor().

    Raises:
        ManifestMissing: If the file does not exist.
        ManifestInvalid: If the file is unreadable or not a JSON object.
    """
    if not path.is_file():
        raise ManifestMissing(f"{path.name} not found at {path}")
    try:
        data = json.loads(path.read_text())
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors, as are
        # integers past the interpreter's digit limit
        raise ManifestInvalid(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise ManifestInvalid(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestInvalid(f"{path} must contain a JSON object")
    return data


def _field(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    # jq -r renders numbers as text, so "version": 1.2 is accepted as "1.2".
    # Stricter than jq: booleans and whitespace-only strings are rejected,
    # and surrounding whitespace is stripped since the value becomes an image tag.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def read_descriptor(path: Path) -> PackageDescriptor:
    """Read and check the name and version declared in a manifest.

    Raises:
        ManifestMissing: If the manifest does not exist.
        ManifestInvalid: If it cannot be parsed, or name/version is absent,
            null or empty.
    """
    data = read_manifest(path)
    fields = {key: _field(data, key) for key in REQUIRED_FIELDS}
    missing = [key for key, value in fields.items() if value is None]
    if missing:
        raise ManifestInvalid(f"Missing {', '.join(missing)} in {path.name}")
    return PackageDescriptor(name=fields["name"], version=fields["version"])
