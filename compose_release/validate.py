"""Structural checks for a package before merge.

Validation only reads the filesystem; it never packages or publishes.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ComposeFileMissing, ContentMissing
from .manifest import read_descriptor
from .models import PackageDescriptor, Settings


def find_compose_file(content_dir: Path, settings: Settings) -> Path | None:
    """Return the first recognised compose file in content_dir, if any."""
    for filename in settings.compose_files:
        candidate = content_dir / filename
        if candidate.is_file():
            return candidate
    return None


def validate_package(root: Path, package: str, settings: Settings) -> PackageDescriptor:
    """Check a package's manifest and content directory.

    Checks run in order and stop at the first failure:
    1. The manifest exists (ManifestMissing)
    2. Its name and version are present and non-empty (ManifestInvalid)
    3. The content directory exists (ContentMissing)
    4. The content directory holds a compose file (ComposeFileMissing)

    Returns:
        The package's descriptor when every check passes.
    """
    pkg_dir = settings.package_dir(root, package)
    descriptor = read_descriptor(pkg_dir / settings.manifest)

    content_dir = pkg_dir / settings.content_dir
    if not content_dir.is_dir():
        raise ContentMissing(
            f"{settings.content_dir}/ directory not found for {package}", package
        )

    if find_compose_file(content_dir, settings) is None:
        names = " or ".join(settings.compose_files)
        raise ComposeFileMissing(
            f"{names} not found in {settings.content_dir}/ of {package}", package
        )

    return descriptor
