"""Artifact packaging: tar up a package's content directory."""

from __future__ import annotations

import hashlib
import shutil
import tarfile
from pathlib import Path

from .errors import PackagingError
from .models import Artifact, PackageDescriptor, Settings

ARTIFACT_SUFFIX = ".tgz"


def prepare_build_context(build_root: Path, package: str) -> Path:
    """Create an empty build context directory for a package.

    Anything left over from a previous run is removed first, so an artifact
    is never reused or appended to.
    """
    context = build_root / package
    if context.exists():
        shutil.rmtree(context)
    context.mkdir(parents=True)
    return context


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def package_artifact(
    root: Path,
    package: str,
    descriptor: PackageDescriptor,
    settings: Settings,
) -> Artifact:
    """Archive the contents of a package's content directory.

    The archive holds the directory's contents rather than the directory
    itself (members are "./docker-compose.yaml", not "src/docker-compose.yaml")
    and is written to <build_dir>/<package>/<package>.tgz.

    Raises:
        PackagingError: If the content directory is missing or unreadable.
    """
    content_dir = settings.package_dir(root, package) / settings.content_dir
    if not content_dir.is_dir():
        raise PackagingError(
            f"Cannot package {package}: {content_dir} not found", package
        )

    try:
        context = prepare_build_context(root / settings.build_dir, package)
        path = context / f"{package}{ARTIFACT_SUFFIX}"
        with tarfile.open(path, "w:gz") as tar:
            tar.add(content_dir, arcname=".")
    except OSError as exc:
        raise PackagingError(f"Cannot package {package}: {exc}", package) from exc

    try:
        size = path.stat().st_size
        digest = _sha256(path)
    except OSError as exc:
        raise PackagingError(f"Cannot read {path.name}: {exc}", package) from exc

    print(f"  Packaged {path.name} ({size} bytes)")
    return Artifact(
        package=package,
        version=descriptor.version,
        path=path,
        sha256=digest,
    )
