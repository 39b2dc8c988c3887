"""Data models for compose-release.

These Pydantic models represent the values passed between the stages of a
run: the trigger that started it, the settings it runs under, and the
per-package results it produces.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    """Execution mode of a run.

    REVIEW validates proposed changes without publishing anything; MERGE
    packages and publishes changes that already landed.
    """

    REVIEW = "review"
    MERGE = "merge"


class Outcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class Settings(BaseModel):
    """Repository layout and registry settings.

    Attributes:
        packages_root: Directory holding one sub-directory per package.
        manifest: Manifest filename at the root of each package.
        content_dir: Directory (inside the package) whose contents are published.
        compose_files: Accepted content-descriptor filenames; one must exist.
        registry: Registry host images are pushed to.
        owner: Registry namespace; usually the repository owner.
        build_dir: Directory where per-package build contexts are created.
        max_workers: Upper bound on concurrently running package units.
    """

    model_config = ConfigDict(extra="forbid")

    packages_root: str = "packages"
    manifest: str = "package.json"
    content_dir: str = "src"
    compose_files: list[str] = Field(
        default_factory=lambda: ["docker-compose.yaml", "docker-compose.yml"]
    )
    registry: str = "ghcr.io"
    owner: str = ""
    build_dir: str = "dist"
    max_workers: int = Field(default=4, ge=1)

    def package_dir(self, root: Path, package: str) -> Path:
        """Return the on-disk directory for a package identifier."""
        return root / self.packages_root / package


class Trigger(BaseModel):
    """The event that started a run, passed in explicitly.

    Attributes:
        event: CI event name ("push", "pull_request", "workflow_dispatch", ...).
        base: Base revision of the diff (PR base, or the pre-push SHA).
        head: Head revision of the diff (PR head, or the post-push SHA).
        package: Manually selected package; bypasses change detection.
        sha: Revision recorded in image provenance labels.
        server_url: Source host, e.g. "https://github.com".
        repository: "<owner>/<name>" of the source repository.
        owner: Repository owner, used as the default registry namespace.
    """

    event: str
    base: str | None = None
    head: str | None = None
    package: str | None = None
    sha: str = ""
    server_url: str = "https://github.com"
    repository: str = ""
    owner: str = ""

    @property
    def mode(self) -> Mode | None:
        """Map the event to an execution mode, or None for unsupported events."""
        if self.event == "pull_request":
            return Mode.REVIEW
        if self.event in ("push", "workflow_dispatch"):
            return Mode.MERGE
        return None

    @property
    def source_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/{self.repository}"


class PackageDescriptor(BaseModel):
    """Name and version declared in a package's manifest."""

    name: str
    version: str


class Artifact(BaseModel):
    """An archive of one package's content directory.

    Created fresh on every publish run and never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    path: Path
    sha256: str


class PublishedTagSet(BaseModel):
    """The version tag and the "latest" tag pushed together for one image."""

    model_config = ConfigDict(frozen=True)

    image: str
    version: str

    @property
    def version_ref(self) -> str:
        return f"{self.image}:{self.version}"

    @property
    def latest_ref(self) -> str:
        return f"{self.image}:latest"

    @property
    def refs(self) -> list[str]:
        return [self.version_ref, self.latest_ref]


class PackageResult(BaseModel):
    """Outcome of one package's unit of work.

    Attributes:
        package: Package identifier.
        mode: Mode the unit ran in.
        outcome: PASS or FAIL.
        error: Error kind (e.g. "ManifestInvalid") when the unit failed.
        reason: Human-readable failure reason.
        published: Tags pushed by a successful MERGE unit.
    """

    package: str
    mode: Mode
    outcome: Outcome
    error: str | None = None
    reason: str | None = None
    published: PublishedTagSet | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.PASS


class RunResult(BaseModel):
    """Aggregate of all unit results for one run."""

    mode: Mode | None
    change_set: list[str] = Field(default_factory=list)
    results: list[PackageResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True unless at least one unit failed."""
        return all(r.ok for r in self.results)

    @property
    def failed(self) -> list[PackageResult]:
        return [r for r in self.results if not r.ok]
