"""Exception hierarchy for compose-release.

Input errors are always attributable to one package and end that package's
unit of work. Tooling errors come from git or docker; a DiffError aborts the
whole run because no change set can be produced without it.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all compose-release errors."""

    #: Short machine-readable name surfaced in per-package results.
    kind = "ReleaseError"

    def __init__(self, message: str, package: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.package = package


class ConfigError(ReleaseError):
    """Invalid [tool.compose-release] configuration."""

    kind = "ConfigError"


class InputError(ReleaseError):
    """A package's on-disk contract is broken."""

    kind = "InputError"


class ManifestMissing(InputError):
    kind = "ManifestMissing"


class ManifestInvalid(InputError):
    kind = "ManifestInvalid"


class ContentMissing(InputError):
    kind = "ContentMissing"


class ComposeFileMissing(InputError):
    kind = "ComposeFileMissing"


class ToolingError(ReleaseError):
    """An external tool (git, docker, filesystem) failed."""

    kind = "ToolingError"


class DiffError(ToolingError):
    kind = "DiffError"


class PackagingError(ToolingError):
    kind = "PackagingError"


class RegistryError(ToolingError):
    kind = "RegistryError"
