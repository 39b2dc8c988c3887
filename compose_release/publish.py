"""Publishing: wrap an artifact in a scratch image and push it.

Each package becomes an OCI image containing only its artifact, pushed
under two tags (the declared version and "latest") by a single buildx
invocation so both tags reference the same image.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from .errors import RegistryError
from .models import Artifact, PackageDescriptor, PublishedTagSet, Settings, Trigger
from .shell import docker

OCI_LABEL_PREFIX = "org.opencontainers.image"


def image_name(settings: Settings, owner: str, package: str) -> str:
    """Return the image reference without a tag, e.g. "ghcr.io/acme/web".

    Registries only accept lowercase namespaces, so the owner is lowercased.
    """
    return f"{settings.registry}/{owner.lower()}/{package}"


def provenance_labels(
    trigger: Trigger,
    descriptor: PackageDescriptor,
    created: datetime | None = None,
) -> dict[str, str]:
    """Build the OCI provenance labels attached to a published image."""
    created = created or datetime.now(timezone.utc)
    return {
        f"{OCI_LABEL_PREFIX}.source": trigger.source_url,
        f"{OCI_LABEL_PREFIX}.created": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
        f"{OCI_LABEL_PREFIX}.revision": trigger.sha or trigger.head or "",
        f"{OCI_LABEL_PREFIX}.version": descriptor.version,
    }


def render_dockerfile(artifact: Artifact, labels: dict[str, str]) -> str:
    """Render the carrier image: an empty base with the artifact at /."""
    lines = ["FROM scratch", f"COPY {artifact.path.name} /"]
    # json.dumps gives a double-quoted, escaped string that LABEL accepts
    lines.extend(f"LABEL {key}={json.dumps(value)}" for key, value in labels.items())
    return "\n".join(lines) + "\n"


def publish_artifact(
    descriptor: PackageDescriptor,
    artifact: Artifact,
    trigger: Trigger,
    settings: Settings,
    *,
    dry_run: bool = False,
    created: datetime | None = None,
) -> PublishedTagSet:
    """Push an artifact under its version tag and "latest".

    The Dockerfile is written next to the artifact, and that directory is the
    build context. No retry is attempted on failure.

    Args:
        descriptor: Name and version read from the package manifest.
        artifact: Freshly packaged artifact for the package.
        trigger: Run trigger; supplies provenance and the default owner.
        settings: Registry settings.
        dry_run: Write the build context but skip the push.
        created: Timestamp for the "created" label (defaults to now).

    Raises:
        RegistryError: If no owner is known or the push fails.
    """
    package = artifact.package
    owner = settings.owner or trigger.owner
    if not owner:
        raise RegistryError("No registry owner configured", package)

    tag_set = PublishedTagSet(
        image=image_name(settings, owner, package), version=descriptor.version
    )

    context = artifact.path.parent
    dockerfile = context / "Dockerfile"
    labels = provenance_labels(trigger, descriptor, created)
    try:
        dockerfile.write_text(render_dockerfile(artifact, labels))
    except OSError as exc:
        raise RegistryError(f"Cannot write {dockerfile}: {exc}", package) from exc

    if dry_run:
        print(f"  Dry run: would push {', '.join(tag_set.refs)}")
        return tag_set

    try:
        result = docker(
            "buildx",
            "build",
            "--push",
            "--file",
            str(dockerfile),
            "--tag",
            tag_set.version_ref,
            "--tag",
            tag_set.latest_ref,
            str(context),
        )
    except OSError as exc:
        raise RegistryError(f"Cannot run docker: {exc}", package) from exc
    if result.returncode != 0:
        detail = (result.stderr or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit code {result.returncode}"
        raise RegistryError(f"Push of {tag_set.image} failed: {reason}", package)

    for ref in tag_set.refs:
        print(f"  Pushed {ref}")
    return tag_set
