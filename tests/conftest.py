"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from compose_release.models import Settings, Trigger

DEFAULT = object()

COMPOSE = """\
services:
  app:
    image: nginx:1.27
"""


def write_package(
    root: Path,
    name: str,
    manifest: Any = DEFAULT,
    compose: str | None = "docker-compose.yaml",
    content: bool = True,
) -> Path:
    """Create packages/<name>/ with a manifest and a src/ content directory.

    Args:
        manifest: Dict written as JSON, raw text written verbatim, or None to
            leave the manifest out. Defaults to {"name": name, "version": "1.0.0"}.
        compose: Compose filename created inside src/, or None for none.
        content: Whether to create src/ at all.
    """
    pkg_dir = root / "packages" / name
    pkg_dir.mkdir(parents=True, exist_ok=True)

    if manifest is DEFAULT:
        manifest = {"name": name, "version": "1.0.0"}
    if manifest is not None:
        text = manifest if isinstance(manifest, str) else json.dumps(manifest)
        (pkg_dir / "package.json").write_text(text)

    if content:
        src = pkg_dir / "src"
        src.mkdir(exist_ok=True)
        if compose:
            (src / compose).write_text(COMPOSE)
    return pkg_dir


@pytest.fixture
def settings() -> Settings:
    return Settings(owner="acme")


@pytest.fixture
def push_trigger() -> Trigger:
    return Trigger(
        event="push",
        base="a" * 40,
        head="b" * 40,
        sha="b" * 40,
        repository="acme/stacks",
        owner="Acme",
    )


@pytest.fixture
def pr_trigger() -> Trigger:
    return Trigger(
        event="pull_request",
        base="c" * 40,
        head="d" * 40,
        sha="e" * 40,
        repository="acme/stacks",
        owner="Acme",
    )
