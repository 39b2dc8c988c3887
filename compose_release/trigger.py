"""Build a Trigger from the GitHub Actions environment.

This is the only place that reads CI environment state; everything
downstream receives the resulting Trigger as a plain value.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .models import Trigger


def load_event_payload(path: str | None) -> dict[str, Any]:
    """Load the webhook payload GitHub writes to GITHUB_EVENT_PATH."""
    if not path:
        return {}
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read event payload {path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def trigger_from_github(env: Mapping[str, str]) -> Trigger:
    """Translate GitHub Actions variables and the event payload into a Trigger.

    Pull requests diff the PR base against the PR head. Pushes diff the
    pre-push SHA ("before") against GITHUB_SHA. A manual dispatch with a
    non-empty "package" input selects that package directly; without one it
    diffs GITHUB_SHA against itself and finds nothing.

    Raises:
        ConfigError: If GITHUB_EVENT_NAME is not set.
    """
    event = env.get("GITHUB_EVENT_NAME", "")
    if not event:
        raise ConfigError("GITHUB_EVENT_NAME is not set; pass --event explicitly")

    payload = load_event_payload(env.get("GITHUB_EVENT_PATH"))
    sha = env.get("GITHUB_SHA", "")

    if event == "pull_request":
        pr = payload.get("pull_request", {})
        base = pr.get("base", {}).get("sha")
        head = pr.get("head", {}).get("sha")
    elif event == "workflow_dispatch":
        # No "before" on a dispatch: without a package input nothing changed
        base = head = sha or None
    else:
        base = payload.get("before")
        head = sha or None

    package = None
    if event == "workflow_dispatch":
        package = (payload.get("inputs") or {}).get("package") or None

    return Trigger(
        event=event,
        base=base,
        head=head,
        package=package,
        sha=sha,
        server_url=env.get("GITHUB_SERVER_URL", "https://github.com"),
        repository=env.get("GITHUB_REPOSITORY", ""),
        owner=env.get("GITHUB_REPOSITORY_OWNER", ""),
    )
