"""Helpers for script-based GitHub Actions workflow steps.

The generated workflow runs detection once, then one matrix job per
changed package:

    python -m compose_release.workflow_steps detect --github-output "$GITHUB_OUTPUT"
    python -m compose_release.workflow_steps unit --package web --mode merge
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from compose_release.changes import resolve_change_set
from compose_release.errors import ReleaseError
from compose_release.models import Mode
from compose_release.pipeline import run_unit
from compose_release.shell import fatal
from compose_release.toml import load_settings
from compose_release.trigger import trigger_from_github


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


def detect(github_output: str) -> None:
    """Resolve the change set and emit it as GitHub step outputs.

    Writes "changes" (JSON array of package identifiers) and "mode"
    ("review", "merge", or empty when the event does nothing).
    """
    root = Path.cwd()
    trigger = trigger_from_github(os.environ)
    settings = load_settings(root)

    mode = trigger.mode
    changed: list[str] = []
    if mode is not None:
        changed = sorted(resolve_change_set(trigger, settings))

    _write_output(github_output, "changes", json.dumps(changed))
    _write_output(github_output, "mode", mode.value if mode else "")
    print(f"Changed packages: {json.dumps(changed)}")


def unit(package: str, mode: str, dry_run: bool = False) -> None:
    """Run one package's unit of work; exit non-zero if it fails."""
    root = Path.cwd()
    trigger = trigger_from_github(os.environ)
    settings = load_settings(root)

    result = run_unit(Mode(mode), package, trigger, settings, root, dry_run=dry_run)
    if not result.ok:
        fatal(f"{package}: {result.error}: {result.reason}")


def main(argv: list[str] | None = None) -> None:
    """Run a workflow step command."""
    args = argv if argv is not None else sys.argv[1:]
    parser = argparse.ArgumentParser(prog="python -m compose_release.workflow_steps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser("detect")
    detect_parser.add_argument(
        "--github-output", required=True, help="Path to GitHub step output file."
    )

    unit_parser = subparsers.add_parser("unit")
    unit_parser.add_argument("--package", required=True, help="Package to process.")
    unit_parser.add_argument(
        "--mode",
        required=True,
        choices=[m.value for m in Mode],
        help="review validates only; merge packages and publishes.",
    )
    unit_parser.add_argument(
        "--dry-run", action="store_true", help="Skip the registry push."
    )

    parsed = parser.parse_args(args)
    try:
        if parsed.command == "detect":
            detect(parsed.github_output)
        elif parsed.command == "unit":
            unit(parsed.package, parsed.mode, parsed.dry_run)
    except ReleaseError as exc:
        fatal(exc.message)


if __name__ == "__main__":
    main()
