"""CLI entry point for compose-release."""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from compose_release.changes import resolve_change_set
from compose_release.errors import ReleaseError
from compose_release.models import Mode, RunResult, Settings, Trigger
from compose_release.pipeline import format_summary, run_pipeline, run_units
from compose_release.toml import load_settings
from compose_release.trigger import trigger_from_github

TEMPLATES_DIR = Path(__file__).parent / "templates"

settings_options = [
    click.option(
        "--packages-root", default=None, help="Directory holding the packages."
    ),
    click.option("--registry", default=None, help="Registry host, e.g. ghcr.io."),
    click.option(
        "--owner", default=None, help="Registry namespace (defaults to repo owner)."
    ),
    click.option(
        "--max-workers", type=int, default=None, help="Parallel package units."
    ),
]

trigger_options = [
    click.option(
        "--event",
        default=None,
        help="Event name (push, pull_request, workflow_dispatch). "
        "Read from the GitHub Actions environment when omitted.",
    ),
    click.option("--base", default=None, help="Base revision of the diff."),
    click.option("--head", default=None, help="Head revision of the diff."),
    click.option("--package", default=None, help="Process only this package."),
    click.option("--repository", default="", help="owner/name for provenance labels."),
]


def _apply(options):
    def decorator(func):
        for option in reversed(options):
            func = option(func)
        return func

    return decorator


def _settings(packages_root, registry, owner, max_workers) -> Settings:
    try:
        return load_settings(
            Path.cwd(),
            packages_root=packages_root,
            registry=registry,
            owner=owner,
            max_workers=max_workers,
        )
    except ReleaseError as exc:
        raise click.ClickException(exc.message) from exc


def _trigger(event, base, head, package, repository) -> Trigger:
    """Build the trigger from explicit options, or from GitHub Actions."""
    if event is None:
        try:
            trigger = trigger_from_github(os.environ)
        except ReleaseError as exc:
            raise click.ClickException(exc.message) from exc
        if package:
            trigger = trigger.model_copy(update={"package": package})
        return trigger

    if event == "workflow_dispatch" and base is None:
        # Same as a GitHub dispatch: without a package input nothing changed
        base = head = head or "HEAD"

    owner = repository.split("/", 1)[0] if "/" in repository else ""
    return Trigger(
        event=event,
        base=base,
        head=head,
        package=package,
        sha=head or "",
        repository=repository,
        owner=owner,
    )


def _finish(run: RunResult) -> None:
    if not run.ok:
        raise SystemExit(1)


@click.group()
@click.version_option(package_name="compose-release")
def cli() -> None:
    """Build and publish the compose packages that changed."""


@cli.command()
@click.option(
    "--workflow-dir",
    type=click.Path(),
    default=".github/workflows",
    show_default=True,
    help="Directory to write the workflow file.",
)
def init(workflow_dir: str) -> None:
    """Scaffold the GitHub Actions workflow into your repo."""
    root = Path.cwd()

    if not (root / ".git").exists():
        raise click.ClickException("Not a git repository. Run from the repo root.")

    settings = _settings(None, None, None, None)
    if not (root / settings.packages_root).is_dir():
        raise click.ClickException(
            f"No {settings.packages_root}/ directory found.\n"
            "Set packages-root under [tool.compose-release] in pyproject.toml."
        )

    dest_dir = root / workflow_dir
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / "build-and-publish.yml"

    template = TEMPLATES_DIR / "build-and-publish.yml"
    rendered = template.read_text().replace(
        "__PACKAGES_ROOT__", settings.packages_root.strip("/")
    )
    dest.write_text(rendered)

    click.echo(f"✓ Wrote workflow to {dest.relative_to(root)}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Commit and push the workflow file")
    click.echo("  2. Force a rebuild of one package:")
    click.echo("       gh workflow run build-and-publish.yml -f package=<name>")


@cli.command()
@_apply(trigger_options)
@_apply(settings_options)
@click.option(
    "--dry-run", is_flag=True, help="Package everything but skip registry pushes."
)
def run(
    event,
    base,
    head,
    package,
    repository,
    packages_root,
    registry,
    owner,
    max_workers,
    dry_run,
) -> None:
    """Detect changes, then validate (pull requests) or publish (merges)."""
    settings = _settings(packages_root, registry, owner, max_workers)
    trigger = _trigger(event, base, head, package, repository)
    try:
        result = run_pipeline(trigger, settings, dry_run=dry_run)
    except ReleaseError as exc:
        raise click.ClickException(exc.message) from exc
    _finish(result)


@cli.command()
@_apply(trigger_options)
@_apply(settings_options)
def detect(
    event,
    base,
    head,
    package,
    repository,
    packages_root,
    registry,
    owner,
    max_workers,
) -> None:
    """Print the changed packages as a JSON array."""
    settings = _settings(packages_root, registry, owner, max_workers)
    trigger = _trigger(event, base, head, package, repository)
    try:
        changed = resolve_change_set(trigger, settings)
    except ReleaseError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(json.dumps(sorted(changed)))


@cli.command()
@click.argument("packages", nargs=-1, required=True)
@_apply(settings_options)
def validate(packages, packages_root, registry, owner, max_workers) -> None:
    """Validate the named packages without publishing anything."""
    settings = _settings(packages_root, registry, owner, max_workers)
    trigger = Trigger(event="pull_request")
    names = frozenset(packages)
    results = run_units(Mode.REVIEW, names, trigger, settings, Path.cwd())
    result = RunResult(mode=Mode.REVIEW, change_set=sorted(names), results=results)
    click.echo(format_summary(result))
    _finish(result)
