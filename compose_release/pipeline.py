"""Run orchestration: detect → fan out → validate or publish → aggregate.

One run works like this:
1. Map the trigger to a mode (REVIEW for pull requests, MERGE for pushes
   and manual dispatches); other events do nothing
2. Resolve the change set once
3. Run one independent unit of work per changed package, in parallel
4. Collect every unit's result and report the run as failed if any failed

Units never share state. A failing package does not stop its siblings, and
packages already published are left in place when another one fails.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from .artifact import package_artifact
from .changes import PathDiffer, resolve_change_set
from .errors import InputError, ReleaseError
from .manifest import read_descriptor
from .models import Mode, Outcome, PackageResult, RunResult, Settings, Trigger
from .publish import publish_artifact
from .shell import step
from .validate import validate_package


def check_identifier(package: str) -> None:
    """Reject identifiers that would resolve outside the packages root.

    Diffed identifiers are single path segments already; this only matters
    for manually supplied names.
    """
    if package in (".", "..") or "/" in package or "\\" in package:
        raise InputError(f"Invalid package identifier: {package!r}", package)


def run_unit(
    mode: Mode,
    package: str,
    trigger: Trigger,
    settings: Settings,
    root: Path,
    *,
    dry_run: bool = False,
) -> PackageResult:
    """Run one package's unit of work and convert any failure into a result.

    REVIEW validates the package. MERGE reads its descriptor, packages the
    content directory and publishes it, stopping at the first failing step.
    """
    try:
        check_identifier(package)
        if mode is Mode.REVIEW:
            descriptor = validate_package(root, package, settings)
            print(f"  {package}: validation passed (version: {descriptor.version})")
            return PackageResult(package=package, mode=mode, outcome=Outcome.PASS)

        manifest = settings.package_dir(root, package) / settings.manifest
        descriptor = read_descriptor(manifest)
        print(f"  {package}: building version {descriptor.version}")
        artifact = package_artifact(root, package, descriptor, settings)
        published = publish_artifact(
            descriptor, artifact, trigger, settings, dry_run=dry_run
        )
        return PackageResult(
            package=package, mode=mode, outcome=Outcome.PASS, published=published
        )
    except ReleaseError as exc:
        print(f"  {package}: {exc.kind}: {exc.message}")
        return PackageResult(
            package=package,
            mode=mode,
            outcome=Outcome.FAIL,
            error=exc.kind,
            reason=exc.message,
        )


def run_units(
    mode: Mode,
    packages: frozenset[str],
    trigger: Trigger,
    settings: Settings,
    root: Path,
    *,
    dry_run: bool = False,
) -> list[PackageResult]:
    """Fan out one unit per package and join on all of them.

    Each task returns its own result; nothing is shared between tasks.
    Results are returned sorted by package identifier.
    """
    workers = min(settings.max_workers, len(packages))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(
                run_unit, mode, package, trigger, settings, root, dry_run=dry_run
            ): package
            for package in sorted(packages)
        }
        results = [future.result() for future in as_completed(futures)]
    return sorted(results, key=lambda r: r.package)


def format_summary(run: RunResult) -> str:
    """Render a per-package outcome table for the end of a run."""
    if not run.results:
        return "  No packages to process."
    width = max(len(r.package) for r in run.results)
    lines: list[str] = []
    for r in run.results:
        if r.ok:
            detail = ", ".join(r.published.refs) if r.published else "ok"
        else:
            detail = f"{r.error}: {r.reason}"
        lines.append(f"  {r.package:<{width}}  {r.outcome.value.upper():<4}  {detail}")
    status = "passed" if run.ok else f"failed ({len(run.failed)}/{len(run.results)})"
    lines.append(f"\n  Run {status}")
    return "\n".join(lines)


def run_pipeline(
    trigger: Trigger,
    settings: Settings,
    *,
    root: Path | None = None,
    differ: PathDiffer | None = None,
    dry_run: bool = False,
) -> RunResult:
    """Execute a full run for one trigger.

    Args:
        trigger: The event that started the run.
        settings: Repository layout and registry settings.
        root: Repository root (defaults to the current directory).
        differ: Changed-path producer; defaults to git.
        dry_run: Package and render build contexts but skip registry pushes.

    Returns:
        The aggregated run result. An unsupported event or an empty change
        set yields a successful result with no units.

    Raises:
        DiffError: If changed paths cannot be determined; no unit runs.
    """
    root = root or Path.cwd()

    mode = trigger.mode
    if mode is None:
        step(f"Event {trigger.event!r} does not trigger any work")
        return RunResult(mode=None)

    change_set = resolve_change_set(trigger, settings, differ)
    if not change_set:
        print("\nNothing to do.")
        return RunResult(mode=mode)

    verb = "Validating" if mode is Mode.REVIEW else "Publishing"
    step(f"{verb} {len(change_set)} packages")
    results = run_units(mode, change_set, trigger, settings, root, dry_run=dry_run)

    run = RunResult(mode=mode, change_set=sorted(change_set), results=results)
    step("Summary")
    print(format_summary(run))
    return run
