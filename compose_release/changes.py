"""Change-set resolution: which packages does this run touch?"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .diff import diff_paths
from .models import Settings, Trigger
from .shell import step

PathDiffer = Callable[[str | None, str | None], list[str]]


def packages_from_paths(paths: Iterable[str], packages_root: str) -> set[str]:
    """Map changed file paths to the package identifiers they belong to.

    A package identifier is the path segment directly below the packages root,
    so "packages/web/src/app.yaml" belongs to "web". Paths outside the root,
    and the root itself with nothing below it, are ignored.

    Examples:
        ["packages/a/src/x", "packages/a/src/y", "README.md"] → {"a"}
    """
    prefix = packages_root.strip("/") + "/"
    found: set[str] = set()
    for path in paths:
        if not path.startswith(prefix):
            continue
        segment = path[len(prefix) :].split("/", 1)[0]
        if segment:
            found.add(segment)
    return found


def resolve_change_set(
    trigger: Trigger,
    settings: Settings,
    differ: PathDiffer | None = None,
) -> frozenset[str]:
    """Determine the set of packages affected by a trigger.

    A manually selected package short-circuits detection entirely: no diff is
    taken and the name is not checked against the filesystem, so a package
    can be force-rebuilt without any change.

    Otherwise the trigger's base and head revisions are diffed and each path
    under the packages root contributes its package identifier.

    Args:
        trigger: The event that started the run.
        settings: Repository layout settings (for the packages root).
        differ: Changed-path producer; defaults to git.

    Returns:
        Deduplicated package identifiers. Empty means nothing to do.

    Raises:
        DiffError: If the differ cannot produce a path list.
    """
    step("Detecting changed packages")

    manual = (trigger.package or "").strip()
    if manual:
        print(f"  Manually selected package: {manual}")
        return frozenset({manual})

    paths = (differ or diff_paths)(trigger.base, trigger.head)
    changed = frozenset(packages_from_paths(paths, settings.packages_root))

    if not changed:
        print(f"  No changes under {settings.packages_root}/")
    for name in sorted(changed):
        print(f"  {name}: changed")
    return changed
