"""Changed-path detection over git."""

from __future__ import annotations

import subprocess

from .errors import DiffError
from .shell import git


def is_null_revision(rev: str | None) -> bool:
    """True for a missing revision or git's all-zero SHA (first push of a branch)."""
    return not rev or set(rev) == {"0"}


def diff_paths(base: str | None, head: str | None) -> list[str]:
    """Return the files changed between two revisions, relative to the repo root.

    When there is no usable base revision every file tracked at head counts as
    changed, the same way a first release treats the whole tree as new.

    Raises:
        DiffError: If git fails (unknown revision, shallow clone, no repo).
    """
    head = head or "HEAD"
    try:
        if is_null_revision(base):
            output = git("ls-tree", "-r", "--name-only", head)
        else:
            output = git("diff", "--name-only", base, head)
    except (subprocess.CalledProcessError, FileNotFoundError) as exc:
        stderr = getattr(exc, "stderr", None) or str(exc)
        raise DiffError(f"git diff {base}..{head} failed: {stderr.strip()}") from exc
    return output.splitlines()
