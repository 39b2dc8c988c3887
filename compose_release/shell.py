"""Shell, git and docker utilities.

Thin wrappers around subprocess so the rest of the pipeline can be tested
by patching a single seam per external tool.
"""

from __future__ import annotations

import subprocess
import sys


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "diff", "--name-only").
        check: If True (default), raise CalledProcessError on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def docker(*args: str) -> subprocess.CompletedProcess[str]:
    """Run a docker command, capturing output.

    Never raises on a non-zero exit; callers inspect returncode and stderr
    so a failed push can be reported against the package that caused it.
    """
    return subprocess.run(
        ["docker", *args], capture_output=True, text=True, check=False
    )


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def error(msg: str) -> None:
    """Print an error message to stderr without exiting."""
    print(f"ERROR: {msg}", file=sys.stderr)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the whole run.
    """
    error(msg)
    sys.exit(1)
