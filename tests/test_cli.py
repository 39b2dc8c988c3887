"""Tests for compose_release.cli."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import write_package
from compose_release.cli import cli
from compose_release.errors import DiffError
from compose_release.models import Mode, Outcome, PackageResult, RunResult

WORKFLOW = Path(".github") / "workflows" / "build-and-publish.yml"


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / ".git").mkdir()
    (tmp_path / "packages").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestInit:
    def test_writes_workflow(self, repo: Path) -> None:
        """init renders the bundled workflow with the default root."""
        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 0, result.output
        workflow = (repo / WORKFLOW).read_text()
        assert "Generated with compose-release" in workflow
        assert '"packages/**"' in workflow
        assert "__PACKAGES_ROOT__" not in workflow
        assert "compose_release.workflow_steps unit" in workflow

    def test_uses_configured_packages_root(self, repo: Path) -> None:
        """init substitutes the packages root from pyproject.toml."""
        (repo / "pyproject.toml").write_text(
            '[tool.compose-release]\npackages-root = "stacks"\n'
        )
        (repo / "stacks").mkdir()

        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 0, result.output
        workflow = (repo / WORKFLOW).read_text()
        assert '"stacks/**"' in workflow

    def test_requires_git_repo(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """init refuses to run outside a git repository."""
        monkeypatch.chdir(tmp_path)

        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 1
        assert "Not a git repository" in result.output

    def test_requires_packages_root(self, repo: Path) -> None:
        """init refuses to run without a packages directory."""
        (repo / "packages").rmdir()

        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 1
        assert "No packages/ directory" in result.output


class TestRun:
    @patch("compose_release.cli.run_pipeline")
    def test_explicit_trigger(self, mock_run: MagicMock, repo: Path) -> None:
        """Command-line options build the trigger instead of the environment."""
        mock_run.return_value = RunResult(mode=Mode.MERGE)

        result = CliRunner().invoke(
            cli,
            [
                "run",
                "--event", "push",
                "--base", "abc",
                "--head", "def",
                "--repository", "acme/stacks",
                "--dry-run",
            ],
        )

        assert result.exit_code == 0, result.output
        trigger, settings = mock_run.call_args[0]
        assert (trigger.event, trigger.base, trigger.head) == ("push", "abc", "def")
        assert trigger.owner == "acme"
        assert mock_run.call_args.kwargs == {"dry_run": True}

    @patch("compose_release.cli.run_pipeline")
    def test_failed_run_exits_nonzero(self, mock_run: MagicMock, repo: Path) -> None:
        """Any failed package makes the command exit 1."""
        mock_run.return_value = RunResult(
            mode=Mode.REVIEW,
            results=[
                PackageResult(package="cache", mode=Mode.REVIEW, outcome=Outcome.FAIL)
            ],
        )

        result = CliRunner().invoke(cli, ["run", "--event", "pull_request"])

        assert result.exit_code == 1

    def test_review_end_to_end(self, repo: Path) -> None:
        """A review run reports the failing package and exits 1."""
        write_package(repo, "cache", content=False)

        with patch("compose_release.changes.diff_paths") as mock_diff:
            mock_diff.return_value = ["packages/cache/package.json"]
            result = CliRunner().invoke(
                cli,
                ["run", "--event", "pull_request", "--base", "a", "--head", "b"],
            )

        assert result.exit_code == 1
        assert "ContentMissing" in result.output

    def test_without_event_needs_github_env(
        self, repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without --event the GitHub environment is required."""
        monkeypatch.delenv("GITHUB_EVENT_NAME", raising=False)

        result = CliRunner().invoke(cli, ["run"])

        assert result.exit_code == 1
        assert "GITHUB_EVENT_NAME" in result.output


class TestDetect:
    def test_manual_package(self, repo: Path) -> None:
        """A manual package is printed without diffing."""
        result = CliRunner().invoke(
            cli, ["detect", "--event", "workflow_dispatch", "--package", "web"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output.strip().splitlines()[-1]) == ["web"]

    @patch("compose_release.diff.git")
    def test_dispatch_without_package_finds_nothing(
        self, mock_git: MagicMock, repo: Path
    ) -> None:
        """A dispatch with no package and no base diffs head against itself."""
        mock_git.return_value = ""

        result = CliRunner().invoke(cli, ["detect", "--event", "workflow_dispatch"])

        assert result.exit_code == 0, result.output
        mock_git.assert_called_once_with("diff", "--name-only", "HEAD", "HEAD")
        assert json.loads(result.output.strip().splitlines()[-1]) == []

    @patch("compose_release.diff.git")
    def test_dispatch_keeps_explicit_head(
        self, mock_git: MagicMock, repo: Path
    ) -> None:
        """An explicit head is diffed against itself rather than the whole tree."""
        mock_git.return_value = ""

        CliRunner().invoke(
            cli, ["detect", "--event", "workflow_dispatch", "--head", "abc"]
        )

        mock_git.assert_called_once_with("diff", "--name-only", "abc", "abc")

    @patch("compose_release.changes.diff_paths")
    def test_diff_failure(self, mock_diff: MagicMock, repo: Path) -> None:
        """Git failures are reported as a clean CLI error."""
        mock_diff.side_effect = DiffError("git diff a..b failed: bad revision")

        result = CliRunner().invoke(
            cli, ["detect", "--event", "push", "--base", "a", "--head", "b"]
        )

        assert result.exit_code == 1
        assert "bad revision" in result.output


class TestValidate:
    def test_passes_valid_packages(self, repo: Path) -> None:
        """validate exits 0 when every named package is valid."""
        write_package(repo, "web")
        write_package(repo, "db", compose="docker-compose.yml")

        result = CliRunner().invoke(cli, ["validate", "web", "db"])

        assert result.exit_code == 0, result.output
        assert "Run passed" in result.output

    def test_fails_invalid_package(self, repo: Path) -> None:
        """validate exits 1 and names the failure."""
        write_package(repo, "db", {"name": "db"})

        result = CliRunner().invoke(cli, ["validate", "db"])

        assert result.exit_code == 1
        assert "ManifestInvalid" in result.output
