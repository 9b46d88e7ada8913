"""Tests for lazy_bump.cli."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from lazy_bump.cli import cli
from lazy_bump.models import TagAndRevision


@pytest.fixture(autouse=True)
def repo() -> Iterator[MagicMock]:
    """Run every command against a clean checkout with no tags."""
    with patch("lazy_bump.pipeline.GitRepository") as mock_repo_cls:
        mock = mock_repo_cls.return_value
        mock.is_repository.return_value = True
        mock.dirty_files.return_value = []
        mock.latest_tag_and_revision.return_value = TagAndRevision()
        yield mock


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestShow:
    def test_single_variable(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "show", "current_version"])
        assert result.exit_code == 0, result.output
        assert result.stdout == "1.2.3\n"

    def test_several_variables(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(
            cli, ["--dir", str(project), "show", "current_version", "commit"]
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == "current_version=1.2.3\ncommit=false\n"

    def test_requires_variable(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "show"])
        assert result.exit_code == 2

    def test_without_config(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(tmp_path), "show", "current_version"])
        assert result.exit_code == 1
        assert "no configuration found" in result.output


class TestShowBump:
    def test_major(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "show-bump", "major"])
        assert result.exit_code == 0, result.output
        assert result.stdout == "old_version=1.2.3\nnew_version=2.0.0\n"

    def test_unknown_component(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "show-bump", "build"])
        assert result.exit_code == 1
        assert "unknown version component 'build'" in result.output


class TestBump:
    def test_bump_patch(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "bump", "patch"])

        assert result.exit_code == 0, result.output
        assert "✓ 1.2.3 → 1.2.4" in result.output
        assert (project / "VERSION").read_text() == "1.2.4"
        assert 'current_version = "1.2.4"' in (project / ".bumpversion.toml").read_text()

    def test_dry_run(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "bump", "--dry-run", "minor"])

        assert result.exit_code == 0, result.output
        assert "-1.2.3" in result.output
        assert "+1.3.0" in result.output
        assert (project / "VERSION").read_text() == "1.2.3"
        assert 'current_version = "1.2.3"' in (project / ".bumpversion.toml").read_text()

    def test_new_version_with_files(self, runner: CliRunner, project: Path) -> None:
        """With --new-version every argument names a file."""
        (project / "README").write_text("version 1.2.3")

        result = runner.invoke(
            cli, ["--dir", str(project), "bump", "--new-version", "5.0.0", "README"]
        )

        assert result.exit_code == 0, result.output
        assert (project / "README").read_text() == "version 5.0.0"
        assert (project / "VERSION").read_text() == "5.0.0"

    def test_commit_and_tag_flags(
        self, runner: CliRunner, project: Path, repo: MagicMock
    ) -> None:
        result = runner.invoke(
            cli, ["--dir", str(project), "bump", "--commit", "--tag", "major"]
        )

        assert result.exit_code == 0, result.output
        repo.commit.assert_called_once_with("Bump version: 1.2.3 → 2.0.0", "")
        repo.tag.assert_called_once_with(
            "v2.0.0", "Bump version: 1.2.3 → 2.0.0", sign=False
        )

    def test_dirty_tree(self, runner: CliRunner, project: Path, repo: MagicMock) -> None:
        repo.dirty_files.return_value = [Path("VERSION")]

        result = runner.invoke(cli, ["--dir", str(project), "bump", "patch"])

        assert result.exit_code == 1
        assert "Working directory is not clean" in result.output

        result = runner.invoke(
            cli, ["--dir", str(project), "bump", "--allow-dirty", "patch"]
        )

        assert result.exit_code == 0, result.output

    def test_fail_on_missing(self, runner: CliRunner, project: Path) -> None:
        (project / "VERSION").write_text("0.0.1")

        result = runner.invoke(
            cli, ["--dir", str(project), "bump", "--fail-on-missing", "patch"]
        )

        assert result.exit_code == 1
        assert "did not find" in result.output

    def test_needs_component_or_version(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--dir", str(project), "bump"])
        assert result.exit_code == 2
        assert "--new-version" in result.output

    def test_max_value(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / ".bumpversion.toml").write_text(
            """\
[tool.bumpversion]
current_version = "1-final"
parse = '(?P<major>\\d+)-(?P<release>\\w+)'
serialize = ["{major}-{release}"]

[tool.bumpversion.parts.release]
values = ["dev", "final"]
"""
        )

        result = runner.invoke(cli, ["--dir", str(tmp_path), "bump", "release"])

        assert result.exit_code == 1
        assert "maximum value" in result.output
