"""Tests for lazy_bump.shell."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from lazy_bump.shell import git, step


class TestStep:
    def test_message_between_rules(self, capsys: pytest.CaptureFixture[str]) -> None:
        step("Committing")
        rule = "─" * 60
        assert capsys.readouterr().out == f"\n{rule}\nCommitting\n{rule}\n"


class TestGit:
    @patch("lazy_bump.shell.subprocess.run")
    def test_returns_stripped_stdout(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="abc\n")

        assert git("rev-parse", "HEAD") == "abc"
        mock_run.assert_called_once_with(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            cwd=None,
        )
