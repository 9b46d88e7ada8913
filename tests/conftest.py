"""Shared test fixtures."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

import pytest

from lazy_bump.models import ComponentSpec
from lazy_bump.versions import Version, VersionSpec

SEMVER_PARSE = re.compile(r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)")


@pytest.fixture
def semver_spec() -> VersionSpec:
    """major.minor.patch with default numeric components."""
    return VersionSpec.from_components(
        {
            "major": ComponentSpec(),
            "minor": ComponentSpec(),
            "patch": ComponentSpec(),
        }
    )


@pytest.fixture
def make_version(semver_spec: VersionSpec) -> Callable[[str], Version]:
    """Parse a "1.2.3" style string into a semver Version."""

    def _make(text: str) -> Version:
        version = Version.parse(text, SEMVER_PARSE, semver_spec)
        assert version is not None
        return version

    return _make


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project directory with a .bumpversion.toml and a VERSION file."""
    (tmp_path / ".bumpversion.toml").write_text(
        """\
[tool.bumpversion]
current_version = "1.2.3"

[[tool.bumpversion.files]]
filename = "VERSION"
"""
    )
    (tmp_path / "VERSION").write_text("1.2.3")
    return tmp_path
