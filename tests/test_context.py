"""Tests for lazy_bump.context."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from lazy_bump.context import base_context, get_context
from lazy_bump.models import TagAndRevision
from lazy_bump.versions import Version


class TestBaseContext:
    def test_timestamps(self) -> None:
        ctx = base_context()
        assert "now" in ctx
        assert ctx["utcnow"].endswith("+00:00")

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BUILD_NUMBER", "42")
        assert base_context()["$BUILD_NUMBER"] == "42"

    def test_tag_and_revision(self) -> None:
        info = TagAndRevision(
            tag="v1.2.3",
            commit_sha="abc123",
            distance_to_latest_tag=4,
            current_version="1.2.3",
            dirty=True,
            branch_name="feature/x",
            short_branch_name="featurex",
            repository_root=Path("/repo"),
        )
        ctx = base_context(info)
        assert ctx["tag"] == "v1.2.3"
        assert ctx["distance_to_latest_tag"] == "4"
        assert ctx["dirty"] == "true"
        assert ctx["short_branch_name"] == "featurex"
        assert ctx["repository_root"] == str(Path("/repo"))
        # the tagged version is exposed under its own name
        assert ctx["current_tag_version"] == "1.2.3"
        assert "current_version" not in ctx

    def test_unset_fields_are_left_out(self) -> None:
        ctx = base_context(TagAndRevision())
        assert "tag" not in ctx
        assert ctx["dirty"] == "false"


class TestGetContext:
    def test_component_values(self, make_version: Callable[[str], Version]) -> None:
        ctx = get_context(None, make_version("1.2.3"), make_version("1.3.0"))
        assert ctx["current_major"] == "1"
        assert ctx["current_patch"] == "3"
        assert ctx["new_minor"] == "3"
        assert ctx["new_patch"] == "0"
        assert "current_version" not in ctx

    def test_serialized_versions(self, make_version: Callable[[str], Version]) -> None:
        ctx = get_context(
            TagAndRevision(current_version="1.0.0"),
            make_version("1.2.3"),
            make_version("1.3.0"),
            "1.2.3",
            "1.3.0",
        )
        assert ctx["current_version"] == "1.2.3"
        assert ctx["new_version"] == "1.3.0"
        assert ctx["current_tag_version"] == "1.0.0"
