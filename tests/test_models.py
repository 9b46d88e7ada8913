"""Tests for lazy_bump.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lazy_bump.models import (
    ComponentSpec,
    FileChange,
    Modification,
    Replacement,
    VersionBump,
)
from lazy_bump.regex import RegexTemplate


class TestComponentSpec:
    def test_defaults(self) -> None:
        spec = ComponentSpec()
        assert spec.values == ()
        assert spec.first_value is None
        assert spec.optional_value is None

    def test_values_from_list(self) -> None:
        spec = ComponentSpec.model_validate({"values": ["alpha", "beta"]})
        assert spec.values == ("alpha", "beta")

    def test_is_frozen(self) -> None:
        spec = ComponentSpec()
        with pytest.raises(ValidationError):
            spec.first_value = "1"  # type: ignore[misc]


class TestFileChange:
    def test_defaults(self) -> None:
        change = FileChange()
        assert change.search == RegexTemplate("{current_version}")
        assert change.replace == "{new_version}"
        assert [str(p) for p in change.serialize_version_patterns] == [
            "{major}.{minor}.{patch}"
        ]
        assert change.parse_version_pattern.groupindex.keys() == {
            "major",
            "minor",
            "patch",
        }

    def test_search_from_string(self) -> None:
        change = FileChange.model_validate({"search": "version = {current_version}"})
        assert change.search == RegexTemplate("version = {current_version}")

    def test_applies_to_everything_by_default(self) -> None:
        change = FileChange()
        assert change.applies_to("major")
        assert change.applies_to(None)

    def test_include_bumps(self) -> None:
        change = FileChange(include_bumps=("major", "minor"))
        assert change.applies_to("minor")
        assert not change.applies_to("patch")

    def test_exclude_bumps(self) -> None:
        change = FileChange(exclude_bumps=("patch",))
        assert change.will_not_bump_component("patch")
        assert not change.applies_to("patch")
        assert change.applies_to("major")

    def test_exclude_wins_over_include(self) -> None:
        change = FileChange(include_bumps=("patch",), exclude_bumps=("patch",))
        assert not change.applies_to("patch")

    def test_explicit_version_ignores_filters(self) -> None:
        change = FileChange(include_bumps=("major",), exclude_bumps=("minor",))
        assert change.applies_to(None)


class TestModification:
    def test_unchanged(self) -> None:
        modification = Modification(before="1.2.3\n", after="1.2.3\n")
        assert not modification.changed
        assert modification.diff() is None

    def test_diff(self) -> None:
        modification = Modification(
            before="name\nversion = 1.2.3\n", after="name\nversion = 1.2.4\n"
        )
        diff = modification.diff("setup.cfg")
        assert diff is not None
        assert "--- setup.cfg (before)" in diff
        assert "+++ setup.cfg (after)" in diff
        assert "-version = 1.2.3\n" in diff
        assert "+version = 1.2.4\n" in diff

    def test_diff_without_path(self) -> None:
        diff = Modification(before="1", after="2").diff()
        assert diff is not None
        assert diff.startswith("--- before\n+++ after\n")

    def test_diff_marks_missing_final_newline(self) -> None:
        diff = Modification(before="1.2.3", after="1.2.4").diff()
        assert diff is not None
        assert "\\ No newline at end of file" in diff

    def test_replacements_default_empty(self) -> None:
        assert Modification(before="", after="").replacements == []

    def test_replacement_record(self) -> None:
        replacement = Replacement(
            search_pattern="{current_version}",
            search=r"1\.2\.3",
            replace_pattern="{new_version}",
            replace="1.2.4",
        )
        assert replacement.count == 0


class TestVersionBump:
    def test_create(self) -> None:
        bump = VersionBump(old="1.0.0", new="1.0.1")
        assert bump.old == "1.0.0"
        assert bump.new == "1.0.1"
