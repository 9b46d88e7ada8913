"""Data models for lazy-bump.

These Pydantic models represent the configuration and result records
passed between the version engine, the file updater and the CLI.
"""

from __future__ import annotations

import difflib
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .f_string import FormatString
from .regex import RegexTemplate

DEFAULT_PARSE = r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
DEFAULT_SERIALIZE = "{major}.{minor}.{patch}"
DEFAULT_SEARCH = "{current_version}"
DEFAULT_REPLACE = "{new_version}"


class ComponentSpec(BaseModel):
    """Bump/reset rules for one version component.

    Attributes:
        values: Allowed values in bump order. Empty means the component is
                numeric.
        first_value: Value the component resets to.
        optional_value: Value treated as "absent": a component holding it
                        may be left out of the serialized version.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[str, ...] = ()
    first_value: str | None = None
    optional_value: str | None = None


class FileChange(BaseModel):
    """One search/replace rule bound to a target file.

    Attributes:
        parse_version_pattern: Regex with named groups per version component.
        serialize_version_patterns: Candidate templates, most preferred first.
        search: Template for the text to find.
        replace: Template for the replacement text.
        ignore_missing_version: Don't complain when ``search`` doesn't match.
        ignore_missing_file: Skip the file silently when it doesn't exist.
        include_bumps: If set, only bumps of these components apply.
        exclude_bumps: Bumps of these components never apply.
    """

    model_config = ConfigDict(frozen=True)

    parse_version_pattern: re.Pattern[str] = Field(
        default_factory=lambda: re.compile(DEFAULT_PARSE)
    )
    serialize_version_patterns: tuple[FormatString, ...] = (
        FormatString(DEFAULT_SERIALIZE),
    )
    search: RegexTemplate = RegexTemplate(DEFAULT_SEARCH)
    replace: str = DEFAULT_REPLACE
    ignore_missing_version: bool = False
    ignore_missing_file: bool = False
    include_bumps: tuple[str, ...] | None = None
    exclude_bumps: tuple[str, ...] | None = None

    def will_bump_component(self, component: str) -> bool:
        return self.include_bumps is None or component in self.include_bumps

    def will_not_bump_component(self, component: str) -> bool:
        return self.exclude_bumps is not None and component in self.exclude_bumps

    def applies_to(self, component: str | None) -> bool:
        """Whether this change takes part in bumping ``component``.

        ``None`` stands for setting an explicit new version, which every
        change takes part in.
        """
        if component is None:
            return True
        return self.will_bump_component(component) and not self.will_not_bump_component(
            component
        )


class Replacement(BaseModel):
    """A single substitution made while updating a file.

    Attributes:
        search_pattern: Search template as configured.
        search: Rendered regular expression.
        replace_pattern: Replace template as configured.
        replace: Rendered replacement text.
        count: Number of matches replaced.
    """

    search_pattern: str
    search: str
    replace_pattern: str
    replace: str
    count: int = 0


class Modification(BaseModel):
    """Before/after content of one file plus the replacements applied."""

    before: str
    after: str
    replacements: list[Replacement] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.before != self.after

    def diff(self, path: Path | str | None = None) -> str | None:
        """Unified diff of the change, or None when nothing changed.

        If ``path`` is given it labels both sides of the diff.
        """
        if not self.changed:
            return None
        if path is not None:
            label_before, label_after = f"{path} (before)", f"{path} (after)"
        else:
            label_before, label_after = "before", "after"
        lines = difflib.unified_diff(
            _diff_lines(self.before),
            _diff_lines(self.after),
            fromfile=label_before,
            tofile=label_after,
        )
        return "".join(lines)


def _diff_lines(text: str) -> list[str]:
    # unified_diff concatenates lines as given, so every line needs its newline
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith(("\n", "\r")):
        lines[-1] += "\n\\ No newline at end of file\n"
    return lines


class VersionBump(BaseModel):
    """Records a version change.

    Attributes:
        old: The serialized version before bumping.
        new: The serialized version after bumping.
    """

    old: str
    new: str


class TagAndRevision(BaseModel):
    """What version control knows about the current checkout.

    Attributes:
        tag: Latest tag matching the configured tag name, if any.
        commit_sha: Commit the latest tag points to.
        distance_to_latest_tag: Commits between the tag and HEAD.
        current_version: Version parsed from the tag name.
        dirty: Whether the working tree has uncommitted changes.
        branch_name: Current branch.
        short_branch_name: Branch name reduced to lowercase alphanumerics,
                           at most 20 characters.
        repository_root: Top-level directory of the repository.
    """

    tag: str | None = None
    commit_sha: str | None = None
    distance_to_latest_tag: int = 0
    current_version: str | None = None
    dirty: bool = False
    branch_name: str | None = None
    short_branch_name: str | None = None
    repository_root: Path | None = None


class BumpResult(BaseModel):
    """Outcome of a bump.

    Attributes:
        bump: Serialized old and new version.
        modifications: Per-file changes, in processing order. Files that
                       were skipped because they don't exist are absent.
        config_modification: Change to the configuration file, if any.
        dry_run: Whether files were left untouched.
    """

    bump: VersionBump
    modifications: dict[Path, Modification] = Field(default_factory=dict)
    config_modification: Modification | None = None
    dry_run: bool = False
