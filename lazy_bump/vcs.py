"""Git integration: tag lookup, dirty-tree check, commit and tag."""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from collections.abc import Iterable
from pathlib import Path

from .errors import VcsError
from .f_string import Field, FormatString
from .models import TagAndRevision
from .shell import git, git_streamed

logger = logging.getLogger(__name__)

_DESCRIBE = re.compile(
    r"^(?P<tag>.+)-(?P<distance>\d+)-g(?P<sha>[0-9a-f]+)(?P<dirty>-dirty)?$"
)


def tag_glob(tag_name: str) -> str:
    """Turn a tag name template like "v{new_version}" into a glob ("v*")."""
    fmt = FormatString.parse(tag_name)
    return "".join("*" if isinstance(s, Field) else s.text for s in fmt.segments)


def version_from_tag(tag: str, tag_name: str) -> str | None:
    """Extract the version from ``tag`` named after the ``tag_name`` template.

    Returns None when the tag doesn't match, or when the template can't be
    turned into a pattern (e.g. ``{new_version}`` appears twice).
    """
    fmt = FormatString.parse(tag_name)
    ctx = {name: ".*" for name in fmt.field_names}
    ctx["new_version"] = "(?P<current_version>.+)"
    pattern = fmt.format(ctx, escape_for_regex=True)
    try:
        match = re.fullmatch(pattern, tag)
    except re.error as exc:
        logger.warning("cannot match tags against %r: %s", tag_name, exc)
        return None
    if match is None or "current_version" not in match.groupdict():
        return None
    return match.group("current_version")


def short_branch_name(branch: str) -> str:
    """Lowercase alphanumeric form of ``branch``, at most 20 characters."""
    return re.sub(r"[^a-zA-Z0-9]", "", branch).lower()[:20]


class GitRepository:
    """A git working tree rooted at (or containing) ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _git(self, *args: str, check: bool = True) -> str:
        try:
            return git(*args, check=check, cwd=self.path)
        except FileNotFoundError as exc:
            raise VcsError("git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise VcsError(f"git {' '.join(args)} failed: {stderr}") from exc

    def _git_streamed(self, *args: str) -> None:
        try:
            git_streamed(*args, cwd=self.path)
        except FileNotFoundError as exc:
            raise VcsError("git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            raise VcsError(f"git {args[0]} failed with exit code {exc.returncode}") from exc

    def is_repository(self) -> bool:
        try:
            return bool(self._git("rev-parse", "--show-toplevel", check=False))
        except VcsError:
            return False

    def dirty_files(self) -> list[Path]:
        """Tracked files with uncommitted changes."""
        status = self._git("status", "--porcelain", "--untracked-files=no")
        dirty: list[Path] = []
        for line in status.splitlines():
            fields = line.split(maxsplit=1)
            if len(fields) == 2:
                # renames are reported as "old -> new"
                dirty.append(Path(fields[1].split(" -> ")[-1]))
        return dirty

    def latest_tag_and_revision(
        self, tag_name: str, parse_pattern: re.Pattern[str] | None = None
    ) -> TagAndRevision:
        """Describe HEAD relative to the latest tag matching ``tag_name``.

        The version is only taken from the tag if ``parse_pattern`` (when
        given) matches it.
        """
        info = TagAndRevision()
        if not self.is_repository():
            logger.debug("%s is not a git repository", self.path)
            return info

        root = self._git("rev-parse", "--show-toplevel")
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD", check=False)
        info = info.model_copy(
            update={
                "repository_root": Path(root),
                "branch_name": branch or None,
                "short_branch_name": short_branch_name(branch) if branch else None,
                "dirty": bool(self.dirty_files()),
            }
        )

        described = self._git(
            "describe",
            "--dirty",
            "--tags",
            "--long",
            "--abbrev=40",
            f"--match={tag_glob(tag_name)}",
            check=False,
        )
        match = _DESCRIBE.match(described)
        if match is None:
            sha = self._git("rev-parse", "HEAD", check=False)
            return info.model_copy(update={"commit_sha": sha or None})

        tag = match.group("tag")
        version = version_from_tag(tag, tag_name)
        if version is not None and parse_pattern is not None:
            if parse_pattern.search(version) is None:
                logger.warning("tag %s does not contain a parsable version", tag)
                version = None
        return info.model_copy(
            update={
                "tag": tag,
                "commit_sha": match.group("sha"),
                "distance_to_latest_tag": int(match.group("distance")),
                "current_version": version,
            }
        )

    def add(self, paths: Iterable[Path]) -> None:
        names = [str(p) for p in paths]
        if names:
            self._git("add", "--", *names)

    def commit(self, message: str, extra_args: str = "") -> None:
        self._git_streamed("commit", "-m", message, *shlex.split(extra_args))

    def tag(self, name: str, message: str | None = None, sign: bool = False) -> None:
        args = ["tag"]
        if sign:
            args.append("--sign")
        args.append(name)
        if message:
            args.extend(["--message", message])
        self._git_streamed(*args)
