"""Search and replace version strings in project files.

replace_version() applies a file's configured changes to its content in
order, each change seeing the output of the previous one.
replace_version_in_file() wraps it with reading and writing the file.
The remaining helpers turn the [[tool.bumpversion.files]] configuration
into a map of concrete paths to changes.
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import (
    FileIoError,
    MissingArgumentError,
    ParseError,
    RegexTemplateError,
    ReplaceMissingArgumentError,
    ReplaceParseError,
    ReplaceRegexError,
    ReplaceSerializeError,
    SerializeError,
    VersionNotFoundError,
)
from .f_string import FormatString
from .models import FileChange, Modification, Replacement
from .versions import Version

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

FileMap = dict[Path, list[FileChange]]


def replace_version(
    before: str,
    changes: Sequence[FileChange],
    current_version: Version,
    new_version: Version,
    ctx: Mapping[str, str],
    *,
    fail_on_missing: bool = False,
    path: Path | None = None,
) -> Modification:
    """Apply ``changes`` to ``before`` and record what was replaced.

    For each change both versions are serialized with the change's own
    patterns, then exposed to its search and replace templates as
    ``current_version`` and ``new_version``. Every match of the search
    pattern is replaced literally.

    A search pattern that matches nothing is logged and skipped, unless
    ``fail_on_missing`` is set and the change doesn't ignore missing
    versions.

    Args:
        before: Original content.
        changes: Changes to apply, in order.
        current_version: Version currently in the content.
        new_version: Version to write.
        ctx: Extra template variables.
        fail_on_missing: Raise instead of skipping a pattern with no match.
        path: Only used to label log messages and errors.

    Raises:
        ReplaceVersionError: If a template can't be serialized, rendered or
            compiled, or a pattern is missing while ``fail_on_missing`` is
            set. Template failures are raised as subclasses that are also
            instances of the underlying error kind (e.g. ReplaceRegexError
            is a RegexTemplateError) and are chained to it.
    """
    after = before
    replacements: list[Replacement] = []
    for change in changes:
        logger.debug("update search=%r replace=%r", str(change.search), change.replace)
        try:
            # each change may serialize versions differently
            current_serialized = current_version.serialize(
                change.serialize_version_patterns, ctx
            )
            new_serialized = new_version.serialize(change.serialize_version_patterns, ctx)
            change_ctx = {
                **ctx,
                "current_version": current_serialized,
                "new_version": new_serialized,
            }
            search_regex = change.search.format(change_ctx)
            replacement = FormatString.parse(change.replace).format(change_ctx)
        except SerializeError as exc:
            raise ReplaceSerializeError(exc, path) from exc
        except MissingArgumentError as exc:
            raise ReplaceMissingArgumentError(exc, path) from exc
        except ParseError as exc:
            raise ReplaceParseError(exc, path) from exc
        except RegexTemplateError as exc:
            raise ReplaceRegexError(exc, path) from exc

        # a callable replacement is inserted literally (no group expansion)
        after, count = search_regex.subn(lambda _: replacement, after)
        if count == 0:
            if change.ignore_missing_version:
                logger.info("did not find %r in %s", search_regex.pattern, path or "content")
            elif fail_on_missing:
                raise VersionNotFoundError(search_regex.pattern, path)
            else:
                logger.warning(
                    "did not find %r in %s", search_regex.pattern, path or "content"
                )

        replacements.append(
            Replacement(
                search_pattern=str(change.search),
                search=search_regex.pattern,
                replace_pattern=change.replace,
                replace=replacement,
                count=count,
            )
        )

    return Modification(before=before, after=after, replacements=replacements)


def replace_version_in_file(
    path: Path,
    changes: Sequence[FileChange],
    current_version: Version,
    new_version: Version,
    ctx: Mapping[str, str],
    dry_run: bool,
    *,
    fail_on_missing: bool = False,
) -> Modification | None:
    """Apply ``changes`` to the file at ``path``.

    Returns None if the file doesn't exist and every change allows that.
    The file is only written when its content changed and ``dry_run`` is
    not set.

    Raises:
        FileIoError: If the file is missing (and not ignored), unreadable,
            not valid UTF-8 or unwritable.
        ReplaceVersionError: See replace_version().
    """
    if not path.is_file():
        if all(change.ignore_missing_file for change in changes):
            logger.info("file not found: %s", path)
            return None
        raise FileIoError(path, FileNotFoundError(f"{path} not found"))

    try:
        # newline="" keeps line endings as they are on disk
        with open(path, encoding="utf-8", newline="") as fh:
            before = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIoError(path, exc) from exc

    modification = replace_version(
        before,
        changes,
        current_version,
        new_version,
        ctx,
        fail_on_missing=fail_on_missing,
        path=path,
    )

    if not modification.changed:
        logger.info("no change after version replacement in %s", path)
    elif not dry_run:
        try:
            with open(path, "w", encoding="utf-8", newline="") as fh:
                fh.write(modification.after)
        except OSError as exc:
            raise FileIoError(path, exc) from exc
    return modification


def resolve_glob_files(pattern: str, exclude_patterns: Iterable[str] = ()) -> list[Path]:
    """Expand ``pattern`` minus everything matched by ``exclude_patterns``."""
    included = {Path(p) for p in glob.glob(pattern, recursive=True)}
    excluded: set[Path] = set()
    for exclude in exclude_patterns:
        excluded.update(Path(p) for p in glob.glob(exclude, recursive=True))
    return sorted(p for p in included - excluded if p.is_file())


def resolve_files_from_config(config: Config, base_dir: Path | None = None) -> FileMap:
    """Build the map of target paths to changes from ``config``.

    Glob patterns are expanded and relative paths are resolved under
    ``base_dir``. A path listed several times collects all its changes, in
    configuration order.
    """
    file_map: FileMap = {}
    for file_config in config.files:
        change = config.file_change(file_config)
        if file_config.glob is not None:
            pattern = file_config.glob
            excludes = list(file_config.glob_exclude)
            if base_dir is not None:
                pattern = str(base_dir / pattern)
                excludes = [str(base_dir / e) for e in excludes]
            paths = resolve_glob_files(pattern, excludes)
            if not paths:
                logger.warning("glob %r matched no files", file_config.glob)
        else:
            filename = Path(file_config.filename or "")
            if base_dir is not None and not filename.is_absolute():
                filename = base_dir / filename
            paths = [filename]

        for path in paths:
            file_map.setdefault(path.resolve(), []).append(change)
    return file_map


def files_to_modify(
    file_map: FileMap,
    included: Iterable[Path] = (),
    excluded: Iterable[Path] = (),
    default_change: FileChange | None = None,
) -> FileMap:
    """Filter ``file_map`` by explicit include/exclude path lists.

    Excluded paths are dropped first; included paths are then added back,
    even when excluded. An included path that isn't configured gets
    ``default_change``.
    """
    excluded_set = {p.resolve() for p in excluded}
    included_list = [p.resolve() for p in included]

    selected: FileMap = {
        path: changes for path, changes in file_map.items() if path not in excluded_set
    }
    for path in included_list:
        if path in selected:
            continue
        if path in file_map:
            selected[path] = file_map[path]
        else:
            selected[path] = [default_change] if default_change is not None else []
    return selected
