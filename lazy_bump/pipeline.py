"""Bump pipeline: configure → parse → bump → update files → commit → tag.

This module orchestrates a version bump:
1. Load the [tool.bumpversion] configuration
2. Look up the latest tag and check the working tree is clean
3. Parse the current version and compute the new one
4. Update every configured file, then the configuration itself
5. Commit and tag the result, if configured

Dry runs go through every step, including all validation, but leave files,
commits and tags untouched and print diffs instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .config import Config, find_config, update_config_file
from .context import get_context
from .errors import ConfigError, VcsError
from .f_string import FormatString
from .files import (
    FileMap,
    files_to_modify,
    replace_version_in_file,
    resolve_files_from_config,
)
from .models import BumpResult, Modification, TagAndRevision, VersionBump
from .shell import step
from .vcs import GitRepository
from .versions import Version, VersionSpec

logger = logging.getLogger(__name__)


def parse_current_version(config: Config, spec: VersionSpec) -> Version:
    """Parse the configured current_version.

    Raises:
        ConfigError: If current_version is unset or doesn't match ``parse``.
    """
    if config.current_version is None:
        raise ConfigError("missing current_version in configuration")
    version = Version.parse(config.current_version, config.parse_pattern(), spec)
    if version is None:
        raise ConfigError(
            f"current_version {config.current_version!r} does not match "
            f"parse pattern {config.parse!r}"
        )
    return version


def compute_new_version(
    config: Config,
    current: Version,
    component: str | None = None,
    new_version: str | None = None,
) -> Version:
    """Bump ``component`` of ``current``, or parse an explicit ``new_version``.

    Raises:
        ConfigError: If neither is given, or ``new_version`` doesn't parse.
        BumpError: If ``component`` can't be bumped.
    """
    if new_version is not None:
        parsed = Version.parse(new_version, config.parse_pattern(), current.spec)
        if parsed is None:
            raise ConfigError(
                f"new version {new_version!r} does not match parse pattern {config.parse!r}"
            )
        return parsed
    if component is None:
        raise ConfigError("missing version component to bump")
    return current.bump(component)


def check_is_dirty(repo: GitRepository, config: Config) -> None:
    """Refuse to bump in a dirty working tree unless allow_dirty is set.

    Raises:
        VcsError: If tracked files have uncommitted changes.
    """
    if config.allow_dirty or not repo.is_repository():
        return
    dirty = repo.dirty_files()
    if dirty:
        listing = "\n".join(f"  {p}" for p in dirty)
        raise VcsError(f"Working directory is not clean:\n\n{listing}")


def select_files(
    config: Config,
    root: Path,
    files: Iterable[Path] = (),
    no_configured_files: bool = False,
) -> FileMap:
    """Resolve configured files, then apply command-line file selection."""
    file_map = resolve_files_from_config(config, base_dir=root)
    excluded = list(file_map) if no_configured_files else []
    included = [p if p.is_absolute() else root / p for p in files]
    return files_to_modify(file_map, included, excluded, config.default_change())


def update_files(
    file_map: FileMap,
    current: Version,
    new: Version,
    ctx: Mapping[str, str],
    *,
    component: str | None = None,
    dry_run: bool = False,
    fail_on_missing: bool = False,
) -> dict[Path, Modification]:
    """Apply the changes relevant to ``component`` to each file."""
    step(f"Updating {len(file_map)} files")

    modifications: dict[Path, Modification] = {}
    for path, changes in file_map.items():
        relevant = [c for c in changes if c.applies_to(component)]
        if not relevant:
            print(f"  {path}: skipped (no changes for {component})")
            continue
        modification = replace_version_in_file(
            path,
            relevant,
            current,
            new,
            ctx,
            dry_run,
            fail_on_missing=fail_on_missing,
        )
        if modification is None:
            print(f"  {path}: missing, skipped")
            continue
        modifications[path] = modification
        replaced = sum(r.count for r in modification.replacements)
        print(f"  {path}: {replaced} replacement(s)")
    return modifications


def commit_and_tag(
    repo: GitRepository,
    config: Config,
    paths: Iterable[Path],
    ctx: Mapping[str, str],
) -> None:
    """Commit ``paths`` and create a tag, as configured."""
    if not (config.commit or config.tag):
        return
    if not repo.is_repository():
        logger.warning("not a git repository, skipping commit and tag")
        return

    if config.commit:
        step("Committing")
        message = FormatString.parse(config.message).format(ctx)
        repo.add(paths)
        repo.commit(message, config.commit_args)
        print(f"  {message}")

    if config.tag:
        step("Tagging")
        name = FormatString.parse(config.tag_name).format(ctx)
        message = FormatString.parse(config.tag_message).format(ctx)
        repo.tag(name, message, sign=config.sign_tags)
        print(f"  {name}")


def run_bump(
    root: Path,
    component: str | None = None,
    *,
    new_version: str | None = None,
    files: Iterable[Path] = (),
    no_configured_files: bool = False,
    overrides: Mapping[str, Any] | None = None,
) -> BumpResult:
    """Execute a full bump in the project at ``root``.

    Args:
        root: Project directory holding the configuration.
        component: Version component to bump.
        new_version: Explicit new version, used instead of bumping.
        files: Extra files to update with the default search/replace.
        no_configured_files: Only update ``files``, not the configured ones.
        overrides: Configuration values that take precedence over the file.
    """
    step("Loading configuration")
    config_path, config = find_config(root, overrides)
    print(f"  {config_path}")

    repo = GitRepository(root)
    tag_and_revision = repo.latest_tag_and_revision(config.tag_name, config.parse_pattern())
    _warn_on_version_mismatch(config, tag_and_revision)
    check_is_dirty(repo, config)

    step("Bumping version")
    spec = config.version_spec()
    current = parse_current_version(config, spec)
    new = compute_new_version(config, current, component, new_version)

    base_ctx = get_context(tag_and_revision, current, new)
    current_serialized = current.serialize(config.serialize, base_ctx)
    new_serialized = new.serialize(config.serialize, base_ctx)
    bump = VersionBump(old=current_serialized, new=new_serialized)
    print(f"  {bump.old} → {bump.new}")

    ctx = get_context(tag_and_revision, current, new, current_serialized, new_serialized)
    file_map = select_files(config, root, files, no_configured_files)
    # an explicit new version applies every change
    bumped_component = component if new_version is None else None
    modifications = update_files(
        file_map,
        current,
        new,
        ctx,
        component=bumped_component,
        dry_run=config.dry_run,
        fail_on_missing=config.fail_on_missing,
    )

    step("Updating configuration")
    config_modification = update_config_file(config_path, new_serialized, config.dry_run)
    print(f"  {config_path}")

    result = BumpResult(
        bump=bump,
        modifications=modifications,
        config_modification=config_modification,
        dry_run=config.dry_run,
    )

    if config.dry_run:
        _print_diffs(result, config_path)
        print("\nDry run: no files were changed.")
        return result

    changed = [p for p, m in modifications.items() if m.changed]
    if config_modification.changed:
        changed.append(config_path)
    commit_and_tag(repo, config, changed, ctx)
    return result


def show_variables(
    root: Path, names: Iterable[str], overrides: Mapping[str, Any] | None = None
) -> dict[str, str | None]:
    """Look up context variables (or configuration values) by name."""
    config_path, config = find_config(root, overrides)
    repo = GitRepository(root)
    tag_and_revision = repo.latest_tag_and_revision(config.tag_name, config.parse_pattern())

    current: Version | None = None
    if config.current_version is not None:
        current = Version.parse(
            config.current_version, config.parse_pattern(), config.version_spec()
        )
    ctx = get_context(tag_and_revision, current, None, config.current_version)
    file_map = resolve_files_from_config(config, base_dir=root)
    ctx["files"] = "\n".join(str(p) for p in file_map)
    ctx["config_file"] = str(config_path)

    values: dict[str, str | None] = {}
    for name in names:
        if name in ctx:
            values[name] = ctx[name]
        elif name in Config.model_fields:
            values[name] = _format_config_value(getattr(config, name))
        else:
            logger.warning("variable %s not found", name)
            values[name] = None
    return values


def show_bump(
    root: Path, component: str, overrides: Mapping[str, Any] | None = None
) -> VersionBump:
    """Compute, without changing anything, what bumping ``component`` gives."""
    _, config = find_config(root, overrides)
    repo = GitRepository(root)
    tag_and_revision = repo.latest_tag_and_revision(config.tag_name, config.parse_pattern())

    spec = config.version_spec()
    current = parse_current_version(config, spec)
    new = current.bump(component)
    ctx = get_context(tag_and_revision, current, new, config.current_version)
    return VersionBump(
        old=current.serialize(config.serialize, ctx),
        new=new.serialize(config.serialize, ctx),
    )


def _warn_on_version_mismatch(config: Config, tag_and_revision: TagAndRevision) -> None:
    tagged = tag_and_revision.current_version
    if config.current_version and tagged and config.current_version != tagged:
        logger.warning(
            "version %s from config does not match last tagged version (%s)",
            config.current_version,
            tagged,
        )


def _format_config_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _print_diffs(result: BumpResult, config_path: Path) -> None:
    step("Changes (dry run)")
    entries = [*result.modifications.items()]
    if result.config_modification is not None:
        entries.append((config_path, result.config_modification))
    for path, modification in entries:
        diff = modification.diff(path)
        if diff:
            print(diff)
