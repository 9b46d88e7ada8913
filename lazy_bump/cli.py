"""CLI entry point for lazy-bump."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from lazy_bump.errors import LazyBumpError
from lazy_bump.pipeline import run_bump, show_bump, show_variables


def _setup_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(package_name="lazy-bump")
@click.option(
    "-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug)."
)
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    default=".",
    show_default=True,
    help="Project directory containing the configuration.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, directory: Path) -> None:
    """Update version strings across your project from one configuration."""
    _setup_logging(verbose)
    ctx.obj = directory.resolve()


@cli.command()
@click.argument("component", required=False)
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option("--new-version", default=None, help="Set this version instead of bumping.")
@click.option("-n", "--dry-run", is_flag=True, help="Show changes only.")
@click.option(
    "--allow-dirty/--no-allow-dirty",
    default=None,
    help="Allow bumping with uncommitted changes.",
)
@click.option("--commit/--no-commit", default=None, help="Commit the changed files.")
@click.option("--tag/--no-tag", default=None, help="Tag the new version.")
@click.option(
    "--no-configured-files",
    is_flag=True,
    help="Only update FILES, not the files from the configuration.",
)
@click.option(
    "--fail-on-missing",
    is_flag=True,
    help="Fail when a search pattern matches nothing.",
)
@click.pass_obj
def bump(
    root: Path,
    component: str | None,
    files: tuple[Path, ...],
    new_version: str | None,
    dry_run: bool,
    allow_dirty: bool | None,
    commit: bool | None,
    tag: bool | None,
    no_configured_files: bool,
    fail_on_missing: bool,
) -> None:
    """Bump COMPONENT (e.g. major, minor, patch) and update all files."""
    if component is None and new_version is None:
        raise click.UsageError("Specify a COMPONENT to bump or --new-version.")
    if new_version is not None and component is not None:
        # with an explicit version every positional argument is a file
        files = (Path(component), *files)
        component = None
    # None leaves the configured value in place
    overrides = {
        "dry_run": dry_run or None,
        "allow_dirty": allow_dirty,
        "commit": commit,
        "tag": tag,
        "fail_on_missing": fail_on_missing or None,
    }
    try:
        result = run_bump(
            root,
            component,
            new_version=new_version,
            files=files,
            no_configured_files=no_configured_files,
            overrides=overrides,
        )
    except LazyBumpError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"\n✓ {result.bump.old} → {result.bump.new}")


@cli.command()
@click.argument("variables", nargs=-1, required=True)
@click.pass_obj
def show(root: Path, variables: tuple[str, ...]) -> None:
    """Print configuration and context VARIABLES (e.g. current_version)."""
    try:
        values = show_variables(root, variables)
    except LazyBumpError as exc:
        raise click.ClickException(str(exc)) from exc
    for name, value in values.items():
        if value is None:
            continue
        if len(variables) > 1:
            click.echo(f"{name}={value}")
        else:
            click.echo(value)


@cli.command("show-bump")
@click.argument("component")
@click.pass_obj
def show_bump_cmd(root: Path, component: str) -> None:
    """Show the version that bumping COMPONENT would produce."""
    try:
        result = show_bump(root, component)
    except LazyBumpError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"old_version={result.old}")
    click.echo(f"new_version={result.new}")
