"""Reading and rewriting the TOML files that hold bump configuration.

tomlkit keeps comments, key order and the existing line endings, so a
rewrite of ``current_version`` touches only that one value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError, FileIoError


def read_toml_text(path: Path) -> str:
    """Return the raw text at ``path`` with its line endings untouched."""
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIoError(path, exc) from exc


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    return parse_toml(read_toml_text(path), path)


def parse_toml(text: str, path: Path | None = None) -> tomlkit.TOMLDocument:
    try:
        return tomlkit.parse(text)
    except TOMLKitError as exc:
        where = f" in {path}" if path is not None else ""
        raise ConfigError(f"invalid TOML{where}: {exc}") from exc


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Write ``doc`` to ``path`` exactly as tomlkit renders it.

    No newline translation happens, so CRLF files stay CRLF.
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(tomlkit.dumps(doc))
    except OSError as exc:
        raise FileIoError(path, exc) from exc


def get_bumpversion_table(doc: tomlkit.TOMLDocument) -> Any | None:
    """Return the [tool.bumpversion] table, or None if there isn't one."""
    return doc.get("tool", {}).get("bumpversion")


def set_current_version(doc: tomlkit.TOMLDocument, version: str) -> None:
    """Set [tool.bumpversion].current_version in place.

    Raises:
        ConfigError: If the document has no [tool.bumpversion] table.
    """
    table = get_bumpversion_table(doc)
    if table is None:
        raise ConfigError("no [tool.bumpversion] table to update")
    table["current_version"] = version
