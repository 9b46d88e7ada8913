"""Loading and updating the [tool.bumpversion] configuration.

The configuration lives in ``.bumpversion.toml`` or ``pyproject.toml``.
It describes the version components, the default search/replace rules,
and the files to update, each of which may override the defaults.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ConfigError
from .f_string import FormatString
from .models import (
    DEFAULT_PARSE,
    DEFAULT_REPLACE,
    DEFAULT_SEARCH,
    DEFAULT_SERIALIZE,
    ComponentSpec,
    FileChange,
    Modification,
)
from .regex import RegexTemplate, compile_parse_pattern
from .toml import (
    get_bumpversion_table,
    load_toml,
    parse_toml,
    read_toml_text,
    save_toml,
    set_current_version,
)
from .versions import VersionSpec

logger = logging.getLogger(__name__)

# Searched in this order; the first file with a [tool.bumpversion] table wins
CONFIG_FILE_NAMES = (".bumpversion.toml", "pyproject.toml")

DEFAULT_MESSAGE = "Bump version: {current_version} → {new_version}"
DEFAULT_TAG_NAME = "v{new_version}"


def _check_pattern(value: str) -> str:
    try:
        re.compile(value)
    except re.error as exc:
        raise ValueError(f"invalid parse pattern {value!r}: {exc}") from exc
    return value


ParsePattern = Annotated[str, AfterValidator(_check_pattern)]


class FileConfig(BaseModel):
    """One [[tool.bumpversion.files]] entry.

    Unset options fall back to the global configuration.
    """

    filename: str | None = None
    glob: str | None = None
    glob_exclude: list[str] = Field(default_factory=list)
    parse: ParsePattern | None = None
    serialize: list[FormatString] | None = None
    search: str | None = None
    replace: str | None = None
    regex: bool | None = None
    ignore_missing_version: bool | None = None
    ignore_missing_file: bool | None = None
    include_bumps: list[str] | None = None
    exclude_bumps: list[str] | None = None

    @model_validator(mode="after")
    def _filename_or_glob(self) -> FileConfig:
        if (self.filename is None) == (self.glob is None):
            raise ValueError("exactly one of 'filename' or 'glob' is required")
        return self


class Config(BaseModel):
    """The validated [tool.bumpversion] table."""

    current_version: str | None = None
    parse: ParsePattern = DEFAULT_PARSE
    serialize: list[FormatString] = Field(
        default_factory=lambda: [FormatString(DEFAULT_SERIALIZE)]
    )
    search: str = DEFAULT_SEARCH
    replace: str = DEFAULT_REPLACE
    regex: bool = False
    ignore_missing_version: bool = False
    ignore_missing_files: bool = False
    fail_on_missing: bool = False
    dry_run: bool = False
    allow_dirty: bool = False
    commit: bool = False
    message: str = DEFAULT_MESSAGE
    commit_args: str = ""
    tag: bool = False
    sign_tags: bool = False
    tag_name: str = DEFAULT_TAG_NAME
    tag_message: str = DEFAULT_MESSAGE
    parts: dict[str, ComponentSpec] = Field(default_factory=dict)
    files: list[FileConfig] = Field(default_factory=list)

    @field_validator("serialize")
    @classmethod
    def _serialize_not_empty(cls, value: list[FormatString]) -> list[FormatString]:
        if not value:
            raise ValueError("at least one serialization pattern is required")
        return value

    @field_validator("search", "replace", "message", "tag_name", "tag_message")
    @classmethod
    def _valid_template(cls, value: str) -> str:
        FormatString.parse(value)
        return value

    def parse_pattern(self) -> re.Pattern[str]:
        return compile_parse_pattern(self.parse)

    def version_spec(self) -> VersionSpec:
        """Component schema: parse groups in pattern order, then extra parts."""
        pattern = self.parse_pattern()
        names = sorted(pattern.groupindex, key=pattern.groupindex.__getitem__)
        names.extend(name for name in self.parts if name not in names)
        return VersionSpec.from_components(
            {name: self.parts.get(name, ComponentSpec()) for name in names}
        )

    def default_change(self) -> FileChange:
        """The change applied to files without their own configuration."""
        return FileChange(
            parse_version_pattern=self.parse_pattern(),
            serialize_version_patterns=tuple(self.serialize),
            search=RegexTemplate(self.search, regex=self.regex),
            replace=self.replace,
            ignore_missing_version=self.ignore_missing_version,
            ignore_missing_file=self.ignore_missing_files,
        )

    def file_change(self, file_config: FileConfig) -> FileChange:
        """The change for ``file_config``, with unset options from the globals."""

        def pick(value: Any, default: Any) -> Any:
            return default if value is None else value

        parse = pick(file_config.parse, self.parse)
        return FileChange(
            parse_version_pattern=compile_parse_pattern(parse),
            serialize_version_patterns=tuple(pick(file_config.serialize, self.serialize)),
            search=RegexTemplate(
                pick(file_config.search, self.search),
                regex=pick(file_config.regex, self.regex),
            ),
            replace=pick(file_config.replace, self.replace),
            ignore_missing_version=pick(
                file_config.ignore_missing_version, self.ignore_missing_version
            ),
            ignore_missing_file=pick(
                file_config.ignore_missing_file, self.ignore_missing_files
            ),
            include_bumps=file_config.include_bumps,
            exclude_bumps=file_config.exclude_bumps,
        )


def find_config_file(directory: Path) -> Path | None:
    """Return the first config file in ``directory`` with a bumpversion table."""
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if not candidate.is_file():
            continue
        if get_bumpversion_table(load_toml(candidate)) is not None:
            return candidate
        logger.debug("%s has no [tool.bumpversion] table", candidate)
    return None


def config_from_mapping(
    data: Mapping[str, Any], overrides: Mapping[str, Any] | None = None
) -> Config:
    """Validate a raw configuration table, with non-None ``overrides`` on top.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    merged = dict(data)
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Config.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration:\n{exc}") from exc


def load_config(path: Path, overrides: Mapping[str, Any] | None = None) -> Config:
    """Load and validate the [tool.bumpversion] table of ``path``.

    Raises:
        ConfigError: If the table is missing or invalid.
    """
    table = get_bumpversion_table(load_toml(path))
    if table is None:
        raise ConfigError(f"{path} has no [tool.bumpversion] table")
    return config_from_mapping(table.unwrap(), overrides)


def find_config(
    directory: Path, overrides: Mapping[str, Any] | None = None
) -> tuple[Path, Config]:
    """Locate and load the configuration for ``directory``.

    Raises:
        ConfigError: If no configuration file is found.
    """
    path = find_config_file(directory)
    if path is None:
        raise ConfigError(
            f"no configuration found in {directory}. Add a [tool.bumpversion] "
            f"table to one of: {', '.join(CONFIG_FILE_NAMES)}"
        )
    logger.info("using configuration from %s", path)
    return path, load_config(path, overrides)


def update_config_file(path: Path, new_version: str, dry_run: bool) -> Modification:
    """Set ``current_version`` in ``path`` to ``new_version``.

    Formatting, comments and line endings are preserved. Nothing is
    written in dry-run mode or when the version is already current.
    """
    before = read_toml_text(path)
    doc = parse_toml(before, path)
    set_current_version(doc, new_version)
    modification = Modification(before=before, after=doc.as_string())

    if modification.changed and not dry_run:
        save_toml(path, doc)
    return modification
