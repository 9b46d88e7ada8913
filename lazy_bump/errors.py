"""Exception types raised by lazy-bump.

Every error derives from LazyBumpError so the CLI can report any library
failure uniformly.
"""

from __future__ import annotations

from pathlib import Path


class LazyBumpError(Exception):
    """Base class for all lazy-bump errors."""


class ParseError(LazyBumpError, ValueError):
    """A format string template is malformed."""

    def __init__(self, template: str, position: int, reason: str) -> None:
        self.template = template
        self.position = position
        self.reason = reason
        super().__init__(f"invalid format string {template!r} at {position}: {reason}")


class MissingArgumentError(LazyBumpError):
    """A template field has no value in the render context."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"missing argument {name!r}")


class RegexTemplateError(LazyBumpError):
    """A rendered search template is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid regex {pattern!r}: {reason}")


class SerializeError(LazyBumpError):
    """A version could not be serialized with the given templates."""


class BumpError(LazyBumpError):
    """A version or component could not be bumped."""


class MaxValueReached(BumpError):
    """An enumerated component is already at its last value."""

    def __init__(self, value: str | None, values: list[str]) -> None:
        self.value = value
        self.values = values
        super().__init__(f"{value!r} is the maximum value of {values}")


class MissingComponent(BumpError):
    """The component to bump is not part of the version spec."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown version component {name!r}")


class InvalidComponentValue(BumpError):
    """A numeric component holds a non-numeric value."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"cannot increment non-numeric value {value!r}")


class ReplaceVersionError(LazyBumpError):
    """Applying version changes to file content failed."""


class _TemplateFailure(ReplaceVersionError):
    # Exception.__init__ is called directly: the second base's __init__
    # takes different arguments.
    def __init__(self, cause: LazyBumpError, path: Path | None = None) -> None:
        self.path = path
        where = f"{path}: " if path is not None else ""
        Exception.__init__(self, f"{where}{cause}")


class ReplaceSerializeError(_TemplateFailure, SerializeError):
    """A version could not be serialized for one of a file's changes."""


class ReplaceMissingArgumentError(_TemplateFailure, MissingArgumentError):
    """A search or replace template references an unknown variable."""

    def __init__(self, cause: MissingArgumentError, path: Path | None = None) -> None:
        self.name = cause.name
        super().__init__(cause, path)


class ReplaceParseError(_TemplateFailure, ParseError):
    """A replace template is malformed."""

    def __init__(self, cause: ParseError, path: Path | None = None) -> None:
        self.template = cause.template
        self.position = cause.position
        self.reason = cause.reason
        super().__init__(cause, path)


class ReplaceRegexError(_TemplateFailure, RegexTemplateError):
    """A rendered search pattern is not a valid regular expression."""

    def __init__(self, cause: RegexTemplateError, path: Path | None = None) -> None:
        self.pattern = cause.pattern
        super().__init__(cause, path)


class FileIoError(ReplaceVersionError):
    """A target file could not be read, decoded or written."""

    def __init__(self, path: Path, source: OSError | UnicodeDecodeError) -> None:
        self.path = path
        self.source = source
        super().__init__(f"io error for {path}: {source}")


class VersionNotFoundError(ReplaceVersionError):
    """A search pattern did not match and missing versions are fatal."""

    def __init__(self, search: str, path: Path | None = None) -> None:
        self.search = search
        self.path = path
        where = f" in {path}" if path is not None else ""
        super().__init__(f"did not find {search!r}{where}")


class ConfigError(LazyBumpError):
    """Configuration is missing or invalid."""


class VcsError(LazyBumpError):
    """A version control command failed."""
