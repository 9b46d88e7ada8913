"""Search templates that render to compiled regular expressions."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic_core import core_schema

from .errors import RegexTemplateError
from .f_string import FormatString


class RegexTemplate:
    """A FormatString rendered into a regular expression.

    By default the template's literal text is matched literally. A raw
    template (``regex=True``) is already written as a regular expression,
    so its literal text is passed through unchanged.
    """

    __slots__ = ("_format_string", "_regex")

    def __init__(self, template: str | FormatString, regex: bool = False) -> None:
        if isinstance(template, str):
            template = FormatString.parse(template)
        self._format_string = template
        self._regex = regex

    @property
    def format_string(self) -> FormatString:
        return self._format_string

    @property
    def regex(self) -> bool:
        return self._regex

    def format(self, ctx: Mapping[str, str]) -> re.Pattern[str]:
        """Render against ``ctx`` and compile.

        Raises:
            MissingArgumentError: If a field has no value in ``ctx``.
            RegexTemplateError: If the rendered text does not compile.
        """
        rendered = self._format_string.format(ctx, escape_for_regex=not self._regex)
        try:
            return re.compile(rendered, re.MULTILINE)
        except re.error as exc:
            raise RegexTemplateError(rendered, str(exc)) from exc

    def __str__(self) -> str:
        return str(self._format_string)

    def __repr__(self) -> str:
        if self._regex:
            return f"RegexTemplate({str(self)!r}, regex=True)"
        return f"RegexTemplate({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegexTemplate):
            return NotImplemented
        return (self._format_string, self._regex) == (other._format_string, other._regex)

    def __hash__(self) -> int:
        return hash((self._format_string, self._regex))

    @classmethod
    def _validate(cls, value: Any) -> RegexTemplate:
        if isinstance(value, cls):
            return value
        if isinstance(value, (str, FormatString)):
            return cls(value)
        raise ValueError(f"expected a template string, got {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: Any
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


def compile_parse_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a version parse pattern, reporting errors as RegexTemplateError."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise RegexTemplateError(pattern, str(exc)) from exc
