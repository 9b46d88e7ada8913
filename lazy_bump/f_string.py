"""Field-substitution templates in the style of Python format strings.

Only the plain subset is supported:
- "{name}" substitutes the value of ``name`` from the render context
- "{{" and "}}" are literal braces
- anything else involving a brace is a parse error

The same template type renders replacement text and, with literal
segments regex-escaped, search patterns.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, NamedTuple

from pydantic_core import core_schema

from .errors import MissingArgumentError, ParseError


class Literal(NamedTuple):
    text: str


class Field(NamedTuple):
    name: str


Segment = Literal | Field


def _parse_segments(template: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    buf: list[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "{":
            if template.startswith("{{", i):
                buf.append("{")
                i += 2
                continue
            end = template.find("}", i + 1)
            if end == -1:
                raise ParseError(template, i, "unmatched '{'")
            name = template[i + 1 : end]
            if not name:
                raise ParseError(template, i, "empty field name")
            if "{" in name:
                raise ParseError(template, i, "nested '{' in field name")
            if buf:
                segments.append(Literal("".join(buf)))
                buf = []
            segments.append(Field(name))
            i = end + 1
        elif ch == "}":
            if template.startswith("}}", i):
                buf.append("}")
                i += 2
                continue
            raise ParseError(template, i, "single '}' is not allowed")
        else:
            buf.append(ch)
            i += 1
    if buf:
        segments.append(Literal("".join(buf)))
    return tuple(segments)


class FormatString:
    """A parsed template: an ordered sequence of literals and fields.

    Instances are immutable and compare equal when their source templates
    are equal. Inside pydantic models a FormatString validates from a
    plain string and serializes back to it.
    """

    __slots__ = ("_template", "_segments")

    def __init__(self, template: str) -> None:
        self._template = template
        self._segments = _parse_segments(template)

    @classmethod
    def parse(cls, template: str) -> FormatString:
        return cls(template)

    @property
    def template(self) -> str:
        return self._template

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    @property
    def field_names(self) -> tuple[str, ...]:
        """Distinct field names in order of first reference."""
        return tuple(dict.fromkeys(s.name for s in self._segments if isinstance(s, Field)))

    def format(self, ctx: Mapping[str, str], escape_for_regex: bool = False) -> str:
        """Render the template against ``ctx``.

        Literal text is regex-escaped when ``escape_for_regex`` is set.
        Field values are always inserted unchanged, so callers may pass
        regex fragments as values.

        Raises:
            MissingArgumentError: If a field has no value in ``ctx``.
        """
        out: list[str] = []
        for segment in self._segments:
            if isinstance(segment, Field):
                try:
                    value = ctx[segment.name]
                except KeyError:
                    raise MissingArgumentError(segment.name) from None
                out.append(str(value))
            elif escape_for_regex:
                out.append(re.escape(segment.text))
            else:
                out.append(segment.text)
        return "".join(out)

    def __str__(self) -> str:
        return self._template

    def __repr__(self) -> str:
        return f"FormatString({self._template!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormatString):
            return NotImplemented
        return self._template == other._template

    def __hash__(self) -> int:
        return hash(self._template)

    @classmethod
    def _validate(cls, value: Any) -> FormatString:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
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
