"""Version parsing, bumping and serialization.

A Version is an ordered set of named components (e.g. major, minor,
patch) described by a VersionSpec. Bumping a component resets every
component after it, and serializing picks the shortest configured
template that still shows every component that matters.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from .errors import (
    InvalidComponentValue,
    MaxValueReached,
    MissingArgumentError,
    MissingComponent,
    SerializeError,
)
from .f_string import FormatString
from .models import ComponentSpec

logger = logging.getLogger(__name__)

DEFAULT_NUMERIC_VALUE = "0"


class Component(BaseModel):
    """A single version component.

    ``raw`` is the explicit value, or None when the version string didn't
    contain the component. An omitted component still has an effective
    value, resolved from its spec.
    """

    model_config = ConfigDict(frozen=True)

    spec: ComponentSpec
    raw: str | None = None

    @classmethod
    def new(cls, raw: str | None, spec: ComponentSpec) -> Component:
        return cls(spec=spec, raw=raw)

    @property
    def is_omitted(self) -> bool:
        return self.raw is None

    def value(self) -> str:
        """The explicit value, or the spec's default for an omitted component.

        Resolution order: first_value, optional_value, the first of
        ``values``, then "0".
        """
        if self.raw is not None:
            return self.raw
        spec = self.spec
        if spec.first_value is not None:
            return spec.first_value
        if spec.optional_value is not None:
            return spec.optional_value
        if spec.values:
            return spec.values[0]
        return DEFAULT_NUMERIC_VALUE

    def bump(self) -> Component:
        """Return the component advanced by one step.

        Raises:
            MaxValueReached: If an enumerated component has no next value.
            InvalidComponentValue: If a numeric component isn't an integer.
        """
        value = self.value()
        values = self.spec.values
        if values:
            try:
                index = values.index(value)
            except ValueError:
                raise MaxValueReached(value, list(values)) from None
            if index + 1 >= len(values):
                raise MaxValueReached(value, list(values))
            return self.model_copy(update={"raw": values[index + 1]})
        try:
            number = int(value)
        except ValueError:
            raise InvalidComponentValue(value) from None
        return self.model_copy(update={"raw": str(number + 1)})

    def first(self) -> Component:
        """Return the component reset to its first value.

        Unlike value(), this ignores optional_value: that value governs
        what is displayed, not what a reset produces.
        """
        spec = self.spec
        if spec.first_value is not None:
            first = spec.first_value
        elif spec.values:
            first = spec.values[0]
        else:
            first = DEFAULT_NUMERIC_VALUE
        return self.model_copy(update={"raw": first})

    @property
    def required(self) -> bool:
        """Whether the component must appear when the version is serialized."""
        optional = self.spec.optional_value
        return optional is None or self.value() != optional


class VersionSpec(BaseModel):
    """Ordered component schema, most significant component first."""

    model_config = ConfigDict(frozen=True)

    components: dict[str, ComponentSpec]

    @classmethod
    def from_components(cls, components: Mapping[str, ComponentSpec]) -> VersionSpec:
        return cls(components=dict(components))

    def names(self) -> list[str]:
        return list(self.components)

    def build(self, raw: Mapping[str, str | None]) -> Version:
        return Version.build(self, raw)

    def __contains__(self, name: object) -> bool:
        return name in self.components

    def __len__(self) -> int:
        return len(self.components)


class Version(BaseModel):
    """A version value: one Component per name of its VersionSpec."""

    model_config = ConfigDict(frozen=True)

    spec: VersionSpec
    components: dict[str, Component]

    @classmethod
    def build(cls, spec: VersionSpec, raw: Mapping[str, str | None]) -> Version:
        """Build a version from raw component values.

        Components missing from ``raw`` (or mapped to None) are omitted.
        """
        components = {
            name: Component.new(raw.get(name), component_spec)
            for name, component_spec in spec.components.items()
        }
        return cls(spec=spec, components=components)

    @classmethod
    def parse(
        cls, text: str, pattern: re.Pattern[str], spec: VersionSpec
    ) -> Version | None:
        """Parse ``text`` using ``pattern``'s named groups.

        Returns None if ``pattern`` doesn't match. Groups that didn't
        participate in the match leave their component omitted.
        """
        match = pattern.search(text)
        if match is None:
            logger.debug("%r does not match %r", text, pattern.pattern)
            return None
        return cls.build(spec, match.groupdict())

    def __getitem__(self, name: str) -> Component:
        return self.components[name]

    def __contains__(self, name: object) -> bool:
        return name in self.components

    def get(self, name: str) -> Component | None:
        return self.components.get(name)

    def values(self) -> dict[str, str]:
        """Map every component name to its effective value."""
        return {name: c.value() for name, c in self.components.items()}

    def required_component_names(self) -> set[str]:
        return {name for name, c in self.components.items() if c.required}

    def bump(self, component: str) -> Version:
        """Return a new version with ``component`` bumped.

        Components after ``component`` are reset to their first value;
        components before it are unchanged.

        Raises:
            MissingComponent: If ``component`` is not in the spec.
            MaxValueReached: If ``component`` can't be advanced further.
            InvalidComponentValue: If a numeric value isn't an integer.
        """
        if component not in self.components:
            raise MissingComponent(component)
        bumped: dict[str, Component] = {}
        found = False
        for name, current in self.components.items():
            if name == component:
                bumped[name] = current.bump()
                found = True
            elif found:
                bumped[name] = current.first()
            else:
                bumped[name] = current
        return self.model_copy(update={"components": bumped})

    def serialize(
        self, candidates: Sequence[FormatString], ctx: Mapping[str, str]
    ) -> str:
        """Render the version with the most compact qualifying template.

        A template qualifies if it references every required component.
        Among qualifying templates the one with the fewest distinct fields
        wins, earlier templates winning ties.

        Raises:
            SerializeError: If no template qualifies or rendering fails.
        """
        required = self.required_component_names()
        qualifying = [c for c in candidates if required.issubset(c.field_names)]
        if not qualifying:
            raise SerializeError(
                f"no serialization pattern in {[str(c) for c in candidates]} "
                f"contains all required components {sorted(required)}"
            )
        # sorted() is stable, so ties keep their configured order
        chosen = sorted(qualifying, key=lambda c: len(c.field_names))[0]
        logger.debug("serializing %s with %r", self.values(), str(chosen))
        try:
            return chosen.format({**ctx, **self.values()})
        except MissingArgumentError as exc:
            raise SerializeError(
                f"cannot serialize with {str(chosen)!r}: {exc}"
            ) from exc
