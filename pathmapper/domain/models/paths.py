"""Path pattern domain model.

A pattern such as "/products/{country}/{category}" compiles into an ordered
tuple of literal and bound segments. Resolving the pattern against a binding
map yields the concrete store path of a collection; supplying the reserved
"id" binding appends the record key as a final "/<id>" segment.

Patterns are compiled once (at registration) and are immutable afterwards.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from pathmapper.domain.exceptions import (
    ExtraBinding,
    MalformedPattern,
    MissingBinding,
    UnusedBinding,
)

ID_BINDING = "id"

_BOUND_RE = re.compile(r"\{([^{}]*)\}")


class LiteralSegment(BaseModel):
    """Text copied verbatim into the resolved path."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    text: str


class BoundSegment(BaseModel):
    """A path component substituted from a named binding."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bound"] = "bound"
    name: str


Segment = Annotated[Union[LiteralSegment, BoundSegment], Field(discriminator="kind")]


class PathPattern(BaseModel):
    """A compiled path pattern.

    Invariants:
      - a pattern without bound segments is exactly one LiteralSegment
      - bound names are unique and never the reserved "id"
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    segments: tuple[Segment, ...]

    @classmethod
    def compile(cls, pattern: str) -> PathPattern:
        """Parse a pattern string; raises MalformedPattern."""
        if not pattern:
            raise MalformedPattern(pattern, "pattern is empty")

        segments: list[LiteralSegment | BoundSegment] = []
        seen: set[str] = set()
        pos = 0
        for match in _BOUND_RE.finditer(pattern):
            name = match.group(1)
            if not name:
                raise MalformedPattern(pattern, "binding name is empty")
            if name == ID_BINDING:
                raise MalformedPattern(pattern, f"binding name {ID_BINDING!r} is reserved")
            if name in seen:
                raise MalformedPattern(pattern, f"binding {name!r} appears more than once")
            seen.add(name)

            if match.start() > pos:
                segments.append(LiteralSegment(text=pattern[pos : match.start()]))
            segments.append(BoundSegment(name=name))
            pos = match.end()

        if pos < len(pattern):
            segments.append(LiteralSegment(text=pattern[pos:]))
        return cls(pattern=pattern, segments=tuple(segments))

    @property
    def binding_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.segments if isinstance(s, BoundSegment))

    @property
    def is_bound(self) -> bool:
        return any(isinstance(s, BoundSegment) for s in self.segments)

    def resolve(self, bindings: Mapping[str, Any], *, allow_id: bool = True) -> str:
        """Substitute bindings into the pattern.

        Raises MissingBinding when a bound segment has no value,
        UnusedBinding when a non-id key is not consumed by the pattern, and
        ExtraBinding when an id is supplied with allow_id=False.
        """
        parts: list[str] = []
        used: set[str] = set()
        for segment in self.segments:
            if isinstance(segment, LiteralSegment):
                parts.append(segment.text)
                continue
            value = bindings.get(segment.name)
            if value is None or value == "":
                raise MissingBinding(segment.name)
            parts.append(str(value))
            used.add(segment.name)

        for name in bindings:
            if name != ID_BINDING and name not in used:
                raise UnusedBinding(name)

        record_id = bindings.get(ID_BINDING)
        if record_id is not None and record_id != "":
            if not allow_id:
                raise ExtraBinding(ID_BINDING)
            parts.append(f"/{record_id}")
        return "".join(parts)

    def resolve_collection(self, bindings: Mapping[str, Any]) -> str:
        """Resolve the path holding every record for these bindings."""
        return self.resolve(bindings, allow_id=False)

    def extract_bindings(self, record: Any) -> dict[str, Any]:
        """Read the binding values (and id) currently set on a record."""
        bindings = {name: getattr(record, name, None) for name in self.binding_names}
        bindings[ID_BINDING] = getattr(record, ID_BINDING, None)
        return bindings

    def __str__(self) -> str:
        return self.pattern


def child_path(base: str, key: str) -> str:
    return f"{base.rstrip('/')}/{key}"
