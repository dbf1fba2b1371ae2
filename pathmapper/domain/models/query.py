"""Query domain models: field paths, the immutable QuerySpec and its builder.

The builder performs no mutual-exclusivity validation. Store adapters decide
precedence for over-specified queries; only the batched scan reshapes a spec
(see pathmapper.domain.services.pagination).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldPath(BaseModel):
    """A (possibly nested) field inside a stored record, e.g. categories/cat1."""

    model_config = ConfigDict(frozen=True)

    segments: tuple[str, ...] = Field(min_length=1)

    @field_validator("segments")
    @classmethod
    def _segments_are_plain_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for segment in value:
            if not segment or "/" in segment:
                raise ValueError(f"Invalid field path segment: {segment!r}")
        return value

    @classmethod
    def of(cls, *segments: str) -> FieldPath:
        return cls(segments=segments)

    @classmethod
    def for_model(cls, model: type[BaseModel], *segments: str) -> FieldPath:
        """Build a field path, checking each segment against declared fields.

        Checking stops at the first segment whose type is not a pydantic
        model (a dict of categories, a scalar); later segments are keys.
        """
        current: type[BaseModel] | None = model
        for segment in segments:
            if current is None:
                break
            if segment not in current.model_fields:
                raise ValueError(f"{current.__name__} has no field {segment!r}")
            annotation = current.model_fields[segment].annotation
            if isinstance(annotation, type) and issubclass(annotation, BaseModel):
                current = annotation
            else:
                current = None
        return cls(segments=segments)

    def __truediv__(self, segment: str) -> FieldPath:
        return FieldPath(segments=(*self.segments, segment))

    def __str__(self) -> str:
        return "/".join(self.segments)


class QuerySpec(BaseModel):
    """Normalised query parameters handed to a store adapter.

    At most one of order_by_field / order_by_key is meaningful, and at most
    one of limit_first / limit_last; over-specification is tolerated.
    A bound (equal_to, start_at, end_at) of None means "unset".
    start_at_key breaks ties among children whose ordered value equals
    start_at: only keys >= start_at_key are included. With start_at unset,
    start_at_key applies to children whose ordered value is None.
    """

    model_config = ConfigDict(frozen=True)

    order_by_field: str | None = None
    order_by_key: bool = False
    equal_to: Any = None
    start_at: Any = None
    start_at_key: str | None = None
    end_at: Any = None
    limit_first: int | None = Field(default=None, ge=1)
    limit_last: int | None = Field(default=None, ge=1)

    @property
    def is_empty(self) -> bool:
        return self == QuerySpec()


class Query:
    """Chainable builder for QuerySpec.

        q = Query().order_by_field("categories", "cat1").equal_to(True)
        spec = q.to_spec()
    """

    def __init__(self) -> None:
        self._params: dict[str, Any] = {}

    def order_by_field(self, field: FieldPath | str, *more: str) -> Query:
        path = field if isinstance(field, FieldPath) else FieldPath.of(field)
        for segment in more:
            path = path / segment
        self._params["order_by_field"] = str(path)
        return self

    def order_by_key(self) -> Query:
        self._params["order_by_key"] = True
        return self

    def equal_to(self, value: Any) -> Query:
        self._params["equal_to"] = value
        return self

    def start_at(self, value: Any, key: str | None = None) -> Query:
        self._params["start_at"] = value
        if key:
            self._params["start_at_key"] = key
        return self

    def end_at(self, value: Any) -> Query:
        self._params["end_at"] = value
        return self

    def limit_first(self, count: int) -> Query:
        self._params["limit_first"] = count
        return self

    def limit_last(self, count: int) -> Query:
        self._params["limit_last"] = count
        return self

    def to_spec(self) -> QuerySpec:
        return QuerySpec(**self._params)


QueryFunc = Callable[[Query], Query]


def build_spec(query: QueryFunc | None) -> QuerySpec:
    """Run a query factory against a fresh builder."""
    if query is None:
        return QuerySpec()
    return query(Query()).to_spec()
