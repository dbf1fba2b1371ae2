"""Record base model and transaction outcome types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """Base class for records stored under a registered path pattern.

    id is the record's key under its collection path. Fields named like the
    pattern's bound segments carry the binding values; neither id nor those
    fields are persisted, since the store path already encodes them.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str | None = None


RecordT = TypeVar("RecordT", bound=Record)
T = TypeVar("T")


class Abort(Enum):
    """Returned from a transaction function to leave the value unchanged."""

    ABORT = "abort"


ABORT = Abort.ABORT


@dataclass(frozen=True)
class TransactionResult(Generic[T]):
    """Outcome of a single-path read-modify-write.

    An abort is not an error: committed is False and value carries the
    current value at the time of the abort.
    """

    committed: bool
    value: T | None
