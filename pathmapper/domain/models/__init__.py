"""Domain model package.

All domain objects are pure Python / Pydantic models with no store or
infrastructure dependencies. Import from this package to avoid coupling
application code to individual module paths.
"""

from .paths import ID_BINDING, BoundSegment, LiteralSegment, PathPattern, Segment, child_path
from .query import FieldPath, Query, QueryFunc, QuerySpec, build_spec
from .records import ABORT, Abort, Record, RecordT, TransactionResult
from .tracking import Tracked

__all__ = [
    # paths
    "ID_BINDING",
    "BoundSegment",
    "LiteralSegment",
    "PathPattern",
    "Segment",
    "child_path",
    # query
    "FieldPath",
    "Query",
    "QueryFunc",
    "QuerySpec",
    "build_spec",
    # records
    "ABORT",
    "Abort",
    "Record",
    "RecordT",
    "TransactionResult",
    # tracking
    "Tracked",
]
