"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the repository implementations and the Session.
"""

from pathmapper.infrastructure.persistence.models import *  # noqa: F401, F403
from pathmapper.infrastructure.persistence.models import __all__ as _orm_all
from pathmapper.infrastructure.persistence.repositories import (
    SqlStore,
    TreeRepository,
    create_schema,
)
from pathmapper.infrastructure.persistence.session import Session, get_session

__all__ = _orm_all + [
    "Session",
    "SqlStore",
    "TreeRepository",
    "create_schema",
    "get_session",
]
