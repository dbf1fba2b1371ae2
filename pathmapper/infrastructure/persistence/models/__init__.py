"""ORM model registry: importing this package registers every mapper class
with Base.metadata before Alembic or SQLAlchemy runs.
"""

from pathmapper.infrastructure.persistence.models.nodes import Node

__all__ = [
    "Node",
]
