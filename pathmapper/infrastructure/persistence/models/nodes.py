"""Tree storage ORM model: nodes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from pathmapper.infrastructure.database import Base


class Node(Base):
    """One leaf of the stored JSON tree.

    path is the absolute "/"-separated path of the leaf; value is any
    non-object JSON value (objects are spread over their leaves). A
    subtree is every row whose path equals, or starts with, its path + "/".
    """

    __tablename__ = "nodes"

    path: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
