"""Activity log model (append-only audit feed)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from taskmaster.core.timeutils import utcnow

from .base import IntIdMixin


class ActivityLog(IntIdMixin, SQLModel, table=True):
    __tablename__ = "activity_log"

    timestamp: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        index=True,
        sa_type=sa.DateTime(timezone=True),
    )
    description: str = Field(nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
