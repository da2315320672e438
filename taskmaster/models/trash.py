"""Trash models: snapshots of deleted tasks and their logs (immutable)."""

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from taskmaster.core.timeutils import utcnow

from .base import IntIdMixin


class DeletedTask(IntIdMixin, SQLModel, table=True):
    __tablename__ = "deleted_tasks"

    original_task_id: int = Field(nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: Optional[str] = None
    task_date: Optional[date] = None
    start_time: Optional[str] = Field(default=None, max_length=5)
    end_time: Optional[str] = Field(default=None, max_length=5)
    is_momento_task: bool = Field(default=False, nullable=False)
    momento_start_timestamp: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    momento_end_timestamp: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    created_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    deleted_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        index=True,
        sa_type=sa.DateTime(timezone=True),
    )


class DeletedTaskLog(IntIdMixin, SQLModel, table=True):
    __tablename__ = "deleted_task_logs"

    deleted_task_id: int = Field(foreign_key="deleted_tasks.id", nullable=False, index=True)
    original_log_id: int = Field(nullable=False)
    content: str = Field(nullable=False)
    created_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
