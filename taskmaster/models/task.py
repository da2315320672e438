"""Task and TaskLog models."""

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from taskmaster.core.timeutils import utcnow

from .base import IntIdMixin, TimestampMixin


class Task(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="pending")  # pending | in_progress | completed
    task_date: Optional[date] = Field(default=None, index=True)
    start_time: Optional[str] = Field(default=None, max_length=5)  # HH:MM
    end_time: Optional[str] = Field(default=None, max_length=5)  # HH:MM
    is_momento_task: bool = Field(default=False, nullable=False)
    momento_start_timestamp: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    momento_end_timestamp: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))

    @property
    def is_active_momento(self) -> bool:
        return (
            self.is_momento_task
            and self.status == "in_progress"
            and self.momento_end_timestamp is None
        )


class TaskLog(IntIdMixin, SQLModel, table=True):
    __tablename__ = "task_logs"

    task_id: int = Field(foreign_key="tasks.id", nullable=False, index=True, ondelete="CASCADE")
    content: str = Field(nullable=False)
    # Refreshed on edit, so this doubles as "last edited".
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
