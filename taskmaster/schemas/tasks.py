"""Task and task-log schemas shared by the HTTP API and the assistant toolbox."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from taskmaster.core.timeutils import parse_to_date, parse_to_time

from .common import TaskStatus, UTCDateTime, blank_to_none


def clean_date(value):
    value = blank_to_none(value)
    if value is None:
        return None
    normalized = parse_to_date(value)
    if normalized is None:
        raise ValueError(f"Unrecognized date {value!r}, expected YYYY-MM-DD")
    return normalized


def clean_time(value):
    value = blank_to_none(value)
    if value is None:
        return None
    normalized = parse_to_time(value)
    if normalized is None:
        raise ValueError(f"Unrecognized time {value!r}, expected HH:MM")
    return normalized


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    task_date: Optional[date] = None
    start_time: Optional[str] = None  # HH:MM
    end_time: Optional[str] = None  # HH:MM
    is_momento_task: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return blank_to_none(value)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return blank_to_none(value) or TaskStatus.PENDING

    @field_validator("task_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return clean_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return clean_time(value)


class TaskUpdate(BaseModel):
    """Partial update. Missing, null and blank fields keep their stored value."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    task_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("title", "description", "status", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        value = blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("task_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return clean_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return clean_time(value)


class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: str
    task_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_momento_task: bool = False
    momento_start_timestamp: Optional[UTCDateTime] = None
    momento_end_timestamp: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


# ---------------------------------------------------------------------------
# Task logs
# ---------------------------------------------------------------------------


class TaskLogWrite(BaseModel):
    """Body for creating or editing a log entry."""
    content: str = ""


class TaskLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    content: str
    created_at: UTCDateTime
