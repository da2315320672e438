"""Momento (start now / finish later) task schemas."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel

from .tasks import TaskLogRead, TaskRead


class MomentoStart(BaseModel):
    title: str
    description: Optional[str] = None


class MomentoFinish(BaseModel):
    """A numeric task id or a free-text fragment of the title."""
    task_identifier: Union[int, str]


class MomentoLog(BaseModel):
    content: str = ""


class MomentoTaskRead(TaskRead):
    """A started or finished momento task. ``duration`` is set once finished."""
    duration: Optional[str] = None
    log_recorded: bool = True


class ActiveMomentoRead(TaskRead):
    current_duration: str


class AutoLogResult(BaseModel):
    logged: bool
    message: str
    task: Optional[TaskRead] = None
    log: Optional[TaskLogRead] = None
