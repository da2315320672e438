from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime


class DeletedTaskLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deleted_task_id: int
    original_log_id: int
    content: str
    created_at: Optional[UTCDateTime] = None


class DeletedTaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_task_id: int
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    task_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_momento_task: bool = False
    momento_start_timestamp: Optional[UTCDateTime] = None
    momento_end_timestamp: Optional[UTCDateTime] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None
    deleted_at: UTCDateTime
    logs: List[DeletedTaskLogRead] = Field(default_factory=list)
