"""
Momento endpoints: start now, finish later.

- POST /start: create an active momento task
- POST /finish: resolve an id or title fragment among active tasks and complete it
  (404 when nothing matches, 409 when several do)
- GET /active: active tasks with their running duration
- POST /log: log to the most recently started active task
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.momento import (
    ActiveMomentoRead,
    AutoLogResult,
    MomentoFinish,
    MomentoLog,
    MomentoStart,
    MomentoTaskRead,
)
from taskmaster.services.momento import (
    auto_log_to_active_momento,
    finish_momento,
    list_active_momento_tasks,
    start_momento,
)

router = APIRouter()


@router.post("/start", response_model=MomentoTaskRead, status_code=201)
async def start_momento_endpoint(body: MomentoStart, session: AsyncSession = Depends(get_session)):
    return await start_momento(session, body.title, body.description)


@router.post("/finish", response_model=MomentoTaskRead)
async def finish_momento_endpoint(body: MomentoFinish, session: AsyncSession = Depends(get_session)):
    return await finish_momento(session, body.task_identifier)


@router.get("/active", response_model=List[ActiveMomentoRead])
async def active_momento_endpoint(session: AsyncSession = Depends(get_session)):
    return await list_active_momento_tasks(session)


@router.post("/log", response_model=AutoLogResult)
async def auto_log_endpoint(body: MomentoLog, session: AsyncSession = Depends(get_session)):
    return await auto_log_to_active_momento(session, body.content)
