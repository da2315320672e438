"""Task log endpoints, nested under /tasks/{task_id}/logs."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.common import OkResponse, RowId
from taskmaster.schemas.tasks import TaskLogRead, TaskLogWrite
from taskmaster.services.task_logs import (
    add_task_log,
    delete_task_log,
    get_log_or_404,
    list_task_logs,
    update_task_log,
)
from taskmaster.services.tasks import get_task_or_404

router = APIRouter()


@router.get("", response_model=List[TaskLogRead])
async def list_logs_endpoint(task_id: RowId, session: AsyncSession = Depends(get_session)):
    """Logs of one task, newest first."""
    task = await get_task_or_404(session, task_id)
    return await list_task_logs(session, task)


@router.post("", response_model=TaskLogRead, status_code=201)
async def add_log_endpoint(
    task_id: RowId,
    body: TaskLogWrite,
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    return await add_task_log(session, task, body.content)


@router.put("/{log_id}", response_model=TaskLogRead)
async def update_log_endpoint(
    task_id: RowId,
    log_id: RowId,
    body: TaskLogWrite,
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    entry = await get_log_or_404(session, task, log_id)
    return await update_task_log(session, task, entry, body.content)


@router.delete("/{log_id}", response_model=OkResponse)
async def delete_log_endpoint(
    task_id: RowId,
    log_id: RowId,
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    entry = await get_log_or_404(session, task, log_id)
    await delete_task_log(session, task, entry)
    return OkResponse(message="Log entry deleted")
