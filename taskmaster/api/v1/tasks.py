"""
Task endpoints: CRUD.

- PUT and PATCH share merge semantics: fields left out, null or blank keep their stored value
- DELETE moves the task and its logs to the trash
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.common import OkResponse, RowId
from taskmaster.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from taskmaster.services.tasks import (
    create_task,
    delete_task,
    get_task_or_404,
    list_tasks,
    update_task,
)

router = APIRouter()


@router.get("", response_model=List[TaskRead])
async def list_tasks_endpoint(session: AsyncSession = Depends(get_session)):
    """All tasks: scheduled ones chronologically, then unscheduled by creation."""
    return await list_tasks(session)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task_endpoint(
    task_in: TaskCreate,
    session: AsyncSession = Depends(get_session),
):
    return await create_task(session, task_in)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task_endpoint(task_id: RowId, session: AsyncSession = Depends(get_session)):
    return await get_task_or_404(session, task_id)


@router.api_route("/{task_id}", methods=["PUT", "PATCH"], response_model=TaskRead)
async def update_task_endpoint(
    task_id: RowId,
    task_in: TaskUpdate,
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    return await update_task(session, task, task_in)


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task_endpoint(task_id: RowId, session: AsyncSession = Depends(get_session)):
    task = await get_task_or_404(session, task_id)
    trashed = await delete_task(session, task)
    return OkResponse(message=f'Task "{trashed.title}" moved to trash')
