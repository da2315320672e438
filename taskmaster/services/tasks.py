"""
Task service layer.

Handles:
- Task CRUD with the "end time after start time" invariant
- Merge (PATCH-style) updates where missing/blank fields keep stored values
- Soft delete: snapshot into the trash tables, then remove live rows, in one
  transaction
- Activity feed entries for every successful mutation
"""

from __future__ import annotations

from typing import Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.core.timeutils import utcnow, validate_time_range
from taskmaster.models.task import Task, TaskLog
from taskmaster.models.trash import DeletedTask, DeletedTaskLog
from taskmaster.schemas.common import TaskStatus
from taskmaster.schemas.tasks import TaskCreate, TaskUpdate
from taskmaster.services.activity import record_activity

log = structlog.get_logger()

TIME_RANGE_ERROR = "End time must be after start time"

_STATUS_WORDING = {
    TaskStatus.COMPLETED.value: "Completed task",
    TaskStatus.PENDING.value: "Marked task as pending",
    TaskStatus.IN_PROGRESS.value: "Marked task as in progress",
}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def ordered_tasks_query():
    """Scheduled tasks chronologically (date, then start time), unscheduled ones trail by creation."""
    return select(Task).order_by(
        Task.task_date.is_(None),
        Task.task_date.asc(),
        Task.start_time.is_(None),
        Task.start_time.asc(),
        Task.created_at.asc(),
        Task.id.asc(),
    )


async def list_tasks(session: AsyncSession) -> list[Task]:
    result = await session.execute(ordered_tasks_query())
    return list(result.scalars().all())


async def get_task_or_404(session: AsyncSession, task_id: int) -> Task:
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_task(session: AsyncSession, task_in: TaskCreate) -> Task:
    if not task_in.title:
        raise HTTPException(status_code=400, detail="Title is required")
    if not validate_time_range(task_in.start_time, task_in.end_time):
        raise HTTPException(status_code=400, detail=TIME_RANGE_ERROR)

    now = utcnow()
    task = Task(
        title=task_in.title,
        description=task_in.description,
        status=task_in.status.value,
        task_date=task_in.task_date,
        start_time=task_in.start_time,
        end_time=task_in.end_time,
        is_momento_task=task_in.is_momento_task,
        created_at=now,
        updated_at=now,
    )
    if task_in.is_momento_task:
        task.status = TaskStatus.IN_PROGRESS.value
        task.momento_start_timestamp = now

    session.add(task)
    await session.commit()
    await session.refresh(task)
    log.info("task.created", task_id=task.id, momento=task.is_momento_task)

    verb = "Started momento task" if task.is_momento_task else "Created task"
    await record_activity(session, f'{verb}: "{task.title}"')
    return task


async def update_task(session: AsyncSession, task: Task, task_in: TaskUpdate) -> Task:
    data = task_in.model_dump(exclude_none=True)

    merged = {
        "title": data.get("title", task.title),
        "description": data.get("description", task.description),
        "status": data.get("status", task.status),
        "task_date": data.get("task_date", task.task_date),
        "start_time": data.get("start_time", task.start_time),
        "end_time": data.get("end_time", task.end_time),
    }
    if isinstance(merged["status"], TaskStatus):
        merged["status"] = merged["status"].value

    if not merged["title"] or not merged["status"]:
        raise HTTPException(status_code=400, detail="Missing required fields: title and status are required.")
    if not validate_time_range(merged["start_time"], merged["end_time"]):
        raise HTTPException(status_code=400, detail=TIME_RANGE_ERROR)

    old_status = task.status
    was_active_momento = task.is_active_momento

    for key, value in merged.items():
        setattr(task, key, value)

    now = utcnow()
    # An active momento task leaving in_progress gets its end stamped.
    if was_active_momento and task.status != TaskStatus.IN_PROGRESS.value:
        task.momento_end_timestamp = now
    task.updated_at = now

    session.add(task)
    await session.commit()
    await session.refresh(task)
    log.info("task.updated", task_id=task.id, from_status=old_status, to_status=task.status)

    if task.status != old_status:
        verb = _STATUS_WORDING.get(task.status, "Updated task")
    else:
        verb = "Updated task"
    await record_activity(session, f'{verb}: "{task.title}"')
    return task


async def delete_task(session: AsyncSession, task: Task) -> DeletedTask:
    """
    Move a task and its logs to the trash, then remove the live rows.

    The snapshot and the removal share one transaction: if copying fails
    nothing is deleted.
    """
    task_id = task.id
    result = await session.execute(
        select(TaskLog).where(TaskLog.task_id == task_id).order_by(TaskLog.id)
    )
    logs: Sequence[TaskLog] = result.scalars().all()

    try:
        trashed = DeletedTask(
            original_task_id=task_id,
            title=task.title,
            description=task.description,
            status=task.status,
            task_date=task.task_date,
            start_time=task.start_time,
            end_time=task.end_time,
            is_momento_task=task.is_momento_task,
            momento_start_timestamp=task.momento_start_timestamp,
            momento_end_timestamp=task.momento_end_timestamp,
            created_at=task.created_at,
            updated_at=task.updated_at,
            deleted_at=utcnow(),
        )
        session.add(trashed)
        await session.flush()

        for entry in logs:
            session.add(
                DeletedTaskLog(
                    deleted_task_id=trashed.id,
                    original_log_id=entry.id,
                    content=entry.content,
                    created_at=entry.created_at,
                )
            )
        await session.flush()

        await session.execute(delete(TaskLog).where(TaskLog.task_id == task_id))
        await session.delete(task)
        await session.commit()
    except Exception:
        await session.rollback()
        # The rollback expires ``task``; only the local id is safe to read here.
        log.error("task.delete_failed", task_id=task_id)
        raise

    log.info("task.deleted", task_id=task_id, logs=len(logs))
    await record_activity(session, f'Deleted task: "{trashed.title}"')
    return trashed
