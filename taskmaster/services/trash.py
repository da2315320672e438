"""Trash: read-only view over deleted task snapshots, plus the startup consistency check."""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.models.task import Task
from taskmaster.models.trash import DeletedTask, DeletedTaskLog
from taskmaster.schemas.trash import DeletedTaskLogRead, DeletedTaskRead


async def list_trash(session: AsyncSession) -> list[DeletedTaskRead]:
    """Deleted tasks, newest deletion first, each carrying its logs (newest first)."""
    result = await session.execute(
        select(DeletedTask).order_by(DeletedTask.deleted_at.desc(), DeletedTask.id.desc())
    )
    trashed = list(result.scalars().all())
    if not trashed:
        return []

    result = await session.execute(
        select(DeletedTaskLog)
        .where(DeletedTaskLog.deleted_task_id.in_([t.id for t in trashed]))
        .order_by(DeletedTaskLog.created_at.desc(), DeletedTaskLog.id.desc())
    )
    logs_by_task: dict[int, list[DeletedTaskLogRead]] = defaultdict(list)
    for entry in result.scalars().all():
        logs_by_task[entry.deleted_task_id].append(DeletedTaskLogRead.model_validate(entry))

    items = []
    for task in trashed:
        item = DeletedTaskRead.model_validate(task)
        item.logs = logs_by_task.get(task.id, [])
        items.append(item)
    return items


async def find_trash_conflicts(session: AsyncSession) -> list[int]:
    """Task ids present both live and in the trash (an interrupted delete)."""
    result = await session.execute(
        select(Task.id)
        .join(DeletedTask, DeletedTask.original_task_id == Task.id)
        .distinct()
        .order_by(Task.id)
    )
    return list(result.scalars().all())
