"""Task log service: timestamped progress notes attached to a task."""

from __future__ import annotations

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.core.timeutils import utcnow
from taskmaster.models.task import Task, TaskLog
from taskmaster.services.activity import preview, record_activity

log = structlog.get_logger()


def _require_content(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required")
    return content


async def get_log_or_404(session: AsyncSession, task: Task, log_id: int) -> TaskLog:
    entry = await session.get(TaskLog, log_id)
    if not entry or entry.task_id != task.id:
        raise HTTPException(status_code=404, detail="Log entry not found")
    return entry


async def list_task_logs(session: AsyncSession, task: Task) -> list[TaskLog]:
    result = await session.execute(
        select(TaskLog)
        .where(TaskLog.task_id == task.id)
        .order_by(TaskLog.created_at.desc(), TaskLog.id.desc())
    )
    return list(result.scalars().all())


async def add_task_log(session: AsyncSession, task: Task, content: str | None) -> TaskLog:
    content = _require_content(content)

    entry = TaskLog(task_id=task.id, content=content, created_at=utcnow())
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    log.info("task_log.created", task_id=task.id, log_id=entry.id)

    await record_activity(session, f'Added log to task "{task.title}": {preview(content)}')
    return entry


async def update_task_log(
    session: AsyncSession, task: Task, entry: TaskLog, content: str | None
) -> TaskLog:
    """Replace a log's content. ``created_at`` moves to now and reads as "last edited"."""
    content = _require_content(content)

    entry.content = content
    entry.created_at = utcnow()
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    log.info("task_log.updated", task_id=task.id, log_id=entry.id)

    await record_activity(session, f'Updated log for task "{task.title}": {preview(content)}')
    return entry


async def delete_task_log(session: AsyncSession, task: Task, entry: TaskLog) -> None:
    content = entry.content
    log_id = entry.id
    await session.delete(entry)
    await session.commit()
    log.info("task_log.deleted", task_id=task.id, log_id=log_id)

    await record_activity(session, f'Deleted log from task "{task.title}": {preview(content)}')
