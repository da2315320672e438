"""
Momento tasks: work that is declared started now and finished later.

A momento task is *active* while ``is_momento_task`` is set, its status is
``in_progress`` and ``momento_end_timestamp`` is empty. Finishing resolves a
free-text or numeric identifier against the active set with
``resolve_momento_task``, a pure function so the matching policy can be
tested without a database:

1. numeric identifier: exact id (no further fallback)
2. case-insensitive substring of the title
3. any identifier word longer than two characters found in the title
4. the only active task, when exactly one exists

A step that qualifies several candidates is ambiguous and nothing is
mutated; the caller is expected to ask the user which one they meant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Union

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.core.timeutils import format_duration, format_for_display, minutes_between, utcnow
from taskmaster.models.task import Task, TaskLog
from taskmaster.schemas.common import TaskStatus
from taskmaster.schemas.momento import ActiveMomentoRead, AutoLogResult, MomentoTaskRead
from taskmaster.schemas.tasks import TaskCreate, TaskLogRead, TaskRead
from taskmaster.services.activity import RecordOutcome, record_activity
from taskmaster.services.task_logs import add_task_log
from taskmaster.services.tasks import create_task

log = structlog.get_logger()

MIN_WORD_LENGTH = 3


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UniqueMatch:
    task: Task


@dataclass(frozen=True)
class AmbiguousMatch:
    candidates: list[Task] = field(default_factory=list)


@dataclass(frozen=True)
class NoMatch:
    candidates: list[Task] = field(default_factory=list)


MatchResult = Union[UniqueMatch, AmbiguousMatch, NoMatch]


def _narrow(matches: list[Task]) -> MatchResult:
    if len(matches) == 1:
        return UniqueMatch(matches[0])
    return AmbiguousMatch(matches)


def resolve_momento_task(candidates: Sequence[Task], identifier: Union[int, str]) -> MatchResult:
    """Pick the active task ``identifier`` refers to. See the module docstring for the order."""
    candidates = list(candidates)
    if not candidates:
        return NoMatch([])

    text = str(identifier).strip()

    if isinstance(identifier, int) or text.isdigit():
        wanted = int(text)
        for task in candidates:
            if task.id == wanted:
                return UniqueMatch(task)
        return NoMatch(candidates)

    needle = text.lower()
    if needle:
        matches = [t for t in candidates if needle in t.title.lower()]
        if matches:
            return _narrow(matches)

    words = [w for w in needle.split() if len(w) >= MIN_WORD_LENGTH]
    if words:
        matches = [t for t in candidates if any(w in t.title.lower() for w in words)]
        if matches:
            return _narrow(matches)

    if len(candidates) == 1:
        return UniqueMatch(candidates[0])
    return NoMatch(candidates)


def _describe(tasks: Sequence[Task]) -> str:
    return ", ".join(f'"{t.title}" (ID: {t.id})' for t in tasks)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_active_momento_tasks(session: AsyncSession) -> list[Task]:
    """Active momento tasks, most recently created first."""
    result = await session.execute(
        select(Task)
        .where(
            Task.is_momento_task == True,  # noqa: E712
            Task.status == TaskStatus.IN_PROGRESS.value,
            Task.momento_end_timestamp.is_(None),
        )
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


async def list_active_momento_tasks(session: AsyncSession) -> list[ActiveMomentoRead]:
    now = utcnow()
    items = []
    for task in await get_active_momento_tasks(session):
        started = task.momento_start_timestamp or task.created_at
        items.append(
            ActiveMomentoRead(
                **TaskRead.model_validate(task).model_dump(),
                current_duration=format_duration(minutes_between(started, now)),
            )
        )
    return items


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _append_log_best_effort(session: AsyncSession, task_id: int, content: str) -> RecordOutcome:
    """Attach a log without touching the caller's session. Failures are logged, not raised."""
    try:
        async with AsyncSession(session.bind, expire_on_commit=False) as side:
            side.add(TaskLog(task_id=task_id, content=content, created_at=utcnow()))
            await side.commit()
    except (SQLAlchemyError, OSError) as exc:
        log.error("momento.log_failed", task_id=task_id, error=str(exc))
        return RecordOutcome(ok=False, error=str(exc))
    return RecordOutcome(ok=True)


async def start_momento(
    session: AsyncSession, title: str, description: str | None = None
) -> MomentoTaskRead:
    title = (title or "").strip()
    task_in = TaskCreate(
        title=title,
        description=description or f"Started working on: {title}",
        is_momento_task=True,
    )
    task = await create_task(session, task_in)

    outcome = await _append_log_best_effort(
        session,
        task.id,
        f"Started momento task at {format_for_display(task.momento_start_timestamp)}",
    )
    log.info("momento.started", task_id=task.id)
    return MomentoTaskRead(
        **TaskRead.model_validate(task).model_dump(),
        log_recorded=outcome.ok,
    )


async def finish_momento(session: AsyncSession, identifier: Union[int, str]) -> MomentoTaskRead:
    candidates = await get_active_momento_tasks(session)
    if not candidates:
        raise HTTPException(status_code=404, detail="No active momento tasks found to finish.")

    match = resolve_momento_task(candidates, identifier)
    if isinstance(match, AmbiguousMatch):
        raise HTTPException(
            status_code=409,
            detail=(
                f'Multiple active momento tasks match "{identifier}": '
                f"{_describe(match.candidates)}. Please specify which one by ID."
            ),
        )
    if isinstance(match, NoMatch):
        raise HTTPException(
            status_code=404,
            detail=(
                f'Could not find momento task "{identifier}". '
                f"Active momento tasks: {_describe(match.candidates)}"
            ),
        )

    task = match.task
    now = utcnow()
    started = task.momento_start_timestamp or task.created_at
    task.status = TaskStatus.COMPLETED.value
    task.momento_end_timestamp = now
    task.updated_at = now
    session.add(task)
    await session.commit()
    await session.refresh(task)

    duration = format_duration(minutes_between(started, now))
    outcome = await _append_log_best_effort(
        session,
        task.id,
        f"Completed momento task at {format_for_display(now)}. Duration: {duration}",
    )
    log.info("momento.finished", task_id=task.id, duration=duration)
    await record_activity(session, f'Finished momento task: "{task.title}" ({duration})')

    return MomentoTaskRead(
        **TaskRead.model_validate(task).model_dump(),
        duration=duration,
        log_recorded=outcome.ok,
    )


async def auto_log_to_active_momento(session: AsyncSession, content: str | None) -> AutoLogResult:
    """Log to the most recently started active task, or report that there is none."""
    active = await get_active_momento_tasks(session)
    if not active:
        return AutoLogResult(logged=False, message="No active momento task to log to.")

    task = active[0]
    entry = await add_task_log(session, task, content)
    return AutoLogResult(
        logged=True,
        message=f'Logged to active momento task "{task.title}" (ID: {task.id})',
        task=TaskRead.model_validate(task),
        log=TaskLogRead.model_validate(entry),
    )
