"""
Activity feed: a best-effort, human-readable audit trail.

Every mutating service call records one entry after its own write has
committed. Entries are written through an independent session bound to the
same engine, so a failed audit write can never roll back (or expire) the
caller's objects. Failures are logged and reported as a ``RecordOutcome``;
they are never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.core.timeutils import utcnow
from taskmaster.models.activity import ActivityLog

log = structlog.get_logger()

PREVIEW_LENGTH = 50
DEFAULT_LIMIT = 100


@dataclass(frozen=True)
class RecordOutcome:
    """Result of a best-effort write. Callers may inspect or ignore it."""

    ok: bool
    error: Optional[str] = None


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Cap text at ``length`` characters, marking truncation with an ellipsis."""
    text = text or ""
    if len(text) <= length:
        return text
    return text[:length] + "..."


async def record_activity(session: AsyncSession, description: str) -> RecordOutcome:
    """Append one activity entry. Never raises."""
    now = utcnow()
    try:
        async with AsyncSession(session.bind, expire_on_commit=False) as audit:
            audit.add(ActivityLog(timestamp=now, description=description, created_at=now))
            await audit.commit()
    except (SQLAlchemyError, OSError) as exc:
        log.error("activity.record_failed", description=description, error=str(exc))
        return RecordOutcome(ok=False, error=str(exc))
    return RecordOutcome(ok=True)


async def list_activity(
    session: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = DEFAULT_LIMIT,
) -> list[ActivityLog]:
    """Entries newest first, optionally bounded by whole UTC days (inclusive)."""
    stmt = select(ActivityLog)
    if start_date:
        stmt = stmt.where(
            ActivityLog.timestamp >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        )
    if end_date:
        stmt = stmt.where(
            ActivityLog.timestamp <= datetime.combine(end_date, time.max, tzinfo=timezone.utc)
        )
    stmt = stmt.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())
