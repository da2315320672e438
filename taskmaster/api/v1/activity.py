"""Activity feed endpoint."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.activity import ActivityLogRead
from taskmaster.services.activity import DEFAULT_LIMIT, list_activity

router = APIRouter()


@router.get("", response_model=List[ActivityLogRead])
async def list_activity_endpoint(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
):
    """
    Activity entries, newest first.

    ``startDate``/``endDate`` (YYYY-MM-DD) bound the feed by whole UTC days,
    both inclusive.
    """
    return await list_activity(session, start_date, end_date, limit)
