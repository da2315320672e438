"""Trash endpoint (read-only)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.trash import DeletedTaskRead
from taskmaster.services.trash import list_trash

router = APIRouter()


@router.get("", response_model=List[DeletedTaskRead])
async def list_trash_endpoint(session: AsyncSession = Depends(get_session)):
    """Deleted tasks with their logs, most recent deletion first."""
    return await list_trash(session)
