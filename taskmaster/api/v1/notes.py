"""Note endpoints: CRUD (hard delete, no trash)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.database import get_session
from taskmaster.schemas.common import OkResponse, RowId
from taskmaster.schemas.notes import NoteCreate, NoteRead, NoteUpdate
from taskmaster.services.notes import (
    create_note,
    delete_note,
    get_note_or_404,
    list_notes,
    update_note,
)

router = APIRouter()


@router.get("", response_model=List[NoteRead])
async def list_notes_endpoint(session: AsyncSession = Depends(get_session)):
    return await list_notes(session)


@router.post("", response_model=NoteRead, status_code=201)
async def create_note_endpoint(note_in: NoteCreate, session: AsyncSession = Depends(get_session)):
    return await create_note(session, note_in)


@router.get("/{note_id}", response_model=NoteRead)
async def get_note_endpoint(note_id: RowId, session: AsyncSession = Depends(get_session)):
    return await get_note_or_404(session, note_id)


@router.put("/{note_id}", response_model=NoteRead)
async def update_note_endpoint(
    note_id: RowId,
    note_in: NoteUpdate,
    session: AsyncSession = Depends(get_session),
):
    note = await get_note_or_404(session, note_id)
    return await update_note(session, note, note_in)


@router.delete("/{note_id}", response_model=OkResponse)
async def delete_note_endpoint(note_id: RowId, session: AsyncSession = Depends(get_session)):
    note = await get_note_or_404(session, note_id)
    await delete_note(session, note)
    return OkResponse(message="Note deleted")
