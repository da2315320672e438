"""Note service: free-form notes with no scheduling and no trash."""

from __future__ import annotations

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskmaster.core.timeutils import utcnow
from taskmaster.models.note import Note
from taskmaster.schemas.notes import NoteCreate, NoteUpdate
from taskmaster.services.activity import preview, record_activity

log = structlog.get_logger()


async def list_notes(session: AsyncSession) -> list[Note]:
    result = await session.execute(select(Note).order_by(Note.updated_at.desc(), Note.id.desc()))
    return list(result.scalars().all())


async def get_note_or_404(session: AsyncSession, note_id: int) -> Note:
    note = await session.get(Note, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


async def create_note(session: AsyncSession, note_in: NoteCreate) -> Note:
    title = (note_in.title or "").strip()
    content = (note_in.content or "").strip()
    if not title or not content:
        raise HTTPException(status_code=400, detail="Title and content are required")

    now = utcnow()
    note = Note(title=title, content=content, created_at=now, updated_at=now)
    session.add(note)
    await session.commit()
    await session.refresh(note)
    log.info("note.created", note_id=note.id)

    await record_activity(session, f'Created note: "{preview(note.title)}"')
    return note


async def update_note(session: AsyncSession, note: Note, note_in: NoteUpdate) -> Note:
    """Merge update: fields left out (or blank) keep their stored value."""
    if note_in.title is None and note_in.content is None:
        raise HTTPException(status_code=400, detail="Title or content is required")

    if note_in.title is not None:
        note.title = note_in.title
    if note_in.content is not None:
        note.content = note_in.content
    note.updated_at = utcnow()

    session.add(note)
    await session.commit()
    await session.refresh(note)
    log.info("note.updated", note_id=note.id)

    await record_activity(session, f'Updated note: "{preview(note.title)}"')
    return note


async def delete_note(session: AsyncSession, note: Note) -> None:
    title = note.title
    note_id = note.id
    await session.delete(note)
    await session.commit()
    log.info("note.deleted", note_id=note_id)

    await record_activity(session, f'Deleted note: "{preview(title)}"')
