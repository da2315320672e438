"""
Assistant endpoints.

- POST /chat: run the tool loop and return the final reply as JSON
- POST /chat/stream: same loop as server-sent events (``tool_call`` per executed
  function, then one ``message``)
- POST /parse-task: fill the task form from free text
- POST /audio-note: turn an uploaded recording into a note draft

All return 503 when no model is configured.
"""

from __future__ import annotations

import json
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from taskmaster.assistant.loop import ModelClient, ModelError, iter_tool_loop, run_tool_loop
from taskmaster.assistant.tools import AssistantToolbox
from taskmaster.core.database import Database, get_session
from taskmaster.schemas.assistant import ChatRequest, ChatResponse, NoteDraft, TaskFormFill, TaskParseRequest

log = structlog.get_logger()
router = APIRouter()

# Browsers record webm/opus; used when the upload carries no content type.
DEFAULT_AUDIO_TYPE = "audio/webm"


def get_model_client(request: Request) -> ModelClient:
    client = getattr(request.app.state, "model_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Assistant is not configured (set TM_GEMINI_API_KEY).")
    return client


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    body: ChatRequest,
    request: Request,
    client: ModelClient = Depends(get_model_client),
    session: AsyncSession = Depends(get_session),
):
    if not body.history:
        raise HTTPException(status_code=400, detail="History is required")
    try:
        return await run_tool_loop(
            client,
            AssistantToolbox(session),
            body.history,
            request.app.state.settings.assistant_max_iterations,
        )
    except ModelError as exc:
        raise HTTPException(status_code=502, detail=f"Assistant model error: {exc}")


@router.post("/chat/stream")
async def chat_stream_endpoint(
    body: ChatRequest,
    request: Request,
    client: ModelClient = Depends(get_model_client),
):
    if not body.history:
        raise HTTPException(status_code=400, detail="History is required")

    db: Database = request.app.state.db
    max_iterations = request.app.state.settings.assistant_max_iterations

    async def event_stream():
        # The stream outlives the request dependencies, so it owns its session.
        async with db.session_factory() as session:
            try:
                async for step in iter_tool_loop(client, AssistantToolbox(session), body.history, max_iterations):
                    yield {"event": step.event, "data": json.dumps(step.data)}
            except ModelError as exc:
                log.error("assistant.stream_failed", error=str(exc))
                yield {"event": "error", "data": json.dumps({"error": f"Assistant model error: {exc}"})}

    return EventSourceResponse(event_stream())


@router.post("/parse-task", response_model=TaskFormFill)
async def parse_task_endpoint(
    body: TaskParseRequest,
    client: ModelClient = Depends(get_model_client),
):
    """Extract title, description, date and times from a free-text description."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        return await client.parse_task(body.text)
    except ModelError as exc:
        raise HTTPException(status_code=502, detail=f"Assistant model error: {exc}")


@router.post("/audio-note", response_model=NoteDraft)
async def audio_note_endpoint(
    audio: Optional[UploadFile] = File(None),
    client: ModelClient = Depends(get_model_client),
):
    """Transcribe a recorded voice note into a title and summary (not saved)."""
    if audio is None:
        raise HTTPException(status_code=400, detail="Missing 'audio' file field in form-data.")
    data = await audio.read()
    if not data:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    try:
        return await client.transcribe_note(data, audio.content_type or DEFAULT_AUDIO_TYPE)
    except ModelError as exc:
        raise HTTPException(status_code=502, detail=f"Assistant model error: {exc}")
