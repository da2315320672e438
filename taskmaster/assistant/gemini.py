"""Google Gemini implementation of the assistant's model client."""

from __future__ import annotations

import io

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import BaseModel, ValidationError

from taskmaster.assistant.loop import FunctionCall, ModelError, ModelReply
from taskmaster.core.timeutils import current_date
from taskmaster.schemas.assistant import NOTE_TITLE_MAX, NoteDraft, TaskFormFill

log = structlog.get_logger()

SYSTEM_PROMPT = """You are an intelligent task management assistant. Your primary role is to help users manage their tasks, task logs, notes and momento tasks using the available functions.

GUIDELINES:
- When users mention creating, adding, or making tasks, use create_task
- When users want to see, list, or check their tasks, use fetch_tasks first
- When users want to modify or delete a task, find its id with fetch_tasks, then use edit_task or delete_task
- When users say they are starting something now, use start_momento_task
- When users say they finished or are done with something, use finish_momento_task
- When users report progress without naming a task, use add_task_log without task_id
- If a function returns an error, explain it and ask a clarifying question
- Provide clear confirmations after each operation

TASK SCHEDULING:
- task_date is "YYYY-MM-DD"; start_time and end_time are "HH:MM" in 24-hour format
- Convert "6pm" or "6 PM" to "18:00"
- When the user gives only a time, assume today's date
- End time must be after start time on the same day

Today's date is {today}."""

FORM_FILL_PROMPT = """Extract a task from the text below. Return title, description, task_date ("YYYY-MM-DD"), start_time and end_time ("HH:MM", 24-hour). Leave fields you cannot determine empty. Today's date is {today}.

Text: {text}"""

AUDIO_NOTE_PROMPT = f"""Transcribe the audio, then write a concise note about it as JSON with two fields:
- title: the core topic, at most {NOTE_TITLE_MAX} characters
- content: a clean, coherent summary of the main points"""

# Gemini rejects inline request payloads above roughly 20 MB.
INLINE_AUDIO_LIMIT = 18 * 1024 * 1024


class GeminiClient:
    """Async Gemini client speaking the ``ModelClient`` protocol."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        self._model_name = model_name
        self._client = genai.Client(api_key=api_key)
        log.info("assistant.gemini_ready", model=model_name)

    async def generate(self, contents: list[dict], declarations: list[dict]) -> ModelReply:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=contents,
                config=genai_types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT.format(today=current_date()),
                    tools=[genai_types.Tool(function_declarations=declarations)],
                    automatic_function_calling=genai_types.AutomaticFunctionCallingConfig(disable=True),
                ),
            )
        except genai_errors.APIError as exc:
            log.error("assistant.model_failed", model=self._model_name, error=str(exc))
            raise ModelError(str(exc)) from exc
        calls = [
            FunctionCall(name=call.name, args=dict(call.args or {}))
            for call in (response.function_calls or [])
        ]
        # .text warns when the reply only holds function calls
        text = None if calls else response.text
        return ModelReply(text=text, function_calls=calls)

    async def _structured(self, contents, schema: type[BaseModel]):
        """Run a JSON-mode request and validate the reply against ``schema``."""
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=contents,
                config=genai_types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except genai_errors.APIError as exc:
            log.error("assistant.model_failed", model=self._model_name, error=str(exc))
            raise ModelError(str(exc)) from exc

        raw = getattr(response, "text", None)
        if not raw:
            raise ModelError("Gemini returned an empty response.")
        try:
            return schema.model_validate_json(raw)
        except ValidationError as exc:
            log.warning("assistant.bad_json", schema=schema.__name__, raw=raw[:500])
            raise ModelError(f"Gemini returned an unusable {schema.__name__}: {exc.errors()[0]['msg']}") from exc

    async def parse_task(self, text: str) -> TaskFormFill:
        """Fill the task form from free text; unparseable fields come back empty."""
        return await self._structured(FORM_FILL_PROMPT.format(today=current_date(), text=text), TaskFormFill)

    async def transcribe_note(self, data: bytes, mime_type: str) -> NoteDraft:
        """
        Turn a voice recording into a note draft (title and summary).

        Recordings below ``INLINE_AUDIO_LIMIT`` travel inline with the request;
        larger ones go through the Files API first.
        """
        if len(data) < INLINE_AUDIO_LIMIT:
            audio = genai_types.Part.from_bytes(data=data, mime_type=mime_type)
        else:
            try:
                uploaded = await self._client.aio.files.upload(
                    file=io.BytesIO(data),
                    config=genai_types.UploadFileConfig(mime_type=mime_type),
                )
            except genai_errors.APIError as exc:
                log.error("assistant.upload_failed", size=len(data), error=str(exc))
                raise ModelError(str(exc)) from exc
            audio = genai_types.Part.from_uri(file_uri=uploaded.uri, mime_type=uploaded.mime_type or mime_type)

        log.info("assistant.transcribe", mime_type=mime_type, size=len(data))
        return await self._structured([audio, AUDIO_NOTE_PROMPT], NoteDraft)
