"""
Assistant toolbox: the functions the model may call, and their executor.

``FUNCTION_DECLARATIONS`` is handed to the model verbatim. ``AssistantToolbox``
maps each declared name onto the same service call the HTTP API uses, so a
task created by the assistant is indistinguishable from one created in the
UI (activity feed entry included).

Results are always JSON-safe dicts. Validation, not-found and ambiguity
errors come back as ``{"error": message}`` so the model can relay them and
ask the user a clarifying question instead of failing the turn.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import structlog
from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.schemas.common import MAX_ROW_ID
from taskmaster.schemas.notes import NoteCreate, NoteRead, NoteUpdate
from taskmaster.schemas.tasks import TaskCreate, TaskLogRead, TaskRead, TaskUpdate
from taskmaster.services import momento, notes, task_logs, tasks

log = structlog.get_logger()

_STATUS_ENUM = ["pending", "in_progress", "completed"]
_DATE_HINT = 'format: "YYYY-MM-DD" like "2025-01-29"'
_TIME_HINT = 'format: "HH:MM" in 24-hour format like "18:00"'


def _object(properties: dict, required: list[str] | None = None) -> dict:
    return {"type": "OBJECT", "properties": properties, "required": required or []}


def _string(description: str, enum: list[str] | None = None) -> dict:
    schema = {"type": "STRING", "description": description}
    if enum:
        schema["enum"] = enum
    return schema


FUNCTION_DECLARATIONS: list[dict] = [
    # --- Tasks ---
    {
        "name": "create_task",
        "description": "Creates a new task with a title, description, optional status, and optional scheduling (date, start time, end time).",
        "parameters": _object(
            {
                "title": _string("The title of the task (required)."),
                "description": _string("A detailed description of the task."),
                "status": _string('The status of the task (optional, defaults to "pending").', _STATUS_ENUM),
                "task_date": _string(f"The date for the task (optional, {_DATE_HINT})."),
                "start_time": _string(f"The start time for the task (optional, {_TIME_HINT})."),
                "end_time": _string(f"The end time for the task (optional, {_TIME_HINT})."),
            },
            ["title"],
        ),
    },
    {
        "name": "edit_task",
        "description": "Edits an existing task. Provide the task id and only the fields to change.",
        "parameters": _object(
            {
                "id": _string("The unique identifier of the task to edit."),
                "title": _string("The new title of the task (optional)."),
                "description": _string("The new description of the task (optional)."),
                "status": _string("The new status of the task (optional).", _STATUS_ENUM),
                "task_date": _string(f"The new date for the task (optional, {_DATE_HINT})."),
                "start_time": _string(f"The new start time (optional, {_TIME_HINT})."),
                "end_time": _string(f"The new end time (optional, {_TIME_HINT})."),
            },
            ["id"],
        ),
    },
    {
        "name": "delete_task",
        "description": "Deletes a task by its unique identifier. The task and its logs are moved to the trash.",
        "parameters": _object({"id": _string("The unique identifier of the task to delete.")}, ["id"]),
    },
    {
        "name": "fetch_tasks",
        "description": "Fetches all tasks with their details, including id, title, description, status, task_date, start_time, and end_time.",
        "parameters": _object({}),
    },
    # --- Task logs ---
    {
        "name": "add_task_log",
        "description": (
            "Adds a progress log entry to a task. If no task_id is given the entry goes to the "
            "currently active momento task, if there is one."
        ),
        "parameters": _object(
            {
                "task_id": _string("The id of the task to log against (optional)."),
                "content": _string("The log entry text."),
            },
            ["content"],
        ),
    },
    {
        "name": "fetch_task_logs",
        "description": "Fetches the log entries of a task, newest first.",
        "parameters": _object({"task_id": _string("The id of the task.")}, ["task_id"]),
    },
    {
        "name": "edit_task_log",
        "description": "Replaces the content of an existing task log entry.",
        "parameters": _object(
            {
                "task_id": _string("The id of the task the log belongs to."),
                "log_id": _string("The id of the log entry."),
                "content": _string("The new log entry text."),
            },
            ["task_id", "log_id", "content"],
        ),
    },
    {
        "name": "delete_task_log",
        "description": "Deletes a task log entry.",
        "parameters": _object(
            {
                "task_id": _string("The id of the task the log belongs to."),
                "log_id": _string("The id of the log entry."),
            },
            ["task_id", "log_id"],
        ),
    },
    # --- Notes ---
    {
        "name": "create_note",
        "description": "Creates a note with a title and content.",
        "parameters": _object(
            {"title": _string("The note title."), "content": _string("The note body.")},
            ["title", "content"],
        ),
    },
    {
        "name": "edit_note",
        "description": "Edits a note. Provide the note id and the title and/or content to change.",
        "parameters": _object(
            {
                "id": _string("The id of the note to edit."),
                "title": _string("The new title (optional)."),
                "content": _string("The new content (optional)."),
            },
            ["id"],
        ),
    },
    {
        "name": "delete_note",
        "description": "Permanently deletes a note.",
        "parameters": _object({"id": _string("The id of the note to delete.")}, ["id"]),
    },
    {
        "name": "fetch_notes",
        "description": "Fetches all notes, most recently updated first.",
        "parameters": _object({}),
    },
    # --- Momento ---
    {
        "name": "start_momento_task",
        "description": "Starts tracking spontaneous work right now, e.g. when the user says they are starting something.",
        "parameters": _object(
            {
                "title": _string("What the user is starting."),
                "description": _string("Optional extra detail."),
            },
            ["title"],
        ),
    },
    {
        "name": "finish_momento_task",
        "description": (
            "Finishes an active momento task. The identifier may be the task id or words from its title. "
            "If the result lists several candidates, ask the user which one they meant."
        ),
        "parameters": _object(
            {"task_identifier": _string("The task id or part of its title.")},
            ["task_identifier"],
        ),
    },
    {
        "name": "get_active_momento_tasks",
        "description": "Lists the momento tasks currently in progress with how long each has been running.",
        "parameters": _object({}),
    },
]


def _require_id(args: dict, key: str) -> int:
    value = args.get(key)
    if value is None or str(value).strip() == "":
        raise ValueError(f"{key} is required")
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{key} must be a number, got {value!r}") from None
    if not 1 <= number <= MAX_ROW_ID:
        raise ValueError(f"{key} must be a positive id, got {value!r}")
    return number


def _task(task) -> dict:
    return TaskRead.model_validate(task).model_dump(mode="json")


class AssistantToolbox:
    """Executes model function calls against one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._handlers: dict[str, Callable[[dict], Awaitable[dict]]] = {
            "create_task": self.create_task,
            "edit_task": self.edit_task,
            "delete_task": self.delete_task,
            "fetch_tasks": self.fetch_tasks,
            "add_task_log": self.add_task_log,
            "fetch_task_logs": self.fetch_task_logs,
            "edit_task_log": self.edit_task_log,
            "delete_task_log": self.delete_task_log,
            "create_note": self.create_note,
            "edit_note": self.edit_note,
            "delete_note": self.delete_note,
            "fetch_notes": self.fetch_notes,
            "start_momento_task": self.start_momento_task,
            "finish_momento_task": self.finish_momento_task,
            "get_active_momento_tasks": self.get_active_momento_tasks,
        }

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    async def execute(self, name: str, args: dict[str, Any] | None) -> dict:
        handler = self._handlers.get(name)
        if handler is None:
            log.warning("assistant.unknown_tool", tool=name)
            return {"error": f"Unknown function: {name}"}

        try:
            result = await handler(dict(args or {}))
        except HTTPException as exc:
            await self.session.rollback()
            log.info("assistant.tool_rejected", tool=name, status=exc.status_code, error=exc.detail)
            return {"error": str(exc.detail)}
        except ValidationError as exc:
            await self.session.rollback()
            message = "; ".join(err["msg"] for err in exc.errors())
            log.info("assistant.tool_invalid_args", tool=name, error=message)
            return {"error": message}
        except ValueError as exc:
            await self.session.rollback()
            log.info("assistant.tool_invalid_args", tool=name, error=str(exc))
            return {"error": str(exc)}

        log.info("assistant.tool_executed", tool=name)
        return jsonable_encoder(result)

    # --- Tasks ---

    async def create_task(self, args: dict) -> dict:
        task = await tasks.create_task(self.session, TaskCreate(**args))
        return {"task": _task(task)}

    async def edit_task(self, args: dict) -> dict:
        task = await tasks.get_task_or_404(self.session, _require_id(args, "id"))
        fields = {k: v for k, v in args.items() if k != "id"}
        task = await tasks.update_task(self.session, task, TaskUpdate(**fields))
        return {"task": _task(task)}

    async def delete_task(self, args: dict) -> dict:
        task = await tasks.get_task_or_404(self.session, _require_id(args, "id"))
        trashed = await tasks.delete_task(self.session, task)
        return {"deleted": True, "id": trashed.original_task_id, "title": trashed.title}

    async def fetch_tasks(self, args: dict) -> dict:
        return {"tasks": [_task(t) for t in await tasks.list_tasks(self.session)]}

    # --- Task logs ---

    async def add_task_log(self, args: dict) -> dict:
        content = args.get("content")
        if args.get("task_id") in (None, ""):
            result = await momento.auto_log_to_active_momento(self.session, content)
            if not result.logged:
                return {
                    "error": (
                        "No task was specified and no momento task is active. "
                        "Ask the user which task this log belongs to."
                    )
                }
            return result.model_dump(mode="json")

        task = await tasks.get_task_or_404(self.session, _require_id(args, "task_id"))
        entry = await task_logs.add_task_log(self.session, task, content)
        return {"log": TaskLogRead.model_validate(entry).model_dump(mode="json"), "task": _task(task)}

    async def fetch_task_logs(self, args: dict) -> dict:
        task = await tasks.get_task_or_404(self.session, _require_id(args, "task_id"))
        entries = await task_logs.list_task_logs(self.session, task)
        return {
            "task": _task(task),
            "logs": [TaskLogRead.model_validate(e).model_dump(mode="json") for e in entries],
        }

    async def edit_task_log(self, args: dict) -> dict:
        task = await tasks.get_task_or_404(self.session, _require_id(args, "task_id"))
        entry = await task_logs.get_log_or_404(self.session, task, _require_id(args, "log_id"))
        entry = await task_logs.update_task_log(self.session, task, entry, args.get("content"))
        return {"log": TaskLogRead.model_validate(entry).model_dump(mode="json")}

    async def delete_task_log(self, args: dict) -> dict:
        task = await tasks.get_task_or_404(self.session, _require_id(args, "task_id"))
        entry = await task_logs.get_log_or_404(self.session, task, _require_id(args, "log_id"))
        log_id = entry.id
        await task_logs.delete_task_log(self.session, task, entry)
        return {"deleted": True, "log_id": log_id, "task_id": task.id}

    # --- Notes ---

    async def create_note(self, args: dict) -> dict:
        note = await notes.create_note(self.session, NoteCreate(**args))
        return {"note": NoteRead.model_validate(note).model_dump(mode="json")}

    async def edit_note(self, args: dict) -> dict:
        note = await notes.get_note_or_404(self.session, _require_id(args, "id"))
        fields = {k: v for k, v in args.items() if k != "id"}
        note = await notes.update_note(self.session, note, NoteUpdate(**fields))
        return {"note": NoteRead.model_validate(note).model_dump(mode="json")}

    async def delete_note(self, args: dict) -> dict:
        note = await notes.get_note_or_404(self.session, _require_id(args, "id"))
        note_id, title = note.id, note.title
        await notes.delete_note(self.session, note)
        return {"deleted": True, "id": note_id, "title": title}

    async def fetch_notes(self, args: dict) -> dict:
        items = await notes.list_notes(self.session)
        return {"notes": [NoteRead.model_validate(n).model_dump(mode="json") for n in items]}

    # --- Momento ---

    async def start_momento_task(self, args: dict) -> dict:
        started = await momento.start_momento(self.session, args.get("title", ""), args.get("description"))
        return {"task": started.model_dump(mode="json")}

    async def finish_momento_task(self, args: dict) -> dict:
        identifier = args.get("task_identifier")
        if identifier is None or str(identifier).strip() == "":
            raise ValueError("task_identifier is required")
        if isinstance(identifier, float) and identifier.is_integer():
            identifier = int(identifier)
        finished = await momento.finish_momento(self.session, identifier)
        return {"task": finished.model_dump(mode="json")}

    async def get_active_momento_tasks(self, args: dict) -> dict:
        items = await momento.list_active_momento_tasks(self.session)
        return {"tasks": [item.model_dump(mode="json") for item in items]}
