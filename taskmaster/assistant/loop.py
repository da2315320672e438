"""
Bounded function-calling loop between the model and the toolbox.

Each round presents the conversation to the model. A reply carrying function
calls has its first call executed; the call and its result are appended as
two turns (``model`` then ``user``) and the loop continues. The first reply
without a function call ends the loop. After ``max_iterations`` rounds the
loop gives up with ``FALLBACK_TEXT``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

import structlog

from taskmaster.assistant.tools import FUNCTION_DECLARATIONS, AssistantToolbox
from taskmaster.schemas.assistant import ChatMessage, ChatResponse, NoteDraft, TaskFormFill

log = structlog.get_logger()

DEFAULT_MAX_ITERATIONS = 8
FALLBACK_TEXT = (
    "Sorry, I was unable to complete that request. "
    "Please try rephrasing it or breaking it into smaller steps."
)


@dataclass
class FunctionCall:
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class ModelReply:
    text: Optional[str] = None
    function_calls: list[FunctionCall] = field(default_factory=list)


class ModelError(RuntimeError):
    """The model provider failed or returned nothing usable."""


class ModelClient(Protocol):
    async def generate(self, contents: list[dict], declarations: list[dict]) -> ModelReply:
        ...

    async def parse_task(self, text: str) -> TaskFormFill:
        ...

    async def transcribe_note(self, data: bytes, mime_type: str) -> NoteDraft:
        ...


@dataclass
class LoopEvent:
    """One step of the loop, as surfaced to streaming clients."""

    event: str  # tool_call | message
    data: dict


def history_to_contents(history: Sequence[ChatMessage]) -> list[dict]:
    return [{"role": m.role, "parts": [{"text": m.text}]} for m in history]


async def iter_tool_loop(
    client: ModelClient,
    toolbox: AssistantToolbox,
    history: Sequence[ChatMessage],
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> AsyncIterator[LoopEvent]:
    """Drive the loop, yielding a ``tool_call`` event per executed call and one final ``message``."""
    contents = history_to_contents(history)
    calls = 0

    for _ in range(max_iterations):
        reply = await client.generate(contents, FUNCTION_DECLARATIONS)
        if not reply.function_calls:
            response = ChatResponse(text=reply.text or "", tool_calls=calls)
            yield LoopEvent("message", response.model_dump())
            return

        call = reply.function_calls[0]
        result = await toolbox.execute(call.name, call.args)
        calls += 1
        log.info("assistant.tool_call", tool=call.name, round=calls, error="error" in result)

        contents.append({"role": "model", "parts": [{"function_call": {"name": call.name, "args": call.args}}]})
        contents.append(
            {
                "role": "user",
                "parts": [{"function_response": {"name": call.name, "response": {"result": result}}}],
            }
        )
        yield LoopEvent("tool_call", {"name": call.name, "args": call.args, "result": result})

    log.warning("assistant.loop_exhausted", max_iterations=max_iterations, tool_calls=calls)
    response = ChatResponse(text=FALLBACK_TEXT, tool_calls=calls, exhausted=True)
    yield LoopEvent("message", response.model_dump())


async def run_tool_loop(
    client: ModelClient,
    toolbox: AssistantToolbox,
    history: Sequence[ChatMessage],
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> ChatResponse:
    final: Optional[ChatResponse] = None
    async for step in iter_tool_loop(client, toolbox, history, max_iterations):
        if step.event == "message":
            final = ChatResponse(**step.data)
    return final
