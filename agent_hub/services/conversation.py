from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from agent_hub.services.config import get_settings
from agent_hub.services.database import DataStore, today
from agent_hub.services.dispatcher import dispatch, failure
from agent_hub.services.llm import LLMError, chat_completion, try_parse_json_object
from agent_hub.services.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are the back-office assistant for a roofing contractor. Today is {today}.

You act through tools. Pick the single best tool for the request and fill in only the
parameters the user actually gave you; the system asks for anything missing.

You can:
- look up and manage leads, projects, team members and the company directory
- schedule jobs, manage work orders, service tickets, todos, inspections, punchlists,
  permits, daily logs, incidents and safety meetings
- clock people in and out, see who is on the clock, approve timesheets and chart attendance
- create and update invoices, bills, expenses, purchase orders, estimates and change orders,
  record payments and report on project and company financials
- open pages of the admin app or a specific project, lead, invoice or employee
- prepare timesheet, invoice, proposal and project summary reports for download

Words like "latest", "last", "newest" or "most recent" refer to the newest record;
"first" or "oldest" to the oldest one. Answer briefly in plain language, quoting the
figures the tools returned. Never invent records."""

CONTEXT_NOTE = "\n\nThe user is currently viewing: {context}"


@dataclass
class ConversationResult:
    answer: str
    structured_data: Optional[dict[str, Any]] = None
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def build_system_prompt(context: Optional[dict[str, Any]] = None) -> str:
    prompt = SYSTEM_PROMPT.format(today=today())
    if context:
        prompt += CONTEXT_NOTE.format(context=json.dumps(context, default=str))
    return prompt


def _chat_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    cleaned = []
    for message in messages:
        role = message.get("role")
        content = message.get("content")
        if role in {"user", "assistant"} and isinstance(content, str) and content.strip():
            cleaned.append({"role": role, "content": content})
    return cleaned


def _fallback_answer(calls: list[dict[str, Any]]) -> str:
    parts = []
    for call in calls:
        result = call["result"]
        text = result.get("message") or result.get("error")
        if text:
            parts.append(str(text))
    return " ".join(parts) or "Done."


async def _run_tool_calls(
    response: Any,
    history: list[dict[str, Any]],
    registry: ToolRegistry,
    store: DataStore,
    context: Optional[dict[str, Any]],
) -> list[dict[str, Any]]:
    history.append(response.as_message())
    executed = []
    for call in response.tool_calls:
        arguments = try_parse_json_object(call.arguments)
        if arguments is None:
            logger.warning("Unparseable arguments for %s: %s", call.name, call.arguments[:200])
            result = failure(f"Could not parse arguments for {call.name}")
        else:
            result = await dispatch(registry, store, call.name, arguments, context=context)
        executed.append({"id": call.id, "name": call.name, "arguments": arguments, "result": result})
        history.append(
            {"role": "tool", "tool_call_id": call.id, "content": json.dumps(result, default=str)}
        )
    return executed


async def run_conversation(
    messages: list[dict[str, Any]],
    registry: ToolRegistry,
    store: DataStore,
    *,
    context: Optional[dict[str, Any]] = None,
    max_tool_rounds: Optional[int] = None,
) -> ConversationResult:
    """One user turn: let the model pick tools, run them, then phrase the answer.

    Up to ``max_tool_rounds`` rounds of tool calls are executed; the closing
    call is always made with tools disabled. Tool calls run sequentially in
    the order the model emitted them.
    """
    settings = get_settings()
    rounds = max(1, settings.max_tool_rounds if max_tool_rounds is None else max_tool_rounds)
    history = [{"role": "system", "content": build_system_prompt(context)}, *_chat_messages(messages)]
    tools = registry.schemas()

    response = await chat_completion(history, tools=tools)
    executed: list[dict[str, Any]] = []
    for round_number in range(1, rounds + 1):
        if not response.tool_calls:
            break
        executed.extend(await _run_tool_calls(response, history, registry, store, context))
        if round_number == rounds:
            response = None
            break
        response = await chat_completion(history, tools=tools)

    if not executed:
        return ConversationResult(answer=response.text)

    structured = None
    for call in executed:
        if call["result"].get("visual_type"):
            structured = call["result"]

    if response is not None and not response.tool_calls:
        answer = response.text
    else:
        try:
            final = await chat_completion(history, max_tokens=settings.llm_final_max_tokens)
            answer = final.text
        except LLMError:
            logger.exception("Final answer call failed; answering from tool results")
            answer = _fallback_answer(executed)

    return ConversationResult(answer=answer, structured_data=structured, tool_calls=executed)
