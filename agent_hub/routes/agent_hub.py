from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from agent_hub.services.conversation import run_conversation
from agent_hub.services.database import connect_store
from agent_hub.services.dispatcher import dispatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent-hub", tags=["agent-hub"])


class ChatMessage(BaseModel):
    role: str
    content: Optional[str] = None


class AgentHubRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    messages: Optional[list[ChatMessage]] = None
    action: Optional[str] = None
    params: Optional[dict[str, Any]] = None
    current_context: Optional[dict[str, Any]] = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("")
async def agent_hub(payload: AgentHubRequest, request: Request) -> Any:
    registry = request.app.state.registry

    if payload.action:
        params = dict(payload.params or {})
        context = params.pop("current_context", None) or payload.current_context
        store = await connect_store()
        try:
            return await dispatch(registry, store, payload.action, params, context=context)
        finally:
            await store.close()

    if payload.messages:
        messages = [message.model_dump() for message in payload.messages]
        store = await connect_store()
        try:
            result = await run_conversation(messages, registry, store, context=payload.current_context)
        finally:
            await store.close()
        logger.info(
            "Chat turn answered with %d tool call(s): %s",
            len(result.tool_calls),
            ", ".join(call["name"] for call in result.tool_calls) or "-",
        )
        return {"answer": result.answer, "structured_data": result.structured_data}

    return error_response(400, "Messages array or action/params is required")


@router.get("/tools")
async def list_tools(request: Request) -> dict[str, Any]:
    registry = request.app.state.registry
    return {"tools": registry.describe(), "count": len(registry)}
