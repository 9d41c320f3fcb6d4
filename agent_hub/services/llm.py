from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from agent_hub.services.config import get_settings


class LLMError(RuntimeError):
    pass


class LLMTemporaryError(LLMError):
    pass


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: str

    def as_message(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class LLMResponse:
    """One assistant turn: free text, tool calls, or both."""
    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def as_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.text or None}
        if self.tool_calls:
            message["tool_calls"] = [call.as_message() for call in self.tool_calls]
        return message


def llm_enabled() -> bool:
    settings = get_settings()
    return bool(settings.use_real_llm and settings.llm_api_key)


def _extract_text_from_message(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "\n".join(parts).strip()
    return str(content)


def _parse_tool_calls(raw_calls: Any) -> list[ToolCall]:
    calls: list[ToolCall] = []
    for index, raw in enumerate(raw_calls or []):
        function = raw.get("function") or {}
        name = function.get("name")
        if not name:
            continue
        arguments = function.get("arguments") or "{}"
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        calls.append(ToolCall(id=str(raw.get("id") or f"call_{index}"), name=name, arguments=arguments))
    return calls


async def _post_chat_completion(payload: dict[str, Any]) -> dict[str, Any]:
    settings = get_settings()
    if not settings.llm_api_key:
        raise LLMError("LLM_API_KEY is not configured")

    url = settings.llm_base_url.rstrip("/") + "/chat/completions"
    headers = {
        "Authorization": f"Bearer {settings.llm_api_key}",
        "Content-Type": "application/json",
    }

    timeout = httpx.Timeout(settings.llm_timeout_seconds)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, headers=headers, json=payload)
    except (httpx.TimeoutException, httpx.TransportError) as exc:
        raise LLMTemporaryError(f"LLM transport error: {exc}") from exc

    if response.status_code >= 500 or response.status_code in {408, 409, 425, 429}:
        raise LLMTemporaryError(f"LLM temporary error: {response.status_code}")

    if response.status_code >= 400:
        detail = response.text[:300]
        raise LLMError(f"LLM request failed ({response.status_code}): {detail}")

    return response.json()


async def _chat_completion_request(payload: dict[str, Any]) -> dict[str, Any]:
    settings = get_settings()
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(LLMTemporaryError),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        stop=stop_after_attempt(max(1, settings.llm_max_attempts)),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await _post_chat_completion(payload)
    raise LLMError("LLM request was not attempted")


async def chat_completion(
    messages: list[dict[str, Any]],
    tools: Optional[list[dict[str, Any]]] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model: Optional[str] = None,
) -> LLMResponse:
    """Call the chat-completions endpoint, optionally offering tools."""
    settings = get_settings()
    if not llm_enabled():
        raise LLMError("Real LLM mode is not enabled (set USE_REAL_LLM=true and LLM_API_KEY)")

    payload: dict[str, Any] = {
        "model": model or settings.llm_model,
        "messages": messages,
        "temperature": settings.llm_temperature if temperature is None else temperature,
        "max_tokens": max_tokens or settings.llm_max_tokens,
    }
    if tools:
        payload["tools"] = tools
        payload["tool_choice"] = "auto"

    data = await _chat_completion_request(payload)
    choices = data.get("choices", [])
    if not choices:
        raise LLMError("LLM response did not contain choices")

    message = choices[0].get("message", {})
    text = _extract_text_from_message(message.get("content")).strip()
    tool_calls = _parse_tool_calls(message.get("tool_calls"))
    if not text and not tool_calls:
        raise LLMError("LLM response contained neither text nor tool calls")

    usage = data.get("usage", {})
    return LLMResponse(
        text=text,
        tool_calls=tool_calls,
        prompt_tokens=usage.get("prompt_tokens", 0),
        completion_tokens=usage.get("completion_tokens", 0),
    )


def try_parse_json_object(text: str) -> Optional[dict[str, Any]]:
    text = (text or "").strip()
    if not text:
        return {}

    try:
        value = json.loads(text)
        if isinstance(value, dict):
            return value
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None

    try:
        value = json.loads(text[start : end + 1])
        if isinstance(value, dict):
            return value
    except json.JSONDecodeError:
        return None

    return None
