from __future__ import annotations

import json

import pytest

import agent_hub.services.conversation as conversation
from agent_hub.services.llm import LLMError, LLMResponse, ToolCall

WHO_IS_IN = [{"role": "user", "content": "who is clocked in right now"}]


class FakeLLM:
    """Scripted chat_completion: tool calls while tools are offered, then text."""

    def __init__(self, tool_calls=(), answer="Two people are on the clock.", keep_calling=False, fail_final=False):
        self.tool_calls = list(tool_calls)
        self.answer = answer
        self.keep_calling = keep_calling
        self.fail_final = fail_final
        self.calls = []

    async def __call__(self, messages, tools=None, temperature=None, max_tokens=None, model=None):  # noqa: ARG002
        self.calls.append({"messages": [dict(m) for m in messages], "tools": tools})
        if tools is None:
            if self.fail_final:
                raise LLMError("upstream unavailable")
            return LLMResponse(text=self.answer)
        if self.tool_calls and (len(self.calls) == 1 or self.keep_calling):
            return LLMResponse(text="", tool_calls=list(self.tool_calls))
        return LLMResponse(text=self.answer)


def test_attendance_question_runs_one_tool(db_path, registry, with_store, monkeypatch) -> None:
    fake = FakeLLM([ToolCall("call_1", "query_who_clocked_in", "{}")])
    monkeypatch.setattr(conversation, "chat_completion", fake)

    result = with_store(lambda store: conversation.run_conversation(WHO_IS_IN, registry, store))

    assert [call["name"] for call in result.tool_calls] == ["query_who_clocked_in"]
    assert result.answer
    assert result.structured_data["visual_type"] == "clocked_in_list"
    assert len(fake.calls) == 2
    assert fake.calls[0]["tools"]
    assert fake.calls[1]["tools"] is None
    tool_message = fake.calls[1]["messages"][-1]
    assert tool_message["role"] == "tool"
    assert tool_message["tool_call_id"] == "call_1"
    assert json.loads(tool_message["content"])["success"] is True


def test_plain_answer_skips_tools(db_path, registry, with_store, monkeypatch) -> None:
    fake = FakeLLM(answer="Hello! How can I help?")
    monkeypatch.setattr(conversation, "chat_completion", fake)

    result = with_store(lambda store: conversation.run_conversation([{"role": "user", "content": "hi"}], registry, store))

    assert result.answer == "Hello! How can I help?"
    assert result.structured_data is None
    assert len(fake.calls) == 1


@pytest.mark.parametrize("rounds, expected_calls", [(1, 2), (2, 3), (3, 4)])
def test_tool_rounds_are_bounded(db_path, registry, with_store, monkeypatch, rounds, expected_calls) -> None:
    fake = FakeLLM([ToolCall("call_1", "query_leads", "{}")], keep_calling=True)
    monkeypatch.setattr(conversation, "chat_completion", fake)

    result = with_store(
        lambda store: conversation.run_conversation(WHO_IS_IN, registry, store, max_tool_rounds=rounds)
    )

    assert len(fake.calls) == expected_calls
    assert len(result.tool_calls) == rounds
    assert fake.calls[-1]["tools"] is None


def test_final_call_failure_falls_back_to_tool_messages(db_path, registry, with_store, monkeypatch) -> None:
    fake = FakeLLM([ToolCall("call_1", "query_who_clocked_in", "{}")], fail_final=True)
    monkeypatch.setattr(conversation, "chat_completion", fake)

    result = with_store(lambda store: conversation.run_conversation(WHO_IS_IN, registry, store))

    assert result.answer == "Nobody is clocked in right now"


def test_unparseable_arguments_become_failure_result(db_path, registry, with_store, monkeypatch) -> None:
    fake = FakeLLM([ToolCall("call_1", "create_lead", "name: Smith")])
    monkeypatch.setattr(conversation, "chat_completion", fake)

    result = with_store(lambda store: conversation.run_conversation(WHO_IS_IN, registry, store))

    assert result.tool_calls[0]["result"]["success"] is False
    assert "Could not parse arguments" in result.tool_calls[0]["result"]["error"]


def test_context_is_added_to_system_prompt() -> None:
    prompt = conversation.build_system_prompt({"project_id": "p-1", "page": "project"})

    assert '"project_id": "p-1"' in prompt
    assert "Today is" in prompt
