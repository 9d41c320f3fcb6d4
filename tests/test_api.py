from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import agent_hub.services.conversation as conversation
from agent_hub.main import app
from agent_hub.services.llm import LLMResponse, ToolCall


@pytest.fixture
def client(db_path):
    return TestClient(app)


class TestAgentHubEndpoint:
    def test_action_runs_tool(self, client, seed):
        seed("leads", name="John Smith", status="contacted")

        response = client.post(
            "/api/agent-hub",
            json={"action": "update_lead_status", "params": {"lead_name": "Smith", "new_status": "quoted"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["previous_status"] == "contacted"
        assert body["new_status"] == "quoted"

    def test_action_missing_params_returns_form(self, client):
        response = client.post("/api/agent-hub", json={"action": "create_lead", "params": {}})

        assert response.status_code == 200
        assert response.json()["visual_type"] == "input_form"

    def test_unknown_action_is_a_tool_failure(self, client):
        response = client.post("/api/agent-hub", json={"action": "launch_rocket"})

        assert response.status_code == 200
        assert response.json()["error"] == "Unknown tool: launch_rocket"

    def test_empty_request_is_rejected(self, client):
        response = client.post("/api/agent-hub", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Messages array or action/params is required"}

    def test_malformed_body_is_rejected(self, client):
        response = client.post("/api/agent-hub", json={"messages": "hello"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_chat_without_llm_is_server_error(self, client):
        response = client.post("/api/agent-hub", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert "not enabled" in response.json()["error"]

    def test_chat_returns_answer_and_structured_data(self, client, monkeypatch):
        async def fake_chat_completion(messages, tools=None, temperature=None, max_tokens=None, model=None):  # noqa: ARG001
            if tools:
                return LLMResponse(text="", tool_calls=[ToolCall("call_1", "query_who_clocked_in", "{}")])
            return LLMResponse(text="Nobody is on the clock right now.")

        monkeypatch.setattr(conversation, "chat_completion", fake_chat_completion)

        response = client.post(
            "/api/agent-hub", json={"messages": [{"role": "user", "content": "who is clocked in right now"}]}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Nobody is on the clock right now."
        assert body["structured_data"]["visual_type"] == "clocked_in_list"


class TestToolListing:
    def test_tools_endpoint_lists_registry(self, client):
        response = client.get("/api/agent-hub/tools")

        assert response.status_code == 200
        body = response.json()
        names = {tool["name"] for tool in body["tools"]}
        assert body["count"] == len(body["tools"])
        assert {"update_lead_status", "query_who_clocked_in", "record_payment", "navigate_to_page"} <= names

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["real_llm_enabled"] is False
