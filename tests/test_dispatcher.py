from __future__ import annotations

import asyncio

import pytest

from agent_hub.services.dispatcher import ParamError, dispatch, normalize_params
from agent_hub.services.tool_registry import Param, RegistryError, ToolRegistry, ToolSpec


async def echo(params, store):  # noqa: ARG001
    return {"echo": params, "message": "ok"}


async def refuse(params, store):  # noqa: ARG001
    return {"success": False, "message": "Not allowed"}


async def explode(params, store):  # noqa: ARG001
    raise RuntimeError("boom")


ECHO = ToolSpec(
    "echo",
    "Echo parameters back.",
    echo,
    params=(
        Param("name", required=True),
        Param("amount", "number"),
        Param("urgent", "boolean"),
        Param("status", enum=("new", "ready_to_quote")),
        Param("email", form=True, input_type="email"),
    ),
    visual_type="success_card",
    form_type="echo_form",
    data_modified=True,
)

REGISTRY = ToolRegistry(
    [
        ECHO,
        ToolSpec("refuse", "Always fails.", refuse, visual_type="lead_list"),
        ToolSpec("explode", "Always raises.", explode),
    ]
)


def run(name, params, context=None):
    return asyncio.run(dispatch(REGISTRY, None, name, params, context=context))


def test_values_are_coerced_to_declared_types() -> None:
    params = normalize_params(
        ECHO,
        {"name": "  Smith ", "amount": "$1,250.50", "urgent": "yes", "status": "Ready to Quote", "extra": 3},
    )

    assert params == {"name": "Smith", "amount": 1250.5, "urgent": True, "status": "ready_to_quote", "extra": 3}
    assert normalize_params(ECHO, {"name": "x", "amount": "40"})["amount"] == 40


def test_blank_values_are_dropped() -> None:
    assert normalize_params(ECHO, {"name": "x", "email": "  ", "amount": None}) == {"name": "x"}


def test_bad_number_raises_param_error() -> None:
    with pytest.raises(ParamError):
        normalize_params(ECHO, {"amount": "lots"})


def test_success_is_tagged_for_rendering() -> None:
    result = run("echo", {"name": "Smith"})

    assert result["success"] is True
    assert result["visual_type"] == "success_card"
    assert result["action_completed"] == "echo"
    assert result["data_modified"] is True


def test_missing_required_returns_input_form() -> None:
    result = run("echo", {"amount": 5})

    assert result["success"] is False
    assert result["needs_input"] is True
    assert result["visual_type"] == "input_form"
    assert result["form_type"] == "echo_form"
    assert result["missing_fields"] == ["name"]
    fields = {field["name"]: field for field in result["fields"]}
    assert fields["name"]["required"] is True
    assert fields["email"] == {"name": "email", "label": "Email", "required": False, "type": "email"}
    assert "amount" not in fields


def test_invalid_enum_lists_allowed_values() -> None:
    result = run("echo", {"name": "x", "status": "lost"})

    assert result["success"] is False
    assert result["visual_type"] == "error_card"
    assert result["allowed_values"] == ["new", "ready_to_quote"]


def test_unknown_tool_is_a_failure_result() -> None:
    result = run("launch_rocket", {})

    assert result == {"success": False, "error": "Unknown tool: launch_rocket", "visual_type": "error_card"}


def test_handler_failure_keeps_error_shape() -> None:
    refused = run("refuse", {})
    exploded = run("explode", {})

    assert refused["error"] == "Not allowed"
    assert refused["visual_type"] == "error_card"
    assert exploded["success"] is False
    assert exploded["error"] == "boom"


def test_context_is_passed_to_handler() -> None:
    result = run("echo", {"name": "x"}, context={"project_id": "p1"})

    assert result["echo"]["current_context"] == {"project_id": "p1"}


def test_registry_rejects_duplicates_and_bad_types() -> None:
    with pytest.raises(RegistryError):
        ToolRegistry([ECHO, ECHO])
    with pytest.raises(RegistryError):
        ToolRegistry([ToolSpec("bad", "Bad param.", echo, params=(Param("when", "date"),))])
