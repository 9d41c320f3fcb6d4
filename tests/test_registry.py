from __future__ import annotations

import asyncio

import pytest

from agent_hub.services.dispatcher import dispatch
from agent_hub.services.tool_registry import PARAM_TYPES, build_registry

REGISTRY = build_registry()
CREATE_TOOLS = sorted(tool.name for tool in REGISTRY if tool.name.startswith(("create_", "add_")) and tool.required)


def sample_value(param):
    if param.enum:
        return param.enum[0]
    if param.type == "number":
        return 125
    if param.type == "boolean":
        return True
    if param.input_type == "date" or param.name.endswith("_date"):
        return "2025-01-06"
    return "Sample"


def test_registry_is_complete_and_flat() -> None:
    names = REGISTRY.names()

    assert len(names) == len(set(names)) == len(REGISTRY)
    assert len(REGISTRY) >= 60
    for tool in REGISTRY:
        assert tool.description
        assert tool.visual_type, tool.name
        for param in tool.params:
            assert param.type in PARAM_TYPES


def test_schemas_use_function_calling_format() -> None:
    schemas = {schema["function"]["name"]: schema for schema in REGISTRY.schemas()}

    lead = schemas["update_lead_status"]["function"]["parameters"]
    assert schemas["update_lead_status"]["type"] == "function"
    assert lead["required"] == ["new_status"]
    assert "quoted" in lead["properties"]["new_status"]["enum"]


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        REGISTRY.tools["sneaky"] = REGISTRY.get("query_leads")


@pytest.mark.parametrize("name", CREATE_TOOLS)
def test_create_tool_without_fields_lists_exactly_the_missing_ones(name) -> None:
    tool = REGISTRY.get(name)

    result = asyncio.run(dispatch(REGISTRY, None, name, {}))

    assert result["visual_type"] == "input_form"
    assert result["missing_fields"] == list(tool.required)


@pytest.mark.parametrize("name", CREATE_TOOLS)
def test_create_tool_with_required_fields_never_asks_for_input(name, registry, with_store) -> None:
    tool = registry.get(name)
    params = {param.name: sample_value(param) for param in tool.params if param.required}

    result = with_store(lambda store: dispatch(registry, store, name, params))

    assert not result.get("needs_input"), result
