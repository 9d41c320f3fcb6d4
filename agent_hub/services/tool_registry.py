from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Iterator, Optional

from agent_hub.services.database import DataStore

Handler = Callable[[dict[str, Any], DataStore], Awaitable[dict[str, Any]]]

PARAM_TYPES = ("string", "number", "boolean")


class RegistryError(RuntimeError):
    pass


@dataclass(frozen=True)
class Param:
    name: str
    type: str = "string"
    description: str = ""
    enum: tuple[str, ...] = ()
    required: bool = False
    # Shown on the input form even when optional
    form: bool = False
    input_type: str = ""

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    def schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema

    def form_field(self) -> dict[str, Any]:
        if self.enum:
            field_type = "select"
        elif self.input_type:
            field_type = self.input_type
        elif self.type == "number":
            field_type = "number"
        else:
            field_type = "text"
        field: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "required": self.required,
            "type": field_type,
        }
        if self.enum:
            field["options"] = list(self.enum)
        return field


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    handler: Handler
    params: tuple[Param, ...] = ()
    visual_type: Optional[str] = None
    form_type: Optional[str] = None
    data_modified: bool = False

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(param.name for param in self.params if param.required)

    def param(self, name: str) -> Optional[Param]:
        for param in self.params:
            if param.name == name:
                return param
        return None

    def schema(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {param.name: param.schema() for param in self.params},
                    "required": list(self.required),
                },
            },
        }


class ToolRegistry:
    """Read-only name -> ToolSpec table shared by the dispatcher and the LLM."""

    def __init__(self, tools: Iterable[ToolSpec]) -> None:
        by_name: dict[str, ToolSpec] = {}
        for tool in tools:
            if tool.name in by_name:
                raise RegistryError(f"Duplicate tool name: {tool.name}")
            for param in tool.params:
                if param.type not in PARAM_TYPES:
                    raise RegistryError(f"{tool.name}.{param.name}: unsupported type {param.type!r}")
            by_name[tool.name] = tool
        self._tools = MappingProxyType(by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tools(self) -> MappingProxyType:
        return self._tools

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._tools)

    def schemas(self) -> list[dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    def describe(self) -> list[dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "visual_type": tool.visual_type,
                "data_modified": tool.data_modified,
                "parameters": [
                    {"name": param.name, "type": param.type, "required": param.required, "enum": list(param.enum)}
                    for param in tool.params
                ],
            }
            for tool in self._tools.values()
        ]


def build_registry() -> ToolRegistry:
    from agent_hub.services.tools import crm, financials, navigation, operations, reports

    return ToolRegistry(
        crm.TOOLS + operations.TOOLS + financials.TOOLS + navigation.TOOLS + reports.TOOLS
    )
