from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from agent_hub.services.database import DataStore
from agent_hub.services.tool_registry import Param, ToolRegistry, ToolSpec

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


class ParamError(ValueError):
    def __init__(self, message: str, allowed: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.allowed = allowed


def failure(error: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error": error, "visual_type": "error_card", **extra}


def _coerce(param: Param, value: Any) -> Any:
    if param.type == "number":
        if isinstance(value, bool):
            raise ParamError(f"{param.name} must be a number")
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            text = str(value).strip().replace(",", "").lstrip("$")
            try:
                number = float(text)
            except ValueError:
                raise ParamError(f"{param.name} must be a number, got {value!r}") from None
        return int(number) if number.is_integer() else number

    if param.type == "boolean":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ParamError(f"{param.name} must be true or false, got {value!r}")

    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    if param.enum:
        candidate = "_".join(text.lower().replace("-", " ").split())
        for option in param.enum:
            if candidate == option.lower():
                return option
        raise ParamError(
            f"Invalid {param.name} '{text}'. Allowed values: {', '.join(param.enum)}",
            allowed=param.enum,
        )
    return text


def normalize_params(tool: ToolSpec, params: dict[str, Any]) -> dict[str, Any]:
    """Drop blanks and coerce declared params to their declared types.

    Undeclared keys pass through untouched.
    """
    normalized: dict[str, Any] = {}
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        param = tool.param(name)
        normalized[name] = _coerce(param, value) if param is not None else value
    return normalized


def input_form(form_type: str, message: str, fields: Sequence[Param], missing: Sequence[str]) -> dict[str, Any]:
    return {
        "success": False,
        "needs_input": True,
        "visual_type": "input_form",
        "form_type": form_type,
        "message": message,
        "fields": [param.form_field() for param in fields],
        "missing_fields": list(missing),
    }


def needs_input(tool: ToolSpec, missing: list[str]) -> dict[str, Any]:
    labels = ", ".join(tool.param(name).label.lower() for name in missing)
    return input_form(
        tool.form_type or tool.name,
        f"I need a few more details: {labels}.",
        [param for param in tool.params if param.required or param.form],
        missing,
    )


def _finalize(tool: ToolSpec, result: dict[str, Any]) -> dict[str, Any]:
    result.setdefault("success", True)
    if result["success"]:
        if tool.visual_type:
            result.setdefault("visual_type", tool.visual_type)
        if tool.data_modified:
            result.setdefault("action_completed", tool.name)
            result.setdefault("data_modified", True)
    else:
        result.setdefault("visual_type", "error_card")
        result.setdefault("error", result.get("message") or "Request failed")
    return result


async def dispatch(
    registry: ToolRegistry,
    store: DataStore,
    name: str,
    params: Optional[dict[str, Any]],
    *,
    context: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Run one tool by name and return its render-tagged result. Never raises."""
    tool = registry.get(name)
    if tool is None:
        logger.warning("Unknown tool requested: %s", name)
        return failure(f"Unknown tool: {name}")

    try:
        normalized = normalize_params(tool, dict(params or {}))
    except ParamError as exc:
        extra = {"allowed_values": list(exc.allowed)} if exc.allowed else {}
        return failure(str(exc), **extra)

    missing = [param.name for param in tool.params if param.required and param.name not in normalized]
    if missing:
        logger.info("Tool %s needs input: %s", name, ", ".join(missing))
        return needs_input(tool, missing)

    if context is not None:
        normalized.setdefault("current_context", context)

    logger.info("Running tool %s", name)
    try:
        result = await tool.handler(normalized, store)
    except Exception as exc:
        logger.exception("Tool %s failed", name)
        return failure(str(exc) or exc.__class__.__name__)
    return _finalize(tool, result)
