from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence

from agent_hub.services.config import get_settings
from agent_hub.services.database import DataStore, Filter
from agent_hub.services.dispatcher import failure
from agent_hub.services.resolver import EntitySpec, entity_spec, not_found, resolve, search_filters
from agent_hub.services.tool_registry import Param, ToolSpec

PRIORITIES = ("low", "medium", "high", "urgent")
ACTIVE_MEMBER = (Filter("status", "neq", "inactive"),)

LIMIT = Param("limit", "number", "Maximum number of rows to return")
SEARCH = Param("search", description="Free-text search term")
START_DATE = Param("start_date", description="Start date, YYYY-MM-DD", input_type="date")
END_DATE = Param("end_date", description="End date, YYYY-MM-DD", input_type="date")
PROJECT_NAME = Param("project_name", description="Project name or address")


def parse_date(value: str, name: str = "date") -> date:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError(f"{name} must be a date in YYYY-MM-DD format, got {value!r}") from None


def parse_clock_time(value: str, name: str = "time") -> str:
    """Normalize a 24h ``H:MM`` time to zero-padded ``HH:MM``."""
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").strftime("%H:%M")
    except ValueError:
        raise ValueError(f"{name} must be a time in HH:MM 24-hour format, got {value!r}") from None


def parse_timestamp(value: str) -> datetime:
    text = str(value).rstrip("Z")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def utc_datetime() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None)


def start_of_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def date_range(column: str, params: dict[str, Any]) -> list[Filter]:
    """Inclusive start/end date filters for a date or timestamp column."""
    filters: list[Filter] = []
    if params.get("start_date"):
        filters.append(Filter(column, "gte", parse_date(params["start_date"], "start_date").isoformat()))
    if params.get("end_date"):
        end = parse_date(params["end_date"], "end_date") + timedelta(days=1)
        filters.append(Filter(column, "lt", end.isoformat()))
    return filters


def query_limit(params: dict[str, Any], default: Optional[int] = None) -> int:
    settings = get_settings()
    limit = int(params.get("limit") or default or settings.query_default_limit)
    return max(1, min(limit, settings.query_max_limit))


def document_number(prefix: str) -> str:
    return f"{prefix}-{str(int(time.time() * 1000))[-6:]}"


def money(value: Any) -> float:
    return round(float(value or 0), 2)


def total(rows: Iterable[dict[str, Any]], column: str) -> float:
    return money(sum(float(row.get(column) or 0) for row in rows))


def listing(key: str, rows: list[dict[str, Any]], noun: str, **extra: Any) -> dict[str, Any]:
    return {
        "success": True,
        key: rows,
        "count": len(rows),
        "message": f"Found {len(rows)} {noun}",
        **extra,
    }


def display_name(spec: EntitySpec, row: dict[str, Any]) -> str:
    for field in spec.search_fields:
        if row.get(field):
            return str(row[field])
    return str(row[spec.key])


async def query_rows(
    store: DataStore,
    entity: str,
    params: dict[str, Any],
    *,
    filters: Sequence[Filter] = (),
    order_by: Optional[Sequence[str]] = None,
    default_limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    spec = entity_spec(entity)
    any_of = search_filters(spec, params["search"]) if params.get("search") else ()
    return await store.select(
        spec.table,
        filters=filters,
        any_of=any_of,
        order_by=order_by or ("-created_at", f"-{spec.key}"),
        limit=query_limit(params, default_limit),
    )


async def project_scope(store: DataStore, params: dict[str, Any]) -> tuple[list[Filter], Optional[dict[str, Any]]]:
    """Filters restricting a query to the named project, or a not-found result."""
    if not params.get("project_name"):
        return [], None
    project = await resolve(store, "project", text=params["project_name"])
    if project is None:
        return [], not_found("project", params["project_name"])
    return [Filter("project_id", "eq", project["id"])], None


async def link_project(store: DataStore, params: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Resolve the optional project a new record belongs to."""
    if params.get("project_id"):
        return await resolve(store, "project", key=params["project_id"])
    if params.get("project_name"):
        return await resolve(store, "project", text=params["project_name"])
    return None


def link_warning(params: dict[str, Any], project: Optional[dict[str, Any]]) -> dict[str, Any]:
    term = params.get("project_id") or params.get("project_name")
    if project is None and term:
        return {"warning": f"Project not found: {term}. Saved without a project link."}
    return {}


async def locate(
    store: DataStore,
    entity: str,
    params: dict[str, Any],
    id_param: str,
    text_param: Optional[str],
    filters: Sequence[Filter] = (),
) -> tuple[Optional[dict[str, Any]], Optional[dict[str, Any]]]:
    """Resolve the target row of an update or delete from an id or search text."""
    spec = entity_spec(entity)
    key = params.get(id_param)
    text = params.get(text_param) if text_param else None
    if not key and not text:
        hint = f"{text_param} or {id_param}" if text_param else id_param
        return None, failure(f"Specify which {spec.label.lower()}: provide {hint}.")
    row = await resolve(store, spec, key=key, text=text, filters=filters)
    if row is None:
        return None, not_found(spec, key or text)
    return row, None


async def apply_update(
    store: DataStore,
    entity: str,
    row: dict[str, Any],
    changes: dict[str, Any],
    result_key: str,
) -> dict[str, Any]:
    spec = entity_spec(entity)
    if not changes:
        return failure(f"Nothing to update on {spec.label.lower()} '{display_name(spec, row)}'.")
    updated = await store.update(spec.table, changes, [Filter(spec.key, "eq", row[spec.key])])
    return {
        "success": True,
        result_key: updated[0],
        "updated_fields": sorted(changes),
        "message": f"{spec.label} '{display_name(spec, updated[0])}' updated",
    }


def pick(params: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """Map supplied params onto column names."""
    return {column: params[name] for name, column in mapping.items() if name in params}


def delete_tool(
    name: str,
    entity: str,
    description: str,
    *,
    id_param: str,
    text_param: Optional[str] = None,
) -> ToolSpec:
    spec = entity_spec(entity)
    params: list[Param] = [Param(id_param, description=f"{spec.label} id", required=text_param is None)]
    if text_param:
        params.append(Param(text_param, description=f"Search text identifying the {spec.label.lower()}"))

    async def handler(args: dict[str, Any], store: DataStore) -> dict[str, Any]:
        row, error = await locate(store, entity, args, id_param, text_param)
        if error:
            return error
        await store.delete(spec.table, [Filter(spec.key, "eq", row[spec.key])])
        return {
            "success": True,
            "deleted": row,
            "message": f"{spec.label} '{display_name(spec, row)}' deleted",
        }

    return ToolSpec(
        name=name,
        description=description,
        handler=handler,
        params=tuple(params),
        visual_type="success_card",
        data_modified=True,
    )
