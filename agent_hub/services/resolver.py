from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from agent_hub.services.database import DataStore, Filter

LATEST_TOKENS = {"latest", "last", "newest", "most recent", "recent", "most recently"}
OLDEST_TOKENS = {"oldest", "first", "earliest"}

_SEPARATORS = re.compile(r"[\s\-]+")
_NON_DIGITS = re.compile(r"\D+")


@dataclass(frozen=True)
class EntitySpec:
    name: str
    table: str
    label: str
    search_fields: tuple[str, ...]
    key: str = "id"


ENTITIES: dict[str, EntitySpec] = {
    spec.name: spec
    for spec in (
        EntitySpec("lead", "leads", "Lead", ("name", "email", "phone")),
        EntitySpec("project", "projects", "Project", ("name", "address", "customer_name")),
        EntitySpec("employee", "team_directory", "Team member", ("full_name", "email"), key="user_id"),
        EntitySpec("contact", "directory_contacts", "Contact", ("company_name", "contact_name", "email")),
        EntitySpec("schedule", "job_schedules", "Schedule", ("job_name", "location")),
        EntitySpec("work_order", "work_orders", "Work order", ("title", "description")),
        EntitySpec("service_ticket", "service_tickets", "Service ticket", ("title", "customer_name", "property_address")),
        EntitySpec("time_entry", "time_clock", "Time entry", ("employee_name",)),
        EntitySpec("inspection", "project_inspections", "Inspection", ("inspection_type", "inspector_name")),
        EntitySpec("punchlist", "punchlist_items", "Punchlist item", ("description", "location")),
        EntitySpec("permit", "permits", "Permit", ("permit_type", "permit_number")),
        EntitySpec("daily_log", "daily_log_entries", "Daily log", ("tasks_performed", "log_date")),
        EntitySpec("invoice", "invoices", "Invoice", ("invoice_number", "customer_name", "project_name")),
        EntitySpec("bill", "bills", "Bill", ("bill_number", "vendor_name")),
        EntitySpec("expense", "expenses", "Expense", ("description", "vendor_name", "category")),
        EntitySpec("purchase_order", "purchase_orders", "Purchase order", ("po_number", "vendor_name", "description")),
        EntitySpec("estimate", "project_estimates", "Estimate", ("estimate_number", "title", "customer_name")),
        EntitySpec("change_order", "change_orders", "Change order", ("co_number", "title")),
        EntitySpec("todo", "todos", "Todo", ("title", "description")),
        EntitySpec("incident", "incidents", "Incident", ("title", "location")),
        EntitySpec("safety_meeting", "safety_meetings", "Safety meeting", ("title", "topics")),
        EntitySpec("material", "materials", "Material", ("name", "category")),
        EntitySpec("proposal", "proposals", "Proposal", ("proposal_number", "customer_name", "property_address")),
    )
}


def entity_spec(entity: Union[str, EntitySpec]) -> EntitySpec:
    if isinstance(entity, EntitySpec):
        return entity
    try:
        return ENTITIES[entity]
    except KeyError:
        raise KeyError(f"Unknown entity: {entity}") from None


def normalize_term(text: str) -> str:
    return " ".join(text.lower().split())


def search_terms(text: str) -> list[str]:
    """Search terms tried in order: as typed, separators stripped, digits only."""
    terms = [text]
    compact = _SEPARATORS.sub("", text)
    if compact and compact != text:
        terms.append(compact)
    digits = _NON_DIGITS.sub("", text)
    if len(digits) >= 3 and digits != text and digits not in terms:
        terms.append(digits)
    return terms


def search_filters(entity: Union[str, EntitySpec], text: str) -> list[Filter]:
    spec = entity_spec(entity)
    return [Filter(field, "ilike", text) for field in spec.search_fields]


async def tie_break(store: DataStore, spec: EntitySpec) -> tuple[str, ...]:
    columns = await store.columns(spec.table)
    order = [f"-{column}" for column in ("updated_at", "created_at") if column in columns]
    order.append(f"-{spec.key}")
    return tuple(order)


async def resolve(
    store: DataStore,
    entity: Union[str, EntitySpec],
    *,
    key: Optional[str] = None,
    text: Optional[str] = None,
    filters: Iterable[Filter] = (),
) -> Optional[dict[str, Any]]:
    """Find the single row a user most plausibly meant, or None.

    Never writes and never raises for a miss.
    """
    spec = entity_spec(entity)
    filters = list(filters)

    if key:
        return await store.select_one(spec.table, filters=[Filter(spec.key, "eq", key), *filters])

    text = (text or "").strip()
    if not text:
        return None

    term = normalize_term(text)
    if term in LATEST_TOKENS:
        return await store.select_one(
            spec.table, filters=filters, order_by=("-created_at", f"-{spec.key}")
        )
    if term in OLDEST_TOKENS:
        return await store.select_one(spec.table, filters=filters, order_by=("created_at", spec.key))

    order = await tie_break(store, spec)
    for candidate in search_terms(text):
        row = await store.select_one(
            spec.table,
            filters=filters,
            any_of=search_filters(spec, candidate),
            order_by=order,
        )
        if row is not None:
            return row
    return None


def not_found(entity: Union[str, EntitySpec], term: Any) -> dict[str, Any]:
    spec = entity_spec(entity)
    return {"success": False, "error": f"{spec.label} not found: {term}"}
