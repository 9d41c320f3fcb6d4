from __future__ import annotations

import re
from typing import Any, Optional

from agent_hub.services.database import DataStore, Filter
from agent_hub.services.dispatcher import failure
from agent_hub.services.resolver import resolve
from agent_hub.services.tool_registry import Param, ToolSpec
from agent_hub.services.tools.crm import PROJECT_STATUSES

ADMIN = "/admin"


def _tab(tab: str, subtab: Optional[str] = None) -> str:
    return f"{ADMIN}?tab={tab}" + (f"&subtab={subtab}" if subtab else "")


PAGES: dict[str, str] = {
    "home": _tab("home"),
    "dashboard": _tab("home"),
    "sales": _tab("sales"),
    "project-management": _tab("project-management"),
    "workforce": _tab("workforce"),
    "financials": _tab("financials"),
    "analytics": _tab("analytics"),
    "documents": _tab("documents"),
    "settings": _tab("settings"),
    "leads": _tab("sales", "leads"),
    "quotes": _tab("sales", "quotes"),
    "proposals": _tab("sales", "proposals"),
    "contracts": _tab("sales", "contracts"),
    "projects": _tab("project-management", "projects"),
    "daily-logs": _tab("project-management", "daily-logs"),
    "logs": _tab("project-management", "daily-logs"),
    "schedule": _tab("project-management", "schedule"),
    "todos": _tab("project-management", "todos"),
    "to-dos": _tab("project-management", "todos"),
    "work-orders": _tab("project-management", "work-orders"),
    "inspections": _tab("project-management", "inspections"),
    "punchlists": _tab("project-management", "punchlists"),
    "punch-lists": _tab("project-management", "punchlists"),
    "service-tickets": _tab("project-management", "service-tickets"),
    "permits": _tab("project-management", "permits"),
    "summary": _tab("workforce", "summary"),
    "directory": _tab("workforce", "directory"),
    "opportunities": _tab("workforce", "opportunities"),
    "timesheets": _tab("workforce", "timesheets"),
    "scheduling": _tab("workforce", "scheduling"),
    "tasks": _tab("workforce", "tasks"),
    "requests": _tab("workforce", "requests"),
    "scoring": _tab("workforce", "scoring"),
    "users": _tab("workforce", "users"),
    "incidents": _tab("workforce", "incidents"),
    "safety-meetings": _tab("workforce", "safety-meetings"),
    "estimates": _tab("financials", "estimates"),
    "bid-manager": _tab("financials", "bid-manager"),
    "change-orders": _tab("financials", "change-orders"),
    "invoices": _tab("financials", "invoices"),
    "payments": _tab("financials", "payments"),
    "expenses": _tab("financials", "expenses"),
    "purchase-orders": _tab("financials", "purchase-orders"),
    "sub-contracts": _tab("financials", "sub-contracts"),
    "bills": _tab("financials", "bills"),
    "transaction-log": _tab("financials", "transaction-log"),
    "transactions": _tab("financials", "transaction-log"),
    "files-photos": _tab("documents", "files-photos"),
    "files": _tab("documents", "files-photos"),
    "photos": _tab("documents", "files-photos"),
    "reports": _tab("documents", "reports"),
    "forms-checklists": _tab("documents", "forms-checklists"),
    "forms": _tab("documents", "forms-checklists"),
    "checklists": _tab("documents", "forms-checklists"),
    "rfi-notices": _tab("documents", "rfi-notices"),
    "rfis": _tab("documents", "rfi-notices"),
    "notices": _tab("documents", "rfi-notices"),
    "submittals": _tab("documents", "submittals"),
    "vehicle-logs": _tab("documents", "vehicle-logs"),
    "equipment-logs": _tab("documents", "equipment-logs"),
    "notes": _tab("documents", "notes"),
    "send-email": _tab("documents", "send-email"),
    "email": _tab("documents", "send-email"),
    "document-writer": _tab("documents", "document-writer"),
    "team-board": _tab("settings", "team-board"),
    "feedback": _tab("settings", "feedback"),
    "general": _tab("settings", "general"),
    "storage": _tab("settings", "storage"),
    "integrations": _tab("settings", "integrations"),
}

_PREFIXES = (
    "go to the",
    "go to",
    "open the",
    "open",
    "show me the",
    "show me",
    "show",
    "take me to the",
    "take me to",
    "navigate to",
)
_SUFFIXES = ("tab", "page", "section", "screen")
_RELATION_WORDS = re.compile(r"\b(inside of|inside|under|within|in)\b")
_COMPACT = re.compile(r"[\s\-]+")

ITEM_TYPES = ("project", "lead", "invoice", "employee")
EDITABLE_FIELDS = ("name", "address", "status", "customer_name", "customer_email", "customer_phone", "notes")


def normalize_page(page: str) -> str:
    text = " ".join(page.lower().split())
    for prefix in _PREFIXES:
        if text.startswith(prefix + " "):
            text = text[len(prefix) + 1 :].strip()
            break
    text = " ".join(_RELATION_WORDS.sub(" ", text).split())
    for suffix in _SUFFIXES:
        if text.endswith(" " + suffix):
            text = text[: -(len(suffix) + 1)].strip()
    return text


def page_url(page: str) -> tuple[str, Optional[str]]:
    """Map a spoken page name to an admin URL; unknown pages land on the admin home."""
    text = normalize_page(page)
    key = text.replace(" ", "-")
    if key in PAGES:
        return PAGES[key], key
    compact = _COMPACT.sub("", text)
    if not compact:
        return ADMIN, None
    for key, url in PAGES.items():
        if key.replace("-", "") == compact:
            return url, key
    partial = [
        key for key in PAGES if key.replace("-", "") in compact or compact in key.replace("-", "")
    ]
    if not partial:
        return ADMIN, None
    key = max(partial, key=len)
    return PAGES[key], key


def _subtab(url: str) -> Optional[str]:
    match = re.search(r"subtab=([^&]+)", url)
    return match.group(1) if match else None


async def navigate_to_page(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    url, page = page_url(params["page"])
    return {
        "success": True,
        "navigate_to": url,
        "tab": _subtab(url),
        "page": page,
        "message": f"Navigating to {params['page']}...",
    }


async def navigate_to_specific_item(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    item_type = params["item_type"]
    search = params.get("search") or "latest"
    row = await resolve(store, item_type, text=search)
    if row is None:
        return failure(
            f"{item_type.title()} not found: {search}",
            message=f"Couldn't find that {item_type}. Try a different search term.",
        )
    if item_type == "project":
        url, name = f"{ADMIN}/projects/{row['id']}", row["name"]
    elif item_type == "lead":
        url, name = f"{ADMIN}/leads/{row['id']}", row["name"]
    elif item_type == "invoice":
        url, name = f"{ADMIN}/invoices/{row['id']}", f"Invoice {row['invoice_number']}"
    else:
        url, name = f"{ADMIN}/team/{row['user_id']}", row["full_name"]
    return {
        "success": True,
        "navigate_to": url,
        "item_type": item_type,
        "item": row,
        "message": f"Opening {name}...",
    }


async def get_current_context(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    context = params.get("current_context")
    if not context:
        return {
            "success": True,
            "context": {"page": "unknown", "project_id": None, "tab": None},
            "message": "Context not provided. Ask the user where they are.",
        }
    return {"success": True, "context": context, "message": "Current context retrieved"}


async def edit_current_project(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    context = params.get("current_context") or {}
    project_id = params.get("project_id") or (context.get("project_id") if isinstance(context, dict) else None)
    if project_id:
        project = await resolve(store, "project", key=project_id)
    elif params.get("project_name"):
        project = await resolve(store, "project", text=params["project_name"])
    else:
        return failure(
            "No project context",
            message="I'm not sure which project to edit. Open the project first or tell me its name.",
        )
    if project is None:
        return failure(f"Project not found: {project_id or params['project_name']}")

    field = params["field"]
    value = params["new_value"]
    if field == "status":
        value = "_".join(value.lower().replace("-", " ").split())
        if value not in PROJECT_STATUSES:
            return failure(
                f"Invalid status '{params['new_value']}'. Allowed values: {', '.join(PROJECT_STATUSES)}",
                allowed_values=list(PROJECT_STATUSES),
            )
    rows = await store.update("projects", {field: value}, [Filter("id", "eq", project["id"])])
    return {
        "success": True,
        "project": rows[0],
        "field": field,
        "previous_value": project.get(field),
        "new_value": value,
        "trigger_refresh": True,
        "message": f"Updated {field} to \"{value}\". Refreshing the page...",
    }


async def download_pdf(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    return {
        "success": True,
        "action": "trigger_download",
        "message": "Starting download...",
    }


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "navigate_to_page",
        "Open a page or tab of the admin app, e.g. 'invoices', 'daily logs', 'safety meetings'.",
        navigate_to_page,
        params=(Param("page", description="Page or tab name as the user said it", required=True),),
        visual_type="navigation",
    ),
    ToolSpec(
        "navigate_to_specific_item",
        "Open one project, lead, invoice or employee. Search accepts names, numbers, 'latest' or 'oldest'.",
        navigate_to_specific_item,
        params=(
            Param("item_type", required=True, enum=ITEM_TYPES),
            Param("search", description="Name, number, address, 'latest' or 'oldest'; default latest"),
        ),
        visual_type="navigation",
    ),
    ToolSpec(
        "get_current_context",
        "What page and project the user is looking at right now.",
        get_current_context,
        visual_type="info_card",
    ),
    ToolSpec(
        "edit_current_project",
        "Edit one field of the project the user is viewing, or of a named project.",
        edit_current_project,
        params=(
            Param("field", required=True, enum=EDITABLE_FIELDS),
            Param("new_value", required=True),
            Param("project_id"),
            Param("project_name"),
        ),
        visual_type="success_card",
        form_type="edit_project",
        data_modified=True,
    ),
    ToolSpec(
        "download_pdf",
        "Download the report currently on screen as a PDF.",
        download_pdf,
        visual_type="download_pdf",
    ),
)
