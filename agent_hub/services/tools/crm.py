from __future__ import annotations

from typing import Any, Optional

from agent_hub.services.database import DataStore, Filter
from agent_hub.services.dispatcher import failure
from agent_hub.services.resolver import resolve
from agent_hub.services.tool_registry import Param, ToolSpec
from agent_hub.services.tools.common import (
    ACTIVE_MEMBER,
    END_DATE,
    LIMIT,
    SEARCH,
    START_DATE,
    apply_update,
    date_range,
    delete_tool,
    listing,
    locate,
    parse_timestamp,
    pick,
    query_rows,
    utc_datetime,
)
from agent_hub.services.tools.financials import project_financials

LEAD_STATUSES = (
    "new",
    "contacted",
    "ready_to_quote",
    "quoted",
    "proposal_sent",
    "contract_sent",
    "in_production",
    "inspected",
    "paid",
)
PROJECT_STATUSES = ("pending", "scheduled", "active", "in_progress", "completed", "on_hold", "cancelled")
MEMBER_STATUSES = ("active", "invited", "inactive")
MEMBER_ROLES = ("owner", "admin", "manager", "contributor", "field_worker")
CONTACT_TYPES = ("vendor", "subcontractor", "supplier", "customer", "inspector", "other")


def status_steps(statuses: tuple[str, ...], current: str) -> list[dict[str, Any]]:
    position = statuses.index(current) if current in statuses else -1
    return [
        {
            "status": status,
            "label": status.replace("_", " ").title(),
            "completed": index <= position,
            "current": index == position,
        }
        for index, status in enumerate(statuses)
    ]


def _best_photo(photos: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not photos:
        return None
    for match in (
        lambda p: p.get("is_highlighted_after"),
        lambda p: p.get("photo_tag") == "after",
        lambda p: p.get("is_highlighted_before"),
    ):
        for photo in photos:
            if match(photo):
                return photo
    return photos[0]


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------


async def query_leads(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = date_range("created_at", params)
    if params.get("status"):
        filters.append(Filter("status", "eq", params["status"]))
    leads = await query_rows(store, "lead", params, filters=filters)
    return listing("leads", leads, "lead(s)")


async def create_lead(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    values = pick(
        params,
        {
            "name": "name",
            "email": "email",
            "phone": "phone",
            "address": "address",
            "project_type": "project_type",
            "source": "source",
            "notes": "notes",
        },
    )
    values["status"] = "new"
    lead = await store.insert("leads", values)
    return {"success": True, "lead": lead, "message": f"Lead '{lead['name']}' created"}


async def update_lead_status(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    lead, error = await locate(store, "lead", params, "lead_id", "lead_name")
    if error:
        return error
    previous = lead["status"]
    new_status = params["new_status"]
    rows = await store.update("leads", {"status": new_status}, [Filter("id", "eq", lead["id"])])
    return {
        "success": True,
        "lead": rows[0],
        "previous_status": previous,
        "new_status": new_status,
        "status_steps": status_steps(LEAD_STATUSES, new_status),
        "message": f"Lead '{lead['name']}' moved from {previous} to {new_status}",
    }


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


async def query_projects(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = []
    if params.get("status"):
        filters.append(Filter("status", "eq", params["status"]))
    projects = await query_rows(
        store, "project", params, filters=filters, order_by=("-updated_at", "-created_at", "-id"), default_limit=10
    )
    now = utc_datetime()
    enriched = []
    for project in projects:
        photos = await store.select(
            "project_photos",
            filters=[Filter("project_id", "eq", project["id"])],
            order_by=("-is_highlighted_after", "-created_at"),
            limit=5,
        )
        photo = _best_photo(photos)
        updated = parse_timestamp(project.get("updated_at") or project["created_at"])
        item = {
            **project,
            "photo_url": photo["photo_url"] if photo else None,
            "photo_tag": photo["photo_tag"] if photo else None,
            "photo_count": len(photos),
            "team_count": await store.count("project_team_assignments", [Filter("project_id", "eq", project["id"])]),
            "days_since_update": (now - updated).days,
        }
        if params.get("include_financials"):
            item["financials"] = await project_financials(store, project["id"])
        enriched.append(item)
    return listing("projects", enriched, "project(s)")


async def create_project(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    values = pick(
        params,
        {
            "name": "name",
            "address": "address",
            "customer_name": "customer_name",
            "customer_email": "customer_email",
            "customer_phone": "customer_phone",
            "project_type": "project_type",
            "start_date": "start_date",
            "notes": "notes",
        },
    )
    values["status"] = params.get("status", "pending")
    project = await store.insert("projects", values)
    return {"success": True, "project": project, "message": f"Project '{project['name']}' created"}


async def update_project_status(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project, error = await locate(store, "project", params, "project_id", "project_name")
    if error:
        return error
    previous = project["status"]
    new_status = params["new_status"]
    rows = await store.update("projects", {"status": new_status}, [Filter("id", "eq", project["id"])])
    return {
        "success": True,
        "project": rows[0],
        "previous_status": previous,
        "new_status": new_status,
        "status_steps": status_steps(PROJECT_STATUSES, new_status),
        "message": f"Project '{project['name']}' moved from {previous} to {new_status}",
    }


# ---------------------------------------------------------------------------
# Team directory
# ---------------------------------------------------------------------------


async def query_employees(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = [Filter("status", "eq", params.get("status", "active"))]
    if params.get("role"):
        filters.append(Filter("role", "eq", params["role"]))
    employees = await query_rows(
        store, "employee", params, filters=filters, order_by=("full_name", "user_id"), default_limit=30
    )
    return listing("employees", employees, "team member(s)")


async def add_team_member(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    if params.get("email"):
        existing = await store.select_one(
            "team_directory",
            filters=[Filter("email", "eq", params["email"]), Filter("status", "neq", "inactive")],
        )
        if existing is not None:
            return failure(f"A team member with email {params['email']} already exists: {existing['full_name']}")
    values = pick(
        params,
        {
            "full_name": "full_name",
            "email": "email",
            "role": "role",
            "phone_number": "phone_number",
            "job_title": "job_title",
        },
    )
    values["status"] = "invited" if params.get("email") else "active"
    member = await store.insert("team_directory", values)
    return {"success": True, "employee": member, "message": f"{member['full_name']} added to the team"}


async def delete_team_member(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    member, error = await locate(store, "employee", params, "user_id", "employee_name", filters=ACTIVE_MEMBER)
    if error:
        return error
    rows = await store.update("team_directory", {"status": "inactive"}, [Filter("user_id", "eq", member["user_id"])])
    return {
        "success": True,
        "employee": rows[0],
        "previous_status": member["status"],
        "new_status": "inactive",
        "message": f"{member['full_name']} removed from the active team",
    }


# ---------------------------------------------------------------------------
# Directory contacts
# ---------------------------------------------------------------------------


async def add_contact(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    values = pick(
        params,
        {
            "company_name": "company_name",
            "contact_name": "contact_name",
            "email": "email",
            "phone": "phone",
            "contact_type": "contact_type",
            "address": "address",
            "notes": "notes",
        },
    )
    contact = await store.insert("directory_contacts", values)
    return {"success": True, "contact": contact, "message": f"Contact '{contact['company_name']}' added"}


async def query_directory(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = []
    if params.get("contact_type"):
        filters.append(Filter("contact_type", "eq", params["contact_type"]))
    contacts = await query_rows(store, "contact", params, filters=filters, order_by=("company_name", "id"))
    return listing("contacts", contacts, "contact(s)")


async def update_contact(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    contact, error = await locate(store, "contact", params, "contact_id", "contact_name")
    if error and params.get("contact_name") and not params.get("contact_id"):
        # Team members live in the team directory, not the contact list.
        member = await resolve(store, "employee", text=params["contact_name"], filters=ACTIVE_MEMBER)
        if member is not None:
            changes = pick(params, {"new_contact_name": "full_name", "email": "email", "phone": "phone_number"})
            return await apply_update(store, "employee", member, changes, "employee")
    if error:
        return error
    changes = pick(
        params,
        {
            "new_contact_name": "contact_name",
            "company_name": "company_name",
            "email": "email",
            "phone": "phone",
            "contact_type": "contact_type",
            "address": "address",
            "notes": "notes",
        },
    )
    return await apply_update(store, "contact", contact, changes, "contact")


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "query_leads",
        "List sales leads, optionally filtered by pipeline status, creation date range or a search term.",
        query_leads,
        params=(Param("status", enum=LEAD_STATUSES), SEARCH, START_DATE, END_DATE, LIMIT),
        visual_type="lead_list",
    ),
    ToolSpec(
        "create_lead",
        "Create a new sales lead.",
        create_lead,
        params=(
            Param("name", description="Lead / customer name", required=True),
            Param("email", form=True, input_type="email"),
            Param("phone", form=True, input_type="tel"),
            Param("address", form=True),
            Param("project_type", description="e.g. roof replacement, repair", form=True),
            Param("source", description="Where the lead came from"),
            Param("notes", input_type="textarea"),
        ),
        visual_type="success_card",
        form_type="lead",
        data_modified=True,
    ),
    ToolSpec(
        "update_lead_status",
        "Move a lead to a new pipeline status. Identify the lead by name, email or id.",
        update_lead_status,
        params=(
            Param("lead_name", description="Name, email or phone of the lead; 'latest' for the newest"),
            Param("lead_id"),
            Param("new_status", required=True, enum=LEAD_STATUSES),
        ),
        visual_type="status_update",
        data_modified=True,
    ),
    delete_tool(
        "delete_lead", "lead", "Delete a lead by name or id.", id_param="lead_id", text_param="lead_name"
    ),
    ToolSpec(
        "query_projects",
        "List projects with their best photo and team size, optionally with financial totals.",
        query_projects,
        params=(
            Param("status", enum=PROJECT_STATUSES),
            SEARCH,
            Param("include_financials", "boolean", "Include invoiced, collected and cost totals"),
            LIMIT,
        ),
        visual_type="project_cards",
    ),
    ToolSpec(
        "create_project",
        "Create a new roofing project.",
        create_project,
        params=(
            Param("name", description="Project name", required=True),
            Param("address", form=True),
            Param("customer_name", form=True),
            Param("customer_email", input_type="email"),
            Param("customer_phone", form=True, input_type="tel"),
            Param("project_type"),
            Param("status", enum=PROJECT_STATUSES),
            Param("start_date", input_type="date"),
            Param("notes", input_type="textarea"),
        ),
        visual_type="success_card",
        form_type="project",
        data_modified=True,
    ),
    ToolSpec(
        "update_project_status",
        "Change a project's status. Identify the project by name, address or id.",
        update_project_status,
        params=(
            Param("project_name", description="Project name or address; 'latest' for the newest"),
            Param("project_id"),
            Param("new_status", required=True, enum=PROJECT_STATUSES),
        ),
        visual_type="status_update",
        data_modified=True,
    ),
    delete_tool(
        "delete_project",
        "project",
        "Delete a project and its photos, team assignments and material lines.",
        id_param="project_id",
        text_param="project_name",
    ),
    ToolSpec(
        "query_employees",
        "List team members, by default only active ones, ordered by name.",
        query_employees,
        params=(SEARCH, Param("role", enum=MEMBER_ROLES), Param("status", enum=MEMBER_STATUSES), LIMIT),
        visual_type="employee_list",
    ),
    ToolSpec(
        "add_team_member",
        "Add a person to the team directory.",
        add_team_member,
        params=(
            Param("full_name", required=True),
            Param("email", form=True, input_type="email"),
            Param("role", enum=MEMBER_ROLES, form=True),
            Param("phone_number", form=True, input_type="tel"),
            Param("job_title"),
        ),
        visual_type="success_card",
        form_type="team_member",
        data_modified=True,
    ),
    ToolSpec(
        "delete_team_member",
        "Remove a team member from the active team. The record is kept and marked inactive.",
        delete_team_member,
        params=(Param("employee_name"), Param("user_id")),
        visual_type="success_card",
        data_modified=True,
    ),
    ToolSpec(
        "add_contact",
        "Add a vendor, subcontractor, supplier or customer to the company directory.",
        add_contact,
        params=(
            Param("company_name", required=True),
            Param("contact_name", form=True),
            Param("email", form=True, input_type="email"),
            Param("phone", form=True, input_type="tel"),
            Param("contact_type", enum=CONTACT_TYPES, form=True),
            Param("address"),
            Param("notes", input_type="textarea"),
        ),
        visual_type="success_card",
        form_type="contact",
        data_modified=True,
    ),
    ToolSpec(
        "query_directory",
        "Search the company directory of vendors, subcontractors and other contacts.",
        query_directory,
        params=(SEARCH, Param("contact_type", enum=CONTACT_TYPES), LIMIT),
        visual_type="directory_list",
    ),
    ToolSpec(
        "update_contact",
        "Update a directory contact found by company or contact name. "
        "Falls back to a team member's email or phone when no contact matches.",
        update_contact,
        params=(
            Param("contact_name", description="Company, contact or team member name to find"),
            Param("contact_id"),
            Param("new_contact_name"),
            Param("company_name"),
            Param("email"),
            Param("phone"),
            Param("contact_type", enum=CONTACT_TYPES),
            Param("address"),
            Param("notes"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    delete_tool(
        "delete_contact",
        "contact",
        "Delete a directory contact by name or id.",
        id_param="contact_id",
        text_param="contact_name",
    ),
)
