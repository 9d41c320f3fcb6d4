"""Report payloads for the client-side PDF renderer.

Each report returns ``report_type``, ``title``, ``subtitle`` and a ``data``
block; nothing here renders a document.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from agent_hub.services.database import DataStore, Filter, today
from agent_hub.services.dispatcher import input_form
from agent_hub.services.resolver import not_found, resolve
from agent_hub.services.tool_registry import Param, ToolSpec
from agent_hub.services.tools.common import money, parse_date, start_of_week, total
from agent_hub.services.tools.financials import project_financials

REPORT_TYPES = ("timesheet", "invoice", "proposal", "project_summary")
ALL_EMPLOYEES = {"all", "everyone", "all employees", "everybody"}

EMPLOYEE_FIELD = Param("employee_name", description="Team member, or 'all'", required=True)
PROJECT_FIELD = Param("project_name", required=True)


def _week(params: dict[str, Any]) -> tuple[str, str]:
    start = start_of_week(parse_date(params.get("week_start") or today(), "week_start"))
    return start.isoformat(), (start + timedelta(days=7)).isoformat()


async def _week_entries(store: DataStore, user_id: str, start: str, end: str) -> list[dict[str, Any]]:
    return await store.select(
        "time_clock",
        filters=[
            Filter("user_id", "eq", user_id),
            Filter("clock_in", "gte", start),
            Filter("clock_in", "lt", end),
        ],
        order_by=("clock_in", "id"),
    )


async def timesheet_report(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    start, end = _week(params)
    name = (params.get("employee_name") or "").strip()

    if params.get("all_employees") or name.lower() in ALL_EMPLOYEES:
        members = await store.select(
            "team_directory", filters=[Filter("status", "eq", "active")], order_by=("full_name", "user_id")
        )
        timesheets = []
        for member in members:
            entries = await _week_entries(store, member["user_id"], start, end)
            hours = total(entries, "total_hours")
            if hours > 0:
                timesheets.append(
                    {
                        "employee": {key: member[key] for key in ("user_id", "full_name", "email", "role")},
                        "entries": entries,
                        "total_hours": hours,
                    }
                )
        grand_total = money(sum(sheet["total_hours"] for sheet in timesheets))
        return {
            "success": True,
            "report_type": "timesheet_all",
            "title": "All Employee Timesheets",
            "subtitle": f"Week of {start}",
            "data": {"timesheets": timesheets, "week_start": start, "grand_total_hours": grand_total},
            "message": f"Ready! {len(timesheets)} employees worked {grand_total:.1f} total hours.",
        }

    member = None
    if params.get("employee_id"):
        member = await resolve(store, "employee", key=params["employee_id"])
    elif name:
        member = await resolve(store, "employee", text=name)
    if member is None:
        return input_form(
            "timesheet_report",
            "Whose timesheet would you like? Name a team member or say 'all'.",
            (EMPLOYEE_FIELD,),
            ("employee_name",),
        )

    entries = await _week_entries(store, member["user_id"], start, end)
    hours = total(entries, "total_hours")
    return {
        "success": True,
        "report_type": "timesheet",
        "title": f"Timesheet: {member['full_name']}",
        "subtitle": f"Week of {start}",
        "data": {
            "employee_name": member["full_name"],
            "class_code": member.get("role"),
            "week_start": start,
            "entries": entries,
            "total_regular_hours": hours,
            "total_break_minutes": int(sum(int(e.get("break_time_minutes") or 0) for e in entries)),
            "approved": bool(entries) and all(e.get("approved_at") for e in entries),
        },
        "message": f"Ready to download timesheet for {member['full_name']}. Total hours: {hours:.1f}",
    }


async def invoice_report(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    invoice = None
    if params.get("invoice_id") or params.get("invoice_number"):
        invoice = await resolve(store, "invoice", key=params.get("invoice_id"), text=params.get("invoice_number"))
    elif params.get("project_name"):
        project = await resolve(store, "project", text=params["project_name"])
        if project is not None:
            invoice = await store.select_one(
                "invoices", filters=[Filter("project_id", "eq", project["id"])], order_by=("-created_at", "-id")
            )
    if invoice is None:
        term = params.get("invoice_id") or params.get("invoice_number") or params.get("project_name") or "(none given)"
        return {
            **not_found("invoice", term),
            "message": "Could not find an invoice. Please specify an invoice number or project name.",
        }

    project = await resolve(store, "project", key=invoice["project_id"]) if invoice.get("project_id") else None
    return {
        "success": True,
        "report_type": "invoice",
        "title": f"Invoice #{invoice['invoice_number']}",
        "subtitle": invoice.get("customer_name") or (project["name"] if project else ""),
        "data": {
            "invoice_number": invoice["invoice_number"],
            "date": invoice["created_at"][:10],
            "due_date": (invoice.get("due_date") or "")[:10],
            "customer_name": invoice.get("customer_name") or "",
            "customer_contact": invoice.get("customer_email") or "",
            "project_address": (project or {}).get("address") or "",
            "project_number": (invoice.get("project_id") or "")[:8],
            "description": invoice.get("description") or "Roofing Services",
            "total": money(invoice["total_amount"]),
            "tax": money(invoice["tax"]),
            "balance_due": money(invoice["balance_due"]),
        },
        "message": f"Ready to download Invoice #{invoice['invoice_number']} for ${money(invoice['total_amount']):,.2f}",
    }


async def proposal_report(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    proposal = await resolve(
        store, "proposal", key=params.get("proposal_id"), text=params.get("project_name") or "latest"
    )
    if proposal is None:
        return {
            **not_found("proposal", params.get("proposal_id") or params.get("project_name")),
            "message": "Could not find a proposal. Please specify a project name, address or proposal id.",
        }
    scope = [Filter("proposal_id", "eq", proposal["id"])]
    quotes = await store.select("proposal_quotes", filters=scope, order_by=("created_at", "id"))
    items = await store.select("proposal_pricing_items", filters=scope, order_by=("created_at", "id"))
    return {
        "success": True,
        "report_type": "proposal",
        "title": f"Proposal #{proposal['proposal_number']}",
        "subtitle": proposal.get("property_address") or "",
        "data": {"proposal": proposal, "quotes": quotes, "pricing_items": items},
        "message": f"Ready to download Proposal #{proposal['proposal_number']}",
    }


async def project_summary_report(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = None
    if params.get("project_id"):
        project = await resolve(store, "project", key=params["project_id"])
    elif params.get("project_name"):
        project = await resolve(store, "project", text=params["project_name"])
    if project is None:
        return input_form(
            "project_summary",
            "Which project should the summary cover?",
            (PROJECT_FIELD,),
            ("project_name",),
        )
    return {
        "success": True,
        "report_type": "project_summary",
        "title": f"Project Summary: {project['name']}",
        "subtitle": project.get("address") or project["status"],
        "data": {"project": project, "financials": await project_financials(store, project["id"])},
        "message": f"Ready to download summary for \"{project['name']}\"",
    }


REPORTS = {
    "timesheet": timesheet_report,
    "invoice": invoice_report,
    "proposal": proposal_report,
    "project_summary": project_summary_report,
}


async def generate_pdf_report(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    return await REPORTS[params["report_type"]](params, store)


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "generate_pdf_report",
        "Prepare a downloadable report: a weekly timesheet (one employee or 'all'), an invoice, "
        "a proposal or a project summary.",
        generate_pdf_report,
        params=(
            Param("report_type", required=True, enum=REPORT_TYPES),
            Param("employee_name", description="Timesheet: team member name, or 'all'"),
            Param("employee_id"),
            Param("all_employees", "boolean", "Timesheet: include every active employee"),
            Param("week_start", description="Timesheet: any date in the week, YYYY-MM-DD"),
            Param("invoice_number", description="Invoice number or customer name"),
            Param("invoice_id"),
            Param("project_name", description="Project name or address"),
            Param("project_id"),
            Param("proposal_id"),
        ),
        visual_type="pdf_report",
        form_type="pdf_report",
    ),
)
