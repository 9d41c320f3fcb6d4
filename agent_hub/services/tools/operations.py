from __future__ import annotations

from collections import defaultdict
from datetime import timedelta
from typing import Any, Optional

from agent_hub.services.database import DataStore, Filter, today, utc_now
from agent_hub.services.dispatcher import failure
from agent_hub.services.resolver import not_found, resolve
from agent_hub.services.tool_registry import Param, ToolSpec
from agent_hub.services.tools.common import (
    ACTIVE_MEMBER,
    END_DATE,
    LIMIT,
    PRIORITIES,
    PROJECT_NAME,
    SEARCH,
    START_DATE,
    apply_update,
    date_range,
    delete_tool,
    link_project,
    link_warning,
    listing,
    locate,
    parse_clock_time,
    parse_date,
    parse_timestamp,
    pick,
    project_scope,
    query_rows,
    start_of_week,
)

SCHEDULE_STATUSES = ("scheduled", "confirmed", "in_progress", "completed", "cancelled")
WORK_ORDER_STATUSES = ("open", "in_progress", "on_hold", "completed", "cancelled")
TICKET_STATUSES = ("open", "in_progress", "resolved", "closed")
TICKET_TYPES = ("repair", "maintenance", "warranty", "inspection", "emergency")
INSPECTION_STATUSES = ("scheduled", "passed", "failed", "cancelled")
PUNCHLIST_STATUSES = ("open", "in_progress", "completed")
PERMIT_STATUSES = ("pending", "approved", "active", "expired", "rejected")
TODO_STATUSES = ("pending", "in_progress", "completed")
INCIDENT_STATUSES = ("open", "investigating", "closed")
SEVERITIES = ("minor", "moderate", "serious", "critical")
MEETING_STATUSES = ("scheduled", "completed", "cancelled")

ATTENDANCE_ENTRY_LIMIT = 10
ATTENDANCE_CHART_SIZE = 7


def _status_filter(params: dict[str, Any]) -> list[Filter]:
    return [Filter("status", "eq", params["status"])] if params.get("status") else []


def _with_status_change(result: dict[str, Any], row: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    if result["success"] and "status" in changes:
        result["previous_status"] = row["status"]
        result["new_status"] = changes["status"]
    return result


async def _open_entry(store: DataStore, user_id: str) -> Optional[dict[str, Any]]:
    """Today's open time entry; entries left open on earlier days are ignored."""
    return await store.select_one(
        "time_clock",
        filters=[Filter("user_id", "eq", user_id), Filter("clock_out", "is_null"), Filter("clock_in", "gte", today())],
        order_by=("-clock_in", "-id"),
    )


def _hours_between(clock_in: str, clock_out: str, break_minutes: int = 0) -> float:
    worked = parse_timestamp(clock_out) - parse_timestamp(clock_in)
    hours = worked.total_seconds() / 3600 - break_minutes / 60
    return max(0.0, round(hours, 2))


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


async def query_schedules(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    window = dict(params)
    window.setdefault("start_date", today())
    filters = date_range("start_time", window) + _status_filter(params)
    schedules = await query_rows(store, "schedule", params, filters=filters, order_by=("start_time", "id"))

    user_ids = sorted({uid for schedule in schedules for uid in (schedule.get("assigned_users") or [])})
    members = await store.select("team_directory", ("user_id", "full_name"), filters=[Filter("user_id", "in", user_ids)])
    names = {member["user_id"]: member["full_name"] for member in members}
    for schedule in schedules:
        schedule["assigned_names"] = [names.get(uid, "Unknown") for uid in schedule.get("assigned_users") or []]
    return listing("schedules", schedules, "scheduled job(s)")


async def create_schedule(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    day = parse_date(params["start_date"], "start_date").isoformat()
    start_time = f"{day}T{parse_clock_time(params.get('start_time', '08:00'), 'start_time')}:00"
    end_time = f"{day}T{parse_clock_time(params['end_time'], 'end_time')}:00" if params.get("end_time") else None

    assigned: list[str] = []
    unknown: list[str] = []
    for name in (params.get("assigned_to") or "").split(","):
        name = name.strip()
        if not name:
            continue
        member = await resolve(store, "employee", text=name, filters=ACTIVE_MEMBER)
        if member is None:
            unknown.append(name)
        else:
            assigned.append(member["user_id"])

    schedule = await store.insert(
        "job_schedules",
        {
            "job_name": params["job_name"],
            "location": params.get("location"),
            "start_time": start_time,
            "end_time": end_time,
            "priority": params.get("priority", "medium"),
            "assigned_users": assigned,
            "status": "scheduled",
        },
    )
    result: dict[str, Any] = {
        "success": True,
        "schedule": schedule,
        "message": f"Scheduled '{schedule['job_name']}' for {day}",
    }
    if unknown:
        result["warning"] = f"Not on the team: {', '.join(unknown)}"
    return result


# ---------------------------------------------------------------------------
# Work orders and service tickets
# ---------------------------------------------------------------------------


async def create_work_order(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    order = await store.insert(
        "work_orders",
        {
            "title": params["title"],
            "description": params.get("description"),
            "project_id": project["id"] if project else None,
            "priority": params.get("priority", "medium"),
            "assigned_to": params.get("assigned_to"),
            "due_date": params.get("due_date"),
            "status": "open",
        },
    )
    return {
        "success": True,
        "work_order": order,
        "message": f"Work order '{order['title']}' created",
        **link_warning(params, project),
    }


async def query_work_orders(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    filters = scope + _status_filter(params)
    if params.get("priority"):
        filters.append(Filter("priority", "eq", params["priority"]))
    orders = await query_rows(store, "work_order", params, filters=filters)
    return listing("work_orders", orders, "work order(s)")


async def update_work_order_status(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    order, error = await locate(store, "work_order", params, "work_order_id", "title")
    if error:
        return error
    rows = await store.update("work_orders", {"status": params["new_status"]}, [Filter("id", "eq", order["id"])])
    return {
        "success": True,
        "work_order": rows[0],
        "previous_status": order["status"],
        "new_status": params["new_status"],
        "message": f"Work order '{order['title']}' moved from {order['status']} to {params['new_status']}",
    }


async def create_service_ticket(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    values = pick(
        params,
        {
            "title": "title",
            "description": "description",
            "customer_name": "customer_name",
            "property_address": "property_address",
            "priority": "priority",
            "ticket_type": "ticket_type",
        },
    )
    values["status"] = "open"
    ticket = await store.insert("service_tickets", values)
    return {"success": True, "service_ticket": ticket, "message": f"Service ticket '{ticket['title']}' opened"}


async def query_service_tickets(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = _status_filter(params)
    if params.get("priority"):
        filters.append(Filter("priority", "eq", params["priority"]))
    tickets = await query_rows(store, "service_ticket", params, filters=filters)
    return listing("service_tickets", tickets, "service ticket(s)")


# ---------------------------------------------------------------------------
# Time clock
# ---------------------------------------------------------------------------


async def query_who_clocked_in(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    entries = await store.select(
        "time_clock",
        filters=[Filter("clock_out", "is_null"), Filter("clock_in", "gte", today())],
        order_by=("-clock_in", "-id"),
    )
    seen: set[str] = set()
    employees = []
    for entry in entries:
        who = entry.get("user_id") or entry["employee_name"]
        if who in seen:
            continue
        seen.add(who)
        employees.append(
            {
                "entry_id": entry["id"],
                "user_id": entry.get("user_id"),
                "employee_name": entry["employee_name"],
                "employee_role": entry.get("employee_role"),
                "clock_in": entry["clock_in"],
                "project_name": entry.get("project_name"),
                "location": entry.get("location"),
            }
        )
    message = (
        f"{len(employees)} employee(s) clocked in: {', '.join(e['employee_name'] for e in employees)}"
        if employees
        else "Nobody is clocked in right now"
    )
    return {"success": True, "employees": employees, "count": len(employees), "message": message}


async def clock_in_employee(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    member = await resolve(store, "employee", text=params["employee_name"], filters=ACTIVE_MEMBER)
    if member is None:
        return not_found("employee", params["employee_name"])
    existing = await _open_entry(store, member["user_id"])
    if existing is not None:
        return failure(f"{member['full_name']} is already clocked in since {existing['clock_in']}")
    entry = await store.insert(
        "time_clock",
        {
            "user_id": member["user_id"],
            "employee_name": member["full_name"],
            "employee_role": member.get("role"),
            "clock_in": utc_now(),
            "project_name": params.get("project_name"),
            "location": params.get("location"),
            "notes": params.get("notes"),
            "status": "clocked_in",
        },
    )
    return {"success": True, "time_entry": entry, "message": f"{member['full_name']} clocked in"}


async def clock_out_employee(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    member = await resolve(store, "employee", text=params["employee_name"], filters=ACTIVE_MEMBER)
    if member is None:
        return not_found("employee", params["employee_name"])
    entry = await _open_entry(store, member["user_id"])
    if entry is None:
        return failure(f"{member['full_name']} is not clocked in")
    clock_out = utc_now()
    break_minutes = int(params.get("break_minutes") or 0)
    hours = _hours_between(entry["clock_in"], clock_out, break_minutes)
    rows = await store.update(
        "time_clock",
        {
            "clock_out": clock_out,
            "total_hours": hours,
            "break_time_minutes": break_minutes,
            "status": "clocked_out",
        },
        [Filter("id", "eq", entry["id"])],
    )
    return {
        "success": True,
        "time_entry": rows[0],
        "total_hours": hours,
        "message": f"{member['full_name']} clocked out after {hours:.2f} hours",
    }


async def approve_timesheet(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    member = await resolve(store, "employee", text=params["employee_name"])
    if member is None:
        return not_found("employee", params["employee_name"])
    week_start = start_of_week(parse_date(params.get("week_start") or today(), "week_start"))
    week_end = week_start + timedelta(days=7)
    rows = await store.update(
        "time_clock",
        {"approved_at": utc_now()},
        [
            Filter("user_id", "eq", member["user_id"]),
            Filter("clock_in", "gte", week_start.isoformat()),
            Filter("clock_in", "lt", week_end.isoformat()),
            Filter("clock_out", "is_null", False),
            Filter("approved_at", "is_null"),
        ],
    )
    hours = round(sum(float(row.get("total_hours") or 0) for row in rows), 2)
    if not rows:
        message = f"No unapproved completed entries for {member['full_name']} in the week of {week_start}"
    else:
        message = f"Approved {len(rows)} entries ({hours} hours) for {member['full_name']}, week of {week_start}"
    return {
        "success": True,
        "employee": member,
        "week_start": week_start.isoformat(),
        "approved_count": len(rows),
        "total_hours": hours,
        "message": message,
    }


async def get_attendance_data(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    window = {
        "start_date": params.get("start_date") or start_of_week(parse_date(today())).isoformat(),
        "end_date": params.get("end_date") or today(),
    }
    filters = date_range("clock_in", window)
    if params.get("employee_name"):
        filters.append(Filter("employee_name", "ilike", params["employee_name"]))
    entries = await store.select("time_clock", filters=filters, order_by=("-clock_in", "-id"), limit=500)

    by_employee: dict[str, float] = defaultdict(float)
    by_day: dict[str, float] = defaultdict(float)
    for entry in entries:
        hours = float(entry.get("total_hours") or 0)
        by_employee[entry["employee_name"]] += hours
        by_day[entry["clock_in"][:10]] += hours

    total_hours = round(sum(by_employee.values()), 2)
    employees = len(by_employee)
    chart = sorted(by_employee.items(), key=lambda item: (-item[1], item[0]))[:ATTENDANCE_CHART_SIZE]
    return {
        "success": True,
        "start_date": window["start_date"],
        "end_date": window["end_date"],
        "summary": {
            "total_hours": total_hours,
            "total_entries": len(entries),
            "unique_employees": employees,
            "days_worked": len(by_day),
            "avg_hours_per_employee": round(total_hours / employees, 2) if employees else 0.0,
        },
        "chart_data": [{"name": name, "hours": round(hours, 2)} for name, hours in chart],
        "daily_chart": [{"date": day, "hours": round(by_day[day], 2)} for day in sorted(by_day)],
        "entries": entries[:ATTENDANCE_ENTRY_LIMIT],
        "message": f"{total_hours} hours logged by {employees} employee(s) from {window['start_date']} to {window['end_date']}",
    }


# ---------------------------------------------------------------------------
# Field records: inspections, punchlists, permits, daily logs
# ---------------------------------------------------------------------------


async def query_inspections(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    inspections = await query_rows(
        store,
        "inspection",
        params,
        filters=scope + _status_filter(params),
        order_by=("-scheduled_date", "-created_at", "-id"),
    )
    return listing("inspections", inspections, "inspection(s)")


async def create_inspection(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    inspection = await store.insert(
        "project_inspections",
        {
            "inspection_type": params["inspection_type"],
            "project_id": project["id"] if project else None,
            "scheduled_date": params.get("scheduled_date"),
            "inspector_name": params.get("inspector_name"),
            "notes": params.get("notes"),
            "status": "scheduled",
        },
    )
    return {
        "success": True,
        "inspection": inspection,
        "message": f"{inspection['inspection_type']} inspection scheduled",
        **link_warning(params, project),
    }


async def query_punchlists(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    items = await query_rows(store, "punchlist", params, filters=scope + _status_filter(params))
    return listing("punchlist_items", items, "punchlist item(s)")


async def create_punchlist_item(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    item = await store.insert(
        "punchlist_items",
        {
            "description": params["description"],
            "project_id": project["id"] if project else None,
            "priority": params.get("priority", "medium"),
            "assigned_to": params.get("assigned_to"),
            "location": params.get("location"),
            "status": "open",
        },
    )
    return {
        "success": True,
        "punchlist_item": item,
        "message": f"Punchlist item added: {item['description']}",
        **link_warning(params, project),
    }


async def query_permits(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    permits = await query_rows(store, "permit", params, filters=scope + _status_filter(params))
    return listing("permits", permits, "permit(s)")


async def create_daily_log(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await resolve(store, "project", text=params["project_name"])
    if project is None:
        return not_found("project", params["project_name"])
    values: dict[str, Any] = {
        "project_id": project["id"],
        "log_date": parse_date(params.get("log_date") or today(), "log_date").isoformat(),
        "tasks_performed": params.get("tasks_performed"),
        "status": "draft",
    }
    if params.get("weather"):
        values["weather_data"] = {"conditions": params["weather"]}
    log = await store.insert("daily_log_entries", values)
    return {
        "success": True,
        "daily_log": log,
        "project": {"id": project["id"], "name": project["name"]},
        "message": f"Daily log for {project['name']} on {log['log_date']} created",
    }


async def query_daily_logs(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    logs = await query_rows(
        store,
        "daily_log",
        params,
        filters=scope + date_range("log_date", params),
        order_by=("-log_date", "-created_at", "-id"),
    )
    return listing("daily_logs", logs, "daily log(s)")


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


async def create_todo(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    todo = await store.insert(
        "todos",
        {
            "title": params["title"],
            "description": params.get("description"),
            "priority": params.get("priority", "medium"),
            "due_date": params.get("due_date"),
            "assigned_to": params.get("assigned_to"),
            "project_id": project["id"] if project else None,
            "status": "pending",
        },
    )
    return {
        "success": True,
        "todo": todo,
        "message": f"Todo added: {todo['title']}",
        **link_warning(params, project),
    }


async def update_todo(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    todo, error = await locate(store, "todo", params, "todo_id", "title")
    if error:
        return error
    changes = pick(
        params,
        {
            "new_title": "title",
            "status": "status",
            "priority": "priority",
            "due_date": "due_date",
            "assigned_to": "assigned_to",
            "description": "description",
        },
    )
    result = await apply_update(store, "todo", todo, changes, "todo")
    return _with_status_change(result, todo, changes)


async def query_todos(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = _status_filter(params)
    if params.get("priority"):
        filters.append(Filter("priority", "eq", params["priority"]))
    if params.get("assigned_to"):
        filters.append(Filter("assigned_to", "ilike", params["assigned_to"]))
    todos = await query_rows(store, "todo", params, filters=filters)
    return listing("todos", todos, "todo(s)")


# ---------------------------------------------------------------------------
# Safety
# ---------------------------------------------------------------------------


async def create_incident(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    incident = await store.insert(
        "incidents",
        {
            "title": params["title"],
            "description": params.get("description"),
            "severity": params.get("severity", "moderate"),
            "location": params.get("location"),
            "injured_party": params.get("injured_party"),
            "incident_date": parse_date(params.get("incident_date") or today(), "incident_date").isoformat(),
            "status": "open",
        },
    )
    return {"success": True, "incident": incident, "message": f"Incident reported: {incident['title']}"}


async def query_incidents(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = _status_filter(params) + date_range("incident_date", params)
    if params.get("severity"):
        filters.append(Filter("severity", "eq", params["severity"]))
    incidents = await query_rows(
        store, "incident", params, filters=filters, order_by=("-incident_date", "-created_at", "-id")
    )
    return listing("incidents", incidents, "incident(s)")


async def create_safety_meeting(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    meeting = await store.insert(
        "safety_meetings",
        {
            "title": params["title"],
            "scheduled_date": parse_date(params["scheduled_date"], "scheduled_date").isoformat(),
            "location": params.get("location"),
            "topics": params.get("topics"),
            "status": "scheduled",
        },
    )
    return {
        "success": True,
        "safety_meeting": meeting,
        "message": f"Safety meeting '{meeting['title']}' scheduled for {meeting['scheduled_date']}",
    }


async def query_safety_meetings(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = _status_filter(params) + date_range("scheduled_date", params)
    meetings = await query_rows(
        store, "safety_meeting", params, filters=filters, order_by=("-scheduled_date", "-created_at", "-id")
    )
    return listing("safety_meetings", meetings, "safety meeting(s)")


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "query_schedules",
        "List scheduled jobs from today forward (or a date range), earliest first.",
        query_schedules,
        params=(START_DATE, END_DATE, Param("status", enum=SCHEDULE_STATUSES), SEARCH, LIMIT),
        visual_type="schedule_list",
    ),
    ToolSpec(
        "create_schedule",
        "Put a job on the schedule.",
        create_schedule,
        params=(
            Param("job_name", required=True),
            Param("start_date", description="YYYY-MM-DD", required=True, input_type="date"),
            Param("start_time", description="HH:MM, 24h; default 08:00", form=True, input_type="time"),
            Param("end_time", description="HH:MM, 24h", input_type="time"),
            Param("location", form=True),
            Param("priority", enum=PRIORITIES),
            Param("assigned_to", description="Comma-separated team member names"),
        ),
        visual_type="success_card",
        form_type="create_schedule",
        data_modified=True,
    ),
    delete_tool(
        "delete_schedule", "schedule", "Remove a job from the schedule.", id_param="schedule_id", text_param="job_name"
    ),
    ToolSpec(
        "create_work_order",
        "Create a work order, optionally on a project.",
        create_work_order,
        params=(
            Param("title", required=True),
            Param("description", form=True, input_type="textarea"),
            Param("project_name", form=True),
            Param("priority", enum=PRIORITIES, form=True),
            Param("assigned_to"),
            Param("due_date", input_type="date"),
        ),
        visual_type="success_card",
        form_type="create_work_order",
        data_modified=True,
    ),
    ToolSpec(
        "query_work_orders",
        "List work orders.",
        query_work_orders,
        params=(
            Param("status", enum=WORK_ORDER_STATUSES),
            Param("priority", enum=PRIORITIES),
            PROJECT_NAME,
            SEARCH,
            LIMIT,
        ),
        visual_type="work_order_list",
    ),
    ToolSpec(
        "update_work_order_status",
        "Change a work order's status. Identify it by title or id.",
        update_work_order_status,
        params=(
            Param("title", description="Work order title; 'latest' for the newest"),
            Param("work_order_id"),
            Param("new_status", required=True, enum=WORK_ORDER_STATUSES),
        ),
        visual_type="status_update",
        data_modified=True,
    ),
    delete_tool(
        "delete_work_order", "work_order", "Delete a work order.", id_param="work_order_id", text_param="title"
    ),
    ToolSpec(
        "create_service_ticket",
        "Open a service ticket for a customer call-back, repair or warranty visit.",
        create_service_ticket,
        params=(
            Param("title", required=True),
            Param("customer_name", form=True),
            Param("property_address", form=True),
            Param("description", form=True, input_type="textarea"),
            Param("priority", enum=PRIORITIES),
            Param("ticket_type", enum=TICKET_TYPES),
        ),
        visual_type="success_card",
        form_type="create_service_ticket",
        data_modified=True,
    ),
    ToolSpec(
        "query_service_tickets",
        "List service tickets.",
        query_service_tickets,
        params=(Param("status", enum=TICKET_STATUSES), Param("priority", enum=PRIORITIES), SEARCH, LIMIT),
        visual_type="service_ticket_list",
    ),
    delete_tool(
        "delete_service_ticket",
        "service_ticket",
        "Delete a service ticket.",
        id_param="ticket_id",
        text_param="title",
    ),
    ToolSpec(
        "query_who_clocked_in",
        "Who is on the clock right now (clocked in today and not yet clocked out).",
        query_who_clocked_in,
        visual_type="clocked_in_list",
    ),
    ToolSpec(
        "clock_in_employee",
        "Clock a team member in.",
        clock_in_employee,
        params=(
            Param("employee_name", required=True),
            Param("project_name"),
            Param("location"),
            Param("notes"),
        ),
        visual_type="success_card",
        form_type="clock_in",
        data_modified=True,
    ),
    ToolSpec(
        "clock_out_employee",
        "Clock a team member out and compute the hours worked.",
        clock_out_employee,
        params=(
            Param("employee_name", required=True),
            Param("break_minutes", "number", "Unpaid break length in minutes"),
        ),
        visual_type="success_card",
        form_type="clock_out",
        data_modified=True,
    ),
    ToolSpec(
        "approve_timesheet",
        "Approve a team member's completed time entries for a week (default this week).",
        approve_timesheet,
        params=(
            Param("employee_name", required=True),
            Param("week_start", description="Any date in the week, YYYY-MM-DD", input_type="date"),
        ),
        visual_type="success_card",
        form_type="approve_timesheet",
        data_modified=True,
    ),
    ToolSpec(
        "get_attendance_data",
        "Hours worked per employee and per day over a date range (default: this week to date).",
        get_attendance_data,
        params=(START_DATE, END_DATE, Param("employee_name")),
        visual_type="attendance_chart",
    ),
    ToolSpec(
        "query_inspections",
        "List project inspections.",
        query_inspections,
        params=(Param("status", enum=INSPECTION_STATUSES), PROJECT_NAME, SEARCH, LIMIT),
        visual_type="inspection_list",
    ),
    ToolSpec(
        "create_inspection",
        "Schedule an inspection, optionally on a project.",
        create_inspection,
        params=(
            Param("inspection_type", description="e.g. final, framing, roofing", required=True),
            Param("project_name", form=True),
            Param("scheduled_date", form=True, input_type="date"),
            Param("inspector_name"),
            Param("notes"),
        ),
        visual_type="success_card",
        form_type="create_inspection",
        data_modified=True,
    ),
    delete_tool("delete_inspection", "inspection", "Delete an inspection by id.", id_param="inspection_id"),
    ToolSpec(
        "query_punchlists",
        "List punchlist items.",
        query_punchlists,
        params=(Param("status", enum=PUNCHLIST_STATUSES), PROJECT_NAME, SEARCH, LIMIT),
        visual_type="punchlist",
    ),
    ToolSpec(
        "create_punchlist_item",
        "Add an item to a project's punchlist.",
        create_punchlist_item,
        params=(
            Param("description", required=True),
            Param("project_name", form=True),
            Param("priority", enum=PRIORITIES),
            Param("assigned_to"),
            Param("location"),
        ),
        visual_type="success_card",
        form_type="create_punchlist_item",
        data_modified=True,
    ),
    delete_tool("delete_punchlist", "punchlist", "Delete a punchlist item by id.", id_param="punchlist_id"),
    ToolSpec(
        "query_permits",
        "List permits.",
        query_permits,
        params=(Param("status", enum=PERMIT_STATUSES), PROJECT_NAME, SEARCH, LIMIT),
        visual_type="permit_list",
    ),
    delete_tool("delete_permit", "permit", "Delete a permit by id.", id_param="permit_id"),
    ToolSpec(
        "create_daily_log",
        "Write the daily log for a project. The project must exist.",
        create_daily_log,
        params=(
            Param("project_name", required=True),
            Param("tasks_performed", form=True, input_type="textarea"),
            Param("weather", form=True),
            Param("log_date", input_type="date"),
        ),
        visual_type="success_card",
        form_type="create_daily_log",
        data_modified=True,
    ),
    ToolSpec(
        "query_daily_logs",
        "List daily logs, newest first.",
        query_daily_logs,
        params=(PROJECT_NAME, START_DATE, END_DATE, SEARCH, LIMIT),
        visual_type="daily_log_list",
    ),
    delete_tool("delete_daily_log", "daily_log", "Delete a daily log by id.", id_param="log_id"),
    ToolSpec(
        "create_todo",
        "Add a todo.",
        create_todo,
        params=(
            Param("title", required=True),
            Param("due_date", form=True, input_type="date"),
            Param("priority", enum=PRIORITIES, form=True),
            Param("assigned_to", form=True),
            Param("description"),
            Param("project_name"),
        ),
        visual_type="success_card",
        form_type="create_todo",
        data_modified=True,
    ),
    ToolSpec(
        "update_todo",
        "Update a todo found by its title: mark it done, reprioritise, reassign or rename it.",
        update_todo,
        params=(
            Param("title", description="Title of the todo to find"),
            Param("todo_id"),
            Param("new_title"),
            Param("status", enum=TODO_STATUSES),
            Param("priority", enum=PRIORITIES),
            Param("due_date", input_type="date"),
            Param("assigned_to"),
            Param("description"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    ToolSpec(
        "query_todos",
        "List todos.",
        query_todos,
        params=(
            Param("status", enum=TODO_STATUSES),
            Param("priority", enum=PRIORITIES),
            Param("assigned_to"),
            SEARCH,
            LIMIT,
        ),
        visual_type="todo_list",
    ),
    delete_tool("delete_todo", "todo", "Delete a todo.", id_param="todo_id", text_param="title"),
    ToolSpec(
        "create_incident",
        "Report a safety incident.",
        create_incident,
        params=(
            Param("title", required=True),
            Param("severity", enum=SEVERITIES, form=True),
            Param("location", form=True),
            Param("description", form=True, input_type="textarea"),
            Param("injured_party"),
            Param("incident_date", input_type="date"),
        ),
        visual_type="success_card",
        form_type="create_incident",
        data_modified=True,
    ),
    ToolSpec(
        "query_incidents",
        "List safety incidents.",
        query_incidents,
        params=(Param("status", enum=INCIDENT_STATUSES), Param("severity", enum=SEVERITIES), START_DATE, END_DATE, LIMIT),
        visual_type="incident_list",
    ),
    ToolSpec(
        "create_safety_meeting",
        "Schedule a safety meeting.",
        create_safety_meeting,
        params=(
            Param("title", required=True),
            Param("scheduled_date", description="YYYY-MM-DD", required=True, input_type="date"),
            Param("location", form=True),
            Param("topics", form=True, input_type="textarea"),
        ),
        visual_type="success_card",
        form_type="create_safety_meeting",
        data_modified=True,
    ),
    ToolSpec(
        "query_safety_meetings",
        "List safety meetings.",
        query_safety_meetings,
        params=(Param("status", enum=MEETING_STATUSES), START_DATE, END_DATE, LIMIT),
        visual_type="safety_meeting_list",
    ),
)
