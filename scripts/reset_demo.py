#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import random
import sqlite3
import uuid
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = BASE_DIR / "data"

RANDOM_SEED = 42

TEAM = [
    ("Maria Lopez", "maria@summitroofing.example", "owner", "Owner"),
    ("Derek Chan", "derek@summitroofing.example", "manager", "Production Manager"),
    ("Tasha Green", "tasha@summitroofing.example", "admin", "Office Manager"),
    ("Luis Ortega", "luis@summitroofing.example", "field_worker", "Crew Lead"),
    ("Ben Foster", "ben@summitroofing.example", "field_worker", "Roofer"),
    ("Kayla Reed", "kayla@summitroofing.example", "field_worker", "Roofer"),
    ("Omar Haddad", "omar@summitroofing.example", "contributor", "Estimator"),
]

LEADS = [
    ("John Smith", "john.smith@example.com", "(512) 555-0142", "118 Cedar Ln, Austin TX", "roof replacement", "contacted"),
    ("Priya Patel", "priya.patel@example.com", "(512) 555-0177", "42 Maple Ave, Round Rock TX", "storm damage", "new"),
    ("Greg Novak", "gnovak@example.com", "(737) 555-0101", "9 Ridge Rd, Cedar Park TX", "roof repair", "ready_to_quote"),
    ("Ana Ruiz", "ana.ruiz@example.com", "(512) 555-0190", "770 Oak St, Austin TX", "gutter replacement", "quoted"),
    ("Sam Whitfield", "sam.w@example.com", "(737) 555-0155", "3 Lakeview Dr, Lakeway TX", "roof replacement", "proposal_sent"),
    ("Helen Park", "hpark@example.com", "(512) 555-0123", "501 Pine Ct, Pflugerville TX", "metal roof", "contract_sent"),
]

PROJECTS = [
    ("Johnson Residence Re-Roof", "2210 Willow Bend, Austin TX", "Karen Johnson", "in_progress", "asphalt shingle", 9500, 14200),
    ("Lakeway Clubhouse", "1 Clubhouse Dr, Lakeway TX", "Lakeway HOA", "active", "TPO", 22000, 31800),
    ("Baker Storm Repair", "84 Hillcrest Rd, Georgetown TX", "Tom Baker", "scheduled", "asphalt shingle", 2800, 3100),
    ("Riverside Office Park", "4500 Riverside Blvd, Austin TX", "Riverside Holdings", "completed", "standing seam metal", 18500, 40200),
    ("Chen Family Gutters", "17 Sunset Trl, Round Rock TX", "Lily Chen", "pending", "gutters", 1200, 1900),
]

CONTACTS = [
    ("ABC Supply", "Rick Moreno", "orders@abcsupply.example", "(512) 555-0300", "supplier"),
    ("Hill Country Sheet Metal", "Jenna Howard", "jenna@hcsm.example", "(512) 555-0311", "subcontractor"),
    ("Travis County Permits", "Front Desk", "permits@traviscounty.example", "(512) 555-0322", "inspector"),
    ("Dumpster Depot", "Carl Ives", "dispatch@dumpsterdepot.example", "(737) 555-0333", "vendor"),
]

MATERIALS = [
    ("Architectural Shingles", "shingles", "bundle", 38.5),
    ("Synthetic Underlayment", "underlayment", "roll", 92.0),
    ("Ice & Water Shield", "underlayment", "roll", 118.0),
    ("Drip Edge 10ft", "flashing", "piece", 8.75),
    ("Ridge Vent 4ft", "ventilation", "piece", 14.2),
    ("Coil Nails 1.25in", "fasteners", "box", 41.0),
]


def now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def stamp(day: date, hour: int = 9, minute: int = 0) -> str:
    return datetime(day.year, day.month, day.day, hour, minute).isoformat() + "Z"


def new_id() -> str:
    return str(uuid.uuid4())


def db_path() -> Path:
    configured = os.getenv("DATABASE_PATH")
    if configured:
        path = Path(configured)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path
    return DATA_DIR / "agent_hub.db"


def load_sql(conn: sqlite3.Connection, path: Path) -> None:
    conn.executescript(path.read_text())


def insert(conn: sqlite3.Connection, table: str, row: dict[str, Any]) -> dict[str, Any]:
    row = {key: json.dumps(value) if isinstance(value, (list, dict)) else value for key, value in row.items()}
    columns = ", ".join(row)
    placeholders = ", ".join(f":{key}" for key in row)
    conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", row)
    return row


def seed_team(conn: sqlite3.Connection, start: date) -> list[dict[str, Any]]:
    members = []
    for index, (name, email, role, title) in enumerate(TEAM):
        created = stamp(start + timedelta(days=index))
        members.append(
            insert(
                conn,
                "team_directory",
                {
                    "user_id": new_id(),
                    "full_name": name,
                    "email": email,
                    "role": role,
                    "phone_number": f"(512) 555-01{index:02d}",
                    "job_title": title,
                    "status": "active",
                    "created_at": created,
                    "updated_at": created,
                },
            )
        )
    return members


def seed_leads(conn: sqlite3.Connection, today: date) -> None:
    for index, (name, email, phone, address, project_type, status) in enumerate(LEADS):
        created = stamp(today - timedelta(days=30 - index * 4))
        insert(
            conn,
            "leads",
            {
                "id": new_id(),
                "name": name,
                "email": email,
                "phone": phone,
                "address": address,
                "project_type": project_type,
                "source": random.choice(["website", "referral", "door knock", "google"]),
                "status": status,
                "created_at": created,
                "updated_at": created,
            },
        )


def seed_projects(conn: sqlite3.Connection, today: date, members: list[dict[str, Any]]) -> list[dict[str, Any]]:
    projects = []
    for index, (name, address, customer, status, roof_type, labor, materials) in enumerate(PROJECTS):
        start_day = today - timedelta(days=40 - index * 8)
        project = insert(
            conn,
            "projects",
            {
                "id": new_id(),
                "name": name,
                "address": address,
                "status": status,
                "customer_name": customer,
                "project_type": "roof replacement" if "Repair" not in name else "roof repair",
                "roof_type": roof_type,
                "start_date": start_day.isoformat(),
                "budget_labor": labor,
                "budget_materials": materials,
                "created_at": stamp(start_day - timedelta(days=10)),
                "updated_at": stamp(today - timedelta(days=index * 3)),
            },
        )
        projects.append(project)

        for tag in ("before", "after") if status == "completed" else ("before",):
            insert(
                conn,
                "project_photos",
                {
                    "id": new_id(),
                    "project_id": project["id"],
                    "photo_url": f"https://photos.example/{project['id'][:8]}/{tag}.jpg",
                    "photo_tag": tag,
                    "is_highlighted_before": int(tag == "before"),
                    "is_highlighted_after": int(tag == "after"),
                    "created_at": project["created_at"],
                },
            )
        for member in random.sample(members[3:], 2):
            insert(
                conn,
                "project_team_assignments",
                {"id": new_id(), "project_id": project["id"], "user_id": member["user_id"], "created_at": project["created_at"]},
            )
        for material_name, _, _, unit_cost in random.sample(MATERIALS, 3):
            quantity = random.randint(4, 60)
            insert(
                conn,
                "project_materials",
                {
                    "id": new_id(),
                    "project_id": project["id"],
                    "material_name": material_name,
                    "quantity": quantity,
                    "unit_cost": unit_cost,
                    "total_cost": round(quantity * unit_cost, 2),
                    "created_at": project["created_at"],
                },
            )
    return projects


def seed_operations(conn: sqlite3.Connection, today: date, members: list[dict[str, Any]], projects: list[dict[str, Any]]) -> None:
    crew = members[3:]
    for offset in range(1, 5):
        project = projects[offset % len(projects)]
        assigned = [member["user_id"] for member in random.sample(crew, 2)]
        insert(
            conn,
            "job_schedules",
            {
                "id": new_id(),
                "job_name": f"{project['name']} - day {offset}",
                "location": project["address"],
                "start_time": stamp(today + timedelta(days=offset), 8),
                "end_time": stamp(today + timedelta(days=offset), 16),
                "status": "scheduled",
                "priority": random.choice(["medium", "high"]),
                "assigned_users": assigned,
                "created_at": now_iso(),
                "updated_at": now_iso(),
            },
        )

    # last week of completed shifts plus two crew on the clock today
    for back in range(1, 8):
        day = today - timedelta(days=back)
        if day.weekday() >= 5:
            continue
        for member in crew:
            insert(
                conn,
                "time_clock",
                {
                    "id": new_id(),
                    "user_id": member["user_id"],
                    "employee_name": member["full_name"],
                    "employee_role": member["role"],
                    "clock_in": stamp(day, 7),
                    "clock_out": stamp(day, 15, 30),
                    "total_hours": 8.0,
                    "break_time_minutes": 30,
                    "project_name": random.choice(projects)["name"],
                    "status": "clocked_out",
                    "created_at": stamp(day, 7),
                },
            )
    for member in crew[:2]:
        insert(
            conn,
            "time_clock",
            {
                "id": new_id(),
                "user_id": member["user_id"],
                "employee_name": member["full_name"],
                "employee_role": member["role"],
                "clock_in": stamp(today, 7),
                "project_name": projects[0]["name"],
                "location": projects[0]["address"],
                "status": "clocked_in",
                "created_at": stamp(today, 7),
            },
        )

    active = projects[0]
    rows: list[tuple[str, dict[str, Any]]] = [
        ("work_orders", {"title": "Replace flashing at chimney", "project_id": active["id"], "priority": "high", "status": "open"}),
        ("work_orders", {"title": "Haul away tear-off debris", "project_id": projects[1]["id"], "status": "in_progress"}),
        ("service_tickets", {"title": "Leak over garage", "customer_name": "Tom Baker", "property_address": projects[2]["address"], "ticket_type": "leak", "priority": "urgent"}),
        ("project_inspections", {"project_id": active["id"], "inspection_type": "Final roofing", "scheduled_date": (today + timedelta(days=6)).isoformat(), "inspector_name": "Travis County"}),
        ("punchlist_items", {"project_id": active["id"], "description": "Touch up drip edge paint", "location": "north eave"}),
        ("permits", {"project_id": active["id"], "permit_type": "Re-roof", "permit_number": "BP-2024-11873", "status": "approved", "expiration_date": (today + timedelta(days=120)).isoformat()}),
        ("daily_log_entries", {"project_id": active["id"], "log_date": (today - timedelta(days=1)).isoformat(), "weather_data": {"conditions": "sunny"}, "tasks_performed": "Tear-off and dry-in of main roof"}),
        ("todos", {"title": "Order ridge vent for Lakeway", "project_id": projects[1]["id"], "priority": "high", "due_date": (today + timedelta(days=2)).isoformat()}),
        ("todos", {"title": "Call back Priya Patel", "priority": "medium", "due_date": today.isoformat()}),
        ("incidents", {"title": "Ladder slip", "severity": "minor", "location": active["address"], "injured_party": "Ben Foster", "incident_date": (today - timedelta(days=9)).isoformat()}),
        ("safety_meetings", {"title": "Fall protection refresher", "scheduled_date": (today + timedelta(days=3)).isoformat(), "location": "Shop", "topics": "harness inspection, anchor points"}),
    ]
    for index, (table, values) in enumerate(rows):
        row = {"id": new_id(), "created_at": stamp(today - timedelta(days=len(rows) - index)), **values}
        if table in {"work_orders", "service_tickets", "todos"}:
            row["updated_at"] = row["created_at"]
        insert(conn, table, row)

    for index, (name, contact, email, phone, contact_type) in enumerate(CONTACTS):
        created = stamp(today - timedelta(days=60 - index))
        insert(
            conn,
            "directory_contacts",
            {
                "id": new_id(),
                "company_name": name,
                "contact_name": contact,
                "email": email,
                "phone": phone,
                "contact_type": contact_type,
                "created_at": created,
                "updated_at": created,
            },
        )
    for name, category, unit, price in MATERIALS:
        insert(
            conn,
            "materials",
            {"id": new_id(), "name": name, "category": category, "unit": unit, "total": price, "status": "in_stock", "created_at": now_iso()},
        )


def seed_financials(conn: sqlite3.Connection, today: date, projects: list[dict[str, Any]]) -> None:
    for index, project in enumerate(projects):
        amount = round(project["budget_labor"] + project["budget_materials"], 2)
        tax = round(amount * 0.0825, 2)
        created_day = today - timedelta(days=35 - index * 6)
        paid = amount + tax if project["status"] == "completed" else round((amount + tax) * 0.3, 2) if index % 2 else 0.0
        balance = round(amount + tax - paid, 2)
        due_day = created_day + timedelta(days=30)
        if balance == 0:
            status = "paid"
        elif due_day < today:
            status = "overdue"
        else:
            status = "sent"
        invoice = insert(
            conn,
            "invoices",
            {
                "id": new_id(),
                "invoice_number": f"INV-{1001 + index}",
                "customer_name": project["customer_name"],
                "project_id": project["id"],
                "project_name": project["name"],
                "description": "Roofing services",
                "total_amount": amount,
                "tax": tax,
                "balance_due": balance,
                "status": status,
                "due_date": due_day.isoformat(),
                "paid_at": now_iso() if balance == 0 else None,
                "created_at": stamp(created_day),
                "updated_at": stamp(created_day),
            },
        )
        if paid:
            insert(
                conn,
                "invoice_payments",
                {
                    "id": new_id(),
                    "invoice_id": invoice["id"],
                    "amount": paid,
                    "payment_method": random.choice(["check", "ach", "credit_card"]),
                    "payment_date": (created_day + timedelta(days=5)).isoformat(),
                    "created_at": stamp(created_day + timedelta(days=5)),
                },
            )

        bill_total = round(project["budget_materials"] * 0.6, 2)
        insert(
            conn,
            "bills",
            {
                "id": new_id(),
                "bill_number": f"BILL-{2001 + index}",
                "vendor_name": CONTACTS[0][0] if index % 2 else CONTACTS[1][0],
                "project_id": project["id"],
                "description": "Materials",
                "total": bill_total,
                "paid": 0,
                "balance_due": bill_total,
                "status": "pending",
                "bill_date": created_day.isoformat(),
                "due_date": (created_day + timedelta(days=20)).isoformat(),
                "created_at": stamp(created_day),
                "updated_at": stamp(created_day),
            },
        )
        insert(
            conn,
            "expenses",
            {
                "id": new_id(),
                "description": f"Dumpster rental - {project['name']}",
                "amount": 425.0,
                "category": "equipment",
                "project_id": project["id"],
                "vendor_name": "Dumpster Depot",
                "expense_date": created_day.isoformat(),
                "created_at": stamp(created_day),
                "updated_at": stamp(created_day),
            },
        )

    active = projects[1]
    created = stamp(today - timedelta(days=4))
    insert(conn, "purchase_orders", {"id": new_id(), "po_number": "PO-3001", "vendor_name": "ABC Supply", "description": "TPO membrane and adhesive", "total_amount": 11840.0, "project_id": active["id"], "status": "sent", "created_at": created, "updated_at": created})
    insert(conn, "project_estimates", {"id": new_id(), "estimate_number": "EST-4001", "title": "Chen gutter replacement", "customer_name": "Lily Chen", "project_id": projects[4]["id"], "grand_total": 3100.0, "status": "sent", "created_at": created, "updated_at": created})
    insert(conn, "change_orders", {"id": new_id(), "co_number": "CO-5001", "title": "Replace rotted decking", "project_id": active["id"], "estimated_cost": 1450.0, "status": "pending", "date": today.isoformat(), "created_at": created, "updated_at": created})

    proposal = insert(
        conn,
        "proposals",
        {"id": new_id(), "proposal_number": "P-6001", "property_address": LEADS[4][3], "customer_name": LEADS[4][0], "status": "sent", "created_at": created},
    )
    for option, price in (("Good", 14800.0), ("Better", 17250.0), ("Best", 21900.0)):
        insert(conn, "proposal_quotes", {"id": new_id(), "proposal_id": proposal["id"], "option_name": option, "total": price, "created_at": created})
    for description, quantity, unit_price in (("Tear-off (squares)", 32, 85.0), ("Shingles (squares)", 32, 310.0), ("Ridge vent (ft)", 48, 9.5)):
        insert(
            conn,
            "proposal_pricing_items",
            {"id": new_id(), "proposal_id": proposal["id"], "description": description, "quantity": quantity, "unit_price": unit_price, "total": round(quantity * unit_price, 2), "created_at": created},
        )


def seed_database(conn: sqlite3.Connection, today: Optional[date] = None) -> None:
    today = today or datetime.now(timezone.utc).date()
    random.seed(RANDOM_SEED)
    load_sql(conn, DATA_DIR / "schema.sql")
    members = seed_team(conn, today - timedelta(days=365))
    seed_leads(conn, today)
    projects = seed_projects(conn, today, members)
    seed_operations(conn, today, members, projects)
    seed_financials(conn, today, projects)


def run_integrity_checks(conn: sqlite3.Connection) -> None:
    checks = {
        "invoice_project_fk": "SELECT COUNT(*) FROM invoices i LEFT JOIN projects p ON i.project_id = p.id WHERE i.project_id IS NOT NULL AND p.id IS NULL",
        "time_clock_user_fk": "SELECT COUNT(*) FROM time_clock t LEFT JOIN team_directory m ON t.user_id = m.user_id WHERE t.user_id IS NOT NULL AND m.user_id IS NULL",
        "negative_balance": "SELECT COUNT(*) FROM invoices WHERE balance_due < 0",
    }
    failures = []
    for name, query in checks.items():
        count = conn.execute(query).fetchone()[0]
        if count != 0:
            failures.append(f"{name} failed ({count})")
    if failures:
        raise RuntimeError("Integrity checks failed: " + "; ".join(failures))


def main() -> None:
    database_path = db_path()
    database_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(database_path)
    conn.row_factory = sqlite3.Row

    try:
        seed_database(conn)
        run_integrity_checks(conn)
        conn.commit()
        counts = {
            table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            for table in ("team_directory", "leads", "projects", "time_clock", "invoices", "bills")
        }
    finally:
        conn.close()

    print(f"Reset complete: {database_path}")
    print("- SQLite schema rebuilt")
    for table, count in counts.items():
        print(f"- {count} {table} rows seeded")


if __name__ == "__main__":
    main()
