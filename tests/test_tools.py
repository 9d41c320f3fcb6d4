from __future__ import annotations

import asyncio

import pytest

from agent_hub.services.database import Filter, connect_store, utc_now
from agent_hub.services.tools.navigation import page_url


def test_update_lead_status_by_partial_name(seed, call_tool, fetch) -> None:
    seed("leads", name="John Smith", status="contacted")

    result = call_tool("update_lead_status", {"lead_name": "Smith", "new_status": "quoted"})

    assert result["success"] is True
    assert result["previous_status"] == "contacted"
    assert result["new_status"] == "quoted"
    assert result["visual_type"] == "status_update"
    assert result["data_modified"] is True
    current = [step["status"] for step in result["status_steps"] if step["current"]]
    assert current == ["quoted"]

    listed = call_tool("query_leads", {"search": "Smith"})
    assert [lead["status"] for lead in listed["leads"]] == ["quoted"]


def test_create_lead_without_name_asks_for_input(db_path, call_tool, fetch) -> None:
    result = call_tool("create_lead", {})

    assert result["visual_type"] == "input_form"
    assert result["missing_fields"] == ["name"]
    name_field = next(field for field in result["fields"] if field["name"] == "name")
    assert name_field["required"] is True
    assert fetch("SELECT COUNT(*) AS n FROM leads")[0]["n"] == 0


def test_create_lead_sets_new_status(db_path, call_tool) -> None:
    result = call_tool("create_lead", {"name": "Priya Patel", "phone": "512-555-0177"})

    assert result["success"] is True
    assert result["lead"]["status"] == "new"
    assert result["action_completed"] == "create_lead"


def test_navigate_to_oldest_project_on_empty_table(db_path, call_tool) -> None:
    result = call_tool("navigate_to_specific_item", {"item_type": "project", "search": "oldest"})

    assert result["success"] is False
    assert "Couldn't find" in result["message"]
    assert result["visual_type"] == "error_card"


def test_navigate_to_latest_invoice(seed, call_tool) -> None:
    seed("invoices", age=50, invoice_number="INV-1001")
    newest = seed("invoices", age=1, invoice_number="INV-1002")

    result = call_tool("navigate_to_specific_item", {"item_type": "invoice"})

    assert result["navigate_to"] == f"/admin/invoices/{newest['id']}"
    assert result["visual_type"] == "navigation"


def test_page_lookup() -> None:
    assert page_url("leads")[1] == "leads"
    assert page_url("go to the invoices page")[1] == "invoices"
    assert page_url("no such place") == ("/admin", None)


def test_invalid_status_is_rejected_without_write(seed, call_tool, fetch) -> None:
    seed("leads", name="John Smith", status="contacted")

    result = call_tool("update_lead_status", {"lead_name": "Smith", "new_status": "won"})

    assert result["success"] is False
    assert "quoted" in result["allowed_values"]
    assert fetch("SELECT status FROM leads")[0]["status"] == "contacted"


def test_delete_missing_target_changes_nothing(seed, call_tool, fetch) -> None:
    seed("leads", name="John Smith")

    result = call_tool("delete_lead", {"lead_name": "Nobody Here"})

    assert result == {"success": False, "error": "Lead not found: Nobody Here", "visual_type": "error_card"}
    assert fetch("SELECT COUNT(*) AS n FROM leads")[0]["n"] == 1


def test_delete_without_identifier_fails(db_path, call_tool) -> None:
    result = call_tool("delete_lead", {})

    assert result["success"] is False
    assert "lead_name or lead_id" in result["error"]


def test_delete_project_cascades_to_photos(seed, call_tool, fetch) -> None:
    project = seed("projects", name="Lakeway Clubhouse", status="active")
    seed("project_photos", project_id=project["id"], photo_url="https://example.test/a.jpg")
    seed("invoices", invoice_number="INV-7", project_id=project["id"])

    result = call_tool("delete_project", {"project_name": "lakeway"})

    assert result["success"] is True
    assert result["deleted"]["id"] == project["id"]
    assert fetch("SELECT COUNT(*) AS n FROM project_photos")[0]["n"] == 0
    assert fetch("SELECT project_id FROM invoices")[0]["project_id"] is None


def test_team_member_removal_is_soft(seed, call_tool, fetch) -> None:
    seed("team_directory", full_name="Ben Foster", email="ben@example.test", status="active")

    result = call_tool("delete_team_member", {"employee_name": "Ben"})
    listed = call_tool("query_employees", {})
    again = call_tool("delete_team_member", {"employee_name": "Ben"})

    assert result["new_status"] == "inactive"
    assert fetch("SELECT status FROM team_directory")[0]["status"] == "inactive"
    assert listed["count"] == 0
    assert again["success"] is False


def test_add_team_member_rejects_duplicate_email(seed, call_tool) -> None:
    seed("team_directory", full_name="Ben Foster", email="ben@example.test")

    result = call_tool("add_team_member", {"full_name": "Benjamin Foster", "email": "ben@example.test"})

    assert result["success"] is False
    assert "already exists" in result["error"]


def test_update_contact_falls_back_to_team_member(seed, call_tool, fetch) -> None:
    seed("directory_contacts", company_name="ABC Supply", contact_name="Dana Wells")
    seed("team_directory", full_name="Ben Foster", phone_number="512-555-0101")

    result = call_tool("update_contact", {"contact_name": "Ben Foster", "phone": "512-555-0000"})

    assert result["success"] is True
    assert result["employee"]["phone_number"] == "512-555-0000"
    assert fetch("SELECT phone_number FROM team_directory")[0]["phone_number"] == "512-555-0000"
    assert fetch("SELECT phone FROM directory_contacts")[0]["phone"] is None


def test_update_contact_skips_removed_team_members(seed, call_tool) -> None:
    seed("team_directory", full_name="Ben Foster", status="inactive")

    result = call_tool("update_contact", {"contact_name": "Ben Foster", "phone": "512-555-0000"})

    assert result["success"] is False
    assert result["error"] == "Contact not found: Ben Foster"


def test_update_contact_by_id_alone(seed, call_tool, fetch) -> None:
    contact = seed("directory_contacts", company_name="ABC Supply", contact_name="Dana Wells")

    result = call_tool("update_contact", {"contact_id": contact["id"], "phone": "512-555-0000"})
    unnamed = call_tool("update_contact", {"phone": "512-555-0000"})

    assert result["success"] is True
    assert fetch("SELECT phone FROM directory_contacts")[0]["phone"] == "512-555-0000"
    assert unnamed["visual_type"] == "error_card"
    assert unnamed["error"].startswith("Specify which contact")


def test_queries_do_not_write(seed, call_tool, fetch) -> None:
    seed("leads", name="John Smith")
    seed("projects", name="Johnson Residence")
    before = fetch("SELECT * FROM leads") + fetch("SELECT * FROM projects")

    first = call_tool("query_leads", {})
    second = call_tool("query_leads", {})
    call_tool("query_projects", {"include_financials": "true"})

    assert first["leads"] == second["leads"]
    assert fetch("SELECT * FROM leads") + fetch("SELECT * FROM projects") == before


def test_record_payment_updates_balance(seed, call_tool, fetch) -> None:
    invoice = seed("invoices", invoice_number="INV-1001", total_amount=1000, balance_due=1000, status="sent")

    partial = call_tool("record_payment", {"invoice_number": "INV-1001", "amount": "400"})
    overpaid = call_tool("record_payment", {"invoice_number": "1001", "amount": 900})

    assert partial["previous_balance"] == 1000
    assert partial["new_balance"] == 600
    assert partial["invoice"]["status"] == "sent"
    assert overpaid["new_balance"] == 0
    assert overpaid["invoice"]["status"] == "paid"
    assert overpaid["invoice"]["paid_at"]
    payments = fetch("SELECT amount FROM invoice_payments WHERE invoice_id = ?", (invoice["id"],))
    assert sorted(row["amount"] for row in payments) == [400, 900]


def test_record_payment_rejects_non_positive_amount(seed, call_tool, fetch) -> None:
    seed("invoices", invoice_number="INV-1001", total_amount=1000, balance_due=1000, status="sent")

    result = call_tool("record_payment", {"invoice_number": "INV-1001", "amount": 0})

    assert result["success"] is False
    assert fetch("SELECT COUNT(*) AS n FROM invoice_payments")[0]["n"] == 0


def test_failed_transaction_rolls_back(seed, db_path, fetch) -> None:
    invoice = seed("invoices", invoice_number="INV-1001", total_amount=1000, balance_due=1000)

    async def scenario():
        store = await connect_store(db_path)
        try:
            async with store.transaction():
                await store.insert("invoice_payments", {"invoice_id": invoice["id"], "amount": 10, "payment_date": "2025-01-06"})
                await store.update("invoices", {"balance_due": 990}, [Filter("id", "eq", invoice["id"])])
                raise RuntimeError("interrupted")
        finally:
            await store.close()

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())

    assert fetch("SELECT COUNT(*) AS n FROM invoice_payments")[0]["n"] == 0
    assert fetch("SELECT balance_due FROM invoices")[0]["balance_due"] == 1000


def test_create_invoice_links_project(seed, call_tool) -> None:
    seed("projects", name="Lakeway Clubhouse", customer_name="Lakeway HOA")

    result = call_tool(
        "create_invoice", {"customer_name": "Lakeway HOA", "amount": "12,000", "tax": 990, "project_name": "Lakeway"}
    )

    assert result["success"] is True
    invoice = result["invoice"]
    assert invoice["invoice_number"].startswith("INV-")
    assert invoice["balance_due"] == 12990
    assert invoice["project_name"] == "Lakeway Clubhouse"


def test_daily_log_requires_known_project(db_path, call_tool) -> None:
    result = call_tool("create_daily_log", {"project_name": "Nowhere", "tasks_performed": "Dry-in"})

    assert result["success"] is False
    assert result["error"] == "Project not found: Nowhere"


def test_clock_in_then_who_is_clocked_in(seed, call_tool) -> None:
    seed("team_directory", full_name="Luis Ortega", role="field_worker")

    clocked = call_tool("clock_in_employee", {"employee_name": "luis"})
    twice = call_tool("clock_in_employee", {"employee_name": "luis"})
    who = call_tool("query_who_clocked_in", {})
    out = call_tool("clock_out_employee", {"employee_name": "Luis Ortega"})
    after = call_tool("query_who_clocked_in", {})

    assert clocked["success"] is True
    assert twice["success"] is False
    assert [row["employee_name"] for row in who["employees"]] == ["Luis Ortega"]
    assert who["visual_type"] == "clocked_in_list"
    assert out["time_entry"]["status"] == "clocked_out"
    assert after["count"] == 0


def test_who_clocked_in_lists_each_employee_once(seed, call_tool) -> None:
    member = seed("team_directory", full_name="Kayla Reed")
    for _ in range(2):
        seed(
            "time_clock",
            user_id=member["user_id"],
            employee_name="Kayla Reed",
            clock_in=utc_now(),
            status="clocked_in",
        )

    result = call_tool("query_who_clocked_in", {})

    assert result["count"] == 1


def test_entry_left_open_on_an_earlier_day_does_not_block_clock_in(seed, call_tool, fetch) -> None:
    member = seed("team_directory", full_name="Kayla Reed")
    seed(
        "time_clock",
        user_id=member["user_id"],
        employee_name="Kayla Reed",
        clock_in="2020-01-01T08:00:00Z",
        status="clocked_in",
    )

    before = call_tool("query_who_clocked_in", {})
    clock_out = call_tool("clock_out_employee", {"employee_name": "Kayla"})
    clock_in = call_tool("clock_in_employee", {"employee_name": "Kayla"})
    after = call_tool("query_who_clocked_in", {})

    assert before["count"] == 0
    assert clock_out["success"] is False
    assert clock_in["success"] is True
    assert after["count"] == 1
    assert len(fetch("SELECT id FROM time_clock WHERE clock_out IS NULL")) == 2


def test_schedule_times_are_zero_padded(db_path, call_tool) -> None:
    result = call_tool(
        "create_schedule",
        {"job_name": "Tear-off", "start_date": "2025-01-06", "start_time": "8:00", "end_time": "16:30"},
    )

    assert result["success"] is True
    assert result["schedule"]["start_time"] == "2025-01-06T08:00:00"
    assert result["schedule"]["end_time"] == "2025-01-06T16:30:00"


def test_schedule_rejects_unparseable_time(db_path, call_tool, fetch) -> None:
    result = call_tool("create_schedule", {"job_name": "Tear-off", "start_date": "2025-01-06", "start_time": "8am"})

    assert result["success"] is False
    assert result["visual_type"] == "error_card"
    assert "start_time must be a time in HH:MM" in result["error"]
    assert fetch("SELECT COUNT(*) AS n FROM job_schedules")[0]["n"] == 0


def test_create_schedule_lists_only_the_omitted_field(db_path, call_tool) -> None:
    result = call_tool("create_schedule", {"job_name": "Tear-off"})

    assert result["visual_type"] == "input_form"
    assert result["missing_fields"] == ["start_date"]


def test_timesheet_report_for_unknown_employee_asks_for_name(db_path, call_tool) -> None:
    result = call_tool("generate_pdf_report", {"report_type": "timesheet", "employee_name": "Nobody"})

    assert result["visual_type"] == "input_form"
    assert result["form_type"] == "timesheet_report"


def test_invoice_report_uses_latest_invoice_for_project(seed, call_tool) -> None:
    project = seed("projects", name="Riverside Office Park", address="4500 Riverside Blvd")
    seed("invoices", age=30, invoice_number="INV-1", project_id=project["id"], total_amount=500)
    seed("invoices", age=2, invoice_number="INV-2", project_id=project["id"], total_amount=800, tax=66)

    result = call_tool("generate_pdf_report", {"report_type": "invoice", "project_name": "riverside"})

    assert result["success"] is True
    assert result["visual_type"] == "pdf_report"
    assert result["data"]["invoice_number"] == "INV-2"
    assert result["data"]["project_address"] == "4500 Riverside Blvd"


def test_dashboard_stats_count_open_balances(seed, call_tool) -> None:
    seed("projects", name="A", status="active")
    seed("projects", name="B", status="completed")
    seed("leads", name="New Lead", status="new")
    seed("invoices", invoice_number="INV-1", total_amount=100, balance_due=40, status="sent")
    seed("invoices", invoice_number="INV-2", total_amount=999, balance_due=999, status="cancelled")

    result = call_tool("get_dashboard_stats", {"period": "all"})

    stats = result["stats"]
    assert result["visual_type"] == "dashboard_stats"
    assert stats["projects"] == {"total": 2, "active": 1, "completed": 1}
    assert stats["leads"]["new"] == 1
    assert stats["revenue"]["outstanding"] == 40
