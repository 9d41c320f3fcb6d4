from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from agent_hub.services.database import DataStore, Filter, today, utc_now
from agent_hub.services.dispatcher import failure
from agent_hub.services.resolver import not_found, resolve
from agent_hub.services.tool_registry import Param, ToolSpec
from agent_hub.services.tools.common import (
    END_DATE,
    LIMIT,
    PROJECT_NAME,
    SEARCH,
    START_DATE,
    apply_update,
    date_range,
    delete_tool,
    document_number,
    link_project,
    link_warning,
    listing,
    locate,
    money,
    parse_date,
    pick,
    project_scope,
    query_limit,
    query_rows,
    start_of_week,
    total,
)

INVOICE_STATUSES = ("draft", "sent", "paid", "cancelled")
BILL_STATUSES = ("draft", "pending", "paid", "cancelled")
BALANCE_FILTERS = ("unpaid", "overdue")
PO_STATUSES = ("draft", "sent", "received", "cancelled")
ESTIMATE_STATUSES = ("draft", "sent", "approved", "rejected")
CHANGE_ORDER_STATUSES = ("draft", "pending", "approved", "rejected")
EXPENSE_CATEGORIES = ("materials", "labor", "equipment", "fuel", "permits", "subcontractor", "office", "other")
PAYMENT_METHODS = ("check", "cash", "credit_card", "ach", "wire")
PERIODS = ("today", "week", "month", "year", "all")

ACTIVE_PROJECT_STATUSES = ("scheduled", "active", "in_progress")

AMOUNT = Param("amount", "number", "Amount in dollars", form=True)


def _period_start(period: str) -> Optional[str]:
    day = parse_date(today())
    if period == "today":
        return day.isoformat()
    if period == "week":
        return start_of_week(day).isoformat()
    if period == "month":
        return day.replace(day=1).isoformat()
    if period == "year":
        return day.replace(month=1, day=1).isoformat()
    return None


def balance_filters(status: Optional[str]) -> list[Filter]:
    if not status:
        return []
    if status == "unpaid":
        return [Filter("balance_due", "gt", 0), Filter("status", "neq", "cancelled")]
    if status == "overdue":
        return [
            Filter("balance_due", "gt", 0),
            Filter("status", "neq", "cancelled"),
            Filter("due_date", "lt", today()),
        ]
    return [Filter("status", "eq", status)]


async def project_financials(store: DataStore, project_id: str) -> dict[str, Any]:
    scope = [Filter("project_id", "eq", project_id)]
    invoices = await store.select("invoices", filters=[*scope, Filter("status", "neq", "cancelled")])
    bills = await store.select("bills", filters=[*scope, Filter("status", "neq", "cancelled")])
    expenses = await store.select("expenses", filters=scope)
    materials = await store.select("project_materials", filters=scope)

    invoiced = total(invoices, "total_amount")
    outstanding = total(invoices, "balance_due")
    collected = money(invoiced - outstanding)
    costs = money(total(bills, "total") + total(expenses, "amount") + total(materials, "total_cost"))
    profit = money(invoiced - costs)
    return {
        "total_invoiced": invoiced,
        "total_paid": collected,
        "total_due": outstanding,
        "bill_cost": total(bills, "total"),
        "expense_cost": total(expenses, "amount"),
        "material_cost": total(materials, "total_cost"),
        "total_cost": costs,
        "profit": profit,
        "profit_margin": round(profit / invoiced * 100, 1) if invoiced > 0 else 0.0,
    }


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


async def get_dashboard_stats(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    period = params.get("period", "month")
    since = _period_start(period)
    created_since = [Filter("created_at", "gte", since)] if since else []

    projects_total = await store.count("projects")
    projects_active = await store.count("projects", [Filter("status", "in", ACTIVE_PROJECT_STATUSES)])
    projects_completed = await store.count("projects", [Filter("status", "eq", "completed")])
    leads_total = await store.count("leads")
    leads_new = await store.count("leads", [Filter("status", "eq", "new")])
    leads_in_period = await store.count("leads", created_since)
    team_total = await store.count("team_directory", [Filter("status", "eq", "active")])
    clocked_in = await store.count(
        "time_clock", [Filter("clock_out", "is_null"), Filter("clock_in", "gte", today())]
    )
    open_work_orders = await store.count("work_orders", [Filter("status", "in", ("open", "in_progress"))])
    open_tickets = await store.count("service_tickets", [Filter("status", "in", ("open", "in_progress"))])

    invoices = await store.select(
        "invoices", ("total_amount", "balance_due", "status"), filters=[Filter("status", "neq", "cancelled")]
    )
    payment_filters = [Filter("payment_date", "gte", since)] if since else []
    payments = await store.select("invoice_payments", ("amount",), filters=payment_filters)
    bills = await store.select(
        "bills", ("balance_due",), filters=[Filter("balance_due", "gt", 0), Filter("status", "neq", "cancelled")]
    )
    expense_filters = [Filter("expense_date", "gte", since)] if since else []
    expenses = await store.select("expenses", ("amount",), filters=expense_filters)

    stats = {
        "projects": {"total": projects_total, "active": projects_active, "completed": projects_completed},
        "leads": {"total": leads_total, "new": leads_new, "created_in_period": leads_in_period},
        "revenue": {
            "total": total(invoices, "total_amount"),
            "outstanding": total(invoices, "balance_due"),
            "paid_invoices": sum(1 for invoice in invoices if invoice["status"] == "paid"),
            "collected_in_period": total(payments, "amount"),
        },
        "payables": {"unpaid_bills": len(bills), "outstanding": total(bills, "balance_due")},
        "expenses": {"total_in_period": total(expenses, "amount")},
        "operations": {
            "clocked_in": clocked_in,
            "open_work_orders": open_work_orders,
            "open_service_tickets": open_tickets,
        },
        "team": {"total": team_total},
    }
    return {
        "success": True,
        "period": period,
        "since": since,
        "stats": stats,
        "chart_data": [
            {"name": "Active Projects", "value": projects_active},
            {"name": "Completed", "value": projects_completed},
            {"name": "New Leads", "value": leads_new},
        ],
        "message": (
            f"{projects_active} active projects, {leads_new} new leads, "
            f"${stats['revenue']['outstanding']:,.2f} outstanding"
        ),
    }


async def get_project_financials(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project, error = await locate(store, "project", params, "project_id", "project_name")
    if error:
        return error
    financials = await project_financials(store, project["id"])
    invoices = await store.select(
        "invoices", filters=[Filter("project_id", "eq", project["id"])], order_by=("-created_at", "-id")
    )
    return {
        "success": True,
        "project": project,
        "financials": financials,
        "invoices": invoices,
        "chart_data": [
            {"name": "Paid", "value": financials["total_paid"]},
            {"name": "Due", "value": financials["total_due"]},
            {"name": "Costs", "value": financials["total_cost"]},
        ],
        "message": (
            f"{project['name']}: ${financials['total_invoiced']:,.2f} invoiced, "
            f"${financials['total_cost']:,.2f} costs, {financials['profit_margin']}% margin"
        ),
    }


# ---------------------------------------------------------------------------
# Invoices and receivables
# ---------------------------------------------------------------------------


async def query_invoices(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    filters = scope + balance_filters(params.get("status")) + date_range("created_at", params)
    invoices = await query_rows(store, "invoice", params, filters=filters)
    return listing(
        "invoices",
        invoices,
        "invoice(s)",
        total_amount=total(invoices, "total_amount"),
        total_due=total(invoices, "balance_due"),
    )


async def create_invoice(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    amount = money(params.get("amount"))
    tax = money(params.get("tax"))
    due_date = params.get("due_date") or (parse_date(today()) + timedelta(days=30)).isoformat()
    invoice = await store.insert(
        "invoices",
        {
            "invoice_number": document_number("INV"),
            "customer_name": params["customer_name"],
            "customer_email": params.get("customer_email"),
            "project_id": project["id"] if project else None,
            "project_name": project["name"] if project else params.get("project_name"),
            "description": params.get("description"),
            "total_amount": amount,
            "tax": tax,
            "balance_due": money(amount + tax),
            "status": "draft",
            "due_date": parse_date(due_date, "due_date").isoformat(),
        },
    )
    return {
        "success": True,
        "invoice": invoice,
        "message": f"Invoice {invoice['invoice_number']} created for {invoice['customer_name']} (${amount:,.2f})",
        **link_warning(params, project),
    }


async def update_invoice(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    invoice, error = await locate(store, "invoice", params, "invoice_id", "invoice_number")
    if error:
        return error
    changes = pick(
        params, {"status": "status", "due_date": "due_date", "customer_email": "customer_email", "description": "description"}
    )
    if "amount" in params:
        already_paid = money(invoice["total_amount"] + invoice["tax"] - invoice["balance_due"])
        changes["total_amount"] = money(params["amount"])
        changes["balance_due"] = max(0.0, money(changes["total_amount"] + invoice["tax"] - already_paid))
    result = await apply_update(store, "invoice", invoice, changes, "invoice")
    if result["success"] and "status" in changes:
        result["previous_status"] = invoice["status"]
        result["new_status"] = changes["status"]
    return result


async def record_payment(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    amount = money(params["amount"])
    if amount <= 0:
        return failure("Payment amount must be greater than zero")
    invoice, error = await locate(store, "invoice", params, "invoice_id", "invoice_number")
    if error:
        return error
    if invoice["status"] == "cancelled":
        return failure(f"Invoice {invoice['invoice_number']} is cancelled")

    async with store.transaction():
        payment = await store.insert(
            "invoice_payments",
            {
                "invoice_id": invoice["id"],
                "amount": amount,
                "payment_method": params.get("payment_method", "check"),
                "payment_date": params.get("payment_date") or today(),
                "notes": params.get("notes"),
            },
        )
        current = await store.select_one("invoices", filters=[Filter("id", "eq", invoice["id"])])
        new_balance = max(0.0, money(current["balance_due"] - amount))
        changes: dict[str, Any] = {"balance_due": new_balance, "status": "paid" if new_balance == 0 else "sent"}
        if new_balance == 0:
            changes["paid_at"] = utc_now()
        rows = await store.update("invoices", changes, [Filter("id", "eq", invoice["id"])])

    return {
        "success": True,
        "payment": payment,
        "invoice": rows[0],
        "previous_balance": money(current["balance_due"]),
        "new_balance": new_balance,
        "message": f"Payment of ${amount:,.2f} recorded on {invoice['invoice_number']}. Balance ${new_balance:,.2f}",
    }


async def query_payments(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = date_range("payment_date", params)
    if params.get("invoice_number"):
        invoice = await resolve(store, "invoice", text=params["invoice_number"])
        if invoice is None:
            return not_found("invoice", params["invoice_number"])
        filters.append(Filter("invoice_id", "eq", invoice["id"]))
    payments = await store.select(
        "invoice_payments", filters=filters, order_by=("-payment_date", "-created_at", "-id"), limit=query_limit(params)
    )
    invoice_ids = sorted({payment["invoice_id"] for payment in payments})
    invoices = await store.select(
        "invoices", ("id", "invoice_number", "customer_name"), filters=[Filter("id", "in", invoice_ids)]
    )
    by_id = {invoice["id"]: invoice for invoice in invoices}
    for payment in payments:
        invoice = by_id.get(payment["invoice_id"], {})
        payment["invoice_number"] = invoice.get("invoice_number")
        payment["customer_name"] = invoice.get("customer_name")
    return listing("payments", payments, "payment(s)", total=total(payments, "amount"))


# ---------------------------------------------------------------------------
# Bills and payables
# ---------------------------------------------------------------------------


async def query_bills(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = balance_filters(params.get("status"))
    if params.get("vendor_name"):
        filters.append(Filter("vendor_name", "ilike", params["vendor_name"]))
    bills = await query_rows(store, "bill", params, filters=filters, order_by=("due_date", "-created_at", "id"))
    return listing(
        "bills", bills, "bill(s)", total_amount=total(bills, "total"), total_due=total(bills, "balance_due")
    )


async def create_bill(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    amount = money(params.get("amount"))
    bill = await store.insert(
        "bills",
        {
            "bill_number": document_number("BILL"),
            "vendor_name": params["vendor_name"],
            "project_id": project["id"] if project else None,
            "description": params.get("description"),
            "total": amount,
            "paid": 0,
            "balance_due": amount,
            "status": "pending",
            "bill_date": params.get("bill_date") or today(),
            "due_date": params.get("due_date"),
        },
    )
    return {
        "success": True,
        "bill": bill,
        "message": f"Bill {bill['bill_number']} created for {bill['vendor_name']} (${amount:,.2f})",
        **link_warning(params, project),
    }


async def update_bill(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    bill, error = await locate(store, "bill", params, "bill_id", "bill_number")
    if error:
        return error
    changes = pick(params, {"status": "status", "due_date": "due_date", "description": "description"})
    if "amount" in params:
        changes["total"] = money(params["amount"])
        changes["balance_due"] = max(0.0, money(changes["total"] - bill["paid"]))
    result = await apply_update(store, "bill", bill, changes, "bill")
    if result["success"] and "status" in changes:
        result["previous_status"] = bill["status"]
        result["new_status"] = changes["status"]
    return result


async def pay_bill(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    amount = money(params["amount"])
    if amount <= 0:
        return failure("Payment amount must be greater than zero")
    bill, error = await locate(store, "bill", params, "bill_id", "bill_number")
    if error:
        return error
    if bill["status"] == "cancelled":
        return failure(f"Bill {bill['bill_number']} is cancelled")

    async with store.transaction():
        payment = await store.insert(
            "bill_payments",
            {
                "bill_id": bill["id"],
                "amount": amount,
                "payment_method": params.get("payment_method", "check"),
                "payment_date": params.get("payment_date") or today(),
            },
        )
        current = await store.select_one("bills", filters=[Filter("id", "eq", bill["id"])])
        new_balance = max(0.0, money(current["balance_due"] - amount))
        rows = await store.update(
            "bills",
            {
                "paid": money(current["paid"] + amount),
                "balance_due": new_balance,
                "status": "paid" if new_balance == 0 else "pending",
            },
            [Filter("id", "eq", bill["id"])],
        )

    return {
        "success": True,
        "payment": payment,
        "bill": rows[0],
        "previous_balance": money(current["balance_due"]),
        "new_balance": new_balance,
        "message": f"Paid ${amount:,.2f} on {bill['bill_number']} ({bill['vendor_name']}). Balance ${new_balance:,.2f}",
    }


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


async def create_expense(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    amount = money(params["amount"])
    if amount <= 0:
        return failure("Expense amount must be greater than zero")
    project = await link_project(store, params)
    expense = await store.insert(
        "expenses",
        {
            "description": params["description"],
            "amount": amount,
            "category": params.get("category", "other"),
            "vendor_name": params.get("vendor_name"),
            "project_id": project["id"] if project else None,
            "expense_date": parse_date(params.get("expense_date") or today(), "expense_date").isoformat(),
        },
    )
    return {
        "success": True,
        "expense": expense,
        "message": f"Expense of ${amount:,.2f} recorded: {expense['description']}",
        **link_warning(params, project),
    }


async def query_expenses(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    filters = scope + date_range("expense_date", params)
    if params.get("category"):
        filters.append(Filter("category", "eq", params["category"]))
    expenses = await query_rows(
        store, "expense", params, filters=filters, order_by=("-expense_date", "-created_at", "-id")
    )
    by_category: dict[str, float] = {}
    for expense in expenses:
        by_category[expense["category"]] = money(by_category.get(expense["category"], 0) + expense["amount"])
    return listing(
        "expenses", expenses, "expense(s)", total_amount=total(expenses, "amount"), by_category=by_category
    )


async def update_expense(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    expense, error = await locate(store, "expense", params, "expense_id", "description")
    if error:
        return error
    changes = pick(
        params,
        {
            "new_description": "description",
            "amount": "amount",
            "category": "category",
            "vendor_name": "vendor_name",
            "expense_date": "expense_date",
        },
    )
    return await apply_update(store, "expense", expense, changes, "expense")


# ---------------------------------------------------------------------------
# Purchase orders, estimates and change orders
# ---------------------------------------------------------------------------


async def create_purchase_order(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    order = await store.insert(
        "purchase_orders",
        {
            "po_number": document_number("PO"),
            "vendor_name": params["vendor_name"],
            "description": params.get("description"),
            "total_amount": money(params.get("amount")),
            "project_id": project["id"] if project else None,
            "status": "draft",
        },
    )
    return {
        "success": True,
        "purchase_order": order,
        "message": f"Purchase order {order['po_number']} created for {order['vendor_name']}",
        **link_warning(params, project),
    }


async def query_purchase_orders(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    filters = list(scope)
    if params.get("status"):
        filters.append(Filter("status", "eq", params["status"]))
    orders = await query_rows(store, "purchase_order", params, filters=filters)
    return listing("purchase_orders", orders, "purchase order(s)", total_amount=total(orders, "total_amount"))


async def update_purchase_order(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    order, error = await locate(store, "purchase_order", params, "po_id", "po_number")
    if error:
        return error
    changes = pick(params, {"status": "status", "amount": "total_amount", "description": "description"})
    result = await apply_update(store, "purchase_order", order, changes, "purchase_order")
    if result["success"] and "status" in changes:
        result["previous_status"] = order["status"]
        result["new_status"] = changes["status"]
    return result


async def create_estimate(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await resolve(store, "project", text=params["project_name"])
    estimate = await store.insert(
        "project_estimates",
        {
            "estimate_number": document_number("EST"),
            "title": params.get("title") or (project["name"] if project else params["project_name"]),
            "customer_name": params.get("customer_name") or (project["customer_name"] if project else None),
            "description": params.get("description"),
            "project_id": project["id"] if project else None,
            "grand_total": money(params.get("amount")),
            "status": "draft",
        },
    )
    return {
        "success": True,
        "estimate": estimate,
        "message": f"Estimate {estimate['estimate_number']} created: {estimate['title']}",
        **link_warning(params, project),
    }


async def query_estimates(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = []
    if params.get("status"):
        filters.append(Filter("status", "eq", params["status"]))
    estimates = await query_rows(store, "estimate", params, filters=filters)
    return listing("estimates", estimates, "estimate(s)", total_amount=total(estimates, "grand_total"))


async def create_change_order(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    project = await link_project(store, params)
    order = await store.insert(
        "change_orders",
        {
            "co_number": document_number("CO"),
            "title": params["title"],
            "description": params.get("description"),
            "project_id": project["id"] if project else None,
            "estimated_cost": money(params.get("amount")),
            "status": "draft",
            "date": params.get("date") or today(),
        },
    )
    return {
        "success": True,
        "change_order": order,
        "message": f"Change order {order['co_number']} created: {order['title']}",
        **link_warning(params, project),
    }


async def update_change_order(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    order, error = await locate(store, "change_order", params, "change_order_id", "co_number")
    if error:
        return error
    changes = pick(params, {"status": "status", "amount": "estimated_cost", "description": "description"})
    result = await apply_update(store, "change_order", order, changes, "change_order")
    if result["success"] and "status" in changes:
        result["previous_status"] = order["status"]
        result["new_status"] = changes["status"]
    return result


async def query_change_orders(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    scope, error = await project_scope(store, params)
    if error:
        return error
    filters = list(scope)
    if params.get("status"):
        filters.append(Filter("status", "eq", params["status"]))
    orders = await query_rows(store, "change_order", params, filters=filters)
    return listing("change_orders", orders, "change order(s)", total_amount=total(orders, "estimated_cost"))


async def query_materials(params: dict[str, Any], store: DataStore) -> dict[str, Any]:
    filters = []
    if params.get("category"):
        filters.append(Filter("category", "eq", params["category"]))
    materials = await query_rows(store, "material", params, filters=filters, order_by=("name", "id"), default_limit=30)
    return listing("materials", materials, "material(s)")


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "get_dashboard_stats",
        "Company-wide counts and money totals: projects, leads, receivables, payables, crew on the clock.",
        get_dashboard_stats,
        params=(Param("period", enum=PERIODS, description="Window for period totals, default month"),),
        visual_type="dashboard_stats",
    ),
    ToolSpec(
        "get_project_financials",
        "Invoiced, collected, outstanding, cost and profit figures for one project.",
        get_project_financials,
        params=(Param("project_name", description="Project name or address"), Param("project_id")),
        visual_type="financial_chart",
    ),
    ToolSpec(
        "query_invoices",
        "List invoices. Status 'unpaid' means a balance is due; 'overdue' means unpaid past the due date.",
        query_invoices,
        params=(
            Param("status", enum=INVOICE_STATUSES + BALANCE_FILTERS),
            SEARCH,
            PROJECT_NAME,
            START_DATE,
            END_DATE,
            LIMIT,
        ),
        visual_type="invoice_list",
    ),
    ToolSpec(
        "create_invoice",
        "Create a draft invoice for a customer, optionally linked to a project.",
        create_invoice,
        params=(
            Param("customer_name", required=True),
            AMOUNT,
            Param("project_name", form=True),
            Param("due_date", description="Defaults to 30 days from today", form=True, input_type="date"),
            Param("customer_email", input_type="email"),
            Param("tax", "number"),
            Param("description", input_type="textarea"),
            Param("project_id"),
        ),
        visual_type="success_card",
        form_type="create_invoice",
        data_modified=True,
    ),
    ToolSpec(
        "update_invoice",
        "Update an invoice's status, due date, amount, email or description.",
        update_invoice,
        params=(
            Param("invoice_number", description="Invoice number or customer name"),
            Param("invoice_id"),
            Param("status", enum=INVOICE_STATUSES),
            Param("due_date", input_type="date"),
            Param("amount", "number"),
            Param("customer_email"),
            Param("description"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    ToolSpec(
        "record_payment",
        "Record a customer payment against an invoice and reduce its balance.",
        record_payment,
        params=(
            Param("amount", "number", "Payment amount in dollars", required=True),
            Param("invoice_number", description="Invoice number or customer name", form=True),
            Param("invoice_id"),
            Param("payment_method", enum=PAYMENT_METHODS, form=True),
            Param("payment_date", input_type="date"),
            Param("notes"),
        ),
        visual_type="success_card",
        form_type="record_payment",
        data_modified=True,
    ),
    delete_tool(
        "delete_invoice",
        "invoice",
        "Delete an invoice and its payments.",
        id_param="invoice_id",
        text_param="invoice_number",
    ),
    ToolSpec(
        "query_payments",
        "List customer payments received, newest first.",
        query_payments,
        params=(Param("invoice_number"), START_DATE, END_DATE, LIMIT),
        visual_type="payment_list",
    ),
    ToolSpec(
        "query_bills",
        "List vendor bills ordered by due date. Status 'unpaid' or 'overdue' filter on the balance due.",
        query_bills,
        params=(Param("status", enum=BILL_STATUSES + BALANCE_FILTERS), Param("vendor_name"), SEARCH, LIMIT),
        visual_type="bill_list",
    ),
    ToolSpec(
        "create_bill",
        "Enter a vendor bill to be paid.",
        create_bill,
        params=(
            Param("vendor_name", required=True),
            AMOUNT,
            Param("description", form=True, input_type="textarea"),
            Param("due_date", form=True, input_type="date"),
            Param("bill_date", input_type="date"),
            Param("project_name"),
        ),
        visual_type="success_card",
        form_type="create_bill",
        data_modified=True,
    ),
    ToolSpec(
        "update_bill",
        "Update a bill's status, due date, amount or description.",
        update_bill,
        params=(
            Param("bill_number", description="Bill number or vendor name"),
            Param("bill_id"),
            Param("status", enum=BILL_STATUSES),
            Param("due_date", input_type="date"),
            Param("amount", "number"),
            Param("description"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    ToolSpec(
        "pay_bill",
        "Record a payment on a vendor bill and reduce its balance.",
        pay_bill,
        params=(
            Param("amount", "number", "Payment amount in dollars", required=True),
            Param("bill_number", description="Bill number or vendor name", form=True),
            Param("bill_id"),
            Param("payment_method", enum=PAYMENT_METHODS, form=True),
            Param("payment_date", input_type="date"),
        ),
        visual_type="success_card",
        form_type="pay_bill",
        data_modified=True,
    ),
    delete_tool("delete_bill", "bill", "Delete a bill and its payments.", id_param="bill_id", text_param="bill_number"),
    ToolSpec(
        "create_expense",
        "Record a business expense.",
        create_expense,
        params=(
            Param("description", required=True),
            Param("amount", "number", "Amount in dollars", required=True),
            Param("category", enum=EXPENSE_CATEGORIES, form=True),
            Param("vendor_name", form=True),
            Param("expense_date", input_type="date"),
            Param("project_name"),
        ),
        visual_type="success_card",
        form_type="create_expense",
        data_modified=True,
    ),
    ToolSpec(
        "query_expenses",
        "List expenses with totals by category.",
        query_expenses,
        params=(Param("category", enum=EXPENSE_CATEGORIES), PROJECT_NAME, SEARCH, START_DATE, END_DATE, LIMIT),
        visual_type="expense_list",
    ),
    ToolSpec(
        "update_expense",
        "Update an expense found by its description.",
        update_expense,
        params=(
            Param("description", description="Description of the expense to find"),
            Param("expense_id"),
            Param("new_description"),
            Param("amount", "number"),
            Param("category", enum=EXPENSE_CATEGORIES),
            Param("vendor_name"),
            Param("expense_date", input_type="date"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    delete_tool(
        "delete_expense", "expense", "Delete an expense.", id_param="expense_id", text_param="description"
    ),
    ToolSpec(
        "create_purchase_order",
        "Create a draft purchase order for a vendor.",
        create_purchase_order,
        params=(
            Param("vendor_name", required=True),
            AMOUNT,
            Param("description", form=True, input_type="textarea"),
            Param("project_name", form=True),
        ),
        visual_type="success_card",
        form_type="create_purchase_order",
        data_modified=True,
    ),
    ToolSpec(
        "query_purchase_orders",
        "List purchase orders.",
        query_purchase_orders,
        params=(Param("status", enum=PO_STATUSES), PROJECT_NAME, SEARCH, LIMIT),
        visual_type="po_list",
    ),
    ToolSpec(
        "update_purchase_order",
        "Update a purchase order's status, amount or description.",
        update_purchase_order,
        params=(
            Param("po_number", description="PO number or vendor name"),
            Param("po_id"),
            Param("status", enum=PO_STATUSES),
            Param("amount", "number"),
            Param("description"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    delete_tool(
        "delete_purchase_order",
        "purchase_order",
        "Delete a purchase order.",
        id_param="po_id",
        text_param="po_number",
    ),
    ToolSpec(
        "create_estimate",
        "Create a draft estimate for a project.",
        create_estimate,
        params=(
            Param("project_name", description="Project the estimate is for", required=True),
            Param("title", form=True),
            AMOUNT,
            Param("customer_name", form=True),
            Param("description", input_type="textarea"),
        ),
        visual_type="success_card",
        form_type="create_estimate",
        data_modified=True,
    ),
    ToolSpec(
        "query_estimates",
        "List estimates.",
        query_estimates,
        params=(Param("status", enum=ESTIMATE_STATUSES), SEARCH, LIMIT),
        visual_type="estimate_list",
    ),
    ToolSpec(
        "create_change_order",
        "Create a draft change order, optionally on a project.",
        create_change_order,
        params=(
            Param("title", required=True),
            Param("project_name", form=True),
            AMOUNT,
            Param("description", form=True, input_type="textarea"),
            Param("date", input_type="date"),
        ),
        visual_type="success_card",
        form_type="create_change_order",
        data_modified=True,
    ),
    ToolSpec(
        "update_change_order",
        "Update a change order's status, cost or description.",
        update_change_order,
        params=(
            Param("co_number", description="Change order number or title"),
            Param("change_order_id"),
            Param("status", enum=CHANGE_ORDER_STATUSES),
            Param("amount", "number"),
            Param("description"),
        ),
        visual_type="success_card",
        data_modified=True,
    ),
    ToolSpec(
        "query_change_orders",
        "List change orders.",
        query_change_orders,
        params=(Param("status", enum=CHANGE_ORDER_STATUSES), PROJECT_NAME, SEARCH, LIMIT),
        visual_type="change_order_list",
    ),
    delete_tool(
        "delete_change_order",
        "change_order",
        "Delete a change order.",
        id_param="change_order_id",
        text_param="co_number",
    ),
    ToolSpec(
        "query_materials",
        "Search the material catalog, ordered by name.",
        query_materials,
        params=(SEARCH, Param("category"), LIMIT),
        visual_type="material_list",
    ),
)
