# Overview: Service-layer operations for expenses (accounts payable).

from __future__ import annotations

from datetime import datetime, timezone

from ..time_utils import end_of_day, ensure_utc, utcnow
from ..validation import DocumentPolicy, ValidationError, as_amount, as_datetime, as_text, one_of
from . import records

EXPENSES = "expenses"

STATUS_PENDING = "Pendente"
STATUS_PAID = "Pago"

EXPENSE_CATEGORIES = (
    "Aluguel",
    "Água",
    "Energia",
    "Internet",
    "Telefone",
    "Salários",
    "Impostos",
    "Fornecedores",
    "Manutenção",
    "Marketing",
    "Outros",
)

EXPENSE_POLICY = DocumentPolicy(
    fields={
        "description": as_text,
        "amount": as_amount,
        "category": one_of(*EXPENSE_CATEGORIES),
        "dueDate": as_datetime,
        "status": one_of(STATUS_PENDING, STATUS_PAID),
        "paymentDate": as_datetime,
        "notes": as_text,
    },
    required_on_create=frozenset({"description", "amount", "category", "dueDate"}),
)


class ExpenseError(ValidationError):
    """Raised for expense business rule violations."""


def _check_amount(payload: dict) -> None:
    if "amount" in payload and payload["amount"] is not None:
        if EXPENSE_POLICY.fields["amount"]("amount", payload["amount"]) <= 0:
            raise ExpenseError("amount must be greater than zero")


def add_expense(payload: dict) -> dict:
    _check_amount(payload or {})
    expense = records.create_record(
        EXPENSES,
        payload,
        policy=EXPENSE_POLICY,
        defaults={"status": STATUS_PENDING, "paymentDate": None},
    )
    if expense["status"] == STATUS_PAID and expense.get("paymentDate") is None:
        return records.update_record(EXPENSES, expense["id"], {"paymentDate": utcnow()}, policy=EXPENSE_POLICY)
    return expense


def update_expense(expense_id: str, payload: dict) -> dict:
    _check_amount(payload or {})
    return records.update_record(EXPENSES, expense_id, payload, policy=EXPENSE_POLICY)


def delete_expense(expense_id: str) -> None:
    records.delete_record(EXPENSES, expense_id)


def get_expense(expense_id: str) -> dict:
    return records.get_record(EXPENSES, expense_id)


def toggle_expense_status(expense_id: str, payment_date: datetime | None = None) -> dict:
    """
    Flip Pendente <-> Pago. Paying sets paymentDate (now unless given);
    reopening clears it.
    """
    expense = records.get_record(EXPENSES, expense_id)
    if expense.get("status") == STATUS_PAID:
        patch = {"status": STATUS_PENDING, "paymentDate": None}
    else:
        paid_at = payment_date or expense.get("paymentDate") or utcnow()
        patch = {"status": STATUS_PAID, "paymentDate": paid_at}
    return records.update_record(EXPENSES, expense_id, patch, policy=EXPENSE_POLICY)


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ExpenseError("month must be between 1 and 12")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        next_start = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        next_start = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, next_start


def list_expenses(
    *,
    month: int | None = None,
    year: int | None = None,
    category: str | None = None,
    status: str | None = None,
) -> list[dict]:
    """
    Expenses ordered by due date. month/year narrow on dueDate; "all" (or
    None) disables the category/status filters.
    """
    filters = []
    if month is not None and year is None:
        year = utcnow().year
    if year is not None:
        if month is not None:
            start, next_start = _month_bounds(year, month)
        else:
            start = datetime(year, 1, 1, tzinfo=timezone.utc)
            next_start = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        filters.append(("dueDate", ">=", start))
        filters.append(("dueDate", "<", next_start))
    if category and category != "all":
        filters.append(("category", "==", category))
    if status and status != "all":
        filters.append(("status", "==", status))
    return records.list_records(EXPENSES, filters=filters, order_by="dueDate")


def get_expenses_by_date_range(start: datetime, end: datetime) -> list[dict]:
    """Expenses due between start and the end of end's day, newest first."""
    return records.list_records(
        EXPENSES,
        filters=[
            ("dueDate", ">=", ensure_utc(start)),
            ("dueDate", "<=", end_of_day(ensure_utc(end))),
        ],
        order_by="dueDate",
        descending=True,
    )
