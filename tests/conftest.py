"""Shared test fixtures for forecasting tests."""

from datetime import date

from finance_forecast.models.results import MonthSummary
from finance_forecast.models.schemas import (
    BudgetDefinition,
    RecurringDefinition,
    RecurringFrequency,
    TransactionRecord,
)


def make_transaction(
    amount: float = -45.0,
    date: str = "2025-01-15",
    category_name: str | None = "Groceries",
    category_id: str | None = "cat-groceries",
) -> TransactionRecord:
    return TransactionRecord(
        date=date,
        amount=amount,
        category_name=category_name,
        category_id=category_id,
    )


def make_recurring(
    amount: float = -15.99,
    frequency: str = "monthly",
    is_active: bool = True,
) -> RecurringDefinition:
    return RecurringDefinition(
        amount=amount,
        frequency=RecurringFrequency(frequency),
        is_active=is_active,
    )


def make_budget(
    name: str = "Food",
    amount: float = 500.0,
    category_ids: list[str] | None = None,
    is_active: bool = True,
) -> BudgetDefinition:
    return BudgetDefinition(
        name=name,
        amount=amount,
        category_ids=category_ids if category_ids is not None else ["cat-groceries"],
        is_active=is_active,
    )


def make_month_summary(
    month_key: str = "2025-01",
    income: float = 5000.0,
    expenses: float = 3200.0,
    transaction_count: int = 10,
    category_spending: dict[str, float] | None = None,
    category_names: dict[str, str] | None = None,
) -> MonthSummary:
    return MonthSummary(
        month_key=month_key,
        income=income,
        expenses=expenses,
        net_amount=income - expenses,
        transaction_count=transaction_count,
        category_spending=category_spending or {},
        category_names=category_names or {},
    )


def monthly_history(expenses: list[float], income: float = 0.0, start: date = date(2025, 1, 1)) -> list[MonthSummary]:
    """One summary per consecutive month starting at *start*."""
    summaries = []
    for i, spent in enumerate(expenses):
        index = start.year * 12 + start.month - 1 + i
        key = f"{index // 12}-{index % 12 + 1:02d}"
        summaries.append(make_month_summary(month_key=key, income=income, expenses=spent))
    return summaries
