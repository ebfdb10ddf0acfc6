"""Pure analysis functions over transaction history.

All functions take already-fetched input records and return result
dataclasses or plain numbers. No I/O — keeps business logic testable
without mocking.
"""

import math
from collections.abc import Iterable
from datetime import date, timedelta

from finance_forecast.models.results import MonthSummary, TrendDirection, TrendResult
from finance_forecast.models.schemas import (
    RecurringDefinition,
    RecurringFrequency,
    TransactionRecord,
)

# Expense bucket for transactions without a category
UNCATEGORIZED = "Uncategorized"

HISTORY_MONTHS = 12
MIN_SEASONAL_MONTHS = 6

# Slope below this fraction of the mean counts as flat
_STABLE_SLOPE_RATIO = 0.02

# Occurrences per month, applied as a multiplier
_MONTHLY_FACTORS: dict[RecurringFrequency, float] = {
    RecurringFrequency.DAILY: 30.0,
    RecurringFrequency.WEEKLY: 4.33,
    RecurringFrequency.BIWEEKLY: 2.17,
    RecurringFrequency.MONTHLY: 1.0,
    RecurringFrequency.QUARTERLY: 1 / 3,
    RecurringFrequency.YEARLY: 1 / 12,
}


class InvalidInputError(ValueError):
    """Raised when the engine is called with arguments it cannot use."""


# --- Month Helpers ---


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def shift_month(d: date, months: int) -> date:
    """Return the first day of the month *months* away from *d*."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def history_window(
    reference_date: date | None = None,
    months_back: int = HISTORY_MONTHS,
) -> tuple[date, date]:
    """The *months_back* complete calendar months before the reference month.

    The reference month itself is still in progress and is left out.
    """
    today = reference_date or date.today()
    start = shift_month(today, -months_back)
    end = shift_month(today, 0) - timedelta(days=1)
    return start, end


def filter_window(
    transactions: Iterable[TransactionRecord],
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[TransactionRecord]:
    """Keep transactions dated inside ``[start_date, end_date]``."""
    return [
        t for t in transactions
        if (start_date is None or t.date >= start_date)
        and (end_date is None or t.date <= end_date)
    ]


# --- Monthly Aggregation ---


def category_key(transaction: TransactionRecord) -> str:
    """Bucket key for an expense: the category ID, else its name, else
    ``UNCATEGORIZED``. Two categories sharing a name stay separate when
    they carry IDs."""
    return transaction.category_id or transaction.category_name or UNCATEGORIZED


def aggregate_monthly(
    transactions: Iterable[TransactionRecord],
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[MonthSummary]:
    """Group transactions into per-month summaries, oldest first.

    Only months that contain at least one transaction appear; gaps are not
    filled in. Expenses are tracked per category key (see
    ``category_key``) with the display name alongside.
    """
    buckets: dict[str, dict] = {}

    for t in filter_window(transactions, start_date, end_date):
        key = month_key(t.date)
        bucket = buckets.setdefault(key, {
            "income": 0.0,
            "expenses": 0.0,
            "net_amount": 0.0,
            "transaction_count": 0,
            "category_spending": {},
            "category_names": {},
        })
        bucket["transaction_count"] += 1
        bucket["net_amount"] += t.amount

        if t.amount > 0:
            bucket["income"] += t.amount
        elif t.amount < 0:
            spent = abs(t.amount)
            bucket["expenses"] += spent
            cat = category_key(t)
            bucket["category_spending"][cat] = bucket["category_spending"].get(cat, 0.0) + spent
            bucket["category_names"].setdefault(cat, t.category_name or UNCATEGORIZED)

    return [
        MonthSummary(
            month_key=key,
            income=round(b["income"], 2),
            expenses=round(b["expenses"], 2),
            net_amount=round(b["net_amount"], 2),
            transaction_count=b["transaction_count"],
            category_spending={c: round(v, 2) for c, v in b["category_spending"].items()},
            category_names=b["category_names"],
        )
        for key, b in sorted(buckets.items())
    ]


# --- Recurring Normalization ---


def monthly_equivalent(amount: float, frequency: RecurringFrequency) -> float:
    """Scale an amount paid once per *frequency* to a per-month amount."""
    return amount * _MONTHLY_FACTORS[frequency]


def normalize_recurring(definition: RecurringDefinition) -> float:
    """Convert a recurring amount to its signed monthly equivalent."""
    return monthly_equivalent(definition.amount, definition.frequency)


def summarize_recurring(
    definitions: Iterable[RecurringDefinition],
) -> tuple[float, float]:
    """Total monthly recurring income and expenses for active definitions.

    Returns ``(recurring_income, recurring_expenses)``, both non-negative.
    """
    income = 0.0
    expenses = 0.0
    for d in definitions:
        if not d.is_active:
            continue
        monthly = normalize_recurring(d)
        if monthly > 0:
            income += monthly
        else:
            expenses += abs(monthly)
    return income, expenses


# --- Trend Estimation ---


def estimate_trend(values: list[float]) -> TrendResult:
    """Fit a least-squares line against the sequence index and classify it.

    The index is used rather than calendar distance, so every data point
    weighs the same regardless of gaps between months.
    """
    n = len(values)
    if n < 2:
        return TrendResult()

    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_xx = sum(i * i for i in range(n))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    avg_y = sum_y / n
    if avg_y == 0:
        return TrendResult()

    if abs(slope) < abs(avg_y) * _STABLE_SLOPE_RATIO:
        return TrendResult()

    return TrendResult(
        direction=TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING,
        monthly_rate_percent=round(abs(slope / avg_y * 100), 2),
    )


# --- Seasonal Patterns ---


def extract_seasonal_patterns(history: list[MonthSummary]) -> dict[int, float]:
    """Per-calendar-month expense multiplier relative to the overall average.

    Needs at least ``MIN_SEASONAL_MONTHS`` summaries; otherwise returns an
    empty map. Months with no history (or no spending) have no entry and
    should be read as 1.0.
    """
    if len(history) < MIN_SEASONAL_MONTHS:
        return {}

    overall_average = sum(m.expenses for m in history) / len(history)
    if overall_average == 0:
        return {}

    by_month: dict[int, list[float]] = {}
    for m in history:
        month_number = int(m.month_key.split("-")[1])
        by_month.setdefault(month_number, []).append(m.expenses)

    patterns: dict[int, float] = {}
    for month_number, expenses in sorted(by_month.items()):
        multiplier = (sum(expenses) / len(expenses)) / overall_average
        if multiplier > 0:
            patterns[month_number] = multiplier
    return patterns


# --- Volatility ---


def calculate_volatility(values: list[float]) -> float:
    """Coefficient of variation as a percentage (population std / mean)."""
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    if mean == 0:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / n
    return math.sqrt(variance) / mean * 100
