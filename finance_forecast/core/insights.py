"""Savings and budget suggestions derived from spending history.

Both heuristics are fixed policy: a flat 10% cut on the biggest expense
categories, and budget resizing with a 10% (reduce) or 15% (increase)
buffer over actual average spending.
"""

from collections.abc import Iterable

from finance_forecast.models.results import (
    BudgetSuggestion,
    MonthSummary,
    SavingsOpportunity,
    SuggestionType,
)
from finance_forecast.models.schemas import BudgetDefinition, TransactionRecord, round_currency

TOP_CATEGORIES = 5
SAVINGS_RATE = 0.10

UNDER_UTILIZED_PCT = 70
OVER_UTILIZED_PCT = 120
REDUCE_BUFFER = 1.10
INCREASE_BUFFER = 1.15


def find_savings_opportunities(history: list[MonthSummary]) -> list[SavingsOpportunity]:
    """Suggest a 10% reduction for the five highest-spend categories."""
    if not history:
        return []

    totals: dict[str, float] = {}
    labels: dict[str, str] = {}
    for month in history:
        for key, amount in month.category_spending.items():
            totals[key] = totals.get(key, 0.0) + amount
            labels.setdefault(key, month.category_label(key))

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:TOP_CATEGORIES]

    opportunities = []
    for key, total in ranked:
        cat = labels[key]
        monthly_average = total / len(history)
        savings = monthly_average * SAVINGS_RATE
        opportunities.append(SavingsOpportunity(
            category=cat,
            current_monthly_spending=round_currency(monthly_average),
            potential_savings=round_currency(savings),
            annual_savings=round_currency(savings * 12),
            recommendation=f"Consider reducing {cat} spending by 10%",
        ))
    return opportunities


def suggest_budget_adjustments(
    budgets: Iterable[BudgetDefinition],
    transactions: Iterable[TransactionRecord],
    months_analyzed: int,
) -> list[BudgetSuggestion]:
    """Flag budgets that are well under or well over actual spending.

    Spending is averaged over *months_analyzed* (at least one) using the
    expense transactions whose ``category_id`` is linked to the budget.
    Budgets used between 70% and 120% inclusive are left alone.
    """
    expenses = [t for t in transactions if t.amount < 0]
    divisor = max(months_analyzed, 1)

    suggestions: list[BudgetSuggestion] = []
    for budget in budgets:
        if not budget.is_active or not budget.category_ids:
            continue

        linked = set(budget.category_ids)
        monthly_spending = sum(
            abs(t.amount) for t in expenses if t.category_id in linked
        ) / divisor
        utilization = monthly_spending / budget.amount * 100

        if utilization < UNDER_UTILIZED_PCT:
            suggested = monthly_spending * REDUCE_BUFFER
            suggestions.append(BudgetSuggestion(
                budget_name=budget.name,
                current_amount=budget.amount,
                avg_spending=round_currency(monthly_spending),
                utilization_rate=round_currency(utilization),
                suggested_amount=round_currency(suggested),
                type=SuggestionType.REDUCE,
                potential_savings=round_currency(budget.amount - suggested),
            ))
        elif utilization > OVER_UTILIZED_PCT:
            suggested = monthly_spending * INCREASE_BUFFER
            suggestions.append(BudgetSuggestion(
                budget_name=budget.name,
                current_amount=budget.amount,
                avg_spending=round_currency(monthly_spending),
                utilization_rate=round_currency(utilization),
                suggested_amount=round_currency(suggested),
                type=SuggestionType.INCREASE,
                additional_needed=round_currency(suggested - budget.amount),
            ))

    return suggestions
