"""Multi-month cash-flow forecasting.

Combines the recent monthly averages, fitted trends, seasonal multipliers
and recurring obligations into per-month projections, then wraps the whole
run in a single ``PredictiveAnalysisResult``.
"""

import logging
from datetime import date

from finance_forecast.core.analyzers import (
    InvalidInputError,
    MIN_SEASONAL_MONTHS,
    aggregate_monthly,
    calculate_volatility,
    estimate_trend,
    extract_seasonal_patterns,
    filter_window,
    history_window,
    month_key,
    shift_month,
    summarize_recurring,
)
from finance_forecast.core.insights import (
    find_savings_opportunities,
    suggest_budget_adjustments,
)
from finance_forecast.models.results import (
    DataQuality,
    DataRange,
    ForecastConfidence,
    ForecastInsights,
    ForecastMonth,
    MonthSummary,
    PredictiveAnalysisResult,
    TrendDirection,
    TrendResult,
)
from finance_forecast.models.schemas import ForecastRequest, round_currency

logger = logging.getLogger("finance_forecast")

# Months averaged for the base projection
BASE_WINDOW = 3

MIN_CONFIDENCE = 0.30
MAX_CONFIDENCE = 0.95


def _apply_trend(base: float, trend: TrendResult, step: int) -> float:
    """Compound *base* by the trend rate for *step* months."""
    if trend.direction == TrendDirection.STABLE:
        return base
    rate = trend.monthly_rate_percent / 100
    factor = 1 + rate if trend.direction == TrendDirection.INCREASING else 1 - rate
    return base * factor ** step


def forecast_confidence(data_months: int, volatility: float) -> float:
    """Score in ``[0.30, 0.95]`` rewarding long history and steady spending."""
    raw = (data_months / 12) * (1 - volatility / 100)
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, raw))


def generate_forecasts(
    history: list[MonthSummary],
    expense_trend: TrendResult,
    income_trend: TrendResult,
    seasonal_patterns: dict[int, float],
    recurring_income: float,
    recurring_expenses: float,
    months_ahead: int,
    reference_date: date | None = None,
) -> list[ForecastMonth]:
    """Project income, expenses and net for each of the next *months_ahead* months.

    Month ``i`` is ``i`` months after the reference month. Recurring totals
    are added on top of the trended projection and are not themselves
    trended or seasonally adjusted.
    """
    if months_ahead < 1:
        raise InvalidInputError(f"months_ahead must be at least 1, got {months_ahead}")

    today = reference_date or date.today()

    recent = history[-BASE_WINDOW:]
    if recent:
        avg_income = sum(m.income for m in recent) / len(recent)
        avg_expenses = sum(m.expenses for m in recent) / len(recent)
    else:
        avg_income = avg_expenses = 0.0

    volatility = calculate_volatility([m.expenses for m in history])
    confidence = round_currency(forecast_confidence(len(history), volatility) * 100)

    forecasts: list[ForecastMonth] = []
    for i in range(1, months_ahead + 1):
        target = shift_month(today, i)

        base_income = _apply_trend(avg_income, income_trend, i)
        base_expenses = _apply_trend(avg_expenses, expense_trend, i)
        base_expenses *= seasonal_patterns.get(target.month, 1.0)

        forecast_income = round_currency(base_income + recurring_income)
        forecast_expenses = round_currency(base_expenses + recurring_expenses)

        forecasts.append(ForecastMonth(
            month_key=month_key(target),
            forecast_income=forecast_income,
            forecast_expenses=forecast_expenses,
            forecast_net=forecast_income - forecast_expenses,
            confidence_percent=confidence,
            recurring_income=round_currency(recurring_income),
            recurring_expenses=round_currency(recurring_expenses),
            base_income=round_currency(base_income),
            base_expenses=round_currency(base_expenses),
        ))

    return forecasts


# --- Full Analysis ---


def run_predictive_analysis(
    request: ForecastRequest,
    reference_date: date | None = None,
) -> PredictiveAnalysisResult:
    """Run the whole pipeline over one request.

    History is limited to the twelve complete calendar months before the
    reference month. Sparse or empty history degrades to neutral trends and
    recurring-only forecasts rather than raising.
    """
    today = reference_date or date.today()
    start, end = history_window(today)
    transactions = filter_window(request.transactions, start, end)

    history = aggregate_monthly(transactions)
    expense_trend = estimate_trend([m.expenses for m in history])
    income_trend = estimate_trend([m.income for m in history])
    seasonal = extract_seasonal_patterns(history)

    active_recurring = [r for r in request.recurring if r.is_active]
    recurring_income, recurring_expenses = summarize_recurring(active_recurring)

    forecasts = generate_forecasts(
        history,
        expense_trend,
        income_trend,
        seasonal,
        recurring_income,
        recurring_expenses,
        request.months_ahead,
        reference_date=today,
    )

    active_budgets = [b for b in request.budgets if b.is_active]
    insights = ForecastInsights(
        savings_opportunities=find_savings_opportunities(history),
        budget_suggestions=suggest_budget_adjustments(active_budgets, transactions, len(history)),
        recurring_transactions_count=len(active_recurring),
        active_budgets_count=len(active_budgets),
    )

    logger.debug(
        "Predictive analysis: %d months analyzed, %d forecasts, expense trend %s",
        len(history), len(forecasts), expense_trend.direction.value,
    )

    return PredictiveAnalysisResult(
        analysis_type=request.analysis_type,
        forecast_period=f"{request.months_ahead} months",
        data_range=DataRange(start_date=start, end_date=end, months_analyzed=len(history)),
        expense_trend=expense_trend,
        income_trend=income_trend,
        seasonal_patterns=seasonal,
        historical_data=history,
        forecasts=forecasts,
        insights=insights,
        confidence=ForecastConfidence(
            data_quality=(
                DataQuality.GOOD if len(history) >= MIN_SEASONAL_MONTHS else DataQuality.LIMITED
            ),
            forecast_reliability=forecasts[0].confidence_percent if forecasts else 0,
        ),
    )
