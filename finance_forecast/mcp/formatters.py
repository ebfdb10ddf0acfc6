"""Formatters for MCP tool responses.

Pure functions that take result objects and return either human-readable
Markdown or the JSON-ready dict consumed by the web frontend.
"""

from __future__ import annotations

import calendar
from typing import Any

from finance_forecast.models.results import (
    BudgetSuggestion,
    ForecastMonth,
    MonthSummary,
    PredictiveAnalysisResult,
    SavingsOpportunity,
    SuggestionType,
    TrendDirection,
    TrendResult,
)
from finance_forecast.models.schemas import AnalysisType


# --- JSON contract ---


def _trend_dict(trend: TrendResult) -> dict[str, Any]:
    return {"trend": trend.direction.value, "rate": trend.monthly_rate_percent}


def _month_dict(m: MonthSummary) -> dict[str, Any]:
    return {
        "month": m.month_key,
        "income": m.income,
        "expenses": m.expenses,
        "netAmount": m.net_amount,
        "transactionCount": m.transaction_count,
        "categorySpending": dict(m.category_spending),
        "categoryNames": {key: m.category_label(key) for key in m.category_spending},
    }


def _forecast_dict(f: ForecastMonth) -> dict[str, Any]:
    return {
        "month": f.month_key,
        "forecastIncome": f.forecast_income,
        "forecastExpenses": f.forecast_expenses,
        "forecastNetAmount": f.forecast_net,
        "confidence": f.confidence_percent,
        "recurringIncome": f.recurring_income,
        "recurringExpenses": f.recurring_expenses,
        "baseIncome": f.base_income,
        "baseExpenses": f.base_expenses,
    }


def _savings_dict(s: SavingsOpportunity) -> dict[str, Any]:
    return {
        "category": s.category,
        "currentMonthlySpending": s.current_monthly_spending,
        "potentialSavings": s.potential_savings,
        "annualSavings": s.annual_savings,
        "recommendation": s.recommendation,
    }


def _budget_dict(b: BudgetSuggestion) -> dict[str, Any]:
    out: dict[str, Any] = {
        "budgetName": b.budget_name,
        "currentAmount": b.current_amount,
        "avgSpending": b.avg_spending,
        "utilizationRate": b.utilization_rate,
        "suggestedAmount": b.suggested_amount,
        "type": b.type.value,
    }
    if b.potential_savings is not None:
        out["potentialSavings"] = b.potential_savings
    if b.additional_needed is not None:
        out["additionalNeeded"] = b.additional_needed
    return out


def serialize_predictive_analysis(result: PredictiveAnalysisResult) -> dict[str, Any]:
    """Render the result as the camelCase JSON structure the frontend reads."""
    return {
        "analysisType": result.analysis_type.value,
        "forecastPeriod": result.forecast_period,
        "dataRange": {
            "startDate": result.data_range.start_date.isoformat(),
            "endDate": result.data_range.end_date.isoformat(),
            "monthsAnalyzed": result.data_range.months_analyzed,
        },
        "trends": {
            "expenses": _trend_dict(result.expense_trend),
            "income": _trend_dict(result.income_trend),
            # JSON object keys are strings
            "seasonalPatterns": {str(k): v for k, v in result.seasonal_patterns.items()},
        },
        "historicalData": [_month_dict(m) for m in result.historical_data],
        "forecasts": [_forecast_dict(f) for f in result.forecasts],
        "insights": {
            "savingsOpportunities": [_savings_dict(s) for s in result.insights.savings_opportunities],
            "budgetSuggestions": [_budget_dict(b) for b in result.insights.budget_suggestions],
            "recurringTransactionsCount": result.insights.recurring_transactions_count,
            "activeBudgetsCount": result.insights.active_budgets_count,
        },
        "confidence": {
            "dataQuality": result.confidence.data_quality.value,
            "forecastReliability": result.confidence.forecast_reliability,
        },
    }


# --- Markdown ---


def _describe_trend(label: str, trend: TrendResult) -> str:
    if trend.direction == TrendDirection.STABLE:
        return f"- **{label}:** stable"
    arrow = "up" if trend.direction == TrendDirection.INCREASING else "down"
    return f"- **{label}:** {trend.direction.value} ({arrow} {trend.monthly_rate_percent:.2f}%/month)"


def _forecast_table(forecasts: list[ForecastMonth], analysis_type: AnalysisType) -> list[str]:
    if analysis_type == AnalysisType.SPENDING:
        lines = ["| Month | Expenses | Recurring | Confidence |", "|---|---|---|---|"]
        for f in forecasts:
            lines.append(
                f"| {f.month_key} | ${f.forecast_expenses:,} "
                f"| ${f.recurring_expenses:,} | {f.confidence_percent}% |"
            )
    elif analysis_type == AnalysisType.INCOME:
        lines = ["| Month | Income | Recurring | Confidence |", "|---|---|---|---|"]
        for f in forecasts:
            lines.append(
                f"| {f.month_key} | ${f.forecast_income:,} "
                f"| ${f.recurring_income:,} | {f.confidence_percent}% |"
            )
    else:
        lines = ["| Month | Income | Expenses | Net | Confidence |", "|---|---|---|---|---|"]
        for f in forecasts:
            sign = "-" if f.forecast_net < 0 else ""
            lines.append(
                f"| {f.month_key} | ${f.forecast_income:,} | ${f.forecast_expenses:,} "
                f"| {sign}${abs(f.forecast_net):,} | {f.confidence_percent}% |"
            )
    return lines


def format_predictive_analysis(result: PredictiveAnalysisResult) -> str:
    """Trends, forecast table and suggestions as Markdown.

    The analysis type picks which columns and sections are shown; the
    numbers are the same for every type.
    """
    kind = result.analysis_type
    rng = result.data_range
    lines = [
        f"## Predictive Analysis ({result.forecast_period})\n",
        f"Based on {rng.months_analyzed} month(s) of history "
        f"({rng.start_date.isoformat()} to {rng.end_date.isoformat()}). "
        f"Data quality: **{result.confidence.data_quality.value}**, "
        f"reliability: **{result.confidence.forecast_reliability}%**.",
        "\n### Trends",
    ]
    if kind != AnalysisType.INCOME:
        lines.append(_describe_trend("Expenses", result.expense_trend))
    if kind != AnalysisType.SPENDING:
        lines.append(_describe_trend("Income", result.income_trend))

    if result.seasonal_patterns and kind != AnalysisType.INCOME:
        peaks = sorted(result.seasonal_patterns.items(), key=lambda kv: kv[1], reverse=True)[:3]
        lines.append(
            "- **Seasonal peaks:** "
            + ", ".join(f"{calendar.month_abbr[m]} (x{mult:.2f})" for m, mult in peaks)
        )

    lines.append("\n### Forecast")
    if result.forecasts:
        lines.extend(_forecast_table(result.forecasts, kind))
    else:
        lines.append("No forecast generated.")

    if kind in (AnalysisType.SPENDING, AnalysisType.COMPREHENSIVE):
        opportunities = result.insights.savings_opportunities
        if opportunities:
            lines.append("\n### Savings Opportunities")
            for s in opportunities:
                lines.append(
                    f"- **{s.category}**: ${s.current_monthly_spending:,}/month. "
                    f"{s.recommendation} to save ${s.potential_savings:,}/month "
                    f"(${s.annual_savings:,}/year)"
                )

        suggestions = result.insights.budget_suggestions
        if suggestions:
            lines.append("\n### Budget Suggestions")
            for b in suggestions:
                if b.type == SuggestionType.REDUCE:
                    detail = f"reduce to ${b.suggested_amount:,} (frees ${b.potential_savings:,})"
                else:
                    detail = f"increase to ${b.suggested_amount:,} (needs ${b.additional_needed:,} more)"
                lines.append(
                    f"- **{b.budget_name}**: {b.utilization_rate}% used "
                    f"(${b.avg_spending:,} of ${b.current_amount:,.2f}) -> {detail}"
                )

    return "\n".join(lines)
