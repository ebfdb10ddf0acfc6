"""Result dataclasses for forecasting outputs.

These are internal types consumed by formatters — lightweight dataclasses
rather than Pydantic models since they don't need validation.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from finance_forecast.models.schemas import AnalysisType


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class SuggestionType(str, Enum):
    REDUCE = "reduce"
    INCREASE = "increase"


class DataQuality(str, Enum):
    GOOD = "good"
    LIMITED = "limited"


@dataclass(frozen=True)
class MonthSummary:
    """Aggregated activity for one calendar month."""
    month_key: str              # "YYYY-MM"
    income: float               # dollars, >= 0
    expenses: float             # dollars, absolute, >= 0
    net_amount: float           # dollars, signed
    transaction_count: int
    category_spending: dict[str, float] = field(default_factory=dict)  # category key -> dollars
    category_names: dict[str, str] = field(default_factory=dict)       # category key -> display name

    def category_label(self, key: str) -> str:
        return self.category_names.get(key, key)


@dataclass(frozen=True)
class TrendResult:
    """Direction of a fitted linear trend and its monthly rate."""
    direction: TrendDirection = TrendDirection.STABLE
    monthly_rate_percent: float = 0.0  # e.g. 4.5 means 4.5% per month


@dataclass
class ForecastMonth:
    """Projected cash flow for one future month (whole dollars)."""
    month_key: str
    forecast_income: int
    forecast_expenses: int
    forecast_net: int
    confidence_percent: int     # 30-95
    recurring_income: int
    recurring_expenses: int
    base_income: int
    base_expenses: int


@dataclass
class SavingsOpportunity:
    """A high-spend category with a suggested 10% cut."""
    category: str
    current_monthly_spending: int
    potential_savings: int      # dollars per month
    annual_savings: int
    recommendation: str


@dataclass
class BudgetSuggestion:
    """A budget whose amount is far from actual spending."""
    budget_name: str
    current_amount: float
    avg_spending: int
    utilization_rate: int       # percent of budget spent per month
    suggested_amount: int
    type: SuggestionType
    potential_savings: int | None = None   # reduce only
    additional_needed: int | None = None   # increase only


@dataclass
class ForecastInsights:
    """Savings and budget suggestions derived from history."""
    savings_opportunities: list[SavingsOpportunity] = field(default_factory=list)
    budget_suggestions: list[BudgetSuggestion] = field(default_factory=list)
    recurring_transactions_count: int = 0
    active_budgets_count: int = 0


@dataclass
class DataRange:
    start_date: date
    end_date: date
    months_analyzed: int


@dataclass
class ForecastConfidence:
    data_quality: DataQuality
    forecast_reliability: int   # percent, 0 when no forecasts


@dataclass
class PredictiveAnalysisResult:
    """Full output of a predictive analysis run."""
    analysis_type: AnalysisType
    forecast_period: str
    data_range: DataRange
    expense_trend: TrendResult
    income_trend: TrendResult
    seasonal_patterns: dict[int, float]  # calendar month -> multiplier
    historical_data: list[MonthSummary]
    forecasts: list[ForecastMonth]
    insights: ForecastInsights
    confidence: ForecastConfidence
