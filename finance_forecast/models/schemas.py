"""Pydantic models for forecasting inputs."""

import math
from datetime import date
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Currency rounding ---

_WHOLE_UNIT = Decimal(1)


def round_currency(amount: float) -> int:
    """Round a dollar amount to whole units, halves rounding up.

    Python's ``round`` uses banker's rounding; forecasts are reported with
    half-up rounding so 2.5 becomes 3 and -2.5 becomes -2. Works on the
    exact binary value, so 0.49999999999999994 stays 0.
    """
    exact = Decimal(amount)
    if exact >= 0:
        return int(exact.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP))
    return -int((-exact).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_DOWN))


# --- Enums ---

class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class AnalysisType(str, Enum):
    SPENDING = "spending"
    INCOME = "income"
    CASHFLOW = "cashflow"
    COMPREHENSIVE = "comprehensive"


class ResponseFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


# --- Input Records ---

class TransactionRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: date
    amount: float  # dollars, positive = income, negative = expense
    category_name: Optional[str] = None
    category_id: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v


class RecurringDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: float  # dollars per occurrence, signed
    frequency: RecurringFrequency
    is_active: bool = True

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v


class BudgetDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    amount: float = Field(..., gt=0, description="Monthly-equivalent budget in dollars")
    category_ids: list[str] = []
    is_active: bool = True


class ForecastRequest(BaseModel):
    """Everything the forecasting engine needs for one run."""
    model_config = ConfigDict(extra="forbid")

    transactions: list[TransactionRecord] = []
    recurring: list[RecurringDefinition] = []
    budgets: list[BudgetDefinition] = []
    months_ahead: int = Field(default=3, ge=1)
    analysis_type: AnalysisType = AnalysisType.COMPREHENSIVE


# --- MCP Tool Input Models ---


class PredictiveAnalysisInput(BaseModel):
    """Input for the predictive cash-flow analysis tool."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    months_ahead: int = Field(
        default=3, ge=1, le=24, description="Number of future months to forecast"
    )
    analysis_type: AnalysisType = Field(
        default=AnalysisType.COMPREHENSIVE,
        description="Focus: 'spending', 'income', 'cashflow' or 'comprehensive'",
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="'markdown' for a readable report, 'json' for the raw result",
    )
