"""Finance app API client.

Async HTTP client for the personal-finance app's REST API. Fetches the
transaction history, recurring transactions and budgets that feed the
forecasting engine. Read-only.
"""

import logging
from datetime import date
from typing import Any, Optional

import httpx

from finance_forecast.core.analyzers import history_window, monthly_equivalent
from finance_forecast.models.schemas import (
    AnalysisType,
    BudgetDefinition,
    ForecastRequest,
    RecurringDefinition,
    RecurringFrequency,
    TransactionRecord,
)

logger = logging.getLogger("finance_forecast")

DEFAULT_TIMEOUT = 30.0
PAGE_SIZE = 500


class FinanceAPIError(Exception):
    """Raised when the finance API returns an error response."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Finance API Error [{status_code}]: {detail}")


class FinanceClient:
    """Async client for the finance app API."""

    def __init__(self, base_url: str, api_token: str):
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.api_token}"},
                timeout=DEFAULT_TIMEOUT,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET *path* and return the decoded JSON body."""
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json() if e.response.content else {}
            except ValueError:
                body = {}
            detail = body.get("error", str(e)) if isinstance(body, dict) else str(e)
            raise FinanceAPIError(status_code=e.response.status_code, detail=detail) from e
        except httpx.TimeoutException as e:
            raise FinanceAPIError(
                status_code=408,
                detail="Request to the finance API timed out. Please try again.",
            ) from e
        return response.json()

    # --- Transactions ---

    async def get_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionRecord]:
        """Get all transactions in the date range, following pagination.

        The API only sorts on non-unique keys, so a row sharing a date with
        the page boundary can come back on two pages; rows are kept once per
        ``id``.
        """
        params: dict[str, Any] = {"limit": PAGE_SIZE, "sortBy": "date", "sortOrder": "asc"}
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()

        records: list[TransactionRecord] = []
        seen_ids: set[str] = set()
        offset = 0
        while True:
            page = await self._get("/api/transactions", params={**params, "offset": offset})
            for t in page:
                txn_id = t.get("id")
                if txn_id is not None:
                    if txn_id in seen_ids:
                        continue
                    seen_ids.add(txn_id)
                records.append(TransactionRecord(
                    date=t["date"],
                    amount=t["amount"],
                    category_name=t.get("category"),
                    category_id=t.get("categoryId"),
                ))
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return records

    # --- Recurring Transactions ---

    async def get_recurring_transactions(self) -> list[RecurringDefinition]:
        """Get recurring transaction definitions (active and inactive)."""
        data = await self._get("/api/recurring-transactions")
        return [
            RecurringDefinition(
                amount=r["amount"],
                frequency=r["frequency"],
                is_active=r.get("isActive", True),
            )
            for r in data
        ]

    # --- Budgets ---

    async def get_budgets(self) -> list[BudgetDefinition]:
        """Get active budgets with amounts converted to a monthly equivalent.

        Budgets are stored per ``period`` (weekly, monthly or yearly).
        Inactive rows are dropped before validation; rows with an unknown
        period or a non-positive amount are skipped with a warning.
        """
        data = await self._get("/api/budgets")
        budgets: list[BudgetDefinition] = []
        for b in data:
            if not b.get("isActive", True):
                continue
            name = b.get("name", "(unnamed)")
            try:
                period = RecurringFrequency(b.get("period") or "monthly")
                amount = monthly_equivalent(float(b["amount"]), period)
            except (KeyError, TypeError, ValueError):
                logger.warning(
                    "Skipping budget %r: bad amount %r or period %r",
                    name, b.get("amount"), b.get("period"),
                )
                continue
            if not amount > 0:
                logger.warning("Skipping budget %r: non-positive amount %r", name, b.get("amount"))
                continue
            budgets.append(BudgetDefinition(
                name=name,
                amount=amount,
                category_ids=b.get("categoryIds") or [],
                is_active=True,
            ))
        return budgets

    # --- Forecast Input ---

    async def fetch_forecast_request(
        self,
        months_ahead: int = 3,
        analysis_type: AnalysisType = AnalysisType.COMPREHENSIVE,
        reference_date: Optional[date] = None,
    ) -> ForecastRequest:
        """Fetch everything needed for one forecasting run."""
        start, end = history_window(reference_date)
        transactions = await self.get_transactions(start_date=start, end_date=end)
        recurring = await self.get_recurring_transactions()
        budgets = await self.get_budgets()
        return ForecastRequest(
            transactions=transactions,
            recurring=recurring,
            budgets=budgets,
            months_ahead=months_ahead,
            analysis_type=analysis_type,
        )
