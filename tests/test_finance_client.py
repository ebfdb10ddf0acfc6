"""Tests for the finance API client using httpx.MockTransport."""

from datetime import date

import pytest
import httpx

from finance_forecast.core.finance_client import PAGE_SIZE, FinanceAPIError, FinanceClient
from finance_forecast.models.schemas import AnalysisType, RecurringFrequency


@pytest.fixture
def mock_client():
    """Factory that creates a FinanceClient with a mocked transport."""
    async def _make(handler):
        client = FinanceClient(base_url="https://finance.test", api_token="test-token")
        transport = httpx.MockTransport(handler)
        client._client = httpx.AsyncClient(
            transport=transport,
            base_url="https://finance.test",
            headers={"Authorization": "Bearer test-token"},
            timeout=30.0,
        )
        return client
    return _make


def _txn(i, amount=-10.0):
    return {
        "id": f"t{i}",
        "description": "Coffee",
        "amount": amount,
        "category": "Dining",
        "categoryId": "cat-dining",
        "date": "2025-03-10",
        "account": "Checking",
    }


class TestGetTransactions:
    async def test_returns_parsed_records(self, mock_client):
        captured = {}

        def handler(request):
            captured["params"] = dict(request.url.params)
            captured["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[_txn(1, amount=-4.5)])

        client = await mock_client(handler)
        records = await client.get_transactions(
            start_date=date(2024, 3, 1), end_date=date(2025, 3, 31)
        )
        assert len(records) == 1
        assert records[0].amount == -4.5
        assert records[0].date == date(2025, 3, 10)
        assert records[0].category_name == "Dining"
        assert records[0].category_id == "cat-dining"
        assert captured["params"]["startDate"] == "2024-03-01"
        assert captured["params"]["endDate"] == "2025-03-31"
        assert captured["auth"] == "Bearer test-token"

    async def test_follows_pagination(self, mock_client):
        offsets = []

        def handler(request):
            offset = int(request.url.params["offset"])
            offsets.append(offset)
            count = PAGE_SIZE if offset == 0 else 3
            return httpx.Response(200, json=[_txn(offset + i) for i in range(count)])

        client = await mock_client(handler)
        records = await client.get_transactions()
        assert len(records) == PAGE_SIZE + 3
        assert offsets == [0, PAGE_SIZE]

    async def test_rows_repeated_across_pages_kept_once(self, mock_client):
        def handler(request):
            offset = int(request.url.params["offset"])
            if offset == 0:
                return httpx.Response(200, json=[_txn(i) for i in range(PAGE_SIZE)])
            # Same-date ordering shifted between requests: the last row
            # of page one is served again at the start of page two.
            return httpx.Response(200, json=[_txn(PAGE_SIZE - 1), _txn(PAGE_SIZE), _txn(PAGE_SIZE + 1)])

        client = await mock_client(handler)
        records = await client.get_transactions()
        assert len(records) == PAGE_SIZE + 2

    async def test_rows_without_id_are_not_collapsed(self, mock_client):
        def handler(request):
            row = {"amount": -5.0, "date": "2025-03-10"}
            return httpx.Response(200, json=[row, dict(row)])

        client = await mock_client(handler)
        records = await client.get_transactions()
        assert len(records) == 2

    async def test_api_error_raises_finance_error(self, mock_client):
        def handler(request):
            return httpx.Response(401, json={"error": "Unauthorized"})

        client = await mock_client(handler)
        with pytest.raises(FinanceAPIError) as exc_info:
            await client.get_transactions()
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Unauthorized"

    async def test_non_json_error_body(self, mock_client):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        client = await mock_client(handler)
        with pytest.raises(FinanceAPIError) as exc_info:
            await client.get_transactions()
        assert exc_info.value.status_code == 502

    async def test_timeout_raises_finance_error(self, mock_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = await mock_client(handler)
        with pytest.raises(FinanceAPIError) as exc_info:
            await client.get_transactions()
        assert exc_info.value.status_code == 408


class TestGetRecurringTransactions:
    async def test_parses_string_amounts_and_flags(self, mock_client):
        def handler(request):
            assert request.url.path == "/api/recurring-transactions"
            return httpx.Response(200, json=[
                {"id": "r1", "amount": "-1200.00", "frequency": "yearly", "isActive": True},
                {"id": "r2", "amount": "50", "frequency": "weekly", "isActive": False},
            ])

        client = await mock_client(handler)
        recurring = await client.get_recurring_transactions()
        assert recurring[0].amount == -1200.0
        assert recurring[0].frequency == RecurringFrequency.YEARLY
        assert recurring[1].is_active is False


class TestGetBudgets:
    async def test_parses_budgets(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=[
                {"id": "b1", "name": "Food", "amount": "600.00", "categoryIds": ["c1", "c2"], "isActive": True},
                {"id": "b2", "name": "Misc", "amount": "100", "categoryIds": None},
            ])

        client = await mock_client(handler)
        budgets = await client.get_budgets()
        assert budgets[0].amount == 600.0
        assert budgets[0].category_ids == ["c1", "c2"]
        assert budgets[1].category_ids == []
        assert budgets[1].is_active is True

    async def test_weekly_budget_converted_to_monthly(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=[
                {"name": "Coffee", "amount": "100.00", "period": "weekly", "categoryIds": ["c1"]},
            ])

        client = await mock_client(handler)
        budgets = await client.get_budgets()
        assert budgets[0].amount == pytest.approx(433.0)

    async def test_yearly_budget_converted_to_monthly(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=[
                {"name": "Gifts", "amount": "1200.00", "period": "yearly", "categoryIds": ["c1"]},
            ])

        client = await mock_client(handler)
        budgets = await client.get_budgets()
        assert budgets[0].amount == pytest.approx(100.0)

    async def test_monthly_period_unchanged(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=[
                {"name": "Food", "amount": "600", "period": "monthly"},
                {"name": "Misc", "amount": "50", "period": None},
            ])

        client = await mock_client(handler)
        budgets = await client.get_budgets()
        assert [b.amount for b in budgets] == [600.0, 50.0]

    async def test_inactive_and_zero_budgets_skipped(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=[
                {"name": "Old", "amount": "0.00", "isActive": False},
                {"name": "Placeholder", "amount": "0", "isActive": True},
                {"name": "Refund", "amount": "-25", "isActive": True},
                {"name": "Broken", "amount": "abc"},
                {"name": "Odd", "amount": "10", "period": "fortnightly"},
                {"name": "Food", "amount": "600", "isActive": True},
            ])

        client = await mock_client(handler)
        budgets = await client.get_budgets()
        assert [b.name for b in budgets] == ["Food"]


class TestFetchForecastRequest:
    async def test_assembles_request(self, mock_client):
        def handler(request):
            path = request.url.path
            if path == "/api/transactions":
                assert request.url.params["startDate"] == "2024-06-01"
                assert request.url.params["endDate"] == "2025-05-31"
                return httpx.Response(200, json=[_txn(1)])
            if path == "/api/recurring-transactions":
                return httpx.Response(200, json=[{"amount": "-20", "frequency": "monthly", "isActive": True}])
            if path == "/api/budgets":
                return httpx.Response(200, json=[])
            return httpx.Response(404, json={"error": "Not found"})

        client = await mock_client(handler)
        request = await client.fetch_forecast_request(
            months_ahead=6,
            analysis_type=AnalysisType.SPENDING,
            reference_date=date(2025, 6, 15),
        )
        assert len(request.transactions) == 1
        assert len(request.recurring) == 1
        assert request.budgets == []
        assert request.months_ahead == 6
        assert request.analysis_type == AnalysisType.SPENDING


class TestClose:
    async def test_close_is_idempotent(self):
        client = FinanceClient(base_url="https://finance.test/", api_token="t")
        assert client.base_url == "https://finance.test"
        await client.close()
        _ = client.client
        await client.close()
        await client.close()
