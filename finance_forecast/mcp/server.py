"""Finance Forecast MCP Server.

Exposes the predictive cash-flow analysis as an MCP tool. Transaction
history, recurring transactions and budgets are read from the finance
app's REST API; the analysis itself runs locally.
"""

import json
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from dotenv import load_dotenv
from mcp.server.fastmcp import Context, FastMCP

# Ensure project root is on sys.path so `finance_forecast` is importable when
# loaded directly by tools like `mcp dev` (which use importlib, not `python -m`).
_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

load_dotenv()

from finance_forecast.core.finance_client import FinanceClient
from finance_forecast.core.forecaster import run_predictive_analysis
from finance_forecast.mcp.error_handling import handle_tool_errors
from finance_forecast.mcp.formatters import (
    format_predictive_analysis,
    serialize_predictive_analysis,
)
from finance_forecast.models.schemas import PredictiveAnalysisInput, ResponseFormat


# --- Lifespan: initialize shared resources ---


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    base_url = os.environ.get("FINANCE_API_URL", "")
    token = os.environ.get("FINANCE_API_TOKEN", "")

    if not base_url or not token:
        raise RuntimeError(
            "FINANCE_API_URL and FINANCE_API_TOKEN environment variables are required."
        )

    client = FinanceClient(base_url=base_url, api_token=token)

    yield {"finance": client}

    await client.close()


mcp = FastMCP("finance_forecast", lifespan=app_lifespan)


def _get_client(ctx) -> FinanceClient:
    return ctx.request_context.lifespan_context["finance"]


# --- Analysis Tools ---


@mcp.tool(
    name="finance_predictive_analysis",
    annotations={
        "title": "Predictive Cash-Flow Analysis",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
@handle_tool_errors
async def finance_predictive_analysis(params: PredictiveAnalysisInput, ctx: Context) -> str:
    """Forecast income, expenses and net cash flow for the coming months.

    Uses the last 12 months of transactions to detect trends and seasonal
    patterns, adds active recurring transactions, and suggests savings and
    budget adjustments.
    """
    client = _get_client(ctx)
    request = await client.fetch_forecast_request(
        months_ahead=params.months_ahead,
        analysis_type=params.analysis_type,
    )
    result = run_predictive_analysis(request)

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(serialize_predictive_analysis(result), indent=2)
    return format_predictive_analysis(result)


# --- Entry point ---

if __name__ == "__main__":
    mcp.run()
