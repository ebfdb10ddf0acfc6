"""Consistent error handling for MCP tool functions."""

from __future__ import annotations

import functools
import logging
from typing import Callable

import httpx
from pydantic import ValidationError

from finance_forecast.core.analyzers import InvalidInputError
from finance_forecast.core.finance_client import FinanceAPIError

logger = logging.getLogger("finance_forecast")


def handle_tool_errors(fn: Callable) -> Callable:
    """Decorator that catches known exceptions and returns user-friendly error strings.

    MCP tools must return ``str``, not raise. A failed analysis should
    never take down the caller, so every error becomes a message.
    """

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except FinanceAPIError as e:
            return f"Finance API error: {e.detail}"
        except InvalidInputError as e:
            return f"Invalid input: {e}"
        except httpx.ConnectError:
            return "Cannot connect to the finance API. Check FINANCE_API_URL and your network."
        except httpx.TimeoutException:
            return "Request to the finance API timed out. Please try again."
        except ValidationError as e:
            return f"Invalid data: {e.error_count()} validation error(s). Check your input."
        except Exception as e:
            logger.exception("Unexpected error in tool %s", fn.__name__)
            return f"Unexpected error: {type(e).__name__}: {e}"

    return wrapper
