# backend/modules/payroll/routes/helpers.py

"""
Helper functions for payroll routes.

Centralizes the operation time bound and the default reporting period.
"""

import asyncio
import calendar
import functools
import logging
from datetime import date
from typing import Any, Callable, Tuple

from core.config import get_settings
from ..exceptions import PayrollTimeoutError

logger = logging.getLogger(__name__)


async def run_bounded(operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Run a synchronous service call in the default executor, bounded by
    ``PAYROLL_OPERATION_TIMEOUT_SECONDS``.

    The caller gets a timeout error as soon as the bound expires; on
    PostgreSQL the engine's ``statement_timeout`` aborts the abandoned
    statement server-side.
    """
    timeout = get_settings().payroll_operation_timeout_seconds
    loop = asyncio.get_running_loop()
    call = functools.partial(func, *args, **kwargs)
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, call), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Payroll operation '{operation}' timed out after {timeout}s")
        raise PayrollTimeoutError(operation, timeout)


def current_month_period(today: date = None) -> Tuple[date, date]:
    """First and last day of the month containing ``today``."""
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)
