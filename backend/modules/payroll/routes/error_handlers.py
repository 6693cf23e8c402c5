# backend/modules/payroll/routes/error_handlers.py

"""
Exception handlers rendering payroll errors as ``ErrorResponse`` JSON.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import PayrollException
from ..schemas.error_schemas import ErrorResponse

logger = logging.getLogger(__name__)


async def handle_payroll_exception(request: Request, exc: PayrollException) -> JSONResponse:
    """Convert a payroll domain error to a consistent API response"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} at {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} at {request.url.path}: {exc.message}")

    body = ErrorResponse(
        error=type(exc).__name__,
        message=exc.message,
        code=exc.code,
        details=exc.details or None,
        retryable=exc.retryable,
    )
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def register_payroll_exception_handlers(app):
    """Register payroll exception handlers with the FastAPI app"""
    app.add_exception_handler(PayrollException, handle_payroll_exception)
