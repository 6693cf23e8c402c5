# backend/modules/payroll/exceptions.py

"""
Custom exceptions for payroll module.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List, Any

from .schemas.error_schemas import ErrorDetail, PayrollErrorCodes


class PayrollException(Exception):
    """Base exception for payroll module"""
    retryable = False

    def __init__(
        self,
        message: str,
        code: str = PayrollErrorCodes.VALIDATION_ERROR,
        details: Optional[List[ErrorDetail]] = None,
        status_code: int = 400
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.status_code = status_code


class PayrollValidationError(PayrollException):
    """Validation error for payroll operations"""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[List[ErrorDetail]] = None,
                 code: str = PayrollErrorCodes.VALIDATION_ERROR):
        if field and not details:
            details = [ErrorDetail(field=field, message=message)]
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=422
        )


class ConfigNotFoundError(PayrollException):
    """A required payroll parameter is missing or inactive"""
    def __init__(self, config_key: str, status_code: int = 500):
        super().__init__(
            message=f"Payroll configuration '{config_key}' is not defined or inactive",
            code=PayrollErrorCodes.CONFIG_NOT_FOUND,
            details=[ErrorDetail(field=config_key, message="missing configuration")],
            status_code=status_code
        )
        self.config_key = config_key


class ConfigTypeError(PayrollException):
    """A payroll parameter value cannot be parsed as its declared type"""
    def __init__(self, config_key: str, value: Any, expected: str, status_code: int = 500):
        super().__init__(
            message=f"Payroll configuration '{config_key}' has value {value!r}, expected {expected}",
            code=PayrollErrorCodes.INVALID_CONFIG_VALUE,
            details=[ErrorDetail(field=config_key, message=f"expected {expected}")],
            status_code=status_code
        )
        self.config_key = config_key


class NoApplicableBracketError(PayrollException):
    """No active IRSA bracket covers the taxable income"""
    def __init__(self, taxable_income: Decimal, as_of: date):
        super().__init__(
            message=f"No IRSA bracket covers taxable income {taxable_income} as of {as_of.isoformat()}",
            code=PayrollErrorCodes.NO_APPLICABLE_BRACKET,
            details=[ErrorDetail(field="taxable_income", message=str(taxable_income))],
            status_code=500
        )
        self.taxable_income = taxable_income
        self.as_of = as_of


class BracketTableError(PayrollException):
    """An IRSA bracket table submitted for storage is not well formed"""
    def __init__(self, message: str, details: Optional[List[ErrorDetail]] = None):
        super().__init__(
            message=message,
            code=PayrollErrorCodes.INVALID_BRACKET_TABLE,
            details=details,
            status_code=422
        )


class DuplicateConfigError(PayrollException):
    def __init__(self, config_key: str):
        super().__init__(
            message=f"Payroll configuration '{config_key}' already exists",
            code=PayrollErrorCodes.DUPLICATE_RECORD,
            details=[ErrorDetail(field="key", message="already exists")],
            status_code=409
        )


class PayrollNotFoundError(PayrollException):
    """Resource not found error"""
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            code=PayrollErrorCodes.RECORD_NOT_FOUND,
            status_code=404
        )
        self.identifier = identifier


class DraftNotFoundError(PayrollNotFoundError):
    def __init__(self, draft_id: int):
        super().__init__("Payroll draft", draft_id)


class ApprovedNotFoundError(PayrollNotFoundError):
    def __init__(self, identifier: Any):
        super().__init__("Approved payroll", identifier)


class DuplicateDraftError(PayrollException):
    """A live draft already exists for the employee and period"""
    def __init__(self, employee_id: int, period_start: date, period_end: date):
        super().__init__(
            message=(
                f"Payroll draft already exists for employee {employee_id} "
                f"and period {period_start.isoformat()}..{period_end.isoformat()}"
            ),
            code=PayrollErrorCodes.DUPLICATE_DRAFT,
            details=[ErrorDetail(field="employee_id", message="duplicate period")],
            status_code=409
        )


class AlreadyApprovedError(PayrollException):
    def __init__(self, draft_id: int):
        super().__init__(
            message=f"Payroll draft {draft_id} has already been approved",
            code=PayrollErrorCodes.ALREADY_APPROVED,
            status_code=409
        )
        self.draft_id = draft_id


class DraftLockedError(PayrollException):
    """The draft is referenced by an approval and can no longer change"""
    def __init__(self, draft_id: int, operation: str):
        super().__init__(
            message=f"Cannot {operation} payroll draft {draft_id}: it has been approved",
            code=PayrollErrorCodes.DRAFT_LOCKED,
            status_code=409
        )
        self.draft_id = draft_id


class StorageError(PayrollException):
    """Database operation error"""
    retryable = True

    def __init__(self, message: str, operation: Optional[str] = None,
                 code: str = PayrollErrorCodes.DATABASE_ERROR, status_code: int = 503):
        if operation:
            message = f"Database {operation}: {message}"
        super().__init__(
            message=message,
            code=code,
            status_code=status_code
        )


class PayrollTimeoutError(StorageError):
    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            message=f"Operation '{operation}' exceeded {timeout_seconds:g}s",
            code=PayrollErrorCodes.TIMEOUT,
            status_code=504
        )
