# backend/modules/payroll/schemas/error_schemas.py

"""
Error response schemas for structured error handling.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class ErrorDetail(BaseModel):
    """Detailed error information"""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standardized error response"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "DuplicateDraftError",
                "message": "Payroll draft already exists for employee 42 and period 2026-09-01..2026-09-30",
                "code": "PAYROLL_DUPLICATE_DRAFT",
                "details": [
                    {
                        "field": "employee_id",
                        "message": "duplicate period",
                    }
                ],
                "retryable": False,
                "timestamp": "2026-10-01T12:00:00Z",
            }
        }
    )

    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    retryable: bool = Field(
        False, description="Whether the caller may safely retry the request"
    )
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class PayrollErrorCodes:
    """Centralized error codes for payroll module"""

    # Validation errors
    VALIDATION_ERROR = "PAYROLL_VALIDATION_ERROR"
    INVALID_DATE_RANGE = "PAYROLL_INVALID_DATE_RANGE"
    BELOW_MINIMUM_WAGE = "PAYROLL_BELOW_MINIMUM_WAGE"

    # Configuration errors
    CONFIG_NOT_FOUND = "PAYROLL_CONFIG_NOT_FOUND"
    INVALID_CONFIG_VALUE = "PAYROLL_INVALID_CONFIG_VALUE"
    NO_APPLICABLE_BRACKET = "PAYROLL_NO_APPLICABLE_BRACKET"
    INVALID_BRACKET_TABLE = "PAYROLL_INVALID_BRACKET_TABLE"

    # Business logic errors
    DUPLICATE_DRAFT = "PAYROLL_DUPLICATE_DRAFT"
    ALREADY_APPROVED = "PAYROLL_ALREADY_APPROVED"
    DRAFT_LOCKED = "PAYROLL_DRAFT_LOCKED"

    # Database errors
    DATABASE_ERROR = "PAYROLL_DATABASE_ERROR"
    TIMEOUT = "PAYROLL_TIMEOUT"
    RECORD_NOT_FOUND = "PAYROLL_RECORD_NOT_FOUND"

    # Generic errors
    DUPLICATE_RECORD = "PAYROLL_DUPLICATE_RECORD"
