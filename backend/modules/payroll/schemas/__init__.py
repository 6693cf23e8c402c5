"""Payroll schemas module."""

from .payroll_schemas import (
    PayrollCalculationRequest,
    PayrollCalculationResponse,
    PayrollDraftCreate,
    PayrollDraftUpdate,
    PayrollDraftResponse,
    PayrollDraftListResponse,
    PayrollApproveRequest,
    GLEntry,
    PayrollApprovedResponse,
    PayrollApprovedListResponse,
    FichePaie,
    SignatureVerificationResponse,
    PayrollTotals,
    GLRecordedAmounts,
    ReconciliationReport,
)
from .error_schemas import ErrorDetail, ErrorResponse, PayrollErrorCodes

__all__ = [
    'PayrollCalculationRequest',
    'PayrollCalculationResponse',
    'PayrollDraftCreate',
    'PayrollDraftUpdate',
    'PayrollDraftResponse',
    'PayrollDraftListResponse',
    'PayrollApproveRequest',
    'GLEntry',
    'PayrollApprovedResponse',
    'PayrollApprovedListResponse',
    'FichePaie',
    'SignatureVerificationResponse',
    'PayrollTotals',
    'GLRecordedAmounts',
    'ReconciliationReport',
    'ErrorDetail',
    'ErrorResponse',
    'PayrollErrorCodes',
]
