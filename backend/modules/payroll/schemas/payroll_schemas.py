# backend/modules/payroll/schemas/payroll_schemas.py

"""
Pydantic schemas for payroll module API endpoints.

Provides request/response models for:
- Calculation previews
- Payroll drafts
- Approvals, journal entries and payslips
- Reconciliation reports
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from ..enums.payroll_enums import DraftStatus, ReconciliationStatus


# Calculation Schemas


class PayrollCalculationRequest(BaseModel):
    """Request model for a calculation preview (nothing is stored)"""

    gross_salary: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    as_of: Optional[date] = Field(
        None, description="Date whose bracket table applies; defaults to today"
    )


class PayrollCalculationResponse(BaseModel):
    """Derived figures for a gross salary"""

    as_of: date
    gross_salary: Decimal
    cnaps_base: Decimal
    cnaps_employee: Decimal
    cnaps_employer: Decimal
    ostie_base: Decimal
    ostie_employee: Decimal
    ostie_employer: Decimal
    taxable_income: Decimal
    irsa_amount: Decimal
    irsa_bracket: str
    net_salary: Decimal

    class Config:
        from_attributes = True


# Draft Schemas


class PayrollDraftCreate(BaseModel):
    """Request model for creating a payroll draft"""

    employee_id: int = Field(..., gt=0)
    period_start: date
    period_end: date
    gross_salary: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)

    @model_validator(mode="after")
    def validate_period(self):
        if self.period_end < self.period_start:
            raise ValueError("period_end must be on or after period_start")
        return self


class PayrollDraftUpdate(BaseModel):
    """Request model for updating a payroll draft"""

    gross_salary: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)


class PayrollDraftResponse(BaseModel):
    """Response model for a payroll draft"""

    id: int
    employee_id: int
    period_start: date
    period_end: date
    gross_salary: Decimal
    cnaps_base: Decimal
    cnaps_employee: Decimal
    cnaps_employer: Decimal
    ostie_base: Decimal
    ostie_employee: Decimal
    ostie_employer: Decimal
    irsa_amount: Decimal
    irsa_bracket: str
    net_salary: Decimal
    status: DraftStatus
    created_by: int
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PayrollDraftListResponse(BaseModel):
    items: List[PayrollDraftResponse]
    total: int
    limit: int
    offset: int


# Approval Schemas


class PayrollApproveRequest(BaseModel):
    """Request model for approving a payroll draft"""

    comment: Optional[str] = Field(None, max_length=1000)


class GLEntry(BaseModel):
    """One line of an OHADA journal entry"""

    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal
    description: str


class PayrollApprovedResponse(BaseModel):
    """Response model for an approved payroll record"""

    id: int
    draft_id: int
    fiche_paie_number: str
    accountant_id: int
    gl_entries: List[GLEntry]
    digital_signature: str
    comment: Optional[str] = None
    approved_at: datetime
    draft: PayrollDraftResponse

    class Config:
        from_attributes = True


class PayrollApprovedListResponse(BaseModel):
    items: List[PayrollApprovedResponse]
    total: int
    limit: int
    offset: int


class FichePaie(BaseModel):
    """Payslip projection of an approved payroll record"""

    fiche_paie_number: str
    approved_id: int
    draft_id: int
    employee_id: int
    employee_name: Optional[str] = None
    employee_position: Optional[str] = None
    employee_department: Optional[str] = None
    period_start: date
    period_end: date
    gross_salary: Decimal
    cnaps_base: Decimal
    cnaps_employee: Decimal
    cnaps_employer: Decimal
    ostie_base: Decimal
    ostie_employee: Decimal
    ostie_employer: Decimal
    irsa_amount: Decimal
    irsa_bracket: str
    net_salary: Decimal
    accountant_id: int
    approved_at: datetime
    digital_signature: str


class SignatureVerificationResponse(BaseModel):
    approved_id: int
    fiche_paie_number: str
    valid: bool


# Reconciliation Schemas


class PayrollTotals(BaseModel):
    """Summed payroll figures over a set of drafts"""

    gross_salary: Decimal
    cnaps_employee: Decimal
    cnaps_employer: Decimal
    ostie_employee: Decimal
    ostie_employer: Decimal
    irsa_withheld: Decimal
    net_payable: Decimal
    draft_count: int


class GLRecordedAmounts(BaseModel):
    """Liability balances implied by approved payroll"""

    account_431_cnaps: Decimal
    account_438_ostie: Decimal
    account_437_irsa: Decimal


class ReconciliationReport(BaseModel):
    """Response model for a period reconciliation"""

    period_start: date
    period_end: date
    hr_draft_totals: PayrollTotals
    accountant_approved_totals: PayrollTotals
    gl_recorded_amounts: GLRecordedAmounts
    variance_percentage: Decimal
    tolerance_percentage: Decimal
    status: ReconciliationStatus
