# backend/modules/payroll/routes/approval_routes.py

"""
Approval endpoints (accountant side of the workflow), approved-record
lookups and payslip projection.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.auth import User, get_current_user, require_accountant
from core.database import get_db
from ..schemas.payroll_schemas import (
    PayrollApproveRequest,
    PayrollApprovedResponse,
    PayrollApprovedListResponse,
    FichePaie,
    SignatureVerificationResponse,
)
from ..services.approval_service import PayrollApprovalService
from ..services.employee_directory import EmployeeDirectory, get_employee_directory
from .helpers import run_bounded

router = APIRouter()


@router.put(
    "/drafts/{draft_id}/approve",
    response_model=PayrollApprovedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def approve_draft(
    draft_id: int,
    approve_data: Optional[PayrollApproveRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_accountant),
):
    """
    Approve a payroll draft.

    Produces the OHADA journal entries, the payslip serial
    (`FDPAIE-YYYYMMDD-...`) and the record signature. A draft can be
    approved only once.

    ## Request Body
    - **comment**: Optional approval note

    ## Error Responses
    - **404**: Draft not found
    - **409**: Draft already approved
    """
    comment = approve_data.comment if approve_data else None
    service = PayrollApprovalService(db)
    return await run_bounded(
        "approve payroll draft", service.approve, draft_id, current_user.id, comment
    )


@router.get("/approved", response_model=PayrollApprovedListResponse)
async def list_approved(
    period_start: Optional[date] = Query(None),
    period_end: Optional[date] = Query(None),
    employee_id: Optional[int] = Query(None),
    fiche_paie_number: Optional[str] = Query(None, description="Serial substring"),
    accountant_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List approved payroll records, most recent approval first.
    """
    service = PayrollApprovalService(db)
    items, total = await run_bounded(
        "list approved payroll",
        service.list_approved,
        period_start=period_start,
        period_end=period_end,
        employee_id=employee_id,
        fiche_paie_number=fiche_paie_number,
        accountant_id=accountant_id,
        limit=limit,
        offset=offset,
    )
    return PayrollApprovedListResponse(
        items=[PayrollApprovedResponse.model_validate(r) for r in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/approved/fiche/{fiche_paie_number}", response_model=PayrollApprovedResponse)
async def get_approved_by_fiche_number(
    fiche_paie_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get an approved record by payslip serial.

    ## Error Responses
    - **404**: Unknown serial
    """
    service = PayrollApprovalService(db)
    return await run_bounded("read approved payroll", service.get_by_fiche_number, fiche_paie_number)


@router.get("/approved/{approved_id}", response_model=PayrollApprovedResponse)
async def get_approved(
    approved_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PayrollApprovalService(db)
    return await run_bounded("read approved payroll", service.get_approved, approved_id)


@router.get("/approved/{approved_id}/fiche-paie", response_model=FichePaie)
async def get_fiche_paie(
    approved_id: int,
    db: Session = Depends(get_db),
    directory: EmployeeDirectory = Depends(get_employee_directory),
    current_user: User = Depends(get_current_user),
):
    """
    Payslip (fiche de paie) for an approved record.

    Employee name, position and department come from the employee service
    and are null when it does not know the employee.

    ## Error Responses
    - **404**: Approved record not found
    """
    service = PayrollApprovalService(db)
    return await run_bounded("generate fiche de paie", service.generate_fiche_paie, approved_id, directory)


@router.get("/approved/{approved_id}/verify", response_model=SignatureVerificationResponse)
async def verify_approved_signature(
    approved_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_accountant),
):
    """
    Recompute the signature of an approved record and compare it with the
    stored one.
    """
    service = PayrollApprovalService(db)
    valid = await run_bounded("verify payroll signature", service.verify_signature, approved_id)
    record = await run_bounded("read approved payroll", service.get_approved, approved_id)
    return SignatureVerificationResponse(
        approved_id=record.id,
        fiche_paie_number=record.fiche_paie_number,
        valid=valid,
    )
