# backend/modules/payroll/routes/draft_routes.py

"""
Payroll draft endpoints (HR side of the workflow) and calculation preview.
"""

from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from core.auth import User, get_current_user, require_hr
from core.database import get_db
from ..enums.payroll_enums import DraftStatus
from ..schemas.payroll_schemas import (
    PayrollCalculationRequest,
    PayrollCalculationResponse,
    PayrollDraftCreate,
    PayrollDraftUpdate,
    PayrollDraftResponse,
    PayrollDraftListResponse,
)
from ..services.config_provider import ConfigProvider
from ..services.contribution_calculator import ContributionCalculator
from ..services.draft_service import PayrollDraftService
from .dependencies import get_config_provider
from .helpers import run_bounded

router = APIRouter()
calculation_router = APIRouter()


@calculation_router.post("/calculate", response_model=PayrollCalculationResponse)
async def preview_calculation(
    request: PayrollCalculationRequest,
    config: ConfigProvider = Depends(get_config_provider),
    current_user: User = Depends(require_hr),
):
    """
    Compute CNAPS, OSTIE, IRSA and net salary without storing anything.

    ## Request Body
    - **gross_salary**: Monthly gross salary (Ar)
    - **as_of**: Date selecting the IRSA table (default: today)

    ## Response
    All derived figures, including taxable income and the IRSA bracket.

    ## Error Responses
    - **422**: Invalid amount
    - **500**: Missing configuration or no IRSA bracket for the income
    """
    as_of = request.as_of or date.today()
    calculator = ContributionCalculator(config)
    result = await run_bounded("calculate payroll", calculator.calculate, request.gross_salary, as_of)
    return PayrollCalculationResponse(as_of=as_of, **asdict(result))


@router.post("", response_model=PayrollDraftResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    draft_data: PayrollDraftCreate,
    db: Session = Depends(get_db),
    config: ConfigProvider = Depends(get_config_provider),
    current_user: User = Depends(require_hr),
):
    """
    Create a payroll draft; every contribution is derived from the gross salary.

    ## Request Body
    See PayrollDraftCreate schema.

    ## Error Responses
    - **409**: A draft already exists for the employee and period
    - **422**: Invalid period or gross salary below the minimum wage
    """
    service = PayrollDraftService(db, config)
    return await run_bounded(
        "create payroll draft",
        service.create,
        employee_id=draft_data.employee_id,
        period_start=draft_data.period_start,
        period_end=draft_data.period_end,
        gross_salary=draft_data.gross_salary,
        actor_id=current_user.id,
    )


@router.get("", response_model=PayrollDraftListResponse)
async def list_drafts(
    period_start: Optional[date] = Query(None, description="Drafts starting on or after"),
    period_end: Optional[date] = Query(None, description="Drafts ending on or before"),
    employee_id: Optional[int] = Query(None, description="Filter by employee"),
    status_filter: Optional[DraftStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List live drafts, newest period first.

    ## Query Parameters
    - **period_start** / **period_end**: Period window
    - **employee_id**: Optional employee filter
    - **status**: `draft` or `approved`
    - **limit** / **offset**: Pagination
    """
    service = PayrollDraftService(db)
    items, total = await run_bounded(
        "list payroll drafts",
        service.list,
        period_start=period_start,
        period_end=period_end,
        employee_id=employee_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return PayrollDraftListResponse(
        items=[PayrollDraftResponse.model_validate(d) for d in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{draft_id}", response_model=PayrollDraftResponse)
async def get_draft(
    draft_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a payroll draft.

    ## Error Responses
    - **404**: Draft not found or deleted
    """
    service = PayrollDraftService(db)
    return await run_bounded("read payroll draft", service.get, draft_id)


@router.put("/{draft_id}", response_model=PayrollDraftResponse)
async def update_draft(
    draft_id: int,
    draft_data: PayrollDraftUpdate,
    db: Session = Depends(get_db),
    config: ConfigProvider = Depends(get_config_provider),
    current_user: User = Depends(require_hr),
):
    """
    Update a draft's gross salary; derived figures are recomputed.

    ## Error Responses
    - **404**: Draft not found
    - **409**: Draft already approved
    - **422**: Gross salary below the minimum wage
    """
    service = PayrollDraftService(db, config)
    return await run_bounded(
        "update payroll draft",
        service.update,
        draft_id,
        actor_id=current_user.id,
        gross_salary=draft_data.gross_salary,
    )


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    draft_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr),
):
    """
    Soft-delete a draft.

    ## Error Responses
    - **404**: Draft not found
    - **409**: Draft already approved
    """
    service = PayrollDraftService(db)
    await run_bounded("delete payroll draft", service.delete, draft_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
