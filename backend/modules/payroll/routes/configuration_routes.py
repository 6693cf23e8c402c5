# backend/modules/payroll/routes/configuration_routes.py

"""
Payroll configuration management API endpoints.

- Payroll parameters (rates, ceilings, minimum wage)
- IRSA bracket tables
- Default configuration seeding
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.auth import User, require_admin
from core.database import get_db
from ..enums.payroll_enums import ConfigCategory
from ..schemas.payroll_configuration_schemas import (
    TaxParameterCreate,
    TaxParameterUpdate,
    TaxParameterResponse,
    TaxParameterListResponse,
    IRSABracketTableReplace,
    IRSABracketResponse,
    IRSABracketListResponse,
    SeedConfigurationResponse,
)
from ..services.payroll_configuration_service import PayrollConfigurationService
from .helpers import run_bounded

router = APIRouter()


# Payroll Parameter Endpoints


@router.get("/parameters", response_model=TaxParameterListResponse)
async def list_parameters(
    category: Optional[ConfigCategory] = Query(None, description="Filter by category"),
    key: Optional[str] = Query(None, description="Key substring"),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    List payroll parameters ordered by category and key.

    ## Query Parameters
    - **category**: Optional category filter
    - **key**: Case-insensitive key substring
    - **is_active**: Optional active filter
    - **limit** / **offset**: Pagination
    """
    service = PayrollConfigurationService(db)
    items, total = await run_bounded(
        "list payroll parameters",
        service.list_parameters,
        category=category,
        key=key,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )
    return TaxParameterListResponse(
        items=[TaxParameterResponse.model_validate(p) for p in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/parameters", response_model=TaxParameterResponse, status_code=status.HTTP_201_CREATED)
async def create_parameter(
    parameter_data: TaxParameterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Create a payroll parameter.

    ## Error Responses
    - **409**: Duplicate key
    - **422**: Value does not match its data type
    """
    service = PayrollConfigurationService(db)
    return await run_bounded("create payroll parameter", service.create_parameter, parameter_data, current_user.id)


@router.get("/parameters/{parameter_id}", response_model=TaxParameterResponse)
async def get_parameter(
    parameter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    service = PayrollConfigurationService(db)
    return await run_bounded("read payroll parameter", service.get_parameter, parameter_id)


@router.put("/parameters/{parameter_id}", response_model=TaxParameterResponse)
async def update_parameter(
    parameter_id: int,
    parameter_data: TaxParameterUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Update a parameter's value, description or active flag.

    ## Error Responses
    - **404**: Unknown parameter
    - **422**: Value does not match its data type
    """
    service = PayrollConfigurationService(db)
    return await run_bounded(
        "update payroll parameter", service.update_parameter, parameter_id, parameter_data, current_user.id
    )


@router.delete("/parameters/{parameter_id}", response_model=TaxParameterResponse)
async def deactivate_parameter(
    parameter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Deactivate a parameter. Rows are never physically deleted.
    """
    service = PayrollConfigurationService(db)
    return await run_bounded(
        "deactivate payroll parameter", service.deactivate_parameter, parameter_id, current_user.id
    )


# IRSA Bracket Endpoints


@router.get("/irsa-brackets", response_model=IRSABracketListResponse)
async def list_irsa_brackets(
    is_active: Optional[bool] = Query(None),
    effective_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    service = PayrollConfigurationService(db)
    items, total = await run_bounded(
        "list IRSA brackets",
        service.list_brackets,
        is_active=is_active,
        effective_date=effective_date,
        limit=limit,
        offset=offset,
    )
    return IRSABracketListResponse(
        items=[IRSABracketResponse.model_validate(b) for b in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.put("/irsa-brackets", response_model=List[IRSABracketResponse])
async def replace_irsa_bracket_table(
    table: IRSABracketTableReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Replace the IRSA table effective on a date.

    ## Request Body
    - **effective_date**: First day the table applies
    - **brackets**: The complete table; must start at 0, be contiguous and
      end with an unbounded bracket

    ## Error Responses
    - **422**: Gaps, overlaps, rates outside [0, 1] or duplicate sort orders
    """
    service = PayrollConfigurationService(db)
    return await run_bounded(
        "replace IRSA bracket table",
        service.replace_bracket_table,
        table.effective_date,
        table.brackets,
        current_user.id,
    )


@router.get("/irsa-brackets/{bracket_id}", response_model=IRSABracketResponse)
async def get_irsa_bracket(
    bracket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    service = PayrollConfigurationService(db)
    return await run_bounded("read IRSA bracket", service.get_bracket, bracket_id)


@router.post("/seed", response_model=SeedConfigurationResponse)
async def seed_default_configuration(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Insert the default Madagascar parameters and IRSA table where absent.
    Existing values are left untouched.
    """
    service = PayrollConfigurationService(db)
    created_keys, brackets_created = await run_bounded(
        "seed payroll configuration", service.seed_default_configuration, current_user.id
    )
    return SeedConfigurationResponse(parameters_created=created_keys, brackets_created=brackets_created)
