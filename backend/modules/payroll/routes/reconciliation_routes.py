# backend/modules/payroll/routes/reconciliation_routes.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.auth import User, require_accountant
from core.database import get_db
from ..schemas.payroll_schemas import ReconciliationReport
from ..services.reconciliation_service import PayrollReconciliationService
from .helpers import current_month_period, run_bounded

router = APIRouter()


@router.get("", response_model=ReconciliationReport)
async def get_reconciliation_report(
    period_start: Optional[date] = Query(None, description="Defaults to the first day of the current month"),
    period_end: Optional[date] = Query(None, description="Defaults to the last day of the current month"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_accountant),
):
    """
    Cross-check HR draft totals against accountant-approved totals.

    ## Response
    Both totals, the liability amounts for accounts 431/438/437, the gross
    variance in percent and `RECONCILED` or `VARIANCE_DETECTED`.

    ## Error Responses
    - **422**: period_end before period_start
    """
    default_start, default_end = current_month_period()
    service = PayrollReconciliationService(db)
    return await run_bounded(
        "build reconciliation report",
        service.report,
        period_start or default_start,
        period_end or default_end,
    )
