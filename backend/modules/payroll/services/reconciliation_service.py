"""
Period reconciliation between HR-entered drafts and accountant approvals.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import get_settings
from ..enums.payroll_enums import ReconciliationStatus
from ..exceptions import PayrollValidationError
from ..models.payroll_models import PayrollApproved, PayrollDraft
from ..schemas.error_schemas import PayrollErrorCodes
from ..schemas.payroll_schemas import (
    GLRecordedAmounts,
    PayrollTotals,
    ReconciliationReport,
)
from .contribution_calculator import to_money
from .storage import translate_storage_errors

logger = logging.getLogger(__name__)

PERCENT_PRECISION = Decimal("0.0001")


def variance_percentage(hr_gross: Decimal, approved_gross: Decimal) -> Decimal:
    """Relative difference of approved vs HR gross, in percent; 0 when HR is empty."""
    if hr_gross == 0:
        return Decimal("0.0000")
    variance = (approved_gross - hr_gross) / hr_gross * 100
    return variance.quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP)


class PayrollReconciliationService:
    def __init__(self, db: Session, tolerance_percent: Optional[Decimal] = None):
        self.db = db
        if tolerance_percent is None:
            tolerance_percent = get_settings().payroll_reconciliation_tolerance_percent
        self.tolerance_percent = Decimal(tolerance_percent)

    @translate_storage_errors("build reconciliation report")
    def report(self, period_start: date, period_end: date) -> ReconciliationReport:
        """
        Compare HR draft totals with approved totals for drafts whose period
        lies within ``[period_start, period_end]``.

        Approved totals are summed from the linked drafts' figures.
        """
        if period_end < period_start:
            raise PayrollValidationError(
                "Period end must be on or after period start", field="period_end",
                code=PayrollErrorCodes.INVALID_DATE_RANGE,
            )

        hr_totals = self._totals(period_start, period_end, approved_only=False)
        approved_totals = self._totals(period_start, period_end, approved_only=True)

        variance = variance_percentage(hr_totals.gross_salary, approved_totals.gross_salary)
        status = (
            ReconciliationStatus.RECONCILED
            if abs(variance) <= self.tolerance_percent
            else ReconciliationStatus.VARIANCE_DETECTED
        )

        if status == ReconciliationStatus.VARIANCE_DETECTED:
            logger.warning(
                f"Payroll variance {variance}% for {period_start}..{period_end} "
                f"exceeds tolerance {self.tolerance_percent}%"
            )

        return ReconciliationReport(
            period_start=period_start,
            period_end=period_end,
            hr_draft_totals=hr_totals,
            accountant_approved_totals=approved_totals,
            gl_recorded_amounts=GLRecordedAmounts(
                account_431_cnaps=approved_totals.cnaps_employee + approved_totals.cnaps_employer,
                account_438_ostie=approved_totals.ostie_employee + approved_totals.ostie_employer,
                account_437_irsa=approved_totals.irsa_withheld,
            ),
            variance_percentage=variance,
            tolerance_percentage=self.tolerance_percent,
            status=status,
        )

    def _totals(self, period_start: date, period_end: date, approved_only: bool) -> PayrollTotals:
        query = self.db.query(
            func.coalesce(func.sum(PayrollDraft.gross_salary), 0),
            func.coalesce(func.sum(PayrollDraft.cnaps_employee), 0),
            func.coalesce(func.sum(PayrollDraft.cnaps_employer), 0),
            func.coalesce(func.sum(PayrollDraft.ostie_employee), 0),
            func.coalesce(func.sum(PayrollDraft.ostie_employer), 0),
            func.coalesce(func.sum(PayrollDraft.irsa_amount), 0),
            func.coalesce(func.sum(PayrollDraft.net_salary), 0),
            func.count(PayrollDraft.id),
        )
        if approved_only:
            query = query.join(PayrollApproved, PayrollApproved.draft_id == PayrollDraft.id)

        row = query.filter(
            PayrollDraft.deleted_at.is_(None),
            PayrollDraft.period_start >= period_start,
            PayrollDraft.period_end <= period_end,
        ).one()

        gross, cnaps_e, cnaps_r, ostie_e, ostie_r, irsa, net, count = row
        return PayrollTotals(
            gross_salary=_money(gross),
            cnaps_employee=_money(cnaps_e),
            cnaps_employer=_money(cnaps_r),
            ostie_employee=_money(ostie_e),
            ostie_employer=_money(ostie_r),
            irsa_withheld=_money(irsa),
            net_payable=_money(net),
            draft_count=int(count),
        )


def _money(value) -> Decimal:
    return to_money(Decimal(str(value)))
