"""
Payroll draft lifecycle: HR enters a gross salary for an employee and period,
the contribution calculator derives every other figure.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..enums.payroll_enums import DraftStatus
from ..exceptions import (
    PayrollValidationError,
    DuplicateDraftError,
    DraftNotFoundError,
    DraftLockedError,
)
from ..models.payroll_models import PayrollDraft
from ..schemas.error_schemas import PayrollErrorCodes
from .config_provider import ConfigProvider, DatabaseConfigProvider
from .contribution_calculator import ContributionCalculator, PayrollCalculation
from .storage import translate_storage_errors

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def clamp_page(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    limit = DEFAULT_PAGE_SIZE if not limit or limit < 1 else min(limit, MAX_PAGE_SIZE)
    offset = max(offset or 0, 0)
    return limit, offset


class PayrollDraftService:
    """Create, read, update, soft-delete and list payroll drafts."""

    def __init__(self, db: Session, config: Optional[ConfigProvider] = None):
        self.db = db
        self.calculator = ContributionCalculator(config or DatabaseConfigProvider(db))

    @translate_storage_errors("create payroll draft")
    def create(
        self,
        employee_id: int,
        period_start: date,
        period_end: date,
        gross_salary: Decimal,
        actor_id: int,
    ) -> PayrollDraft:
        if period_end < period_start:
            raise PayrollValidationError(
                "Period end must be on or after period start", field="period_end",
                code=PayrollErrorCodes.INVALID_DATE_RANGE,
            )

        calculation = self._calculate(gross_salary, period_end)

        existing = self._live_query().filter(
            and_(
                PayrollDraft.employee_id == employee_id,
                PayrollDraft.period_start == period_start,
                PayrollDraft.period_end == period_end,
            )
        ).first()
        if existing is not None:
            raise DuplicateDraftError(employee_id, period_start, period_end)

        draft = PayrollDraft(
            employee_id=employee_id,
            period_start=period_start,
            period_end=period_end,
            gross_salary=calculation.gross_salary,
            created_by=actor_id,
            **calculation.derived_fields(),
        )
        self.db.add(draft)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent create won the partial unique index
            self.db.rollback()
            raise DuplicateDraftError(employee_id, period_start, period_end)

        self.db.refresh(draft)
        logger.info(
            f"Payroll draft {draft.id} created for employee {employee_id} "
            f"({period_start}..{period_end}) by user {actor_id}"
        )
        return draft

    @translate_storage_errors("read payroll draft")
    def get(self, draft_id: int) -> PayrollDraft:
        draft = self._live_query().filter(PayrollDraft.id == draft_id).first()
        if draft is None:
            raise DraftNotFoundError(draft_id)
        return draft

    @translate_storage_errors("update payroll draft")
    def update(
        self,
        draft_id: int,
        actor_id: int,
        gross_salary: Optional[Decimal] = None,
    ) -> PayrollDraft:
        """
        Update a draft. A new gross salary recomputes every derived field
        through the same calculation used at creation.
        """
        draft = self.get(draft_id)
        if draft.is_approved:
            raise DraftLockedError(draft_id, "update")

        if gross_salary is not None:
            calculation = self._calculate(gross_salary, draft.period_end)
            draft.gross_salary = calculation.gross_salary
            for field, value in calculation.derived_fields().items():
                setattr(draft, field, value)

        draft.updated_by = actor_id
        self.db.commit()
        self.db.refresh(draft)
        logger.info(f"Payroll draft {draft_id} updated by user {actor_id}")
        return draft

    @translate_storage_errors("delete payroll draft")
    def delete(self, draft_id: int, actor_id: int) -> None:
        draft = self.get(draft_id)
        if draft.is_approved:
            raise DraftLockedError(draft_id, "delete")

        draft.deleted_at = datetime.utcnow()
        draft.updated_by = actor_id
        self.db.commit()
        logger.info(f"Payroll draft {draft_id} deleted by user {actor_id}")

    @translate_storage_errors("list payroll drafts")
    def list(
        self,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[DraftStatus] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[PayrollDraft], int]:
        limit, offset = clamp_page(limit, offset)
        query = self._live_query()

        if period_start is not None:
            query = query.filter(PayrollDraft.period_start >= period_start)
        if period_end is not None:
            query = query.filter(PayrollDraft.period_end <= period_end)
        if employee_id is not None:
            query = query.filter(PayrollDraft.employee_id == employee_id)
        if status == DraftStatus.APPROVED:
            query = query.filter(PayrollDraft.approval.has())
        elif status == DraftStatus.DRAFT:
            query = query.filter(~PayrollDraft.approval.has())

        total = query.count()
        items = query.order_by(
            PayrollDraft.period_start.desc(),
            PayrollDraft.created_at.desc(),
            PayrollDraft.id.desc(),
        ).offset(offset).limit(limit).all()
        return items, total

    def _calculate(self, gross_salary: Decimal, as_of: date) -> PayrollCalculation:
        minimum_wage = self.calculator.minimum_wage()
        if Decimal(gross_salary) < minimum_wage:
            raise PayrollValidationError(
                f"Gross salary {gross_salary} is below the minimum wage {minimum_wage}",
                field="gross_salary",
                code=PayrollErrorCodes.BELOW_MINIMUM_WAGE,
            )
        return self.calculator.calculate(gross_salary, as_of)

    def _live_query(self):
        return self.db.query(PayrollDraft).filter(PayrollDraft.deleted_at.is_(None))
