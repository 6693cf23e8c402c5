"""
Accountant approval of payroll drafts.

Approval turns a draft into an immutable financial record: OHADA journal
entries, a unique payslip serial and an HMAC signature over the approved
figures. A draft is approved at most once, even under concurrent requests.
"""

import logging
import secrets
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..enums.payroll_enums import GLAccount
from ..exceptions import (
    AlreadyApprovedError,
    ApprovedNotFoundError,
    DraftNotFoundError,
    StorageError,
)
from ..models.payroll_models import PayrollApproved, PayrollDraft
from ..schemas.payroll_schemas import FichePaie
from .contribution_calculator import to_money
from .draft_service import clamp_page, DEFAULT_PAGE_SIZE
from .employee_directory import EmployeeDirectory
from .payroll_signer import PayrollSigner
from .storage import translate_storage_errors

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("payroll.audit")

FICHE_PAIE_PREFIX = "FDPAIE"
MAX_SERIAL_ATTEMPTS = 5


def generate_fiche_paie_number(approved_on: date) -> str:
    """``FDPAIE-YYYYMMDD-`` followed by a random 64-bit hex suffix."""
    return f"{FICHE_PAIE_PREFIX}-{approved_on:%Y%m%d}-{secrets.token_hex(8).upper()}"


def _gl_pair(debit_account: GLAccount, credit_account: GLAccount,
             amount: Decimal, description: str) -> List[Dict[str, str]]:
    value = str(to_money(amount))
    zero = "0.00"
    return [
        {
            "account_code": debit_account.value,
            "account_name": debit_account.label,
            "debit": value,
            "credit": zero,
            "description": description,
        },
        {
            "account_code": credit_account.value,
            "account_name": credit_account.label,
            "debit": zero,
            "credit": value,
            "description": description,
        },
    ]


def build_gl_entries(draft: Any) -> List[Dict[str, str]]:
    """
    Journal entries for an approved payroll, as debit/credit pairs.

    Account 641 is debited with the full gross (net + employee withholdings),
    646 with the employer charges; the 4xx accounts carry the liabilities.
    """
    entries: List[Dict[str, str]] = []
    entries += _gl_pair(GLAccount.SALARIES, GLAccount.SALARIES_PAYABLE,
                        draft.net_salary, "Salaire net à payer")
    entries += _gl_pair(GLAccount.SALARIES, GLAccount.CNAPS_PAYABLE,
                        draft.cnaps_employee, "CNAPS employé")
    entries += _gl_pair(GLAccount.SOCIAL_CHARGES, GLAccount.CNAPS_PAYABLE,
                        draft.cnaps_employer, "CNAPS employeur")
    entries += _gl_pair(GLAccount.SALARIES, GLAccount.OSTIE_PAYABLE,
                        draft.ostie_employee, "OSTIE employé")
    entries += _gl_pair(GLAccount.SOCIAL_CHARGES, GLAccount.OSTIE_PAYABLE,
                        draft.ostie_employer, "OSTIE employeur")
    entries += _gl_pair(GLAccount.SALARIES, GLAccount.IRSA_PAYABLE,
                        draft.irsa_amount, "IRSA à verser")
    return entries


def gl_totals(entries: List[Dict[str, Any]]) -> Tuple[Decimal, Decimal]:
    debit = sum((Decimal(str(e["debit"])) for e in entries), Decimal("0"))
    credit = sum((Decimal(str(e["credit"])) for e in entries), Decimal("0"))
    return debit, credit


class PayrollApprovalService:
    def __init__(self, db: Session, signer: Optional[PayrollSigner] = None):
        self.db = db
        self.signer = signer or PayrollSigner()

    @translate_storage_errors("approve payroll draft")
    def approve(self, draft_id: int, accountant_id: int,
                comment: Optional[str] = None) -> PayrollApproved:
        """
        Approve a draft exactly once.

        The existence check rejects the common double-click; the unique
        index on ``draft_id`` settles a true race, and a collision on the
        serial is retried with a fresh suffix.
        """
        draft = self.db.query(PayrollDraft).filter(
            PayrollDraft.id == draft_id,
            PayrollDraft.deleted_at.is_(None)
        ).first()
        if draft is None:
            raise DraftNotFoundError(draft_id)
        if self._is_approved(draft_id):
            raise AlreadyApprovedError(draft_id)

        approved_at = datetime.utcnow().replace(microsecond=0)
        gl_entries = build_gl_entries(draft)

        for attempt in range(1, MAX_SERIAL_ATTEMPTS + 1):
            serial = generate_fiche_paie_number(approved_at.date())
            payload = self.signer.canonical_payload(
                draft, accountant_id, approved_at, serial, gl_entries
            )
            record = PayrollApproved(
                draft_id=draft_id,
                fiche_paie_number=serial,
                accountant_id=accountant_id,
                gl_entries=gl_entries,
                digital_signature=self.signer.sign(payload),
                comment=comment,
                approved_at=approved_at,
            )
            try:
                with self.db.begin_nested():
                    self.db.add(record)
            except IntegrityError:
                if self._is_approved(draft_id):
                    self.db.rollback()
                    raise AlreadyApprovedError(draft_id)
                logger.warning(f"Payslip serial collision on attempt {attempt}, retrying")
                continue

            self.db.commit()
            self.db.refresh(record)
            audit_logger.info(
                f"payroll.approved draft_id={draft_id} approved_id={record.id} "
                f"fiche_paie_number={serial} accountant_id={accountant_id} "
                f"net_salary={draft.net_salary}"
            )
            return record

        self.db.rollback()
        raise StorageError("Could not allocate a unique payslip serial", operation="approve")

    @translate_storage_errors("read approved payroll")
    def get_approved(self, approved_id: int) -> PayrollApproved:
        record = self.db.query(PayrollApproved).filter(PayrollApproved.id == approved_id).first()
        if record is None:
            raise ApprovedNotFoundError(approved_id)
        return record

    @translate_storage_errors("read approved payroll")
    def get_by_fiche_number(self, fiche_paie_number: str) -> PayrollApproved:
        record = self.db.query(PayrollApproved).filter(
            PayrollApproved.fiche_paie_number == fiche_paie_number
        ).first()
        if record is None:
            raise ApprovedNotFoundError(fiche_paie_number)
        return record

    @translate_storage_errors("list approved payroll")
    def list_approved(
        self,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
        employee_id: Optional[int] = None,
        fiche_paie_number: Optional[str] = None,
        accountant_id: Optional[int] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[PayrollApproved], int]:
        limit, offset = clamp_page(limit, offset)
        query = self.db.query(PayrollApproved).join(PayrollDraft, PayrollApproved.draft)

        if period_start is not None:
            query = query.filter(PayrollDraft.period_start >= period_start)
        if period_end is not None:
            query = query.filter(PayrollDraft.period_end <= period_end)
        if employee_id is not None:
            query = query.filter(PayrollDraft.employee_id == employee_id)
        if fiche_paie_number:
            query = query.filter(PayrollApproved.fiche_paie_number.ilike(f"%{fiche_paie_number}%"))
        if accountant_id is not None:
            query = query.filter(PayrollApproved.accountant_id == accountant_id)

        total = query.count()
        items = query.order_by(
            PayrollApproved.approved_at.desc(),
            PayrollApproved.id.desc(),
        ).offset(offset).limit(limit).all()
        return items, total

    @translate_storage_errors("generate fiche de paie")
    def generate_fiche_paie(self, approved_id: int, directory: EmployeeDirectory) -> FichePaie:
        """Read-only payslip projection of an approved record."""
        record = self.get_approved(approved_id)
        draft = record.draft
        profile = directory.lookup(draft.employee_id)

        return FichePaie(
            fiche_paie_number=record.fiche_paie_number,
            approved_id=record.id,
            draft_id=draft.id,
            employee_id=draft.employee_id,
            employee_name=profile.name if profile else None,
            employee_position=profile.position if profile else None,
            employee_department=profile.department if profile else None,
            period_start=draft.period_start,
            period_end=draft.period_end,
            gross_salary=draft.gross_salary,
            cnaps_base=draft.cnaps_base,
            cnaps_employee=draft.cnaps_employee,
            cnaps_employer=draft.cnaps_employer,
            ostie_base=draft.ostie_base,
            ostie_employee=draft.ostie_employee,
            ostie_employer=draft.ostie_employer,
            irsa_amount=draft.irsa_amount,
            irsa_bracket=draft.irsa_bracket,
            net_salary=draft.net_salary,
            accountant_id=record.accountant_id,
            approved_at=record.approved_at,
            digital_signature=record.digital_signature,
        )

    @translate_storage_errors("verify payroll signature")
    def verify_signature(self, approved_id: int) -> bool:
        record = self.get_approved(approved_id)
        payload = self.signer.canonical_payload(
            record.draft,
            record.accountant_id,
            record.approved_at,
            record.fiche_paie_number,
            record.gl_entries,
        )
        valid = self.signer.verify(payload, record.digital_signature)
        if not valid:
            audit_logger.warning(
                f"payroll.signature_mismatch approved_id={approved_id} "
                f"fiche_paie_number={record.fiche_paie_number}"
            )
        return valid

    def _is_approved(self, draft_id: int) -> bool:
        return self.db.query(PayrollApproved.id).filter(
            PayrollApproved.draft_id == draft_id
        ).first() is not None
