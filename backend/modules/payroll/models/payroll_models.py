from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, Date, DateTime, Text, JSON,
    Index, text
)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin, AuditActorMixin
from ..enums.payroll_enums import DraftStatus


class PayrollDraft(Base, TimestampMixin, AuditActorMixin):
    """HR-entered payroll for one employee and period, with derived figures."""
    __tablename__ = "payroll_drafts"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)

    gross_salary = Column(Numeric(15, 2), nullable=False)

    # Derived by the contribution calculator
    cnaps_base = Column(Numeric(15, 2), nullable=False)
    cnaps_employee = Column(Numeric(15, 2), nullable=False)
    cnaps_employer = Column(Numeric(15, 2), nullable=False)
    ostie_base = Column(Numeric(15, 2), nullable=False)
    ostie_employee = Column(Numeric(15, 2), nullable=False)
    ostie_employer = Column(Numeric(15, 2), nullable=False)
    irsa_amount = Column(Numeric(15, 2), nullable=False)
    irsa_bracket = Column(String(50), nullable=False)
    net_salary = Column(Numeric(15, 2), nullable=False)

    deleted_at = Column(DateTime, nullable=True)

    approval = relationship("PayrollApproved", back_populates="draft", uselist=False)

    __table_args__ = (
        Index(
            'uq_payroll_drafts_employee_period_live',
            'employee_id', 'period_start', 'period_end',
            unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
        Index('ix_payroll_drafts_period', 'period_start', 'period_end'),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_approved(self) -> bool:
        return self.approval is not None

    @property
    def status(self) -> DraftStatus:
        return DraftStatus.APPROVED if self.is_approved else DraftStatus.DRAFT


class PayrollApproved(Base, TimestampMixin):
    """
    Accountant-approved, immutable payroll record.

    Holds the journal entries, payslip serial and signature produced at
    approval time. Figures are read from the linked draft.
    """
    __tablename__ = "payroll_approved"

    id = Column(Integer, primary_key=True, index=True)
    draft_id = Column(Integer, ForeignKey("payroll_drafts.id"), nullable=False, unique=True)
    fiche_paie_number = Column(String(40), nullable=False, unique=True, index=True)
    accountant_id = Column(Integer, nullable=False, index=True)
    gl_entries = Column(JSON, nullable=False)
    digital_signature = Column(String(100), nullable=False)
    comment = Column(Text, nullable=True)
    approved_at = Column(DateTime, nullable=False, index=True)

    draft = relationship("PayrollDraft", back_populates="approval")
