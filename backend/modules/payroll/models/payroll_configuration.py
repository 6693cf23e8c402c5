"""
Payroll configuration models.

Statutory rates, ceilings and the IRSA progressive table live in the database
so that a change in the finance law is a data change, not a deployment.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Date, Text, Enum, Index
)
from core.database import Base
from core.mixins import TimestampMixin, AuditActorMixin
from ..enums.payroll_enums import ConfigDataType, ConfigCategory


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class TaxParameter(Base, TimestampMixin, AuditActorMixin):
    """
    Key/value payroll parameter (rates, ceilings, minimum wage).

    Values are stored as strings and interpreted according to ``data_type``.
    """
    __tablename__ = "payroll_tax_parameters"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(String(255), nullable=False)
    data_type = Column(
        Enum(ConfigDataType, name="payroll_config_data_type", native_enum=False,
             values_callable=_enum_values, length=20),
        nullable=False, default=ConfigDataType.STRING
    )
    category = Column(
        Enum(ConfigCategory, name="payroll_config_category", native_enum=False,
             values_callable=_enum_values, length=30),
        nullable=False, default=ConfigCategory.GENERAL, index=True
    )
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        {'comment': 'Configurable payroll parameters (CNAPS, OSTIE, minimum wage)'},
    )

    def __repr__(self):
        return f"<TaxParameter(key='{self.key}', value='{self.value}')>"


class IRSABracket(Base, TimestampMixin, AuditActorMixin):
    """
    One tranche of the IRSA progressive withholding table.

    A table is the set of active brackets sharing an ``effective_date``;
    the most recent table on or before a payroll period supersedes older ones.
    """
    __tablename__ = "payroll_irsa_brackets"

    id = Column(Integer, primary_key=True, index=True)
    bracket_name = Column(String(50), nullable=False)
    min_income = Column(Numeric(15, 2), nullable=False)
    max_income = Column(Numeric(15, 2), nullable=True)  # NULL = unbounded
    tax_rate = Column(Numeric(7, 6), nullable=False)
    min_tax = Column(Numeric(15, 2), nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0)
    effective_date = Column(Date, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index('idx_irsa_bracket_active_effective', 'is_active', 'effective_date'),
        {'comment': 'IRSA progressive withholding brackets'},
    )

    def __repr__(self):
        return (
            f"<IRSABracket(name='{self.bracket_name}', min={self.min_income}, "
            f"max={self.max_income}, rate={self.tax_rate})>"
        )
