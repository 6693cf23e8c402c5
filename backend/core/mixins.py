from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.sql import func


class TimestampMixin:
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(),
                        onupdate=func.now(), nullable=False)


class AuditActorMixin:
    """Mixin recording which authenticated user created / last changed a row"""
    created_by = Column(Integer, nullable=False)
    updated_by = Column(Integer, nullable=True)
