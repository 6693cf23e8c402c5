"""
Typed access to payroll parameters and IRSA bracket tables.

The calculation core never reads configuration ambiently: a ``ConfigProvider``
is handed to it. ``DatabaseConfigProvider`` is the production source, one
instance per request; ``InMemoryConfigProvider`` serves fixed values for
tests and what-if simulations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Any, Iterable

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from ..exceptions import ConfigNotFoundError, ConfigTypeError
from ..models.payroll_configuration import TaxParameter, IRSABracket
from .storage import translate_storage_errors

logger = logging.getLogger(__name__)

# Parameter keys read by the calculation core
CNAPS_OSTIE_CEILING = "cnaps_ostie_ceiling"
CNAPS_EMPLOYEE_RATE = "cnaps_employee_rate"
CNAPS_EMPLOYER_RATE = "cnaps_employer_rate"
OSTIE_EMPLOYEE_RATE = "ostie_employee_rate"
OSTIE_EMPLOYER_RATE = "ostie_employer_rate"
MINIMUM_WAGE = "minimum_wage"

_TRUE_VALUES = {"1", "t", "true", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "off"}


def parse_decimal(key: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise ConfigTypeError(key, raw, "a decimal number")
    if not value.is_finite():
        raise ConfigTypeError(key, raw, "a finite decimal number")
    return value


def parse_bool(key: str, raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigTypeError(key, raw, "a boolean")


@dataclass(frozen=True)
class BracketRule:
    """Detached IRSA bracket with the same attributes as an ``IRSABracket`` row."""
    bracket_name: str
    min_income: Decimal
    max_income: Optional[Decimal]
    tax_rate: Decimal
    min_tax: Decimal = Decimal("0")
    sort_order: int = 0
    effective_date: date = date(1970, 1, 1)
    is_active: bool = True


def latest_table(brackets: Iterable[Any], as_of: date) -> List[Any]:
    """
    Keep only the brackets of the most recent table effective on ``as_of``,
    ordered by sort_order then min_income.
    """
    eligible = [
        b for b in brackets
        if b.is_active and b.effective_date <= as_of
    ]
    if not eligible:
        return []
    newest = max(b.effective_date for b in eligible)
    table = [b for b in eligible if b.effective_date == newest]
    return sorted(table, key=lambda b: (b.sort_order, b.min_income))


class ConfigProvider(ABC):
    """Source of payroll parameters and IRSA brackets."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Raw string value of an active parameter; ``ConfigNotFoundError`` otherwise."""

    @abstractmethod
    def active_brackets(self, as_of: date) -> List[IRSABracket]:
        """Active IRSA brackets of the table in force on ``as_of``."""

    def get_decimal(self, key: str) -> Decimal:
        return parse_decimal(key, self.get(key))

    def get_float(self, key: str) -> float:
        return float(self.get_decimal(key))

    def get_int(self, key: str) -> int:
        raw = self.get(key)
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigTypeError(key, raw, "an integer")

    def get_bool(self, key: str) -> bool:
        return parse_bool(key, self.get(key))


class DatabaseConfigProvider(ConfigProvider):
    """
    Reads parameters and brackets through a SQLAlchemy session.

    Results are cached for the lifetime of the instance so that a single
    request sees one consistent configuration.
    """

    def __init__(self, db: Session):
        self.db = db
        self._values: Dict[str, str] = {}
        self._brackets: Dict[date, List[IRSABracket]] = {}

    @translate_storage_errors("read payroll parameter")
    def get(self, key: str) -> str:
        if key in self._values:
            return self._values[key]

        parameter = self.db.query(TaxParameter).filter(
            and_(
                TaxParameter.key == key,
                TaxParameter.is_active == True
            )
        ).first()

        if parameter is None:
            logger.error(f"Payroll parameter '{key}' is missing or inactive")
            raise ConfigNotFoundError(key)

        self._values[key] = parameter.value
        return parameter.value

    @translate_storage_errors("read IRSA brackets")
    def active_brackets(self, as_of: date) -> List[IRSABracket]:
        if as_of in self._brackets:
            return self._brackets[as_of]

        newest = self.db.query(func.max(IRSABracket.effective_date)).filter(
            and_(
                IRSABracket.is_active == True,
                IRSABracket.effective_date <= as_of
            )
        ).scalar()

        brackets: List[IRSABracket] = []
        if newest is not None:
            brackets = self.db.query(IRSABracket).filter(
                and_(
                    IRSABracket.is_active == True,
                    IRSABracket.effective_date == newest
                )
            ).order_by(IRSABracket.sort_order, IRSABracket.min_income).all()

        self._brackets[as_of] = brackets
        return brackets


class InMemoryConfigProvider(ConfigProvider):
    """Fixed configuration, for tests and simulations."""

    def __init__(self, values: Optional[Dict[str, Any]] = None,
                 brackets: Optional[List[Any]] = None):
        self._values = {k: str(v) for k, v in (values or {}).items()}
        self._brackets = list(brackets or [])

    def get(self, key: str) -> str:
        try:
            return self._values[key]
        except KeyError:
            raise ConfigNotFoundError(key)

    def active_brackets(self, as_of: date) -> List[Any]:
        return latest_table(self._brackets, as_of)
