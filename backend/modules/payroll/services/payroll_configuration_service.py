"""
Payroll Configuration Service.

Administration of the database-driven payroll parameters and IRSA bracket
tables read by the contribution calculator. Bracket tables are validated as
a whole before they are stored, so a gap or overlap never reaches a payroll
run.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Any, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..enums.payroll_enums import ConfigDataType, ConfigCategory
from ..exceptions import (
    BracketTableError,
    ConfigNotFoundError,
    ConfigTypeError,
    DuplicateConfigError,
    PayrollValidationError,
)
from ..models.payroll_configuration import TaxParameter, IRSABracket
from ..schemas.error_schemas import ErrorDetail
from ..schemas.payroll_configuration_schemas import (
    TaxParameterCreate,
    TaxParameterUpdate,
    IRSABracketInput,
)
from .config_provider import (
    parse_bool,
    parse_decimal,
    CNAPS_OSTIE_CEILING,
    CNAPS_EMPLOYEE_RATE,
    CNAPS_EMPLOYER_RATE,
    OSTIE_EMPLOYEE_RATE,
    OSTIE_EMPLOYER_RATE,
    MINIMUM_WAGE,
)
from .draft_service import clamp_page, DEFAULT_PAGE_SIZE
from .storage import translate_storage_errors

logger = logging.getLogger(__name__)

DEFAULT_BRACKET_EFFECTIVE_DATE = date(2024, 1, 1)

DEFAULT_PARAMETERS: List[Dict[str, Any]] = [
    {
        "key": MINIMUM_WAGE,
        "value": "200000",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.GENERAL,
        "description": "Minimum wage (Ar) per month",
    },
    {
        "key": CNAPS_OSTIE_CEILING,
        "value": "1600000",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.SOCIAL_SECURITY,
        "description": "Monthly salary ceiling for CNAPS and OSTIE contributions (8 x minimum wage)",
    },
    {
        "key": CNAPS_EMPLOYEE_RATE,
        "value": "0.01",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.SOCIAL_SECURITY,
        "description": "CNAPS contribution rate for employee (1%)",
    },
    {
        "key": CNAPS_EMPLOYER_RATE,
        "value": "0.13",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.SOCIAL_SECURITY,
        "description": "CNAPS contribution rate for employer (13%)",
    },
    {
        "key": OSTIE_EMPLOYEE_RATE,
        "value": "0.01",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.SOCIAL_SECURITY,
        "description": "OSTIE contribution rate for employee (1%)",
    },
    {
        "key": OSTIE_EMPLOYER_RATE,
        "value": "0.05",
        "data_type": ConfigDataType.NUMBER,
        "category": ConfigCategory.SOCIAL_SECURITY,
        "description": "OSTIE contribution rate for employer (5%)",
    },
    {
        "key": "currency_code",
        "value": "MGA",
        "data_type": ConfigDataType.STRING,
        "category": ConfigCategory.GENERAL,
        "description": "Currency code for payroll",
    },
]

DEFAULT_IRSA_BRACKETS: List[IRSABracketInput] = [
    IRSABracketInput(bracket_name="Tranche 1 - 0%", min_income=Decimal("0"),
                     max_income=Decimal("350000"), tax_rate=Decimal("0"),
                     min_tax=Decimal("0"), sort_order=1),
    IRSABracketInput(bracket_name="Tranche 2 - 5%", min_income=Decimal("350000"),
                     max_income=Decimal("400000"), tax_rate=Decimal("0.05"),
                     min_tax=Decimal("0"), sort_order=2),
    IRSABracketInput(bracket_name="Tranche 3 - 10%", min_income=Decimal("400000"),
                     max_income=Decimal("500000"), tax_rate=Decimal("0.10"),
                     min_tax=Decimal("2500"), sort_order=3),
    IRSABracketInput(bracket_name="Tranche 4 - 15%", min_income=Decimal("500000"),
                     max_income=Decimal("600000"), tax_rate=Decimal("0.15"),
                     min_tax=Decimal("12500"), sort_order=4),
    IRSABracketInput(bracket_name="Tranche 5 - 20%", min_income=Decimal("600000"),
                     max_income=None, tax_rate=Decimal("0.20"),
                     min_tax=Decimal("27500"), sort_order=5),
]


def validate_parameter_value(key: str, value: str, data_type: ConfigDataType) -> None:
    """Reject a value that the calculator could not parse as its declared type."""
    try:
        if data_type == ConfigDataType.NUMBER:
            parse_decimal(key, value)
        elif data_type == ConfigDataType.BOOLEAN:
            parse_bool(key, value)
    except ConfigTypeError as e:
        raise PayrollValidationError(e.message, field="value")


def validate_bracket_table(brackets: List[IRSABracketInput]) -> List[IRSABracketInput]:
    """
    Check that a bracket table covers every income from 0 upward exactly once.

    Returns the brackets ordered by sort_order. Raises ``BracketTableError``
    listing every problem found.
    """
    problems: List[ErrorDetail] = []
    if not brackets:
        raise BracketTableError("IRSA bracket table is empty")

    sort_orders = [b.sort_order for b in brackets]
    if len(set(sort_orders)) != len(sort_orders):
        problems.append(ErrorDetail(field="sort_order", message="sort_order values must be unique"))

    ordered = sorted(brackets, key=lambda b: (b.sort_order, b.min_income))

    if ordered[0].min_income != 0:
        problems.append(ErrorDetail(
            field="brackets[0].min_income",
            message="The first bracket must start at 0",
        ))

    for index, bracket in enumerate(ordered):
        prefix = f"brackets[{index}]"
        if not (Decimal("0") <= bracket.tax_rate <= Decimal("1")):
            problems.append(ErrorDetail(field=f"{prefix}.tax_rate", message="tax_rate must be within [0, 1]"))
        if bracket.min_tax < 0:
            problems.append(ErrorDetail(field=f"{prefix}.min_tax", message="min_tax cannot be negative"))

        is_last = index == len(ordered) - 1
        if bracket.max_income is None:
            if not is_last:
                problems.append(ErrorDetail(
                    field=f"{prefix}.max_income",
                    message="Only the last bracket may be unbounded",
                ))
        else:
            if bracket.max_income <= bracket.min_income:
                problems.append(ErrorDetail(
                    field=f"{prefix}.max_income",
                    message="max_income must be greater than min_income",
                ))
            if is_last:
                problems.append(ErrorDetail(
                    field=f"{prefix}.max_income",
                    message="The last bracket must be unbounded",
                ))

        if index > 0:
            previous = ordered[index - 1]
            if previous.max_income is not None and bracket.min_income != previous.max_income:
                kind = "gap" if bracket.min_income > previous.max_income else "overlap"
                problems.append(ErrorDetail(
                    field=f"{prefix}.min_income",
                    message=(
                        f"{kind} between {previous.bracket_name} and {bracket.bracket_name}: "
                        f"min_income must equal the previous max_income {previous.max_income}"
                    ),
                ))

    if problems:
        raise BracketTableError("Invalid IRSA bracket table", details=problems)
    return ordered


class PayrollConfigurationService:
    """
    Service for managing payroll parameters and IRSA bracket tables.
    """

    def __init__(self, db: Session):
        self.db = db

    # Parameters

    @translate_storage_errors("create payroll parameter")
    def create_parameter(self, data: TaxParameterCreate, actor_id: int) -> TaxParameter:
        validate_parameter_value(data.key, data.value, data.data_type)

        if self.db.query(TaxParameter.id).filter(TaxParameter.key == data.key).first():
            raise DuplicateConfigError(data.key)

        parameter = TaxParameter(
            key=data.key,
            value=data.value.strip(),
            data_type=data.data_type,
            category=data.category,
            description=data.description,
            is_active=data.is_active,
            created_by=actor_id,
        )
        self.db.add(parameter)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateConfigError(data.key)

        self.db.refresh(parameter)
        logger.info(f"Payroll parameter '{parameter.key}' created by user {actor_id}")
        return parameter

    @translate_storage_errors("update payroll parameter")
    def update_parameter(self, parameter_id: int, data: TaxParameterUpdate, actor_id: int) -> TaxParameter:
        parameter = self.get_parameter(parameter_id)

        if data.value is not None:
            validate_parameter_value(parameter.key, data.value, parameter.data_type)
            parameter.value = data.value.strip()
        if data.description is not None:
            parameter.description = data.description
        if data.is_active is not None:
            parameter.is_active = data.is_active

        parameter.updated_by = actor_id
        self.db.commit()
        self.db.refresh(parameter)
        logger.info(f"Payroll parameter '{parameter.key}' updated by user {actor_id}")
        return parameter

    @translate_storage_errors("deactivate payroll parameter")
    def deactivate_parameter(self, parameter_id: int, actor_id: int) -> TaxParameter:
        parameter = self.get_parameter(parameter_id)
        parameter.is_active = False
        parameter.updated_by = actor_id
        self.db.commit()
        self.db.refresh(parameter)
        logger.info(f"Payroll parameter '{parameter.key}' deactivated by user {actor_id}")
        return parameter

    @translate_storage_errors("read payroll parameter")
    def get_parameter(self, parameter_id: int) -> TaxParameter:
        parameter = self.db.query(TaxParameter).filter(TaxParameter.id == parameter_id).first()
        if parameter is None:
            raise ConfigNotFoundError(f"id={parameter_id}", status_code=404)
        return parameter

    @translate_storage_errors("list payroll parameters")
    def list_parameters(
        self,
        category: Optional[ConfigCategory] = None,
        key: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[TaxParameter], int]:
        limit, offset = clamp_page(limit, offset)
        query = self.db.query(TaxParameter)

        if category is not None:
            query = query.filter(TaxParameter.category == category)
        if key:
            query = query.filter(TaxParameter.key.ilike(f"%{key}%"))
        if is_active is not None:
            query = query.filter(TaxParameter.is_active == is_active)

        total = query.count()
        items = query.order_by(TaxParameter.category, TaxParameter.key).offset(offset).limit(limit).all()
        return items, total

    # IRSA brackets

    @translate_storage_errors("replace IRSA bracket table")
    def replace_bracket_table(
        self,
        effective_date: date,
        brackets: List[IRSABracketInput],
        actor_id: int,
    ) -> List[IRSABracket]:
        """
        Store a complete IRSA table effective on ``effective_date``.

        Active brackets already registered for that date are deactivated in
        the same transaction; tables for other dates are untouched.
        """
        ordered = validate_bracket_table(brackets)

        superseded = self.db.query(IRSABracket).filter(
            and_(
                IRSABracket.effective_date == effective_date,
                IRSABracket.is_active == True
            )
        ).update({IRSABracket.is_active: False, IRSABracket.updated_by: actor_id},
                 synchronize_session=False)

        created = []
        for bracket in ordered:
            row = IRSABracket(
                bracket_name=bracket.bracket_name,
                min_income=bracket.min_income,
                max_income=bracket.max_income,
                tax_rate=bracket.tax_rate,
                min_tax=bracket.min_tax,
                sort_order=bracket.sort_order,
                effective_date=effective_date,
                is_active=True,
                created_by=actor_id,
            )
            self.db.add(row)
            created.append(row)

        self.db.commit()
        for row in created:
            self.db.refresh(row)

        logger.info(
            f"IRSA table effective {effective_date} replaced by user {actor_id}: "
            f"{len(created)} brackets stored, {superseded} deactivated"
        )
        return created

    @translate_storage_errors("list IRSA brackets")
    def list_brackets(
        self,
        is_active: Optional[bool] = None,
        effective_date: Optional[date] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[IRSABracket], int]:
        limit, offset = clamp_page(limit, offset)
        query = self.db.query(IRSABracket)

        if is_active is not None:
            query = query.filter(IRSABracket.is_active == is_active)
        if effective_date is not None:
            query = query.filter(IRSABracket.effective_date == effective_date)

        total = query.count()
        items = query.order_by(
            IRSABracket.effective_date.desc(),
            IRSABracket.sort_order,
            IRSABracket.min_income,
        ).offset(offset).limit(limit).all()
        return items, total

    @translate_storage_errors("read IRSA bracket")
    def get_bracket(self, bracket_id: int) -> IRSABracket:
        bracket = self.db.query(IRSABracket).filter(IRSABracket.id == bracket_id).first()
        if bracket is None:
            raise ConfigNotFoundError(f"irsa_bracket id={bracket_id}", status_code=404)
        return bracket

    # Seeding

    @translate_storage_errors("seed payroll configuration")
    def seed_default_configuration(self, actor_id: int) -> Tuple[List[str], int]:
        """
        Insert the default parameters and IRSA table where absent.

        Existing parameters are never overwritten. The bracket table is only
        seeded when no active bracket exists at all. Returns the keys created
        and the number of brackets created.
        """
        created_keys = []
        existing = {key for (key,) in self.db.query(TaxParameter.key).all()}
        for default in DEFAULT_PARAMETERS:
            if default["key"] in existing:
                continue
            self.db.add(TaxParameter(created_by=actor_id, is_active=True, **default))
            created_keys.append(default["key"])
        self.db.commit()

        brackets_created = 0
        has_brackets = self.db.query(IRSABracket.id).filter(IRSABracket.is_active == True).first()
        if not has_brackets:
            brackets_created = len(self.replace_bracket_table(
                DEFAULT_BRACKET_EFFECTIVE_DATE, DEFAULT_IRSA_BRACKETS, actor_id
            ))

        logger.info(
            f"Payroll configuration seeded by user {actor_id}: "
            f"{len(created_keys)} parameters, {brackets_created} IRSA brackets"
        )
        return created_keys, brackets_created
