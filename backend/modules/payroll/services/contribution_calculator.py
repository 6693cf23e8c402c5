import logging
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Tuple

from ..exceptions import NoApplicableBracketError, PayrollValidationError
from .config_provider import (
    ConfigProvider,
    CNAPS_OSTIE_CEILING,
    CNAPS_EMPLOYEE_RATE,
    CNAPS_EMPLOYER_RATE,
    OSTIE_EMPLOYEE_RATE,
    OSTIE_EMPLOYER_RATE,
    MINIMUM_WAGE,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayrollCalculation:
    """Derived payroll figures for one gross salary."""
    gross_salary: Decimal
    cnaps_base: Decimal
    cnaps_employee: Decimal
    cnaps_employer: Decimal
    ostie_base: Decimal
    ostie_employee: Decimal
    ostie_employer: Decimal
    taxable_income: Decimal
    irsa_amount: Decimal
    irsa_bracket: str
    net_salary: Decimal

    def derived_fields(self) -> Dict[str, Any]:
        """Columns stored on a payroll draft."""
        fields = asdict(self)
        fields.pop("gross_salary")
        fields.pop("taxable_income")
        return fields


class ContributionCalculator:
    """
    Madagascar payroll contribution engine.

    CNAPS (pension) and OSTIE (occupational health) are charged on the gross
    salary capped at a shared ceiling, split between employee and employer.
    IRSA is withheld on gross minus the employee contributions using the
    progressive bracket table in force for the period. Each component is
    rounded to the ariary cent before the net is derived, so
    ``net = gross - cnaps_employee - ostie_employee - irsa`` holds exactly.
    """

    def __init__(self, config: ConfigProvider):
        self.config = config

    def calculate(self, gross_salary: Decimal, as_of: date) -> PayrollCalculation:
        gross = to_money(gross_salary)
        if gross < 0:
            raise PayrollValidationError("Gross salary cannot be negative", field="gross_salary")

        cnaps_base, cnaps_employee, cnaps_employer = self.social_contributions(
            gross, CNAPS_EMPLOYEE_RATE, CNAPS_EMPLOYER_RATE
        )
        ostie_base, ostie_employee, ostie_employer = self.social_contributions(
            gross, OSTIE_EMPLOYEE_RATE, OSTIE_EMPLOYER_RATE
        )

        taxable = gross - cnaps_employee - ostie_employee
        irsa_amount, irsa_bracket = self.irsa(taxable, as_of)

        net = gross - cnaps_employee - ostie_employee - irsa_amount

        logger.debug(
            f"Payroll computed: gross={gross} taxable={taxable} "
            f"irsa={irsa_amount} ({irsa_bracket}) net={net}"
        )

        return PayrollCalculation(
            gross_salary=gross,
            cnaps_base=cnaps_base,
            cnaps_employee=cnaps_employee,
            cnaps_employer=cnaps_employer,
            ostie_base=ostie_base,
            ostie_employee=ostie_employee,
            ostie_employer=ostie_employer,
            taxable_income=taxable,
            irsa_amount=irsa_amount,
            irsa_bracket=irsa_bracket,
            net_salary=net,
        )

    def social_contributions(
        self, gross: Decimal, employee_rate_key: str, employer_rate_key: str
    ) -> Tuple[Decimal, Decimal, Decimal]:
        """Return (base, employee share, employer share) for one scheme."""
        ceiling = self.config.get_decimal(CNAPS_OSTIE_CEILING)
        base = to_money(min(gross, ceiling))
        employee = to_money(base * self.config.get_decimal(employee_rate_key))
        employer = to_money(base * self.config.get_decimal(employer_rate_key))
        return base, employee, employer

    def irsa(self, taxable_income: Decimal, as_of: date) -> Tuple[Decimal, str]:
        """
        Withholding for ``taxable_income`` using the first matching bracket.

        A bracket matches when ``min_income <= taxable`` and the bracket is
        unbounded or ``taxable <= max_income``. Having no match is a
        configuration defect and is never treated as zero tax.
        """
        brackets: List[Any] = self.config.active_brackets(as_of)
        for bracket in brackets:
            if taxable_income < bracket.min_income:
                continue
            if bracket.max_income is not None and taxable_income > bracket.max_income:
                continue
            amount = to_money(taxable_income * Decimal(bracket.tax_rate) + Decimal(bracket.min_tax))
            return amount, bracket.bracket_name

        logger.error(
            f"No IRSA bracket for taxable income {taxable_income} as of {as_of} "
            f"({len(brackets)} active brackets)"
        )
        raise NoApplicableBracketError(taxable_income, as_of)

    def minimum_wage(self) -> Decimal:
        return self.config.get_decimal(MINIMUM_WAGE)
