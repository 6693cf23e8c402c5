import pytest
from decimal import Decimal
from datetime import date

from modules.payroll.exceptions import (
    ConfigNotFoundError,
    ConfigTypeError,
    NoApplicableBracketError,
    PayrollValidationError,
)
from modules.payroll.services.config_provider import BracketRule, InMemoryConfigProvider
from modules.payroll.services.contribution_calculator import ContributionCalculator


AS_OF = date(2026, 9, 30)


class TestContributionCalculator:
    """Test suite for ContributionCalculator."""

    @pytest.fixture
    def calculator(self, memory_config):
        return ContributionCalculator(memory_config)

    def test_reference_payroll(self, calculator):
        """500,000 Ar gross under the reference configuration."""
        result = calculator.calculate(Decimal("500000"), AS_OF)

        assert result.cnaps_base == Decimal("500000.00")
        assert result.cnaps_employee == Decimal("5000.00")
        assert result.cnaps_employer == Decimal("65000.00")
        assert result.ostie_base == Decimal("500000.00")
        assert result.ostie_employee == Decimal("5000.00")
        assert result.ostie_employer == Decimal("25000.00")
        assert result.taxable_income == Decimal("490000.00")
        assert result.irsa_bracket == "Tranche 3 - 10%"
        assert result.irsa_amount == Decimal("51500.00")
        assert result.net_salary == Decimal("438500.00")

    def test_contributions_capped_at_ceiling(self, calculator):
        result = calculator.calculate(Decimal("2000000"), AS_OF)

        assert result.cnaps_base == Decimal("500000.00")
        assert result.ostie_base == Decimal("500000.00")
        assert result.cnaps_employee == Decimal("5000.00")
        assert result.cnaps_employer == Decimal("65000.00")
        assert result.ostie_employer == Decimal("25000.00")
        # 1,990,000 * 20% + 27,500
        assert result.irsa_bracket == "Tranche 5 - 20%"
        assert result.irsa_amount == Decimal("425500.00")
        assert result.net_salary == Decimal("1564500.00")

    def test_net_identity_holds_after_rounding(self, calculator):
        result = calculator.calculate(Decimal("333333.33"), AS_OF)

        assert result.cnaps_employee == Decimal("3333.33")
        assert result.ostie_employee == Decimal("3333.33")
        assert result.net_salary == (
            result.gross_salary - result.cnaps_employee - result.ostie_employee - result.irsa_amount
        )

    def test_employer_contributions_do_not_reduce_net(self, config_factory):
        low = ContributionCalculator(config_factory(cnaps_employer_rate="0.13"))
        high = ContributionCalculator(config_factory(cnaps_employer_rate="0.20"))

        assert (
            low.calculate(Decimal("450000"), AS_OF).net_salary
            == high.calculate(Decimal("450000"), AS_OF).net_salary
        )

    def test_below_first_taxable_bracket(self, calculator):
        result = calculator.calculate(Decimal("300000"), AS_OF)

        assert result.irsa_bracket == "Tranche 1 - 0%"
        assert result.irsa_amount == Decimal("0.00")
        assert result.net_salary == Decimal("294000.00")

    def test_upper_boundary_belongs_to_lower_bracket(self, calculator):
        amount, bracket = calculator.irsa(Decimal("400000.00"), AS_OF)

        assert bracket == "Tranche 2 - 5%"
        assert amount == Decimal("20000.00")

    def test_income_just_above_boundary_uses_next_bracket(self, calculator):
        amount, bracket = calculator.irsa(Decimal("400000.01"), AS_OF)

        assert bracket == "Tranche 3 - 10%"
        assert amount == Decimal("42500.00")

    def test_gap_in_brackets_raises_instead_of_zero_tax(self, config_factory):
        brackets = [
            BracketRule("A", Decimal("0"), Decimal("350000"), Decimal("0"), sort_order=1),
            BracketRule("C", Decimal("400000"), None, Decimal("0.10"), sort_order=2),
        ]
        calculator = ContributionCalculator(config_factory(brackets=brackets))

        with pytest.raises(NoApplicableBracketError) as exc_info:
            calculator.calculate(Decimal("382000"), AS_OF)

        assert exc_info.value.status_code == 500
        assert exc_info.value.taxable_income == Decimal("374360.00")

    def test_no_brackets_raises(self, config_factory):
        calculator = ContributionCalculator(config_factory(brackets=[]))

        with pytest.raises(NoApplicableBracketError):
            calculator.calculate(Decimal("500000"), AS_OF)

    def test_newest_table_supersedes_older_one(self, config_factory, bracket_rules):
        reform = [
            BracketRule("Exonéré", Decimal("0"), None, Decimal("0"),
                        sort_order=1, effective_date=date(2026, 10, 1)),
        ]
        calculator = ContributionCalculator(config_factory(brackets=bracket_rules() + reform))

        before = calculator.calculate(Decimal("500000"), date(2026, 9, 30))
        after = calculator.calculate(Decimal("500000"), date(2026, 10, 31))

        assert before.irsa_bracket == "Tranche 3 - 10%"
        assert after.irsa_bracket == "Exonéré"
        assert after.irsa_amount == Decimal("0.00")

    def test_table_not_yet_effective_is_ignored(self, config_factory):
        future = [
            BracketRule("Future", Decimal("0"), None, Decimal("0.5"),
                        sort_order=1, effective_date=date(2030, 1, 1)),
        ]
        calculator = ContributionCalculator(config_factory(brackets=future))

        with pytest.raises(NoApplicableBracketError):
            calculator.calculate(Decimal("500000"), AS_OF)

    def test_missing_parameter_is_a_hard_failure(self):
        config = InMemoryConfigProvider({"cnaps_employee_rate": "0.01"}, [])
        calculator = ContributionCalculator(config)

        with pytest.raises(ConfigNotFoundError) as exc_info:
            calculator.calculate(Decimal("500000"), AS_OF)

        assert exc_info.value.config_key == "cnaps_ostie_ceiling"

    def test_unparseable_rate(self, config_factory):
        calculator = ContributionCalculator(config_factory(ostie_employee_rate="one percent"))

        with pytest.raises(ConfigTypeError):
            calculator.calculate(Decimal("500000"), AS_OF)

    def test_negative_gross_rejected(self, calculator):
        with pytest.raises(PayrollValidationError):
            calculator.calculate(Decimal("-1"), AS_OF)

    def test_derived_fields_match_draft_columns(self, calculator):
        fields = calculator.calculate(Decimal("500000"), AS_OF).derived_fields()

        assert set(fields) == {
            "cnaps_base", "cnaps_employee", "cnaps_employer",
            "ostie_base", "ostie_employee", "ostie_employer",
            "irsa_amount", "irsa_bracket", "net_salary",
        }
