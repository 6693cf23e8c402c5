import pytest
from decimal import Decimal
from datetime import date

from modules.payroll.enums.payroll_enums import ReconciliationStatus
from modules.payroll.exceptions import PayrollValidationError
from modules.payroll.services.approval_service import PayrollApprovalService
from modules.payroll.services.draft_service import PayrollDraftService
from modules.payroll.services.reconciliation_service import (
    PayrollReconciliationService,
    variance_percentage,
)

SEPTEMBER = (date(2026, 9, 1), date(2026, 9, 30))
HR = 10
ACCOUNTANT = 20


class TestVariancePercentage:

    def test_equal_totals(self):
        assert variance_percentage(Decimal("1000"), Decimal("1000")) == Decimal("0")

    def test_negative_when_approvals_missing(self):
        assert variance_percentage(Decimal("1100000"), Decimal("500000")) == Decimal("-54.5455")

    def test_empty_hr_side_is_zero(self):
        assert variance_percentage(Decimal("0"), Decimal("0")) == Decimal("0")
        assert variance_percentage(Decimal("0"), Decimal("500")) == Decimal("0")


class TestPayrollReconciliationService:
    """Test suite for PayrollReconciliationService."""

    @pytest.fixture
    def payroll(self, seeded_db):
        drafts = PayrollDraftService(seeded_db)
        return {
            "rakoto": drafts.create(42, *SEPTEMBER, Decimal("500000"), actor_id=HR),
            "rabe": drafts.create(43, *SEPTEMBER, Decimal("600000"), actor_id=HR),
        }

    @pytest.fixture
    def approvals(self, seeded_db):
        return PayrollApprovalService(seeded_db)

    def test_fully_approved_period_reconciles(self, seeded_db, payroll, approvals):
        for draft in payroll.values():
            approvals.approve(draft.id, accountant_id=ACCOUNTANT)

        report = PayrollReconciliationService(seeded_db).report(*SEPTEMBER)

        assert report.status == ReconciliationStatus.RECONCILED
        assert report.variance_percentage == Decimal("0")
        assert report.hr_draft_totals == report.accountant_approved_totals
        assert report.hr_draft_totals.gross_salary == Decimal("1100000.00")
        assert report.hr_draft_totals.irsa_withheld == Decimal("152200.00")
        assert report.hr_draft_totals.net_payable == Decimal("925800.00")
        assert report.hr_draft_totals.draft_count == 2

    def test_gl_amounts_from_approved_figures(self, seeded_db, payroll, approvals):
        for draft in payroll.values():
            approvals.approve(draft.id, accountant_id=ACCOUNTANT)

        gl = PayrollReconciliationService(seeded_db).report(*SEPTEMBER).gl_recorded_amounts

        assert gl.account_431_cnaps == Decimal("154000.00")
        assert gl.account_438_ostie == Decimal("66000.00")
        assert gl.account_437_irsa == Decimal("152200.00")

    def test_partial_approval_detects_variance(self, seeded_db, payroll, approvals):
        approvals.approve(payroll["rakoto"].id, accountant_id=ACCOUNTANT)

        report = PayrollReconciliationService(seeded_db).report(*SEPTEMBER)

        assert report.status == ReconciliationStatus.VARIANCE_DETECTED
        assert report.variance_percentage == Decimal("-54.5455")
        assert report.accountant_approved_totals.gross_salary == Decimal("500000.00")
        assert report.accountant_approved_totals.draft_count == 1
        assert report.gl_recorded_amounts.account_437_irsa == Decimal("51500.00")

    def test_tolerance_can_be_overridden(self, seeded_db, payroll, approvals):
        approvals.approve(payroll["rakoto"].id, accountant_id=ACCOUNTANT)

        report = PayrollReconciliationService(seeded_db, tolerance_percent=Decimal("60")).report(*SEPTEMBER)

        assert report.tolerance_percentage == Decimal("60")
        assert report.status == ReconciliationStatus.RECONCILED

    def test_default_tolerance_from_settings(self, seeded_db):
        assert PayrollReconciliationService(seeded_db).tolerance_percent == Decimal("0.1")

    def test_empty_period(self, seeded_db):
        report = PayrollReconciliationService(seeded_db).report(date(2025, 1, 1), date(2025, 1, 31))

        assert report.hr_draft_totals.gross_salary == Decimal("0.00")
        assert report.hr_draft_totals.draft_count == 0
        assert report.variance_percentage == Decimal("0")
        assert report.status == ReconciliationStatus.RECONCILED

    def test_only_contained_drafts_count(self, seeded_db, payroll, approvals):
        PayrollDraftService(seeded_db).create(
            44, date(2026, 9, 15), date(2026, 10, 14), Decimal("700000"), actor_id=HR
        )

        report = PayrollReconciliationService(seeded_db).report(*SEPTEMBER)

        assert report.hr_draft_totals.draft_count == 2
        assert report.hr_draft_totals.gross_salary == Decimal("1100000.00")

    def test_deleted_drafts_excluded(self, seeded_db, payroll, approvals):
        approvals.approve(payroll["rakoto"].id, accountant_id=ACCOUNTANT)
        PayrollDraftService(seeded_db).delete(payroll["rabe"].id, actor_id=HR)

        report = PayrollReconciliationService(seeded_db).report(*SEPTEMBER)

        assert report.hr_draft_totals.draft_count == 1
        assert report.status == ReconciliationStatus.RECONCILED

    def test_inverted_period_rejected(self, seeded_db):
        with pytest.raises(PayrollValidationError) as exc_info:
            PayrollReconciliationService(seeded_db).report(date(2026, 9, 30), date(2026, 9, 1))

        assert exc_info.value.status_code == 422
        assert exc_info.value.code == "PAYROLL_INVALID_DATE_RANGE"
