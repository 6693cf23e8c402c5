import logging
import re
import pytest
from decimal import Decimal
from datetime import date
from unittest.mock import patch

from modules.payroll.exceptions import (
    AlreadyApprovedError,
    ApprovedNotFoundError,
    DraftNotFoundError,
    StorageError,
)
from modules.payroll.services.approval_service import (
    PayrollApprovalService,
    build_gl_entries,
    gl_totals,
)
from modules.payroll.services.draft_service import PayrollDraftService
from modules.payroll.services.employee_directory import StaticEmployeeDirectory
from modules.payroll.services.payroll_signer import PayrollSigner

SEPTEMBER = (date(2026, 9, 1), date(2026, 9, 30))
OCTOBER = (date(2026, 10, 1), date(2026, 10, 31))
HR = 10
ACCOUNTANT = 20
SERIAL_PATTERN = re.compile(r"^FDPAIE-\d{8}-[0-9A-F]{16}$")


@pytest.fixture
def drafts(seeded_db):
    return PayrollDraftService(seeded_db)


@pytest.fixture
def service(seeded_db):
    return PayrollApprovalService(seeded_db)


@pytest.fixture
def draft(drafts):
    return drafts.create(42, *SEPTEMBER, Decimal("500000"), actor_id=HR)


class TestGLEntries:

    def test_six_balanced_pairs(self, draft):
        entries = build_gl_entries(draft)

        assert len(entries) == 12
        for debit_line, credit_line in zip(entries[::2], entries[1::2]):
            assert debit_line["debit"] == credit_line["credit"]
            assert debit_line["credit"] == credit_line["debit"] == "0.00"
            assert debit_line["description"] == credit_line["description"]

    def test_accounts_and_amounts(self, draft):
        entries = build_gl_entries(draft)
        pairs = [
            (e["account_code"], entries[i + 1]["account_code"], e["debit"], e["description"])
            for i, e in enumerate(entries) if i % 2 == 0
        ]

        assert pairs == [
            ("641", "421", "438500.00", "Salaire net à payer"),
            ("641", "431", "5000.00", "CNAPS employé"),
            ("646", "431", "65000.00", "CNAPS employeur"),
            ("641", "438", "5000.00", "OSTIE employé"),
            ("646", "438", "25000.00", "OSTIE employeur"),
            ("641", "437", "51500.00", "IRSA à verser"),
        ]

    def test_debits_equal_gross_plus_employer_charges(self, draft):
        debit, credit = gl_totals(build_gl_entries(draft))

        assert debit == credit == Decimal("590000.00")

    def test_salary_expense_equals_gross(self, draft):
        salary_debits = sum(
            Decimal(e["debit"]) for e in build_gl_entries(draft) if e["account_code"] == "641"
        )
        assert salary_debits == draft.gross_salary


class TestPayrollApprovalService:
    """Test suite for PayrollApprovalService."""

    def test_approve_creates_signed_record(self, service, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT, comment="Septembre OK")

        assert record.id is not None
        assert record.draft_id == draft.id
        assert record.accountant_id == ACCOUNTANT
        assert record.comment == "Septembre OK"
        assert SERIAL_PATTERN.match(record.fiche_paie_number)
        assert record.fiche_paie_number[7:15] == record.approved_at.strftime("%Y%m%d")
        assert record.approved_at.microsecond == 0
        assert re.match(r"^hmac-sha256:v1:[0-9a-f]{64}$", record.digital_signature)
        assert len(record.gl_entries) == 12
        assert record.draft.is_approved

    def test_approve_twice_rejected(self, service, draft):
        service.approve(draft.id, accountant_id=ACCOUNTANT)

        with pytest.raises(AlreadyApprovedError) as exc_info:
            service.approve(draft.id, accountant_id=21)

        assert exc_info.value.status_code == 409
        items, total = service.list_approved()
        assert total == 1

    def test_concurrent_approval_loses_on_unique_index(self, service, draft):
        service.approve(draft.id, accountant_id=ACCOUNTANT)

        # Second request passes the pre-check, then hits the unique index
        with patch.object(PayrollApprovalService, "_is_approved", side_effect=[False, True]):
            with pytest.raises(AlreadyApprovedError):
                service.approve(draft.id, accountant_id=21)

        items, total = service.list_approved()
        assert total == 1
        assert items[0].accountant_id == ACCOUNTANT

    def test_serial_collision_is_retried(self, service, drafts, draft):
        other = drafts.create(43, *SEPTEMBER, Decimal("600000"), actor_id=HR)
        taken = "FDPAIE-20261019-AAAAAAAAAAAAAAAA"
        fresh = "FDPAIE-20261019-BBBBBBBBBBBBBBBB"

        with patch(
            "modules.payroll.services.approval_service.generate_fiche_paie_number",
            side_effect=[taken, taken, fresh],
        ):
            service.approve(draft.id, accountant_id=ACCOUNTANT)
            record = service.approve(other.id, accountant_id=ACCOUNTANT)

        assert record.fiche_paie_number == fresh

    def test_serial_exhaustion_is_a_storage_error(self, service, drafts, draft):
        other = drafts.create(43, *SEPTEMBER, Decimal("600000"), actor_id=HR)
        taken = "FDPAIE-20261019-AAAAAAAAAAAAAAAA"

        with patch(
            "modules.payroll.services.approval_service.generate_fiche_paie_number",
            return_value=taken,
        ):
            service.approve(draft.id, accountant_id=ACCOUNTANT)
            with pytest.raises(StorageError) as exc_info:
                service.approve(other.id, accountant_id=ACCOUNTANT)

        assert exc_info.value.retryable is True

    def test_approve_missing_draft(self, service):
        with pytest.raises(DraftNotFoundError):
            service.approve(9999, accountant_id=ACCOUNTANT)

    def test_approve_deleted_draft(self, service, drafts, draft):
        drafts.delete(draft.id, actor_id=HR)

        with pytest.raises(DraftNotFoundError):
            service.approve(draft.id, accountant_id=ACCOUNTANT)

    def test_approval_is_audited(self, service, draft, caplog):
        caplog.set_level(logging.INFO, logger="payroll.audit")

        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        audit = [r for r in caplog.records if r.name == "payroll.audit"]
        assert len(audit) == 1
        assert f"draft_id={draft.id}" in audit[0].getMessage()
        assert record.fiche_paie_number in audit[0].getMessage()

    def test_get_approved_and_by_serial(self, service, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        assert service.get_approved(record.id).id == record.id
        assert service.get_by_fiche_number(record.fiche_paie_number).id == record.id

    def test_get_missing_approved(self, service):
        with pytest.raises(ApprovedNotFoundError):
            service.get_approved(9999)
        with pytest.raises(ApprovedNotFoundError):
            service.get_by_fiche_number("FDPAIE-20260101-0000000000000000")

    def test_list_approved_filters(self, service, drafts, draft):
        other = drafts.create(43, *OCTOBER, Decimal("600000"), actor_id=HR)
        first = service.approve(draft.id, accountant_id=ACCOUNTANT)
        second = service.approve(other.id, accountant_id=21)

        items, total = service.list_approved()
        assert total == 2

        items, _ = service.list_approved(period_start=OCTOBER[0], period_end=OCTOBER[1])
        assert [r.id for r in items] == [second.id]

        items, _ = service.list_approved(employee_id=42)
        assert [r.id for r in items] == [first.id]

        items, _ = service.list_approved(accountant_id=21)
        assert [r.id for r in items] == [second.id]

        items, _ = service.list_approved(fiche_paie_number=first.fiche_paie_number[-6:].lower())
        assert [r.id for r in items] == [first.id]


class TestFichePaie:

    def test_fiche_paie_with_profile(self, service, draft, employee_directory):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        fiche = service.generate_fiche_paie(record.id, employee_directory)

        assert fiche.fiche_paie_number == record.fiche_paie_number
        assert fiche.employee_name == "Rakoto Jean"
        assert fiche.employee_position == "Comptable"
        assert fiche.employee_department == "Finance"
        assert fiche.gross_salary == Decimal("500000.00")
        assert fiche.net_salary == Decimal("438500.00")
        assert fiche.irsa_bracket == "Tranche 3 - 10%"
        assert fiche.digital_signature == record.digital_signature

    def test_fiche_paie_without_profile(self, service, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        fiche = service.generate_fiche_paie(record.id, StaticEmployeeDirectory())

        assert fiche.employee_id == 42
        assert fiche.employee_name is None
        assert fiche.employee_department is None

    def test_fiche_paie_for_unknown_record(self, service, employee_directory):
        with pytest.raises(ApprovedNotFoundError):
            service.generate_fiche_paie(9999, employee_directory)


class TestSignatureVerification:

    def test_fresh_record_verifies(self, service, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        assert service.verify_signature(record.id) is True

    def test_tampered_figure_fails(self, service, seeded_db, draft, caplog):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)
        record.draft.net_salary = Decimal("500000.00")
        seeded_db.commit()

        assert service.verify_signature(record.id) is False
        assert any("signature_mismatch" in r.getMessage() for r in caplog.records)

    def test_tampered_gl_entries_fail(self, service, seeded_db, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)
        entries = [dict(e) for e in record.gl_entries]
        entries[0]["debit"] = "1.00"
        record.gl_entries = entries
        seeded_db.commit()

        assert service.verify_signature(record.id) is False

    def test_other_key_fails(self, seeded_db, service, draft):
        record = service.approve(draft.id, accountant_id=ACCOUNTANT)

        other = PayrollApprovalService(seeded_db, signer=PayrollSigner("another-signing-key-0000"))
        assert other.verify_signature(record.id) is False


class TestPayrollSigner:

    @pytest.fixture
    def signer(self):
        return PayrollSigner("unit-test-signing-key-000")

    def test_payload_is_canonical(self, signer, draft):
        approved_at = draft.created_at.replace(microsecond=0)
        payload = signer.canonical_payload(draft, ACCOUNTANT, approved_at, "FDPAIE-X", [])

        assert b" " not in payload.replace(b"Tranche 3 - 10%", b"")
        assert b'"gross_salary":"500000.00"' in payload
        assert payload == signer.canonical_payload(draft, ACCOUNTANT, approved_at, "FDPAIE-X", [])

    def test_unknown_scheme_rejected(self, signer):
        assert signer.verify(b"{}", "sha1:abc") is False
        assert signer.verify(b"{}", "") is False

    def test_round_trip(self, signer):
        assert signer.verify(b"{}", signer.sign(b"{}")) is True
