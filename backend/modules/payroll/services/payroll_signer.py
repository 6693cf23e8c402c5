"""
Tamper-evidence for approved payroll records.

The signature is an HMAC-SHA256 over a canonical JSON rendering of the
approved record: keys sorted, no insignificant whitespace, amounts as
two-decimal strings and timestamps in ISO-8601. Anyone holding the signing
key can recompute it; changing any signed figure invalidates it.
"""

import hashlib
import hmac
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import get_settings
from .contribution_calculator import to_money

logger = logging.getLogger(__name__)

SIGNATURE_SCHEME = "hmac-sha256:v1"

SIGNED_DRAFT_FIELDS = (
    "gross_salary",
    "cnaps_base",
    "cnaps_employee",
    "cnaps_employer",
    "ostie_base",
    "ostie_employee",
    "ostie_employer",
    "irsa_amount",
    "net_salary",
)


class PayrollSigner:
    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or get_settings().payroll_signing_key

    @staticmethod
    def canonical_payload(
        draft: Any,
        accountant_id: int,
        approved_at: datetime,
        fiche_paie_number: str,
        gl_entries: List[Dict[str, Any]],
    ) -> bytes:
        payload = {
            "draft_id": draft.id,
            "employee_id": draft.employee_id,
            "period_start": draft.period_start.isoformat(),
            "period_end": draft.period_end.isoformat(),
            "irsa_bracket": draft.irsa_bracket,
            "accountant_id": accountant_id,
            "approved_at": approved_at.isoformat(),
            "fiche_paie_number": fiche_paie_number,
            "gl_entries": gl_entries,
        }
        for field in SIGNED_DRAFT_FIELDS:
            payload[field] = str(to_money(getattr(draft, field)))
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def sign(self, payload: bytes) -> str:
        digest = hmac.new(self.secret_key.encode("utf-8"), payload, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_SCHEME}:{digest}"

    def verify(self, payload: bytes, signature: str) -> bool:
        """Constant-time comparison of ``signature`` against a fresh MAC."""
        if not signature or not signature.startswith(f"{SIGNATURE_SCHEME}:"):
            logger.warning("Payroll signature has an unknown scheme")
            return False
        return hmac.compare_digest(self.sign(payload), signature)
