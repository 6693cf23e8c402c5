from .payroll_configuration import TaxParameter, IRSABracket
from .payroll_models import PayrollDraft, PayrollApproved

__all__ = [
    "TaxParameter",
    "IRSABracket",
    "PayrollDraft",
    "PayrollApproved",
]
