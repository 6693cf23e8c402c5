from enum import Enum


class ConfigDataType(str, Enum):
    """How a tax parameter's string value is interpreted."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class ConfigCategory(str, Enum):
    GENERAL = "general"
    SOCIAL_SECURITY = "social_security"
    TAX = "tax"
    OVERTIME = "overtime"


class DraftStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"


class ReconciliationStatus(str, Enum):
    RECONCILED = "RECONCILED"
    VARIANCE_DETECTED = "VARIANCE_DETECTED"


class GLAccount(str, Enum):
    """OHADA chart-of-accounts codes used by payroll journal entries."""
    SALARIES = "641"
    SOCIAL_CHARGES = "646"
    SALARIES_PAYABLE = "421"
    CNAPS_PAYABLE = "431"
    IRSA_PAYABLE = "437"
    OSTIE_PAYABLE = "438"

    @property
    def label(self) -> str:
        return {
            "641": "Salaires et traitements",
            "646": "Charges sociales",
            "421": "Salaires à payer",
            "431": "CNAPS à payer",
            "437": "IRSA à verser",
            "438": "OSTIE à payer",
        }[self.value]
