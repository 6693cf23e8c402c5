from .payroll_enums import (
    ConfigDataType,
    ConfigCategory,
    DraftStatus,
    ReconciliationStatus,
    GLAccount,
)

__all__ = [
    "ConfigDataType",
    "ConfigCategory",
    "DraftStatus",
    "ReconciliationStatus",
    "GLAccount",
]
