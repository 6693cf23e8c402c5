"""Payroll services module."""

from .config_provider import (
    ConfigProvider,
    DatabaseConfigProvider,
    InMemoryConfigProvider,
    BracketRule,
)
from .contribution_calculator import ContributionCalculator, PayrollCalculation
from .draft_service import PayrollDraftService
from .approval_service import PayrollApprovalService
from .payroll_signer import PayrollSigner
from .reconciliation_service import PayrollReconciliationService
from .payroll_configuration_service import PayrollConfigurationService
from .employee_directory import (
    EmployeeDirectory,
    EmployeeProfile,
    StaticEmployeeDirectory,
    HttpEmployeeDirectory,
)

__all__ = [
    'ConfigProvider',
    'DatabaseConfigProvider',
    'InMemoryConfigProvider',
    'BracketRule',
    'ContributionCalculator',
    'PayrollCalculation',
    'PayrollDraftService',
    'PayrollApprovalService',
    'PayrollSigner',
    'PayrollReconciliationService',
    'PayrollConfigurationService',
    'EmployeeDirectory',
    'EmployeeProfile',
    'StaticEmployeeDirectory',
    'HttpEmployeeDirectory',
]
