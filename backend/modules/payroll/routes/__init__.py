# backend/modules/payroll/routes/__init__.py

"""
Payroll Module Routes Package

This package contains API routes for payroll-specific functionality:
- Calculation preview and payroll drafts
- Approval, payslips and signature verification
- Period reconciliation
- Payroll configuration management
"""

from .payroll_routes import router as payroll_router
from .draft_routes import router as draft_router
from .approval_routes import router as approval_router
from .reconciliation_routes import router as reconciliation_router
from .configuration_routes import router as configuration_router
from .error_handlers import register_payroll_exception_handlers

__all__ = [
    "payroll_router",
    "draft_router",
    "approval_router",
    "reconciliation_router",
    "configuration_router",
    "register_payroll_exception_handlers",
]
