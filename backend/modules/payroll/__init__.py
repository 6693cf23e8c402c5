# backend/modules/payroll/__init__.py

"""
Payroll Module - Madagascar payroll core

Payroll computation, approval and reconciliation with:
- CNAPS / OSTIE contributions and IRSA withholding from database-driven
  rates and bracket tables
- HR draft -> accountant approval workflow with OHADA journal entries,
  payslip serials and signed approved records
- Period reconciliation of HR totals against approved totals
"""

from .routes.payroll_routes import router as payroll_router

__version__ = "1.0.0"
__all__ = ["payroll_router"]
