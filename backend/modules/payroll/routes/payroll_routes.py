# backend/modules/payroll/routes/payroll_routes.py

"""
Main payroll routes combining all payroll module endpoints.

This router aggregates all payroll-related endpoints:
- Calculation preview
- Drafts and approvals
- Reconciliation
- Configuration management
"""

from fastapi import APIRouter
from datetime import datetime
from .draft_routes import router as draft_router, calculation_router
from .approval_routes import router as approval_router
from .reconciliation_routes import router as reconciliation_router
from .configuration_routes import router as configuration_router

# Create main payroll router
router = APIRouter(prefix="/api/payroll", tags=["Payroll"])

# Include sub-routers
router.include_router(calculation_router, tags=["Payroll Calculation"])
router.include_router(draft_router, prefix="/drafts", tags=["Payroll Drafts"])
router.include_router(approval_router, tags=["Payroll Approvals"])
router.include_router(
    reconciliation_router, prefix="/reconciliation", tags=["Payroll Reconciliation"]
)
router.include_router(
    configuration_router, prefix="/config", tags=["Payroll Configuration"]
)


@router.get("/health")
async def payroll_health_check():
    """
    Health check endpoint for payroll module.

    Returns:
        dict: Health status of payroll module
    """
    return {
        "status": "healthy",
        "module": "payroll",
        "timestamp": datetime.utcnow().isoformat(),
    }
