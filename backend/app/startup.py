"""
Startup configuration: logging and pre-flight checks.
"""

import logging
from typing import List, Tuple

from sqlalchemy import text

from core.config import Settings, DEV_JWT_SECRET, DEV_SIGNING_KEY

logger = logging.getLogger(__name__)


def configure_startup_logging(settings: Settings):
    """Configure root logging from LOG_LEVEL"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # Approval audit trail is always kept
    logging.getLogger("payroll.audit").setLevel(logging.INFO)


def run_startup_checks(settings: Settings, engine=None) -> Tuple[bool, List[str]]:
    """
    Check secrets and database connectivity before serving requests.

    Returns (passed, warnings). Settings validation already rejects
    development secrets in production; here they are only reported.
    """
    warnings: List[str] = []

    if settings.jwt_secret_key == DEV_JWT_SECRET:
        warnings.append("JWT_SECRET_KEY uses the development default")
    if settings.payroll_signing_key == DEV_SIGNING_KEY:
        warnings.append("PAYROLL_SIGNING_KEY uses the development default")
    if not settings.employee_service_url:
        warnings.append("EMPLOYEE_SERVICE_URL not set; payslips will carry no employee names")

    passed = True
    if engine is not None:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database connectivity check failed: {e}")
            passed = False

    for warning in warnings:
        logger.warning(warning)

    if passed:
        logger.info(f"Startup checks passed ({settings.environment} mode)")
    return passed, warnings
