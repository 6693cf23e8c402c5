"""
Employee identity lookup for payslips.

Employee records are owned by the employee service; payroll only needs the
display name, position and department to print a payslip.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeProfile:
    employee_id: int
    name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None


class EmployeeDirectory(ABC):
    """Abstract interface for employee identity providers"""

    @abstractmethod
    def lookup(self, employee_id: int) -> Optional[EmployeeProfile]:
        """Profile for ``employee_id``, or None when the employee is unknown."""


class StaticEmployeeDirectory(EmployeeDirectory):
    """In-memory directory, used when no employee service is configured."""

    def __init__(self, profiles: Optional[Dict[int, EmployeeProfile]] = None):
        self.profiles = dict(profiles or {})

    def lookup(self, employee_id: int) -> Optional[EmployeeProfile]:
        return self.profiles.get(employee_id)


class HttpEmployeeDirectory(EmployeeDirectory):
    """
    Employee service client.

    Expects ``GET {base_url}/api/v1/employees/{id}`` to return the employee
    object, optionally wrapped in ``{"data": ...}``.
    """

    def __init__(self, base_url: str, timeout: float = 5.0,
                 client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    def lookup(self, employee_id: int) -> Optional[EmployeeProfile]:
        try:
            response = self.client.get(f"/api/v1/employees/{employee_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Employee service unreachable for employee {employee_id}: {e}")
            return None

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning(
                f"Employee service returned HTTP {response.status_code} for employee {employee_id}"
            )
            return None

        body = response.json()
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]

        name = body.get("name") or " ".join(
            part for part in (body.get("first_name"), body.get("last_name")) if part
        ) or None
        return EmployeeProfile(
            employee_id=employee_id,
            name=name,
            position=body.get("position") or None,
            department=body.get("department") or None,
        )

    def close(self) -> None:
        self.client.close()


def get_employee_directory():
    """FastAPI dependency yielding the configured employee directory."""
    settings = get_settings()
    if not settings.employee_service_url:
        yield StaticEmployeeDirectory()
        return

    directory = HttpEmployeeDirectory(
        settings.employee_service_url,
        timeout=settings.employee_service_timeout_seconds,
    )
    try:
        yield directory
    finally:
        directory.close()
