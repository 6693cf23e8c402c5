# backend/modules/payroll/tests/conftest.py

"""
Pytest fixtures for payroll module tests.

Provides an isolated in-memory database per test, seeded configuration,
in-memory providers and an authenticated API client.
"""

import pytest
from datetime import date
from decimal import Decimal
from typing import List

from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import get_settings
from core.database import Base, get_db
from modules.payroll.routes.payroll_routes import router as payroll_router
from modules.payroll.routes.error_handlers import register_payroll_exception_handlers
from modules.payroll.services.config_provider import BracketRule, InMemoryConfigProvider
from modules.payroll.services.employee_directory import (
    EmployeeProfile,
    StaticEmployeeDirectory,
    get_employee_directory,
)
from modules.payroll.services.payroll_configuration_service import PayrollConfigurationService

HR_USER_ID = 10
ACCOUNTANT_USER_ID = 20
ADMIN_USER_ID = 30


# Database fixtures
@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db_session):
    """Session with the default parameters and IRSA table stored."""
    PayrollConfigurationService(db_session).seed_default_configuration(actor_id=ADMIN_USER_ID)
    return db_session


# Configuration fixtures
def default_brackets(effective_date: date = date(2024, 1, 1)) -> List[BracketRule]:
    return [
        BracketRule("Tranche 1 - 0%", Decimal("0"), Decimal("350000"), Decimal("0"),
                    Decimal("0"), 1, effective_date),
        BracketRule("Tranche 2 - 5%", Decimal("350000"), Decimal("400000"), Decimal("0.05"),
                    Decimal("0"), 2, effective_date),
        BracketRule("Tranche 3 - 10%", Decimal("400000"), Decimal("500000"), Decimal("0.10"),
                    Decimal("2500"), 3, effective_date),
        BracketRule("Tranche 4 - 15%", Decimal("500000"), Decimal("600000"), Decimal("0.15"),
                    Decimal("12500"), 4, effective_date),
        BracketRule("Tranche 5 - 20%", Decimal("600000"), None, Decimal("0.20"),
                    Decimal("27500"), 5, effective_date),
    ]


def default_parameters(**overrides) -> dict:
    values = {
        "minimum_wage": "200000",
        "cnaps_ostie_ceiling": "500000",
        "cnaps_employee_rate": "0.01",
        "cnaps_employer_rate": "0.13",
        "ostie_employee_rate": "0.01",
        "ostie_employer_rate": "0.05",
    }
    values.update(overrides)
    return values


@pytest.fixture
def memory_config():
    """Reference configuration: ceiling 500,000, CNAPS 1%/13%, OSTIE 1%/5%."""
    return InMemoryConfigProvider(default_parameters(), default_brackets())


@pytest.fixture
def bracket_rules():
    return default_brackets


# API fixtures
def make_token(user_id: int, roles: List[str]) -> str:
    settings = get_settings()
    return jwt.encode(
        {"sub": str(user_id), "roles": roles},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def auth_headers(user_id: int, *roles: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, list(roles))}"}


@pytest.fixture
def hr_headers():
    return auth_headers(HR_USER_ID, "hr")


@pytest.fixture
def accountant_headers():
    return auth_headers(ACCOUNTANT_USER_ID, "accountant")


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_USER_ID, "admin")


@pytest.fixture
def employee_directory():
    return StaticEmployeeDirectory({
        42: EmployeeProfile(employee_id=42, name="Rakoto Jean", position="Comptable", department="Finance"),
    })


@pytest.fixture
def app(seeded_db, employee_directory):
    app = FastAPI()
    app.include_router(payroll_router)
    register_payroll_exception_handlers(app)
    app.dependency_overrides[get_db] = lambda: seeded_db
    app.dependency_overrides[get_employee_directory] = lambda: employee_directory
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def config_factory():
    """Build an in-memory configuration with selected parameters overridden."""
    def build(brackets=None, **overrides):
        return InMemoryConfigProvider(
            default_parameters(**overrides),
            default_brackets() if brackets is None else brackets,
        )
    return build


@pytest.fixture
def headers_for():
    return auth_headers
