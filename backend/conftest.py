"""
Pytest configuration file for backend testing.
"""
import os
import sys
from pathlib import Path

# Settings are read once at import time; point them at throwaway resources
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-payroll-tests")
os.environ.setdefault("PAYROLL_SIGNING_KEY", "test-payroll-signing-key-0123456789")
os.environ.setdefault("ENVIRONMENT", "test")

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Import all models to register them with SQLAlchemy
from modules.payroll.models import payroll_models, payroll_configuration  # noqa: E402,F401
