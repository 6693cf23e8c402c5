"""FastAPI dependencies shared by the payroll routers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from ..services.config_provider import ConfigProvider, DatabaseConfigProvider


def get_config_provider(db: Session = Depends(get_db)) -> ConfigProvider:
    """One provider per request, so a request sees one configuration snapshot."""
    return DatabaseConfigProvider(db)
