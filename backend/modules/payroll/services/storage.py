"""
Translation of low-level database failures into payroll storage errors.
"""

import functools
import logging
from typing import Callable, Any

from sqlalchemy.exc import DBAPIError, IntegrityError

from ..exceptions import StorageError

logger = logging.getLogger(__name__)


def translate_storage_errors(operation: str) -> Callable:
    """
    Decorator for service methods: roll back the session and raise
    ``StorageError`` when the database is unavailable or rejects a statement.

    The wrapped method's instance must expose the session as ``self.db``.
    Integrity violations pass through untouched; the methods that can hit
    them map them to business errors themselves.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> Any:
            try:
                return func(self, *args, **kwargs)
            except IntegrityError:
                raise
            except DBAPIError as e:
                logger.error(f"Storage failure during {operation}: {e.orig or e}")
                self.db.rollback()
                raise StorageError(str(e.orig or e), operation=operation) from e

        return wrapper

    return decorator
