"""
Bearer-token authentication and role-based authorization for the payroll API.

Tokens are issued by the platform's identity service. This module only
verifies them and exposes the caller as a ``User`` carrying its roles.
"""

import logging
from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from .config import get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: int
    username: Optional[str] = None
    roles: List[str] = []


class User(BaseModel):
    """Authenticated caller."""

    id: int
    username: Optional[str] = None
    roles: List[str] = []

    def has_role(self, role: str) -> bool:
        return "admin" in self.roles or role in self.roles


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> Optional[TokenData]:
    """
    Verify and decode a JWT access token.

    Returns:
        TokenData if valid, None otherwise
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.warning(f"Token subject is not a user id: {subject!r}")
        return None

    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return TokenData(user_id=user_id, username=payload.get("username"), roles=list(roles))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Resolve the current authenticated user from the bearer token."""
    if credentials is None:
        raise _credentials_exception()

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise _credentials_exception()

    return User(id=token_data.user_id, username=token_data.username, roles=token_data.roles)


def require_roles(required_roles: List[str]):
    """Enforce that the current user holds at least one of the specified roles."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not any(user.has_role(role) for role in required_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Operation requires one of these roles: {required_roles}",
            )
        return user

    return dependency


# Common role dependencies
require_admin = require_roles(["admin"])
require_hr = require_roles(["hr"])
require_accountant = require_roles(["accountant"])
