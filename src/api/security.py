"""Bearer-token authentication dependencies."""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_user_repo
from domain.model.errors import InvalidTokenError
from domain.model.user import User
from port.user_repository import UserRepository
from services import session_service

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_repo: UserRepository = Depends(get_user_repo),
) -> User:
    """Get current authenticated user (required). Raises 401 if not authenticated."""
    if not credentials:
        raise _unauthorized("No authentication token, access denied")

    try:
        claims = session_service.verify(credentials.credentials)
    except InvalidTokenError as e:
        raise _unauthorized(e.message)

    user = user_repo.get_by_id(claims.user_id)
    if not user:
        raise _unauthorized("User not found")

    return user
