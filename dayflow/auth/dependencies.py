"""
DAYFLOW Planner API - Auth Dependencies

FastAPI dependencies that resolve the bearer token to the current user.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dayflow.auth.models import AuthenticatedUser
from dayflow.auth.service import AuthService


# HTTP Bearer token scheme - auto_error=False to handle missing tokens ourselves
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    """Dependency to get AuthService instance."""
    return AuthService()


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthenticatedUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user_id = auth_service.decode_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    return AuthenticatedUser(id=user_id)


# Type alias for cleaner dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
