"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating JWT tokens from requests
- Building the current user from token claims
- Enforcing manager-only access

Usage:
    @router.get("/requests")
    async def list_requests(user: CurrentUser = Depends(get_current_user)):
        ...

    @router.get("/cleanup")
    async def stats(manager: CurrentUser = Depends(require_manager)):
        ...
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .jwt import decode_token


# HTTP Bearer token security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller, read from token claims."""
    user_id: str
    branch_code: str
    is_manager: bool = False
    email: Optional[str] = None


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Extract and validate the bearer token, returning the caller.

    Raises:
        HTTPException 401: If token is missing, invalid, expired or lacks claims
    """
    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    branch_code = payload.get("branch_code")
    if not user_id or not branch_code:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user or branch claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(
        user_id=str(user_id),
        branch_code=str(branch_code),
        is_manager=bool(payload.get("is_manager", False)),
        email=payload.get("email"),
    )


def require_manager(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only managers through.

    Raises:
        HTTPException 403: If the caller is not a manager
    """
    if not current_user.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Manager access required",
        )
    return current_user
