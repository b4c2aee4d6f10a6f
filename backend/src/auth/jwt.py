"""JWT token generation and validation

Tokens are issued by the identity provider and verified here. The service
never stores users; every claim it needs travels in the token.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): User ID as issued by the identity provider
  Example: "u-4821"
  Purpose: Identifies the submitter of a request

- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires (iat + JWT_EXPIRY_MINUTES)

Custom Claims:
- branch_code: Branch the user works at
  Example: "IST-04"
  Purpose: Scopes requests and notifications for branch users

- is_manager: Whether the user manages all branches
  Purpose: Grants status updates, analytics and retention operations

- email: Optional e-mail address, used for display and logging

Example Token Payload:
{
  "sub": "u-4821",
  "branch_code": "IST-04",
  "is_manager": false,
  "email": "staff@branch.example",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from config import get_settings


def create_access_token(
    user_id: str,
    branch_code: str,
    is_manager: bool = False,
    email: Optional[str] = None,
    expires_in_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token.

    Used by tests and local tooling; production tokens come from the
    identity provider signed with the same secret.

    Args:
        user_id: Identity provider user id
        branch_code: Branch the user belongs to
        is_manager: Manager flag
        email: Optional e-mail address
        expires_in_minutes: Overrides JWT_EXPIRY_MINUTES (negative yields an expired token)

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    expiry_minutes = (
        settings.JWT_EXPIRY_MINUTES if expires_in_minutes is None else expires_in_minutes
    )

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=expiry_minutes)

    payload = {
        'sub': str(user_id),
        'branch_code': branch_code,
        'is_manager': bool(is_manager),
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }
    if email:
        payload['email'] = email

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = get_settings()

    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
