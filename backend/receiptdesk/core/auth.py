"""
JWT verification utilities.

WHY: Token issuance belongs to an external identity flow; this service only
verifies bearer tokens into claims. ``create_access_token`` is kept for
operators' tooling and for tests.

Claims carried by a token:
- email: identity of the caller
- client_id: set for client-portal tokens (read access to one Client)
- type: "admin" for administrative tokens
"""

from datetime import datetime, timedelta
from typing import Dict, Any, Optional

from jose import jwt, JWTError
from pydantic import BaseModel

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)

ADMIN_TOKEN_TYPE = "admin"


class TokenClaims(BaseModel):
    """Verified claims extracted from a bearer token."""

    email: str
    client_id: Optional[str] = None
    type: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.type == ADMIN_TOKEN_TYPE


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT.

    Args:
        data: Claims to encode (email, client_id, type)
        expires_delta: Optional custom expiration time

    Returns:
        JWT token string

    Example:
        >>> token = create_access_token({"email": "me@example.com", "type": "admin"})
        >>> verify_token(token).is_admin
        True
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.utcnow(),
            "nbf": datetime.utcnow(),
        }
    )

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> TokenClaims:
    """
    Verify a JWT and return its claims.

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed, signature is invalid,
            or the email claim is missing
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError(message="Token has expired")
    except JWTError as e:
        raise TokenInvalidError(message="Invalid token", error=str(e))

    email = payload.get("email")
    if not email:
        raise TokenInvalidError(message="Invalid token: missing email claim")

    return TokenClaims(
        email=email,
        client_id=payload.get("client_id") or payload.get("clientId"),
        type=payload.get("type"),
    )
