"""
FastAPI dependencies for authentication and authorization.

WHY: Dependencies provide reusable authentication and authorization logic
that can be injected into route handlers.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from receiptdesk.core.auth import TokenClaims, verify_token
from receiptdesk.core.exceptions import AuthError, AuthorizationError


# WHY: auto_error=False so a missing header surfaces as our AuthError (401)
# instead of Starlette's 403
security = HTTPBearer(auto_error=False)


async def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """
    Verify the bearer token and return its claims.

    Raises:
        AuthError: If the token is missing, expired, or signature-invalid
    """
    if credentials is None or not credentials.credentials:
        raise AuthError(message="Missing bearer token")

    return verify_token(credentials.credentials)


async def require_admin(
    claims: TokenClaims = Depends(get_current_claims),
) -> TokenClaims:
    """
    Require an admin token.

    Usage:
        @router.post("/receipts")
        async def create(admin: TokenClaims = Depends(require_admin)):
            ...

    Raises:
        AuthorizationError: If the token is not an admin token
    """
    if not claims.is_admin:
        raise AuthorizationError(
            message="Admin access required",
            token_type=claims.type,
        )
    return claims
