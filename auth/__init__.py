"""Authentication module using passwords and signed session tokens.

This module provides:
1. Password hashing and account lifecycle (AuthService)
2. Access and refresh tokens with a single active session per user
3. FastAPI dependencies resolving the request context and enforcing roles
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from errors import InvalidToken, PermissionDenied
from identity.models import Role
from .hasher import PasswordHasher
from .service import AuthService
from .session import SessionManager, TokenClaims, TokenPair
from .tokens import RefreshTokenRecord, TokenStore

# Configure logging
logger = logging.getLogger(__name__)


class RequestContext(BaseModel):
    """Authenticated caller of one request."""
    user_id: UUID
    role: Role


# FastAPI security scheme; missing credentials are reported through InvalidToken
auth_scheme = HTTPBearer(
    auto_error=False,
    description="JWT Bearer access token required"
)


async def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme)
) -> RequestContext:
    """FastAPI dependency resolving the authenticated caller.

    Args:
        request: The FastAPI request
        credentials: Bearer token credentials

    Returns:
        The request context of the token's user

    Raises:
        InvalidToken: If the token is missing or fails verification
    """
    if credentials is None or not credentials.credentials:
        raise InvalidToken("missing bearer token")

    sessions: SessionManager = request.app.state.sessions
    claims: TokenClaims = sessions.verify_access_token(credentials.credentials)
    return RequestContext(user_id=claims.user_id, role=claims.user_type)


def require_role(role: Role) -> Callable:
    """Build a dependency admitting only callers of the given role.

    Raises:
        PermissionDenied: If the caller has another role
    """
    async def dependency(
        context: RequestContext = Depends(get_request_context)
    ) -> RequestContext:
        if context.role != role:
            logger.warning(f"User {context.user_id} with role {context.role.value} denied {role.value} route")
            raise PermissionDenied(f"{role.value} role required")
        return context

    return dependency


# Export public interface
__all__ = [
    'AuthService',
    'PasswordHasher',
    'RefreshTokenRecord',
    'RequestContext',
    'SessionManager',
    'TokenClaims',
    'TokenPair',
    'TokenStore',
    'auth_scheme',
    'get_request_context',
    'require_role',
]
