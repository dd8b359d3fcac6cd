"""Session management with signed access and refresh tokens.

Access tokens are short lived and verified statelessly. Refresh tokens are
long lived and backed by the token store: only the most recently issued
refresh token of a user is accepted, and it stops working once revoked.

Both token kinds carry the same claims:
    user_id: Id of the authenticated user
    user_type: Role of the user
    iat / exp: Issue and expiry time as unix timestamps
    jti: Random token id, so two tokens issued in the same second differ
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict
from uuid import UUID

from jose import jwt
from pydantic import BaseModel

from errors import (
    AppError,
    InvalidSignature,
    MalformedClaims,
    RefreshTokenExpired,
    RefreshTokenMismatch,
    RefreshTokenRevoked,
    TokenExpired,
    TokenGenerationError,
    TokenNotFound,
    TokenPersistenceError,
)
from identity.models import Identity, Role
from .tokens import RefreshTokenRecord, TokenStore

logger = logging.getLogger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_MINUTES = 15
REFRESH_TOKEN_DAYS = 30


class TokenClaims(BaseModel):
    user_id: UUID
    user_type: Role
    issued_at: datetime
    expires_at: datetime


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Issues and verifies access and refresh tokens."""

    def __init__(
        self,
        token_store: TokenStore,
        secret_key: str,
        access_ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_MINUTES),
        refresh_ttl: timedelta = timedelta(days=REFRESH_TOKEN_DAYS),
        clock: Callable[[], datetime] = _utcnow
    ):
        """Initialize session manager.

        Args:
            token_store: Store holding the current refresh token per user
            secret_key: HMAC secret used to sign tokens
            access_ttl: Lifetime of access tokens
            refresh_ttl: Lifetime of refresh tokens
            clock: Returns the current aware UTC time
        """
        self.token_store = token_store
        self._secret_key = secret_key
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, token_store: TokenStore, jwt_settings: Dict[str, Any]) -> 'SessionManager':
        """Build a session manager from the [jwt] settings section."""
        return cls(
            token_store,
            jwt_settings['secret_key'],
            access_ttl=timedelta(minutes=int(jwt_settings['access_token_minutes'])),
            refresh_ttl=timedelta(days=int(jwt_settings['refresh_token_days']))
        )

    def _sign(self, identity: Identity, ttl: timedelta):
        issued_at = self._clock()
        expires_at = issued_at + ttl
        claims = {
            'user_id': str(identity.id),
            'user_type': identity.user_type.value,
            'iat': int(issued_at.timestamp()),
            'exp': int(expires_at.timestamp()),
            'jti': uuid.uuid4().hex,
        }
        try:
            token = jwt.encode(claims, self._secret_key, algorithm=JWT_ALGORITHM)
        except Exception as e:
            logger.error(f"Failed to sign token for {identity.id}: {e}")
            raise TokenGenerationError(cause=e)
        return token, expires_at

    def issue_access_token(self, identity: Identity) -> str:
        """Issue a short-lived access token.

        Raises:
            TokenGenerationError: If signing fails
        """
        token, _ = self._sign(identity, self.access_ttl)
        return token

    async def issue_refresh_token(self, identity: Identity) -> str:
        """Issue a refresh token and make it the user's only valid one.

        Raises:
            TokenGenerationError: If signing fails
            TokenPersistenceError: If the token cannot be stored
        """
        token, expires_at = self._sign(identity, self.refresh_ttl)
        record = RefreshTokenRecord(
            user_id=identity.id,
            token=token,
            expires_at=expires_at,
            is_revoked=False
        )
        try:
            await self.token_store.upsert(record)
        except AppError as e:
            logger.error(f"Failed to persist refresh token for {identity.id}: {e}")
            raise TokenPersistenceError(cause=e)
        return token

    async def issue_token_pair(self, identity: Identity) -> TokenPair:
        """Issue an access token and a fresh refresh token."""
        access_token = self.issue_access_token(identity)
        refresh_token = await self.issue_refresh_token(identity)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def _parse(self, token: str) -> TokenClaims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.JWTError as e:
            raise InvalidSignature(cause=e)

        algorithm = str(header.get('alg', ''))
        if not algorithm.startswith('HS'):
            raise InvalidSignature(f"unexpected signing method: {algorithm}")

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired(cause=e)
        except jwt.JWTClaimsError as e:
            raise MalformedClaims(cause=e)
        except jwt.JWTError as e:
            raise InvalidSignature(cause=e)

        try:
            return TokenClaims(
                user_id=UUID(str(payload['user_id'])),
                user_type=Role(payload['user_type']),
                issued_at=datetime.fromtimestamp(int(payload['iat']), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload['exp']), tz=timezone.utc)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedClaims(cause=e)

    def verify_access_token(self, token: str) -> TokenClaims:
        """Verify an access token without touching the store.

        Raises:
            InvalidSignature: On a non-HMAC signing method, bad signature or unparsable token
            TokenExpired: If the token is past its expiry
            MalformedClaims: If user_id or user_type are missing or invalid
        """
        # Access and refresh tokens carry the same claims, so a refresh token
        # also passes here, even after revocation, until its own expiry.
        # TODO: add a token type claim and reject refresh tokens on bearer routes
        return self._parse(token)

    async def verify_refresh_token(self, token: str) -> TokenClaims:
        """Verify a refresh token against the stored record.

        Raises:
            InvalidSignature, TokenExpired, MalformedClaims: As for access tokens
            RefreshTokenMismatch: If no record exists or it holds another token
            RefreshTokenExpired: If the stored record has expired
            RefreshTokenRevoked: If the stored record was revoked
            RepositoryError: If the store cannot be read
        """
        claims = self._parse(token)

        try:
            record = await self.token_store.get(claims.user_id)
        except TokenNotFound:
            raise RefreshTokenMismatch()

        if record.token != token:
            raise RefreshTokenMismatch()
        if record.expires_at <= self._clock():
            raise RefreshTokenExpired()
        if record.is_revoked:
            raise RefreshTokenRevoked()

        return claims

    async def revoke_refresh_token(self, user_id) -> None:
        """Revoke the stored refresh token of a user.

        Raises:
            TokenNotFound: If the user has no stored token
            RepositoryError: If the store write fails
        """
        await self.token_store.revoke(user_id)


__all__ = [
    'SessionManager',
    'TokenClaims',
    'TokenPair',
    'JWT_ALGORITHM',
]
