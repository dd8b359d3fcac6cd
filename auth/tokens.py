"""Refresh token storage.

Each user owns at most one refresh token record. Storing a new token
replaces the previous one atomically, which revokes any earlier session.
"""
import logging
from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel

from database import get_pool, rows_affected
from errors import RepositoryError, TokenNotFound

logger = logging.getLogger(__name__)


class RefreshTokenRecord(BaseModel):
    user_id: UUID
    token: str
    expires_at: datetime
    is_revoked: bool = False


class TokenStore:
    """Single-slot refresh token store keyed by user id."""

    def __init__(self, pool=None):
        """Initialize token store.

        Args:
            pool: Optional database pool. If not provided, will get from database module.
        """
        self.pool = pool

    async def ensure_pool(self):
        """Ensure database pool is available."""
        if not self.pool:
            self.pool = await get_pool()

    async def get(self, user_id) -> RefreshTokenRecord:
        """Get the refresh token record of a user.

        Raises:
            TokenNotFound: If the user has no stored token
            RepositoryError: If the query fails
        """
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    '''
                    SELECT user_id, token, expires_at, is_revoked
                    FROM tokens
                    WHERE user_id = $1
                    ''',
                    user_id
                )
        except Exception as e:
            logger.error(f"Error fetching refresh token for {user_id}: {e}")
            raise RepositoryError("failed to get refresh token", e)

        if not row:
            raise TokenNotFound()

        return RefreshTokenRecord(
            user_id=row['user_id'],
            token=row['token'],
            expires_at=row['expires_at'],
            is_revoked=row['is_revoked']
        )

    async def upsert(self, record: RefreshTokenRecord) -> None:
        """Store a refresh token, replacing any previous one for the user.

        Raises:
            RepositoryError: If the write fails
        """
        await self.ensure_pool()
        now = datetime.now(timezone.utc)
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    '''
                    INSERT INTO tokens (
                        user_id, token, expires_at, is_revoked,
                        created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $5)
                    ON CONFLICT (user_id) DO UPDATE SET
                        token = EXCLUDED.token,
                        expires_at = EXCLUDED.expires_at,
                        is_revoked = EXCLUDED.is_revoked,
                        updated_at = EXCLUDED.updated_at
                    ''',
                    record.user_id,
                    record.token,
                    record.expires_at,
                    record.is_revoked,
                    now
                )
        except Exception as e:
            logger.error(f"Error storing refresh token for {record.user_id}: {e}")
            raise RepositoryError("failed to store refresh token", e)

    async def revoke(self, user_id) -> None:
        """Mark the refresh token of a user as revoked.

        Raises:
            TokenNotFound: If the user has no stored token
            RepositoryError: If the update fails
        """
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                status = await conn.execute(
                    '''
                    UPDATE tokens
                    SET is_revoked = true, updated_at = $2
                    WHERE user_id = $1
                    ''',
                    user_id,
                    datetime.now(timezone.utc)
                )
        except Exception as e:
            logger.error(f"Error revoking refresh token for {user_id}: {e}")
            raise RepositoryError("failed to revoke refresh token", e)

        if rows_affected(status) == 0:
            raise TokenNotFound()
        logger.info(f"Revoked refresh token for {user_id}")
