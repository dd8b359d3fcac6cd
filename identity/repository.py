"""Identity persistence.

Users are partitioned by role: username and email are unique within a role
only, so every lookup is scoped by ``user_type``. Creating an identity also
creates its role profile row in the same transaction.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional

import asyncpg

from database import get_pool, transaction, rows_affected
from errors import (
    DuplicateIdentity, IdentityNotFound, RepositoryError, UnsupportedRole
)
from .models import Role, Identity

logger = logging.getLogger(__name__)

IDENTITY_COLUMNS = 'id, user_type, username, email, password_hash, created_at, updated_at'

# Columns a profile update may touch, per role table
PROFILE_TABLES: Dict[Role, str] = {
    Role.CUSTOMER: 'customers',
    Role.SELLER: 'sellers',
}
PROFILE_COLUMNS: Dict[Role, tuple] = {
    Role.CUSTOMER: ('first_name', 'last_name', 'phone', 'date_birth', 'address'),
    Role.SELLER: ('company_name', 'rating'),
}


def _to_column_value(value: Any) -> Any:
    """Store calendar dates as UTC midnight timestamps."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


def _row_to_identity(row) -> Identity:
    return Identity(
        id=row['id'],
        user_type=Role(row['user_type']),
        username=row['username'],
        email=row['email'],
        password_hash=row['password_hash'],
        created_at=row['created_at'],
        updated_at=row['updated_at']
    )


class IdentityRepository:
    """Reads and writes users and their role profiles."""

    def __init__(self, pool=None):
        """Initialize identity repository.

        Args:
            pool: Optional database pool. If not provided, will get from database module.
        """
        self.pool = pool

    async def ensure_pool(self):
        """Ensure database pool is available."""
        if not self.pool:
            self.pool = await get_pool()

    async def _fetch_one(self, operation: str, query: str, *args) -> Identity:
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)
        except Exception as e:
            logger.error(f"Error during {operation}: {e}")
            raise RepositoryError(f"failed to {operation}", e)

        if not row:
            raise IdentityNotFound()
        return _row_to_identity(row)

    async def get_by_username(self, role: Role, username: str) -> Identity:
        """Get a user of the given role by username.

        Raises:
            IdentityNotFound: If no such user exists
            RepositoryError: If the query fails
        """
        return await self._fetch_one(
            'get user by username',
            f'SELECT {IDENTITY_COLUMNS} FROM users WHERE user_type = $1 AND username = $2',
            role.value,
            username
        )

    async def get_by_email(self, role: Role, email: str) -> Identity:
        """Get a user of the given role by email.

        Raises:
            IdentityNotFound: If no such user exists
            RepositoryError: If the query fails
        """
        return await self._fetch_one(
            'get user by email',
            f'SELECT {IDENTITY_COLUMNS} FROM users WHERE user_type = $1 AND email = $2',
            role.value,
            email
        )

    async def get_by_id(self, user_id) -> Identity:
        """Get a user by id.

        Raises:
            IdentityNotFound: If no such user exists
            RepositoryError: If the query fails
        """
        return await self._fetch_one(
            'get user by id',
            f'SELECT {IDENTITY_COLUMNS} FROM users WHERE id = $1',
            user_id
        )

    async def create(
        self,
        role: Role,
        username: str,
        email: str,
        password_hash: str
    ) -> Identity:
        """Create a user and its empty role profile in one transaction.

        Args:
            role: Role of the new user
            username: Username, unique within the role
            email: Email, unique within the role
            password_hash: Hashed password

        Returns:
            The created identity

        Raises:
            UnsupportedRole: If the role has no profile table
            DuplicateIdentity: If the username or email is taken within the role
            RepositoryError: If the insert fails
        """
        if role not in PROFILE_TABLES:
            raise UnsupportedRole()

        await self.ensure_pool()
        now = datetime.now(timezone.utc)

        try:
            async with transaction(self.pool) as conn:
                row = await conn.fetchrow(
                    f'''
                    INSERT INTO users (
                        user_type, username, email, password_hash,
                        created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $5)
                    RETURNING {IDENTITY_COLUMNS}
                    ''',
                    role.value,
                    username,
                    email,
                    password_hash,
                    now
                )
                await conn.execute(
                    f'INSERT INTO {PROFILE_TABLES[role]} (user_id) VALUES ($1)',
                    row['id']
                )
        except RepositoryError as e:
            if isinstance(e.cause, asyncpg.exceptions.UniqueViolationError):
                raise DuplicateIdentity(cause=e.cause)
            logger.error(f"Error creating user {username}: {e}")
            raise

        identity = _row_to_identity(row)
        logger.info(f"Created {role.value} {identity.id}")
        return identity

    async def update_credentials(
        self,
        user_id,
        email: Optional[str] = None,
        username: Optional[str] = None,
        password_hash: Optional[str] = None
    ) -> int:
        """Update the supplied credential fields of a user.

        Returns:
            Number of rows affected

        Raises:
            DuplicateIdentity: If the new username or email is taken within the role
            RepositoryError: If the update fails
        """
        fields = {
            'email': email,
            'username': username,
            'password_hash': password_hash,
        }
        updates = []
        params = [user_id]
        for column, value in fields.items():
            if value is None:
                continue
            params.append(value)
            updates.append(f"{column} = ${len(params)}")

        params.append(datetime.now(timezone.utc))
        updates.append(f"updated_at = ${len(params)}")

        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                status = await conn.execute(
                    f"UPDATE users SET {', '.join(updates)} WHERE id = $1",
                    *params
                )
        except asyncpg.exceptions.UniqueViolationError as e:
            raise DuplicateIdentity(cause=e)
        except Exception as e:
            logger.error(f"Error updating credentials for {user_id}: {e}")
            raise RepositoryError("failed to update user", e)

        count = rows_affected(status)
        if count == 0:
            logger.warning(f"Credential update for {user_id} affected no rows")
        return count

    async def update_profile(self, user_id, role: Role, fields: Dict[str, Any]) -> int:
        """Update the supplied profile fields and touch the user's updated_at.

        Both statements run in one transaction.

        Args:
            user_id: Owner of the profile
            role: Role selecting the profile table
            fields: Column values to write; unknown columns are ignored

        Returns:
            Number of profile rows affected

        Raises:
            UnsupportedRole: If the role has no profile table
            RepositoryError: If the update fails
        """
        if role not in PROFILE_TABLES:
            raise UnsupportedRole()

        updates = []
        params = [user_id]
        for column in PROFILE_COLUMNS[role]:
            if column not in fields:
                continue
            params.append(_to_column_value(fields[column]))
            updates.append(f"{column} = ${len(params)}")

        await self.ensure_pool()
        count = 0
        async with transaction(self.pool) as conn:
            if updates:
                status = await conn.execute(
                    f"UPDATE {PROFILE_TABLES[role]} SET {', '.join(updates)} "
                    "WHERE user_id = $1",
                    *params
                )
                count = rows_affected(status)
            await conn.execute(
                'UPDATE users SET updated_at = $2 WHERE id = $1',
                user_id,
                datetime.now(timezone.utc)
            )

        if updates and count == 0:
            logger.warning(f"Profile update for {user_id} affected no rows")
        return count

    async def delete(self, user_id) -> None:
        """Delete a user; profile, token and product rows cascade.

        Raises:
            IdentityNotFound: If the user does not exist
            RepositoryError: If the delete fails
        """
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                status = await conn.execute('DELETE FROM users WHERE id = $1', user_id)
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            raise RepositoryError("failed to delete user", e)

        if rows_affected(status) == 0:
            raise IdentityNotFound()
        logger.info(f"Deleted user {user_id}")


__all__ = ['IdentityRepository', 'PROFILE_COLUMNS']
