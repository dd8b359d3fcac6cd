"""Database module for managing connections to PostgreSQL.

This module handles:
- Database connection pool initialization
- Schema management
- Connection lifecycle
- Transaction scoping for repositories
"""

import logging
import re
from contextlib import asynccontextmanager
from typing import Optional, Dict, Any, AsyncIterator
import backoff
import asyncpg

from errors import AppError, RepositoryError
from .exceptions import DatabaseError, DatabaseSchemaError
from .lib.schema_manager import SchemaManager

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None
_schema_manager: Optional[SchemaManager] = None

# Reset connection after this many queries
MAX_QUERIES = 50000
# Close connections idle for 30 minutes
MAX_INACTIVE_CONNECTION_LIFETIME = 1800.0
COMMAND_TIMEOUT = 60.0

_ROWS_AFFECTED_RE = re.compile(r'(\d+)$')

def build_dsn(db_settings: Dict[str, Any]) -> str:
    """Build a postgres DSN from the [db] settings section.

    Args:
        db_settings: Mapping with user, password, host, port, name and sslmode

    Returns:
        Connection URL understood by asyncpg
    """
    password = f":{db_settings['password']}" if db_settings.get('password') else ''
    return (
        f"postgresql://{db_settings['user']}{password}"
        f"@{db_settings['host']}:{db_settings['port']}/{db_settings['name']}"
        f"?sslmode={db_settings.get('sslmode', 'disable')}"
    )

@backoff.on_exception(
    backoff.expo,
    (asyncpg.exceptions.PostgresConnectionError, asyncpg.exceptions.CannotConnectNowError, OSError),
    max_tries=5
)
async def init_db(db_settings: Optional[Dict[str, Any]] = None) -> asyncpg.Pool:
    """Initialize the database connection pool and schema.

    Args:
        db_settings: Optional [db] settings section. If not provided, will use settings.

    Returns:
        The initialized connection pool

    Raises:
        DatabaseSchemaError: If the schema cannot be applied
        Exception: If initialization fails after retries
    """
    global _pool, _schema_manager

    if _pool:
        return _pool

    if db_settings is None:
        # Import here to avoid loading settings at import time
        from config import get_settings_conf
        db_settings = get_settings_conf()['db']

    pool = None
    try:
        pool = await asyncpg.create_pool(
            build_dsn(db_settings),
            min_size=int(db_settings.get('min_pool_size', 5)),
            max_size=int(db_settings.get('max_pool_size', 20)),
            max_queries=MAX_QUERIES,
            max_inactive_connection_lifetime=MAX_INACTIVE_CONNECTION_LIFETIME,
            command_timeout=COMMAND_TIMEOUT
        )
        logger.info(
            f"Connected to database {db_settings['name']} at "
            f"{db_settings['host']}:{db_settings['port']}"
        )

        schema_manager = SchemaManager(pool)
        await schema_manager.initialize()

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        if pool is not None:
            await pool.close()
        raise

    _pool = pool
    _schema_manager = schema_manager
    return _pool

async def get_pool() -> asyncpg.Pool:
    """Get the database connection pool.

    Returns:
        The connection pool

    Raises:
        RuntimeError: If pool hasn't been initialized
    """
    if not _pool:
        await init_db()
    if not _pool:
        raise RuntimeError("Failed to initialize database pool")
    return _pool

async def close() -> None:
    """Close the database connection pool."""
    global _pool, _schema_manager

    if _pool:
        await _pool.close()
        _pool = None
        _schema_manager = None
        logger.info("Database pool closed")

@asynccontextmanager
async def transaction(pool) -> AsyncIterator[asyncpg.Connection]:
    """Run the enclosed statements in a single transaction.

    Acquires a connection, begins a transaction and commits when the block
    exits cleanly. On failure the transaction is rolled back and the error is
    re-raised as a RepositoryError; if the rollback itself fails, that
    failure is raised in place of the original one.

    Args:
        pool: Database connection pool

    Yields:
        The connection bound to the open transaction

    Raises:
        RepositoryError: If any statement, the commit or the rollback fails
    """
    async with pool.acquire() as conn:
        tx = conn.transaction()
        try:
            await tx.start()
        except Exception as e:
            logger.error(f"Failed to begin transaction: {e}")
            raise RepositoryError("failed to begin transaction", e)

        try:
            yield conn
        except Exception as e:
            try:
                await tx.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback failed after error {e}: {rollback_error}")
                raise RepositoryError("failed to rollback transaction", rollback_error)
            if isinstance(e, AppError):
                raise
            raise RepositoryError("transaction failed", e)

        try:
            await tx.commit()
        except Exception as e:
            logger.error(f"Failed to commit transaction: {e}")
            raise RepositoryError("failed to commit transaction", e)

def rows_affected(status: str) -> int:
    """Parse the row count from an asyncpg command status such as 'UPDATE 3'."""
    match = _ROWS_AFFECTED_RE.search(status or '')
    return int(match.group(1)) if match else 0

# Export public interface
__all__ = [
    'init_db',
    'get_pool',
    'close',
    'transaction',
    'rows_affected',
    'build_dsn',
    'DatabaseError',
    'DatabaseSchemaError',
]
