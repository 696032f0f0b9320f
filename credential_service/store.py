"""
Credential store: the users table behind a bounded connection pool.

Every operation returns a Result. Connections are checked out of the engine's
pool per operation and go back on every exit path.
"""
from sqlalchemy import insert, select, text
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from typing import Optional
import asyncio
import logging

from .db import Base
from .models import Account
from .result import ErrorKind, Result
from .schemas import AccountRecord

logger = logging.getLogger(__name__)

users = Account.__table__

# MySQL ER_DUP_ENTRY / PostgreSQL unique_violation
MYSQL_DUPLICATE_ENTRY = 1062
PG_UNIQUE_VIOLATION = "23505"

_UNAVAILABLE_ERRORS = (
    asyncio.TimeoutError,
    PoolTimeoutError,
    OperationalError,
    InterfaceError,
    DisconnectionError,
)


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if PG_UNIQUE_VIOLATION in (getattr(orig, "sqlstate", None), getattr(orig, "pgcode", None)):
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    return "UNIQUE constraint failed" in str(orig)


def _classify(exc: Exception, default: ErrorKind) -> ErrorKind:
    if isinstance(exc, IntegrityError) and _is_unique_violation(exc):
        return ErrorKind.DUPLICATE_USERNAME
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return ErrorKind.STORE_UNAVAILABLE
    return default


class StoreConnection:
    """A single pooled connection checked out of the credential store."""

    def __init__(self, conn: AsyncConnection, query_timeout: float):
        self._conn = conn
        self._query_timeout = query_timeout
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def _execute(self, statement):
        return await asyncio.wait_for(self._conn.execute(statement), self._query_timeout)

    async def find_by_username(self, username: str) -> Result[Optional[AccountRecord]]:
        """
        Exact-match lookup by username.

        Returns:
            Result whose value is the AccountRecord, or None when no account matches
        """
        statement = select(
            users.c.id,
            users.c.username,
            users.c.password.label("password_hash"),
            users.c.email,
            users.c.phone,
            users.c.created_at,
        ).where(users.c.username == username)
        try:
            row = (await self._execute(statement)).first()
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error("Account lookup failed: %s", e)
            return Result.failure(_classify(e, ErrorKind.STORE_UNAVAILABLE), str(e))
        if row is None:
            return Result.success(None)
        return Result.success(AccountRecord.model_validate(dict(row._mapping)))

    async def insert(
        self,
        username: str,
        password_hash: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Result[int]:
        """
        Insert a new account and commit.

        Returns:
            Result whose value is the new account id. A unique-constraint
            violation yields DUPLICATE_USERNAME, connectivity problems
            STORE_UNAVAILABLE, anything else REGISTRATION_FAILED.
        """
        statement = insert(users).values(
            username=username,
            password=password_hash,
            email=email,
            phone=phone,
        )
        try:
            result = await self._execute(statement)
            await asyncio.wait_for(self._conn.commit(), self._query_timeout)
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            kind = _classify(e, ErrorKind.REGISTRATION_FAILED)
            logger.error("Database insert error (%s): %s", kind.value, e)
            await self._rollback()
            return Result.failure(kind, str(e))
        return Result.success(result.inserted_primary_key[0])

    async def ping(self) -> Result[bool]:
        try:
            await self._execute(text("SELECT 1"))
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error("Database connection check failed: %s", e)
            return Result.failure(ErrorKind.STORE_UNAVAILABLE, str(e))
        return Result.success(True)

    async def _rollback(self) -> None:
        try:
            await self._conn.rollback()
        except SQLAlchemyError as e:
            logger.warning("Rollback after failed insert did not complete: %s", e)

    async def release(self) -> None:
        """Return the connection to the pool. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        try:
            await self._conn.close()
        except SQLAlchemyError as e:
            logger.warning("Error while releasing connection: %s", e)


class CredentialStore:
    """
    Durable table of accounts accessed through a bounded connection pool.

    The store owns its engine; construct one per process and hand it to the
    AuthService.
    """

    def __init__(self, engine: AsyncEngine, acquire_timeout: float = 10.0, query_timeout: float = 10.0):
        self._engine = engine
        self._acquire_timeout = acquire_timeout
        self._query_timeout = query_timeout

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def ensure_schema(self) -> Result[None]:
        """
        Create the users table if it does not exist yet.

        Idempotent. A failure is reported, not raised, so the process can start
        degraded and fail individual operations later.
        """
        try:
            async with self._engine.begin() as conn:
                await asyncio.wait_for(conn.run_sync(Base.metadata.create_all), self._query_timeout)
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error("Error initializing database: %s", e)
            return Result.failure(ErrorKind.STORE_UNAVAILABLE, str(e))
        logger.info("Database table initialized successfully")
        return Result.success()

    async def acquire(self) -> Result[StoreConnection]:
        """
        Check a connection out of the pool.

        The caller owns the returned StoreConnection and must release() it.
        """
        conn = self._engine.connect()
        try:
            await asyncio.wait_for(conn.start(), self._acquire_timeout)
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error("Could not acquire database connection: %s", e)
            return Result.failure(ErrorKind.STORE_UNAVAILABLE, str(e))
        return Result.success(StoreConnection(conn, self._query_timeout))

    async def find_by_username(self, username: str) -> Result[Optional[AccountRecord]]:
        acquired = await self.acquire()
        if not acquired.ok:
            return Result.failure(acquired.error, acquired.detail)
        connection = acquired.value
        try:
            return await connection.find_by_username(username)
        finally:
            await connection.release()

    async def insert(
        self,
        username: str,
        password_hash: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Result[int]:
        acquired = await self.acquire()
        if not acquired.ok:
            return Result.failure(acquired.error, acquired.detail)
        connection = acquired.value
        try:
            return await connection.insert(username, password_hash, email, phone)
        finally:
            await connection.release()

    async def ping(self) -> Result[bool]:
        acquired = await self.acquire()
        if not acquired.ok:
            return Result.failure(acquired.error, acquired.detail)
        connection = acquired.value
        try:
            return await connection.ping()
        finally:
            await connection.release()

    async def dispose(self) -> None:
        await self._engine.dispose()
