"""Shared unit-of-work plumbing for the ride services."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridesapp.domain.errors import StorageFailure
from ridesapp.infrastructure.locks import LockNotAcquired, RideLockRegistry

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})


def is_conflict(exc: DBAPIError) -> bool:
    """True for errors a fresh transaction may succeed on."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in RETRYABLE_SQLSTATES:
        return True
    # SQLite reports writer contention as a plain OperationalError
    return "database is locked" in str(orig)


class TransactionalService:
    """Base for services that own one session per operation."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on success, roll back on any error.

        Store errors are re-raised as ``StorageFailure``; domain errors pass
        through unchanged.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            raise StorageFailure(str(exc)) from exc


class RideLockingService(TransactionalService):
    """Service whose writes must serialise per ride."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: RideLockRegistry,
    ):
        super().__init__(session_factory)
        self.locks = locks

    @asynccontextmanager
    async def ride_lock(self, ride_id: int) -> AsyncIterator[None]:
        try:
            async with self.locks.hold(ride_id):
                yield
        except LockNotAcquired as exc:
            raise StorageFailure(str(exc)) from exc
