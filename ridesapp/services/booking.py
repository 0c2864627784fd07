"""
Seat Booking Engine
===================

Join / leave a shared ride while keeping

    0 <= seats_booked <= seats_available

under concurrent callers.

Concurrency safety
------------------
* A **ride-scoped lock** (``LocalRideLocks`` or ``RedisRideLocks``) is held
  around the whole check-then-act, so two joins on the same ride never both
  see the pre-update ``seats_booked``.
* Inside the transaction the ride row is re-read with
  **SELECT ... FOR UPDATE**, which serialises writers across processes on
  PostgreSQL even without the Redis registry.
* Serialization failures, deadlocks and lock timeouts reported by the store
  are retried up to ``max_attempts`` times with a linear backoff; after that
  the caller gets ``StorageFailure``.

Every join or leave commits the ride row and the passenger row together or
not at all.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridesapp.domain.entities import SeatLedger, validate_seats
from ridesapp.domain.enums import PassengerStatus, RideStatus
from ridesapp.domain.errors import (
    CapacityExceeded,
    NotFound,
    StorageFailure,
    ValidationError,
)
from ridesapp.infrastructure.locks import RideLockRegistry
from ridesapp.infrastructure.models import RidePassengerModel
from ridesapp.infrastructure.repositories import (
    PassengerRepository,
    RideRepository,
)
from ridesapp.services.base import RideLockingService, is_conflict

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SeatBookingEngine(RideLockingService):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: RideLockRegistry,
        max_attempts: int = 3,
        retry_backoff: float = 0.05,
    ):
        super().__init__(session_factory, locks)
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = retry_backoff

    # ── Public API ────────────────────────────────────────────────────

    async def join_ride(
        self, ride_id: int, user_id: int, seats: int
    ) -> RidePassengerModel:
        """Reserve *seats* on *ride_id* for *user_id*.

        Raises ``NotFound`` for an unknown ride, ``ValidationError`` unless the
        ride is still pending, and ``CapacityExceeded`` when it cannot take
        that many more passengers.
        """
        validate_seats(seats)

        async def work(session: AsyncSession) -> RidePassengerModel:
            ride = await RideRepository(session).get_for_update(ride_id)
            if ride is None:
                raise NotFound("Ride", ride_id)

            if ride.status != RideStatus.PENDING:
                raise ValidationError(
                    f"Ride {ride_id} is {RideStatus(ride.status).value}, only pending rides take passengers"
                )

            ledger = SeatLedger(ride.seats_available, ride.seats_booked)
            if not ledger.can_accommodate(seats):
                raise CapacityExceeded(ride_id, seats, ledger.remaining)

            ledger.book(seats)
            ride.seats_booked = ledger.seats_booked
            return await PassengerRepository(session).create(
                RidePassengerModel(
                    ride_id=ride_id,
                    user_id=user_id,
                    seats=seats,
                    status=PassengerStatus.CONFIRMED,
                )
            )

        async with self.ride_lock(ride_id):
            passenger = await self._run_with_retry(f"join ride {ride_id}", work)

        logger.info(
            "User %d booked %d seat(s) on ride %d (passenger %d)",
            user_id, seats, ride_id, passenger.id,
        )
        return passenger

    async def leave_ride(
        self, passenger_id: int, ride_id: Optional[int] = None
    ) -> None:
        """Drop a passenger and give its seats back to the ride.

        When *ride_id* is given the passenger must belong to that ride.
        """
        async with self.transaction() as session:
            passenger = await PassengerRepository(session).get_by_id(passenger_id)
        if passenger is None or ride_id not in (None, passenger.ride_id):
            raise NotFound("Passenger", passenger_id)
        ride_id = passenger.ride_id

        async def work(session: AsyncSession) -> int:
            # Re-read under the lock: a concurrent leave may have won.
            current = await PassengerRepository(session).get_for_update(passenger_id)
            if current is None:
                raise NotFound("Passenger", passenger_id)
            ride = await RideRepository(session).get_for_update(current.ride_id)
            if ride is None:
                raise NotFound("Ride", current.ride_id)

            ledger = SeatLedger(ride.seats_available, ride.seats_booked)
            if not ledger.release(current.seats):
                logger.warning(
                    "Seat counter underflow on ride %d: %d booked, releasing %d; "
                    "clamped to 0",
                    ride.id, ride.seats_booked, current.seats,
                )
            ride.seats_booked = ledger.seats_booked
            await PassengerRepository(session).delete(current)
            return current.seats

        async with self.ride_lock(ride_id):
            seats = await self._run_with_retry(
                f"leave passenger {passenger_id}", work
            )

        logger.info(
            "Passenger %d left ride %d, %d seat(s) released",
            passenger_id, ride_id, seats,
        )

    async def get_passengers_by_ride(self, ride_id: int) -> list[RidePassengerModel]:
        async with self.transaction() as session:
            return await PassengerRepository(session).list_by_ride(ride_id)

    # ── Internals ─────────────────────────────────────────────────────

    async def _run_with_retry(
        self,
        description: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run *work* in a fresh transaction, retrying store conflicts."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        return await work(session)
            except DBAPIError as exc:
                if not is_conflict(exc):
                    raise StorageFailure(str(exc)) from exc
                if attempt == self.max_attempts:
                    logger.error(
                        "Giving up on %s after %d attempts", description, attempt
                    )
                    raise StorageFailure(
                        f"Could not {description}: store kept reporting conflicts"
                    ) from exc
                logger.warning(
                    "Conflict on %s (attempt %d/%d), retrying",
                    description, attempt, self.max_attempts,
                )
                await asyncio.sleep(self.retry_backoff * attempt)
            except SQLAlchemyError as exc:
                raise StorageFailure(str(exc)) from exc
        raise AssertionError("unreachable")
