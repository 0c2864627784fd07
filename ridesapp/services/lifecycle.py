"""
Ride Lifecycle Manager
======================

Creates rides and moves them through

    pending -> accepted -> started -> completed
    pending | accepted -> cancelled

Status changes are explicit calls; nothing advances on a timer.  With
``strict_transitions=False`` any status may replace any other.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridesapp.domain.entities import Ride, RideDraft
from ridesapp.domain.enums import RideStatus, RideType
from ridesapp.domain.errors import NotFound
from ridesapp.infrastructure.locks import RideLockRegistry
from ridesapp.infrastructure.models import RideModel, to_utc, utcnow
from ridesapp.infrastructure.repositories import RideRepository
from ridesapp.services.base import RideLockingService

logger = logging.getLogger(__name__)


class RideLifecycleManager(RideLockingService):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: RideLockRegistry,
        strict_transitions: bool = True,
    ):
        super().__init__(session_factory, locks)
        self.strict_transitions = strict_transitions

    async def create_ride(self, rider_id: int, draft: RideDraft) -> RideModel:
        draft.validate()
        shared = draft.ride_type == RideType.SHARED

        ride = RideModel(
            ride_type=draft.ride_type,
            rider_id=rider_id,
            pickup_lat=draft.pickup.latitude,
            pickup_lng=draft.pickup.longitude,
            dropoff_lat=draft.dropoff.latitude,
            dropoff_lng=draft.dropoff.longitude,
            pickup_address=draft.pickup_address,
            dropoff_address=draft.dropoff_address,
            status=RideStatus.PENDING,
            price=draft.price,
            distance=draft.distance,
            duration=draft.duration,
            payment_method=draft.payment_method,
            seats_available=draft.seats_available if shared else 0,
            seats_booked=0,
            departure_time=to_utc(draft.departure_time) if shared else None,
        )
        async with self.transaction() as session:
            await RideRepository(session).create(ride)

        logger.info(
            "Ride %d created (%s) for rider %d", ride.id, ride.ride_type.value, rider_id
        )
        return ride

    async def update_status(self, ride_id: int, new_status: RideStatus) -> RideModel:
        """Move *ride_id* to *new_status*.

        Raises ``NotFound`` for an unknown ride and ``InvalidTransition``
        when the state machine forbids the move.
        """
        async with self.ride_lock(ride_id):
            async with self.transaction() as session:
                ride = await RideRepository(session).get_for_update(ride_id)
                if ride is None:
                    raise NotFound("Ride", ride_id)
                previous = RideStatus(ride.status)
                self._apply_status(ride, new_status)

        logger.info(
            "Ride %d status %s -> %s", ride_id, previous.value, new_status.value
        )
        return ride

    async def assign_driver(self, ride_id: int, driver_id: int) -> RideModel:
        """A driver accepts a pending ride."""
        async with self.ride_lock(ride_id):
            async with self.transaction() as session:
                ride = await RideRepository(session).get_for_update(ride_id)
                if ride is None:
                    raise NotFound("Ride", ride_id)
                self._apply_status(ride, RideStatus.ACCEPTED)
                ride.driver_id = driver_id

        logger.info("Driver %d accepted ride %d", driver_id, ride_id)
        return ride

    # ── Internals ─────────────────────────────────────────────────────

    def _apply_status(self, ride: RideModel, new_status: RideStatus) -> None:
        entity = Ride(
            id=ride.id,
            ride_type=ride.ride_type,
            rider_id=ride.rider_id,
            driver_id=ride.driver_id,
            status=RideStatus(ride.status),
        )
        entity.transition_to(new_status, strict=self.strict_transitions)

        ride.status = entity.status
        if new_status == RideStatus.STARTED:
            ride.started_at = utcnow()
        elif new_status == RideStatus.COMPLETED:
            ride.completed_at = utcnow()
