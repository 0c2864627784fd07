"""
Read-only ride queries.

Single-ride lookups raise ``NotFound``; collection queries return an empty
list when nothing matches.  Every ride comes back with its rider, driver and
passengers (with their users) already loaded.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ridesapp.domain.enums import UserRole
from ridesapp.domain.errors import NotFound
from ridesapp.infrastructure.models import RideModel, to_utc, utcnow
from ridesapp.infrastructure.repositories import RideRepository
from ridesapp.services.base import TransactionalService


class RideQueryService(TransactionalService):
    async def get_ride(self, ride_id: int) -> RideModel:
        async with self.transaction() as session:
            ride = await RideRepository(session).get_with_details(ride_id)
        if ride is None:
            raise NotFound("Ride", ride_id)
        return ride

    async def get_rides_by_rider(self, rider_id: int) -> list[RideModel]:
        async with self.transaction() as session:
            return await RideRepository(session).list_by_rider(rider_id)

    async def get_rides_by_driver(self, driver_id: int) -> list[RideModel]:
        async with self.transaction() as session:
            return await RideRepository(session).list_by_driver(driver_id)

    async def get_rides_for_user(self, user_id: int, role: UserRole) -> list[RideModel]:
        """Riders see the rides they booked, drivers the rides they drive."""
        if role == UserRole.DRIVER:
            return await self.get_rides_by_driver(user_id)
        return await self.get_rides_by_rider(user_id)

    async def get_available_shared_rides(self) -> list[RideModel]:
        async with self.transaction() as session:
            return await RideRepository(session).list_available_shared()

    async def get_upcoming_shared_rides(
        self, now: Optional[datetime] = None
    ) -> list[RideModel]:
        cutoff = to_utc(now) or utcnow()
        async with self.transaction() as session:
            return await RideRepository(session).list_upcoming_shared(cutoff)
