"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Transaction boundaries belong to the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import RatingModel, RideModel, RidePassengerModel, UserModel
from ridesapp.domain.enums import RideStatus, RideType

# Rider, driver and every passenger's user, loaded eagerly so the ORM
# objects can be serialised after the session is gone.
_RIDE_DETAILS = (
    selectinload(RideModel.rider),
    selectinload(RideModel.driver),
    selectinload(RideModel.passengers).selectinload(RidePassengerModel.user),
)


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_for_update(self, ride_id: int) -> Optional[RideModel]:
        """SELECT ... FOR UPDATE so concurrent seat updates serialise on the row."""
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.id == ride_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_with_details(self, ride_id: int) -> Optional[RideModel]:
        result = await self.session.execute(
            select(RideModel).where(RideModel.id == ride_id).options(*_RIDE_DETAILS)
        )
        return result.scalar_one_or_none()

    async def list_by_rider(self, rider_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.rider_id == rider_id)
            .options(*_RIDE_DETAILS)
            .order_by(RideModel.id)
        )
        return list(result.scalars().all())

    async def list_by_driver(self, driver_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.driver_id == driver_id)
            .options(*_RIDE_DETAILS)
            .order_by(RideModel.id)
        )
        return list(result.scalars().all())

    async def list_available_shared(self) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(
                RideModel.ride_type == RideType.SHARED,
                RideModel.status == RideStatus.PENDING,
                RideModel.seats_booked < RideModel.seats_available,
            )
            .options(*_RIDE_DETAILS)
            .order_by(RideModel.departure_time, RideModel.id)
        )
        return list(result.scalars().all())

    async def list_upcoming_shared(self, now: datetime) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(
                RideModel.ride_type == RideType.SHARED,
                RideModel.status == RideStatus.PENDING,
                RideModel.departure_time > now,
            )
            .options(*_RIDE_DETAILS)
            .order_by(RideModel.departure_time, RideModel.id)
        )
        return list(result.scalars().all())


class PassengerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, passenger: RidePassengerModel) -> RidePassengerModel:
        self.session.add(passenger)
        await self.session.flush()
        return passenger

    async def get_by_id(self, passenger_id: int) -> Optional[RidePassengerModel]:
        return await self.session.get(RidePassengerModel, passenger_id)

    async def get_for_update(
        self, passenger_id: int
    ) -> Optional[RidePassengerModel]:
        result = await self.session.execute(
            select(RidePassengerModel)
            .where(RidePassengerModel.id == passenger_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete(self, passenger: RidePassengerModel) -> None:
        await self.session.delete(passenger)
        await self.session.flush()

    async def list_by_ride(self, ride_id: int) -> list[RidePassengerModel]:
        result = await self.session.execute(
            select(RidePassengerModel)
            .where(RidePassengerModel.ride_id == ride_id)
            .options(selectinload(RidePassengerModel.user))
            .order_by(RidePassengerModel.id)
        )
        return list(result.scalars().all())


class RatingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, rating: RatingModel) -> RatingModel:
        self.session.add(rating)
        await self.session.flush()
        return rating

    async def list_by_ride(self, ride_id: int) -> list[RatingModel]:
        result = await self.session.execute(
            select(RatingModel)
            .where(RatingModel.ride_id == ride_id)
            .options(
                selectinload(RatingModel.from_user),
                selectinload(RatingModel.to_user),
                selectinload(RatingModel.ride),
            )
            .order_by(RatingModel.id)
        )
        return list(result.scalars().all())


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def update(self, user: UserModel, **fields) -> UserModel:
        for name, value in fields.items():
            setattr(user, name, value)
        await self.session.flush()
        return user
