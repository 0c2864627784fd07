"""Seat booking engine: join / leave semantics against a real (SQLite) store."""

import pytest
from sqlalchemy import select

from ridesapp.domain.enums import PassengerStatus, RideStatus
from ridesapp.domain.errors import CapacityExceeded, NotFound, ValidationError
from ridesapp.infrastructure.models import RideModel, RidePassengerModel
from tests.factories import on_demand_draft, shared_draft


async def _seats_booked(session_factory, ride_id: int) -> int:
    async with session_factory() as session:
        ride = await session.get(RideModel, ride_id)
        return ride.seats_booked


async def _passenger_count(session_factory, ride_id: int) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(RidePassengerModel).where(RidePassengerModel.ride_id == ride_id)
        )
        return len(result.scalars().all())


class TestJoinRide:
    @pytest.mark.asyncio
    async def test_join_books_seats_and_creates_passenger(
        self, booking, lifecycle, session_factory, users
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=3))

        passenger = await booking.join_ride(ride.id, users["passenger"].id, 2)

        assert passenger.id is not None
        assert passenger.ride_id == ride.id
        assert passenger.seats == 2
        assert passenger.status == PassengerStatus.CONFIRMED
        assert await _seats_booked(session_factory, ride.id) == 2

    @pytest.mark.asyncio
    async def test_exact_fit_is_accepted(self, booking, lifecycle, session_factory, users):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=2))

        await booking.join_ride(ride.id, users["passenger"].id, 1)
        await booking.join_ride(ride.id, users["other"].id, 1)

        assert await _seats_booked(session_factory, ride.id) == 2

    @pytest.mark.asyncio
    async def test_over_capacity_is_rejected_without_side_effects(
        self, booking, lifecycle, session_factory, users
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=2))
        await booking.join_ride(ride.id, users["passenger"].id, 1)

        with pytest.raises(CapacityExceeded) as excinfo:
            await booking.join_ride(ride.id, users["other"].id, 2)

        assert excinfo.value.remaining == 1
        assert excinfo.value.requested == 2
        assert await _seats_booked(session_factory, ride.id) == 1
        assert await _passenger_count(session_factory, ride.id) == 1

    @pytest.mark.asyncio
    async def test_unknown_ride_is_not_found(self, booking, users):
        with pytest.raises(NotFound):
            await booking.join_ride(9999, users["passenger"].id, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seats", [0, -1])
    async def test_seats_must_be_positive(self, booking, lifecycle, users, seats):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft())
        with pytest.raises(ValidationError):
            await booking.join_ride(ride.id, users["passenger"].id, seats)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [RideStatus.CANCELLED, RideStatus.ACCEPTED])
    async def test_only_pending_rides_take_passengers(
        self, booking, lifecycle, session_factory, users, status
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=3))
        await lifecycle.update_status(ride.id, status)

        with pytest.raises(ValidationError, match="pending"):
            await booking.join_ride(ride.id, users["passenger"].id, 1)

        assert await _seats_booked(session_factory, ride.id) == 0
        assert await _passenger_count(session_factory, ride.id) == 0

    @pytest.mark.asyncio
    async def test_on_demand_ride_has_no_seats_to_book(self, booking, lifecycle, users):
        ride = await lifecycle.create_ride(users["rider"].id, on_demand_draft())
        with pytest.raises(CapacityExceeded):
            await booking.join_ride(ride.id, users["passenger"].id, 1)


class TestLeaveRide:
    @pytest.mark.asyncio
    async def test_join_then_leave_restores_seats(
        self, booking, lifecycle, session_factory, users
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=4))
        await booking.join_ride(ride.id, users["other"].id, 1)
        before = await _seats_booked(session_factory, ride.id)

        passenger = await booking.join_ride(ride.id, users["passenger"].id, 3)
        await booking.leave_ride(passenger.id)

        assert await _seats_booked(session_factory, ride.id) == before
        assert await _passenger_count(session_factory, ride.id) == 1

    @pytest.mark.asyncio
    async def test_unknown_passenger_is_not_found(self, booking, users):
        with pytest.raises(NotFound):
            await booking.leave_ride(9999)

    @pytest.mark.asyncio
    async def test_double_leave_is_not_found(self, booking, lifecycle, session_factory, users):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft())
        passenger = await booking.join_ride(ride.id, users["passenger"].id, 1)
        await booking.leave_ride(passenger.id)

        with pytest.raises(NotFound):
            await booking.leave_ride(passenger.id)
        assert await _seats_booked(session_factory, ride.id) == 0

    @pytest.mark.asyncio
    async def test_passenger_must_belong_to_given_ride(
        self, booking, lifecycle, session_factory, users
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft())
        other_ride = await lifecycle.create_ride(users["other"].id, shared_draft())
        passenger = await booking.join_ride(ride.id, users["passenger"].id, 1)

        with pytest.raises(NotFound):
            await booking.leave_ride(passenger.id, ride_id=other_ride.id)
        assert await _seats_booked(session_factory, ride.id) == 1

    @pytest.mark.asyncio
    async def test_corrupt_counter_is_clamped_at_zero(
        self, booking, lifecycle, session_factory, users, caplog
    ):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=3))
        passenger = await booking.join_ride(ride.id, users["passenger"].id, 2)
        async with session_factory() as session:
            row = await session.get(RideModel, ride.id)
            row.seats_booked = 1  # out of sync with the passenger rows
            await session.commit()

        await booking.leave_ride(passenger.id)

        assert await _seats_booked(session_factory, ride.id) == 0
        assert "underflow" in caplog.text


class TestPassengers:
    @pytest.mark.asyncio
    async def test_passengers_include_public_profile(self, booking, lifecycle, users):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=3))
        await booking.join_ride(ride.id, users["passenger"].id, 1)
        await booking.join_ride(ride.id, users["other"].id, 2)

        passengers = await booking.get_passengers_by_ride(ride.id)

        assert [p.user.first_name for p in passengers] == ["Priya", "Rohan"]
        assert [p.seats for p in passengers] == [1, 2]

    @pytest.mark.asyncio
    async def test_no_passengers_is_empty(self, booking, lifecycle, users):
        ride = await lifecycle.create_ride(users["rider"].id, shared_draft())
        assert await booking.get_passengers_by_ride(ride.id) == []


@pytest.mark.asyncio
async def test_full_booking_scenario(booking, lifecycle, session_factory, users):
    """Fill a 2-seat ride, get refused, free it, book again."""
    ride = await lifecycle.create_ride(users["rider"].id, shared_draft(seats_available=2))

    first = await booking.join_ride(ride.id, users["passenger"].id, 2)
    assert await _seats_booked(session_factory, ride.id) == 2

    with pytest.raises(CapacityExceeded):
        await booking.join_ride(ride.id, users["other"].id, 1)
    assert await _seats_booked(session_factory, ride.id) == 2

    await booking.leave_ride(first.id)
    assert await _seats_booked(session_factory, ride.id) == 0

    await booking.join_ride(ride.id, users["other"].id, 1)
    assert await _seats_booked(session_factory, ride.id) == 1
