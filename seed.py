"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 8 sample users (5 riders, 3 drivers)
  - 4 shared rides (one full, one partly booked, two open)
  - 2 on-demand rides (one pending, one completed and rated)

Seats on shared rides are booked through ``SeatBookingEngine`` so the
``seats_booked`` counters match the passenger rows.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from ridesapp.config import settings
from ridesapp.domain.enums import (
    PaymentMethod,
    RideStatus,
    RideType,
    UserRole,
)
from ridesapp.infrastructure.database import build_engine, build_session_factory
from ridesapp.infrastructure.locks import LocalRideLocks
from ridesapp.infrastructure.models import RideModel, UserModel
from ridesapp.infrastructure.repositories import UserRepository
from ridesapp.services.booking import SeatBookingEngine
from ridesapp.services.ratings import RatingCollector

# Campus -> city centre (approx)
CAMPUS = (12.9716, 77.5946)


USERS = [
    {"first_name": "Aarav", "last_name": "Sharma", "email": "aarav@example.com", "role": UserRole.RIDER},
    {"first_name": "Priya", "last_name": "Patel", "email": "priya@example.com", "role": UserRole.RIDER},
    {"first_name": "Rohan", "last_name": "Mehta", "email": "rohan@example.com", "role": UserRole.RIDER},
    {"first_name": "Sneha", "last_name": "Gupta", "email": "sneha@example.com", "role": UserRole.RIDER},
    {"first_name": "Vikram", "last_name": "Singh", "email": "vikram@example.com", "role": UserRole.RIDER},
    {"first_name": "Ananya", "last_name": "Reddy", "email": "ananya@example.com", "role": UserRole.DRIVER,
     "license_number": "KA01-2019-0042", "vehicle_model": "Maruti Dzire", "vehicle_color": "White",
     "vehicle_plate": "KA-01-AB-1234", "is_verified": True},
    {"first_name": "Karan", "last_name": "Joshi", "email": "karan@example.com", "role": UserRole.DRIVER},
    {"first_name": "Meera", "last_name": "Nair", "email": "meera@example.com", "role": UserRole.DRIVER},
]


def _ride(rider_id, ride_type, dropoff, address, price, distance, duration, **extra):
    return RideModel(
        ride_type=ride_type,
        rider_id=rider_id,
        pickup_lat=CAMPUS[0],
        pickup_lng=CAMPUS[1],
        dropoff_lat=dropoff[0],
        dropoff_lng=dropoff[1],
        pickup_address="Main Gate, Campus",
        dropoff_address=address,
        price=price,
        distance=distance,
        duration=duration,
        payment_method=extra.pop("payment_method", PaymentMethod.CASH),
        status=extra.pop("status", RideStatus.PENDING),
        seats_booked=0,
        **extra,
    )


async def seed():
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    now = datetime.now(timezone.utc)

    async with session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            await engine.dispose()
            return

        # ── Users ─────────────────────────────────────────────────────
        repo = UserRepository(session)
        users = [await repo.create(UserModel(**u)) for u in USERS]
        print(f"  Created {len(users)} users")
        riders = [u for u in users if u.role == UserRole.RIDER]
        drivers = [u for u in users if u.role == UserRole.DRIVER]

        # ── Rides ─────────────────────────────────────────────────────
        shared = [
            _ride(riders[0].id, RideType.SHARED, (12.9352, 77.6245), "Koramangala",
                  60.0, 6.2, 25, seats_available=2, departure_time=now + timedelta(hours=2)),
            _ride(riders[1].id, RideType.SHARED, (12.9698, 77.7500), "Whitefield",
                  120.0, 16.4, 50, seats_available=3, departure_time=now + timedelta(hours=5)),
            _ride(riders[2].id, RideType.SHARED, (13.0358, 77.5970), "Hebbal",
                  80.0, 7.8, 30, seats_available=4, departure_time=now + timedelta(days=1),
                  payment_method=PaymentMethod.WALLET),
            _ride(riders[3].id, RideType.SHARED, (12.9141, 77.6101), "BTM Layout",
                  50.0, 7.0, 28, seats_available=2, departure_time=now + timedelta(days=2)),
        ]
        on_demand = [
            _ride(riders[4].id, RideType.ON_DEMAND, (12.9279, 77.6271), "Forum Mall",
                  210.0, 5.9, 20, payment_method=PaymentMethod.CARD),
            _ride(riders[0].id, RideType.ON_DEMAND, (13.1986, 77.7066), "Airport",
                  850.0, 38.0, 65, payment_method=PaymentMethod.CARD,
                  status=RideStatus.COMPLETED, driver_id=drivers[0].id,
                  started_at=now - timedelta(days=1, hours=1),
                  completed_at=now - timedelta(days=1)),
        ]
        session.add_all(shared + on_demand)
        await session.commit()
        print(f"  Created {len(shared)} shared and {len(on_demand)} on-demand rides")

    # ── Passengers (through the booking engine) ───────────────────────
    booking = SeatBookingEngine(session_factory, LocalRideLocks())
    await booking.join_ride(shared[0].id, riders[1].id, 2)  # full
    await booking.join_ride(shared[1].id, riders[2].id, 1)
    await booking.join_ride(shared[1].id, riders[3].id, 1)
    print("  Booked 4 seats on 2 shared rides")

    # ── Ratings ───────────────────────────────────────────────────────
    ratings = RatingCollector(session_factory)
    await ratings.add_rating(on_demand[1].id, drivers[0].id, 5, "Punctual and friendly")
    print("  Added 1 rating")

    await engine.dispose()
    print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()


if __name__ == "__main__":
    asyncio.run(main())
