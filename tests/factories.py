"""Ride drafts used across the test-suite."""

from datetime import datetime, timedelta, timezone

from ridesapp.domain.entities import Location, RideDraft
from ridesapp.domain.enums import PaymentMethod, RideType


def shared_draft(seats_available=2, departure_in=timedelta(hours=2), **overrides):
    """A valid shared-ride draft; keyword overrides replace any field."""
    fields = dict(
        ride_type=RideType.SHARED,
        pickup=Location(12.9716, 77.5946),
        dropoff=Location(12.9352, 77.6245),
        pickup_address="Main Gate",
        dropoff_address="Koramangala",
        price=60.0,
        distance=6.2,
        duration=25,
        payment_method=PaymentMethod.CASH,
        seats_available=seats_available,
        departure_time=datetime.now(timezone.utc) + departure_in,
    )
    fields.update(overrides)
    return RideDraft(**fields)


def on_demand_draft(**overrides):
    fields = dict(
        ride_type=RideType.ON_DEMAND,
        pickup=Location(12.9716, 77.5946),
        dropoff=Location(13.1986, 77.7066),
        pickup_address="Main Gate",
        dropoff_address="Airport",
        price=850.0,
        distance=38.0,
        duration=65,
        payment_method=PaymentMethod.CARD,
    )
    fields.update(overrides)
    return RideDraft(**fields)
