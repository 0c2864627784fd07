"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (PENDING -> ACCEPTED -> STARTED -> COMPLETED, PENDING | ACCEPTED -> CANCELLED).
- ``SeatLedger`` encapsulates the shared-ride seat invariant
  ``0 <= seats_booked <= seats_available``.
- ``RideDraft.validate`` holds the ride-type-conditional creation rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import RIDE_TRANSITIONS, PaymentMethod, RideStatus, RideType
from .errors import InvalidTransition, ValidationError

MIN_SCORE = 1
MAX_SCORE = 5


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def validate(self, label: str) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValidationError(f"{label} latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValidationError(f"{label} longitude out of range: {self.longitude}")


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class RideDraft:
    """Everything a rider supplies when booking a ride."""

    ride_type: RideType
    pickup: Optional[Location] = None
    dropoff: Optional[Location] = None
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None
    price: Optional[float] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    seats_available: Optional[int] = None
    departure_time: Optional[datetime] = None

    def validate(self) -> None:
        """Raise ``ValidationError`` listing every missing or bad field."""
        missing = [
            name
            for name in (
                "pickup",
                "dropoff",
                "pickup_address",
                "dropoff_address",
                "price",
                "distance",
                "duration",
                "payment_method",
            )
            if getattr(self, name) in (None, "")
        ]
        if self.ride_type == RideType.SHARED:
            if self.seats_available is None:
                missing.append("seats_available")
            if self.departure_time is None:
                missing.append("departure_time")
        if missing:
            raise ValidationError(
                f"Missing required field(s) for {self.ride_type.value} ride: "
                + ", ".join(missing)
            )

        self.pickup.validate("pickup")
        self.dropoff.validate("dropoff")
        if self.price < 0:
            raise ValidationError("price must not be negative")
        if self.distance < 0:
            raise ValidationError("distance must not be negative")
        if self.duration < 0:
            raise ValidationError("duration must not be negative")
        if self.ride_type == RideType.SHARED and self.seats_available < 1:
            raise ValidationError("seats_available must be at least 1")


@dataclass
class Ride:
    id: Optional[int] = None
    ride_type: RideType = RideType.ON_DEMAND
    rider_id: int = 0
    driver_id: Optional[int] = None
    status: RideStatus = RideStatus.PENDING

    def transition_to(self, new_status: RideStatus, strict: bool = True) -> None:
        """Move to *new_status* if the transition is legal, else raise.

        With ``strict=False`` any status may overwrite any other.
        """
        if strict:
            allowed = RIDE_TRANSITIONS.get(self.status, set())
            if new_status not in allowed:
                raise InvalidTransition(
                    f"Cannot transition from {self.status.value} to {new_status.value}"
                )
        self.status = new_status


@dataclass
class SeatLedger:
    seats_available: int
    seats_booked: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.seats_available - self.seats_booked)

    def can_accommodate(self, seats: int) -> bool:
        return self.seats_booked + seats <= self.seats_available

    def book(self, seats: int) -> None:
        self.seats_booked += seats

    def release(self, seats: int) -> bool:
        """Give *seats* back.  Returns False if the counter had to be clamped."""
        new_value = self.seats_booked - seats
        self.seats_booked = max(0, new_value)
        return new_value >= 0


def validate_seats(seats: int) -> None:
    if seats < 1:
        raise ValidationError(f"seats must be at least 1, got {seats}")


def validate_score(score: int) -> None:
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(
            f"rating must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )
