"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``           -- riders and drivers (public profile + role)
* ``rides``           -- shared and on-demand rides
* ``ride_passengers`` -- seat reservations on shared rides
* ``ratings``         -- post-ride ratings

Indexes
-------
* **B-Tree** on ``rides.status``, ``rider_id``, ``driver_id`` and the
  ``(ride_type, status)`` pair used by the shared-ride listings.
* **B-Tree** on ``ride_passengers.ride_id`` and ``ratings.ride_id``.

The CHECK constraint on ``rides`` backs the seat invariant at the store.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from ridesapp.domain.enums import (
    PassengerStatus,
    PaymentMethod,
    RideStatus,
    RideType,
    UserRole,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive input is taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    # Persist the lowercase values ("pending"), not the member names.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(120), nullable=False, default="")
    last_name = Column(String(120), nullable=False, default="")
    phone = Column(String(32), nullable=True)
    profile_picture = Column(String(512), nullable=True)  # URL
    role = Column(_enum(UserRole, "userrole"), default=UserRole.RIDER, nullable=False)
    rating = Column(Float, default=5.0)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Drivers only
    license_number = Column(String(64), nullable=True)
    vehicle_model = Column(String(120), nullable=True)
    vehicle_color = Column(String(64), nullable=True)
    vehicle_plate = Column(String(32), nullable=True)

    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_type = Column(_enum(RideType, "ridetype"), nullable=False)
    rider_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    dropoff_lat = Column(Float, nullable=False)
    dropoff_lng = Column(Float, nullable=False)
    pickup_address = Column(String(255), nullable=False)
    dropoff_address = Column(String(255), nullable=False)

    status = Column(
        _enum(RideStatus, "ridestatus"), default=RideStatus.PENDING, nullable=False
    )
    price = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)  # km
    duration = Column(Integer, nullable=False)  # minutes

    # Shared rides only; on-demand rides keep 0 / 0 / NULL
    seats_available = Column(Integer, default=0, nullable=False)
    seats_booked = Column(Integer, default=0, nullable=False)
    departure_time = Column(DateTime(timezone=True), nullable=True)

    payment_method = Column(_enum(PaymentMethod, "paymentmethod"), nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    rider = relationship("UserModel", foreign_keys=[rider_id])
    driver = relationship("UserModel", foreign_keys=[driver_id])
    passengers = relationship(
        "RidePassengerModel",
        back_populates="ride",
        order_by="RidePassengerModel.id",
    )

    __table_args__ = (
        CheckConstraint(
            "seats_booked >= 0 AND seats_booked <= seats_available",
            name="ck_rides_seats_booked_range",
        ),
        Index("idx_rides_status", "status"),
        Index("idx_rides_rider", "rider_id"),
        Index("idx_rides_driver", "driver_id"),
        Index("idx_rides_type_status", "ride_type", "status"),
    )


class RidePassengerModel(Base):
    __tablename__ = "ride_passengers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey("rides.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    seats = Column(Integer, default=1, nullable=False)
    status = Column(
        _enum(PassengerStatus, "passengerstatus"),
        default=PassengerStatus.CONFIRMED,
        nullable=False,
    )
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    ride = relationship("RideModel", back_populates="passengers")
    user = relationship("UserModel")

    __table_args__ = (
        CheckConstraint("seats >= 1", name="ck_ride_passengers_seats_positive"),
        Index("idx_ride_passengers_ride", "ride_id"),
        Index("idx_ride_passengers_user", "user_id"),
    )


class RatingModel(Base):
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey("rides.id"), nullable=False)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    score = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    ride = relationship("RideModel")
    from_user = relationship("UserModel", foreign_keys=[from_user_id])
    to_user = relationship("UserModel", foreign_keys=[to_user_id])

    __table_args__ = (
        CheckConstraint("score BETWEEN 1 AND 5", name="ck_ratings_score_range"),
        Index("idx_ratings_ride", "ride_id"),
    )
