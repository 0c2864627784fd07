"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ridesapp.domain.entities import Location, RideDraft
from ridesapp.domain.enums import (
    PassengerStatus,
    PaymentMethod,
    RideStatus,
    RideType,
    UserRole,
)
from ridesapp.services.users import ProfileChanges


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(BaseModel):
    ride_type: RideType
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    dropoff_lat: float = Field(..., ge=-90, le=90)
    dropoff_lng: float = Field(..., ge=-180, le=180)
    pickup_address: str = Field(..., min_length=1, max_length=255)
    dropoff_address: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    distance: float = Field(..., ge=0, description="Kilometres, supplied by the caller.")
    duration: int = Field(..., ge=0, description="Minutes, supplied by the caller.")
    payment_method: PaymentMethod
    seats_available: Optional[int] = Field(
        None, ge=1, description="Required for shared rides."
    )
    departure_time: Optional[datetime] = Field(
        None, description="Required for shared rides."
    )

    def to_draft(self) -> RideDraft:
        return RideDraft(
            ride_type=self.ride_type,
            pickup=Location(self.pickup_lat, self.pickup_lng),
            dropoff=Location(self.dropoff_lat, self.dropoff_lng),
            pickup_address=self.pickup_address,
            dropoff_address=self.dropoff_address,
            price=self.price,
            distance=self.distance,
            duration=self.duration,
            payment_method=self.payment_method,
            seats_available=self.seats_available,
            departure_time=self.departure_time,
        )


class StatusUpdateRequest(BaseModel):
    status: RideStatus


class JoinRideRequest(BaseModel):
    seats: int = Field(..., ge=1)


class RateRideRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class ProfileUpdateRequest(BaseModel):
    """Empty or omitted fields are left unchanged."""

    first_name: Optional[str] = Field(None, max_length=120)
    last_name: Optional[str] = Field(None, max_length=120)
    phone: Optional[str] = Field(None, max_length=32)
    profile_picture: Optional[str] = Field(None, max_length=512)
    license_number: Optional[str] = Field(None, max_length=64)
    vehicle_model: Optional[str] = Field(None, max_length=120)
    vehicle_color: Optional[str] = Field(None, max_length=64)
    vehicle_plate: Optional[str] = Field(None, max_length=32)

    def to_changes(self) -> ProfileChanges:
        return ProfileChanges(**self.model_dump())


# ── Responses ─────────────────────────────────────────────────────────


class UserPublicResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    role: UserRole
    rating: Optional[float] = None

    model_config = {"from_attributes": True}


class UserProfileResponse(UserPublicResponse):
    email: str
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    is_verified: bool = False
    license_number: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_color: Optional[str] = None
    vehicle_plate: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PassengerResponse(BaseModel):
    id: int
    ride_id: int
    user_id: int
    seats: int
    status: PassengerStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PassengerDetailResponse(PassengerResponse):
    user: UserPublicResponse


class RideResponse(BaseModel):
    id: int
    ride_type: RideType
    rider_id: int
    driver_id: Optional[int] = None
    pickup_lat: float
    pickup_lng: float
    dropoff_lat: float
    dropoff_lng: float
    pickup_address: str
    dropoff_address: str
    status: RideStatus
    price: float
    distance: float
    duration: int
    seats_available: int
    seats_booked: int
    departure_time: Optional[datetime] = None
    payment_method: PaymentMethod
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RideDetailResponse(RideResponse):
    rider: UserPublicResponse
    driver: Optional[UserPublicResponse] = None
    passengers: list[PassengerDetailResponse] = []


class RatingResponse(BaseModel):
    id: int
    ride_id: int
    from_user_id: int
    to_user_id: int
    rating: int = Field(..., validation_alias="score")
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RatingDetailResponse(RatingResponse):
    from_user: UserPublicResponse
    to_user: UserPublicResponse
    ride: RideResponse


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


# Documented error bodies shared by the routers (see the handler in app.py).
ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Caller identity headers missing."},
    404: {"model": ErrorResponse, "description": "Ride, passenger or user not found."},
    409: {"model": ErrorResponse, "description": "No seats left or status move not allowed."},
    503: {"model": ErrorResponse, "description": "Store unavailable or kept conflicting."},
}
