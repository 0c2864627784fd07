"""
Ride endpoints
==============

POST   /api/v1/rides                               -- create a ride
GET    /api/v1/rides/my-rides                      -- rides of the caller
GET    /api/v1/rides/shared/available              -- shared rides with free seats
GET    /api/v1/rides/shared/upcoming               -- shared rides not yet departed
GET    /api/v1/rides/{ride_id}                     -- ride with rider/driver/passengers
PUT    /api/v1/rides/{ride_id}/status              -- move the ride through its lifecycle
POST   /api/v1/rides/{ride_id}/accept              -- driver takes a pending ride
POST   /api/v1/rides/{ride_id}/join                -- book seats on a shared ride
GET    /api/v1/rides/{ride_id}/passengers          -- passengers of a ride
DELETE /api/v1/rides/{ride_id}/passengers/{pid}    -- leave a shared ride
POST   /api/v1/rides/{ride_id}/rate                -- rate a ride
GET    /api/v1/rides/{ride_id}/ratings             -- ratings of a ride

Domain errors are translated to HTTP codes by the handlers in ``app.py``.
"""

from fastapi import APIRouter, Depends, Request

from ridesapp.api.dependencies import (
    Caller,
    get_booking_engine,
    get_caller,
    get_lifecycle_manager,
    get_query_service,
    get_rating_collector,
    require_driver,
)
from ridesapp.api.middleware import RATE_LIMIT, limiter
from ridesapp.api.schemas import (
    ERROR_RESPONSES,
    JoinRideRequest,
    MessageResponse,
    PassengerDetailResponse,
    PassengerResponse,
    RateRideRequest,
    RatingDetailResponse,
    RatingResponse,
    RideCreateRequest,
    RideDetailResponse,
    RideResponse,
    StatusUpdateRequest,
)
from ridesapp.services.booking import SeatBookingEngine
from ridesapp.services.lifecycle import RideLifecycleManager
from ridesapp.services.queries import RideQueryService
from ridesapp.services.ratings import RatingCollector

router = APIRouter(prefix="/rides", tags=["rides"], responses=ERROR_RESPONSES)


# ── Static paths first ────────────────────────────────────────────────


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Create a ride",
)
@limiter.limit(RATE_LIMIT)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    caller: Caller = Depends(get_caller),
    lifecycle: RideLifecycleManager = Depends(get_lifecycle_manager),
):
    return await lifecycle.create_ride(caller.user_id, body.to_draft())


@router.get(
    "/my-rides",
    response_model=list[RideDetailResponse],
    summary="Rides booked (riders) or driven (drivers) by the caller",
)
@limiter.limit(RATE_LIMIT)
async def get_my_rides(
    request: Request,
    caller: Caller = Depends(get_caller),
    queries: RideQueryService = Depends(get_query_service),
):
    return await queries.get_rides_for_user(caller.user_id, caller.role)


@router.get(
    "/shared/available",
    response_model=list[RideDetailResponse],
    summary="Pending shared rides with at least one free seat",
)
@limiter.limit(RATE_LIMIT)
async def get_available_shared_rides(
    request: Request,
    caller: Caller = Depends(get_caller),
    queries: RideQueryService = Depends(get_query_service),
):
    return await queries.get_available_shared_rides()


@router.get(
    "/shared/upcoming",
    response_model=list[RideDetailResponse],
    summary="Pending shared rides departing in the future",
)
@limiter.limit(RATE_LIMIT)
async def get_upcoming_shared_rides(
    request: Request,
    caller: Caller = Depends(get_caller),
    queries: RideQueryService = Depends(get_query_service),
):
    return await queries.get_upcoming_shared_rides()


# ── Dynamic paths ─────────────────────────────────────────────────────


@router.get(
    "/{ride_id}",
    response_model=RideDetailResponse,
    summary="Get a ride with rider, driver and passengers",
)
@limiter.limit(RATE_LIMIT)
async def get_ride(
    request: Request,
    ride_id: int,
    caller: Caller = Depends(get_caller),
    queries: RideQueryService = Depends(get_query_service),
):
    return await queries.get_ride(ride_id)


@router.put(
    "/{ride_id}/status",
    response_model=RideResponse,
    summary="Update ride status",
    description=(
        "Allowed moves: pending -> accepted -> started -> completed, and "
        "pending or accepted -> cancelled. Anything else returns 409."
    ),
)
@limiter.limit(RATE_LIMIT)
async def update_ride_status(
    request: Request,
    ride_id: int,
    body: StatusUpdateRequest,
    caller: Caller = Depends(get_caller),
    lifecycle: RideLifecycleManager = Depends(get_lifecycle_manager),
):
    return await lifecycle.update_status(ride_id, body.status)


@router.post(
    "/{ride_id}/accept",
    response_model=RideResponse,
    summary="Accept a pending ride as its driver",
)
@limiter.limit(RATE_LIMIT)
async def accept_ride(
    request: Request,
    ride_id: int,
    caller: Caller = Depends(require_driver),
    lifecycle: RideLifecycleManager = Depends(get_lifecycle_manager),
):
    return await lifecycle.assign_driver(ride_id, caller.user_id)


@router.post(
    "/{ride_id}/join",
    response_model=PassengerResponse,
    summary="Book seats on a shared ride",
)
@limiter.limit(RATE_LIMIT)
async def join_ride(
    request: Request,
    ride_id: int,
    body: JoinRideRequest,
    caller: Caller = Depends(get_caller),
    booking: SeatBookingEngine = Depends(get_booking_engine),
):
    return await booking.join_ride(ride_id, caller.user_id, body.seats)


@router.get(
    "/{ride_id}/passengers",
    response_model=list[PassengerDetailResponse],
    summary="List passengers of a ride",
)
@limiter.limit(RATE_LIMIT)
async def get_ride_passengers(
    request: Request,
    ride_id: int,
    caller: Caller = Depends(get_caller),
    booking: SeatBookingEngine = Depends(get_booking_engine),
):
    return await booking.get_passengers_by_ride(ride_id)


@router.delete(
    "/{ride_id}/passengers/{passenger_id}",
    response_model=MessageResponse,
    summary="Leave a shared ride",
)
@limiter.limit(RATE_LIMIT)
async def leave_ride(
    request: Request,
    ride_id: int,
    passenger_id: int,
    caller: Caller = Depends(get_caller),
    booking: SeatBookingEngine = Depends(get_booking_engine),
):
    await booking.leave_ride(passenger_id, ride_id=ride_id)
    return MessageResponse(message="Left ride successfully")


@router.post(
    "/{ride_id}/rate",
    response_model=RatingResponse,
    summary="Rate a ride",
)
@limiter.limit(RATE_LIMIT)
async def rate_ride(
    request: Request,
    ride_id: int,
    body: RateRideRequest,
    caller: Caller = Depends(get_caller),
    ratings: RatingCollector = Depends(get_rating_collector),
):
    return await ratings.add_rating(ride_id, caller.user_id, body.rating, body.comment)


@router.get(
    "/{ride_id}/ratings",
    response_model=list[RatingDetailResponse],
    summary="List ratings of a ride",
)
@limiter.limit(RATE_LIMIT)
async def get_ride_ratings(
    request: Request,
    ride_id: int,
    caller: Caller = Depends(get_caller),
    ratings: RatingCollector = Depends(get_rating_collector),
):
    return await ratings.get_ratings_by_ride(ride_id)
