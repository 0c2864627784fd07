"""FastAPI dependency injection helpers.

Services are built per request from the session factory and lock registry
the app factory stored on ``app.state``.  The caller identity comes from the
upstream auth layer, which forwards it as ``X-User-Id`` / ``X-User-Role``.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from ridesapp.config import Settings
from ridesapp.domain.enums import UserRole
from ridesapp.services.booking import SeatBookingEngine
from ridesapp.services.lifecycle import RideLifecycleManager
from ridesapp.services.queries import RideQueryService
from ridesapp.services.ratings import RatingCollector
from ridesapp.services.users import UserProfileService


@dataclass(frozen=True)
class Caller:
    user_id: int
    role: UserRole


def get_caller(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Optional[UserRole] = Header(None),
) -> Caller:
    if x_user_id is None or x_user_role is None:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return Caller(user_id=x_user_id, role=x_user_role)


def require_driver(caller: Caller = Depends(get_caller)) -> Caller:
    if caller.role != UserRole.DRIVER:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return caller


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def get_booking_engine(request: Request) -> SeatBookingEngine:
    settings = _settings(request)
    return SeatBookingEngine(
        request.app.state.session_factory,
        request.app.state.ride_locks,
        max_attempts=settings.booking_max_attempts,
        retry_backoff=settings.booking_retry_backoff_seconds,
    )


def get_lifecycle_manager(request: Request) -> RideLifecycleManager:
    return RideLifecycleManager(
        request.app.state.session_factory,
        request.app.state.ride_locks,
        strict_transitions=_settings(request).strict_status_transitions,
    )


def get_query_service(request: Request) -> RideQueryService:
    return RideQueryService(request.app.state.session_factory)


def get_rating_collector(request: Request) -> RatingCollector:
    return RatingCollector(request.app.state.session_factory)


def get_profile_service(request: Request) -> UserProfileService:
    return UserProfileService(request.app.state.session_factory)
