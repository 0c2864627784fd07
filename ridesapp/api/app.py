"""
FastAPI application factory.

* Registers routes for rides, users and admin.
* Builds the database engine, session factory and ride lock registry in
  the lifespan (unless the caller injected them) and disposes of them on
  shutdown.
* Translates domain errors into HTTP responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridesapp.api.middleware import limiter
from ridesapp.api.routes import admin, rides, users
from ridesapp.config import Settings, settings as default_settings
from ridesapp.domain.errors import (
    CapacityExceeded,
    InvalidTransition,
    NotFound,
    RidesAppError,
    StorageFailure,
    ValidationError,
)
from ridesapp.infrastructure.database import build_engine, build_session_factory
from ridesapp.infrastructure.locks import RideLockRegistry
from ridesapp.infrastructure.redis_client import build_ride_locks, create_redis

logging.basicConfig(level=default_settings.log_level)
logger = logging.getLogger(__name__)

# Most specific first: lookup walks this list in order.
ERROR_STATUS: list[tuple[type[RidesAppError], int]] = [
    (NotFound, 404),
    (CapacityExceeded, 409),
    (InvalidTransition, 409),
    (ValidationError, 422),
    (StorageFailure, 503),
]


async def _domain_error_handler(request: Request, exc: RidesAppError) -> JSONResponse:
    status = next(
        (code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500
    )
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open store and lock resources on startup; release them on shutdown."""
    cfg: Settings = app.state.settings
    engine = None
    redis = None
    if getattr(app.state, "session_factory", None) is None:
        engine = build_engine(cfg)
        app.state.session_factory = build_session_factory(engine)
    if getattr(app.state, "ride_locks", None) is None:
        if cfg.booking_lock_backend == "redis":
            redis = create_redis(cfg)
        app.state.ride_locks = build_ride_locks(cfg, redis)
    logger.info("Ride locks: %s", type(app.state.ride_locks).__name__)

    yield

    if redis is not None:
        await redis.aclose()
    if engine is not None:
        await engine.dispose()


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ride_locks: Optional[RideLockRegistry] = None,
) -> FastAPI:
    app = FastAPI(
        title="Rides App API",
        description=(
            "Ride booking backend: on-demand and shared rides, seat booking "
            "on shared rides with a strict no-overbooking guarantee, ride "
            "lifecycle management and post-ride ratings."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings or default_settings
    app.state.session_factory = session_factory
    app.state.ride_locks = ride_locks

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(RidesAppError, _domain_error_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
