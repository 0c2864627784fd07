"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health -- liveness plus a database round-trip
"""

from fastapi import APIRouter, Request
from sqlalchemy import text

from ridesapp.api.schemas import HealthResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request):
    async with request.app.state.session_factory() as session:
        await session.execute(text("SELECT 1"))
    return HealthResponse()
