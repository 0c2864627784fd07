"""
User profile endpoints
======================

GET /api/v1/users/me -- profile of the caller
PUT /api/v1/users/me -- update the caller's profile
"""

from fastapi import APIRouter, Depends, Request

from ridesapp.api.dependencies import Caller, get_caller, get_profile_service
from ridesapp.api.middleware import RATE_LIMIT, limiter
from ridesapp.api.schemas import ERROR_RESPONSES, ProfileUpdateRequest, UserProfileResponse
from ridesapp.services.users import UserProfileService

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


@router.get("/me", response_model=UserProfileResponse, summary="Get my profile")
@limiter.limit(RATE_LIMIT)
async def get_me(
    request: Request,
    caller: Caller = Depends(get_caller),
    profiles: UserProfileService = Depends(get_profile_service),
):
    return await profiles.get_profile(caller.user_id)


@router.put(
    "/me",
    response_model=UserProfileResponse,
    summary="Update my profile",
    description="Vehicle and licence fields are only stored for drivers.",
)
@limiter.limit(RATE_LIMIT)
async def update_me(
    request: Request,
    body: ProfileUpdateRequest,
    caller: Caller = Depends(get_caller),
    profiles: UserProfileService = Depends(get_profile_service),
):
    return await profiles.update_profile(caller.user_id, body.to_changes())
