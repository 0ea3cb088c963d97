"""Profile endpoints."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_profile_service
from models import CandidateProfile
from services import ProfileService
from services.models import ProfileUpdate

router = APIRouter()


@router.get("/profile", response_model=CandidateProfile)
async def get_profile(
    user_id: str = Depends(verify_api_key),
    svc: ProfileService = Depends(get_profile_service),
):
    """Get the caller's candidate profile."""
    return await svc.get_profile(user_id)


@router.put("/profile", response_model=CandidateProfile)
async def put_profile(
    body: ProfileUpdate,
    user_id: str = Depends(verify_api_key),
    svc: ProfileService = Depends(get_profile_service),
):
    """Create or replace the caller's candidate profile."""
    return await svc.save_profile(user_id, body)
