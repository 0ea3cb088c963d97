"""Jobs endpoints: listing queries and status changes."""

from fastapi import APIRouter, Depends, Query

from api.auth import verify_api_key
from api.dependencies import get_job_service
from models import JobListing, ListingStatus
from services import JobService
from services.models import ListingDocuments, StatusCounts, StatusUpdateRequest

router = APIRouter()


@router.get("/jobs", response_model=list[JobListing])
async def get_jobs(
    status: ListingStatus | None = Query(None, description="Filter by status"),
    limit: int | None = Query(None, ge=1, le=500, description="Maximum listings"),
    user_id: str = Depends(verify_api_key),
    svc: JobService = Depends(get_job_service),
):
    """List the caller's listings, highest score first."""
    return await svc.get_listings(user_id, status=status, limit=limit)


@router.get("/jobs/counts", response_model=StatusCounts)
async def get_counts(
    user_id: str = Depends(verify_api_key),
    svc: JobService = Depends(get_job_service),
):
    """Count the caller's listings per status."""
    return await svc.get_counts(user_id)


@router.get("/jobs/{job_id}", response_model=JobListing)
async def get_job(
    job_id: str,
    user_id: str = Depends(verify_api_key),
    svc: JobService = Depends(get_job_service),
):
    """Get one listing including its audit log."""
    return await svc.get_listing(user_id, job_id)


@router.put("/jobs/{job_id}/status", response_model=JobListing)
async def set_status(
    job_id: str,
    body: StatusUpdateRequest,
    user_id: str = Depends(verify_api_key),
    svc: JobService = Depends(get_job_service),
):
    """Approve, skip, retry or otherwise move a listing."""
    return await svc.set_status(user_id, job_id, body.status, detail=body.detail)


@router.get("/jobs/{job_id}/documents", response_model=ListingDocuments)
async def get_documents(
    job_id: str,
    user_id: str = Depends(verify_api_key),
    svc: JobService = Depends(get_job_service),
):
    """Get the generated resume, cover letter and audit log of a listing."""
    return await svc.get_documents(user_id, job_id)
