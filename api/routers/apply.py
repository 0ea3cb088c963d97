"""Apply endpoints: generate application documents for approved listings."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_apply_service, get_task_manager
from services import ApplyService
from services.models import ApplyRequest, ApplyResult, TaskCreatedResponse
from services.task_manager import TaskManager

router = APIRouter()


@router.post("/apply", response_model=ApplyResult)
async def run_apply(
    body: ApplyRequest | None = None,
    user_id: str = Depends(verify_api_key),
    svc: ApplyService = Depends(get_apply_service),
):
    """Generate a tailored resume and cover letter for each approved listing."""
    job_ids = body.job_ids if body else None
    return await svc.run_apply(user_id, job_ids=job_ids)


@router.post("/apply/background", response_model=TaskCreatedResponse, status_code=202)
async def run_apply_background(
    body: ApplyRequest | None = None,
    user_id: str = Depends(verify_api_key),
    svc: ApplyService = Depends(get_apply_service),
    tm: TaskManager = Depends(get_task_manager),
):
    """Start document generation in the background (poll /tasks/{task_id})."""
    await svc.check_ready(user_id)
    job_ids = body.job_ids if body else None
    task_id = await tm.submit(user_id, "apply", svc.run_apply, user_id, job_ids=job_ids)
    return TaskCreatedResponse(task_id=task_id)
