"""Scan endpoints: run the discovery pipeline."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_scan_service, get_task_manager
from services import ScanService
from services.models import ScanResult, TaskCreatedResponse
from services.task_manager import TaskManager

router = APIRouter()


@router.post("/scan", response_model=ScanResult)
async def run_scan(
    user_id: str = Depends(verify_api_key),
    svc: ScanService = Depends(get_scan_service),
):
    """Search, extract, filter, score and save new listings. Blocks until done."""
    return await svc.run_scan(user_id)


@router.post("/scan/background", response_model=TaskCreatedResponse, status_code=202)
async def run_scan_background(
    user_id: str = Depends(verify_api_key),
    svc: ScanService = Depends(get_scan_service),
    tm: TaskManager = Depends(get_task_manager),
):
    """Start a scan in the background (poll /tasks/{task_id} or /jobs/counts)."""
    await svc.check_ready(user_id)
    task_id = await tm.submit(user_id, "scan", svc.run_scan, user_id)
    return TaskCreatedResponse(task_id=task_id)
