"""Task polling endpoints for background operations."""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.auth import verify_api_key
from api.dependencies import get_task_manager
from services.models import TaskStatusResponse
from services.task_manager import TaskManager

router = APIRouter()


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: str,
    user_id: str = Depends(verify_api_key),
    tm: TaskManager = Depends(get_task_manager),
):
    """Poll background task status. Returns result when completed."""
    task = tm.get_task(task_id, user_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")

    return TaskStatusResponse(**task)


@router.get("/tasks", response_model=list[TaskStatusResponse])
async def list_tasks(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(verify_api_key),
    tm: TaskManager = Depends(get_task_manager),
):
    """List the caller's recent background tasks."""
    return [TaskStatusResponse(**task) for task in tm.get_tasks(user_id, limit=limit)]
