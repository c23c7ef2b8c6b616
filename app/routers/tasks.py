"""Task router - API endpoints for team tasks."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.errors import InvalidAssigneeError, TaskNotFoundError
from app.models.task import Task, TaskCreate, TaskUpdate
from app.routers.auth import get_current_user_id
from app.services.task_service import TaskService
from app.utils.clock import Clock, get_clock


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Create a new task.

    - Requires authentication
    - assigned_to must be the caller or an active member of their team
    """
    service = TaskService(db, clock)
    try:
        return await service.create_task(user_id=user_id, task_create=task)
    except InvalidAssigneeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[Task])
async def list_tasks(
    completed: Optional[bool] = Query(None, description="Filter by completion"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    List tasks created by or assigned to the current user.

    - Requires authentication
    - Newest first
    """
    service = TaskService(db, clock)
    return await service.list_tasks(user_id=user_id, completed=completed)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """Get a task by id."""
    service = TaskService(db, clock)
    try:
        return await service.get_task(user_id=user_id, task_id=task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Update a task.

    - Requires authentication
    - Only the creator can edit or reassign
    """
    service = TaskService(db, clock)
    try:
        return await service.update_task(
            user_id=user_id,
            task_id=task_id,
            task_update=task_update,
        )
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidAssigneeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Mark a task completed, or reopen it.

    - Requires authentication
    - Creator or assignee
    """
    service = TaskService(db, clock)
    try:
        return await service.toggle_completed(user_id=user_id, task_id=task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Delete a task.

    - Requires authentication
    - Only the creator can delete
    """
    service = TaskService(db, clock)
    try:
        return await service.delete_task(user_id=user_id, task_id=task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
