import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends
from complianceapi.models.task import Task, TaskIn, TaskStatusIn
from complianceapi.models.user import User
from complianceapi.security import get_current_user, require_admin
from complianceapi.services import tasks as task_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Task], status_code=200)
async def list_tasks(current_user: Annotated[User, Depends(require_admin)]):
    return await task_service.get_all_tasks()


@router.get("/user/{uid}", response_model=List[Task], status_code=200)
async def list_tasks_for_user(uid: int, current_user: Annotated[User, Depends(get_current_user)]):
    return await task_service.get_tasks_by_user(uid)


@router.post("", response_model=Task, status_code=201)
async def create_task(task: TaskIn, current_user: Annotated[User, Depends(require_admin)]):
    return await task_service.create_task(task, assigned_by=current_user.id)


@router.patch("/{tid}/status", response_model=Task, status_code=200)
async def update_task_status(tid: int, body: TaskStatusIn, current_user: Annotated[User, Depends(get_current_user)]):
    return await task_service.update_task_status(tid, body.status)
