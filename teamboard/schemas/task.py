# teamboard/schemas/task.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from teamboard.models.task import TaskStatus, TaskPriority
from .user import UserBasic
from .tag import TagOut


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    project_id: int
    assignee_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None


class ProjectBasic(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    project_id: int
    assignee_id: Optional[int] = None
    creator_id: int
    created_at: datetime
    updated_at: datetime

    # Related objects
    project: ProjectBasic
    creator: UserBasic
    assignee: Optional[UserBasic] = None
    tags: List[TagOut] = []

    class Config:
        from_attributes = True
