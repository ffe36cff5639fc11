from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from teamboard.models.project import ProjectStatus, ProjectRole
from .user import UserBasic


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectMemberOut(BaseModel):
    id: int
    user_id: int
    role: ProjectRole
    joined_at: datetime
    user: UserBasic

    model_config = {
        "from_attributes": True
    }


class ProjectBase(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class ProjectOut(ProjectBase):
    members: List[ProjectMemberOut] = []


class ProjectMemberAdd(BaseModel):
    user_id: int
    role: ProjectRole = ProjectRole.MEMBER
