import enum
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, validator

from teamboard.models.project import ProjectRole


class InviteRole(str, enum.Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"

    @property
    def project_role(self) -> ProjectRole:
        """Membership role granted by this invitation role"""
        return ProjectRole.OWNER if self is InviteRole.ADMIN else ProjectRole.MEMBER


class InviteMember(BaseModel):
    email: EmailStr
    project_id: int
    role: InviteRole = InviteRole.MEMBER

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class InviteResult(BaseModel):
    status: Literal["added", "invited"]
    message: str


class TeamMemberOut(BaseModel):
    id: int
    name: str
    email: str
    role: ProjectRole
    joined_at: datetime


class InvitationCheck(BaseModel):
    email: str
    project_id: int
    project_name: str
    expires_at: datetime
