from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime


class NotificationPrefs(BaseModel):
    email: bool
    push: bool


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    invitation_token: Optional[str] = None

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class UserBasic(BaseModel):
    id: int
    name: str
    email: str

    model_config = {
        "from_attributes": True
    }


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    timezone: str
    notifications: NotificationPrefs
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    timezone: Optional[str] = None
    notifications: Optional[NotificationPrefs] = None
    profile_picture_url: Optional[str] = None

    model_config = {
        "from_attributes": True
    }
