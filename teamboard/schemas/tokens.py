# teamboard/schemas/tokens.py
from typing import Optional

from pydantic import BaseModel
from teamboard.schemas.user import UserOut
from teamboard.schemas.project import ProjectBase


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut

    class Config:
        from_attributes = True  # required for SQLAlchemy models in Pydantic v2


class SignupOut(Token):
    default_project: Optional[ProjectBase] = None
    joined_project_id: Optional[int] = None
