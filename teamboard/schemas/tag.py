from pydantic import BaseModel, Field
from typing import Optional


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = "#3b82f6"


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None


class TagOut(BaseModel):
    id: int
    name: str
    color: str

    model_config = {
        "from_attributes": True
    }
