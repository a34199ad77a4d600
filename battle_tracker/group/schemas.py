from datetime import datetime
from pydantic import BaseModel, Field


class GroupMember(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    image_url: str = ""


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    characters: list[GroupMember] = Field(default_factory=list)


class GroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    characters: list[GroupMember] | None = None


class GroupResponse(BaseModel):
    id: int
    name: str
    characters: list[GroupMember]
    created_at: datetime

    class Config:
        from_attributes = True
