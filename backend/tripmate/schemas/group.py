from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional


class GroupCreate(BaseModel):
    name: str


class GroupResponse(BaseModel):
    id: int
    name: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    member_count: int = 0

    class Config:
        from_attributes = True


class MemberResponse(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    joined_at: Optional[datetime] = None


class MessageCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: Optional[Any] = None


class SenderResponse(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    group_id: int
    user_id: str
    message: str
    created_at: Optional[datetime] = None
    sender: Optional[SenderResponse] = None
