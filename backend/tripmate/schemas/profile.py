from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[Any] = None
    phone: Optional[Any] = None
    email: Optional[Any] = None


class ProfileResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
