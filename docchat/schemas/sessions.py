"""
Chat session schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)


class SessionRename(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    success: bool = True
    data: SessionOut


class SessionListResponse(BaseModel):
    success: bool = True
    data: List[SessionOut]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
