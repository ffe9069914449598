"""
Chat API schemas
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatRequest(BaseModel):
    """Chat request schema"""
    message: str = Field(..., min_length=1, description="User message")
    session_id: Optional[UUID] = Field(None, description="Existing session; a new one is started when omitted")
    document_id: Optional[UUID] = Field(None, description="Optional source document")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        """Reject whitespace-only messages"""
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class ChatReply(BaseModel):
    message: str
    tokens_used: int
    session_id: str


class ChatResponse(BaseModel):
    """Chat response schema"""
    success: bool = True
    data: ChatReply


class ChatTurnOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    user_id: str
    document_id: Optional[str] = None
    role: str
    content: str
    tokens_used: Optional[int] = None
    created_at: datetime


class ChatTurnListResponse(BaseModel):
    success: bool = True
    data: List[ChatTurnOut]
