"""
Chat history database models
"""

import uuid as uuid_lib
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from docchat.core.database import Base


DEFAULT_SESSION_TITLE = "new conversation"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession(Base):
    """Chat session model for tracking conversations"""
    __tablename__ = "chat_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid_lib.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False, default=DEFAULT_SESSION_TITLE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # Soft delete marker

    # Relationships
    turns = relationship("ChatTurn", back_populates="session", order_by=lambda: (ChatTurn.created_at, ChatTurn.id))

    __table_args__ = (
        Index('idx_chat_sessions_updated_at', 'updated_at'),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<ChatSession(id={self.id}, user_id={self.user_id}, title={self.title})>"


class ChatTurn(Base):
    """One immutable message within a session transcript"""
    __tablename__ = "chat_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)
    document_id = Column(String(36), nullable=True)
    role = Column(String(20), nullable=False)  # "user", "assistant" or "system"
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    session = relationship("ChatSession", back_populates="turns")

    # Indexes for efficient querying
    __table_args__ = (
        Index('idx_chat_history_session_id', 'session_id'),
        Index('idx_chat_history_user_id', 'user_id'),
        Index('idx_chat_history_created_at', 'created_at'),
    )
