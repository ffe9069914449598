"""
Per-user provider configuration and API usage models
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from docchat.core.database import Base
from docchat.models.chat_history import utcnow


class ProviderConfig(Base):
    """LLM provider selection and credentials, one row per user"""
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    llm_provider = Column(String(20), nullable=False)  # openai, google, claude, ollama, lmstudio
    llm_model = Column(String(100), nullable=False)
    openai_api_key = Column(Text, nullable=True)
    google_api_key = Column(Text, nullable=True)
    claude_api_key = Column(Text, nullable=True)
    ollama_base_url = Column(String(255), nullable=True)
    lmstudio_base_url = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class ApiUsage(Base):
    """Token and cost accounting for a single API call"""
    __tablename__ = "api_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    endpoint = Column(String(255), nullable=False)
    tokens_used = Column(Integer, nullable=False, default=0)
    cost = Column(Integer, nullable=False, default=0)  # cents
    status = Column(String(20), nullable=False)  # "success" or "error"
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_api_usage_user_id', 'user_id'),
        Index('idx_api_usage_created_at', 'created_at'),
    )
