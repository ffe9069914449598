# Database models
from docchat.core.database import Base
from .chat_history import ChatSession, ChatTurn, DEFAULT_SESSION_TITLE
from .settings import ProviderConfig, ApiUsage

__all__ = ["Base", "ChatSession", "ChatTurn", "DEFAULT_SESSION_TITLE", "ProviderConfig", "ApiUsage"]
