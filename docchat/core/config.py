"""
Application configuration
"""

from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./docchat.db"  # Will be overridden by env var
    debug: bool = False

    # Authentication Configuration (tokens are issued by the external identity provider)
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None

    # LLM defaults applied when a user has no provider configuration yet
    default_llm_provider: str = "lmstudio"
    default_llm_model: str = "kimi-k2-thinking"

    # Hosted provider credentials (fallbacks for users without their own keys)
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    claude_api_key: Optional[str] = None

    # Self-hosted provider endpoints
    ollama_base_url: str = "http://localhost:11434"
    lmstudio_base_url: str = "http://localhost:1234"

    # Generation parameters
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 60.0  # Upper bound on every provider call

    # Chat Configuration
    chat_system_prompt: str = (
        "You are an AI assistant that analyzes document content and answers questions about it."
    )
    history_limit: int = 50  # Turns returned by the chat history endpoint

    # Usage accounting
    cost_per_token: float = 0.002  # Cents per token

    # Logging Configuration
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
