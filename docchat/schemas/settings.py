"""
LLM provider settings and model catalog schemas
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ProviderTag = Literal["openai", "google", "claude", "ollama", "lmstudio"]


class ProviderSettingsUpdate(BaseModel):
    """Partial update of a user's provider settings"""
    llm_provider: Optional[ProviderTag] = None
    llm_model: Optional[str] = Field(None, min_length=1, max_length=100)
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    claude_api_key: Optional[str] = None
    ollama_base_url: Optional[str] = Field(None, max_length=255)
    lmstudio_base_url: Optional[str] = Field(None, max_length=255)


class ProviderSettingsOut(BaseModel):
    """Provider settings with API keys masked"""
    llm_provider: str
    llm_model: str
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    claude_api_key: Optional[str] = None
    ollama_base_url: Optional[str] = None
    lmstudio_base_url: Optional[str] = None


class ProviderSettingsResponse(BaseModel):
    success: bool = True
    data: ProviderSettingsOut


class ModelCatalogResponse(BaseModel):
    success: bool = True
    data: Dict[str, List[Dict[str, str]]]
