"""
LLM provider settings and model catalog endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docchat.core.database import get_db
from docchat.deps.utils import mask_api_key
from docchat.middleware.auth import get_current_user_id
from docchat.models.settings import ProviderConfig
from docchat.schemas.settings import (
    ModelCatalogResponse,
    ProviderSettingsOut,
    ProviderSettingsResponse,
    ProviderSettingsUpdate,
)
from docchat.services.completion import LLM_MODELS
from docchat.services.provider_settings import get_or_create_provider_config, update_provider_config

router = APIRouter()


def _to_out(provider_config: ProviderConfig) -> ProviderSettingsOut:
    return ProviderSettingsOut(
        llm_provider=provider_config.llm_provider,
        llm_model=provider_config.llm_model,
        openai_api_key=mask_api_key(provider_config.openai_api_key),
        google_api_key=mask_api_key(provider_config.google_api_key),
        claude_api_key=mask_api_key(provider_config.claude_api_key),
        ollama_base_url=provider_config.ollama_base_url,
        lmstudio_base_url=provider_config.lmstudio_base_url,
    )


@router.get("/settings/llm", response_model=ProviderSettingsResponse)
def get_llm_settings(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return ProviderSettingsResponse(data=_to_out(get_or_create_provider_config(db, user_id)))


@router.put("/settings/llm", response_model=ProviderSettingsResponse)
def put_llm_settings(
    payload: ProviderSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    provider_config = update_provider_config(db, user_id, payload.model_dump(exclude_unset=True))
    return ProviderSettingsResponse(data=_to_out(provider_config))


@router.get("/llm/models", response_model=ModelCatalogResponse)
def list_models():
    """Selectable models per provider"""
    return ModelCatalogResponse(data=LLM_MODELS)
