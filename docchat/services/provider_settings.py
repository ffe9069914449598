"""
Per-user LLM provider settings
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from docchat.core.config import settings
from docchat.deps.llm_providers import get_adapter
from docchat.models.settings import ProviderConfig

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "llm_provider",
    "llm_model",
    "openai_api_key",
    "google_api_key",
    "claude_api_key",
    "ollama_base_url",
    "lmstudio_base_url",
)


def get_or_create_provider_config(db: Session, user_id: str) -> ProviderConfig:
    """
    Return the user's provider configuration, creating the default one on first use.

    Keys and base URLs start unset so that environment defaults keep applying
    until the user stores their own.
    """
    provider_config = db.query(ProviderConfig).filter(ProviderConfig.user_id == user_id).first()
    if provider_config is not None:
        return provider_config

    logger.info(f"Creating default provider settings for user {user_id}")
    provider_config = ProviderConfig(
        user_id=user_id,
        llm_provider=settings.default_llm_provider,
        llm_model=settings.default_llm_model,
    )
    db.add(provider_config)
    db.commit()
    db.refresh(provider_config)
    return provider_config


def update_provider_config(db: Session, user_id: str, changes: Dict[str, Any]) -> ProviderConfig:
    """
    Apply a partial update to the user's provider configuration.

    Switching provider without naming a model resets the model to that
    provider's default.

    Raises:
        ConfigurationError: If the new provider tag is unknown
    """
    provider_config = get_or_create_provider_config(db, user_id)

    new_provider = changes.get("llm_provider")
    if new_provider is not None:
        adapter = get_adapter(new_provider)
        if new_provider != provider_config.llm_provider and not changes.get("llm_model"):
            changes = {**changes, "llm_model": adapter.default_model}

    for field in EDITABLE_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(provider_config, field, changes[field])

    db.commit()
    db.refresh(provider_config)
    logger.info(f"Updated provider settings for user {user_id}: provider={provider_config.llm_provider}")
    return provider_config
