"""
Completion dispatcher: resolves provider configuration and routes chat requests to the right adapter
"""

import logging
from typing import Dict, List, Optional

from docchat.core.config import Settings, settings as app_settings
from docchat.deps.llm_providers import (
    ChatMessage,
    CompletionResult,
    LLMConfig,
    get_adapter,
)
from docchat.models.settings import ProviderConfig

logger = logging.getLogger(__name__)

# Per-provider fields on ProviderConfig and Settings holding the credential or endpoint
API_KEY_FIELDS = {
    "openai": "openai_api_key",
    "google": "google_api_key",
    "claude": "claude_api_key",
}

BASE_URL_FIELDS = {
    "ollama": "ollama_base_url",
    "lmstudio": "lmstudio_base_url",
}

LLM_MODELS: Dict[str, List[Dict[str, str]]] = {
    "openai": [
        {"value": "gpt-4-turbo-preview", "label": "GPT-4 Turbo"},
        {"value": "gpt-4", "label": "GPT-4"},
        {"value": "gpt-3.5-turbo", "label": "GPT-3.5 Turbo"},
    ],
    "google": [
        {"value": "gemini-pro", "label": "Gemini Pro"},
        {"value": "gemini-pro-vision", "label": "Gemini Pro Vision"},
    ],
    "claude": [
        {"value": "claude-3-5-sonnet-20241022", "label": "Claude 3.5 Sonnet"},
        {"value": "claude-3-opus-20240229", "label": "Claude 3 Opus"},
        {"value": "claude-3-sonnet-20240229", "label": "Claude 3 Sonnet"},
    ],
    "ollama": [
        {"value": "llama2", "label": "Llama 2"},
        {"value": "mistral", "label": "Mistral"},
        {"value": "codellama", "label": "Code Llama"},
    ],
    "lmstudio": [
        {"value": "kimi-k2-thinking", "label": "Kimi K2 Thinking"},
        {"value": "local-model", "label": "Local Model"},
    ],
}


def resolve_llm_config(
    provider: str,
    model: Optional[str] = None,
    provider_config: Optional[ProviderConfig] = None,
    settings: Settings = app_settings,
) -> LLMConfig:
    """
    Build the LLMConfig for a call, user values first and environment defaults second.

    Only the API key is taken for hosted providers and only the base URL for
    self-hosted ones; the other kind of field is ignored.

    Raises:
        ConfigurationError: If the provider tag is unknown
    """
    adapter = get_adapter(provider)

    api_key = None
    key_field = API_KEY_FIELDS.get(provider)
    if adapter.requires_api_key and key_field:
        api_key = getattr(provider_config, key_field, None) or getattr(settings, key_field, None)

    base_url = None
    url_field = BASE_URL_FIELDS.get(provider)
    if adapter.uses_base_url and url_field:
        base_url = getattr(provider_config, url_field, None) or getattr(settings, url_field, None)

    return LLMConfig(
        provider=provider,
        model=model or adapter.default_model,
        api_key=api_key,
        base_url=base_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout_seconds,
    )


def config_for_user(provider_config: ProviderConfig, settings: Settings = app_settings) -> LLMConfig:
    """Resolve the LLMConfig stored for a user"""
    return resolve_llm_config(
        provider_config.llm_provider,
        provider_config.llm_model,
        provider_config=provider_config,
        settings=settings,
    )


def generate_chat_completion(messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
    """
    Run one chat completion against the configured provider.

    Args:
        messages: Ordered list of {"role", "content"} dicts
        config: Resolved provider configuration

    Returns:
        CompletionResult with the reply text and reported token count

    Raises:
        ConfigurationError: Unknown provider or missing credential
        ProviderUnavailableError: Self-hosted provider failure
        Exception: Hosted provider client errors propagate unchanged
    """
    adapter = get_adapter(config.provider)
    logger.info(f"Generating completion with provider={config.provider} model={config.model} messages={len(messages)}")

    result = adapter.complete(messages, config)

    logger.info(f"Completion finished: provider={config.provider} content_length={len(result.content)} tokens={result.tokens_used}")
    return result
