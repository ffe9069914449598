"""
Chat-completion adapters for the supported LLM providers

Every adapter takes a provider-agnostic message list
([{"role": "system" | "user" | "assistant", "content": "..."}]) plus an
LLMConfig, performs exactly one network call and normalizes the response
into a CompletionResult.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import google.generativeai as genai
import requests
from openai import APIConnectionError, OpenAI

from docchat.deps.exceptions import (
    ConfigurationError,
    InvalidPayloadError,
    MissingAPIKeyError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

ChatMessage = Dict[str, str]

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TIMEOUT_SECONDS = 60.0

# Client errors meaning the provider could not be reached at all
TRANSPORT_ERRORS = (APIConnectionError, requests.ConnectionError, requests.Timeout)

# genai.configure sets the API key process-wide; calls hold this lock from
# configure until the response arrives so keys never cross between users
_GENAI_LOCK = threading.Lock()


@dataclass(frozen=True)
class CompletionResult:
    """Normalized provider response"""
    content: str
    tokens_used: int = 0


@dataclass(frozen=True)
class LLMConfig:
    """Fully resolved configuration for a single completion call"""
    provider: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def split_system_message(messages: List[ChatMessage]) -> Tuple[Optional[str], List[ChatMessage]]:
    """Return the first system message content and the remaining non-system messages"""
    system_message = next((m for m in messages if m["role"] == "system"), None)
    others = [m for m in messages if m["role"] != "system"]
    return (system_message["content"] if system_message else None), others


class ProviderAdapter:
    """Base class for provider variants"""

    provider: str = ""
    default_model: str = ""
    requires_api_key: bool = False
    uses_base_url: bool = False

    def complete(self, messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
        raise NotImplementedError

    def _require_api_key(self, config: LLMConfig) -> str:
        if not config.api_key or not config.api_key.strip():
            raise MissingAPIKeyError(self.provider)
        return config.api_key.strip()


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions through the official SDK"""

    provider = "openai"
    default_model = "gpt-4-turbo-preview"
    requires_api_key = True

    def complete(self, messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
        client = OpenAI(api_key=self._require_api_key(config), timeout=config.timeout, max_retries=0)

        response = client.chat.completions.create(
            model=config.model,
            messages=messages,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

        usage = getattr(response, "usage", None)
        return CompletionResult(
            content=response.choices[0].message.content or "",
            tokens_used=(usage.total_tokens or 0) if usage else 0,
        )


class ClaudeAdapter(ProviderAdapter):
    """
    Anthropic Messages API

    The system prompt goes into the top-level "system" field; the turn list
    only ever contains "user" and "assistant" roles.
    """

    provider = "claude"
    default_model = "claude-3-5-sonnet-20241022"
    requires_api_key = True

    def __init__(self, api_url: str = ANTHROPIC_MESSAGES_URL):
        self.api_url = api_url

    def build_payload(self, messages: List[ChatMessage], config: LLMConfig) -> Dict:
        system_text, others = split_system_message(messages)
        payload = {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "messages": [
                {
                    "role": "assistant" if m["role"] == "assistant" else "user",
                    "content": m["content"],
                }
                for m in others
            ],
        }
        if system_text is not None:
            payload["system"] = system_text
        return payload

    def complete(self, messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self._require_api_key(config),
            "anthropic-version": ANTHROPIC_VERSION,
        }
        response = requests.post(
            self.api_url,
            json=self.build_payload(messages, config),
            headers=headers,
            timeout=config.timeout,
        )
        response.raise_for_status()
        data = response.json()

        block = data["content"][0]
        usage = data["usage"]
        return CompletionResult(
            content=block["text"] if block.get("type") == "text" else "",
            tokens_used=usage["input_tokens"] + usage["output_tokens"],
        )


class GoogleAdapter(ProviderAdapter):
    """
    Gemini through google.generativeai chat sessions

    Gemini's simple chat form has no system role, so the system prompt is
    prepended to the last message. Token usage is not reported.
    """

    provider = "google"
    default_model = "gemini-pro"
    requires_api_key = True

    def build_prompt(self, messages: List[ChatMessage]) -> Tuple[List[Dict], str]:
        """Return (history, prompt) for a Gemini chat session"""
        system_text, others = split_system_message(messages)
        if not others:
            raise InvalidPayloadError("At least one user message is required")

        history = [
            {"role": "model" if m["role"] == "assistant" else "user", "parts": [m["content"]]}
            for m in others[:-1]
        ]
        last_message = others[-1]["content"]
        prompt = f"{system_text}\n\n{last_message}" if system_text is not None else last_message
        return history, prompt

    def complete(self, messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
        history, prompt = self.build_prompt(messages)
        api_key = self._require_api_key(config)

        with _GENAI_LOCK:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(config.model)
            chat = model.start_chat(history=history)

            response = chat.send_message(
                prompt,
                generation_config={
                    "max_output_tokens": config.max_tokens,
                    "temperature": config.temperature,
                },
                request_options={"timeout": config.timeout},
            )
            content = response.text
        return CompletionResult(content=content, tokens_used=0)


class SelfHostedAdapter(ProviderAdapter):
    """Base for local HTTP servers reachable by base URL"""

    uses_base_url = True
    default_base_url: str = ""
    path: str = ""
    label: str = ""

    def build_payload(self, messages: List[ChatMessage], config: LLMConfig) -> Dict:
        raise NotImplementedError

    def parse_response(self, data: Dict) -> CompletionResult:
        raise NotImplementedError

    def complete(self, messages: List[ChatMessage], config: LLMConfig) -> CompletionResult:
        base_url = (config.base_url or self.default_base_url).rstrip("/")
        url = f"{base_url}{self.path}"

        try:
            response = requests.post(
                url,
                json=self.build_payload(messages, config),
                headers={"Content-Type": "application/json"},
                timeout=config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{self.label} request to {url} failed: {str(e)}")
            raise ProviderUnavailableError(f"{self.label} API error: {str(e)}") from e

        if not response.ok:
            logger.error(f"{self.label} returned HTTP {response.status_code} from {url}")
            raise ProviderUnavailableError(f"{self.label} API error: {response.reason}")

        return self.parse_response(response.json())


class OllamaAdapter(SelfHostedAdapter):
    provider = "ollama"
    default_model = "llama2"
    default_base_url = "http://localhost:11434"
    path = "/api/chat"
    label = "Ollama"

    def build_payload(self, messages: List[ChatMessage], config: LLMConfig) -> Dict:
        return {"model": config.model, "messages": messages, "stream": False}

    def parse_response(self, data: Dict) -> CompletionResult:
        return CompletionResult(
            content=data["message"]["content"],
            tokens_used=data.get("eval_count") or 0,
        )


class LMStudioAdapter(SelfHostedAdapter):
    provider = "lmstudio"
    default_model = "kimi-k2-thinking"
    default_base_url = "http://localhost:1234"
    path = "/v1/chat/completions"
    label = "LM Studio"

    def build_payload(self, messages: List[ChatMessage], config: LLMConfig) -> Dict:
        return {
            "model": config.model,
            "messages": messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "stream": False,
        }

    def parse_response(self, data: Dict) -> CompletionResult:
        usage = data.get("usage") or {}
        return CompletionResult(
            content=data["choices"][0]["message"]["content"],
            tokens_used=usage.get("total_tokens") or 0,
        )


PROVIDER_ADAPTERS: Dict[str, ProviderAdapter] = {
    adapter.provider: adapter
    for adapter in (
        OpenAIAdapter(),
        GoogleAdapter(),
        ClaudeAdapter(),
        OllamaAdapter(),
        LMStudioAdapter(),
    )
}

SUPPORTED_PROVIDERS = tuple(PROVIDER_ADAPTERS)


def get_adapter(provider: str) -> ProviderAdapter:
    """Select the adapter for a provider tag"""
    try:
        return PROVIDER_ADAPTERS[provider]
    except KeyError:
        raise ConfigurationError(f"Unsupported provider: {provider}")
