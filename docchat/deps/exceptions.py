"""
Custom exceptions surfaced to API callers as {code, message}
"""


class DocChatError(Exception):
    """Base exception for errors with a stable error code"""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationRequiredError(DocChatError):
    """Raised when no user identity could be resolved for the request"""

    code = "AUTHENTICATION_REQUIRED"
    status_code = 401
    default_message = "Authentication is required"


class ConfigurationError(DocChatError):
    """Raised for an unknown provider tag or a missing required credential"""

    code = "CONFIGURATION_ERROR"
    status_code = 500
    default_message = "LLM provider is not configured correctly"


class MissingAPIKeyError(ConfigurationError):
    """Raised when a hosted provider has no API key from user settings or environment"""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"{provider} API key is required. Please add it to your LLM settings "
            f"or configure {provider.upper()}_API_KEY"
        )


class ProviderUnavailableError(DocChatError):
    """Raised when a self-hosted provider answers with a non-success status"""

    code = "PROVIDER_UNAVAILABLE"
    status_code = 502
    default_message = "LLM provider is unavailable"


class InvalidPayloadError(DocChatError):
    """Raised when a request payload is malformed"""

    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request payload"


class SessionNotFoundError(DocChatError):
    """Raised when a session does not exist or belongs to another user"""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Session not found"


class ChatFailedError(DocChatError):
    """Raised when a chat exchange fails for a reason without a more specific code"""

    code = "CHAT_ERROR"
    status_code = 500
    default_message = "Chat request failed"
