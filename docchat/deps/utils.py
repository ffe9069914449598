"""
Utility functions for LLM provider clients
"""

import re
from typing import Optional


def _mask(value: str) -> str:
    return value[:4] + "*" * (len(value) - 8) + value[-4:] if len(value) > 8 else "****"


def sanitize_api_key(text: str, api_key: Optional[str] = None) -> str:
    """
    Sanitize API key from text (logs, error messages, etc.)

    Args:
        text: Text that may contain API key
        api_key: Optional API key to mask (if None, will detect common patterns)

    Returns:
        Text with API key masked/replaced
    """
    if not text:
        return text

    if api_key and api_key in text:
        text = text.replace(api_key, _mask(api_key))

    # Common key formats: OpenAI (sk-...), Anthropic (sk-ant-...), Google (AIza...)
    patterns = [
        r'sk-ant-[a-zA-Z0-9_\-]{20,}',
        r'sk-[a-zA-Z0-9]{20,}',
        r'AIza[0-9A-Za-z_\-]{30,}',
        r'[a-zA-Z0-9]{32,}',
    ]

    for pattern in patterns:
        text = re.sub(pattern, lambda m: _mask(m.group()), text)

    return text


def mask_api_key(api_key: Optional[str]) -> Optional[str]:
    """Mask a stored key for display, keeping only its first and last four characters"""
    if not api_key:
        return None
    return _mask(api_key)
