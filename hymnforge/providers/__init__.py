"""
AI provider backends.

This module provides:
- Provider: the interface every backend implements
- GeminiProvider: google-genai SDK (structured output, images, web search)
- ZhipuProvider: GLM chat completions over HTTP (text, JSON object mode)
- create_provider(): factory keyed by provider tag
"""

from __future__ import annotations

from typing import Optional

from hymnforge.config import GEMINI, ZHIPU
from hymnforge.providers.base import (
    CompletionRequest,
    Provider,
    ProviderConfig,
    ResponseMode,
)
from hymnforge.providers.gemini import GeminiProvider
from hymnforge.providers.zhipu import ZhipuProvider

__all__ = [
    "CompletionRequest",
    "Provider",
    "ProviderConfig",
    "ResponseMode",
    "GeminiProvider",
    "ZhipuProvider",
    "create_provider",
]


def create_provider(
    name: str,
    api_key: str,
    config: Optional[ProviderConfig] = None,
) -> Provider:
    """Create a provider by tag.

    Args:
        name: Provider tag ('gemini' or 'zhipu')
        api_key: Credential for that provider
        config: Optional transport configuration

    Returns:
        Configured provider
    """
    name_lower = name.lower()

    if name_lower == GEMINI:
        return GeminiProvider(api_key, config)

    elif name_lower == ZHIPU:
        return ZhipuProvider(api_key, config)

    else:
        raise ValueError(f"Unknown provider: {name}")
