"""
Provider interface shared by all AI backends.

This module defines:
- ResponseMode: what kind of output a call asks for
- CompletionRequest: one fully-assembled text call
- ProviderConfig: per-provider transport settings
- Provider: abstract base class each backend implements

Design Philosophy:
- Providers are thin transports: they receive a finished prompt and return raw output
- Providers never retry and never fall back to another provider
- Capabilities are declared as properties so the adapter can route without isinstance checks
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from hymnforge.config import REQUEST_TIMEOUT
from hymnforge.errors import PreconditionError
from hymnforge.schemas import RenderedSchema, SchemaFormat


class ResponseMode(str, Enum):
    TEXT = "text"
    JSON = "json"
    IMAGE = "image"


@dataclass
class CompletionRequest:
    """A text request ready for the wire.

    Attributes:
        prompt: User-facing prompt body
        system_instruction: System prompt, if any
        temperature: Sampling temperature; None leaves the provider default
        mode: TEXT or JSON
        schema: Native schema object for providers that enforce one
        web_search: Attach the provider's live search tool
    """
    prompt: str
    system_instruction: Optional[str] = None
    temperature: Optional[float] = None
    mode: ResponseMode = ResponseMode.TEXT
    schema: Optional[RenderedSchema] = None
    web_search: bool = False


@dataclass
class ProviderConfig:
    """Transport configuration for a provider."""
    model: Optional[str] = None
    image_model: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = REQUEST_TIMEOUT
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None


class Provider(ABC):
    """Abstract base class for AI backends.

    All providers must implement:
    - name: provider tag
    - schema_format: how structured-output contracts are delivered
    - complete(): one text round trip

    Image-capable providers also override generate_image().
    """

    def __init__(self, api_key: str, config: Optional[ProviderConfig] = None):
        if not api_key:
            raise PreconditionError(f"API key required for provider '{self.name}'")
        self.api_key = api_key
        self.config = config or ProviderConfig()

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider tag (e.g., 'gemini', 'zhipu')."""
        pass

    @property
    @abstractmethod
    def schema_format(self) -> SchemaFormat:
        pass

    @property
    def supports_images(self) -> bool:
        return False

    @property
    def supports_web_search(self) -> bool:
        return False

    @abstractmethod
    def complete(self, request: CompletionRequest) -> str:
        """Send a text request and return the raw reply text.

        Raises:
            TransportError: The provider reported a failure
        """
        pass

    def generate_image(self, prompt: str) -> Any:
        """Request an image and return the provider's raw response."""
        raise PreconditionError(f"Provider '{self.name}' cannot generate images")
