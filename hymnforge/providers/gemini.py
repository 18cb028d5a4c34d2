"""
Gemini backend over the google-genai SDK.

Supports everything the service needs:
- Native structured output (response_schema)
- Image generation (IMAGE response modality)
- Live web search (google_search tool)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from hymnforge.config import GEMINI, GEMINI_IMAGE_MODEL, GEMINI_TEXT_MODEL
from hymnforge.errors import TransportError
from hymnforge.providers.base import CompletionRequest, Provider, ProviderConfig, ResponseMode
from hymnforge.schemas import SchemaFormat

logger = logging.getLogger(__name__)


class GeminiProvider(Provider):
    """Gemini transport.

    Usage:
        provider = GeminiProvider(api_key="...")
        text = provider.complete(CompletionRequest(prompt="Hello"))
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[ProviderConfig] = None,
        client: Any = None,
    ):
        super().__init__(api_key, config)
        self._client = client

    @property
    def name(self) -> str:
        return GEMINI

    @property
    def schema_format(self) -> SchemaFormat:
        return SchemaFormat.NATIVE

    @property
    def supports_images(self) -> bool:
        return True

    @property
    def supports_web_search(self) -> bool:
        return True

    @property
    def text_model(self) -> str:
        return self.config.model or GEMINI_TEXT_MODEL

    @property
    def image_model(self) -> str:
        return self.config.image_model or GEMINI_IMAGE_MODEL

    def _get_client(self):
        """Lazy initialization of the genai client."""
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.config.timeout * 1000)),
            )
        return self._client

    def build_config(self, request: CompletionRequest) -> types.GenerateContentConfig:
        """Translate a CompletionRequest into the SDK's generation config."""
        kwargs = {}
        if request.system_instruction:
            kwargs["system_instruction"] = request.system_instruction
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.mode is ResponseMode.JSON:
            kwargs["response_mime_type"] = "application/json"
            if request.schema is not None:
                kwargs["response_schema"] = request.schema
        if request.web_search:
            kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        return types.GenerateContentConfig(**kwargs)

    def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig):
        client = self._get_client()
        try:
            return client.models.generate_content(model=model, contents=contents, config=config)
        except genai_errors.APIError as e:
            raise TransportError(self.name, e.message or str(e), status=e.code) from e
        except httpx.HTTPError as e:
            # Connection failures and timeouts come from the SDK's HTTP layer
            raise TransportError(self.name, str(e) or type(e).__name__) from e

    def complete(self, request: CompletionRequest) -> str:
        config = self.build_config(request)
        logger.debug(
            "gemini request: model=%s mode=%s search=%s",
            self.text_model, request.mode.value, request.web_search,
        )
        response = self._generate(self.text_model, request.prompt, config)
        return response.text or ""

    def generate_image(self, prompt: str) -> Any:
        logger.debug("gemini image request: model=%s", self.image_model)
        return self._generate(
            self.image_model,
            types.Content(role="user", parts=[types.Part.from_text(text=prompt)]),
            types.GenerateContentConfig(response_modalities=[types.Modality.IMAGE]),
        )
