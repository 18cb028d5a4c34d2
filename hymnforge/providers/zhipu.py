"""
Zhipu GLM backend over plain HTTP.

The chat-completions endpoint only returns text. Structured output is
limited to "JSON object" mode, so contracts travel inside the prompt body
as a shape description (see `hymnforge.schemas.SchemaFormat.TEXT`).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from hymnforge.config import ZHIPU, ZHIPU_CHAT_URL, ZHIPU_MAX_TOKENS, ZHIPU_MODEL, ZHIPU_TOP_P
from hymnforge.errors import TransportError
from hymnforge.providers.base import CompletionRequest, Provider, ProviderConfig, ResponseMode
from hymnforge.schemas import SchemaFormat

logger = logging.getLogger(__name__)


class ZhipuProvider(Provider):
    """Zhipu GLM chat transport.

    Usage:
        provider = ZhipuProvider(api_key="...")
        text = provider.complete(CompletionRequest(prompt="Hello", temperature=0.7))
    """

    DEFAULT_TEMPERATURE = 0.7

    def __init__(
        self,
        api_key: str,
        config: Optional[ProviderConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(api_key, config)
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return ZHIPU

    @property
    def schema_format(self) -> SchemaFormat:
        return SchemaFormat.TEXT

    @property
    def url(self) -> str:
        return self.config.base_url or ZHIPU_CHAT_URL

    def build_payload(self, request: CompletionRequest) -> dict:
        """Assemble the JSON body for one chat-completions call."""
        messages = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({"role": "user", "content": request.prompt})

        temperature = request.temperature
        if temperature is None:
            temperature = self.DEFAULT_TEMPERATURE

        response_type = "json_object" if request.mode is ResponseMode.JSON else "text"
        return {
            "model": self.config.model or ZHIPU_MODEL,
            "messages": messages,
            "temperature": temperature,
            "top_p": self.config.top_p if self.config.top_p is not None else ZHIPU_TOP_P,
            "max_tokens": self.config.max_tokens or ZHIPU_MAX_TOKENS,
            "response_format": {"type": response_type},
        }

    def complete(self, request: CompletionRequest) -> str:
        payload = self.build_payload(request)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(
            "zhipu request: model=%s response_format=%s",
            payload["model"], payload["response_format"]["type"],
        )

        try:
            response = self.session.post(
                self.url,
                headers=headers,
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, str(e)) from e

        if not response.ok:
            raise TransportError(
                self.name,
                _error_message(response),
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                self.name, "response body is not JSON", status=response.status_code,
            ) from e

        content = _reply_content(data)
        if content is None:
            raise TransportError(
                self.name, "unexpected response shape", status=response.status_code,
            )
        return content


def _reply_content(data: Any) -> Optional[str]:
    """Text of the first choice, "" when there is none, None when the body is malformed."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices") or []
    if not isinstance(choices, list):
        return None
    if not choices:
        return ""
    choice = choices[0]
    if not isinstance(choice, dict):
        return None
    message = choice.get("message") or {}
    if not isinstance(message, dict):
        return None
    content = message.get("content") or ""
    if not isinstance(content, str):
        return None
    return content


def _error_message(response: requests.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:300] or response.reason or "unknown error"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return response.text[:300] or response.reason or "unknown error"
