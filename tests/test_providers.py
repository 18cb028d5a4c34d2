"""
Tests for the provider transports.

No network access: Zhipu gets a stub session, Gemini a stub client.

Tests cover:
- Zhipu payload assembly and error mapping
- Gemini generation config and SDK error wrapping
- The provider factory
"""

import json
from types import SimpleNamespace

import httpx
import pytest
import requests
from google.genai import errors as genai_errors
from google.genai import types

from hymnforge.errors import PreconditionError, TransportError
from hymnforge.providers import (
    CompletionRequest,
    GeminiProvider,
    ProviderConfig,
    ResponseMode,
    ZhipuProvider,
    create_provider,
)


def make_response(status, body):
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class StubSession:
    """Captures post() calls and returns a canned response (or raises)."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def chat_reply(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class StubModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append(dict(model=model, contents=contents, config=config))
        if self.error is not None:
            raise self.error
        return self.response


def stub_client(response=None, error=None):
    return SimpleNamespace(models=StubModels(response, error))


class TestZhipuPayload:
    """Request body for the chat-completions endpoint."""

    def test_json_mode(self):
        provider = ZhipuProvider("z-key")
        payload = provider.build_payload(CompletionRequest(
            prompt="Analyze", system_instruction="You are a critic",
            temperature=0.4, mode=ResponseMode.JSON,
        ))
        assert payload["model"] == "glm-4.6"
        assert payload["messages"] == [
            {"role": "system", "content": "You are a critic"},
            {"role": "user", "content": "Analyze"},
        ]
        assert payload["temperature"] == 0.4
        assert payload["top_p"] == 0.7
        assert payload["max_tokens"] == 4096
        assert payload["response_format"] == {"type": "json_object"}

    def test_text_mode_defaults(self):
        payload = ZhipuProvider("z-key").build_payload(CompletionRequest(prompt="Tips"))
        assert payload["messages"] == [{"role": "user", "content": "Tips"}]
        assert payload["temperature"] == 0.7
        assert payload["response_format"] == {"type": "text"}

    def test_config_overrides(self):
        config = ProviderConfig(model="glm-4-plus", top_p=0.9, max_tokens=1024)
        payload = ZhipuProvider("z-key", config).build_payload(CompletionRequest(prompt="x"))
        assert payload["model"] == "glm-4-plus"
        assert payload["top_p"] == 0.9
        assert payload["max_tokens"] == 1024


class TestZhipuTransport:
    """HTTP round trip and error mapping."""

    def test_success(self):
        session = StubSession(make_response(200, chat_reply("[Verse]\nnew")))
        provider = ZhipuProvider("z-key", session=session)
        assert provider.complete(CompletionRequest(prompt="x")) == "[Verse]\nnew"

        url, kwargs = session.calls[0]
        assert url == "https://open.bigmodel.cn/api/paas/v4/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer z-key"
        assert kwargs["timeout"] == 60.0
        assert kwargs["json"]["messages"][-1]["content"] == "x"

    def test_custom_base_url(self):
        session = StubSession(make_response(200, chat_reply("ok")))
        config = ProviderConfig(base_url="http://localhost:9000/chat", timeout=5)
        ZhipuProvider("z-key", config, session=session).complete(CompletionRequest(prompt="x"))
        url, kwargs = session.calls[0]
        assert url == "http://localhost:9000/chat"
        assert kwargs["timeout"] == 5

    def test_no_choices(self):
        session = StubSession(make_response(200, {"choices": []}))
        assert ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x")) == ""

    def test_http_error_with_message(self):
        body = {"error": {"code": "1001", "message": "Authentication failed"}}
        session = StubSession(make_response(401, body))
        with pytest.raises(TransportError) as excinfo:
            ZhipuProvider("bad", session=session).complete(CompletionRequest(prompt="x"))
        assert excinfo.value.status == 401
        assert excinfo.value.provider == "zhipu"
        assert excinfo.value.message == "Authentication failed"

    def test_http_error_plain_body(self):
        session = StubSession(make_response(502, "Bad Gateway"))
        with pytest.raises(TransportError) as excinfo:
            ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x"))
        assert excinfo.value.status == 502
        assert "Bad Gateway" in excinfo.value.message

    def test_connection_error(self):
        session = StubSession(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(TransportError) as excinfo:
            ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x"))
        assert excinfo.value.status is None
        assert "refused" in str(excinfo.value)

    @pytest.mark.parametrize("body", [
        [],
        '"just a string"',
        {"choices": "none"},
        {"choices": ["text"]},
        {"choices": [{"message": "text"}]},
        {"choices": [{"message": {"content": ["a", "b"]}}]},
    ])
    def test_unexpected_shape(self, body):
        """A 2xx body without the chat-completions shape is a transport failure."""
        session = StubSession(make_response(200, body))
        with pytest.raises(TransportError, match="unexpected response shape") as excinfo:
            ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x"))
        assert excinfo.value.status == 200

    def test_missing_message_is_empty(self):
        session = StubSession(make_response(200, {"choices": [{"index": 0}]}))
        assert ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x")) == ""

    def test_non_json_success_body(self):
        session = StubSession(make_response(200, "<html>oops</html>"))
        with pytest.raises(TransportError):
            ZhipuProvider("z-key", session=session).complete(CompletionRequest(prompt="x"))


class TestGeminiConfig:
    """Translation of CompletionRequest into GenerateContentConfig."""

    def test_json_with_schema(self):
        schema = types.Schema(type=types.Type.OBJECT, properties={"a": types.Schema(type=types.Type.STRING)})
        config = GeminiProvider("g-key").build_config(CompletionRequest(
            prompt="x", system_instruction="sys", temperature=0.4,
            mode=ResponseMode.JSON, schema=schema,
        ))
        assert config.system_instruction == "sys"
        assert config.temperature == 0.4
        assert config.response_mime_type == "application/json"
        assert config.response_schema == schema
        assert not config.tools

    def test_text_with_search(self):
        config = GeminiProvider("g-key").build_config(CompletionRequest(prompt="x", web_search=True))
        assert config.response_mime_type is None
        assert config.temperature is None
        assert len(config.tools) == 1
        assert config.tools[0].google_search is not None


class TestGeminiTransport:
    """SDK round trip through a stub client."""

    def test_complete(self):
        client = stub_client(SimpleNamespace(text='{"caption": "c"}'))
        provider = GeminiProvider("g-key", client=client)
        assert provider.complete(CompletionRequest(prompt="hello")) == '{"caption": "c"}'
        call = client.models.calls[0]
        assert call["model"] == "gemini-2.5-flash"
        assert call["contents"] == "hello"

    def test_complete_without_text(self):
        provider = GeminiProvider("g-key", client=stub_client(SimpleNamespace(text=None)))
        assert provider.complete(CompletionRequest(prompt="hello")) == ""

    def test_model_override(self):
        client = stub_client(SimpleNamespace(text="ok"))
        provider = GeminiProvider("g-key", ProviderConfig(model="gemini-2.5-pro"), client=client)
        provider.complete(CompletionRequest(prompt="x"))
        assert client.models.calls[0]["model"] == "gemini-2.5-pro"

    def test_generate_image(self):
        sentinel = object()
        client = stub_client(sentinel)
        assert GeminiProvider("g-key", client=client).generate_image("cover") is sentinel
        call = client.models.calls[0]
        assert call["model"] == "gemini-2.5-flash-image"
        assert call["config"].response_modalities == [types.Modality.IMAGE]
        assert call["contents"].parts[0].text == "cover"

    def test_api_error_wrapped(self):
        error = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}},
        )
        provider = GeminiProvider("g-key", client=stub_client(error=error))
        with pytest.raises(TransportError) as excinfo:
            provider.complete(CompletionRequest(prompt="x"))
        assert excinfo.value.status == 429
        assert excinfo.value.provider == "gemini"
        assert "Resource exhausted" in str(excinfo.value)

    @pytest.mark.parametrize("error", [
        httpx.ConnectTimeout("timed out"),
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("read timed out"),
    ])
    def test_network_error_wrapped(self, error):
        """Timeouts and connection failures surface as TransportError."""
        provider = GeminiProvider("g-key", client=stub_client(error=error))
        with pytest.raises(TransportError) as excinfo:
            provider.complete(CompletionRequest(prompt="x"))
        assert excinfo.value.provider == "gemini"
        assert excinfo.value.status is None
        assert excinfo.value.__cause__ is error

    def test_image_network_error_wrapped(self):
        provider = GeminiProvider("g-key", client=stub_client(error=httpx.ConnectTimeout("timed out")))
        with pytest.raises(TransportError, match="timed out"):
            provider.generate_image("cover")


class TestFactory:
    """create_provider()"""

    def test_known_providers(self):
        assert isinstance(create_provider("gemini", "g"), GeminiProvider)
        assert isinstance(create_provider("ZHIPU", "z"), ZhipuProvider)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_provider("openai", "k")

    def test_empty_key(self):
        with pytest.raises(PreconditionError):
            create_provider("gemini", "")

    def test_capabilities(self):
        gemini = create_provider("gemini", "g")
        zhipu = create_provider("zhipu", "z")
        assert gemini.supports_images and gemini.supports_web_search
        assert not zhipu.supports_images and not zhipu.supports_web_search
        with pytest.raises(PreconditionError):
            zhipu.generate_image("cover")
