"""Shared fixtures: fake providers so no test touches the network."""

import json
from types import SimpleNamespace

import pytest

from hymnforge.adapter import CapabilityAdapter
from hymnforge.models import AISettings, ProviderCredentials
from hymnforge.providers.base import Provider
from hymnforge.schemas import SchemaFormat
from hymnforge.service import SongwritingService


ANALYSIS_REPLY = {
    "scores": {"theology": 80, "structure": 95, "flow": 70, "imagery": 60, "innovation": 55},
    "overallScore": 72,
    "feedback": "...",
    "suggestions": ["Add a Bridge section"],
    "sunoTagsCheck": {"valid": False, "missingTags": ["Outro"], "message": "Missing Outro"},
}

SONG_REPLY = {
    "title": "红海开路",
    "stylePrompts": "Contemporary Worship, Piano, Strings, 90bpm",
    "negativePrompts": "Rap, Heavy Metal",
    "lyrics": "[Verse 1]\n海水分开\n\n[Chorus]\n主是道路",
}


class FakeProvider(Provider):
    """Records every request and replays canned output."""

    def __init__(self, api_key, tag, replies=None, image_response=None):
        self._tag = tag
        super().__init__(api_key)
        self.replies = list(replies or [])
        self.image_response = image_response
        self.requests = []
        self.image_prompts = []

    @property
    def name(self):
        return self._tag

    @property
    def schema_format(self):
        return SchemaFormat.NATIVE if self._tag == "gemini" else SchemaFormat.TEXT

    @property
    def supports_images(self):
        return self._tag == "gemini"

    @property
    def supports_web_search(self):
        return self._tag == "gemini"

    def complete(self, request):
        self.requests.append(request)
        return self.replies.pop(0) if self.replies else ""

    def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        return self.image_response


class FakeBackends:
    """Provider factory handing out one FakeProvider per tag."""

    def __init__(self):
        self.providers = {}
        self.created = []

    def reply(self, tag, *replies, image_response=None):
        self.providers[tag] = dict(replies=list(replies), image_response=image_response)

    def __call__(self, tag, api_key):
        self.created.append((tag, api_key))
        entry = self.providers.setdefault(tag, {})
        provider = FakeProvider(
            api_key, tag,
            replies=entry.get("replies"),
            image_response=entry.get("image_response"),
        )
        # Instances of one tag share a reply queue and request logs
        entry["replies"] = provider.replies
        provider.requests = entry.setdefault("requests", [])
        provider.image_prompts = entry.setdefault("image_prompts", [])
        entry["instance"] = provider
        return provider

    def last(self, tag):
        """Most recent instance for `tag`; its logs cover every call on that tag."""
        return self.providers[tag]["instance"]


@pytest.fixture
def backends():
    return FakeBackends()


@pytest.fixture
def adapter(backends):
    return CapabilityAdapter(provider_factory=backends)


@pytest.fixture
def service(adapter):
    return SongwritingService(adapter)


@pytest.fixture
def gemini_settings():
    return AISettings(provider="gemini", credentials=ProviderCredentials(gemini="g-key"))


@pytest.fixture
def zhipu_settings():
    return AISettings(provider="zhipu", credentials=ProviderCredentials(zhipu="z-key"))


@pytest.fixture
def both_settings():
    return AISettings(
        provider="zhipu",
        credentials=ProviderCredentials(gemini="g-key", zhipu="z-key"),
    )


def image_response(data=b"\x89PNG fake"):
    """Build an object shaped like a genai image response."""
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type="image/png"))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def as_json(data):
    return json.dumps(data, ensure_ascii=False)


@pytest.fixture
def analysis_reply():
    return json.loads(as_json(ANALYSIS_REPLY))


@pytest.fixture
def song_reply():
    return json.loads(as_json(SONG_REPLY))


@pytest.fixture
def make_image_response():
    return image_response
