"""
Project-wide configuration constants.

This module defines the model identifiers, endpoints, sampling parameters
and text limits used throughout HymnForge. Values are plain module-level
constants so that every layer (providers, adapter, normalizer, CLI) reads
the same numbers.

Module Contents:
    APP_NAME: Application name for display purposes
    SETTINGS_DIR: Directory for the local key store
    GEMINI_TEXT_MODEL / GEMINI_IMAGE_MODEL: Gemini model ids
    ZHIPU_MODEL / ZHIPU_CHAT_URL: Zhipu chat-completions target
    TEMPERATURES: Sampling temperature per operation
    CANONICAL_INTRO / INTRO_PREFIX: Forced opening section for generated lyrics

Example:
    >>> from hymnforge.config import TEMPERATURES
    >>> TEMPERATURES["analyze"]
    0.4
"""

from pathlib import Path

# Application name for display and identification
APP_NAME = "HymnForge"

# Local key store (keys.json) lives here when the OS keychain is unavailable
SETTINGS_DIR = Path.home() / ".hymnforge"

# Provider tags
GEMINI = "gemini"
ZHIPU = "zhipu"
PROVIDERS = (GEMINI, ZHIPU)
DEFAULT_PROVIDER = GEMINI

# Gemini (google-genai SDK)
GEMINI_TEXT_MODEL = "gemini-2.5-flash"
GEMINI_IMAGE_MODEL = "gemini-2.5-flash-image"

# Zhipu (OpenAI-style chat completions over plain HTTP)
ZHIPU_MODEL = "glm-4.6"
ZHIPU_CHAT_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
ZHIPU_TOP_P = 0.7
ZHIPU_MAX_TOKENS = 4096

# Transport timeout in seconds, applied at the provider boundary
REQUEST_TIMEOUT = 60.0

# Lower for evaluative tasks, higher for creative ones
TEMPERATURES = {
    "analyze": 0.4,
    "optimize": 0.6,
    "generate": 0.7,
    "assets": 0.8,
}
# Zhipu has no provider default we can defer to for tips
ZHIPU_TIPS_TEMPERATURE = 0.7

# Lyric prefix lengths embedded in secondary prompts
ASSET_LYRICS_LIMIT = 500
COVER_LYRICS_LIMIT = 100

# Generated lyrics always open with this section
CANONICAL_INTRO = "[Intro]"
INTRO_PREFIX = "[Intro]\n(Atmospheric build up)\n\n"

# Assets fallback when the provider reply is unusable
DEFAULT_CAPTION = "Check out my new song!"
DEFAULT_COVER_TITLE = "Worship Song"
DEFAULT_STYLE = "Modern Worship"
