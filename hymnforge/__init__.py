"""
HymnForge: AI songwriting assistant for Suno worship songs

Wraps two interchangeable AI backends (Gemini and Zhipu GLM) behind one
set of operations: analyze, generate and optimize lyrics, generate release
assets and cover art, and answer Suno knowledge-base questions.

License: MIT
"""

__version__ = "0.1.0"

from hymnforge.models import (
    AISettings,
    AnalysisResult,
    GeneratedSong,
    ProviderCredentials,
    SongAssets,
)
from hymnforge.service import SongwritingService

__all__ = [
    "AISettings",
    "AnalysisResult",
    "GeneratedSong",
    "ProviderCredentials",
    "SongAssets",
    "SongwritingService",
]
