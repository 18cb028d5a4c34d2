"""
Songwriting service: the six public operations.

Each operation follows the same shape:
1. Build an OperationRequest from the caller's arguments
2. CapabilityAdapter routes it to a provider and returns raw output
3. The matching normalizer turns raw output into a typed result

Two chained flows mirror what the editor does after a rewrite or a fresh
generation: generate_and_analyze() and optimize_and_analyze().

Design Philosophy:
- The service is stateless; settings (provider choice + keys) arrive with every call
- Errors propagate untouched, except on the cosmetic assets path (see normalize_assets)
- Safe to call reentrantly: nothing is shared between calls
"""

from __future__ import annotations

import logging
from typing import Optional

from hymnforge.adapter import CapabilityAdapter
from hymnforge.config import DEFAULT_COVER_TITLE, DEFAULT_STYLE
from hymnforge.models import (
    AISettings,
    AnalysisResult,
    AnalyzeRequest,
    AssetsRequest,
    CoverImageRequest,
    GeneratedSong,
    GenerateRequest,
    OptimizeRequest,
    SongAssets,
    TipsRequest,
)
from hymnforge.normalize import (
    extract_image,
    normalize_analysis,
    normalize_assets,
    normalize_lyrics,
    normalize_song,
    normalize_tips,
)

logger = logging.getLogger(__name__)


class SongwritingService:
    """Facade over the adapter and normalizer.

    Usage:
        service = SongwritingService()
        settings = AISettings(provider="gemini", credentials=ProviderCredentials(gemini="..."))

        analysis = service.analyze(lyrics, settings)
        print(analysis.overall_score)
    """

    def __init__(self, adapter: Optional[CapabilityAdapter] = None):
        self.adapter = adapter or CapabilityAdapter()

    def analyze(self, lyrics: str, settings: AISettings) -> AnalysisResult:
        """Score lyrics and list concrete improvements."""
        raw = self.adapter.execute(AnalyzeRequest(lyrics=lyrics), settings)
        return normalize_analysis(raw)

    def generate(
        self,
        theme: str,
        settings: AISettings,
        style: str = DEFAULT_STYLE,
    ) -> GeneratedSong:
        """Write a complete song package for a theme.

        The returned lyrics always start with an [Intro] section.
        """
        raw = self.adapter.execute(GenerateRequest(theme=theme, style=style), settings)
        return normalize_song(raw)

    def optimize(
        self,
        lyrics: str,
        suggestions: list[str],
        settings: AISettings,
    ) -> str:
        """Rewrite lyrics applying the given suggestions.

        Pass a single-element list to apply one suggestion.
        """
        request = OptimizeRequest(lyrics=lyrics, suggestions=list(suggestions))
        return normalize_lyrics(self.adapter.execute(request, settings))

    def generate_assets(
        self,
        title: str,
        lyrics: str,
        settings: AISettings,
        style: str = "",
    ) -> SongAssets:
        """Produce a social caption and stylized title.

        Never fails on a bad reply: an unusable reply yields a default caption
        and the title unchanged. Precondition and transport errors still raise.
        """
        request = AssetsRequest(title=title, lyrics=lyrics, style=style)
        raw = self.adapter.execute(request, settings)
        return normalize_assets(raw, title)

    def generate_cover_image(
        self,
        title: str,
        lyrics: str,
        settings: AISettings,
    ) -> str:
        """Generate cover art; returns base64-encoded image bytes.

        Needs a Gemini key even when another provider is active.
        """
        request = CoverImageRequest(title=title or DEFAULT_COVER_TITLE, lyrics=lyrics)
        return extract_image(self.adapter.execute(request, settings))

    def search_tips(self, query: str, settings: AISettings) -> str:
        """Answer a Suno knowledge-base question.

        Only Gemini backs the answer with a live web search; Zhipu answers
        from the model's own knowledge, so freshness is not guaranteed there.
        """
        return normalize_tips(self.adapter.execute(TipsRequest(query=query), settings))

    def generate_and_analyze(
        self,
        theme: str,
        settings: AISettings,
        style: str = DEFAULT_STYLE,
    ) -> tuple[GeneratedSong, AnalysisResult]:
        """Generate a song, then analyze its lyrics (two sequential calls)."""
        song = self.generate(theme, settings, style=style)
        logger.debug("generated '%s', analyzing", song.title)
        return song, self.analyze(song.lyrics, settings)

    def optimize_and_analyze(
        self,
        lyrics: str,
        analysis: AnalysisResult,
        settings: AISettings,
    ) -> tuple[str, AnalysisResult]:
        """Apply every suggestion from an analysis, then re-analyze the rewrite."""
        rewritten = self.optimize(lyrics, analysis.suggestions, settings)
        return rewritten, self.analyze(rewritten, settings)


_default_service: Optional[SongwritingService] = None


def _service() -> SongwritingService:
    global _default_service
    if _default_service is None:
        _default_service = SongwritingService()
    return _default_service


# Convenience functions for one-off calls
def analyze_lyrics(lyrics: str, settings: AISettings) -> AnalysisResult:
    return _service().analyze(lyrics, settings)


def generate_lyrics(theme: str, settings: AISettings, style: str = DEFAULT_STYLE) -> GeneratedSong:
    return _service().generate(theme, settings, style=style)


def optimize_lyrics(lyrics: str, suggestions: list[str], settings: AISettings) -> str:
    return _service().optimize(lyrics, suggestions, settings)


def generate_song_assets(title: str, lyrics: str, settings: AISettings, style: str = "") -> SongAssets:
    return _service().generate_assets(title, lyrics, settings, style=style)


def generate_cover_image(title: str, lyrics: str, settings: AISettings) -> str:
    return _service().generate_cover_image(title, lyrics, settings)


def search_suno_tips(query: str, settings: AISettings) -> str:
    return _service().search_tips(query, settings)
