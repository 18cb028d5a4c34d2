"""
Tests for the songwriting service facade.

These tests drive the six operations and the two chained flows through
fake providers (see conftest.py).

Run with: pytest tests/test_service.py -v
"""

import base64

import pytest

from conftest import ANALYSIS_REPLY, FakeProvider, as_json
from hymnforge.errors import EmptyResultError, NormalizationError, PreconditionError, TransportError
from hymnforge.models import AISettings, ProviderCredentials, SongAssets
from hymnforge.normalize import normalize_analysis
from hymnforge.service import SongwritingService


class TestAnalyze:
    """Lyric analysis."""

    def test_scenario(self, service, backends, gemini_settings, analysis_reply):
        backends.reply("gemini", as_json(analysis_reply))
        result = service.analyze("[Verse]\n...\n[Chorus]\n...", gemini_settings)
        assert result.overall_score == 72
        assert result.scores.structure == 95
        assert result.suggestions == ["Add a Bridge section"]
        assert result.suno_tags_check.valid is False
        assert result.suno_tags_check.missing_tags == ["Outro"]
        assert result.to_dict() == ANALYSIS_REPLY

    def test_zhipu_fenced_reply(self, service, backends, zhipu_settings, analysis_reply):
        backends.reply("zhipu", "```json\n" + as_json(analysis_reply) + "\n```")
        result = service.analyze("lyrics", zhipu_settings)
        assert result.feedback == "..."

    def test_malformed_reply(self, service, backends, gemini_settings):
        backends.reply("gemini", "I think these lyrics are lovely.")
        with pytest.raises(NormalizationError):
            service.analyze("lyrics", gemini_settings)

    def test_transport_error_propagates(self, adapter, gemini_settings):
        class Failing(FakeProvider):
            def complete(self, request):
                raise TransportError("gemini", "quota exceeded", status=429)

        adapter.provider_factory = lambda name, key: Failing(key, name)
        with pytest.raises(TransportError) as excinfo:
            SongwritingService(adapter).analyze("lyrics", gemini_settings)
        assert excinfo.value.status == 429
        assert excinfo.value.provider == "gemini"


class TestGenerate:
    """Song generation."""

    def test_intro_prefixed(self, service, backends, zhipu_settings, song_reply):
        backends.reply("zhipu", as_json(song_reply))
        song = service.generate("Red Sea crossing", zhipu_settings)
        assert song.lyrics.startswith("[Intro]\n(Atmospheric build up)\n\n[Verse 1]")
        assert song.title == "红海开路"
        assert song.style_prompts == song_reply["stylePrompts"]
        assert song.suggested_settings is None

    def test_default_style(self, service, backends, gemini_settings, song_reply):
        backends.reply("gemini", as_json(song_reply))
        service.generate("Grace", gemini_settings)
        assert "Style Reference: Modern Worship" in backends.last("gemini").requests[0].prompt

    def test_missing_key(self, service, backends):
        with pytest.raises(PreconditionError):
            service.generate("Grace", AISettings(provider="gemini"))
        assert backends.created == []


class TestOptimize:
    """Lyric rewriting."""

    def test_fence_stripped(self, service, backends, gemini_settings):
        backends.reply("gemini", "```text\n[Verse]\nnew\n[Bridge]\nmore\n```")
        assert service.optimize("old", ["Add a Bridge"], gemini_settings) == "[Verse]\nnew\n[Bridge]\nmore"

    def test_single_suggestion(self, service, backends, zhipu_settings):
        backends.reply("zhipu", "[Verse]\nnew")
        service.optimize("old", ["Stronger imagery"], zhipu_settings)
        prompt = backends.last("zhipu").requests[0].prompt
        assert "Feedback to Apply:\nStronger imagery\n" in prompt

    def test_empty_reply(self, service, backends, gemini_settings):
        backends.reply("gemini", "")
        with pytest.raises(EmptyResultError):
            service.optimize("old", ["x"], gemini_settings)


class TestAssets:
    """Caption and stylized title."""

    def test_valid(self, service, backends, gemini_settings):
        backends.reply("gemini", as_json({"caption": "新歌上线 #worship", "stylizedTitle": "✦ 活水 ✦"}))
        assets = service.generate_assets("活水", "lyrics", gemini_settings, style="Gospel")
        assert assets == SongAssets(caption="新歌上线 #worship", stylized_title="✦ 活水 ✦")

    def test_malformed_falls_back(self, service, backends, zhipu_settings):
        backends.reply("zhipu", "{not json")
        assets = service.generate_assets("活水", "lyrics", zhipu_settings)
        assert assets.caption
        assert assets.stylized_title == "活水"

    def test_precondition_still_raises(self, service):
        settings = AISettings(provider="zhipu", credentials=ProviderCredentials(gemini="g"))
        with pytest.raises(PreconditionError):
            service.generate_assets("活水", "lyrics", settings)

    def test_merge_with_cover(self, service, backends, gemini_settings, make_image_response):
        backends.reply(
            "gemini",
            as_json({"caption": "c", "stylizedTitle": "s"}),
            image_response=make_image_response(b"img"),
        )
        assets = service.generate_assets("t", "l", gemini_settings)
        cover = service.generate_cover_image("t", "l", gemini_settings)
        merged = assets.merge(SongAssets(cover_image=cover))
        assert merged.to_dict() == {
            "coverImage": base64.b64encode(b"img").decode("ascii"),
            "caption": "c",
            "stylizedTitle": "s",
        }


class TestCoverImage:
    """Cover art generation."""

    def test_returns_base64(self, service, backends, both_settings, make_image_response):
        backends.reply("gemini", image_response=make_image_response(b"\x89PNG"))
        encoded = service.generate_cover_image("活水", "江河", both_settings)
        assert base64.b64decode(encoded) == b"\x89PNG"

    def test_default_title(self, service, backends, gemini_settings, make_image_response):
        backends.reply("gemini", image_response=make_image_response())
        service.generate_cover_image("", "lyrics", gemini_settings)
        assert '"Worship Song"' in backends.last("gemini").image_prompts[0]

    def test_requires_gemini(self, service, backends, zhipu_settings):
        with pytest.raises(PreconditionError):
            service.generate_cover_image("活水", "lyrics", zhipu_settings)
        assert backends.created == []

    def test_no_image(self, service, backends, gemini_settings, make_image_response):
        backends.reply("gemini", image_response=make_image_response(None))
        with pytest.raises(EmptyResultError):
            service.generate_cover_image("活水", "lyrics", gemini_settings)


class TestTips:
    """Knowledge-base answers."""

    def test_gemini(self, service, backends, gemini_settings):
        backends.reply("gemini", "  Use [Bridge] before the final chorus.\n")
        assert service.search_tips("Bridge", gemini_settings) == "Use [Bridge] before the final chorus."
        assert backends.last("gemini").requests[0].web_search

    def test_zhipu(self, service, backends, zhipu_settings):
        backends.reply("zhipu", "Tip")
        assert service.search_tips("Bridge", zhipu_settings) == "Tip"

    def test_empty(self, service, backends, zhipu_settings):
        with pytest.raises(EmptyResultError):
            service.search_tips("Bridge", zhipu_settings)


class TestChainedFlows:
    """Multi-call flows run sequentially on the same provider."""

    def test_generate_and_analyze(self, service, backends, gemini_settings, song_reply, analysis_reply):
        backends.reply("gemini", as_json(song_reply), as_json(analysis_reply))
        song, analysis = service.generate_and_analyze("Red Sea crossing", gemini_settings)
        assert analysis.overall_score == 72
        second = backends.last("gemini").requests[-1]
        assert song.lyrics in second.prompt
        assert second.prompt.count("[Intro]") == 1

    def test_optimize_and_analyze(self, service, backends, zhipu_settings, analysis_reply):
        analysis = normalize_analysis(as_json(analysis_reply))
        analysis.suggestions = ["Add a Bridge section", "Add an Outro"]
        backends.reply("zhipu", "[Verse]\nnew\n[Bridge]\nb\n[Outro]\no", as_json(ANALYSIS_REPLY))

        rewritten, again = service.optimize_and_analyze("old", analysis, zhipu_settings)
        assert rewritten.endswith("[Outro]\no")
        assert again.overall_score == 72
        prompts = [r.prompt for r in backends.last("zhipu").requests]
        assert "Add a Bridge section\nAdd an Outro" in prompts[0]
        assert rewritten in prompts[1]

    def test_first_failure_stops_chain(self, service, backends, gemini_settings):
        backends.reply("gemini", "not json")
        with pytest.raises(NormalizationError):
            service.generate_and_analyze("Grace", gemini_settings)
        assert len(backends.last("gemini").requests) == 1
