"""
Value records exchanged between the caller and the HymnForge core.

This module defines:
- Operation: the six public operations
- ProviderCredentials / AISettings: caller-owned configuration passed into every call
- Request records, one per operation (the OperationRequest union)
- Result records: AnalysisResult, GeneratedSong, SongAssets

Design Philosophy:
- Records are created fresh per call and owned by the caller afterwards
- Wire names (camelCase JSON keys) stay at the boundary: from_dict/to_dict
- Nothing here performs I/O
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

from hymnforge.config import DEFAULT_PROVIDER, DEFAULT_STYLE, GEMINI, PROVIDERS, ZHIPU


class Operation(str, Enum):
    """Public operations offered by the songwriting service."""
    ANALYZE = "analyze"
    GENERATE = "generate"
    OPTIMIZE = "optimize"
    GENERATE_ASSETS = "assets"
    GENERATE_COVER_IMAGE = "cover"
    SEARCH_TIPS = "tips"


@dataclass(frozen=True)
class ProviderCredentials:
    """One opaque API key per provider; either may be absent."""
    gemini: Optional[str] = None
    zhipu: Optional[str] = None

    def get(self, provider: str) -> Optional[str]:
        if provider == GEMINI:
            return self.gemini or None
        if provider == ZHIPU:
            return self.zhipu or None
        return None

    def has(self, provider: str) -> bool:
        return self.get(provider) is not None


@dataclass(frozen=True)
class AISettings:
    """Active provider selection plus credentials for a single call."""
    provider: str = DEFAULT_PROVIDER
    credentials: ProviderCredentials = field(default_factory=ProviderCredentials)

    def __post_init__(self):
        if self.provider not in PROVIDERS:
            raise ValueError(
                f"Unknown provider: {self.provider!r} (expected one of {', '.join(PROVIDERS)})"
            )

    @property
    def api_key(self) -> Optional[str]:
        """Credential for the active provider."""
        return self.credentials.get(self.provider)


# ----------------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------------

@dataclass
class AnalyzeRequest:
    operation: ClassVar[Operation] = Operation.ANALYZE
    lyrics: str


@dataclass
class GenerateRequest:
    operation: ClassVar[Operation] = Operation.GENERATE
    theme: str
    style: str = DEFAULT_STYLE


@dataclass
class OptimizeRequest:
    operation: ClassVar[Operation] = Operation.OPTIMIZE
    lyrics: str
    suggestions: list[str] = field(default_factory=list)


@dataclass
class AssetsRequest:
    operation: ClassVar[Operation] = Operation.GENERATE_ASSETS
    title: str
    lyrics: str
    style: str = ""


@dataclass
class CoverImageRequest:
    operation: ClassVar[Operation] = Operation.GENERATE_COVER_IMAGE
    title: str
    lyrics: str


@dataclass
class TipsRequest:
    operation: ClassVar[Operation] = Operation.SEARCH_TIPS
    query: str


OperationRequest = Union[
    AnalyzeRequest,
    GenerateRequest,
    OptimizeRequest,
    AssetsRequest,
    CoverImageRequest,
    TipsRequest,
]


# ----------------------------------------------------------------------------
# Results
# ----------------------------------------------------------------------------

SCORE_FIELDS = ("theology", "structure", "flow", "imagery", "innovation")


@dataclass
class Scores:
    """Five independent 0-100 sub-scores."""
    theology: float
    structure: float
    flow: float
    imagery: float
    innovation: float

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in SCORE_FIELDS}

    def values(self) -> list[float]:
        return [getattr(self, name) for name in SCORE_FIELDS]


@dataclass
class SunoTagsCheck:
    """Structural-validity verdict for the lyric's section markers."""
    valid: bool
    missing_tags: list[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "missingTags": list(self.missing_tags),
            "message": self.message,
        }


@dataclass
class AnalysisResult:
    """Scored critique of a lyric.

    Attributes:
        scores: Sub-scores, each in [0, 100]
        overall_score: Overall score in [0, 100]
        feedback: Free-text critique
        suggestions: Ordered, actionable improvements
        suno_tags_check: Structural-validity verdict
    """
    scores: Scores
    overall_score: float
    feedback: str
    suggestions: list[str]
    suno_tags_check: SunoTagsCheck

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        check = data["sunoTagsCheck"]
        return cls(
            scores=Scores(**{name: data["scores"][name] for name in SCORE_FIELDS}),
            overall_score=data["overallScore"],
            feedback=data["feedback"],
            suggestions=list(data["suggestions"]),
            suno_tags_check=SunoTagsCheck(
                valid=check["valid"],
                missing_tags=list(check["missingTags"]),
                message=check["message"],
            ),
        )

    def to_dict(self) -> dict:
        return {
            "scores": self.scores.to_dict(),
            "overallScore": self.overall_score,
            "feedback": self.feedback,
            "suggestions": list(self.suggestions),
            "sunoTagsCheck": self.suno_tags_check.to_dict(),
        }


VOCAL_GENDERS = ("Male", "Female", "Both")


@dataclass
class SuggestedSettings:
    """Generation knobs suggested alongside a song (levels 1-10)."""
    weirdness: int
    style_influence: int
    vocal_gender: Optional[str] = None

    def as_percent(self) -> dict:
        """Map the 1-10 levels onto the 0-100 slider scale."""
        return {
            "weirdness": self.weirdness * 10,
            "styleInfluence": self.style_influence * 10,
        }

    def to_dict(self) -> dict:
        data = {"weirdness": self.weirdness, "styleInfluence": self.style_influence}
        if self.vocal_gender:
            data["vocalGender"] = self.vocal_gender
        return data


@dataclass
class GeneratedSong:
    """A complete song package.

    `lyrics` always begins with the canonical intro marker once it has
    passed through the normalizer.
    """
    title: str
    style_prompts: str
    negative_prompts: str
    lyrics: str
    suggested_settings: Optional[SuggestedSettings] = None

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratedSong":
        settings = data.get("suggestedSettings")
        return cls(
            title=data["title"],
            style_prompts=data["stylePrompts"],
            negative_prompts=data["negativePrompts"],
            lyrics=data["lyrics"],
            suggested_settings=SuggestedSettings(
                weirdness=settings["weirdness"],
                style_influence=settings["styleInfluence"],
                vocal_gender=settings.get("vocalGender"),
            ) if settings else None,
        )

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "stylePrompts": self.style_prompts,
            "negativePrompts": self.negative_prompts,
            "lyrics": self.lyrics,
        }
        if self.suggested_settings is not None:
            data["suggestedSettings"] = self.suggested_settings.to_dict()
        return data


@dataclass
class SongAssets:
    """Release-kit assets; any subset of fields may be populated.

    Attributes:
        cover_image: Base64-encoded image bytes
        caption: Social media caption
        stylized_title: Decorated title text
    """
    cover_image: Optional[str] = None
    caption: Optional[str] = None
    stylized_title: Optional[str] = None

    def merge(self, other: "SongAssets") -> "SongAssets":
        """Return a new record with `other`'s populated fields laid over this one."""
        return SongAssets(
            cover_image=other.cover_image if other.cover_image is not None else self.cover_image,
            caption=other.caption if other.caption is not None else self.caption,
            stylized_title=(
                other.stylized_title if other.stylized_title is not None else self.stylized_title
            ),
        )

    def to_dict(self) -> dict:
        data = {}
        if self.cover_image is not None:
            data["coverImage"] = self.cover_image
        if self.caption is not None:
            data["caption"] = self.caption
        if self.stylized_title is not None:
            data["stylizedTitle"] = self.stylized_title
        return data
