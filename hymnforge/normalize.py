"""
Response normalizer: raw provider output -> typed results.

This module provides:
- strip_code_fences(): remove one layer of ``` wrapping
- parse_json(): parse (and lightly repair) a JSON reply, then check it against a contract
- normalize_*(): one entry point per operation, enforcing the invariants
  the contracts promise but providers do not guarantee

Failure policy:
- Analysis, Generation and Optimize replies that cannot be used raise
  NormalizationError / EmptyResultError
- Assets replies never raise: they degrade to a default caption and the
  echoed title
"""

from __future__ import annotations

import base64
import json
import logging
import math
import re
from typing import Any

from hymnforge.config import CANONICAL_INTRO, DEFAULT_CAPTION, INTRO_PREFIX
from hymnforge.errors import EmptyResultError, NormalizationError
from hymnforge.models import AnalysisResult, GeneratedSong, SongAssets
from hymnforge.schemas import ANALYSIS, ASSETS, GENERATION, Contract, Field

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(
    r"^\s*```[\w+-]*[ \t]*\r?\n(?P<body>.*?)\r?\n?[ \t]*```\s*$",
    re.DOTALL,
)

UNEXPLAINED_INVALID_MESSAGE = "Structure check failed without naming the missing tags."


def strip_code_fences(text: str) -> str:
    """Remove a single wrapping fenced-code block, if present.

    Text without a wrapping fence is returned unchanged; the inner content
    of a fenced block is returned byte-for-byte.

    Example:
        >>> strip_code_fences("```json\\n{\\"a\\": 1}\\n```")
        '{"a": 1}'
    """
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body")
    return text


def _require_text(raw: Any, what: str) -> str:
    if raw is None or not str(raw).strip():
        raise EmptyResultError(f"Provider returned no {what}")
    return str(raw)


def _repair_json(text: str) -> str:
    """Best-effort cleanup for replies with chatter around the JSON object."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        text = text[start:end + 1]
    # Trailing commas before closing brackets
    text = re.sub(r",\s*}", "}", text)
    text = re.sub(r",\s*]", "]", text)
    return text


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clamp(value, node: Field):
    if node.minimum is not None and value < node.minimum:
        value = type(value)(node.minimum)
    if node.maximum is not None and value > node.maximum:
        value = type(value)(node.maximum)
    return value


def _check(value: Any, node: Field, path: str, contract: str) -> Any:
    """Validate one value against its contract node, returning the cleaned value."""
    where = path or "<root>"

    if node.kind == "object":
        if not isinstance(value, dict):
            raise NormalizationError(contract, f"{where} must be an object")
        cleaned = {}
        for name, child in node.properties:
            child_path = f"{path}.{name}" if path else name
            if value.get(name) is None:
                if child.required:
                    raise NormalizationError(contract, f"missing required field '{child_path}'")
                continue
            try:
                cleaned[name] = _check(value[name], child, child_path, contract)
            except NormalizationError as e:
                if child.required:
                    raise
                logger.warning("Dropping optional field %s: %s", child_path, e)
        return cleaned

    if node.kind == "array":
        if not isinstance(value, list):
            raise NormalizationError(contract, f"{where} must be a list")
        return [
            _check(item, node.items, f"{where}[{i}]", contract)
            for i, item in enumerate(value)
        ]

    if node.kind == "string":
        if not isinstance(value, str):
            raise NormalizationError(contract, f"{where} must be a string")
        if node.enum and value not in node.enum:
            raise NormalizationError(
                contract, f"{where} must be one of {', '.join(node.enum)}, got {value!r}"
            )
        return value

    if node.kind == "number":
        if not _is_number(value):
            raise NormalizationError(contract, f"{where} must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise NormalizationError(contract, f"{where} must be a finite number, got {value!r}")
        return _clamp(value, node)

    if node.kind == "integer":
        if _is_number(value) and float(value).is_integer():
            return _clamp(int(value), node)
        raise NormalizationError(contract, f"{where} must be an integer")

    if node.kind == "boolean":
        if not isinstance(value, bool):
            raise NormalizationError(contract, f"{where} must be true or false")
        return value

    raise NormalizationError(contract, f"{where} has unsupported kind {node.kind!r}")


def validate(data: Any, contract: Contract) -> dict:
    """Check parsed JSON against a contract.

    Required fields must be present and type-correct; bounded numbers are
    clamped into range; invalid optional fields are dropped.

    Raises:
        NormalizationError: A required field is missing or malformed
    """
    return _check(data, contract.root, "", contract.name)


def parse_json(text: str, contract: Contract) -> dict:
    """Parse a provider reply into a validated dict for `contract`."""
    cleaned = strip_code_fences(text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        try:
            data = json.loads(_repair_json(cleaned))
        except json.JSONDecodeError as e:
            raise NormalizationError(contract.name, f"malformed JSON ({e.msg})") from e
    return validate(data, contract)


def normalize_analysis(raw: Any) -> AnalysisResult:
    """Turn an analysis reply into an AnalysisResult.

    An invalid structural verdict always explains itself: if the provider
    marks the structure invalid without naming missing tags or giving a
    message, a generic message is filled in.
    """
    data = parse_json(_require_text(raw, "analysis"), ANALYSIS)
    result = AnalysisResult.from_dict(data)
    check = result.suno_tags_check
    if not check.valid and not check.missing_tags and not check.message.strip():
        check.message = UNEXPLAINED_INVALID_MESSAGE
    return result


def ensure_intro(lyrics: str) -> str:
    """Prepend a synthetic intro section unless the lyrics already open with one."""
    if lyrics.lstrip().lower().startswith(CANONICAL_INTRO.lower()):
        return lyrics
    return INTRO_PREFIX + lyrics


def normalize_song(raw: Any) -> GeneratedSong:
    data = parse_json(_require_text(raw, "song"), GENERATION)
    song = GeneratedSong.from_dict(data)
    song.lyrics = ensure_intro(song.lyrics)
    return song


def normalize_lyrics(raw: Any) -> str:
    """Rewritten lyrics: plain text with any wrapping fence removed."""
    text = strip_code_fences(_require_text(raw, "lyrics"))
    if not text.strip():
        raise EmptyResultError("Provider returned no lyrics")
    return text


def default_assets(title: str) -> SongAssets:
    return SongAssets(caption=DEFAULT_CAPTION, stylized_title=title)


def normalize_assets(raw: Any, title: str) -> SongAssets:
    """Turn an assets reply into SongAssets, degrading to defaults on any failure."""
    try:
        data = parse_json(_require_text(raw, "assets"), ASSETS)
    except (NormalizationError, EmptyResultError) as e:
        logger.warning("Asset reply unusable, using defaults: %s", e)
        return default_assets(title)
    return SongAssets(
        caption=data["caption"] if data["caption"].strip() else DEFAULT_CAPTION,
        stylized_title=data["stylizedTitle"] if data["stylizedTitle"].strip() else title,
    )


def normalize_tips(raw: Any) -> str:
    return _require_text(raw, "tips").strip()


def extract_image(response: Any) -> str:
    """Return the base64 image from the first candidate's first content part.

    Raises:
        EmptyResultError: No inline image data is present
    """
    candidates = getattr(response, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) or []
    inline = getattr(parts[0], "inline_data", None) if parts else None
    data = getattr(inline, "data", None) if inline is not None else None
    if not data:
        raise EmptyResultError("No image produced")
    if isinstance(data, bytes):
        return base64.b64encode(data).decode("ascii")
    return str(data)
