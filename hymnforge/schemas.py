"""
Structured-output contracts and their provider renderings.

Each contract is declared once as a tree of `Field` nodes and rendered two ways:
- SchemaFormat.NATIVE: a `google.genai.types.Schema` passed as `response_schema`
- SchemaFormat.TEXT: a JSON skeleton with type hints, concatenated into the prompt

The same tree drives validation in `hymnforge.normalize`, so the renderings
and the checks cannot drift apart.

Usage:
    from hymnforge.schemas import ANALYSIS, render

    schema = render(ANALYSIS, "gemini")   # types.Schema
    shape = render(ANALYSIS, "zhipu")     # str for the prompt body
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from google.genai import types

from hymnforge.config import GEMINI, ZHIPU


class SchemaFormat(str, Enum):
    """How a provider consumes a contract."""
    NATIVE = "native"
    TEXT = "text"


PROVIDER_SCHEMA_FORMAT = {
    GEMINI: SchemaFormat.NATIVE,
    ZHIPU: SchemaFormat.TEXT,
}


@dataclass(frozen=True)
class Field:
    """One node of a contract.

    Attributes:
        kind: 'object', 'array', 'string', 'number', 'integer' or 'boolean'
        description: Hint shown to the model
        required: Whether the parent object must contain this field
        minimum / maximum: Inclusive numeric bounds
        enum: Allowed string values
        items: Element type for arrays
        properties: Ordered (name, Field) pairs for objects
    """
    kind: str
    description: str = ""
    required: bool = True
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: tuple[str, ...] = ()
    items: Optional["Field"] = None
    properties: tuple[tuple[str, "Field"], ...] = ()

    def child(self, name: str) -> Optional["Field"]:
        for key, value in self.properties:
            if key == name:
                return value
        return None


@dataclass(frozen=True)
class Contract:
    name: str
    root: Field


def _object(description: str = "", required: bool = True, **properties: Field) -> Field:
    return Field(
        "object",
        description=description,
        required=required,
        properties=tuple(properties.items()),
    )


def _score(description: str) -> Field:
    return Field("number", description=description, minimum=0, maximum=100)


def _text(description: str = "", required: bool = True) -> Field:
    return Field("string", description=description, required=required)


def _text_list(description: str) -> Field:
    return Field("array", description=description, items=Field("string"))


ANALYSIS = Contract(
    "Analysis",
    _object(
        scores=_object(
            theology=_score("Score 0-100 for biblical depth and accuracy"),
            structure=_score("Score 0-100 for Suno structure and tags"),
            flow=_score("Score 0-100 for rhythm, rhyme, and singability"),
            imagery=_score("Score 0-100 for emotional impact and metaphor"),
            innovation=_score("Score 0-100 for creativity"),
        ),
        overallScore=_score("Average score 0-100"),
        feedback=_text("A professional summary critique of the lyrics (in Chinese)"),
        suggestions=_text_list("List of specific actionable improvements (in Chinese)"),
        sunoTagsCheck=_object(
            valid=Field("boolean", description="Are the Suno tags valid?"),
            missingTags=_text_list("List of standard tags missing (e.g. Outro)"),
            message=_text("Feedback on structure"),
        ),
    ),
)

GENERATION = Contract(
    "Generation",
    _object(
        title=_text("Song title in Chinese"),
        stylePrompts=_text("English style tags for Suno"),
        negativePrompts=_text("Things to avoid"),
        lyrics=_text("The complete lyrics with tags, MUST start with [Intro]"),
        suggestedSettings=_object(
            "Recommended Suno generation settings",
            required=False,
            weirdness=Field(
                "integer", description="Experimentalism level 1-10", minimum=1, maximum=10,
            ),
            styleInfluence=Field(
                "integer", description="Style adherence level 1-10", minimum=1, maximum=10,
            ),
            vocalGender=Field(
                "string",
                description="Preferred vocal",
                required=False,
                enum=("Male", "Female", "Both"),
            ),
        ),
    ),
)

ASSETS = Contract(
    "Assets",
    _object(
        caption=_text("Viral social media caption with hashtags"),
        stylizedTitle=_text("Aesthetically designed title with unicode symbols"),
    ),
)

CONTRACTS = {contract.name: contract for contract in (ANALYSIS, GENERATION, ASSETS)}


# ----------------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------------

_NATIVE_TYPES = {
    "object": types.Type.OBJECT,
    "array": types.Type.ARRAY,
    "string": types.Type.STRING,
    "number": types.Type.NUMBER,
    "integer": types.Type.INTEGER,
    "boolean": types.Type.BOOLEAN,
}


def _to_native(node: Field) -> types.Schema:
    kwargs = {"type": _NATIVE_TYPES[node.kind]}
    if node.description:
        kwargs["description"] = node.description
    if node.minimum is not None:
        kwargs["minimum"] = float(node.minimum)
    if node.maximum is not None:
        kwargs["maximum"] = float(node.maximum)
    if node.enum:
        kwargs["enum"] = list(node.enum)
    if node.items is not None:
        kwargs["items"] = _to_native(node.items)
    if node.properties:
        kwargs["properties"] = {name: _to_native(child) for name, child in node.properties}
        kwargs["required"] = [name for name, child in node.properties if child.required]
    return types.Schema(**kwargs)


def _leaf_hint(node: Field) -> str:
    if node.enum:
        hint = "one of " + "|".join(node.enum)
    else:
        hint = node.kind
        if node.minimum is not None and node.maximum is not None:
            hint += f" {node.minimum:g}-{node.maximum:g}"
    text = f"<{hint}>"
    if node.description:
        text += f" {node.description}"
    return text


def _to_skeleton(node: Field):
    if node.kind == "object":
        return {name: _to_skeleton(child) for name, child in node.properties}
    if node.kind == "array":
        return [_to_skeleton(node.items)] if node.items is not None else []
    return _leaf_hint(node)


def field_paths(contract: Contract, required: Optional[bool] = None) -> list[str]:
    """Dotted paths of every named field in a contract, in declaration order.

    Args:
        contract: Contract to walk
        required: If given, keep only fields whose `required` flag matches
    """
    paths = []

    def walk(node: Field, prefix: str):
        for name, child in node.properties:
            path = f"{prefix}{name}"
            if required is None or child.required == required:
                paths.append(path)
            walk(child, f"{path}.")

    walk(contract.root, "")
    return paths


def _to_text(contract: Contract) -> str:
    skeleton = json.dumps(_to_skeleton(contract.root), indent=2, ensure_ascii=False)
    lines = [
        "Respond with a single JSON object shaped exactly like the example below.",
        "Each value describes the expected type; replace it with real content.",
        skeleton,
        "Required fields: " + ", ".join(field_paths(contract, required=True)),
    ]
    optional = field_paths(contract, required=False)
    if optional:
        lines.append("Optional fields (omit when not applicable): " + ", ".join(optional))
    return "\n".join(lines)


RenderedSchema = Union[types.Schema, str]


def render(contract: Contract, target: Union[str, SchemaFormat]) -> RenderedSchema:
    """Render a contract for a provider tag or an explicit schema format.

    Rendering is pure: the same arguments always produce equal output.
    """
    if isinstance(target, SchemaFormat):
        fmt = target
    else:
        try:
            fmt = PROVIDER_SCHEMA_FORMAT[target]
        except KeyError:
            raise ValueError(f"Unknown provider: {target!r}") from None
    if fmt is SchemaFormat.NATIVE:
        return _to_native(contract.root)
    return _to_text(contract)
