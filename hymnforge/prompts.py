"""System instructions and prompt builders for each operation."""

from __future__ import annotations

from hymnforge.config import ASSET_LYRICS_LIMIT, COVER_LYRICS_LIMIT

ANALYSIS_SYSTEM_INSTRUCTION = """
You are an expert Contemporary Chinese Worship Hymn Producer and Suno AI Prompt Engineer.
Your goal is to analyze lyrics provided by the user and score them based on professional standards for modern worship music (SOP, ROLCC, Clay Music styles) and Suno AI generation optimization.

You must analyze based on these pillars:
1. **Theology (神学性):** Is the message biblically sound? Does it use metaphorical language (Light, River, Rock) to be poetic yet spiritual?
2. **Structure (结构标准):** Does it strictly follow Suno AI V5 structure ([Intro], [Verse], [Chorus], [Bridge], [Outro])? Are the tags correct?
3. **Flow (可唱性):** Is the rhythm consistent? Do the lyrics fit a standard 4/4 or 6/8 time signature? Are the rhymes natural?
4. **Imagery (意境美感):** Does it evoke emotion? Avoid dry theological terms; use "Living Water", "Fire", "Home".
5. **Innovation (创意):** Is it unique or too cliché?

Your output must be valid JSON.
""".strip()

GENERATION_SYSTEM_INSTRUCTION = """
You are a world-class Chinese Worship Songwriter specializing in Suno AI V5.
Your task is to create a complete song package based on the user's theme.

**CRITICAL RULE:** THE LYRICS **MUST** START WITH "[Intro]". NO EXCEPTIONS.

**Requirements:**
1. **Lyrics:**
   - **Structure:** START with [Intro]. Then [Verse 1] -> [Pre-Chorus] -> [Chorus] -> [Verse 2] -> [Chorus] -> [Bridge] -> [Chorus] -> [Outro].
   - **Content:** Modern, poetic Chinese worship style. Deep theology but accessible language.
   - **Tags:** Include internal style tags in parentheses, e.g. (Soft piano), (Drums enter).
2. **Metadata:**
   - **Style Prompts:** A comma-separated string of English tags for Suno, e.g. "Contemporary Worship, Piano, Strings, Male Vocal, 95bpm".
   - **Negative Prompts:** A comma-separated string of things to avoid, e.g. "Rap, Heavy Metal, Distorted, Screaming".
   - **Title:** A creative Chinese title.
   - **Suggested Settings:** Weirdness and style influence on a 1-10 scale, plus the vocal gender that suits the song.

Your output must be valid JSON matching the schema.
""".strip()

OPTIMIZATION_SYSTEM_INSTRUCTION = """
You are a professional Lyrics Editor. Your goal is to REWRITE the provided lyrics to fix specific issues.
1. You will be given the lyrics and a set of suggestions (or a single suggestion).
2. Apply the changes requested in the suggestions while keeping the rest of the song intact.
3. Ensure the output preserves all Suno tags (e.g. [Verse], [Chorus]).
4. Return ONLY the full rewritten lyrics as a string. No JSON, no conversation.
""".strip()

ASSET_GENERATION_SYSTEM_INSTRUCTION = """
You are a Social Media Manager for a Music Label.
Generate the following assets for a Chinese Worship Song:
1. **Social Caption:** A short, engaging caption for TikTok/Instagram/YouTube Shorts (Chinese). Include emojis and hashtags.
2. **Stylized Title:** A visually aesthetic version of the song title using unicode characters, e.g. ⋆｡°✩ Title ✩°｡⋆ or 〖 Title 〗.

Your output must be valid JSON matching the schema.
""".strip()

# Zhipu has no search tool; the model answers from what it already knows.
TIPS_SYSTEM_INSTRUCTION = """
You are a Suno AI V5 expert who follows the songwriting community closely.
Answer as if you had access to the latest tips, tricks and community discussions about Suno.
Be concrete: name tags, metatags and style prompts, and give short examples.
""".strip()


def analysis_prompt(lyrics: str) -> str:
    return f"Analyze the following Chinese worship lyrics for a Suno AI song generation:\n\n{lyrics}"


def generation_prompt(theme: str, style: str) -> str:
    return (
        "Write a modern Chinese worship hymn.\n"
        f"Theme: {theme}\n"
        f"Style Reference: {style}"
    )


def optimization_prompt(lyrics: str, suggestions: list[str]) -> str:
    feedback = "\n".join(suggestions)
    return (
        f"Original Lyrics:\n{lyrics}\n\n"
        f"Feedback to Apply:\n{feedback}\n\n"
        "Rewrite the lyrics to be perfect."
    )


def assets_prompt(title: str, lyrics: str, style: str) -> str:
    return (
        f"Song Title: {title}\n"
        f"Style: {style}\n"
        f"Lyrics: {lyrics[:ASSET_LYRICS_LIMIT]}..."
    )


def cover_prompt(title: str, lyrics: str) -> str:
    return (
        f'A high quality, artistic album cover for a modern christian worship song titled "{title}". '
        f"Visual themes based on lyrics: {lyrics[:COVER_LYRICS_LIMIT]}. "
        "Cinematic lighting, ethereal, hopeful, 8k resolution, digital art style, no text."
    )


def tips_prompt(query: str, live_search: bool) -> str:
    """Build the knowledge-base prompt.

    Args:
        query: What the songwriter wants to know
        live_search: Whether the provider will run a web search for this call
    """
    lead = "Search for" if live_search else "Share"
    return (
        f"{lead} the latest tips and tricks for Suno AI V5, specifically focusing on: {query}.\n"
        "Summarize the findings into a helpful guide for a songwriter in Chinese.\n"
        "Focus on tags, metatags, and style prompts."
    )


def with_schema(prompt: str, shape: str) -> str:
    """Append an inlined JSON shape description to a prompt body."""
    return f"{prompt}\n\n{shape}"
