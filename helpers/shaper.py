"""
Response Shaper

Turns raw completion text into the per-platform output contract. Shaping
never fails a request: when structured extraction does not work the raw text
is used as plain content for the requested platform(s).
"""

import json
import logging
from typing import Dict, Iterable, Optional

from models.generation import GenerationRequest, ShapedOutput
from models.platform import PLATFORM_CONFIGS, Platform
from helpers.text_utils import (
    clamp_text,
    ensure_brand_line,
    extract_tag,
    parse_json_loose,
    platform_label,
    split_platform_sections,
    strip_code_fences,
)

logger = logging.getLogger(__name__)

# Keys of the strategic JSON envelope copied into meta when present
ENVELOPE_EXTRAS = ("strategic", "series", "replies", "trend", "notes", "mode")

SOURCE_JSON = "json"
SOURCE_TAGS = "tags"
SOURCE_HEADINGS = "headings"
SOURCE_RAW = "raw"


def _coerce_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "\n\n".join(_coerce_text(item) for item in value if item)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def finalize_text(text, platform: Platform, brand_line: str = "") -> str:
    """Trim, enforce the brand line and clamp to the platform limit."""
    text = _coerce_text(text).strip()
    text = ensure_brand_line(text, brand_line)
    return clamp_text(text, PLATFORM_CONFIGS[platform].max_length)


def shape_section(raw, platform: Platform, brand_line: str = "") -> str:
    """
    Shape the output of a completion that targeted a single platform.

    A tagged section for the platform wins, then a heading-delimited
    section, then the whole text.
    """
    raw = _coerce_text(raw)
    text = extract_tag(raw, PLATFORM_CONFIGS[platform].tag)
    if not text:
        text = split_platform_sections(raw).get(platform, "")
    if not text:
        text = strip_code_fences(raw) if raw.lstrip().startswith("```") else raw
    return finalize_text(text, platform, brand_line)


def build_output(
    texts: Dict[Platform, str],
    request: GenerationRequest,
    platforms: Iterable[Platform],
    meta: Optional[dict] = None,
) -> ShapedOutput:
    """Assemble already-shaped per-platform texts into a ShapedOutput."""
    platforms = tuple(platforms)
    output = ShapedOutput(
        linkedin=texts.get(Platform.LINKEDIN, ""),
        x=texts.get(Platform.X, ""),
        instagram=(
            texts.get(Platform.INSTAGRAM, "")
            if Platform.INSTAGRAM in platforms
            else None
        ),
        language=request.language,
        meta={
            "label": platform_label(platforms),
            "platforms": [p.value for p in platforms],
        },
    )
    if meta:
        output.meta.update(meta)
    return output


def shape(
    raw,
    request: GenerationRequest,
    platforms: Optional[Iterable[Platform]] = None,
    brand_line: str = "",
) -> ShapedOutput:
    """
    Shape a completion that may hold several platform sections.

    Sources are tried in order: JSON envelope, [TAG] sections, platform
    headings, then the raw text for every platform still missing.

    Args:
        raw: The raw completion text.
        request: The request the completion answered.
        platforms: Platforms to fill. Defaults to the request's platforms.
        brand_line: Optional marker every post must start with.

    Returns:
        ShapedOutput whose meta records where each section came from.
    """
    raw = _coerce_text(raw)
    platforms = tuple(platforms or request.platforms)
    found: Dict[Platform, str] = {}
    sources: Dict[str, str] = {}
    meta: dict = {}

    parsed = parse_json_loose(raw) if "{" in raw else None
    if parsed is not None and parsed.ok:
        envelope = parsed.value
        for platform in platforms:
            value = _coerce_text(envelope.get(platform.value)).strip()
            if value:
                found[platform] = value
                sources[platform.value] = SOURCE_JSON
        for key in ENVELOPE_EXTRAS:
            if envelope.get(key):
                meta[key] = envelope[key]
    elif request.is_strategic:
        reason = parsed.error if parsed is not None else "no JSON object found"
        logger.warning(f"Could not parse JSON envelope, falling back to text: {reason}")
        meta["repair_error"] = reason

    for platform in platforms:
        if platform in found:
            continue
        tagged = extract_tag(raw, PLATFORM_CONFIGS[platform].tag)
        if tagged:
            found[platform] = tagged
            sources[platform.value] = SOURCE_TAGS

    missing = [p for p in platforms if p not in found]
    if missing:
        sections = split_platform_sections(raw)
        for platform in missing:
            if sections.get(platform):
                found[platform] = sections[platform]
                sources[platform.value] = SOURCE_HEADINGS

    plain = None
    for platform in platforms:
        if platform in found:
            continue
        if plain is None:
            plain = strip_code_fences(raw) if raw.lstrip().startswith("```") else raw
        found[platform] = plain
        sources[platform.value] = SOURCE_RAW

    texts = {p: finalize_text(found[p], p, brand_line) for p in platforms}
    meta["sources"] = sources
    return build_output(texts, request, platforms, meta)
