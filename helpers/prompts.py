from flask import render_template

from models.generation import GenerationRequest, PromptPayload, StyleProfile
from models.platform import PLATFORM_CONFIGS, Platform
from helpers.text_utils import platform_label

DEFAULT_TONE = {"en": "Professional", "ar": "احترافية"}
DEFAULT_AUDIENCE = {"en": "Business Owners", "ar": "رواد الأعمال"}

_HORIZON_TEXT = {
    "ar": {
        "none": "بدون إطار زمني: توليد محتوى الآن يخدم الحضور العام.",
        "2w": "هدف خلال أسبوعين (14 يومًا).",
        "1m": "هدف خلال شهر (30 يومًا).",
        "45d": "هدف خلال 45 يومًا.",
        "2m": "هدف خلال شهرين (60 يومًا).",
    },
    "en": {
        "none": "No timeframe: generate content for immediate use and general presence.",
        "2w": "Goal within 2 weeks (14 days).",
        "1m": "Goal within 1 month (30 days).",
        "45d": "Goal within 45 days.",
        "2m": "Goal within 2 months (60 days).",
    },
}


def horizon_text(horizon, language):
    """Describe a goal horizon ("2w", "1m", ...) in the output language."""
    table = _HORIZON_TEXT["en" if language == "en" else "ar"]
    return table.get(horizon, table["none"])


def escape_for_json(value):
    """Make caller text safe to embed inside a quoted JSON-looking prompt line."""
    return (
        str(value or "")
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", " ")
        .replace("\n", " ")
    )


def _tone(request):
    return request.tone or DEFAULT_TONE[request.language]


def _audience(request):
    return request.audience or DEFAULT_AUDIENCE[request.language]


def _platform_context(platforms, brand_line):
    platforms = tuple(platforms)
    return {
        "has_x": Platform.X in platforms,
        "has_linkedin": Platform.LINKEDIN in platforms,
        "has_instagram": Platform.INSTAGRAM in platforms,
        "multi": len(platforms) > 1,
        "tags": [PLATFORM_CONFIGS[p].tag for p in platforms],
        "x_limit": PLATFORM_CONFIGS[Platform.X].max_length,
        "brand_line": (brand_line or "").strip(),
    }


def render_system_prompt(request, platforms, brand_line=""):
    """Render the system instructions for a plain (non-strategic) request."""
    return render_template(
        f"prompts/system_{request.language}.txt",
        **_platform_context(platforms, brand_line),
    ).strip()


def render_user_prompt(request, platforms):
    """Render the user instructions: topic, platform, tone and audience."""
    names = " + ".join(PLATFORM_CONFIGS[p].name for p in platforms)
    return render_template(
        f"prompts/user_{request.language}.txt",
        topic=request.topic,
        platform_names=names,
        tone=_tone(request),
        audience=_audience(request),
        multi=len(tuple(platforms)) > 1,
    ).strip()


def build_prompt(request: GenerationRequest, platforms=None, brand_line="") -> PromptPayload:
    """
    Build the prompt for one completion.

    Args:
        request: The normalized generation request.
        platforms: Platforms this completion must cover. Defaults to every
            platform in the request; more than one asks for tagged sections.
        brand_line: Optional marker every post should start with.

    Returns:
        PromptPayload with system and user instructions. Identical inputs
        always give identical prompts.
    """
    if request.is_strategic:
        return build_strategic_prompt(request, brand_line=brand_line)

    platforms = tuple(platforms or request.platforms)
    return PromptPayload(
        system=render_system_prompt(request, platforms, brand_line),
        user=render_user_prompt(request, platforms),
    )


def build_strategic_prompt(request: GenerationRequest, brand_line="") -> PromptPayload:
    """Build the voice/goal/trend prompt that asks for the strict JSON envelope."""
    lang = request.language
    style = request.style_profile or StyleProfile()
    trend = request.trend_context
    mode = request.mode or "post"
    horizon = horizon_text(request.goal_horizon, lang)
    platform = request.platform or platform_label(request.platforms)

    system = render_template(
        "prompts/strategic_system.txt",
        style=style,
        is_en=lang == "en",
        trends=trend.trends if trend else [],
        trend_rule=trend.recommendation_rule if trend else "",
        brand_line=(brand_line or "").strip(),
    ).strip()

    user = render_template(
        "prompts/strategic_user.txt",
        topic=escape_for_json(request.topic),
        platform=escape_for_json(platform),
        language=lang,
        tone=escape_for_json(_tone(request)),
        audience=escape_for_json(_audience(request)),
        mode=mode,
        goal=escape_for_json(request.goal),
        goal_horizon=request.goal_horizon,
        horizon_text=escape_for_json(horizon),
        series_count=request.series_count,
        x_limit=PLATFORM_CONFIGS[Platform.X].max_length,
    ).strip()

    return PromptPayload(system=system, user=user)
