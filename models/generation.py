"""
Request-scoped value objects for the generation pipeline.

Nothing here is persisted: a GenerationRequest is built from the HTTP body,
turned into a PromptPayload, and the model's reply is shaped into a
ShapedOutput that is serialized back to the caller.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from models.platform import Platform
from helpers.text_utils import normalize_language, normalize_platform

MODES = ("post", "series", "reply", "campaign", "ad")
GOAL_HORIZONS = ("none", "2w", "1m", "45d", "2m")

DEFAULT_SERIES_COUNT = 5
MIN_SERIES_COUNT = 2
MAX_SERIES_COUNT = 12
MAX_WRITING_SAMPLES = 5


class ValidationError(ValueError):
    """Raised when required request input is missing or empty."""

    pass


def _safe_str(value, default: str = "") -> str:
    if isinstance(value, str):
        return value.strip()
    return default


def _safe_list(value) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item and str(item).strip()]


def _clamp_int(value, default: int, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    return max(low, min(high, number))


def _pick(payload: Dict[str, Any], *keys):
    """Return the first present key, so camelCase and snake_case both work."""
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


@dataclass
class StyleProfile:
    """The author's voice: used as the primary guide in strategic prompts."""

    voice_name: str = "Khalid"
    bio: str = ""
    topics: List[str] = field(default_factory=list)
    do: List[str] = field(default_factory=list)
    dont: List[str] = field(default_factory=list)
    signature_phrases: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    writing_samples: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload) -> "StyleProfile":
        payload = payload if isinstance(payload, dict) else {}
        return cls(
            voice_name=_safe_str(_pick(payload, "voiceName", "voice_name"), "Khalid")
            or "Khalid",
            bio=_safe_str(payload.get("bio")),
            topics=_safe_list(payload.get("topics")),
            do=_safe_list(payload.get("do")),
            dont=_safe_list(payload.get("dont")),
            signature_phrases=_safe_list(
                _pick(payload, "signaturePhrases", "signature_phrases")
            ),
            keywords=_safe_list(payload.get("keywords")),
            writing_samples=_safe_list(
                _pick(payload, "writingSamples", "writing_samples")
            )[:MAX_WRITING_SAMPLES],
        )


@dataclass
class TrendContext:
    trends: List[str] = field(default_factory=list)
    recommendation_rule: str = ""

    @classmethod
    def from_payload(cls, payload) -> "TrendContext":
        payload = payload if isinstance(payload, dict) else {}
        return cls(
            trends=_safe_list(payload.get("trends")),
            recommendation_rule=_safe_str(
                _pick(payload, "recommendationRule", "recommendation_rule")
            ),
        )


@dataclass
class GenerationRequest:
    """A validated, normalized generation request."""

    topic: str
    platform: str = ""
    platforms: Tuple[Platform, ...] = ()
    tone: str = ""
    audience: str = ""
    language: str = "ar"
    mode: Optional[str] = None
    goal: str = ""
    goal_horizon: str = "none"
    series_count: int = DEFAULT_SERIES_COUNT
    style_profile: Optional[StyleProfile] = None
    trend_context: Optional[TrendContext] = None

    def __post_init__(self):
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise ValidationError("Missing text")
        self.topic = self.topic.strip()
        self.language = normalize_language(self.language)
        if not self.platforms:
            self.platforms = normalize_platform(self.platform)

    @classmethod
    def from_payload(cls, payload) -> "GenerationRequest":
        """
        Build a request from a decoded JSON body.

        Args:
            payload: The request body. ``text`` or ``idea`` carries the topic.

        Returns:
            A normalized GenerationRequest.

        Raises:
            ValidationError: If the topic is absent or blank.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Missing text")

        topic = _pick(payload, "text", "idea")
        if not isinstance(topic, str) or not topic.strip():
            raise ValidationError("Missing text")

        mode = _safe_str(payload.get("mode")).lower() or None
        if mode is not None and mode not in MODES:
            mode = "post"

        horizon = _safe_str(_pick(payload, "goalHorizon", "goal_horizon"), "none")
        if horizon not in GOAL_HORIZONS:
            horizon = "none"

        style = _pick(payload, "styleProfile", "style_profile")
        trends = _pick(payload, "trendContext", "trend_context")

        return cls(
            topic=topic,
            platform=_safe_str(payload.get("platform")),
            tone=_safe_str(payload.get("tone")),
            audience=_safe_str(payload.get("audience")),
            language=_safe_str(payload.get("language")),
            mode=mode,
            goal=_safe_str(payload.get("goal")),
            goal_horizon=horizon,
            series_count=_clamp_int(
                _pick(payload, "seriesCount", "series_count"),
                DEFAULT_SERIES_COUNT,
                MIN_SERIES_COUNT,
                MAX_SERIES_COUNT,
            ),
            style_profile=(
                StyleProfile.from_payload(style) if isinstance(style, dict) else None
            ),
            trend_context=(
                TrendContext.from_payload(trends) if isinstance(trends, dict) else None
            ),
        )

    @property
    def is_strategic(self) -> bool:
        """Strategic requests are answered with the JSON output contract."""
        return bool(
            self.mode
            or self.goal
            or self.style_profile is not None
            or (self.trend_context is not None and self.trend_context.trends)
        )


@dataclass(frozen=True)
class PromptPayload:
    system: str
    user: str


@dataclass
class ShapedOutput:
    """The per-platform payload returned to the caller."""

    linkedin: str = ""
    x: str = ""
    instagram: Optional[str] = None
    language: str = "ar"
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {"linkedin": self.linkedin, "x": self.x}
        if self.instagram is not None:
            data["instagram"] = self.instagram
        data["language"] = self.language
        data["meta"] = self.meta
        return data

    def get(self, platform: Platform) -> str:
        if platform == Platform.LINKEDIN:
            return self.linkedin
        if platform == Platform.X:
            return self.x
        return self.instagram or ""
