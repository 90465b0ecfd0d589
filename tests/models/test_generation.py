"""
Tests for the request and output value objects.
"""

import pytest

from models.generation import (
    GenerationRequest,
    ShapedOutput,
    StyleProfile,
    TrendContext,
    ValidationError,
)
from models.platform import PLATFORM_CONFIGS, Platform


@pytest.mark.unit
class TestGenerationRequest:
    """Test GenerationRequest construction and normalization."""

    def test_from_payload_minimal(self):
        request = GenerationRequest.from_payload({"text": "  Launch day  "})

        assert request.topic == "Launch day"
        assert request.language == "ar"
        assert request.platforms == (Platform.LINKEDIN, Platform.X)
        assert request.mode is None
        assert not request.is_strategic

    def test_idea_is_accepted_as_topic(self):
        request = GenerationRequest.from_payload({"idea": "A new idea"})
        assert request.topic == "A new idea"

    def test_text_wins_over_idea(self):
        request = GenerationRequest.from_payload({"text": "Text", "idea": "Idea"})
        assert request.topic == "Text"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"text": ""}, {"text": "   "}, {"text": 42}, {"idea": None}, None, []],
    )
    def test_missing_topic_raises(self, payload):
        with pytest.raises(ValidationError, match="Missing text"):
            GenerationRequest.from_payload(payload)

    def test_direct_construction_validates(self):
        with pytest.raises(ValidationError):
            GenerationRequest(topic="  ")

    def test_fields_are_normalized(self):
        request = GenerationRequest.from_payload(
            {
                "text": "Topic",
                "platform": "X",
                "tone": " Friendly ",
                "audience": "Developers",
                "language": "English",
            }
        )

        assert request.platforms == (Platform.X,)
        assert request.tone == "Friendly"
        assert request.audience == "Developers"
        assert request.language == "en"

    def test_non_string_fields_are_ignored(self):
        request = GenerationRequest.from_payload(
            {"text": "Topic", "tone": 5, "audience": ["a"], "language": 1}
        )

        assert request.tone == ""
        assert request.audience == ""
        assert request.language == "ar"

    def test_unknown_mode_becomes_post(self):
        request = GenerationRequest.from_payload({"text": "Topic", "mode": "essay"})
        assert request.mode == "post"
        assert request.is_strategic

    def test_invalid_horizon_becomes_none(self):
        request = GenerationRequest.from_payload(
            {"text": "Topic", "goal": "Grow", "goalHorizon": "10y"}
        )
        assert request.goal_horizon == "none"

    @pytest.mark.parametrize(
        "value,expected", [(None, 5), (1, 2), (7, 7), ("9", 9), (40, 12), ("x", 5)]
    )
    def test_series_count_is_clamped(self, value, expected):
        request = GenerationRequest.from_payload({"text": "T", "seriesCount": value})
        assert request.series_count == expected

    def test_strategic_payload(self):
        request = GenerationRequest.from_payload(
            {
                "idea": "Ramadan campaign",
                "mode": "series",
                "goal_horizon": "1m",
                "styleProfile": {
                    "voiceName": "Sara",
                    "do": ["Be concrete", ""],
                    "writingSamples": [f"sample {i}" for i in range(8)],
                },
                "trendContext": {
                    "trends": ["AI", "Saudi Vision 2030"],
                    "recommendationRule": "Only relevant trends",
                },
            }
        )

        assert request.is_strategic
        assert request.mode == "series"
        assert request.goal_horizon == "1m"
        assert request.style_profile.voice_name == "Sara"
        assert request.style_profile.do == ["Be concrete"]
        assert len(request.style_profile.writing_samples) == 5
        assert request.trend_context.trends == ["AI", "Saudi Vision 2030"]
        assert request.trend_context.recommendation_rule == "Only relevant trends"

    def test_empty_trends_are_not_strategic(self):
        request = GenerationRequest.from_payload(
            {"text": "Topic", "trendContext": {"trends": []}}
        )
        assert not request.is_strategic

    def test_goal_alone_is_strategic(self):
        request = GenerationRequest.from_payload({"text": "Topic", "goal": "Leads"})
        assert request.is_strategic


@pytest.mark.unit
class TestProfiles:
    """Test StyleProfile and TrendContext defaults."""

    def test_style_profile_defaults(self):
        profile = StyleProfile.from_payload({})
        assert profile.voice_name == "Khalid"
        assert profile.topics == []

    def test_style_profile_snake_case(self):
        profile = StyleProfile.from_payload(
            {"voice_name": "Noura", "signature_phrases": ["Let's build"]}
        )
        assert profile.voice_name == "Noura"
        assert profile.signature_phrases == ["Let's build"]

    def test_trend_context_from_garbage(self):
        context = TrendContext.from_payload("not a dict")
        assert context.trends == []
        assert context.recommendation_rule == ""


@pytest.mark.unit
class TestShapedOutput:
    """Test ShapedOutput serialization."""

    def test_to_dict_without_instagram(self):
        output = ShapedOutput(linkedin="L", x="X", language="en", meta={"k": 1})

        assert output.to_dict() == {
            "linkedin": "L",
            "x": "X",
            "language": "en",
            "meta": {"k": 1},
        }

    def test_to_dict_with_instagram(self):
        output = ShapedOutput(linkedin="", x="", instagram="I")
        assert output.to_dict()["instagram"] == "I"

    def test_get(self):
        output = ShapedOutput(linkedin="L", x="X")
        assert output.get(Platform.LINKEDIN) == "L"
        assert output.get(Platform.X) == "X"
        assert output.get(Platform.INSTAGRAM) == ""


@pytest.mark.unit
class TestPlatformConfig:
    """Test platform configuration."""

    def test_limits(self):
        assert PLATFORM_CONFIGS[Platform.X].max_length == 280
        assert PLATFORM_CONFIGS[Platform.LINKEDIN].max_length == 3000
        assert PLATFORM_CONFIGS[Platform.INSTAGRAM].max_length == 2200

    def test_every_platform_has_config(self):
        for platform in Platform:
            config = PLATFORM_CONFIGS[platform]
            assert config.max_length > 0
            assert config.tag
