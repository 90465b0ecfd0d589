"""
Tests for the response shaper.

Raw completion text is shaped into the per-platform output whatever its
form: JSON envelope, [TAG] sections, platform headings or plain text.
"""

import json

import pytest

from models.generation import GenerationRequest
from models.platform import Platform
from helpers.shaper import (
    SOURCE_HEADINGS,
    SOURCE_JSON,
    SOURCE_RAW,
    SOURCE_TAGS,
    finalize_text,
    shape,
    shape_section,
)
from helpers.text_utils import ELLIPSIS


class TestConstants:
    """Test constants and expected values."""

    BRAND = "Nashr | "
    LONG_X = "word " * 60
    ENVELOPE = {
        "ok": True,
        "language": "en",
        "mode": "post",
        "x": "Short strategic tweet",
        "linkedin": "A deeper LinkedIn post.",
        "series": [],
        "replies": [{"scenario": "Price?", "reply": "DM us"}],
        "trend": {"suggested": "AI", "recommendation": "ADAPT", "why": "Fits"},
        "notes": {"styleMatched": "tone", "howToImprove": "add data"},
    }


def plain_request(platform="both", language="en"):
    return GenerationRequest(topic="Launch", platform=platform, language=language)


def strategic_request(platform="both"):
    return GenerationRequest(topic="Launch", platform=platform, language="en", mode="post")


@pytest.mark.unit
class TestShapeJson:
    """Test the JSON envelope path."""

    def test_envelope(self):
        raw = json.dumps(TestConstants.ENVELOPE)

        output = shape(raw, strategic_request())

        assert output.x == "Short strategic tweet"
        assert output.linkedin == "A deeper LinkedIn post."
        assert output.meta["trend"]["recommendation"] == "ADAPT"
        assert output.meta["replies"] == TestConstants.ENVELOPE["replies"]
        assert output.meta["notes"] == TestConstants.ENVELOPE["notes"]
        assert "series" not in output.meta
        assert output.meta["sources"] == {"linkedin": SOURCE_JSON, "x": SOURCE_JSON}
        assert "repair_error" not in output.meta

    def test_fenced_envelope_with_chatter(self):
        raw = "Sure! Here it is:\n```json\n" + json.dumps(TestConstants.ENVELOPE) + "\n```"

        output = shape(raw, strategic_request())

        assert output.x == "Short strategic tweet"

    def test_unparseable_strategic_reply_falls_back_to_text(self):
        output = shape("Just a plain answer", strategic_request(platform="X"))

        assert output.x == "Just a plain answer"
        assert output.meta["repair_error"] == "no JSON object found"
        assert output.meta["sources"] == {"x": SOURCE_RAW}

    def test_broken_json_records_reason(self):
        output = shape('{"x": "unterminated', strategic_request(platform="X"))

        assert output.meta["repair_error"]
        assert output.x == '{"x": "unterminated'

    def test_plain_request_with_braces_has_no_repair_error(self):
        output = shape("Use {curly} braces wisely", plain_request(platform="X"))

        assert output.x == "Use {curly} braces wisely"
        assert "repair_error" not in output.meta

    def test_missing_key_falls_through_to_tags(self):
        raw = json.dumps({"x": "From JSON"}) + "\n[LINKEDIN]From tags[/LINKEDIN]"

        output = shape(raw, strategic_request())

        assert output.x == "From JSON"
        assert output.linkedin == "From tags"
        assert output.meta["sources"] == {"x": SOURCE_JSON, "linkedin": SOURCE_TAGS}


@pytest.mark.unit
class TestShapeText:
    """Test the tag, heading and raw paths."""

    def test_tags(self):
        raw = "[LINKEDIN]\nLong post.\n[/LINKEDIN]\n[X]Short one #launch[/X]"

        output = shape(raw, plain_request())

        assert output.linkedin == "Long post."
        assert output.x == "Short one #launch"
        assert output.meta["sources"] == {"linkedin": SOURCE_TAGS, "x": SOURCE_TAGS}

    def test_headings(self):
        raw = "LinkedIn: Great paragraph.\nX: Short punchy line #launch"

        output = shape(raw, plain_request())

        assert output.x == "Short punchy line #launch"
        assert output.linkedin == "Great paragraph."
        assert output.meta["sources"]["x"] == SOURCE_HEADINGS

    def test_raw_fallback_fills_every_platform(self):
        output = shape("One text for all", plain_request())

        assert output.linkedin == "One text for all"
        assert output.x == "One text for all"
        assert output.meta["sources"] == {"linkedin": SOURCE_RAW, "x": SOURCE_RAW}

    def test_empty_reply(self):
        output = shape("", plain_request(platform="X"))
        assert output.x == ""

    def test_x_is_clamped(self):
        output = shape(TestConstants.LONG_X, plain_request(platform="X"))

        assert len(output.x) <= 280
        assert output.x.endswith(ELLIPSIS)

    def test_linkedin_keeps_long_text(self):
        output = shape(TestConstants.LONG_X, plain_request(platform="LinkedIn"))
        assert output.linkedin == TestConstants.LONG_X.strip()

    def test_brand_line(self):
        output = shape("[X]hello[/X]", plain_request(platform="X"), brand_line=TestConstants.BRAND)
        assert output.x == "Nashr | hello"

    def test_instagram_only_when_requested(self):
        raw = "[LINKEDIN]L[/LINKEDIN][X]X[/X][INSTAGRAM]I #tag[/INSTAGRAM]"

        with_instagram = shape(raw, plain_request(platform="all"))
        without = shape(raw, plain_request())

        assert with_instagram.instagram == "I #tag"
        assert "instagram" in with_instagram.to_dict()
        assert without.instagram is None
        assert "instagram" not in without.to_dict()

    def test_meta_label_and_platforms(self):
        output = shape("text", plain_request(language="ar"))

        assert output.language == "ar"
        assert output.meta["label"] == "Nashr (LinkedIn + X)"
        assert output.meta["platforms"] == ["linkedin", "x"]

    def test_explicit_platforms_override_request(self):
        output = shape("[X]only x[/X]", plain_request(), platforms=(Platform.X,))

        assert output.x == "only x"
        assert output.linkedin == ""
        assert output.meta["platforms"] == ["x"]


@pytest.mark.unit
class TestShapeSection:
    """Test single-platform shaping."""

    @pytest.mark.parametrize(
        "raw",
        [
            "[X]Launch day[/X]",
            "X: Launch day",
            "Launch day",
            "```\nLaunch day\n```",
            "  Launch day \n",
        ],
    )
    def test_forms(self, raw):
        assert shape_section(raw, Platform.X) == "Launch day"

    def test_none(self):
        assert shape_section(None, Platform.LINKEDIN) == ""

    def test_clamps(self):
        result = shape_section("a" * 400, Platform.X)
        assert result == "a" * 277 + ELLIPSIS

    def test_finalize_applies_brand_before_clamp(self):
        result = finalize_text("b" * 300, Platform.X, TestConstants.BRAND)

        assert result.startswith(TestConstants.BRAND)
        assert len(result) <= 280
