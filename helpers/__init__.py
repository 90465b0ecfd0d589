"""
Nashr Helpers Package

- text_utils: pure string helpers (clamping, tag extraction, JSON repair,
  platform and language normalization)
- prompts: prompt rendering from the Jinja templates in templates/prompts
- completion: the model client and its error kinds
- shaper: turns raw completion text into per-platform output

Only text_utils is re-exported here; prompts and shaper depend on
models.generation, which itself imports text_utils.
"""

from .text_utils import (
    JsonParseResult,
    clamp_text,
    ensure_brand_line,
    extract_tag,
    normalize_language,
    normalize_platform,
    parse_json_loose,
    platform_label,
    split_platform_sections,
)

__all__ = [
    "JsonParseResult",
    "clamp_text",
    "ensure_brand_line",
    "extract_tag",
    "normalize_language",
    "normalize_platform",
    "parse_json_loose",
    "platform_label",
    "split_platform_sections",
]
