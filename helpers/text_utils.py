"""
Text Utilities

Pure string helpers used to normalize caller input and to post-process raw
model output. Every function here is total: any string (including the empty
string) yields a defined result and nothing raises.
"""

import json
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from models.platform import (
    ALL_PLATFORMS,
    DUAL_PLATFORMS,
    PLATFORM_CONFIGS,
    PLATFORM_ORDER,
    Platform,
)

ELLIPSIS = "..."

# A natural boundary earlier than this share of the budget discards too much
MIN_BOUNDARY_RATIO = 0.4

_SENTENCE_DELIMITERS = ".!?,;:،؛؟"

_PLATFORM_ALIASES = {
    "linkedin": Platform.LINKEDIN,
    "لينكدإن": Platform.LINKEDIN,
    "لينكدان": Platform.LINKEDIN,
    "x": Platform.X,
    "twitter": Platform.X,
    "tweet": Platform.X,
    "إكس": Platform.X,
    "تويتر": Platform.X,
    "instagram": Platform.INSTAGRAM,
    "insta": Platform.INSTAGRAM,
    "ig": Platform.INSTAGRAM,
    "انستغرام": Platform.INSTAGRAM,
    "إنستغرام": Platform.INSTAGRAM,
}

_HEADING_RE = re.compile(
    r"^[\s#>*_]*(?P<label>linkedin|twitter|instagram|x)"
    r"(?:\s*\([^)]*\))?[\s*_]*"
    r"(?:[:：][\s*_]*(?P<rest>.*))?$",
    re.IGNORECASE,
)

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize_language(value) -> str:
    """Collapse any language hint to "ar" or "en". Default is Arabic."""
    text = _as_text(value).strip().lower()
    if text in ("en", "eng", "english") or text.startswith("en-"):
        return "en"
    return "ar"


def normalize_platform(value) -> Tuple[Platform, ...]:
    """
    Map free-text platform input onto a closed set of platforms.

    "LinkedIn + X", "both", "X", "twitter", "all" and so on are all accepted.
    Anything empty or unrecognised falls back to the dual LinkedIn + X mode.

    Returns:
        A tuple of platforms in canonical order.
    """
    text = _as_text(value).strip().lower()
    if not text:
        return DUAL_PLATFORMS

    tokens = set(re.findall(r"\w+", text))
    if "all" in tokens or "الكل" in tokens:
        return ALL_PLATFORMS

    found = {_PLATFORM_ALIASES[token] for token in tokens if token in _PLATFORM_ALIASES}
    if "both" in tokens or "+" in text or "&" in text:
        if len(found) < 2:
            found.update(DUAL_PLATFORMS)

    if not found:
        return DUAL_PLATFORMS
    return tuple(p for p in PLATFORM_ORDER if p in found)


def platform_label(platforms) -> str:
    """Human-readable label such as "Nashr (LinkedIn + X)"."""
    names = [PLATFORM_CONFIGS[p].name for p in PLATFORM_ORDER if p in (platforms or ())]
    if not names:
        return "Nashr"
    return f"Nashr ({' + '.join(names)})"


def _last_boundary(head: str, next_char: str) -> int:
    """Index to cut ``head`` at, or -1 when it holds no natural boundary."""
    if next_char and next_char.isspace():
        return len(head)
    for i in range(len(head) - 1, -1, -1):
        char = head[i]
        if char.isspace():
            return i
        if char in _SENTENCE_DELIMITERS:
            return i + 1
    return -1


def clamp_text(text, max_chars: int, marker: str = ELLIPSIS) -> str:
    """
    Truncate text to at most ``max_chars`` characters.

    Text that already fits is returned unchanged. Longer text is cut back to
    the last whitespace or sentence delimiter inside the budget, unless that
    boundary falls before 40% of it, in which case the cut is a hard one.
    A truncated result always ends with ``marker``.

    Args:
        text: The text to clamp.
        max_chars: Maximum number of characters in the result.
        marker: Appended to signal the truncation.

    Returns:
        A prefix of ``text`` (plus marker when cut) no longer than max_chars.
    """
    text = _as_text(text)
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    if len(marker) >= max_chars:
        return text[:max_chars]

    budget = max_chars - len(marker)
    head = text[:budget]
    cut = _last_boundary(head, text[budget])
    if cut >= int(budget * MIN_BOUNDARY_RATIO):
        head = head[:cut]
    return head.rstrip() + marker


def extract_tag(text, tag) -> str:
    """
    Return the trimmed content of ``[TAG]...[/TAG]`` (case-insensitive).

    An absent tag, an empty tag name or unbalanced brackets give "".
    """
    text = _as_text(text)
    tag = _as_text(tag).strip()
    if not text or not tag:
        return ""
    pattern = re.compile(
        rf"\[\s*{re.escape(tag)}\s*\](.*?)\[\s*/\s*{re.escape(tag)}\s*\]",
        re.IGNORECASE | re.DOTALL,
    )
    match = pattern.search(text)
    if not match:
        return ""
    return match.group(1).strip()


def strip_code_fences(text) -> str:
    """Return the body of the first markdown code fence, or the trimmed text."""
    text = _as_text(text)
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    # An opening fence the model never closed
    return re.sub(r"^\s*```[a-zA-Z0-9_-]*", "", text).strip()


@dataclass(frozen=True)
class JsonParseResult:
    """Outcome of a best-effort JSON parse."""

    value: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _try_json_object(candidate: str) -> JsonParseResult:
    try:
        value = json.loads(candidate)
    except (ValueError, TypeError) as e:
        return JsonParseResult(error=f"invalid JSON: {e}")
    if not isinstance(value, dict):
        return JsonParseResult(error=f"expected a JSON object, got {type(value).__name__}")
    return JsonParseResult(value=value)


def parse_json_loose(text) -> JsonParseResult:
    """
    Parse a JSON object out of model output.

    Tries the raw text, then the text with code fences removed, then the
    slice between the first "{" and the last "}".

    Returns:
        JsonParseResult with ``value`` on success or ``error`` describing
        why the last attempt failed.
    """
    text = _as_text(text).strip()
    if not text:
        return JsonParseResult(error="empty input")

    result = _try_json_object(text)
    if result.ok:
        return result

    unfenced = strip_code_fences(text)
    if unfenced and unfenced != text:
        result = _try_json_object(unfenced)
        if result.ok:
            return result

    start = unfenced.find("{")
    end = unfenced.rfind("}")
    if start == -1 or end <= start:
        return JsonParseResult(error="no JSON object found")
    return _try_json_object(unfenced[start : end + 1])


def _heading_platform(line: str):
    match = _HEADING_RE.match(line)
    if not match:
        for alias, platform in _PLATFORM_ALIASES.items():
            if not alias.isascii():
                stripped = line.strip().strip("#*_ ").rstrip(":：").strip()
                if stripped == alias:
                    return platform, ""
        return None, ""
    return _PLATFORM_ALIASES[match.group("label").lower()], match.group("rest") or ""


def split_platform_sections(text) -> Dict[Platform, str]:
    """
    Split text on platform headings such as "LinkedIn", "X:" or "**X:** ...".

    Everything after a heading up to the next heading belongs to that
    platform. Text before the first heading is dropped.

    Returns:
        Mapping of platform to its trimmed section, empty when no heading
        is present.
    """
    sections: Dict[Platform, list] = {}
    current = None
    for line in _as_text(text).splitlines():
        platform, rest = _heading_platform(line)
        if platform is not None:
            current = platform
            sections.setdefault(current, [])
            if rest.strip():
                sections[current].append(rest.strip())
            continue
        if current is not None:
            sections[current].append(line)
    return {platform: "\n".join(lines).strip() for platform, lines in sections.items()}


def ensure_brand_line(text, brand) -> str:
    """Prefix ``brand`` unless the text already starts with it."""
    text = _as_text(text)
    brand = _as_text(brand)
    if not brand.strip() or not text.strip():
        return text
    stripped = text.lstrip()
    if stripped.lower().startswith(brand.strip().lower()):
        return text
    return f"{brand}{stripped}"
