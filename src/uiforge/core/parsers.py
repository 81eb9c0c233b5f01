"""
Structured-output parsing.

Model stages answer with free text containing XML-style sections such as
``<intent>modify</intent>``. These helpers pull those sections out without
ever raising: a missing tag is just an empty string and each caller decides
how to default.
"""

import re
from functools import lru_cache

FENCE_OPEN = re.compile(
    r"^\s*```(?:html|jsx|tsx|javascript|typescript|js|ts)?[ \t]*\n?", re.IGNORECASE
)
FENCE_CLOSE = re.compile(r"\n?[ \t]*```\s*$")


@lru_cache(maxsize=64)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    escaped = re.escape(tag)
    return re.compile(rf"<{escaped}>\s*(.*?)\s*</{escaped}>", re.IGNORECASE | re.DOTALL)


def extract_tag(text: str, tag: str) -> str:
    """
    Extract the inner text of the first ``<tag>...</tag>`` section.

    Args:
        text: Raw model output
        tag: Tag name without brackets

    Returns:
        Trimmed inner text, or "" when the tag is absent
    """
    if not text:
        return ""
    match = _tag_pattern(tag).search(text)
    return match.group(1).strip() if match else ""


def extract_tags(text: str, *tags: str) -> dict[str, str]:
    """Extract several tagged sections at once."""
    return {tag: extract_tag(text, tag) for tag in tags}


def has_any_tag(text: str, tags: tuple[str, ...]) -> bool:
    """True when at least one of the tags is present (even if empty)."""
    if not text:
        return False
    return any(_tag_pattern(tag).search(text) for tag in tags)


def strip_code_fences(text: str) -> str:
    """Remove surrounding markdown code fences and trim whitespace."""
    if not text:
        return ""
    cleaned = FENCE_OPEN.sub("", text, count=1)
    cleaned = FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_bool(value: str) -> bool:
    """Interpret a tagged true/false answer."""
    return value.strip().lower() == "true"


def parse_list(value: str, none_marker: str = "NONE") -> list[str]:
    """Split a comma-separated tagged answer, honouring the NONE marker."""
    if not value or value.strip().upper() == none_marker:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
