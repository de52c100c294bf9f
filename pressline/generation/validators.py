"""Format validators and post-processing for generated output."""

import json
import re
from dataclasses import dataclass, field
from typing import List

from ..config import ValidationConfig
from .models import GeneratedMetadata

_HEADING_RE = re.compile(r"^##\s+\S", re.MULTILINE)
_LIST_RE = re.compile(r"^(?:[-*]\s+\S|\d+\.\s+\S)", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*[^*\n]+\*\*")
_WORD_RE = re.compile(r"\b\w+\b")
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*$", re.MULTILINE)

_METADATA_ALIASES = {
    "title": ("title", "titulo", "título"),
    "summary": ("summary", "bajada", "excerpt"),
    "overline": ("overline", "volanta", "category"),
}


@dataclass
class ValidationResult:
    """Outcome of a format check."""

    ok: bool
    reasons: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def count_words(text: str) -> int:
    """Count words the way the length contracts are measured."""
    return len(_WORD_RE.findall(text))


def count_headings(text: str) -> int:
    return len(_HEADING_RE.findall(text))


def count_list_items(text: str) -> int:
    return len(_LIST_RE.findall(text))


def count_emphasis(text: str) -> int:
    return len(_BOLD_RE.findall(text))


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence lines."""
    return _FENCE_RE.sub("", text).strip()


def clean_markdown(text: str) -> str:
    """Normalize list, heading and emphasis markers in generated body text."""
    fixed = strip_code_fences(text)
    fixed = re.sub(r"^[ \t]*[-•]\s+", "- ", fixed, flags=re.MULTILINE)
    fixed = re.sub(r"^[ \t]*(\d+)\.\s+", r"\1. ", fixed, flags=re.MULTILINE)
    fixed = re.sub(r"^#+\s+", "## ", fixed, flags=re.MULTILINE)
    # Markdown images are handled separately as caption lines
    fixed = re.sub(r"!\[[^\]]*\]\([^)]*\)", "", fixed)
    fixed = re.sub(r"\n{3,}", "\n\n", fixed)
    return fixed.strip()


def validate_body(text: str, config: ValidationConfig) -> ValidationResult:
    """Body must have a heading, a list and a word count inside the configured range."""
    reasons = []
    if count_headings(text) < 1:
        reasons.append("missing '## ' heading")
    if count_list_items(text) < 1:
        reasons.append("missing list")
    words = count_words(text)
    if not config.body_min_words <= words <= config.body_max_words:
        reasons.append(f"word count {words} outside {config.body_min_words}-{config.body_max_words}")
    return ValidationResult(ok=not reasons, reasons=reasons)


def parse_metadata(text: str) -> GeneratedMetadata:
    """
    Parse a JSON metadata reply.

    Raises:
        ValueError: If no JSON object with string fields can be read
    """
    cleaned = strip_code_fences(text)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no JSON object in reply")
    data = json.loads(cleaned[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError("reply is not a JSON object")

    values = {}
    for name, aliases in _METADATA_ALIASES.items():
        value = next((data[key] for key in aliases if key in data), "")
        if not isinstance(value, str):
            raise ValueError(f"field '{name}' is not a string")
        values[name] = value.strip()
    return GeneratedMetadata(title=values["title"], summary=values["summary"], overline=values["overline"])


def validate_metadata(metadata: GeneratedMetadata, config: ValidationConfig) -> ValidationResult:
    """Three non-empty fields inside their length contracts."""
    reasons = []
    if not metadata.title:
        reasons.append("empty title")
    elif len(metadata.title) > config.title_max_chars:
        reasons.append(f"title longer than {config.title_max_chars} chars")

    words = count_words(metadata.summary)
    if not metadata.summary:
        reasons.append("empty summary")
    elif not config.summary_min_words <= words <= config.summary_max_words:
        reasons.append(
            f"summary has {words} words, expected {config.summary_min_words}-{config.summary_max_words}"
        )

    if not metadata.overline:
        reasons.append("empty overline")
    elif count_words(metadata.overline) > config.overline_max_words:
        reasons.append(f"overline longer than {config.overline_max_words} words")

    return ValidationResult(ok=not reasons, reasons=reasons)


def normalize_tags(text: str) -> str:
    """
    Clean a tag reply into a comma-joined string.

    Raises:
        ValueError: If the reply spans several lines
    """
    lines = [line.strip() for line in strip_code_fences(text).splitlines() if line.strip()]
    if len(lines) != 1:
        raise ValueError("tags reply must be a single line")
    line = re.sub(r"^(tags|etiquetas)\s*:\s*", "", lines[0], flags=re.IGNORECASE)
    tags = [tag.strip().lstrip("#").strip(" .") for tag in line.split(",")]
    return ", ".join(tag for tag in tags if tag)


def validate_tags(tags: str, config: ValidationConfig) -> ValidationResult:
    """Tag count and per-tag length."""
    items = [tag.strip() for tag in tags.split(",") if tag.strip()]
    reasons = []
    if not config.min_tags <= len(items) <= config.max_tags:
        reasons.append(f"{len(items)} tags, expected {config.min_tags}-{config.max_tags}")
    long_tags = [tag for tag in items if len(tag) > 40]
    if long_tags:
        reasons.append(f"tags too long: {', '.join(long_tags)}")
    return ValidationResult(ok=not reasons, reasons=reasons)


def validate_social_text(text: str, config: ValidationConfig) -> ValidationResult:
    """Social post length inside the configured character budget."""
    length = len(text)
    if config.social_min_chars <= length <= config.social_max_chars:
        return ValidationResult(ok=True)
    return ValidationResult(
        ok=False,
        reasons=[f"{length} chars, expected {config.social_min_chars}-{config.social_max_chars}"],
    )
