"""Free-text extraction of application fields."""

from coop_lending.extraction.base import TextExtractor
from coop_lending.extraction.fields import (
    EXTRACTABLE_FIELDS,
    match_enum,
    sanitize_extraction,
    split_by_section,
)
from coop_lending.extraction.gemini import GeminiExtractor, build_prompt

__all__ = [
    "EXTRACTABLE_FIELDS",
    "GeminiExtractor",
    "TextExtractor",
    "build_prompt",
    "match_enum",
    "sanitize_extraction",
    "split_by_section",
]
