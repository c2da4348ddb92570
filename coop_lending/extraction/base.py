"""Extraction collaborator interface."""

from typing import Any, Protocol


class TextExtractor(Protocol):
    """Turns unstructured text (a pasted application form) into field suggestions."""

    def extract(self, text: str) -> dict[str, Any]:
        """Return raw suggestions keyed by external field name.

        Implementations raise ``ExtractionError`` when the collaborator
        fails; callers pass the result through ``sanitize_extraction``.
        """
        ...
