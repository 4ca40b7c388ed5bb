"""Character data normalization applied before text events are emitted."""

import re
import unicodedata
from typing import Optional

from phyloxml_parser.shared import TextConfig

_WHITESPACE_RUN = re.compile(r"\s+")


class TextNormalizer:
    """Apply the configured text transformations to raw character data.

    Transformations run in a fixed order: Unicode normalization, whitespace
    collapsing, then trimming. They change text values only; whether a text
    event is emitted at all depends on the result being non-empty.
    """

    def __init__(self, config: Optional[TextConfig] = None) -> None:
        self.config = config or TextConfig()

    def normalize(self, text: str) -> str:
        """Return the normalized form of ``text``."""
        if self.config.unicode_normalization:
            text = unicodedata.normalize(self.config.unicode_normalization, text)
        if self.config.normalize_whitespace:
            text = _WHITESPACE_RUN.sub(" ", text)
        if self.config.trim:
            text = text.strip()
        return text
