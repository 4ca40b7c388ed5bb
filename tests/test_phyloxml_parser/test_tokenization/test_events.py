"""Tests for parse events and text normalization."""

import pytest

from phyloxml_parser.shared import TextConfig
from phyloxml_parser.tokenization import EventType, ParseEvent, TextNormalizer


class TestParseEvent:
    """Test event construction."""

    def test_start_event(self):
        """Test start events carry name and attributes."""
        event = ParseEvent.start("clade", {"branch_length": "0.1"})

        assert event.type is EventType.ELEMENT_START
        assert event.name == "clade"
        assert event.attributes == {"branch_length": "0.1"}
        assert event.content is None

    def test_start_event_copies_attributes(self):
        """Test attribute mappings are copied."""
        attributes = {"a": "1"}
        event = ParseEvent.start("x", attributes)
        attributes["b"] = "2"

        assert event.attributes == {"a": "1"}

    def test_end_event(self):
        """Test end events have no attributes."""
        event = ParseEvent.end("clade")

        assert event.type is EventType.ELEMENT_END
        assert event.attributes == {}

    def test_text_event(self):
        """Test text events carry content only."""
        event = ParseEvent.text("Homo sapiens")

        assert event.type is EventType.TEXT
        assert event.name is None
        assert event.content == "Homo sapiens"

    def test_element_event_requires_name(self):
        """Test element events without names are rejected."""
        with pytest.raises(ValueError, match="name"):
            ParseEvent(EventType.ELEMENT_START)

    def test_text_event_requires_content(self):
        """Test text events without content are rejected."""
        with pytest.raises(ValueError, match="content"):
            ParseEvent(EventType.TEXT)

    def test_events_are_immutable(self):
        """Test events are frozen."""
        event = ParseEvent.end("clade")

        with pytest.raises(AttributeError):
            event.name = "other"


class TestTextNormalizer:
    """Test text normalization."""

    def test_default_trims(self):
        """Test default configuration only trims."""
        assert TextNormalizer().normalize("  a  b \n") == "a  b"

    def test_collapse_whitespace(self):
        """Test whitespace runs are collapsed."""
        normalizer = TextNormalizer(TextConfig(normalize_whitespace=True))

        assert normalizer.normalize(" a \n\t b ") == "a b"

    def test_no_trim(self):
        """Test trimming can be disabled."""
        assert TextNormalizer(TextConfig(trim=False)).normalize(" a ") == " a "

    def test_unicode_normalization(self):
        """Test composed and decomposed forms."""
        decomposed = "é"
        normalizer = TextNormalizer(TextConfig(unicode_normalization="NFC"))

        assert normalizer.normalize(decomposed) == "é"

    def test_whitespace_only_becomes_empty(self):
        """Test whitespace only text normalizes to an empty string."""
        assert TextNormalizer().normalize(" \n ") == ""
