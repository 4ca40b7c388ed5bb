"""Tokenization layer for phyloXML parsing.

Turns raw XML chunks into the flat event stream consumed by the tree builder.

Key Components:
    PhyloXMLTokenizer: Chunk-fed tokenizer driving lxml's incremental parser
    ParseEvent: Element start, element end or character data event
    EventType: Enumeration of event kinds
    TextNormalizer: Configurable trimming and normalization of character data
"""

from .events import EventType, ParseEvent
from .text import TextNormalizer
from .tokenizer import PhyloXMLTokenizer, local_name

__all__ = [
    "EventType",
    "ParseEvent",
    "PhyloXMLTokenizer",
    "TextNormalizer",
    "local_name",
]
