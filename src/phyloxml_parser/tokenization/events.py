"""Parse events consumed by the phyloXML tree builder.

The tokenizer reduces an XML byte or character stream to a flat sequence of
three event kinds. Everything downstream of this module works on events only.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional


class EventType(Enum):
    """Kinds of events emitted by the tokenizer."""

    ELEMENT_START = auto()  # Opening tag with its attributes
    ELEMENT_END = auto()    # Closing tag (also emitted for empty elements)
    TEXT = auto()           # Character data between structural events


@dataclass(frozen=True)
class ParseEvent:
    """Single tokenizer event.

    Attributes:
        type: Kind of the event
        name: Local element name for start and end events
        attributes: Attribute values keyed by local name (start events only)
        content: Character data (text events only)
    """

    type: EventType
    name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    content: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate event consistency."""
        if self.type is EventType.TEXT:
            if self.content is None:
                raise ValueError("Text events require content")
        elif not self.name:
            raise ValueError("Element events require a name")

    @classmethod
    def start(cls, name: str, attributes: Optional[Dict[str, str]] = None) -> "ParseEvent":
        """Create an element start event."""
        return cls(EventType.ELEMENT_START, name=name, attributes=dict(attributes or {}))

    @classmethod
    def end(cls, name: str) -> "ParseEvent":
        """Create an element end event."""
        return cls(EventType.ELEMENT_END, name=name)

    @classmethod
    def text(cls, content: str) -> "ParseEvent":
        """Create a character data event."""
        return cls(EventType.TEXT, content=content)
