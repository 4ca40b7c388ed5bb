"""Incremental XML tokenizer built on lxml's parser target interface.

``PhyloXMLTokenizer`` feeds raw chunks into an ``lxml.etree.XMLParser``
whose target only records events. Nothing is raised from inside lxml
callbacks; the caller drains the recorded events after every chunk and hands
them to the tree builder. Syntax errors detected by lxml propagate unchanged.
"""

from typing import Any, List, Mapping, Optional, Union

from lxml import etree

from phyloxml_parser.shared import (
    EmptyDocumentError,
    TextConfig,
    TokenizerConfig,
    get_logger,
)

from .events import ParseEvent
from .text import TextNormalizer

Chunk = Union[str, bytes]


def local_name(name: str) -> str:
    """Strip a ``{namespace}`` prefix from an lxml tag or attribute name."""
    if name.startswith("{"):
        return name.rsplit("}", 1)[1]
    return name


class _EventCollector:
    """lxml parser target that turns SAX-style callbacks into ParseEvents."""

    def __init__(self, normalizer: TextNormalizer) -> None:
        self.normalizer = normalizer
        self.events: List[ParseEvent] = []
        self._text: List[str] = []

    def _flush_text(self) -> None:
        if not self._text:
            return
        content = self.normalizer.normalize("".join(self._text))
        self._text.clear()
        if content:
            self.events.append(ParseEvent.text(content))

    def start(self, tag: str, attrib: Mapping[str, str]) -> None:
        self._flush_text()
        attributes = {local_name(key): value for key, value in attrib.items()}
        self.events.append(ParseEvent.start(local_name(tag), attributes))

    def end(self, tag: str) -> None:
        self._flush_text()
        self.events.append(ParseEvent.end(local_name(tag)))

    def data(self, data: str) -> None:
        self._text.append(data)

    def close(self) -> None:
        self._flush_text()


class PhyloXMLTokenizer:
    """Chunk-fed tokenizer producing ParseEvents.

    Text chunks (``str``) are encoded to UTF-8 before they reach lxml and the
    parser encoding is pinned to UTF-8, so an XML declaration naming another
    encoding does not garble them. Byte chunks are decoded by lxml according
    to the document's own declaration. One tokenizer handles one document and
    must not mix text and byte chunks.
    """

    def __init__(
        self,
        text_config: Optional[TextConfig] = None,
        tokenizer_config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.tokenizer_config = tokenizer_config or TokenizerConfig()
        self.logger = get_logger(__name__, correlation_id, "tokenizer")
        self._collector = _EventCollector(TextNormalizer(text_config))
        self._parser: Optional[Any] = None
        self._text_mode: Optional[bool] = None
        self._has_content = False
        self._closed = False

        self.characters_processed = 0
        self.chunks_processed = 0

    def _create_parser(self, text_mode: bool) -> Any:
        options = {
            "target": self._collector,
            "resolve_entities": self.tokenizer_config.resolve_entities,
            "no_network": self.tokenizer_config.no_network,
            "huge_tree": self.tokenizer_config.huge_tree,
        }
        if text_mode:
            options["encoding"] = "utf-8"
        return etree.XMLParser(**options)

    def feed(self, chunk: Chunk) -> List[ParseEvent]:
        """Feed one chunk and return the events it completed.

        Raises:
            TypeError: If the chunk is neither str nor bytes, or the chunk kind
                differs from earlier chunks
            ValueError: If the tokenizer was already closed
            lxml.etree.XMLSyntaxError: If the chunk makes the document
                ill-formed; events recorded before the error stay available
                through ``drain()``
        """
        if self._closed:
            raise ValueError("Tokenizer is closed")
        if not isinstance(chunk, (str, bytes, bytearray)):
            raise TypeError(f"Chunks must be str or bytes, got {type(chunk).__name__}")

        text_mode = isinstance(chunk, str)
        if self._text_mode is None:
            self._text_mode = text_mode
            self._parser = self._create_parser(text_mode)
        elif self._text_mode != text_mode:
            raise TypeError("Cannot mix text and byte chunks in one document")

        self.chunks_processed += 1
        self.characters_processed += len(chunk)
        if not chunk:
            return self.drain()
        if not self._has_content and chunk.strip():
            self._has_content = True

        data = chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
        self._parser.feed(data)
        return self.drain()

    def close(self) -> List[ParseEvent]:
        """Signal end of input and return the remaining events.

        Raises:
            EmptyDocumentError: If no non-whitespace content was fed
            lxml.etree.XMLSyntaxError: If the document is incomplete
        """
        if self._closed:
            return self.drain()
        self._closed = True
        if not self._has_content:
            raise EmptyDocumentError("phyloXML source is empty")
        self._parser.close()
        self.logger.debug(
            "Tokenizer closed",
            extra={
                "chunks_processed": self.chunks_processed,
                "characters_processed": self.characters_processed,
            },
        )
        return self.drain()

    def drain(self) -> List[ParseEvent]:
        """Return and forget the events recorded so far."""
        events = self._collector.events
        self._collector.events = []
        return events
