"""Parser API with progressive disclosure for phyloXML documents.

Simple module-level functions (``parse``, ``parse_string``, ``parse_file``)
cover the common case of turning a whole document into a list of
``Phylogeny`` objects. ``parse_incremental`` and ``parse_async`` yield trees
as soon as they are complete, pulling the next chunk only when the consumer
asks for the next tree. ``PhyloXMLParser`` exposes the push-style interface
(``feed``/``close``) together with metrics and usage statistics.

Parsing is strict: the first structural or syntax error aborts the document
and is raised to the caller.
"""

import time
from pathlib import Path
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    BinaryIO,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    TextIO,
    Union,
)

from lxml import etree

from phyloxml_parser.shared import (
    DiagnosticEntry,
    ParserConfig,
    PerformanceMetrics,
    PhyloXMLError,
    StreamingProgress,
    current_memory_usage,
    get_logger,
)
from phyloxml_parser.tokenization import PhyloXMLTokenizer
from phyloxml_parser.tree import Phylogeny, PhyloXMLTreeBuilder

# Type definitions for input data
Chunk = Union[str, bytes]
InputType = Union[str, bytes, BinaryIO, TextIO, Path]
ProgressCallback = Callable[[StreamingProgress], None]

MS_PER_SECOND = 1000  # Milliseconds per second conversion


def iter_source_chunks(source: InputType, chunk_size: int) -> Iterator[Chunk]:
    """Split any supported source into chunks for the tokenizer.

    Strings and bytes are treated as document content and yielded whole;
    paths and file-like objects are read ``chunk_size`` units at a time.
    """
    if isinstance(source, (str, bytes)):
        yield source
        return
    if isinstance(source, Path):
        with source.open("rb") as file:
            yield from _read_chunks(file, chunk_size)
        return
    if hasattr(source, "read"):
        yield from _read_chunks(source, chunk_size)
        return
    raise TypeError(f"Unsupported phyloXML source type: {type(source).__name__}")


def _read_chunks(file: Any, chunk_size: int) -> Iterator[Chunk]:
    while True:
        chunk = file.read(chunk_size)
        if not chunk:
            return
        yield chunk


class _DocumentSession:
    """Tokenizer, builder and measurements of one document."""

    def __init__(self, config: ParserConfig, correlation_id: Optional[str]) -> None:
        self.tokenizer = PhyloXMLTokenizer(
            text_config=config.text,
            tokenizer_config=config.tokenizer,
            correlation_id=correlation_id,
        )
        self.builder = PhyloXMLTreeBuilder(correlation_id=correlation_id)
        self.collect_metrics = config.collect_metrics
        self.start_time = time.time()
        self.start_memory = current_memory_usage() if config.collect_metrics else 0

    def _process(self, tokenize: Callable[[], List[Any]]) -> None:
        try:
            events = tokenize()
        except etree.XMLSyntaxError:
            # Events recorded before the syntax error may hold an earlier failure
            self.builder.process_all(self.tokenizer.drain())
            raise
        self.builder.process_all(events)

    def feed(self, chunk: Chunk) -> None:
        self._process(lambda: self.tokenizer.feed(chunk))

    def close(self) -> None:
        self._process(self.tokenizer.close)
        self.builder.close()

    def metrics(self) -> PerformanceMetrics:
        memory_used = 0
        if self.collect_metrics:
            memory_used = max(0, current_memory_usage() - self.start_memory)
        return PerformanceMetrics(
            processing_time_ms=(time.time() - self.start_time) * MS_PER_SECOND,
            memory_used_bytes=memory_used,
            characters_processed=self.tokenizer.characters_processed,
            events_processed=self.builder.events_processed,
            phylogenies_built=self.builder.phylogenies_built,
            clades_built=self.builder.clades_built,
            chunks_processed=self.tokenizer.chunks_processed,
        )


class PhyloXMLParser:
    """Configurable phyloXML parser with push and pull interfaces.

    One parser handles one document at a time; every document gets a fresh
    tokenizer and tree builder. The parser instance itself may be reused for
    any number of documents, one after the other.

    Attributes:
        config: Parser configuration
        correlation_id: Correlation ID for request tracking

    Examples:
        Whole documents:
        >>> parser = PhyloXMLParser()
        >>> trees = parser.parse(Path("tree.xml"))

        Push-style feeding:
        >>> parser = PhyloXMLParser(ParserConfig.normalized())
        >>> for chunk in chunks:
        ...     for tree in parser.feed(chunk):
        ...         handle(tree)
        >>> remaining = parser.close()
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize phyloXML parser.

        Args:
            config: Parser configuration (defaults to ParserConfig.default())
            correlation_id: Optional correlation ID, overrides the configured one
        """
        self.config = config or ParserConfig.default()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "phyloxml_parser")

        self._session: Optional[_DocumentSession] = None
        self._phylogenies: List[Phylogeny] = []
        self._diagnostics: List[DiagnosticEntry] = []
        self._metrics = PerformanceMetrics()
        # Trees completed by the chunk that failed, not yet returned to the caller
        self._undelivered: List[Phylogeny] = []

        self.reset_statistics()

    # Document lifecycle

    def _begin(self) -> _DocumentSession:
        self._session = _DocumentSession(self.config, self.correlation_id)
        self._phylogenies = []
        self._diagnostics = []
        self._metrics = PerformanceMetrics()
        self._undelivered = []
        self.logger.info(
            "Starting phyloXML document",
            extra={"document_number": self._documents_started + 1},
        )
        self._documents_started += 1
        return self._session

    def _finish(self, session: _DocumentSession) -> None:
        self._phylogenies = session.builder.phylogenies
        self._diagnostics = list(session.builder.diagnostics)
        self._metrics = session.metrics()
        self._session = None
        self._total_processing_time += self._metrics.processing_time_ms
        self._total_phylogenies += len(self._phylogenies)

    def _fail(self, session: _DocumentSession, error: Exception) -> None:
        self._undelivered = session.builder.drain_completed()
        self._finish(session)
        self._failed_documents += 1
        extra: Dict[str, Any] = {
            "error_type": type(error).__name__,
            "phylogenies_completed": len(self._phylogenies),
            "processing_time_ms": self._metrics.processing_time_ms,
        }
        if isinstance(error, PhyloXMLError):
            extra["element"] = error.element
            extra["path"] = error.path
        self.logger.error(f"phyloXML parse failed: {error}", extra=extra)

    def feed(self, chunk: Chunk) -> List[Phylogeny]:
        """Feed the next chunk of the current document.

        Args:
            chunk: Document text (``str``) or raw bytes; all chunks of one
                document must be of the same kind

        Returns:
            Trees completed by this chunk, in document order

        Raises:
            PhyloXMLError: On structural or scalar violations
            lxml.etree.XMLSyntaxError: If the document is not well-formed

        Trees this chunk completed before the error are not returned; they are
        kept in ``phylogenies`` like every other tree of the failed document.
        """
        session = self._session or self._begin()
        try:
            session.feed(chunk)
        except (PhyloXMLError, etree.XMLSyntaxError) as e:
            self._fail(session, e)
            raise
        return session.builder.drain_completed()

    def close(self) -> List[Phylogeny]:
        """Finish the current document.

        Returns:
            Trees completed since the last ``feed`` call

        Raises:
            EmptyDocumentError: If no content was fed
            UnbalancedTreeError: If the document ended with open elements
            lxml.etree.XMLSyntaxError: If the document is incomplete
        """
        session = self._session or self._begin()
        try:
            session.close()
        except (PhyloXMLError, etree.XMLSyntaxError) as e:
            self._fail(session, e)
            raise

        remaining = session.builder.drain_completed()
        self._finish(session)
        self._successful_documents += 1
        self.logger.info(
            "phyloXML document completed",
            extra={
                "phylogeny_count": len(self._phylogenies),
                "processing_time_ms": self._metrics.processing_time_ms,
                "diagnostic_count": len(session.builder.diagnostics),
            },
        )
        return remaining

    def cancel(self) -> bool:
        """Abandon the current document, discarding any partial tree.

        Returns:
            True if a document was in progress
        """
        session = self._session
        if session is None:
            return False
        self._finish(session)
        self._cancelled_documents += 1
        self.logger.info(
            "phyloXML document cancelled",
            extra={"phylogenies_completed": len(self._phylogenies)},
        )
        return True

    def parse(self, source: InputType) -> List[Phylogeny]:
        """Parse a complete document.

        Args:
            source: Document content (str or bytes), a Path, or a file-like
                object opened in text or binary mode

        Returns:
            All trees of the document in document order
        """
        if self._session is not None:
            self.cancel()
        for chunk in iter_source_chunks(source, self.config.streaming.chunk_size):
            self.feed(chunk)
        self.close()
        return self.phylogenies

    def _take_undelivered(self, progress: StreamingProgress) -> List[Phylogeny]:
        undelivered, self._undelivered = self._undelivered, []
        progress.phylogenies_completed += len(undelivered)
        return undelivered

    def iterparse(
        self,
        chunks: Iterable[Chunk],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Iterator[Phylogeny]:
        """Yield trees as they complete while pulling chunks on demand.

        The next chunk is only requested from ``chunks`` once every tree
        completed by the previous chunk has been consumed. Closing the
        generator early cancels the document. On a parse error, trees that
        were completed before the error are yielded first and the error is
        raised after them.
        """
        if self._session is not None:
            self.cancel()
        progress = StreamingProgress()
        interval = self.config.streaming.progress_interval
        self._begin()
        try:
            for chunk in chunks:
                try:
                    completed = self.feed(chunk)
                except (PhyloXMLError, etree.XMLSyntaxError):
                    yield from self._take_undelivered(progress)
                    raise
                progress.processed_chunks += 1
                progress.processed_characters += len(chunk)
                progress.phylogenies_completed += len(completed)
                if progress_callback and progress.processed_chunks % interval == 0:
                    progress_callback(progress)
                yield from completed
            try:
                completed = self.close()
            except (PhyloXMLError, etree.XMLSyntaxError):
                yield from self._take_undelivered(progress)
                raise
            progress.phylogenies_completed += len(completed)
            if progress_callback:
                progress_callback(progress)
            yield from completed
        except GeneratorExit:
            if self.cancel():
                progress.cancelled = True
                if progress_callback:
                    progress_callback(progress)
            raise

    async def aiterparse(
        self,
        chunks: AsyncIterable[Chunk],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AsyncIterator[Phylogeny]:
        """Asynchronous counterpart of ``iterparse``."""
        if self._session is not None:
            self.cancel()
        progress = StreamingProgress()
        interval = self.config.streaming.progress_interval
        self._begin()
        try:
            async for chunk in chunks:
                try:
                    completed = self.feed(chunk)
                except (PhyloXMLError, etree.XMLSyntaxError):
                    for phylogeny in self._take_undelivered(progress):
                        yield phylogeny
                    raise
                progress.processed_chunks += 1
                progress.processed_characters += len(chunk)
                progress.phylogenies_completed += len(completed)
                if progress_callback and progress.processed_chunks % interval == 0:
                    progress_callback(progress)
                for phylogeny in completed:
                    yield phylogeny
            try:
                completed = self.close()
            except (PhyloXMLError, etree.XMLSyntaxError):
                for phylogeny in self._take_undelivered(progress):
                    yield phylogeny
                raise
            progress.phylogenies_completed += len(completed)
            if progress_callback:
                progress_callback(progress)
            for phylogeny in completed:
                yield phylogeny
        except GeneratorExit:
            if self.cancel():
                progress.cancelled = True
                if progress_callback:
                    progress_callback(progress)
            raise

    # Results and statistics

    @property
    def phylogenies(self) -> List[Phylogeny]:
        """Trees of the current or most recent document.

        After a failed parse this holds the trees completed before the error.
        """
        if self._session is not None:
            return self._session.builder.phylogenies
        return list(self._phylogenies)

    @property
    def metrics(self) -> PerformanceMetrics:
        """Performance metrics of the most recently finished document."""
        return self._metrics

    @property
    def diagnostics(self) -> List[DiagnosticEntry]:
        """Diagnostics of the current or most recent document.

        Like ``phylogenies``, these are kept after the document finishes,
        whether it completed, failed or was cancelled.
        """
        if self._session is not None:
            return list(self._session.builder.diagnostics)
        return list(self._diagnostics)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics.

        Returns:
            Dictionary with parser statistics across all documents
        """
        finished = (
            self._successful_documents + self._failed_documents + self._cancelled_documents
        )
        return {
            "documents_started": self._documents_started,
            "successful_documents": self._successful_documents,
            "failed_documents": self._failed_documents,
            "cancelled_documents": self._cancelled_documents,
            "success_rate": (
                self._successful_documents / finished if finished > 0 else 0.0
            ),
            "total_phylogenies": self._total_phylogenies,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / finished if finished > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._documents_started = 0
        self._successful_documents = 0
        self._failed_documents = 0
        self._cancelled_documents = 0
        self._total_phylogenies = 0
        self._total_processing_time = 0.0

    def reset(self) -> None:
        """Drop the current document and all retained results."""
        self._session = None
        self._phylogenies = []
        self._diagnostics = []
        self._metrics = PerformanceMetrics()
        self._undelivered = []


def parse(
    source: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> List[Phylogeny]:
    """Parse phyloXML from various input sources.

    Args:
        source: Document content as str or bytes, a Path, or a file-like object
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        All phylogenies of the document in document order

    Examples:
        >>> trees = parse('<phyloxml><phylogeny><clade><name>A</name></clade>'
        ...               '</phylogeny></phyloxml>')
        >>> trees[0].root.name
        'A'
    """
    return PhyloXMLParser(config, correlation_id).parse(source)


def parse_string(
    xml_string: Union[str, bytes],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> List[Phylogeny]:
    """Parse phyloXML held in a string (or bytes)."""
    if not isinstance(xml_string, (str, bytes)):
        raise TypeError(f"Expected str or bytes, got {type(xml_string).__name__}")
    return PhyloXMLParser(config, correlation_id).parse(xml_string)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> List[Phylogeny]:
    """Parse a phyloXML file.

    The file is read in binary mode so the encoding declared by the document
    applies.

    Raises:
        FileNotFoundError: If the file does not exist
        IsADirectoryError: If the path names a directory
    """
    path_obj = Path(file_path)
    logger = get_logger(__name__, correlation_id, "parse_file")
    logger.info("Starting file parse operation", extra={"file_path": str(path_obj)})
    if path_obj.is_dir():
        raise IsADirectoryError(f"Path is not a file: {path_obj}")
    return PhyloXMLParser(config, correlation_id).parse(path_obj)


def parse_incremental(
    chunks: Iterable[Chunk],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Iterator[Phylogeny]:
    """Parse a chunked document, yielding each tree as soon as it is complete.

    Args:
        chunks: Iterable of str or bytes chunks forming one document
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking
        progress_callback: Called with StreamingProgress every
            ``config.streaming.progress_interval`` chunks and at the end

    Returns:
        Generator of Phylogeny objects in document order
    """
    parser = PhyloXMLParser(config, correlation_id)
    return parser.iterparse(chunks, progress_callback)


def parse_async(
    chunks: AsyncIterable[Chunk],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> AsyncIterator[Phylogeny]:
    """Asynchronous variant of ``parse_incremental``.

    Examples:
        >>> async for tree in parse_async(read_chunks()):
        ...     print(tree.name)
    """
    parser = PhyloXMLParser(config, correlation_id)
    return parser.aiterparse(chunks, progress_callback)
