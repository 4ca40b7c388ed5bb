"""Tests for incremental and asynchronous parsing."""

import asyncio
from typing import List

import pytest
from lxml import etree

from phyloxml_parser import (
    EmptyDocumentError,
    ParserConfig,
    PhyloXMLParser,
    StructuralViolationError,
    parse_async,
    parse_incremental,
    parse_string,
)

DOCUMENT = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<phyloxml xmlns="http://www.phyloxml.org">\n'
    '  <phylogeny rooted="true">\n'
    "    <name>Primates</name>\n"
    '    <clade branch_length="0.0">\n'
    '      <clade branch_length="0.25"><name>Homo sapiens</name>\n'
    '        <confidence type="bootstrap">100</confidence>\n'
    "        <taxonomy><code>HUMAN</code><common_name>human</common_name>"
    "<common_name>Mensch</common_name></taxonomy>\n"
    "      </clade>\n"
    '      <clade branch_length="1.5e-1"><name>Pan troglodytes</name>\n'
    "        <sequence><mol_seq is_aligned=\"false\">MKVLAA</mol_seq></sequence>\n"
    "      </clade>\n"
    "    </clade>\n"
    "  </phylogeny>\n"
    "  <phylogeny><name>Müller's tree</name><clade><name>Ä</name></clade></phylogeny>\n"
    "</phyloxml>\n"
)

TREES = [
    "<phyloxml><phylogeny><clade><name>A</name></clade></phylogeny><phylogeny>",
    "<clade><name>B</name></clade></phylogeny><phylogeny>",
    "<clade><name>C</name></clade></phylogeny></phyloxml>",
]


def split(data, size: int) -> list:
    """Split text or bytes into fixed-size chunks."""
    return [data[i:i + size] for i in range(0, len(data), size)]


def as_dicts(trees) -> List[dict]:
    """Comparable form of a tree list."""
    return [tree.to_dict() for tree in trees]


class TestChunkBoundaries:
    """Test results do not depend on how input is chunked."""

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 64, 1024])
    def test_text_chunks(self, size):
        """Test text chunks of any size give the batch result."""
        expected = as_dicts(parse_string(DOCUMENT))

        assert as_dicts(parse_incremental(split(DOCUMENT, size))) == expected

    @pytest.mark.parametrize("size", [1, 5, 13])
    def test_byte_chunks(self, size):
        """Test byte chunks split inside multibyte characters."""
        data = DOCUMENT.encode("utf-8")
        expected = as_dicts(parse_string(data))

        trees = list(parse_incremental(split(data, size)))

        assert as_dicts(trees) == expected
        assert trees[1].root.name == "Ä"


class TestBackpressure:
    """Test chunks are pulled only on demand."""

    def test_chunks_pulled_per_tree(self):
        """Test the next chunk is requested only after trees are consumed."""
        pulled = []

        def source():
            for chunk in TREES:
                pulled.append(chunk)
                yield chunk

        trees = parse_incremental(source())

        assert next(trees).root.name == "A"
        assert len(pulled) == 1
        assert next(trees).root.name == "B"
        assert len(pulled) == 2
        assert next(trees).root.name == "C"
        with pytest.raises(StopIteration):
            next(trees)
        assert len(pulled) == 3

    def test_generator_is_lazy(self):
        """Test nothing is read before the first tree is requested."""
        pulled = []

        def source():
            pulled.append(True)
            yield from TREES

        parse_incremental(source())

        assert pulled == []


class TestCancellation:
    """Test abandoning an incremental parse."""

    def test_close_cancels_document(self):
        """Test closing the generator cancels the document."""
        parser = PhyloXMLParser()
        trees = parser.iterparse(iter(TREES))

        first = next(trees)
        trees.close()

        assert first.root.name == "A"
        assert parser.statistics["cancelled_documents"] == 1
        assert [t.root.name for t in parser.phylogenies] == ["A"]

    def test_cancel_reported_to_progress_callback(self):
        """Test the progress callback sees the cancellation."""
        reports = []
        trees = parse_incremental(
            iter(TREES), progress_callback=lambda p: reports.append(p.cancelled)
        )

        next(trees)
        trees.close()

        assert reports[-1] is True

    def test_new_document_cancels_previous(self):
        """Test starting a parse abandons an unfinished push-style document."""
        parser = PhyloXMLParser()
        parser.feed("<phyloxml><phylogeny>")

        assert len(list(parser.iterparse(TREES))) == 3
        assert parser.statistics["cancelled_documents"] == 1


class TestProgress:
    """Test progress reporting."""

    def test_progress_interval(self):
        """Test callbacks every interval chunks and once at the end."""
        reports = []
        config = ParserConfig.default().override(streaming__progress_interval=2)
        chunks = split("".join(TREES), 40)

        trees = list(parse_incremental(
            chunks,
            config=config,
            progress_callback=lambda p: reports.append(
                (p.processed_chunks, p.phylogenies_completed)
            ),
        ))

        assert len(trees) == 3
        assert [r[0] for r in reports] == [2 * i for i in range(1, len(chunks) // 2 + 1)] + [
            len(chunks)
        ]
        assert reports[-1][1] == 3

    def test_characters_counted(self):
        """Test processed characters cover the whole document."""
        reports = []
        list(parse_incremental(
            TREES, progress_callback=lambda p: reports.append(p.processed_characters)
        ))

        assert reports[-1] == sum(len(chunk) for chunk in TREES)


class TestIncrementalErrors:
    """Test errors during incremental parsing."""

    def test_trees_before_error_are_yielded(self):
        """Test completed trees are delivered before the error is raised."""
        chunks = [TREES[0], "<clade></phylogeny>"]
        received = []

        with pytest.raises(etree.XMLSyntaxError):
            for tree in parse_incremental(chunks):
                received.append(tree)

        assert [t.root.name for t in received] == ["A"]

    def test_trees_in_failing_chunk_are_yielded(self):
        """Test trees completed earlier in the chunk that fails are delivered."""
        chunks = [TREES[0] + "<clade><accession>X</accession></clade></phylogeny></phyloxml>"]
        received = []

        with pytest.raises(StructuralViolationError):
            for tree in parse_incremental(chunks):
                received.append(tree)

        assert [t.root.name for t in received] == ["A"]

    def test_syntax_error_in_same_chunk(self):
        """Test a syntax error after a finished tree in one chunk."""
        chunks = [TREES[0] + TREES[1] + "<clade></phylogeny>"]
        received = []

        with pytest.raises(etree.XMLSyntaxError):
            for tree in parse_incremental(chunks):
                received.append(tree)

        assert [t.root.name for t in received] == ["A", "B"]

    @pytest.mark.parametrize("size", [1, 9, 1024])
    def test_delivery_independent_of_chunking(self, size):
        """Test the trees seen before an error do not depend on chunk size."""
        document = TREES[0] + "<clade><accession>X</accession></clade></phylogeny></phyloxml>"
        received = []

        with pytest.raises(StructuralViolationError):
            for tree in parse_incremental(split(document, size)):
                received.append(tree)

        assert [t.root.name for t in received] == ["A"]

    def test_failure_after_delivered_trees(self):
        """Test the document fails, not cancels, once delivered trees are consumed."""
        parser = PhyloXMLParser()
        chunks = [TREES[0] + "<clade><accession>X</accession></clade></phylogeny></phyloxml>"]

        trees = parser.iterparse(chunks)
        assert next(trees).root.name == "A"
        with pytest.raises(StructuralViolationError):
            next(trees)

        assert parser.statistics["failed_documents"] == 1
        assert parser.statistics["cancelled_documents"] == 0
        assert [t.root.name for t in parser.phylogenies] == ["A"]

    def test_empty_chunk_sequence(self):
        """Test an empty chunk sequence is an empty document."""
        with pytest.raises(EmptyDocumentError):
            list(parse_incremental([]))


class TestAsyncParsing:
    """Test the asynchronous interface."""

    def test_async_trees(self):
        """Test trees are yielded from an async chunk source."""

        async def source():
            for chunk in TREES:
                await asyncio.sleep(0)
                yield chunk

        async def collect():
            return [tree.root.name async for tree in parse_async(source())]

        assert asyncio.run(collect()) == ["A", "B", "C"]

    def test_async_matches_batch(self):
        """Test async byte chunks give the batch result."""
        data = DOCUMENT.encode("utf-8")

        async def source():
            for chunk in split(data, 11):
                yield chunk

        async def collect():
            return [tree async for tree in parse_async(source())]

        assert as_dicts(asyncio.run(collect())) == as_dicts(parse_string(data))

    def test_async_early_exit(self):
        """Test closing the async generator cancels the document."""
        parser = PhyloXMLParser()

        async def source():
            for chunk in TREES:
                yield chunk

        async def first_tree():
            trees = parser.aiterparse(source())
            tree = await trees.__anext__()
            await trees.aclose()
            return tree

        assert asyncio.run(first_tree()).root.name == "A"
        assert parser.statistics["cancelled_documents"] == 1

    def test_async_trees_in_failing_chunk(self):
        """Test async parsing delivers trees finished in the failing chunk."""
        received = []

        async def source():
            yield TREES[0] + "<clade><accession>X</accession></clade></phylogeny></phyloxml>"

        async def collect():
            async for tree in parse_async(source()):
                received.append(tree.root.name)

        with pytest.raises(StructuralViolationError):
            asyncio.run(collect())

        assert received == ["A"]
