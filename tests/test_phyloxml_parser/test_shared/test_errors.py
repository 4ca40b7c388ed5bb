"""Tests for the phyloXML exception hierarchy, diagnostics and metrics."""

import pytest

from phyloxml_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EmptyDocumentError,
    MalformedScalarError,
    PerformanceMetrics,
    PhyloXMLError,
    StackDisciplineError,
    StructuralViolationError,
    UnbalancedTreeError,
    current_memory_usage,
)


class TestErrorHierarchy:
    """Test exception inheritance."""

    @pytest.mark.parametrize("error_type", [
        StructuralViolationError,
        StackDisciplineError,
        UnbalancedTreeError,
        MalformedScalarError,
        EmptyDocumentError,
    ])
    def test_all_derive_from_base(self, error_type):
        """Test every error is a PhyloXMLError."""
        assert issubclass(error_type, PhyloXMLError)

    def test_stack_discipline_is_structural(self):
        """Test stack discipline errors are structural violations."""
        assert issubclass(StackDisciplineError, StructuralViolationError)

    def test_malformed_scalar_is_value_error(self):
        """Test scalar errors can be caught as ValueError."""
        assert issubclass(MalformedScalarError, ValueError)


class TestErrorContext:
    """Test element and path context on errors."""

    def test_message_only(self):
        """Test string form without context."""
        error = PhyloXMLError("boom")

        assert str(error) == "boom"
        assert error.element is None
        assert error.path is None
        assert error.phylogenies == []

    def test_message_with_context(self):
        """Test string form with element and path."""
        error = StructuralViolationError("bad", element="accession", path="phyloxml/clade")

        assert str(error) == "bad, element <accession>, at /phyloxml/clade"

    def test_annotate_fills_missing_only(self):
        """Test annotate keeps context the error already carries."""
        error = StructuralViolationError("bad", element="confidence")
        returned = error.annotate("other", "phyloxml/phylogeny")

        assert returned is error
        assert error.element == "confidence"
        assert error.path == "phyloxml/phylogeny"

    def test_malformed_scalar_fields(self):
        """Test scalar errors carry text, field and target type."""
        error = MalformedScalarError("abc", "branch_length", "float")

        assert error.text == "abc"
        assert error.field == "branch_length"
        assert error.target_type == "float"
        assert "branch_length" in str(error)
        assert "'abc'" in str(error)


class TestDiagnosticEntry:
    """Test diagnostic entries."""

    def test_to_dict(self):
        """Test dictionary conversion omits unset context."""
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message="Unknown element <node_id> ignored",
            component="phyloxml_tree_builder",
            element="node_id",
        )

        data = entry.to_dict()
        assert data["severity"] == "WARNING"
        assert data["element"] == "node_id"
        assert "path" not in data

    def test_empty_message_rejected(self):
        """Test diagnostics require a message."""
        with pytest.raises(ValueError):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "builder")


class TestPerformanceMetrics:
    """Test performance metrics."""

    def test_rates(self):
        """Test derived rates."""
        metrics = PerformanceMetrics(
            processing_time_ms=500.0,
            characters_processed=1000,
            events_processed=50,
            phylogenies_built=2,
            clades_built=10,
        )

        assert metrics.characters_per_second == 2000.0
        assert metrics.events_per_second == 100.0
        assert metrics.clades_per_phylogeny == 5.0

    def test_rates_without_time(self):
        """Test rates are zero when nothing was measured."""
        metrics = PerformanceMetrics()

        assert metrics.characters_per_second == 0.0
        assert metrics.clades_per_phylogeny == 0.0

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = PerformanceMetrics(chunks_processed=3).to_dict()

        assert data["chunks_processed"] == 3
        assert set(data) >= {"processing_time_ms", "memory_used_bytes", "clades_built"}

    def test_memory_usage_is_positive(self):
        """Test the process memory reading is a byte count."""
        assert current_memory_usage() > 0
