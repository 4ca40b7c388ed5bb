"""Diagnostic and metrics types for phyloXML parsing.

This module defines the metadata that accompanies a parse: diagnostics for
elements the builder deliberately ignored, performance metrics, and progress
information for incremental parsing.
"""

import os
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

import psutil


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()      # Element ignored by design (e.g. date outside clade)
    WARNING = auto()   # Element not part of the phyloXML vocabulary


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    element: Optional[str] = None
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to dictionary representation."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.element:
            result["element"] = self.element
        if self.path:
            result["path"] = self.path
        if self.details:
            result["details"] = dict(self.details)
        return result


def current_memory_usage() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process(os.getpid()).memory_info().rss


@dataclass
class PerformanceMetrics:
    """Performance metrics for one parsed document."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    characters_processed: int = 0
    events_processed: int = 0
    phylogenies_built: int = 0
    clades_built: int = 0
    chunks_processed: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms

    @property
    def clades_per_phylogeny(self) -> float:
        """Average number of clades per completed phylogeny."""
        if self.phylogenies_built == 0:
            return 0.0
        return self.clades_built / self.phylogenies_built

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "memory_used_bytes": self.memory_used_bytes,
            "characters_processed": self.characters_processed,
            "events_processed": self.events_processed,
            "phylogenies_built": self.phylogenies_built,
            "clades_built": self.clades_built,
            "chunks_processed": self.chunks_processed,
        }


@dataclass
class StreamingProgress:
    """Progress information for incremental parsing.

    Attributes:
        processed_chunks: Number of chunks fed to the tokenizer
        processed_characters: Characters (or bytes) fed so far
        phylogenies_completed: Trees completed and handed to the consumer
        cancelled: Whether the consumer stopped pulling before the end
    """

    processed_chunks: int = 0
    processed_characters: int = 0
    phylogenies_completed: int = 0
    cancelled: bool = False
