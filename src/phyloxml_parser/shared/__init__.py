"""Shared utilities for phyloXML parsing.

This module provides configuration objects, the exception hierarchy,
diagnostic and metrics types, and logging used across all layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    StreamingConfig,
    TextConfig,
    TokenizerConfig,
)
from .errors import (
    EmptyDocumentError,
    MalformedScalarError,
    PhyloXMLError,
    StackDisciplineError,
    StructuralViolationError,
    UnbalancedTreeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    StreamingProgress,
    current_memory_usage,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "StreamingConfig",
    "TextConfig",
    "TokenizerConfig",
    "EmptyDocumentError",
    "MalformedScalarError",
    "PhyloXMLError",
    "StackDisciplineError",
    "StructuralViolationError",
    "UnbalancedTreeError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "StreamingProgress",
    "current_memory_usage",
]
