"""phyloXML parser.

Deserializes phyloXML documents into typed phylogenetic trees through an
event-driven tree construction state machine on top of lxml's incremental
parser. Structural violations are never repaired; they raise.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Incremental parsing - parse_incremental(), parse_async()
- Level 3: Configured parser - PhyloXMLParser class
- Level 4: Event level - PhyloXMLTreeBuilder
"""

__version__ = "0.1.0"
__author__ = "phyloxml-parser developers"

# Progressive API disclosure - Level 1 and 2: Simple and incremental functions
# Progressive API disclosure - Level 3: Configured parser
from .api import (
    PhyloXMLParser,
    parse,
    parse_async,
    parse_file,
    parse_incremental,
    parse_string,
)

# Configuration and errors
from .shared import (
    EmptyDocumentError,
    MalformedScalarError,
    ParserConfig,
    PhyloXMLError,
    StackDisciplineError,
    StructuralViolationError,
    UnbalancedTreeError,
)

# Level 4 and result objects
from .tree import Clade, Phylogeny, PhyloXMLTreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Simple and incremental parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "parse_incremental",
    "parse_async",

    # Advanced parser class and event-level builder
    "PhyloXMLParser",
    "PhyloXMLTreeBuilder",

    # Result objects
    "Phylogeny",
    "Clade",

    # Configuration
    "ParserConfig",

    # Errors
    "PhyloXMLError",
    "StructuralViolationError",
    "StackDisciplineError",
    "UnbalancedTreeError",
    "MalformedScalarError",
    "EmptyDocumentError",
]
