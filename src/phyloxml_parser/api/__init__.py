"""Public parsing API for phyloXML documents."""

from .parser import (
    PhyloXMLParser,
    iter_source_chunks,
    parse,
    parse_async,
    parse_file,
    parse_incremental,
    parse_string,
)

__all__ = [
    "PhyloXMLParser",
    "iter_source_chunks",
    "parse",
    "parse_async",
    "parse_file",
    "parse_incremental",
    "parse_string",
]
