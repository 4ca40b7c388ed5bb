"""Tree construction for phyloXML parsing.

This module turns the tokenizer's event stream into typed phylogenetic trees.

Key Components:
    PhyloXMLTreeBuilder: Event-driven tree construction state machine
    Phylogeny, Clade: Tree and node types of the object graph
    ContextStacks: Tag, clade and binding stacks of one parse
    TextRouter: Routes character data to scalar fields
"""

from .builder import PhyloXMLTreeBuilder
from .coercion import parse_bool, parse_float, parse_int
from .context import BuilderState, ContextStacks, TreePhase
from .dispatch import AttachMode, ElementRule, attach, resolve
from .model import (
    Accession,
    Annotation,
    BranchColor,
    Clade,
    CladeRelation,
    Confidence,
    Date,
    Distribution,
    DomainArchitecture,
    Events,
    Id,
    MolecularSequence,
    PhyloXMLEntity,
    Phylogeny,
    Point,
    Property,
    ProteinDomain,
    Reference,
    Sequence,
    SequenceRelation,
    Taxonomy,
    Uri,
)
from .text import TextRouter

__all__ = [
    "PhyloXMLTreeBuilder",
    "parse_bool",
    "parse_float",
    "parse_int",
    "BuilderState",
    "ContextStacks",
    "TreePhase",
    "AttachMode",
    "ElementRule",
    "attach",
    "resolve",
    "Accession",
    "Annotation",
    "BranchColor",
    "Clade",
    "CladeRelation",
    "Confidence",
    "Date",
    "Distribution",
    "DomainArchitecture",
    "Events",
    "Id",
    "MolecularSequence",
    "PhyloXMLEntity",
    "Phylogeny",
    "Point",
    "Property",
    "ProteinDomain",
    "Reference",
    "Sequence",
    "SequenceRelation",
    "Taxonomy",
    "Uri",
    "TextRouter",
]
