"""Typed object graph produced by the phyloXML tree builder.

Every phyloXML entity is a plain dataclass. Collection fields default to
``None`` and become lists on first append, so ``to_dict()`` output only
contains what the document actually held.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterator, List, Optional


def _convert(value: Any) -> Any:
    if isinstance(value, PhyloXMLEntity):
        return value.to_dict()
    if isinstance(value, list):
        return [_convert(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


class PhyloXMLEntity:
    """Mixin providing dictionary conversion for model dataclasses."""

    # Dataclass field names that differ from their phyloXML names
    _output_names: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entity to a dictionary, omitting unset fields."""
        result: Dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            result[self._output_names.get(f.name, f.name)] = _convert(value)
        return result


@dataclass
class Id(PhyloXMLEntity):
    provider: Optional[str] = None
    value: Optional[str] = None


@dataclass
class Uri(PhyloXMLEntity):
    type: Optional[str] = None
    desc: Optional[str] = None
    value: Optional[str] = None


@dataclass
class Confidence(PhyloXMLEntity):
    """Statistical support value such as a bootstrap or posterior."""

    type: Optional[str] = None
    value: Optional[float] = None
    stddev: Optional[float] = None


@dataclass
class Property(PhyloXMLEntity):
    """Custom typed data attached to a clade, annotation or phylogeny."""

    ref: Optional[str] = None
    id_ref: Optional[str] = None
    unit: Optional[str] = None
    datatype: Optional[str] = None
    applies_to: Optional[str] = None
    value: Optional[str] = None


@dataclass
class Reference(PhyloXMLEntity):
    doi: Optional[str] = None
    desc: Optional[str] = None


@dataclass
class Accession(PhyloXMLEntity):
    source: Optional[str] = None
    comment: Optional[str] = None
    value: Optional[str] = None


@dataclass
class MolecularSequence(PhyloXMLEntity):
    is_aligned: Optional[bool] = None
    value: Optional[str] = None


@dataclass
class Annotation(PhyloXMLEntity):
    ref: Optional[str] = None
    source: Optional[str] = None
    evidence: Optional[str] = None
    type: Optional[str] = None
    desc: Optional[str] = None
    confidence: Optional[Confidence] = None
    properties: Optional[List[Property]] = None
    uris: Optional[List[Uri]] = None


@dataclass
class ProteinDomain(PhyloXMLEntity):
    """Single domain of a domain architecture.

    The phyloXML ``from`` attribute is stored as ``from_``.
    """

    _output_names = {"from_": "from"}

    name: Optional[str] = None
    from_: Optional[int] = None
    to: Optional[int] = None
    confidence: Optional[float] = None
    id: Optional[str] = None


@dataclass
class DomainArchitecture(PhyloXMLEntity):
    length: Optional[int] = None
    domains: Optional[List[ProteinDomain]] = None


@dataclass
class Sequence(PhyloXMLEntity):
    """Molecular sequence (protein, DNA, RNA) associated with a node."""

    type: Optional[str] = None
    id_source: Optional[str] = None
    id_ref: Optional[str] = None
    symbol: Optional[str] = None
    name: Optional[str] = None
    gene_name: Optional[str] = None
    location: Optional[str] = None
    accession: Optional[Accession] = None
    mol_seq: Optional[MolecularSequence] = None
    annotations: Optional[List[Annotation]] = None
    domain_architecture: Optional[DomainArchitecture] = None
    cross_references: Optional[List[Accession]] = None
    uris: Optional[List[Uri]] = None


@dataclass
class Taxonomy(PhyloXMLEntity):
    """Taxonomic information for a node."""

    id_source: Optional[str] = None
    id: Optional[Id] = None
    code: Optional[str] = None
    scientific_name: Optional[str] = None
    authority: Optional[str] = None
    common_names: Optional[List[str]] = None
    synonyms: Optional[List[str]] = None
    rank: Optional[str] = None
    uris: Optional[List[Uri]] = None


@dataclass
class Point(PhyloXMLEntity):
    """Geographic coordinates of a distribution."""

    geodetic_datum: Optional[str] = None
    alt_unit: Optional[str] = None
    lat: Optional[float] = None
    long: Optional[float] = None
    alt: Optional[float] = None


@dataclass
class Distribution(PhyloXMLEntity):
    desc: Optional[str] = None
    points: Optional[List[Point]] = None


@dataclass
class Events(PhyloXMLEntity):
    """Events at the root node of a clade, e.g. duplications."""

    type: Optional[str] = None
    duplications: Optional[int] = None
    speciations: Optional[int] = None
    losses: Optional[int] = None
    confidence: Optional[Confidence] = None


@dataclass
class BranchColor(PhyloXMLEntity):
    red: Optional[int] = None
    green: Optional[int] = None
    blue: Optional[int] = None
    alpha: Optional[int] = None


@dataclass
class Date(PhyloXMLEntity):
    unit: Optional[str] = None
    desc: Optional[str] = None
    value: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class CladeRelation(PhyloXMLEntity):
    """Relation between two clades, e.g. a network edge."""

    id_ref_0: Optional[str] = None
    id_ref_1: Optional[str] = None
    type: Optional[str] = None
    distance: Optional[float] = None
    confidence: Optional[Confidence] = None


@dataclass
class SequenceRelation(PhyloXMLEntity):
    """Relation between two sequences, e.g. orthology."""

    id_ref_0: Optional[str] = None
    id_ref_1: Optional[str] = None
    type: Optional[str] = None
    distance: Optional[float] = None
    confidence: Optional[Confidence] = None


@dataclass(eq=False)
class Clade(PhyloXMLEntity):
    """Node of a phylogenetic tree together with the subtree below it.

    Clades compare by identity; two structurally equal subtrees are still
    distinct nodes.
    """

    name: Optional[str] = None
    branch_length: Optional[float] = None
    width: Optional[float] = None
    id_source: Optional[str] = None
    collapse: Optional[bool] = None
    children: Optional[List["Clade"]] = None
    confidences: Optional[List[Confidence]] = None
    taxonomies: Optional[List[Taxonomy]] = None
    sequences: Optional[List[Sequence]] = None
    distributions: Optional[List[Distribution]] = None
    properties: Optional[List[Property]] = None
    references: Optional[List[Reference]] = None
    color: Optional[BranchColor] = None
    date: Optional[Date] = None
    events: Optional[Events] = None

    @property
    def is_leaf(self) -> bool:
        """Check if this clade has no children."""
        return not self.children

    def iter_clades(self) -> Iterator["Clade"]:
        """Iterate over this clade and all descendants in pre-order."""
        stack = [self]
        while stack:
            clade = stack.pop()
            yield clade
            if clade.children:
                stack.extend(reversed(clade.children))

    def iter_with_depth(self) -> Iterator[tuple]:
        """Iterate pre-order over ``(clade, depth)`` pairs, this clade at 0."""
        stack = [(self, 0)]
        while stack:
            clade, depth = stack.pop()
            yield clade, depth
            if clade.children:
                stack.extend((child, depth + 1) for child in reversed(clade.children))

    def leaves(self) -> List["Clade"]:
        """Return all leaf clades below (or equal to) this clade in order."""
        return [clade for clade in self.iter_clades() if clade.is_leaf]

    def find(self, name: str) -> Optional["Clade"]:
        """Find the first clade in pre-order with matching name."""
        for clade in self.iter_clades():
            if clade.name == name:
                return clade
        return None

    def find_all(self, name: str) -> List["Clade"]:
        """Find all clades with matching name in pre-order."""
        return [clade for clade in self.iter_clades() if clade.name == name]

    def max_depth(self) -> int:
        """Depth of the deepest descendant (a leaf has depth 0)."""
        return max(depth for _, depth in self.iter_with_depth())


@dataclass(eq=False)
class Phylogeny(PhyloXMLEntity):
    """A single phylogenetic tree with its document-level metadata."""

    rooted: Optional[bool] = None
    rerootable: Optional[bool] = None
    branch_length_unit: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    id: Optional[Id] = None
    description: Optional[str] = None
    date: Optional[str] = None
    confidences: Optional[List[Confidence]] = None
    properties: Optional[List[Property]] = None
    clade_relations: Optional[List[CladeRelation]] = None
    sequence_relations: Optional[List[SequenceRelation]] = None
    root: Optional[Clade] = None

    def iter_clades(self) -> Iterator[Clade]:
        """Iterate over all clades of the tree in pre-order."""
        if self.root is None:
            return iter(())
        return self.root.iter_clades()

    @property
    def clade_count(self) -> int:
        """Total number of clades in the tree."""
        return sum(1 for _ in self.iter_clades())

    @property
    def leaf_count(self) -> int:
        """Number of leaf clades in the tree."""
        return sum(1 for clade in self.iter_clades() if clade.is_leaf)

    @property
    def max_depth(self) -> int:
        """Depth of the deepest clade, the root being at depth 0."""
        if self.root is None:
            return 0
        return self.root.max_depth()

    def find(self, name: str) -> Optional[Clade]:
        """Find the first clade with matching name."""
        if self.root is None:
            return None
        return self.root.find(name)

    def find_all(self, name: str) -> List[Clade]:
        """Find all clades with matching name."""
        if self.root is None:
            return []
        return self.root.find_all(name)
