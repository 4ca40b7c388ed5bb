"""Element dispatch table and object factories.

Every phyloXML element that produces an entity is described by an
``ElementRule``: how to build the entity from the element's attributes and
how to attach it to its owner. Rules are looked up by ``(name, parent)``;
a ``None`` parent is the wildcard entry for elements whose meaning does not
depend on context. ``clade`` and ``phylogeny`` drive the tree structure and
are handled by the builder itself.
"""

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from phyloxml_parser.shared import StructuralViolationError

from .coercion import (
    attribute,
    attribute_as_bool,
    attribute_as_float,
    attribute_as_int,
)
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

PHYLOXML = "phyloxml"
PHYLOGENY = "phylogeny"
CLADE = "clade"

Attributes = Mapping[str, str]


class AttachMode(Enum):
    """How a new entity is stored on its owner."""

    APPEND = auto()       # Append to a list field, created on first use
    ASSIGN = auto()       # Assign a singular field
    OWNER_LIST = auto()   # The owner is itself a list; append to it


@dataclass(frozen=True)
class ElementRule:
    """Construction and attachment rule for one element in one context."""

    factory: Callable[[Attributes], Any]
    field: Optional[str]
    mode: AttachMode


# Object factories

def new_phylogeny(attributes: Attributes) -> Phylogeny:
    return Phylogeny(
        rooted=attribute_as_bool(attributes, "rooted"),
        rerootable=attribute_as_bool(attributes, "rerootable"),
        branch_length_unit=attribute(attributes, "branch_length_unit"),
        type=attribute(attributes, "type"),
    )


def new_clade(attributes: Attributes) -> Clade:
    return Clade(
        branch_length=attribute_as_float(attributes, "branch_length"),
        collapse=attribute_as_bool(attributes, "collapse"),
        id_source=attribute(attributes, "id_source"),
    )


def new_accession(attributes: Attributes) -> Accession:
    return Accession(
        source=attribute(attributes, "source"),
        comment=attribute(attributes, "comment"),
    )


def new_annotation(attributes: Attributes) -> Annotation:
    return Annotation(
        ref=attribute(attributes, "ref"),
        source=attribute(attributes, "source"),
        evidence=attribute(attributes, "evidence"),
        type=attribute(attributes, "type"),
    )


def new_confidence(attributes: Attributes) -> Confidence:
    return Confidence(
        type=attribute(attributes, "type"),
        stddev=attribute_as_float(attributes, "stddev"),
    )


def new_cross_references(attributes: Attributes) -> list:
    return []


def new_date(attributes: Attributes) -> Date:
    return Date(unit=attribute(attributes, "unit"))


def new_distribution(attributes: Attributes) -> Distribution:
    return Distribution()


def new_domain_architecture(attributes: Attributes) -> DomainArchitecture:
    return DomainArchitecture(length=attribute_as_int(attributes, "length"))


def new_protein_domain(attributes: Attributes) -> ProteinDomain:
    return ProteinDomain(
        from_=attribute_as_int(attributes, "from"),
        to=attribute_as_int(attributes, "to"),
        confidence=attribute_as_float(attributes, "confidence"),
        id=attribute(attributes, "id"),
    )


def new_events(attributes: Attributes) -> Events:
    return Events()


def new_branch_color(attributes: Attributes) -> BranchColor:
    return BranchColor()


def new_id(attributes: Attributes) -> Id:
    return Id(provider=attribute(attributes, "provider"))


def new_molecular_sequence(attributes: Attributes) -> MolecularSequence:
    return MolecularSequence(is_aligned=attribute_as_bool(attributes, "is_aligned"))


def new_point(attributes: Attributes) -> Point:
    return Point(
        geodetic_datum=attribute(attributes, "geodetic_datum"),
        alt_unit=attribute(attributes, "alt_unit"),
    )


def new_property(attributes: Attributes) -> Property:
    return Property(
        ref=attribute(attributes, "ref"),
        id_ref=attribute(attributes, "id_ref"),
        unit=attribute(attributes, "unit"),
        datatype=attribute(attributes, "datatype"),
        applies_to=attribute(attributes, "applies_to"),
    )


def new_reference(attributes: Attributes) -> Reference:
    return Reference(doi=attribute(attributes, "doi"))


def new_sequence(attributes: Attributes) -> Sequence:
    return Sequence(
        type=attribute(attributes, "type"),
        id_source=attribute(attributes, "id_source"),
        id_ref=attribute(attributes, "id_ref"),
    )


def new_taxonomy(attributes: Attributes) -> Taxonomy:
    return Taxonomy(id_source=attribute(attributes, "id_source"))


def new_uri(attributes: Attributes) -> Uri:
    return Uri(
        type=attribute(attributes, "type"),
        desc=attribute(attributes, "desc"),
    )


def new_clade_relation(attributes: Attributes) -> CladeRelation:
    return CladeRelation(
        id_ref_0=attribute(attributes, "id_ref_0"),
        id_ref_1=attribute(attributes, "id_ref_1"),
        type=attribute(attributes, "type"),
        distance=attribute_as_float(attributes, "distance"),
    )


def new_sequence_relation(attributes: Attributes) -> SequenceRelation:
    return SequenceRelation(
        id_ref_0=attribute(attributes, "id_ref_0"),
        id_ref_1=attribute(attributes, "id_ref_1"),
        type=attribute(attributes, "type"),
        distance=attribute_as_float(attributes, "distance"),
    )


def _append(factory: Callable[[Attributes], Any], field_name: str) -> ElementRule:
    return ElementRule(factory, field_name, AttachMode.APPEND)


def _assign(factory: Callable[[Attributes], Any], field_name: str) -> ElementRule:
    return ElementRule(factory, field_name, AttachMode.ASSIGN)


ELEMENT_RULES: Dict[Tuple[str, Optional[str]], ElementRule] = {
    # Context dependent
    ("accession", "sequence"): _assign(new_accession, "accession"),
    ("accession", "cross_references"): ElementRule(new_accession, None, AttachMode.OWNER_LIST),
    ("annotation", "sequence"): _append(new_annotation, "annotations"),
    ("confidence", CLADE): _append(new_confidence, "confidences"),
    ("confidence", PHYLOGENY): _append(new_confidence, "confidences"),
    ("confidence", "annotation"): _assign(new_confidence, "confidence"),
    ("confidence", "events"): _assign(new_confidence, "confidence"),
    ("confidence", "clade_relation"): _assign(new_confidence, "confidence"),
    ("confidence", "sequence_relation"): _assign(new_confidence, "confidence"),
    ("cross_references", "sequence"): _assign(new_cross_references, "cross_references"),
    ("date", CLADE): _assign(new_date, "date"),
    ("clade_relation", PHYLOGENY): _append(new_clade_relation, "clade_relations"),
    ("sequence_relation", PHYLOGENY): _append(new_sequence_relation, "sequence_relations"),
    # Unambiguous
    ("color", None): _assign(new_branch_color, "color"),
    ("distribution", None): _append(new_distribution, "distributions"),
    ("domain_architecture", None): _assign(new_domain_architecture, "domain_architecture"),
    ("domain", None): _append(new_protein_domain, "domains"),
    ("events", None): _assign(new_events, "events"),
    ("id", None): _assign(new_id, "id"),
    ("mol_seq", None): _assign(new_molecular_sequence, "mol_seq"),
    ("point", None): _append(new_point, "points"),
    ("property", None): _append(new_property, "properties"),
    ("reference", None): _append(new_reference, "references"),
    ("sequence", None): _append(new_sequence, "sequences"),
    ("taxonomy", None): _append(new_taxonomy, "taxonomies"),
    ("uri", None): _append(new_uri, "uris"),
}

# Elements that are an error anywhere outside their listed parents
STRICT_ELEMENTS = frozenset({"accession", "annotation", "confidence", "cross_references"})

# Elements silently ignored outside their listed parents
CONTEXTUAL_ELEMENTS = frozenset({"date", "clade_relation", "sequence_relation"})

STRUCTURAL_ELEMENTS = frozenset({PHYLOXML, PHYLOGENY, CLADE})


def resolve(name: str, parent: Optional[str]) -> Optional[ElementRule]:
    """Look up the rule for ``name`` under ``parent``.

    Returns None for elements that do not produce an entity in this context.

    Raises:
        StructuralViolationError: If ``name`` is only valid under specific
            parents and ``parent`` is not one of them
    """
    rule = ELEMENT_RULES.get((name, parent))
    if rule is not None:
        return rule
    if name in STRICT_ELEMENTS:
        raise StructuralViolationError(
            f"<{name}> is not allowed inside <{parent}>", element=name
        )
    return ELEMENT_RULES.get((name, None))


def has_field(owner: Any, field_name: str) -> bool:
    """Check whether ``owner`` is an entity declaring ``field_name``."""
    if not is_dataclass(owner) or isinstance(owner, type):
        return False
    return any(f.name == field_name for f in fields(owner))


def attach(owner: Any, rule: ElementRule, entity: Any, element: str) -> None:
    """Store ``entity`` on ``owner`` according to ``rule``.

    Raises:
        StructuralViolationError: If the owner cannot hold the entity
    """
    if rule.mode is AttachMode.OWNER_LIST:
        if not isinstance(owner, list):
            raise StructuralViolationError(
                f"<{element}> requires a list owner, found {type(owner).__name__}",
                element=element,
            )
        owner.append(entity)
        return

    if rule.field is None or not has_field(owner, rule.field):
        raise StructuralViolationError(
            f"{type(owner).__name__} has no field '{rule.field}' for <{element}>",
            element=element,
        )

    if rule.mode is AttachMode.ASSIGN:
        setattr(owner, rule.field, entity)
        return

    values = getattr(owner, rule.field)
    if values is None:
        values = []
        setattr(owner, rule.field, values)
    values.append(entity)
