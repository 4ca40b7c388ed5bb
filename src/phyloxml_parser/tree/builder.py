"""Event-driven construction of phyloXML trees.

``PhyloXMLTreeBuilder`` consumes element start, element end and text events
and assembles them into ``Phylogeny`` objects. It keeps three context stacks
(open tags, open clades, entities receiving values) and moves through the
phases idle -> building -> in-tree -> idle for every ``<phylogeny>``.

Malformed structure is never repaired: the first violation raises a
``PhyloXMLError`` subclass carrying the element, its tag path and the trees
completed before the failure.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from phyloxml_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PhyloXMLError,
    StackDisciplineError,
    StructuralViolationError,
    UnbalancedTreeError,
    get_logger,
)
from phyloxml_parser.tokenization import EventType, ParseEvent

from .context import BuilderState, TreePhase
from .dispatch import (
    CLADE,
    CONTEXTUAL_ELEMENTS,
    PHYLOGENY,
    PHYLOXML,
    attach,
    new_clade,
    new_phylogeny,
    resolve,
)
from .model import Phylogeny
from .text import PARENT_ROUTES, TEXT_ELEMENTS, TextRouter


class PhyloXMLTreeBuilder:
    """Tree construction state machine for one phyloXML document.

    Events can be pushed one at a time (``start``, ``end``, ``text`` or
    ``process``) or as a whole sequence (``build``). Completed trees are
    available as soon as their ``</phylogeny>`` was processed, either all
    together through ``phylogenies`` or incrementally via
    ``drain_completed()``.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize tree builder.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "phyloxml_tree_builder")
        self.reset()

    def reset(self) -> None:
        """Discard all state and start over with an empty document."""
        self.state = BuilderState()
        self.router = TextRouter(self.state)
        self.diagnostics: List[DiagnosticEntry] = []
        self._pending: List[Phylogeny] = []
        self._closed = False

        # Statistics
        self.events_processed = 0
        self.clades_built = 0
        self.entities_built = 0
        self.text_values_routed = 0

    @property
    def phylogenies(self) -> List[Phylogeny]:
        """Trees completed so far, in document order."""
        return list(self.state.completed)

    @property
    def phylogenies_built(self) -> int:
        return len(self.state.completed)

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self.state.stacks.tags)

    def drain_completed(self) -> List[Phylogeny]:
        """Return trees completed since the previous call."""
        completed = self._pending
        self._pending = []
        return completed

    # Event entry points

    def process(self, event: ParseEvent) -> None:
        """Process a single event.

        Raises:
            PhyloXMLError: On any structural or scalar violation
        """
        self.events_processed += 1
        try:
            if event.type is EventType.ELEMENT_START:
                self._start(event.name, event.attributes)
            elif event.type is EventType.ELEMENT_END:
                self._end(event.name)
            else:
                self._text(event.content)
        except PhyloXMLError as e:
            element = event.name or self.state.stacks.peek_ancestor(0)
            e.annotate(element, self.state.stacks.path or None)
            e.phylogenies = list(self.state.completed)
            raise

    def process_all(self, events: Iterable[ParseEvent]) -> None:
        for event in events:
            self.process(event)

    def start(self, name: str, attributes: Optional[Mapping[str, str]] = None) -> None:
        """Process an element start."""
        self.process(ParseEvent.start(name, dict(attributes or {})))

    def end(self, name: str) -> None:
        """Process an element end."""
        self.process(ParseEvent.end(name))

    def text(self, content: str) -> None:
        """Process character data."""
        self.process(ParseEvent.text(content))

    def build(self, events: Iterable[ParseEvent]) -> List[Phylogeny]:
        """Build all trees of a complete event sequence.

        Args:
            events: Events of one whole document

        Returns:
            Completed trees in document order
        """
        self.reset()
        self.process_all(events)
        return self.close()

    def close(self) -> List[Phylogeny]:
        """Finish the document and return all completed trees.

        Raises:
            UnbalancedTreeError: If elements are still open
        """
        stacks = self.state.stacks
        if stacks.tags:
            error = UnbalancedTreeError(
                f"document ended with {len(stacks.tags)} open element(s)",
                element=stacks.peek_ancestor(0),
                path=stacks.path,
            )
            error.phylogenies = list(self.state.completed)
            raise error

        if not self._closed:
            self._closed = True
            self.logger.info(
                "Document completed",
                extra={
                    "phylogeny_count": len(self.state.completed),
                    "clade_count": self.clades_built,
                    "events_processed": self.events_processed,
                    "diagnostic_count": len(self.diagnostics),
                },
            )
        return self.phylogenies

    def get_statistics(self) -> Dict[str, Any]:
        """Get builder statistics."""
        return {
            "events_processed": self.events_processed,
            "phylogenies_built": self.phylogenies_built,
            "clades_built": self.clades_built,
            "entities_built": self.entities_built,
            "text_values_routed": self.text_values_routed,
            "diagnostics": len(self.diagnostics),
        }

    # Element start

    def _start(self, name: str, attributes: Mapping[str, str]) -> None:
        stacks = self.state.stacks
        if not stacks.tags:
            self.logger.info("Document started", extra={"root_element": name})
        stacks.push_tag(name)

        if name == PHYLOGENY:
            self._start_phylogeny(attributes)
            return
        if name == CLADE:
            self._start_clade(attributes)
            return
        if name == PHYLOXML:
            return

        parent = stacks.peek_ancestor(1)
        rule = resolve(name, parent)
        if rule is None:
            self._ignore(name, parent)
            return

        entity = rule.factory(attributes)
        attach(self._owner(), rule, entity, name)
        stacks.push_binding(entity)
        self.entities_built += 1

    def _start_phylogeny(self, attributes: Mapping[str, str]) -> None:
        if self.state.phase is not TreePhase.IDLE:
            raise StructuralViolationError("nested <phylogeny> is not allowed")

        phylogeny = new_phylogeny(attributes)
        self.state.phylogeny = phylogeny
        self.state.stacks.push_binding(phylogeny)
        self.state.phase = TreePhase.BUILDING

    def _start_clade(self, attributes: Mapping[str, str]) -> None:
        state = self.state
        stacks = state.stacks
        if state.phylogeny is None:
            raise StructuralViolationError("<clade> outside of <phylogeny>")

        clade = new_clade(attributes)
        if state.phase is TreePhase.BUILDING:
            stacks.pop_binding()
            if stacks.bindings:
                raise StructuralViolationError(
                    "root <clade> must be a direct part of <phylogeny>"
                )
            state.phylogeny.root = clade
            state.phase = TreePhase.IN_TREE
        else:
            parent = stacks.current_clade()
            if parent.children is None:
                parent.children = []
            parent.children.append(clade)

        stacks.push_clade(clade)
        stacks.push_binding(clade)
        self.clades_built += 1

    def _owner(self) -> Any:
        stacks = self.state.stacks
        if stacks.bindings:
            return stacks.current_binding()
        if self.state.phylogeny is not None:
            return self.state.phylogeny
        raise StackDisciplineError("no entity is being built")

    def _ignore(self, name: str, parent: Optional[str]) -> None:
        if parent in PARENT_ROUTES and name in PARENT_ROUTES[parent][1]:
            return
        if name in CONTEXTUAL_ELEMENTS:
            severity = DiagnosticSeverity.INFO
            message = f"<{name}> ignored inside <{parent}>"
        elif name in TEXT_ELEMENTS:
            return
        else:
            severity = DiagnosticSeverity.WARNING
            message = f"Unknown element <{name}> ignored"

        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component="phyloxml_tree_builder",
                element=name,
                path=self.state.stacks.path,
                correlation_id=self.correlation_id,
            )
        )
        self.logger.debug(message, extra={"element": name, "parent": parent})

    # Element end

    def _end(self, name: str) -> None:
        if name == PHYLOGENY:
            self._end_phylogeny()
            return

        stacks = self.state.stacks
        stacks.pop_tag(name)
        if name == CLADE:
            stacks.pop_clade()
            stacks.pop_binding()
            return
        if name == PHYLOXML:
            return

        if resolve(name, stacks.peek_ancestor(0)) is not None:
            stacks.pop_binding()

    def _end_phylogeny(self) -> None:
        state = self.state
        stacks = state.stacks
        stacks.pop_tag(PHYLOGENY)

        if state.phase is TreePhase.BUILDING:
            raise UnbalancedTreeError("<phylogeny> ended without a root clade")
        if stacks.clades or stacks.bindings:
            raise UnbalancedTreeError(
                f"<phylogeny> ended with {len(stacks.clades)} open clade(s) "
                f"and {len(stacks.bindings)} open entit(ies)"
            )

        phylogeny = state.phylogeny
        state.completed.append(phylogeny)
        self._pending.append(phylogeny)
        state.reset_tree()

        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Phylogeny completed",
                extra={
                    "phylogeny_index": len(state.completed) - 1,
                    "phylogeny_name": phylogeny.name,
                    "clade_count": phylogeny.clade_count,
                },
            )

    # Character data

    def _text(self, content: str) -> None:
        self.text_values_routed += self.router.route(content)
