"""Per-parse construction state: the three context stacks and the tree phase."""

from enum import Enum, auto
from typing import Any, List, Optional

from phyloxml_parser.shared import StackDisciplineError

from .model import Clade, Phylogeny


class TreePhase(Enum):
    """Progress of the phylogeny currently being built."""

    IDLE = auto()      # Between phylogenies
    BUILDING = auto()  # Inside <phylogeny>, root clade not seen yet
    IN_TREE = auto()   # Root clade installed


class ContextStacks:
    """Tag ancestry, enclosing clades and entities currently receiving values.

    The three stacks are independent: the tag stack holds every open element,
    the clade stack only open ``clade`` elements and the binding stack only
    entities created by open elements.
    """

    def __init__(self) -> None:
        self.tags: List[str] = []
        self.clades: List[Clade] = []
        self.bindings: List[Any] = []

    # Tag stack
    def push_tag(self, name: str) -> None:
        self.tags.append(name)

    def pop_tag(self, name: str) -> str:
        """Pop the innermost open element, which must be ``name``."""
        if not self.tags:
            raise StackDisciplineError(f"end tag </{name}> without open element")
        if self.tags[-1] != name:
            raise StackDisciplineError(
                f"end tag </{name}> does not match open element <{self.tags[-1]}>"
            )
        return self.tags.pop()

    def peek_ancestor(self, n: int = 0) -> Optional[str]:
        """Return the tag ``n`` levels above the current one (0 = current).

        Returns None when fewer than ``n + 1`` elements are open.
        """
        if n < 0:
            raise ValueError("Ancestor level cannot be negative")
        if n >= len(self.tags):
            return None
        return self.tags[-1 - n]

    @property
    def path(self) -> str:
        """Slash separated ancestry of the current element."""
        return "/".join(self.tags)

    # Clade stack
    def push_clade(self, clade: Clade) -> None:
        self.clades.append(clade)

    def pop_clade(self) -> Clade:
        if not self.clades:
            raise StackDisciplineError("clade stack is empty")
        return self.clades.pop()

    def current_clade(self) -> Clade:
        """Return the innermost open clade."""
        if not self.clades:
            raise StackDisciplineError("no enclosing clade")
        return self.clades[-1]

    # Binding stack
    def push_binding(self, entity: Any) -> None:
        self.bindings.append(entity)

    def pop_binding(self) -> Any:
        if not self.bindings:
            raise StackDisciplineError("binding stack is empty")
        return self.bindings.pop()

    def current_binding(self) -> Any:
        """Return the entity currently receiving values."""
        if not self.bindings:
            raise StackDisciplineError("no entity is being built")
        return self.bindings[-1]

    def reset_tree(self) -> None:
        """Forget the per-tree stacks; the tag stack is kept."""
        self.clades.clear()
        self.bindings.clear()


class BuilderState:
    """Complete mutable state of one document parse."""

    def __init__(self) -> None:
        self.stacks = ContextStacks()
        self.phase = TreePhase.IDLE
        self.phylogeny: Optional[Phylogeny] = None
        self.completed: List[Phylogeny] = []

    def reset_tree(self) -> None:
        """Discard everything belonging to the in-progress phylogeny."""
        self.stacks.reset_tree()
        self.phylogeny = None
        self.phase = TreePhase.IDLE
